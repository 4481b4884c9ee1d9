"""
modules/memory/planner_repository.py
--------------------------------------
Storage for a user's planner data: trip details, budget, expenses and
custom categories.  Records are kept in their JSON payload shape, so the
same dicts travel unchanged between client, server and store.

  InMemoryPlannerRepository   per-user dicts; backs the HTTP server and is
                              the client-side fallback when the API is down
  RemotePlannerRepository     GET/POST against the planner API
"""

from __future__ import annotations
import copy
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

from modules.tool_usage.planner_api_tool import PlannerApiTool
from utils.logger import get_logger

logger = get_logger(__name__)

Payload = dict[str, Any]


class PlannerRepository(ABC):

    @abstractmethod
    def save_trip_details(self, user_id: str, trip: Payload) -> None: ...

    @abstractmethod
    def load_trip_details(self, user_id: str) -> Optional[Payload]: ...

    @abstractmethod
    def save_budget(self, user_id: str, budget: Payload) -> None: ...

    @abstractmethod
    def load_budget(self, user_id: str) -> Optional[Payload]: ...

    @abstractmethod
    def save_expenses(self, user_id: str, expenses: list[Payload]) -> None: ...

    @abstractmethod
    def load_expenses(self, user_id: str) -> list[Payload]: ...

    @abstractmethod
    def save_custom_categories(self, user_id: str, categories: list[Payload]) -> None: ...

    @abstractmethod
    def load_custom_categories(self, user_id: str) -> list[Payload]: ...


class InMemoryPlannerRepository(PlannerRepository):
    """
    Process-local store.  Key: user_id, value: that user's records.
    Values are deep-copied on the way in and out so callers never share state.
    """

    def __init__(self) -> None:
        self._users: dict[str, dict[str, Any]] = {}

    def _put(self, user_id: str, field: str, value: Any) -> None:
        record = self._users.setdefault(user_id, {})
        record[field] = copy.deepcopy(value)
        record["_last_updated"] = datetime.now(timezone.utc).isoformat()
        logger.info("Saved %s for user %s", field, user_id)

    def _get(self, user_id: str, field: str, default: Any = None) -> Any:
        value = self._users.get(user_id, {}).get(field, default)
        return copy.deepcopy(value)

    def save_trip_details(self, user_id: str, trip: Payload) -> None:
        self._put(user_id, "trip_details", trip)

    def load_trip_details(self, user_id: str) -> Optional[Payload]:
        return self._get(user_id, "trip_details")

    def save_budget(self, user_id: str, budget: Payload) -> None:
        self._put(user_id, "budget", budget)

    def load_budget(self, user_id: str) -> Optional[Payload]:
        return self._get(user_id, "budget")

    def save_expenses(self, user_id: str, expenses: list[Payload]) -> None:
        self._put(user_id, "expenses", list(expenses))

    def load_expenses(self, user_id: str) -> list[Payload]:
        return self._get(user_id, "expenses", [])

    def save_custom_categories(self, user_id: str, categories: list[Payload]) -> None:
        self._put(user_id, "custom_categories", list(categories))

    def load_custom_categories(self, user_id: str) -> list[Payload]:
        return self._get(user_id, "custom_categories", [])

    def last_updated(self, user_id: str) -> Optional[str]:
        return self._users.get(user_id, {}).get("_last_updated")


class RemotePlannerRepository(PlannerRepository):
    """Each call sends its `user_id` as the X-User-Id header."""

    def __init__(self, api: PlannerApiTool):
        self.api = api

    def save_trip_details(self, user_id: str, trip: Payload) -> None:
        self.api.post_json("/trip-details", trip, user_id=user_id)

    def load_trip_details(self, user_id: str) -> Optional[Payload]:
        return self.api.get_json("/trip-details", user_id=user_id)

    def save_budget(self, user_id: str, budget: Payload) -> None:
        self.api.post_json("/budget", budget, user_id=user_id)

    def load_budget(self, user_id: str) -> Optional[Payload]:
        return self.api.get_json("/budget", user_id=user_id)

    def save_expenses(self, user_id: str, expenses: list[Payload]) -> None:
        self.api.post_json("/expenses", expenses, user_id=user_id)

    def load_expenses(self, user_id: str) -> list[Payload]:
        return self.api.get_json("/expenses", user_id=user_id) or []

    def save_custom_categories(self, user_id: str, categories: list[Payload]) -> None:
        self.api.post_json("/custom-categories", categories, user_id=user_id)

    def load_custom_categories(self, user_id: str) -> list[Payload]:
        return self.api.get_json("/custom-categories", user_id=user_id) or []
