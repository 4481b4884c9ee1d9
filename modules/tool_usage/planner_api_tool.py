"""
modules/tool_usage/planner_api_tool.py
----------------------------------------
Thin JSON client for the planner REST API (see server.py for the routes).

Every remote-backed capability (categorizer, threshold monitor, budget
recommender, currency formatter, repository) talks to the API through this
tool, so transport failures surface as one exception type:
RemoteServiceError.
"""

from __future__ import annotations
from typing import Any

import requests

from schemas.errors import RemoteServiceError
from utils.logger import get_logger
import config

logger = get_logger(__name__)


class PlannerApiTool:
    """Wraps the planner API."""

    def __init__(
        self,
        api_url: str = config.PLANNER_API_URL,
        api_token: str = config.PLANNER_API_TOKEN,
        user_id: str = config.PLANNER_USER_ID,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_token = api_token
        self.user_id = user_id
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return self.api_url not in ("", "UNSPECIFIED")

    def _headers(self, user_id: str | None = None) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "X-User-Id": user_id or self.user_id}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def request(self, method: str, endpoint: str, body: Any = None, user_id: str | None = None) -> Any:
        """
        Send one request and return the decoded JSON body.  `user_id`
        overrides the tool's default X-User-Id for this request only.

        Raises:
            NotImplementedError: PLANNER_API_URL is not configured.
            RemoteServiceError:  network failure, non-2xx status, or non-JSON body.
        """
        if not self.configured:
            raise NotImplementedError(
                "PLANNER_API_URL is not configured; remote planner calls are unavailable."
            )

        url = f"{self.api_url}{endpoint}"
        try:
            response = self._session.request(
                method, url, json=body, headers=self._headers(user_id), timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteServiceError(f"API request to {endpoint} failed: {exc}",
                                     endpoint=endpoint) from exc

        if not response.ok:
            raise RemoteServiceError(
                f"API request to {endpoint} failed: {response.status_code}",
                endpoint=endpoint, status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteServiceError(f"API response from {endpoint} is not JSON",
                                     endpoint=endpoint,
                                     status_code=response.status_code) from exc

    def get_json(self, endpoint: str, user_id: str | None = None) -> Any:
        return self.request("GET", endpoint, user_id=user_id)

    def post_json(self, endpoint: str, body: Any, user_id: str | None = None) -> Any:
        logger.debug("POST %s", endpoint)
        return self.request("POST", endpoint, body, user_id=user_id)
