"""
modules/state/planner_store.py
--------------------------------
Single dispatch point for planner state changes.

The store owns the active PlannerState snapshot.  dispatch() runs a
producer, swaps in the snapshot it returns, records the previous one for
undo, and notifies subscribers (renderers, persistence) with
(new_state, previous_state).  Snapshots are frozen, so subscribers can keep
references without defensive copies.
"""

from __future__ import annotations
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Optional

from modules.expenses.expense_ledger import ExpenseLedger
from modules.memory.planner_repository import PlannerRepository
from modules.state.planner_state import CurrencySettings, PlannerState
from schemas.budget import CategorySet
from schemas.errors import InvalidArgumentError
from schemas.trip import Destination, Expense, TripDetails, TripType
from utils.logger import get_logger
import config

logger = get_logger(__name__)

Producer = Callable[..., PlannerState]
Listener = Callable[[PlannerState, PlannerState], None]


class PlannerStore:

    def __init__(self, initial: PlannerState | None = None, history_limit: int = 50):
        self._state = initial or PlannerState()
        self._history: list[PlannerState] = []
        self._history_limit = history_limit
        self._listeners: list[Listener] = []

    @property
    def state(self) -> PlannerState:
        return self._state

    @property
    def history(self) -> tuple[PlannerState, ...]:
        return tuple(self._history)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispatch(self, producer: Producer, *args: Any, **kwargs: Any) -> PlannerState:
        """
        Apply `producer(state, *args, **kwargs)`.  If the producer raises,
        the active snapshot is left untouched and the error propagates.
        """
        previous = self._state
        new_state = producer(previous, *args, **kwargs)
        if new_state is previous or new_state == previous:
            return previous

        self._history.append(previous)
        if len(self._history) > self._history_limit:
            del self._history[0]
        self._state = new_state
        logger.debug("Dispatched %s", getattr(producer, "__name__", producer))
        self._notify(new_state, previous)
        return new_state

    def undo(self) -> PlannerState:
        if not self._history:
            raise InvalidArgumentError("Nothing to undo")
        previous = self._state
        self._state = self._history.pop()
        self._notify(self._state, previous)
        return self._state

    def _notify(self, new_state: PlannerState, previous: PlannerState) -> None:
        for listener in list(self._listeners):
            listener(new_state, previous)


# ─────────────────────────────────────────────────────────────────────────────
# Persistence glue
# ─────────────────────────────────────────────────────────────────────────────

def persist_snapshot(repository: PlannerRepository | Any, user_id: str = config.PLANNER_USER_ID) -> Listener:
    """
    Listener that saves each new snapshot.  Trip details are saved once a
    destination or start date exists, the budget once the total is positive,
    expenses whenever the list changes (an emptied list included); unchanged
    sections are skipped.
    """

    def _persist(state: PlannerState, previous: PlannerState) -> None:
        if (state.destination.is_set or state.trip.start_date) and (
                state.destination != previous.destination or state.trip != previous.trip):
            repository.save_trip_details(user_id, state.trip_payload())
        if state.total_budget > 0 and (
                state.total_budget != previous.total_budget
                or state.recommended_budget != previous.recommended_budget
                or state.currency.selected != previous.currency.selected
                or state.categories != previous.categories):
            repository.save_budget(user_id, state.budget_payload())
        if state.ledger != previous.ledger:
            repository.save_expenses(user_id, state.expenses_payload())

    return _persist


def _parse_date(raw: Any) -> Optional[date]:
    if not raw:
        return None
    return date.fromisoformat(str(raw)[:10])


def _parse_trip_type(raw: Any) -> TripType:
    try:
        return TripType(raw or TripType.NORMAL.value)
    except ValueError:
        raise InvalidArgumentError(f"Unknown trip type: {raw!r}") from None


def load_state(repository: PlannerRepository | Any, user_id: str = config.PLANNER_USER_ID) -> PlannerState:
    """Rebuild a session from stored payloads; missing sections keep defaults."""
    state = PlannerState()

    trip_data = repository.load_trip_details(user_id)
    if trip_data:
        destination = trip_data.get("destination") or {}
        state = replace(
            state,
            destination=Destination(destination.get("country", ""), destination.get("city", "")),
            trip=TripDetails(
                start_date=_parse_date(trip_data.get("startDate")),
                end_date=_parse_date(trip_data.get("endDate")),
                days=int(trip_data.get("days") or config.DEFAULT_TRIP_DAYS),
                travelers=int(trip_data.get("travelers") or config.DEFAULT_TRAVELERS),
                trip_type=_parse_trip_type(trip_data.get("tripType")),
            ),
        )

    budget = repository.load_budget(user_id)
    if budget:
        state = replace(
            state,
            currency=CurrencySettings(selected=budget.get("currency", config.BASE_CURRENCY)),
            total_budget=float(budget.get("total", config.DEFAULT_TOTAL_BUDGET)),
            recommended_budget=float(budget.get("recommended", 0.0)),
        )
        if budget.get("categories"):
            state = replace(state, categories=CategorySet.from_payload(budget["categories"]))

    expenses = repository.load_expenses(user_id)
    if expenses:
        state = replace(state, ledger=ExpenseLedger(tuple(Expense.from_payload(e) for e in expenses)))
    return state
