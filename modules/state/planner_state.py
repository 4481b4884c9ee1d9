"""
modules/state/planner_state.py
--------------------------------
Immutable snapshot of one budget-planning session, plus the producer
functions that derive the next snapshot from the current one.

Producers never mutate their input.  They are dispatched through
PlannerStore (planner_store.py), which swaps the active snapshot and
notifies subscribers:

    store.dispatch(set_destination, "Japan", "Tokyo")
    store.dispatch(set_category_percentage, "food", 35)
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Optional

from modules.expenses.expense_categorizer import ExpenseCategorizer
from modules.expenses.expense_ledger import ExpenseLedger
from modules.planning.budget_planner import BudgetPlanner, status_for_budget, trip_days
from modules.planning.category_allocator import CategoryAllocator
from modules.recommendation.base_recommender import BaseRecommender
from modules.recommendation.budget_recommender import LocalBudgetRecommender
from modules.tool_usage.currency_tool import CurrencyConverter, currency_for_country
from schemas.budget import BudgetStatus, CategorySet, default_category_set
from schemas.errors import InvalidArgumentError
from schemas.trip import Destination, Expense, TripDetails, TripType
import config


@dataclass(frozen=True)
class CurrencySettings:
    selected: str = config.BASE_CURRENCY     # "" until the user picks a destination/currency
    rates: dict[str, float] = field(default_factory=dict)   # units per 1 base unit

    @property
    def display(self) -> str:
        """Currency used for display; falls back to the base currency."""
        if self.selected and (self.selected == config.BASE_CURRENCY or self.selected in self.rates):
            return self.selected
        return config.BASE_CURRENCY

    def converter(self) -> CurrencyConverter:
        return CurrencyConverter(self.rates)


@dataclass(frozen=True)
class PlannerState:
    destination: Destination = field(default_factory=Destination)
    trip: TripDetails = field(default_factory=TripDetails)
    currency: CurrencySettings = field(default_factory=CurrencySettings)
    total_budget: float = config.DEFAULT_TOTAL_BUDGET
    recommended_budget: float = 0.0
    categories: CategorySet = field(default_factory=default_category_set)
    ledger: ExpenseLedger = field(default_factory=ExpenseLedger)

    # ── Derived values ────────────────────────────────────────────────────────

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self.ledger.expenses

    @property
    def total_spent(self) -> float:
        return self.ledger.total_spent

    @property
    def remaining(self) -> float:
        return self.ledger.remaining(self.total_budget)

    @property
    def status(self) -> BudgetStatus:
        return status_for_budget(self.total_budget, self.recommended_budget)

    def distribution(self, planner: BudgetPlanner | None = None) -> dict[str, float]:
        return (planner or BudgetPlanner()).distribute(self.total_budget, self.categories)

    # ── Payloads for the planner API ──────────────────────────────────────────

    def trip_payload(self) -> dict[str, Any]:
        return {
            "destination": {"country": self.destination.country, "city": self.destination.city},
            **self.trip.to_payload(),
        }

    def budget_payload(self) -> dict[str, Any]:
        return {
            "total": self.total_budget,
            "recommended": self.recommended_budget,
            "currency": self.currency.selected,
            "categories": self.categories.to_payload(),
        }

    def expenses_payload(self) -> list[dict[str, Any]]:
        return [e.to_payload() for e in self.expenses]


# ─────────────────────────────────────────────────────────────────────────────
# Producers: (state, *args) → new state
# ─────────────────────────────────────────────────────────────────────────────

def _recommend(state: PlannerState, recommender: BaseRecommender | Any | None) -> PlannerState:
    recommender = recommender or LocalBudgetRecommender()
    recommended = recommender.recommend(state.destination, state.trip)
    return replace(state, recommended_budget=recommended)


def set_destination(
    state: PlannerState,
    country: str,
    city: str = "",
    recommender: BaseRecommender | Any | None = None,
) -> PlannerState:
    """
    Changing the country switches the selected currency to the country's
    own (when known); clearing the country clears the selection.
    """
    country = (country or "").strip()
    currency = state.currency
    if not country:
        currency = replace(currency, selected="")
    else:
        local_currency = currency_for_country(country)
        if local_currency and local_currency != currency.selected:
            currency = replace(currency, selected=local_currency)

    city = (city or "").strip() if country else ""
    next_state = replace(state, destination=Destination(country, city), currency=currency)
    return _recommend(next_state, recommender)


def set_trip_dates(
    state: PlannerState,
    start: Optional[date],
    end: Optional[date],
    recommender: BaseRecommender | Any | None = None,
) -> PlannerState:
    days = trip_days(start, end) if start and end else state.trip.days
    trip = replace(state.trip, start_date=start, end_date=end, days=days)
    return _recommend(replace(state, trip=trip), recommender)


def set_travelers(
    state: PlannerState,
    travelers: int,
    recommender: BaseRecommender | Any | None = None,
) -> PlannerState:
    """Anything that is not a positive whole number resets to the default."""
    if isinstance(travelers, bool) or not isinstance(travelers, int) or travelers <= 0:
        travelers = config.DEFAULT_TRAVELERS
    trip = replace(state.trip, travelers=travelers)
    return _recommend(replace(state, trip=trip), recommender)


def set_trip_type(
    state: PlannerState,
    trip_type: TripType | str,
    recommender: BaseRecommender | Any | None = None,
) -> PlannerState:
    try:
        trip_type = TripType(trip_type)
    except ValueError:
        raise InvalidArgumentError(f"Unknown trip type: {trip_type!r}") from None
    trip = replace(state.trip, trip_type=trip_type)
    return _recommend(replace(state, trip=trip), recommender)


def set_total_budget(state: PlannerState, total: float) -> PlannerState:
    if isinstance(total, bool) or not isinstance(total, (int, float)) \
            or not math.isfinite(total) or total < 0:
        raise InvalidArgumentError(f"Total budget must be a finite number >= 0, got {total!r}")
    return replace(state, total_budget=float(total))


def set_recommended_budget(state: PlannerState, recommended: float) -> PlannerState:
    if isinstance(recommended, bool) or not isinstance(recommended, (int, float)) \
            or not math.isfinite(recommended) or recommended < 0:
        raise InvalidArgumentError(
            f"Recommended budget must be a finite number >= 0, got {recommended!r}"
        )
    return replace(state, recommended_budget=float(recommended))


def set_category_percentage(
    state: PlannerState,
    key: str,
    value: float,
    allocator: CategoryAllocator | None = None,
) -> PlannerState:
    categories = (allocator or CategoryAllocator()).set_percentage(state.categories, key, value)
    return replace(state, categories=categories)


def toggle_lock(state: PlannerState, key: str, allocator: CategoryAllocator | None = None) -> PlannerState:
    allocator = allocator or CategoryAllocator()
    locked = not state.categories[key].locked
    return replace(state, categories=allocator.set_locked(state.categories, key, locked))


def add_custom_category(
    state: PlannerState,
    key: str,
    label: str = "",
    allocator: CategoryAllocator | None = None,
) -> PlannerState:
    categories = (allocator or CategoryAllocator()).add_category(state.categories, key, label)
    return replace(state, categories=categories)


def remove_custom_category(
    state: PlannerState,
    key: str,
    allocator: CategoryAllocator | None = None,
) -> PlannerState:
    categories = (allocator or CategoryAllocator()).remove_category(state.categories, key)
    return replace(state, categories=categories)


def set_currency(
    state: PlannerState,
    currency: str,
    rates: Optional[dict[str, float]] = None,
) -> PlannerState:
    """Empty `currency` keeps the current selection (only the rates change)."""
    settings = state.currency
    if rates is not None:
        settings = replace(settings, rates=dict(rates))
    if currency:
        settings = replace(settings, selected=currency)
    return replace(state, currency=settings)


def add_expense(
    state: PlannerState,
    description: str,
    amount: float,
    category: str = "",
    currency: str = "",
    expense_date: Optional[date] = None,
    traveller: Optional[str] = None,
    categorizer: ExpenseCategorizer | Any | None = None,
) -> PlannerState:
    """
    Record an expense entered in `currency` (base currency when empty).
    An unknown category key is rejected; an empty one is auto-categorized,
    and a guess outside this session's categories lands in the buffer.
    """
    if category and category not in state.categories:
        raise InvalidArgumentError(f"Unknown budget category: {category!r}")
    if not category and categorizer is not None and (description or "").strip():
        category = categorizer.categorize(description)
        if category not in state.categories:
            category = state.categories.buffer_key
    ledger, _ = state.ledger.add_expense(
        description, amount,
        category=category,
        currency=currency or config.BASE_CURRENCY,
        expense_date=expense_date,
        traveller=traveller,
        converter=state.currency.converter(),
        categorizer=categorizer,
    )
    return replace(state, ledger=ledger)


def remove_expense(state: PlannerState, expense_id: str) -> PlannerState:
    return replace(state, ledger=state.ledger.remove_expense(expense_id))
