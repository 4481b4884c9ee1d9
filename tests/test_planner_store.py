from datetime import date
from unittest.mock import MagicMock

import pytest

from modules.expenses.expense_categorizer import KeywordCategorizer
from modules.memory.planner_repository import InMemoryPlannerRepository
from modules.state import planner_state as ps
from modules.state.planner_store import PlannerStore, load_state, persist_snapshot
from schemas.budget import StatusKind
from schemas.errors import InvalidArgumentError, InvalidExpenseError, UnknownCategoryError
from schemas.trip import TripType


@pytest.fixture
def store():
    return PlannerStore()


# ── Producers ─────────────────────────────────────────────────────────────────

def test_fresh_state_defaults():
    state = ps.PlannerState()
    assert state.total_budget == 5000
    assert state.categories.total == pytest.approx(100.0)
    assert state.status.kind == StatusKind.NEEDS_DATES
    assert state.expenses == ()


def test_destination_switches_currency_and_recommends():
    state = ps.set_destination(ps.PlannerState(), "Japan", "Tokyo")
    assert state.currency.selected == "JPY"
    # no dates yet → nothing to recommend
    assert state.recommended_budget == 0

    state = ps.set_trip_dates(state, date(2025, 6, 1), date(2025, 6, 5))
    assert state.trip.days == 5
    assert state.recommended_budget == 180 * 5 * 2

    cleared = ps.set_destination(state, "")
    assert cleared.currency.selected == ""
    assert cleared.destination.city == ""
    assert cleared.recommended_budget == 0


def test_recommender_is_pluggable():
    recommender = MagicMock()
    recommender.recommend.return_value = 4321.0
    state = ps.set_destination(ps.PlannerState(), "Peru", recommender=recommender)
    assert state.recommended_budget == 4321.0
    recommender.recommend.assert_called_once()


def test_invalid_travelers_reset_to_default():
    state = ps.set_travelers(ps.PlannerState(), 4)
    assert state.trip.travelers == 4
    assert ps.set_travelers(state, 0).trip.travelers == 2
    assert ps.set_travelers(state, "three").trip.travelers == 2


def test_trip_type():
    state = ps.set_trip_type(ps.PlannerState(), "luxury")
    assert state.trip.trip_type == TripType.LUXURY
    with pytest.raises(InvalidArgumentError, match="trip type"):
        ps.set_trip_type(state, "backpacker")


def test_total_budget_validation():
    assert ps.set_total_budget(ps.PlannerState(), 1200).total_budget == 1200.0
    with pytest.raises(InvalidArgumentError):
        ps.set_total_budget(ps.PlannerState(), -1)
    with pytest.raises(InvalidArgumentError):
        ps.set_recommended_budget(ps.PlannerState(), float("nan"))


def test_category_producers():
    state = ps.set_category_percentage(ps.PlannerState(), "transport", 5)
    assert state.categories["buffer"].percentage == pytest.approx(10.0)

    state = ps.toggle_lock(state, "food")
    assert state.categories["food"].locked
    assert not ps.toggle_lock(state, "food").categories["food"].locked

    state = ps.add_custom_category(state, "nightlife", "Nightlife")
    state = ps.set_category_percentage(state, "nightlife", 5)
    assert state.categories.total == pytest.approx(100.0)
    state = ps.remove_custom_category(state, "nightlife")
    assert "nightlife" not in state.categories
    assert state.categories.total == pytest.approx(100.0)


def test_add_expense_producer():
    state = ps.set_currency(ps.PlannerState(), "USD", rates={"USD": 0.5})
    state = ps.add_expense(state, "Dinner", 20, currency="USD", categorizer=KeywordCategorizer())
    expense = state.expenses[0]
    assert expense.amount == pytest.approx(40.0)
    assert expense.category == "food"
    assert state.total_spent == pytest.approx(40.0)
    assert state.remaining == pytest.approx(4960.0)

    with pytest.raises(InvalidArgumentError, match="Unknown budget category"):
        ps.add_expense(state, "Dinner", 20, category="nightlife")
    with pytest.raises(InvalidExpenseError):
        ps.add_expense(state, "Dinner", 0, category="food")

    assert ps.remove_expense(state, expense.id).expenses == ()


def test_categorizer_guess_outside_session_goes_to_buffer():
    categorizer = MagicMock()
    categorizer.categorize.return_value = "nightlife"
    state = ps.add_expense(ps.PlannerState(), "Club entry", 30, categorizer=categorizer)
    assert state.expenses[0].category == "buffer"


def test_currency_display_falls_back_to_base():
    state = ps.set_currency(ps.PlannerState(), "THB")
    assert state.currency.display == "SGD"
    state = ps.set_currency(state, "", rates={"THB": 25.0})
    assert state.currency.selected == "THB"
    assert state.currency.display == "THB"


# ── Store ─────────────────────────────────────────────────────────────────────

def test_dispatch_swaps_snapshot_and_notifies(store):
    calls = []
    unsubscribe = store.subscribe(lambda new, old: calls.append((new, old)))

    first = store.state
    second = store.dispatch(ps.set_total_budget, 8000)

    assert store.state is second
    assert first.total_budget == 5000   # previous snapshot untouched
    assert calls == [(second, first)]
    assert store.history == (first,)

    unsubscribe()
    store.dispatch(ps.set_total_budget, 9000)
    assert len(calls) == 1


def test_dispatch_without_change_is_silent(store):
    listener = MagicMock()
    store.subscribe(listener)
    store.dispatch(ps.set_total_budget, 5000)
    listener.assert_not_called()
    assert store.history == ()


def test_failed_producer_leaves_state_untouched(store):
    before = store.state
    with pytest.raises(UnknownCategoryError):
        store.dispatch(ps.set_category_percentage, "nightlife", 10)
    assert store.state is before
    assert store.history == ()


def test_undo(store):
    store.dispatch(ps.set_total_budget, 8000)
    store.dispatch(ps.set_category_percentage, "food", 40)
    store.undo()
    assert store.state.total_budget == 8000
    assert store.state.categories["food"].percentage == 25.0
    store.undo()
    assert store.state.total_budget == 5000
    with pytest.raises(InvalidArgumentError, match="Nothing to undo"):
        store.undo()


def test_history_is_bounded():
    store = PlannerStore(history_limit=3)
    for total in range(1, 8):
        store.dispatch(ps.set_total_budget, total * 1000)
    assert len(store.history) == 3
    assert store.history[0].total_budget == 4000


# ── Persistence ───────────────────────────────────────────────────────────────

def test_persist_snapshot_saves_changed_sections_only():
    repository = MagicMock()
    store = PlannerStore()
    store.subscribe(persist_snapshot(repository, "u1"))

    store.dispatch(ps.set_total_budget, 6000)
    repository.save_budget.assert_called_once()
    repository.save_trip_details.assert_not_called()
    repository.save_expenses.assert_not_called()

    store.dispatch(ps.add_expense, "Taxi", 12, category="transport")
    repository.save_expenses.assert_called_once()
    assert repository.save_budget.call_count == 1


def test_load_state_round_trip():
    repository = InMemoryPlannerRepository()
    store = PlannerStore()
    store.subscribe(persist_snapshot(repository, "u1"))
    store.dispatch(ps.set_destination, "Thailand", "Bangkok")
    store.dispatch(ps.set_trip_dates, date(2025, 3, 1), date(2025, 3, 3))
    store.dispatch(ps.set_category_percentage, "food", 30)
    store.dispatch(ps.add_expense, "Street food", 8, category="food", expense_date=date(2025, 3, 1))

    restored = load_state(repository, "u1")

    assert restored.destination == store.state.destination
    assert restored.trip == store.state.trip
    assert restored.categories == store.state.categories
    assert restored.recommended_budget == store.state.recommended_budget
    assert restored.currency.selected == "THB"
    assert restored.expenses == store.state.expenses
    assert repository.last_updated("u1") is not None


def test_load_state_for_unknown_user_is_default():
    assert load_state(InMemoryPlannerRepository(), "nobody") == ps.PlannerState()


def test_removing_last_expense_is_persisted():
    repository = InMemoryPlannerRepository()
    store = PlannerStore()
    store.subscribe(persist_snapshot(repository, "u1"))
    store.dispatch(ps.add_expense, "Taxi", 20, category="transport")
    assert len(load_state(repository, "u1").expenses) == 1

    store.dispatch(ps.remove_expense, store.state.expenses[0].id)

    assert load_state(repository, "u1").expenses == ()
    assert repository.load_expenses("u1") == []


def test_undoing_only_expense_is_persisted():
    repository = InMemoryPlannerRepository()
    store = PlannerStore()
    store.subscribe(persist_snapshot(repository, "u1"))
    store.dispatch(ps.add_expense, "Taxi", 20, category="transport")

    store.undo()

    assert load_state(repository, "u1").expenses == ()


def test_load_state_rejects_unknown_trip_type():
    repository = InMemoryPlannerRepository()
    repository.save_trip_details("u1", {"destination": {"country": "Japan"}, "tripType": "backpacker"})
    with pytest.raises(InvalidArgumentError, match="trip type"):
        load_state(repository, "u1")
