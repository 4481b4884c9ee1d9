"""
main.py
--------
Console walkthrough of one budget-planning session.
  Stage 1: Trip setup (destination, dates, travellers → recommended budget)
  Stage 2: Budget and category allocation
  Stage 3: Expense tracking
  Stage 4: Spending alerts
  Stage 5: Persistence and undo

Run:
  python main.py

Notes:
  - With PLANNER_API_URL unset every capability runs locally; set it (and
    start server.py) to route categorization, alerts, recommendations,
    formatting and persistence through the planner API.
  - A failing remote call is logged and the local implementation answers.
"""

from __future__ import annotations
from datetime import date, timedelta

# ── Capabilities ───────────────────────────────────────────────────────────────
from modules.expenses.expense_categorizer import KeywordCategorizer, RemoteCategorizer
from modules.expenses.threshold_monitor import LocalThresholdMonitor, RemoteThresholdMonitor
from modules.memory.planner_repository import InMemoryPlannerRepository, RemotePlannerRepository
from modules.recommendation.budget_recommender import LocalBudgetRecommender, RemoteBudgetRecommender
from modules.resilience.fallback import build_chain
from modules.tool_usage.currency_tool import LocalCurrencyFormatter, RemoteCurrencyFormatter
from modules.tool_usage.planner_api_tool import PlannerApiTool

# ── State ──────────────────────────────────────────────────────────────────────
from modules.planning.budget_planner import BudgetPlanner
from modules.state import planner_state as ps
from modules.state.planner_store import PlannerStore, load_state, persist_snapshot

from schemas.errors import InvalidArgumentError
import config


def _section(title: str) -> None:
    print(f"\n{'─' * 70}\n  {title}\n{'─' * 70}")


def _print_categories(state: ps.PlannerState, formatter) -> None:
    amounts = state.distribution()
    for key, category in state.categories.items():
        flags = " [locked]" if category.locked else ""
        flags += " [buffer]" if category.is_buffer else ""
        print(f"  {category.label:<18} {category.percentage:6.2f}%  "
              f"{formatter.format(amounts[key], config.BASE_CURRENCY):>14}{flags}")
    print(f"  {'Total':<18} {state.categories.total:6.2f}%")


def main() -> None:
    api = PlannerApiTool()
    categorizer = build_chain("auto-categorize", RemoteCategorizer(api), KeywordCategorizer(), api)
    monitor = build_chain("check-thresholds", RemoteThresholdMonitor(api), LocalThresholdMonitor(), api)
    recommender = build_chain("recommended-budget", RemoteBudgetRecommender(api),
                              LocalBudgetRecommender(), api)
    formatter = build_chain("format-currency", RemoteCurrencyFormatter(api),
                            LocalCurrencyFormatter(), api)
    repository = build_chain("persistence", RemotePlannerRepository(api),
                             InMemoryPlannerRepository(), api)

    print("Trip Budget Planner")
    print(f"  planner API : {config.PLANNER_API_URL if api.configured else 'not configured (local only)'}")
    print(f"  base        : {config.BASE_CURRENCY}, buffer floor {config.BUFFER_MINIMUM_PERCENT:.0f}%")

    store = PlannerStore(load_state(repository))
    store.subscribe(persist_snapshot(repository))

    # ── Stage 1: Trip setup ────────────────────────────────────────────────────
    _section("Stage 1: Trip setup")
    start = date.today()
    store.dispatch(ps.set_destination, "Japan", "Tokyo", recommender=recommender)
    store.dispatch(ps.set_trip_dates, start, start + timedelta(days=4), recommender=recommender)
    store.dispatch(ps.set_travelers, 2, recommender=recommender)
    state = store.state
    print(f"  Destination : {state.destination.city}, {state.destination.country}")
    print(f"  Dates       : {state.trip.start_date} → {state.trip.end_date} ({state.trip.days} days)")
    print(f"  Travellers  : {state.trip.travelers}  ({state.trip.trip_type.value})")
    print(f"  Currency    : {state.currency.selected or '-'}")
    print(f"  Recommended : {formatter.format(state.recommended_budget, config.BASE_CURRENCY)}")

    # ── Stage 2: Budget ────────────────────────────────────────────────────────
    _section("Stage 2: Budget allocation")
    store.dispatch(ps.set_total_budget, 3500)
    status = store.state.status
    print(f"  Total       : {formatter.format(store.state.total_budget, config.BASE_CURRENCY)}"
          f"  ({status.kind.value}: {status.message})")

    print("\n  Default split:")
    _print_categories(store.state, formatter)

    store.dispatch(ps.toggle_lock, "accommodation")
    store.dispatch(ps.set_category_percentage, "food", 35)
    print("\n  Accommodation locked, food → 35%:")
    _print_categories(store.state, formatter)

    try:
        store.dispatch(ps.set_category_percentage, "nightlife", 10)
    except InvalidArgumentError as exc:
        print(f"\n  Rejected edit: {exc}")

    daily = BudgetPlanner().daily_budget(store.state.total_budget, store.state.categories,
                                         store.state.trip.days, store.state.trip.travelers)
    print(f"\n  Daily budget per traveller: {formatter.format(daily, config.BASE_CURRENCY)}")

    # ── Stage 3: Expenses ──────────────────────────────────────────────────────
    _section("Stage 3: Expenses")
    store.dispatch(ps.add_expense, "Hotel deposit", 1100, expense_date=start, categorizer=categorizer)
    store.dispatch(ps.add_expense, "Sushi dinner", 180, expense_date=start, categorizer=categorizer)
    store.dispatch(ps.add_expense, "Train to Kyoto", 260, expense_date=start, categorizer=categorizer)
    store.dispatch(ps.add_expense, "Pocket wifi", 40, expense_date=start, categorizer=categorizer)
    for expense in store.state.ledger.recent(5):
        print(f"  {expense.date}  {expense.description:<18} "
              f"{formatter.format(expense.amount, config.BASE_CURRENCY):>14}  → {expense.category}")
    print(f"\n  Spent       : {formatter.format(store.state.total_spent, config.BASE_CURRENCY)}")
    print(f"  Remaining   : {formatter.format(store.state.remaining, config.BASE_CURRENCY)}")

    # ── Stage 4: Alerts ────────────────────────────────────────────────────────
    _section("Stage 4: Spending alerts")
    state = store.state
    alerts = monitor.check(state.total_budget, state.categories, state.expenses,
                           trip=state.trip, today=start, currency=config.BASE_CURRENCY)
    if not alerts:
        print("  No alerts.")
    for alert in alerts:
        print(f"  [{alert.level.upper():<7}] {alert.message}")

    # ── Stage 5: Persistence / undo ────────────────────────────────────────────
    _section("Stage 5: Persistence and undo")
    store.undo()
    print(f"  Undo last expense → {len(store.state.expenses)} expenses recorded")
    restored = load_state(repository)
    print(f"  Stored session    → {len(restored.expenses)} expenses, "
          f"total {formatter.format(restored.total_budget, config.BASE_CURRENCY)}")
    print(f"  History depth     : {len(store.history)} snapshots")


if __name__ == "__main__":
    main()
