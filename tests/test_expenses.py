import math
from datetime import date

import pytest

from modules.expenses.expense_categorizer import KeywordCategorizer
from modules.expenses.expense_ledger import ExpenseLedger
from modules.expenses.threshold_monitor import AlertThresholds, LocalThresholdMonitor
from modules.tool_usage.currency_tool import (
    CurrencyConverter, LocalCurrencyFormatter, currency_for_country,
)
from schemas.budget import default_category_set
from schemas.errors import InvalidExpenseError
from schemas.trip import Expense, TripDetails

TODAY = date(2025, 6, 2)


def make_expense(id: str, amount: float, category: str, day: date = TODAY) -> Expense:
    return Expense(id=id, description=f"Expense {id}", amount=amount, category=category,
                   date=day, original_amount=amount)


# ── Categorizer ───────────────────────────────────────────────────────────────

@pytest.mark.parametrize("description, expected", [
    ("Hotel night", "accommodation"),
    ("Lunch at hawker centre", "food"),
    ("Souvenir for mum", "shopping"),
    ("Museum ticket", "attractions"),
    ("Taxi to airport", "transport"),
    ("Pharmacy", "buffer"),
    ("", "buffer"),
])
def test_keyword_categorizer(description, expected):
    assert KeywordCategorizer().categorize(description) == expected


def test_first_matching_category_wins():
    assert KeywordCategorizer().categorize("Hotel taxi") == "accommodation"


# ── Currency ──────────────────────────────────────────────────────────────────

def test_converter_goes_through_base():
    converter = CurrencyConverter({"USD": 0.75, "JPY": 110.0})
    assert converter.to_base(75, "USD") == pytest.approx(100.0)
    assert converter.from_base(100, "JPY") == pytest.approx(11000.0)
    assert converter.convert(75, "USD", "JPY") == pytest.approx(11000.0)


def test_unknown_currency_is_left_unchanged():
    converter = CurrencyConverter({"USD": 0.75})
    assert not converter.knows("THB")
    assert converter.to_base(500, "THB") == 500
    assert converter.convert(500, "THB", "USD") == 500


def test_local_formatter():
    formatter = LocalCurrencyFormatter()
    assert formatter.format(2500, "SGD") == "S$ 2500.00"
    assert formatter.format(12.5, "THB") == "THB 12.50"


def test_currency_for_country():
    assert currency_for_country("Japan") == "JPY"
    assert currency_for_country("Atlantis") is None


# ── Ledger ────────────────────────────────────────────────────────────────────

def test_add_expense_converts_and_categorizes():
    ledger, expense = ExpenseLedger().add_expense(
        "  Train to Kyoto ", 75, currency="USD", expense_date=TODAY,
        converter=CurrencyConverter({"USD": 0.75}),
    )
    assert len(ledger) == 1
    assert expense.description == "Train to Kyoto"
    assert expense.amount == pytest.approx(100.0)
    assert expense.original_amount == 75.0
    assert expense.original_currency == "USD"
    assert expense.category == "transport"
    assert expense.traveller is None


def test_add_expense_keeps_ledger_immutable():
    empty = ExpenseLedger()
    ledger, _ = empty.add_expense("Dinner", 40, category="food")
    assert len(empty) == 0
    assert ledger.total_spent == 40.0


@pytest.mark.parametrize("description, amount", [
    ("", 10), ("   ", 10), ("Lunch", 0), ("Lunch", -5), ("Lunch", math.nan),
    ("Lunch", math.inf), ("Lunch", "12"), ("Lunch", True),
])
def test_invalid_expense_rejected(description, amount):
    with pytest.raises(InvalidExpenseError, match="valid description and amount"):
        ExpenseLedger().add_expense(description, amount, category="food")


def test_ledger_queries():
    ledger = ExpenseLedger((
        make_expense("1", 100, "food"),
        make_expense("2", 50, "transport", date(2025, 6, 1)),
        make_expense("3", 25, "food"),
    ))
    assert ledger.total_spent == 175
    assert ledger.spent_in_category("food") == 125
    assert ledger.spent_on(TODAY) == 125
    assert ledger.remaining(200) == 25
    assert [e.id for e in ledger.recent(2)] == ["3", "2"]
    assert ledger.recent(0) == []
    assert ledger.by_category() == {"food": 125, "transport": 50}
    assert [e.id for e in ledger.remove_expense("2")] == ["1", "3"]


def test_expense_payload_accepts_timestamps():
    expense = Expense.from_payload({
        "id": 17, "description": "Taxi", "amount": 20,
        "category": "transport", "date": "2025-06-01T10:00:00Z",
    })
    assert expense.id == "17"
    assert expense.date == date(2025, 6, 1)
    assert expense.original_amount == 20.0
    assert expense.to_payload()["date"] == "2025-06-01"


# ── Threshold monitor ─────────────────────────────────────────────────────────

@pytest.fixture
def monitor():
    return LocalThresholdMonitor()


@pytest.fixture
def trip():
    return TripDetails(days=10, travelers=1)


def test_no_budget_no_alerts(monitor):
    assert monitor.check(0, default_category_set(), [make_expense("1", 999, "food")]) == []


def test_category_error_and_warning(monitor, trip):
    categories = default_category_set()   # food 250, transport 100 of 1000
    expenses = [
        make_expense("1", 240, "food", date(2025, 5, 30)),       # 96 %
        make_expense("2", 80, "transport", date(2025, 5, 30)),   # 80 %
    ]
    alerts = monitor.check(1000, categories, expenses, trip=trip, today=TODAY)

    by_category = {a.category: a for a in alerts if a.category}
    assert by_category["food"].level == "error"
    assert by_category["food"].message == "Food budget is 96.0% used. Consider reducing spending."
    assert by_category["transport"].level == "warning"
    assert by_category["transport"].message == "Transport budget is 80.0% used."


def test_daily_overspend_warning(monitor, trip):
    # daily budget = 950 / 10 / 1 = 95; 1.2 × 95 = 114
    alerts = monitor.check(1000, default_category_set(),
                           [make_expense("1", 120, "attractions")], trip=trip, today=TODAY)
    daily = [a for a in alerts if "today" in a.message]
    assert len(daily) == 1
    assert daily[0].level == "warning"
    assert daily[0].message.startswith("You've spent S$ 120.00 today")


def test_low_remaining_and_exceeded(monitor, trip):
    categories = default_category_set()
    low = monitor.check(1000, categories, [make_expense("1", 920, "buffer", date(2025, 5, 1))],
                        trip=trip, today=TODAY)
    assert any(a.message == "Only S$ 80.00 remaining in total budget." for a in low)

    over = monitor.check(1000, categories, [make_expense("1", 1100, "buffer", date(2025, 5, 1))],
                         trip=trip, today=TODAY)
    assert any(a.message == "You have exceeded your budget!" for a in over)
    assert not any("remaining" in a.message for a in over)


def test_custom_thresholds(trip):
    monitor = LocalThresholdMonitor(AlertThresholds(category_error=50, category_warning=25))
    alerts = monitor.check(1000, default_category_set(),
                           [make_expense("1", 130, "food", date(2025, 5, 1))], trip=trip, today=TODAY)
    assert [a.level for a in alerts if a.category == "food"] == ["error"]
    assert "category>50%/25%" in monitor.thresholds.describe()


def test_alert_payload(monitor, trip):
    alerts = monitor.check(1000, default_category_set(),
                           [make_expense("1", 240, "food", date(2025, 5, 1))], trip=trip, today=TODAY)
    assert alerts[0].to_payload() == {
        "type": "error",
        "message": "Food budget is 96.0% used. Consider reducing spending.",
        "category": "food",
    }
