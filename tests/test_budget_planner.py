import math
from datetime import date

import pytest

from modules.planning import BudgetPlanner, status_for_budget, trip_days
from schemas.budget import StatusKind, default_category_set
from schemas.errors import InvalidArgumentError


@pytest.fixture
def planner():
    return BudgetPlanner()


# ── Budget status ─────────────────────────────────────────────────────────────

def test_within_five_percent_is_a_match():
    status = status_for_budget(10000, 10500)
    assert status.kind == StatusKind.MATCHED
    assert status.difference_percent == pytest.approx(-4.7619, abs=1e-3)
    assert status.message == "Perfect match!"
    assert status.determined


def test_above_recommendation():
    status = status_for_budget(11200, 10000)
    assert status.kind == StatusKind.ABOVE
    assert status.message == "+12% above recommendation"
    assert status.magnitude == pytest.approx(12.0)


def test_below_recommendation():
    status = status_for_budget(8000, 10000)
    assert status.kind == StatusKind.BELOW
    assert status.difference_percent == pytest.approx(-20.0)
    assert status.message == "20% below recommendation"


def test_exactly_five_percent_is_not_a_match():
    assert status_for_budget(10500, 10000).kind == StatusKind.ABOVE


def test_missing_recommendation_needs_dates():
    status = status_for_budget(5000, 0)
    assert status.kind == StatusKind.NEEDS_DATES
    assert status.message == "Set dates to calculate"
    assert not status.determined


def test_missing_total_needs_budget():
    status = status_for_budget(0, 4000)
    assert status.kind == StatusKind.NEEDS_BUDGET
    assert status.message == "Enter your budget"


@pytest.mark.parametrize("total, recommended", [(math.nan, 100), (100, math.inf), ("100", 100)])
def test_status_rejects_bad_numbers(total, recommended):
    with pytest.raises(InvalidArgumentError):
        status_for_budget(total, recommended)


# ── Distribution ──────────────────────────────────────────────────────────────

def test_distribute_follows_percentages(planner):
    amounts = planner.distribute(10000, default_category_set())

    assert list(amounts) == ["accommodation", "food", "shopping", "attractions", "transport", "buffer"]
    assert amounts["accommodation"] == pytest.approx(3000.0)
    assert amounts["buffer"] == pytest.approx(500.0)
    assert sum(amounts.values()) == pytest.approx(10000.0)
    assert BudgetPlanner.validate(amounts, 10000)


def test_validate_flags_over_allocation():
    assert not BudgetPlanner.validate({"food": 600.0, "buffer": 500.0}, 1000)
    assert BudgetPlanner.validate({"food": 500.004, "buffer": 500.0}, 1000)


def test_daily_budget_excludes_buffer(planner):
    # 95 % of 7000 over 7 days for 2 travellers
    daily = planner.daily_budget(7000, default_category_set(), days=7, travelers=2)
    assert daily == pytest.approx(475.0)


def test_daily_budget_requires_positive_days(planner):
    with pytest.raises(InvalidArgumentError, match="positive"):
        planner.daily_budget(7000, default_category_set(), days=0, travelers=2)


# ── Trip length ───────────────────────────────────────────────────────────────

def test_trip_days_is_inclusive():
    assert trip_days(date(2025, 6, 1), date(2025, 6, 3)) == 3
    assert trip_days(date(2025, 6, 1), date(2025, 6, 1)) == 1
    # reversed dates count the same span
    assert trip_days(date(2025, 6, 3), date(2025, 6, 1)) == 3
