"""
modules/planning/budget_planner.py
------------------------------------
Turns the total trip budget and the category percentages into money:

  distribute()         amount per category
  daily_budget()       per-day, per-traveller spend excluding the buffer
  trip_days()          inclusive day count between two dates
  validate()           allocated amounts never exceed the confirmed total
  status_for_budget()  user total vs. recommended total
"""

from __future__ import annotations
import math
from datetime import date

from schemas.budget import BudgetStatus, CategorySet, StatusKind
from schemas.errors import InvalidArgumentError
from modules.planning.category_allocator import CategoryAllocator
import config


def _finite(value: float, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidArgumentError(f"{name} must be finite, got {value!r}")
    return float(value)


def status_for_budget(
    total_budget: float,
    recommended_budget: float,
    tolerance_percent: float = config.BUDGET_MATCH_TOLERANCE_PERCENT,
) -> BudgetStatus:
    """
    Classify a user-entered total against the recommended figure.

      recommended == 0        → NEEDS_DATES   "Set dates to calculate"
      total == 0              → NEEDS_BUDGET  "Enter your budget"
      |difference| < 5 %      → MATCHED       "Perfect match!"
      difference > 0          → ABOVE         "+12% above recommendation"
      otherwise               → BELOW         "12% below recommendation"
    """
    total = _finite(total_budget, "Total budget")
    recommended = _finite(recommended_budget, "Recommended budget")

    if recommended == 0:
        return BudgetStatus(StatusKind.NEEDS_DATES, message="Set dates to calculate")
    if total == 0:
        return BudgetStatus(StatusKind.NEEDS_BUDGET, message="Enter your budget")

    difference = (total - recommended) / recommended * 100.0
    magnitude = abs(difference)
    if magnitude < tolerance_percent:
        return BudgetStatus(StatusKind.MATCHED, difference, "Perfect match!")
    if difference > 0:
        return BudgetStatus(StatusKind.ABOVE, difference,
                            f"+{magnitude:.0f}% above recommendation")
    return BudgetStatus(StatusKind.BELOW, difference,
                        f"{magnitude:.0f}% below recommendation")


def trip_days(start: date, end: date) -> int:
    """Both endpoints count: 1 June → 3 June is 3 days."""
    return abs((end - start).days) + 1


class BudgetPlanner:
    """Distributes a confirmed total across a CategorySet."""

    def __init__(self, allocator: CategoryAllocator | None = None):
        self.allocator = allocator or CategoryAllocator()

    def distribute(self, total_budget: float, categories: CategorySet) -> dict[str, float]:
        """
        Args:
            total_budget: Confirmed total in the base currency.
            categories:   Normalized category set.

        Returns:
            key → amount, in the set's display order.
        """
        return {
            key: self.allocator.amount_for_category(categories, key, total_budget)
            for key in categories
        }

    def daily_budget(
        self,
        total_budget: float,
        categories: CategorySet,
        days: int = config.DEFAULT_TRIP_DAYS,
        travelers: int = config.DEFAULT_TRAVELERS,
    ) -> float:
        """
        Spendable amount per day per traveller.  The buffer is held back, so
        only the non-buffer categories count towards the daily figure.
        """
        if days <= 0 or travelers <= 0:
            raise InvalidArgumentError(
                f"days and travelers must be positive, got days={days}, travelers={travelers}"
            )
        allocated = sum(
            amount for key, amount in self.distribute(total_budget, categories).items()
            if key != categories.buffer_key
        )
        return allocated / days / travelers

    @staticmethod
    def validate(amounts: dict[str, float], total_budget: float) -> bool:
        """
        Check that allocated amounts do not exceed the confirmed budget.

        Returns:
            True if valid, False otherwise.
        """
        return sum(amounts.values()) <= total_budget + 1e-2  # 1 cent tolerance for rounding
