"""modules/planning: budget category allocation and distribution."""

from modules.planning.category_allocator import (
    CategoryAllocator, amount_for_category, set_percentage,
)
from modules.planning.budget_planner import BudgetPlanner, status_for_budget, trip_days

__all__ = [
    "CategoryAllocator",
    "BudgetPlanner",
    "amount_for_category",
    "set_percentage",
    "status_for_budget",
    "trip_days",
]
