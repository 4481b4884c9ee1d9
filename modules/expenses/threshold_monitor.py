"""
modules/expenses/threshold_monitor.py
---------------------------------------
Raises spending alerts by comparing recorded expenses with the budget.

Rules (LocalThresholdMonitor)
─────────────────────────────
CATEGORY (for every category with a non-zero share):
  utilization > 90 %                      → error   "<Label> budget is 93.0% used. Consider reducing spending."
  utilization > 75 %                      → warning "<Label> budget is 80.0% used."

DAILY:
  spent today > 1.2 × daily budget        → warning "You've spent S$ 420.00 today, exceeding ..."

TOTAL:
  remaining < 0                           → error   "You have exceeded your budget!"
  remaining < 10 % of total               → error   "Only S$ 300.00 remaining in total budget."

A missing or zero total produces no alerts at all.
Thresholds come from config.py and can be overridden per monitor.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence

from modules.planning.budget_planner import BudgetPlanner
from modules.tool_usage.currency_tool import CurrencyFormatter, LocalCurrencyFormatter
from modules.tool_usage.planner_api_tool import PlannerApiTool
from schemas.budget import CategorySet
from schemas.errors import RemoteServiceError
from schemas.trip import Expense, TripDetails
import config


@dataclass(frozen=True)
class Alert:
    level: str          # "error" | "warning"
    message: str
    category: str = ""  # empty for trip-wide alerts

    def to_payload(self) -> dict[str, str]:
        return {"type": self.level, "message": self.message, "category": self.category}


@dataclass
class AlertThresholds:
    category_error: float = config.CATEGORY_ERROR_UTILIZATION      # percent used
    category_warning: float = config.CATEGORY_WARNING_UTILIZATION  # percent used
    daily_overspend: float = config.DAILY_OVERSPEND_FACTOR         # × daily budget
    low_remaining: float = config.LOW_REMAINING_FRACTION           # fraction of total

    def describe(self) -> str:
        return (f"category>{self.category_error:.0f}%/{self.category_warning:.0f}%  "
                f"daily>{self.daily_overspend:.1f}x  "
                f"remaining<{self.low_remaining:.0%}")


class ThresholdMonitor(ABC):
    @abstractmethod
    def check(
        self,
        total_budget: float,
        categories: CategorySet,
        expenses: Sequence[Expense],
        trip: TripDetails | None = None,
        today: date | None = None,
        currency: str = config.BASE_CURRENCY,
    ) -> list[Alert]:
        ...


class LocalThresholdMonitor(ThresholdMonitor):

    def __init__(
        self,
        thresholds: AlertThresholds | None = None,
        planner: BudgetPlanner | None = None,
        formatter: CurrencyFormatter | None = None,
    ):
        self.thresholds = thresholds or AlertThresholds()
        self.planner = planner or BudgetPlanner()
        self.formatter = formatter or LocalCurrencyFormatter()

    def check(
        self,
        total_budget: float,
        categories: CategorySet,
        expenses: Sequence[Expense],
        trip: TripDetails | None = None,
        today: date | None = None,
        currency: str = config.BASE_CURRENCY,
    ) -> list[Alert]:
        if not total_budget or not categories:
            return []

        trip = trip or TripDetails()
        today = today or date.today()
        alerts = self._category_alerts(total_budget, categories, expenses)

        daily = self.planner.daily_budget(total_budget, categories,
                                          max(trip.days, 1), max(trip.travelers, 1))
        spent_today = sum(e.amount for e in expenses if e.date == today)
        if daily > 0 and spent_today > daily * self.thresholds.daily_overspend:
            over = spent_today / daily * 100 - 100
            alerts.append(Alert(
                "warning",
                f"You've spent {self.formatter.format(spent_today, currency)} today, "
                f"exceeding your daily budget by {over:.1f}%.",
            ))

        remaining = total_budget - sum(e.amount for e in expenses)
        if remaining < 0:
            alerts.append(Alert("error", "You have exceeded your budget!"))
        elif remaining < total_budget * self.thresholds.low_remaining:
            alerts.append(Alert(
                "error",
                f"Only {self.formatter.format(remaining, currency)} remaining in total budget.",
            ))
        return alerts

    def _category_alerts(
        self,
        total_budget: float,
        categories: CategorySet,
        expenses: Sequence[Expense],
    ) -> list[Alert]:
        alerts: list[Alert] = []
        allocated = self.planner.distribute(total_budget, categories)
        for key, category_budget in allocated.items():
            if category_budget <= 0:
                continue
            spent = sum(e.amount for e in expenses if e.category == key)
            utilization = spent / category_budget * 100
            label = categories[key].label or key
            if utilization > self.thresholds.category_error:
                alerts.append(Alert(
                    "error",
                    f"{label} budget is {utilization:.1f}% used. Consider reducing spending.",
                    key,
                ))
            elif utilization > self.thresholds.category_warning:
                alerts.append(Alert("warning", f"{label} budget is {utilization:.1f}% used.", key))
        return alerts


class RemoteThresholdMonitor(ThresholdMonitor):

    def __init__(self, api: PlannerApiTool):
        self.api = api

    def check(
        self,
        total_budget: float,
        categories: CategorySet,
        expenses: Sequence[Expense],
        trip: TripDetails | None = None,
        today: date | None = None,
        currency: str = config.BASE_CURRENCY,
    ) -> list[Alert]:
        body: dict[str, Any] = {
            "budget": {
                "total": total_budget,
                "currency": currency,
                "categories": categories.to_payload(),
            },
            "expenses": [e.to_payload() for e in expenses],
        }
        if trip is not None:
            body["tripDetails"] = trip.to_payload()
        if today is not None:
            body["today"] = today.isoformat()
        response = self.api.post_json("/check-thresholds", body)
        if not isinstance(response, dict) or not isinstance(response.get("alerts"), list):
            raise RemoteServiceError("check-thresholds response has no alerts list",
                                     endpoint="/check-thresholds")
        return [
            Alert(a.get("type", "warning"), a.get("message", ""), a.get("category", ""))
            for a in response["alerts"]
        ]
