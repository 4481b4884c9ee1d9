"""
modules/recommendation/budget_recommender.py
---------------------------------------------
Recommended trip budget, remote first with a local cost table as fallback.

  RemoteBudgetRecommender   POST /recommended-budget → {"recommended": …}
  LocalBudgetRecommender    recommended = REGIONAL_DAILY_COST[country]
                                          × TRIP_TYPE_MULTIPLIER[trip_type]
                                          × days × travelers
"""

from __future__ import annotations

from modules.recommendation.base_recommender import BaseRecommender
from modules.tool_usage.planner_api_tool import PlannerApiTool
from schemas.errors import RemoteServiceError
from schemas.trip import Destination, TripDetails, TripType


# Daily cost per person in the base currency (SGD).
REGIONAL_DAILY_COST: dict[str, float] = {
    "Singapore": 150, "Malaysia": 120, "Thailand": 100, "Indonesia": 90,
    "Vietnam": 80, "Philippines": 85, "Cambodia": 70, "Myanmar": 65,
    "Laos": 60, "Brunei": 140,
    "Japan": 180, "South Korea": 160, "China": 130, "Taiwan": 140, "Hong Kong": 200,
    "India": 75, "Sri Lanka": 70, "Nepal": 55, "Bangladesh": 50, "Pakistan": 60,
    "United Arab Emirates": 220, "Saudi Arabia": 190, "Qatar": 250, "Oman": 170,
    "Jordan": 120,
    "United Kingdom": 250, "Germany": 200, "France": 220, "Italy": 190, "Spain": 180,
    "Netherlands": 210, "Switzerland": 280, "Austria": 200, "Belgium": 190,
    "Sweden": 230, "Norway": 260, "Denmark": 240, "Finland": 220, "Ireland": 200,
    "Portugal": 160,
    "United States": 280, "Canada": 220, "Mexico": 120,
    "Australia": 240, "New Zealand": 200,
    "South Africa": 140, "Egypt": 100, "Morocco": 90, "Kenya": 110, "Tanzania": 95,
    "Brazil": 130, "Argentina": 110, "Chile": 120, "Peru": 100, "Colombia": 95,
}
DEFAULT_DAILY_COST: float = 120.0

TRIP_TYPE_MULTIPLIER: dict[TripType, float] = {
    TripType.BUDGET: 0.7,
    TripType.NORMAL: 1.0,
    TripType.LUXURY: 1.8,
}


class LocalBudgetRecommender(BaseRecommender):
    """Per-country daily cost table; unknown countries use DEFAULT_DAILY_COST."""

    def __init__(
        self,
        daily_costs: dict[str, float] | None = None,
        default_daily_cost: float = DEFAULT_DAILY_COST,
    ):
        self.daily_costs = daily_costs if daily_costs is not None else REGIONAL_DAILY_COST
        self.default_daily_cost = default_daily_cost

    def daily_cost(self, destination: Destination, trip_type: TripType) -> float:
        base = self.daily_costs.get(destination.country, self.default_daily_cost)
        return base * TRIP_TYPE_MULTIPLIER[trip_type]

    def recommend(self, destination: Destination, trip: TripDetails) -> float:
        if not self._ready(destination, trip):
            return 0.0
        per_person = self.daily_cost(destination, trip.trip_type) * trip.days
        return float(round(per_person * trip.travelers))


class RemoteBudgetRecommender(BaseRecommender):
    """Asks the planner API for the recommended total."""

    def __init__(self, api: PlannerApiTool):
        self.api = api

    def recommend(self, destination: Destination, trip: TripDetails) -> float:
        if not self._ready(destination, trip):
            return 0.0
        response = self.api.post_json("/recommended-budget", {
            "destination": {"country": destination.country, "city": destination.city},
            "tripDetails": trip.to_payload(),
        })
        recommended = response.get("recommended") if isinstance(response, dict) else None
        if isinstance(recommended, bool) or not isinstance(recommended, (int, float)) \
                or recommended < 0:
            raise RemoteServiceError("recommended-budget returned no usable figure",
                                     endpoint="/recommended-budget")
        return float(round(recommended))
