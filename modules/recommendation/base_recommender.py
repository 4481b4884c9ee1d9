"""
modules/recommendation/base_recommender.py
-------------------------------------------
Abstract base class for recommended-budget providers.

Each concrete recommender (remote API, local cost table) answers the same
question: how much should this trip cost in total, in the base currency?
A result of 0 means "not enough information yet" (no destination or no
dates); status_for_budget() reports that as "Set dates to calculate".
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from schemas.trip import Destination, TripDetails


class BaseRecommender(ABC):
    """
    Abstract recommender.
    All concrete recommenders must implement `recommend()`.
    """

    @abstractmethod
    def recommend(self, destination: Destination, trip: TripDetails) -> float:
        """
        Estimate the total trip budget.

        Args:
            destination: Country (and optionally city) of the trip.
            trip:        Dates, day count, travellers and trip type.

        Returns:
            Recommended total for all travellers over all days, rounded to a
            whole unit; 0 when the destination or dates are missing.
        """
        ...

    @staticmethod
    def _ready(destination: Destination, trip: TripDetails) -> bool:
        return destination.is_set and trip.has_dates and trip.days > 0 and trip.travelers > 0
