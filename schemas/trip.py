"""
schemas/trip.py
---------------
Trip and expense records used by the budget planner.

Units:
  amounts  → BASE_CURRENCY (config.py) unless the field says otherwise
  dates    → datetime.date
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

import config


class TripType(str, Enum):
    BUDGET = "budget"
    NORMAL = "normal"
    LUXURY = "luxury"


@dataclass(frozen=True)
class Destination:
    country: str = ""
    city: str = ""

    @property
    def is_set(self) -> bool:
        return bool(self.country)


@dataclass(frozen=True)
class TripDetails:
    """
    Dates are optional while the user is still filling the form; `days`
    keeps the last computed (or default) length so daily figures stay defined.
    """
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days: int = config.DEFAULT_TRIP_DAYS
    travelers: int = config.DEFAULT_TRAVELERS
    trip_type: TripType = TripType.NORMAL

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def to_payload(self) -> dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat() if self.start_date else "",
            "endDate": self.end_date.isoformat() if self.end_date else "",
            "days": self.days,
            "travelers": self.travelers,
            "tripType": self.trip_type.value,
        }


@dataclass(frozen=True)
class Expense:
    """
    One recorded spend.  `amount` is already converted to the base currency;
    the amount and currency as entered are kept for display.
    """
    id: str
    description: str
    amount: float
    category: str
    date: date = field(default_factory=date.today)
    original_amount: float = 0.0
    original_currency: str = config.BASE_CURRENCY
    traveller: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "date": self.date.isoformat(),
            "originalAmount": self.original_amount,
            "originalCurrency": self.original_currency,
            "traveller": self.traveller,
        }

    @classmethod
    def from_payload(cls, item: dict[str, Any]) -> "Expense":
        raw_date = item.get("date") or ""
        amount = float(item.get("amount", 0.0))
        return cls(
            id=str(item.get("id", "")),
            description=item.get("description", ""),
            amount=amount,
            category=item.get("category", config.BUFFER_KEY),
            # ISO timestamps ("2025-06-01T10:00:00Z") keep only the date part
            date=date.fromisoformat(raw_date[:10]) if raw_date else date.today(),
            original_amount=float(item.get("originalAmount", amount)),
            original_currency=item.get("originalCurrency") or config.BASE_CURRENCY,
            traveller=item.get("traveller"),
        )
