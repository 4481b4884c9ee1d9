"""
schemas/api.py
--------------
Pydantic request models for the planner HTTP API (server.py).

Wire format keeps the browser client's camelCase keys (startDate,
changedKey, originalAmount, …); Python attributes are snake_case and the
models accept either spelling.
"""

from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.budget import CategorySet, default_category_set
from schemas.trip import Destination, Expense, TripDetails, TripType
import config


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DestinationModel(_ApiModel):
    country: str = ""
    city: str = ""

    def to_domain(self) -> Destination:
        return Destination(self.country, self.city)


class TripDetailsModel(_ApiModel):
    destination: DestinationModel = Field(default_factory=DestinationModel)
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    days: int = Field(config.DEFAULT_TRIP_DAYS, ge=1)
    travelers: int = Field(config.DEFAULT_TRAVELERS, ge=1)
    trip_type: TripType = Field(TripType.NORMAL, alias="tripType")

    @field_validator("start_date", "end_date", mode="before")
    def blank_date_is_none(cls, v):
        if v == "":
            return None
        # ISO timestamps from the browser keep only the date part
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v

    def to_domain(self) -> TripDetails:
        return TripDetails(
            start_date=self.start_date,
            end_date=self.end_date,
            days=self.days,
            travelers=self.travelers,
            trip_type=self.trip_type,
        )


class CategoryModel(_ApiModel):
    label: str = ""
    percentage: float = 0.0
    locked: bool = False
    is_buffer: Optional[bool] = Field(None, alias="isBuffer")


class BudgetModel(_ApiModel):
    total: float = 0.0
    recommended: float = 0.0
    currency: str = config.BASE_CURRENCY
    categories: Dict[str, CategoryModel] = Field(default_factory=dict)

    def categories_payload(self) -> dict[str, dict[str, Any]]:
        return {k: c.model_dump(exclude_none=True) for k, c in self.categories.items()}

    def category_set(self) -> CategorySet:
        """The request's categories, or the default set when none were sent."""
        if not self.categories:
            return default_category_set()
        return CategorySet.from_payload(self.categories_payload())


class ExpenseModel(_ApiModel):
    id: Union[str, int] = ""
    description: str
    amount: float
    category: str = config.BUFFER_KEY
    date: Optional[str] = None
    original_amount: Optional[float] = Field(None, alias="originalAmount")
    original_currency: Optional[str] = Field(None, alias="originalCurrency")
    traveller: Optional[str] = None

    def to_domain(self) -> Expense:
        return Expense.from_payload(self.model_dump(by_alias=True, exclude_none=True))


class CustomCategoryModel(_ApiModel):
    key: str = Field(..., min_length=1)
    label: str = ""


# ── Request bodies ────────────────────────────────────────────────────────────

class NormalizeRequest(_ApiModel):
    budget: BudgetModel
    changed_key: str = Field(..., alias="changedKey")
    value: Optional[float] = None   # defaults to the changed key's percentage in `budget`


class DistributeRequest(_ApiModel):
    budget: BudgetModel


class FormatCurrencyRequest(_ApiModel):
    amount: float
    currency: str = config.BASE_CURRENCY


class AutoCategorizeRequest(_ApiModel):
    description: str


class CheckThresholdsRequest(_ApiModel):
    budget: Optional[BudgetModel] = None
    expenses: List[ExpenseModel] = Field(default_factory=list)
    trip_details: Optional[TripDetailsModel] = Field(None, alias="tripDetails")
    today: Optional[date] = None


class DailyBudgetRequest(_ApiModel):
    budget: BudgetModel
    trip_details: TripDetailsModel = Field(default_factory=TripDetailsModel, alias="tripDetails")


class RecommendedBudgetRequest(_ApiModel):
    destination: DestinationModel = Field(default_factory=DestinationModel)
    trip_details: TripDetailsModel = Field(default_factory=TripDetailsModel, alias="tripDetails")


class BudgetStatusRequest(_ApiModel):
    total: float
    recommended: float
