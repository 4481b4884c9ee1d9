"""
modules/expenses/expense_categorizer.py
-----------------------------------------
Guesses a budget category from a free-text expense description.

  KeywordCategorizer   first category whose keyword list matches a substring
                       of the lower-cased description; unmatched → buffer
  RemoteCategorizer    POST /auto-categorize-expense
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from modules.tool_usage.planner_api_tool import PlannerApiTool
from schemas.errors import RemoteServiceError
import config


# Checked in order; the first hit wins ("hotel taxi" → accommodation).
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "accommodation": ["hotel", "hostel", "airbnb", "bnb", "stay", "room", "lodging"],
    "food":          ["restaurant", "food", "meal", "lunch", "dinner", "breakfast", "cafe", "eat"],
    "shopping":      ["shop", "mall", "store", "buy", "purchase", "gift", "souvenir"],
    "attractions":   ["museum", "park", "tour", "ticket", "show", "attraction", "sightseeing"],
    "transport":     ["taxi", "uber", "bus", "train", "flight", "metro", "subway", "transport"],
}


class ExpenseCategorizer(ABC):
    @abstractmethod
    def categorize(self, description: str) -> str:
        ...


class KeywordCategorizer(ExpenseCategorizer):

    def __init__(
        self,
        keywords: dict[str, list[str]] | None = None,
        fallback_category: str = config.BUFFER_KEY,
    ):
        self.keywords = keywords if keywords is not None else CATEGORY_KEYWORDS
        self.fallback_category = fallback_category

    def categorize(self, description: str) -> str:
        text = (description or "").lower()
        for category, words in self.keywords.items():
            if any(word in text for word in words):
                return category
        return self.fallback_category


class RemoteCategorizer(ExpenseCategorizer):

    def __init__(self, api: PlannerApiTool):
        self.api = api

    def categorize(self, description: str) -> str:
        response = self.api.post_json("/auto-categorize-expense", {"description": description})
        category = response.get("category") if isinstance(response, dict) else None
        if not category:
            raise RemoteServiceError("auto-categorize response has no category",
                                     endpoint="/auto-categorize-expense")
        return category
