"""
modules/tool_usage/currency_tool.py
-------------------------------------
Currency helpers for the planner.

  COUNTRY_TO_CURRENCY   destination country → ISO currency code
  CurrencyConverter     conversions through the base currency using rates
                        supplied by the caller (no rate fetching here)
  CurrencyFormatter     capability: amount + code → display string
    ├── LocalCurrencyFormatter    symbol table, two decimals
    └── RemoteCurrencyFormatter   POST /format-currency
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Mapping

from modules.tool_usage.planner_api_tool import PlannerApiTool
from schemas.errors import RemoteServiceError
import config


COUNTRY_TO_CURRENCY: dict[str, str] = {
    # ── Southeast Asia ────────────────────────────────────────────────────────
    "Singapore": "SGD", "Malaysia": "MYR", "Thailand": "THB", "Indonesia": "IDR",
    "Vietnam": "VND", "Philippines": "PHP", "Cambodia": "KHR", "Myanmar": "MMK",
    "Laos": "LAK", "Brunei": "BND",
    # ── East / South Asia ─────────────────────────────────────────────────────
    "Japan": "JPY", "South Korea": "KRW", "China": "CNY", "Taiwan": "TWD",
    "Hong Kong": "HKD", "India": "INR", "Sri Lanka": "LKR", "Nepal": "NPR",
    "Bangladesh": "BDT", "Pakistan": "PKR",
    # ── Middle East ───────────────────────────────────────────────────────────
    "United Arab Emirates": "AED", "Saudi Arabia": "SAR", "Qatar": "QAR",
    "Oman": "OMR", "Jordan": "JOD",
    # ── Europe ────────────────────────────────────────────────────────────────
    "United Kingdom": "GBP", "Germany": "EUR", "France": "EUR", "Italy": "EUR",
    "Spain": "EUR", "Netherlands": "EUR", "Switzerland": "CHF", "Austria": "EUR",
    "Belgium": "EUR", "Sweden": "SEK", "Norway": "NOK", "Denmark": "DKK",
    "Finland": "EUR", "Ireland": "EUR", "Portugal": "EUR",
    # ── Americas / Oceania / Africa ───────────────────────────────────────────
    "United States": "USD", "Canada": "CAD", "Mexico": "MXN",
    "Australia": "AUD", "New Zealand": "NZD",
    "South Africa": "ZAR", "Egypt": "EGP", "Morocco": "MAD", "Kenya": "KES",
    "Tanzania": "TZS",
    "Brazil": "BRL", "Argentina": "ARS", "Chile": "CLP", "Peru": "PEN",
    "Colombia": "COP",
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "SGD": "S$", "USD": "$", "EUR": "€", "GBP": "£",
    "JPY": "¥", "AUD": "A$", "CNY": "¥", "MYR": "RM",
}


def currency_for_country(country: str) -> str | None:
    """ISO code for a destination country, or None when unknown."""
    return COUNTRY_TO_CURRENCY.get(country)


class CurrencyConverter:
    """
    Converts through the base currency.

    `rates` maps code → units of that currency per 1 base unit
    (e.g. base SGD: {"SGD": 1.0, "USD": 0.74, "JPY": 110.5}).
    A currency missing from `rates` converts 1:1, so a stale rate table never
    blocks an expense from being recorded.
    """

    def __init__(self, rates: Mapping[str, float] | None = None, base: str = config.BASE_CURRENCY):
        self.base = base
        self.rates: dict[str, float] = {base: 1.0}
        self.rates.update({k: v for k, v in (rates or {}).items() if v})

    def knows(self, currency: str) -> bool:
        return currency in self.rates

    def to_base(self, amount: float, currency: str) -> float:
        rate = self.rates.get(currency)
        return amount / rate if rate else amount

    def from_base(self, amount: float, currency: str) -> float:
        rate = self.rates.get(currency)
        return amount * rate if rate else amount

    def convert(self, amount: float, source: str, target: str) -> float:
        if source == target:
            return amount
        if source not in self.rates or target not in self.rates:
            return amount
        return self.from_base(self.to_base(amount, source), target)


# ─────────────────────────────────────────────────────────────────────────────
# Formatting capability
# ─────────────────────────────────────────────────────────────────────────────

class CurrencyFormatter(ABC):
    @abstractmethod
    def format(self, amount: float, currency: str = config.BASE_CURRENCY) -> str:
        ...


class LocalCurrencyFormatter(CurrencyFormatter):
    """Symbol when known, otherwise the code itself: "S$ 2500.00"."""

    def format(self, amount: float, currency: str = config.BASE_CURRENCY) -> str:
        symbol = CURRENCY_SYMBOLS.get(currency, currency)
        return f"{symbol} {amount:.2f}"


class RemoteCurrencyFormatter(CurrencyFormatter):
    def __init__(self, api: PlannerApiTool):
        self.api = api

    def format(self, amount: float, currency: str = config.BASE_CURRENCY) -> str:
        response = self.api.post_json("/format-currency", {"amount": amount, "currency": currency})
        formatted = response.get("formatted") if isinstance(response, dict) else None
        if not isinstance(formatted, str):
            raise RemoteServiceError("format-currency response has no 'formatted' string",
                                     endpoint="/format-currency")
        return formatted
