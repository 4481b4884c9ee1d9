"""
config.py
---------
Central configuration for the trip budget planner.
Everything is read from environment variables; no secrets are hard-coded.

The planner API is optional. While PLANNER_API_URL is "UNSPECIFIED" every
capability (auto-categorization, threshold alerts, recommended budget,
currency formatting, persistence) runs on its local implementation only.
"""

import os

# ── Planner API ───────────────────────────────────────────────────────────────
PLANNER_API_URL: str = os.getenv("PLANNER_API_URL", "UNSPECIFIED")   # e.g. "http://localhost:8000/api"
PLANNER_API_TOKEN: str = os.getenv("PLANNER_API_TOKEN", "")
PLANNER_USER_ID: str = os.getenv("PLANNER_USER_ID", "anonymous")
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

# ── HTTP Server ───────────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))

# ── Currency ──────────────────────────────────────────────────────────────────
# All stored amounts are in BASE_CURRENCY; rates are "units per 1 base unit".
BASE_CURRENCY: str = os.getenv("BASE_CURRENCY", "SGD")

# ── Budget Categories ─────────────────────────────────────────────────────────
BUFFER_KEY: str = "buffer"
BUFFER_MINIMUM_PERCENT: float = float(os.getenv("BUFFER_MINIMUM_PERCENT", "10.0"))
PERCENT_TOLERANCE: float = 1e-6

# (key, label, percentage) in display order; sums to 100.
DEFAULT_CATEGORIES: list[tuple[str, str, float]] = [
    ("accommodation", "Accommodation",    30.0),
    ("food",          "Food",             25.0),
    ("shopping",      "Shopping",         15.0),
    ("attractions",   "Attractions",      15.0),
    ("transport",     "Transport",        10.0),
    (BUFFER_KEY,      "Emergency Buffer",  5.0),
]

# ── Budget Status ─────────────────────────────────────────────────────────────
# |total - recommended| / recommended below this is reported as a match.
BUDGET_MATCH_TOLERANCE_PERCENT: float = float(os.getenv("BUDGET_MATCH_TOLERANCE_PERCENT", "5.0"))

# ── Spending Alerts ───────────────────────────────────────────────────────────
CATEGORY_ERROR_UTILIZATION: float   = float(os.getenv("CATEGORY_ERROR_UTILIZATION",   "90.0"))
CATEGORY_WARNING_UTILIZATION: float = float(os.getenv("CATEGORY_WARNING_UTILIZATION", "75.0"))
DAILY_OVERSPEND_FACTOR: float       = float(os.getenv("DAILY_OVERSPEND_FACTOR",       "1.2"))
LOW_REMAINING_FRACTION: float       = float(os.getenv("LOW_REMAINING_FRACTION",       "0.10"))

# ── Trip Defaults ─────────────────────────────────────────────────────────────
DEFAULT_TRIP_DAYS: int = int(os.getenv("DEFAULT_TRIP_DAYS", "7"))
DEFAULT_TRAVELERS: int = int(os.getenv("DEFAULT_TRAVELERS", "2"))
DEFAULT_TOTAL_BUDGET: float = float(os.getenv("DEFAULT_TOTAL_BUDGET", "5000"))

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str  = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
