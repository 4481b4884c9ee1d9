"""
server.py
---------
HTTP API for the budget planner (FastAPI).

Routes (all under /api):
  GET/POST  /trip-details            per-user trip details
  GET/POST  /budget                  total, recommended, categories
  GET/POST  /expenses                full expense list
  GET/POST  /custom-categories       user-defined category keys/labels
  POST      /normalize-percentages   one category edit → normalized categories
  POST      /distribute-budget       categories with per-category amounts
  POST      /format-currency         {"formatted": "S$ 2500.00"}
  POST      /auto-categorize-expense {"category": "transport"}
  POST      /check-thresholds        {"alerts": [...]}
  POST      /calculate-daily-budget  {"dailyBudget": 178.57}
  POST      /recommended-budget      {"recommended": 1680}
  POST      /budget-status           {"status": "ABOVE", ...}

The caller is identified by the X-User-Id header; authentication is handled
upstream of this service.

Run:
  python server.py
"""

from __future__ import annotations
from typing import Any, List

from fastapi import APIRouter, FastAPI, Header
from fastapi.responses import JSONResponse

from modules.expenses.expense_categorizer import KeywordCategorizer
from modules.expenses.threshold_monitor import LocalThresholdMonitor
from modules.memory.planner_repository import InMemoryPlannerRepository, PlannerRepository
from modules.planning.budget_planner import BudgetPlanner, status_for_budget
from modules.planning.category_allocator import CategoryAllocator
from modules.recommendation.budget_recommender import LocalBudgetRecommender
from modules.tool_usage.currency_tool import LocalCurrencyFormatter
from schemas.api import (
    AutoCategorizeRequest, BudgetModel, BudgetStatusRequest, CheckThresholdsRequest,
    CustomCategoryModel, DailyBudgetRequest, DistributeRequest, ExpenseModel,
    FormatCurrencyRequest, NormalizeRequest, RecommendedBudgetRequest, TripDetailsModel,
)
from schemas.budget import CategorySet
from schemas.errors import InvalidArgumentError, PlannerError, UnknownCategoryError
from utils.logger import get_logger
import config

logger = get_logger(__name__)


def create_app(repository: PlannerRepository | None = None) -> FastAPI:
    repository = repository or InMemoryPlannerRepository()
    allocator = CategoryAllocator()
    planner = BudgetPlanner(allocator)
    formatter = LocalCurrencyFormatter()
    categorizer = KeywordCategorizer()
    monitor = LocalThresholdMonitor(planner=planner, formatter=formatter)
    recommender = LocalBudgetRecommender()

    app = FastAPI(title="Trip Budget Planner API")
    api = APIRouter(prefix="/api")

    @app.exception_handler(InvalidArgumentError)
    async def invalid_argument_handler(request, exc: InvalidArgumentError):
        logger.debug("Rejected %s: %s", request.url.path, exc)
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(PlannerError)
    async def planner_error_handler(request, exc: PlannerError):
        logger.error("Failed %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/")
    async def root():
        return {"message": "Trip Budget Planner API is running"}

    # ── Trip details ──────────────────────────────────────────────────────────

    @api.post("/trip-details")
    async def save_trip_details(body: TripDetailsModel, user_id: str = Header("anonymous", alias="X-User-Id")):
        repository.save_trip_details(user_id, body.model_dump(mode="json", by_alias=True))
        return {"success": True}

    @api.get("/trip-details")
    async def get_trip_details(user_id: str = Header("anonymous", alias="X-User-Id")):
        return repository.load_trip_details(user_id)

    # ── Budget ────────────────────────────────────────────────────────────────

    @api.post("/budget")
    async def save_budget(body: BudgetModel, user_id: str = Header("anonymous", alias="X-User-Id")):
        body.category_set()   # reject malformed category sets before storing
        repository.save_budget(user_id, body.model_dump(mode="json", exclude_none=True))
        return {"success": True}

    @api.get("/budget")
    async def get_budget(user_id: str = Header("anonymous", alias="X-User-Id")):
        return repository.load_budget(user_id)

    # ── Expenses ──────────────────────────────────────────────────────────────

    @api.post("/expenses")
    async def save_expenses(body: List[ExpenseModel], user_id: str = Header("anonymous", alias="X-User-Id")):
        repository.save_expenses(
            user_id, [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in body]
        )
        return {"success": True}

    @api.get("/expenses")
    async def get_expenses(user_id: str = Header("anonymous", alias="X-User-Id")):
        return repository.load_expenses(user_id)

    # ── Categories ────────────────────────────────────────────────────────────

    @api.post("/custom-categories")
    async def save_custom_categories(body: List[CustomCategoryModel],
                                     user_id: str = Header("anonymous", alias="X-User-Id")):
        repository.save_custom_categories(user_id, [c.model_dump() for c in body])
        return {"success": True}

    @api.get("/custom-categories")
    async def get_custom_categories(user_id: str = Header("anonymous", alias="X-User-Id")):
        return repository.load_custom_categories(user_id)

    @api.post("/normalize-percentages")
    async def normalize_percentages(body: NormalizeRequest):
        payload = body.budget.categories_payload()
        if body.changed_key not in payload:
            raise UnknownCategoryError(body.changed_key)
        requested = body.value if body.value is not None else payload[body.changed_key]["percentage"]
        # The edited entry may hold an out-of-range slider value; set_percentage clamps it.
        payload[body.changed_key] = {**payload[body.changed_key], "percentage": 0.0}
        categories = allocator.set_percentage(CategorySet.from_payload(payload),
                                              body.changed_key, requested)
        return {"categories": categories.to_payload()}

    @api.post("/distribute-budget")
    async def distribute_budget(body: DistributeRequest):
        categories = body.budget.category_set()
        amounts = planner.distribute(body.budget.total, categories)
        return {"categories": {
            key: {**category.to_payload(), "amount": amounts[key]}
            for key, category in categories.items()
        }}

    # ── Currency / categorization / alerts ───────────────────────────────────

    @api.post("/format-currency")
    async def format_currency(body: FormatCurrencyRequest):
        return {"formatted": formatter.format(body.amount, body.currency)}

    @api.post("/auto-categorize-expense")
    async def auto_categorize_expense(body: AutoCategorizeRequest):
        return {"category": categorizer.categorize(body.description)}

    @api.post("/check-thresholds")
    async def check_thresholds(body: CheckThresholdsRequest):
        if body.budget is None or not body.budget.total:
            return {"alerts": []}
        alerts = monitor.check(
            body.budget.total,
            body.budget.category_set(),
            [e.to_domain() for e in body.expenses],
            trip=body.trip_details.to_domain() if body.trip_details else None,
            today=body.today,
            currency=body.budget.currency,
        )
        return {"alerts": [a.to_payload() for a in alerts]}

    # ── Budget calculation ────────────────────────────────────────────────────

    @api.post("/calculate-daily-budget")
    async def calculate_daily_budget(body: DailyBudgetRequest):
        daily = planner.daily_budget(body.budget.total, body.budget.category_set(),
                                     body.trip_details.days, body.trip_details.travelers)
        return {"dailyBudget": daily}

    @api.post("/recommended-budget")
    async def recommended_budget(body: RecommendedBudgetRequest):
        recommended = recommender.recommend(body.destination.to_domain(),
                                            body.trip_details.to_domain())
        return {"recommended": recommended}

    @api.post("/budget-status")
    async def budget_status(body: BudgetStatusRequest) -> dict[str, Any]:
        status = status_for_budget(body.total, body.recommended)
        return {
            "status": status.kind.value,
            "difference": status.difference_percent,
            "message": status.message,
        }

    app.include_router(api)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.SERVER_HOST, port=config.SERVER_PORT)
