"""
modules/expenses/expense_ledger.py
------------------------------------
Immutable list of recorded expenses plus the validation applied when the
user adds one.  Amounts are converted to the base currency on entry.
"""

from __future__ import annotations
import math
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Iterator, Optional

from modules.expenses.expense_categorizer import ExpenseCategorizer, KeywordCategorizer
from modules.tool_usage.currency_tool import CurrencyConverter
from schemas.errors import InvalidExpenseError
from schemas.trip import Expense
from utils.logger import get_logger
import config

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExpenseLedger:
    expenses: tuple[Expense, ...] = ()

    def __iter__(self) -> Iterator[Expense]:
        return iter(self.expenses)

    def __len__(self) -> int:
        return len(self.expenses)

    # ── Queries ───────────────────────────────────────────────────────────────

    @property
    def total_spent(self) -> float:
        return sum(e.amount for e in self.expenses)

    def spent_in_category(self, category: str) -> float:
        return sum(e.amount for e in self.expenses if e.category == category)

    def spent_on(self, day: date) -> float:
        return sum(e.amount for e in self.expenses if e.date == day)

    def remaining(self, total_budget: float) -> float:
        return total_budget - self.total_spent

    def recent(self, n: int = 10) -> list[Expense]:
        """Last `n` expenses, newest first."""
        if n <= 0:
            return []
        return list(reversed(self.expenses[-n:]))

    def by_category(self) -> dict[str, float]:
        totals: dict[str, float] = {}
        for e in self.expenses:
            totals[e.category] = totals.get(e.category, 0.0) + e.amount
        return totals

    # ── Updates (return a new ledger) ─────────────────────────────────────────

    def add_expense(
        self,
        description: str,
        amount: float,
        category: str = "",
        currency: str = config.BASE_CURRENCY,
        expense_date: Optional[date] = None,
        traveller: Optional[str] = None,
        converter: CurrencyConverter | None = None,
        categorizer: ExpenseCategorizer | None = None,
    ) -> tuple["ExpenseLedger", Expense]:
        """
        Validate and record one expense.

        Args:
            description: Free text; must not be blank.
            amount:      Amount in `currency`; must be a finite number > 0.
            category:    Budget category key; auto-categorized when empty.
            currency:    Currency the amount was entered in.

        Returns:
            (new ledger, the recorded Expense)

        Raises:
            InvalidExpenseError: blank description or invalid amount.
        """
        description = (description or "").strip()
        if not description:
            logger.debug("Rejected expense without description")
            raise InvalidExpenseError("Please enter a valid description and amount")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) \
                or not math.isfinite(amount) or amount <= 0:
            logger.debug("Rejected expense %r with amount %r", description, amount)
            raise InvalidExpenseError("Please enter a valid description and amount")

        converter = converter or CurrencyConverter()
        currency = currency or converter.base
        if not category:
            category = (categorizer or KeywordCategorizer()).categorize(description)

        expense = Expense(
            id=uuid.uuid4().hex,
            description=description,
            amount=converter.to_base(float(amount), currency),
            category=category,
            date=expense_date or date.today(),
            original_amount=float(amount),
            original_currency=currency,
            traveller=(traveller or "").strip() or None,
        )
        return ExpenseLedger(self.expenses + (expense,)), expense

    def remove_expense(self, expense_id: str) -> "ExpenseLedger":
        return ExpenseLedger(tuple(e for e in self.expenses if e.id != expense_id))
