"""
modules/planning/category_allocator.py
----------------------------------------
Keeps budget category percentages summing to 100 after a single-category edit.

set_percentage(category_set, changed_key, requested_value)
  1. Reject unknown keys and non-finite / non-numeric values (no mutation).
  2. Clamp the value to [0, 100]; the buffer is clamped to [floor, 100].
     A buffer sitting below its floor is lifted to the floor as part of
     any edit, so the floor holds after every call.
  3. total > 100 → the excess is taken from the other unlocked categories,
     each giving up a share proportional to its headroom above its own
     floor (0 for ordinary categories, `buffer_minimum` for the buffer).
     With no buffer in the pool this is exactly
         reduction_i = percentage_i / other_total × excess
  4. Excess left over once that pool is exhausted is trimmed from the edited
     category (down to its floor), then from locked categories.
  5. total < 100 → the whole deficit goes to the buffer (capped at 100).

All operations are pure: the input set is never modified.
"""

from __future__ import annotations
import math
from numbers import Real

from schemas.budget import Category, CategorySet
from schemas.errors import (
    InvalidArgumentError, InvalidPercentageError, UnknownCategoryError,
)
from utils.logger import get_logger
import config

logger = get_logger(__name__)

MIN_PERCENT: float = 0.0
MAX_PERCENT: float = 100.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _require_key(category_set: CategorySet, key: str) -> None:
    if key not in category_set:
        logger.debug("Rejected edit for unknown category %r", key)
        raise UnknownCategoryError(key)


def _require_finite(value: object, what: str = "Percentage") -> float:
    # bool is an int subclass; a checkbox value is never a percentage.
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidPercentageError(f"{what} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidPercentageError(f"{what} must be finite, got {value!r}")
    return value


def _take_proportionally(
    shares: dict[str, float],
    floors: dict[str, float],
    keys: list[str],
    amount: float,
) -> float:
    """
    Remove up to `amount` from `keys` in proportion to each one's headroom
    above its floor.  Mutates `shares`; returns the part that could not be taken.
    """
    headroom = {k: max(0.0, shares[k] - floors[k]) for k in keys}
    available = sum(headroom.values())
    if available <= 0.0 or amount <= 0.0:
        return amount

    taken = min(amount, available)
    for k in keys:
        reduction = headroom[k] / available * taken
        shares[k] = max(floors[k], shares[k] - reduction)
    return amount - taken


class CategoryAllocator:
    """
    Stateless percentage normalizer.  One instance can serve every slider
    event of every session; `buffer_minimum` is the only setting.
    """

    def __init__(self, buffer_minimum: float = config.BUFFER_MINIMUM_PERCENT):
        if not MIN_PERCENT <= buffer_minimum <= MAX_PERCENT:
            raise InvalidArgumentError(
                f"buffer_minimum must be within [0, 100], got {buffer_minimum}"
            )
        self.buffer_minimum = buffer_minimum

    # ── Core edit ─────────────────────────────────────────────────────────────

    def set_percentage(
        self,
        category_set: CategorySet,
        changed_key: str,
        requested_value: float,
    ) -> CategorySet:
        """
        Apply one user edit and return a fully normalized copy of the set.

        Raises:
            UnknownCategoryError:   changed_key is not in the set.
            InvalidPercentageError: requested_value is NaN, ±inf or not a number.
        """
        _require_key(category_set, changed_key)
        value = _require_finite(requested_value)

        buffer_key = category_set.buffer_key
        floors = {k: (self.buffer_minimum if k == buffer_key else MIN_PERCENT)
                  for k in category_set}

        value = _clamp(value, MIN_PERCENT, MAX_PERCENT)
        if changed_key == buffer_key:
            value = _clamp(value, self.buffer_minimum, MAX_PERCENT)

        shares = category_set.percentages()
        shares[changed_key] = value
        if changed_key != buffer_key and shares[buffer_key] < self.buffer_minimum:
            shares[buffer_key] = self.buffer_minimum

        total = sum(shares.values())
        if total > MAX_PERCENT + config.PERCENT_TOLERANCE:
            self._absorb_excess(category_set, shares, floors, changed_key, total - MAX_PERCENT)
        elif total < MAX_PERCENT - config.PERCENT_TOLERANCE:
            shares[buffer_key] = min(MAX_PERCENT, shares[buffer_key] + (MAX_PERCENT - total))

        return category_set.with_percentages(
            {k: _clamp(v, MIN_PERCENT, MAX_PERCENT) for k, v in shares.items()}
        )

    def _absorb_excess(
        self,
        category_set: CategorySet,
        shares: dict[str, float],
        floors: dict[str, float],
        changed_key: str,
        excess: float,
    ) -> None:
        others = [k for k in category_set if k != changed_key]
        unlocked = [k for k in others if not category_set[k].locked]
        locked = [k for k in others if category_set[k].locked]

        excess = _take_proportionally(shares, floors, unlocked, excess)
        if excess <= config.PERCENT_TOLERANCE:
            return

        # Nothing left to take from the pool: the edit itself gives way.
        trimmed = min(excess, max(0.0, shares[changed_key] - floors[changed_key]))
        shares[changed_key] -= trimmed
        excess -= trimmed
        if excess <= config.PERCENT_TOLERANCE:
            logger.debug("Edit to %r trimmed by %.4f to keep the total at 100",
                         changed_key, trimmed)
            return

        logger.debug("Locked categories released %.4f to keep the total at 100", excess)
        _take_proportionally(shares, floors, locked, excess)

    # ── Set maintenance ───────────────────────────────────────────────────────

    def set_locked(self, category_set: CategorySet, key: str, locked: bool) -> CategorySet:
        _require_key(category_set, key)
        category = category_set[key]
        return category_set.with_category(
            Category(category.key, category.label, category.percentage,
                     locked=locked, is_buffer=category.is_buffer)
        )

    def add_category(self, category_set: CategorySet, key: str, label: str = "") -> CategorySet:
        """Append a custom category at 0 % (the sum is unchanged)."""
        key = (key or "").strip()
        if not key:
            raise InvalidArgumentError("Category key must not be blank")
        if key in category_set:
            raise InvalidArgumentError(f"Duplicate budget category: {key!r}")
        return category_set.with_category(Category(key=key, label=label or key.title()))

    def remove_category(self, category_set: CategorySet, key: str) -> CategorySet:
        """Drop a category; its share is handed to the buffer."""
        _require_key(category_set, key)
        if key == category_set.buffer_key:
            raise InvalidArgumentError("The buffer category cannot be removed")
        freed = category_set[key].percentage
        remaining = category_set.without(key)
        buffer_key = remaining.buffer_key
        return remaining.with_percentages(
            {buffer_key: min(MAX_PERCENT, remaining[buffer_key].percentage + freed)}
        )

    # ── Derived values ────────────────────────────────────────────────────────

    @staticmethod
    def amount_for_category(category_set: CategorySet, key: str, total_budget: float) -> float:
        """total_budget × percentage(key) / 100."""
        _require_key(category_set, key)
        total_budget = _require_finite(total_budget, "Total budget")
        return total_budget * category_set[key].percentage / 100.0


_default_allocator = CategoryAllocator()


def set_percentage(category_set: CategorySet, changed_key: str, requested_value: float) -> CategorySet:
    """Module-level shortcut using the configured buffer minimum."""
    return _default_allocator.set_percentage(category_set, changed_key, requested_value)


def amount_for_category(category_set: CategorySet, key: str, total_budget: float) -> float:
    return CategoryAllocator.amount_for_category(category_set, key, total_budget)
