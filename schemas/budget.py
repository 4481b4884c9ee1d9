"""
schemas/budget.py
-----------------
Budget category structures.

A CategorySet is an immutable, ordered mapping key → Category.  Every edit
(see modules/planning/category_allocator.py) returns a new set; insertion
order only matters for display.

Payload shape used by the planner API:
    {
      "accommodation": {"label": "Accommodation", "percentage": 30.0,
                        "locked": false, "is_buffer": false},
      ...
      "buffer":        {"label": "Emergency Buffer", "percentage": 5.0,
                        "locked": false, "is_buffer": true}
    }
"""

from __future__ import annotations
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable

from schemas.errors import InvalidArgumentError, UnknownCategoryError
import config


@dataclass(frozen=True)
class Category:
    key: str
    label: str = ""
    percentage: float = 0.0       # [0, 100]
    locked: bool = False          # excluded from proportional redistribution
    is_buffer: bool = False       # absorbs deficits; has a minimum floor

    def with_percentage(self, percentage: float) -> "Category":
        return replace(self, percentage=percentage)

    def to_payload(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "percentage": self.percentage,
            "locked": self.locked,
            "is_buffer": self.is_buffer,
        }


class CategorySet(Mapping):
    """
    Ordered, read-only collection of budget categories with exactly one buffer.

    Construction checks structure only (unique keys, one buffer, every
    percentage inside [0, 100]); the sum-to-100 invariant is a post-condition
    of the allocator, exposed here as `is_normalized`.
    """

    def __init__(self, categories: Iterable[Category]):
        items: dict[str, Category] = {}
        for category in categories:
            if category.key in items:
                raise InvalidArgumentError(f"Duplicate budget category: {category.key!r}")
            if not 0.0 <= category.percentage <= 100.0:
                raise InvalidArgumentError(
                    f"Percentage for {category.key!r} must be within [0, 100], "
                    f"got {category.percentage}"
                )
            items[category.key] = category

        buffers = [c.key for c in items.values() if c.is_buffer]
        if len(buffers) != 1:
            raise InvalidArgumentError(
                f"A category set needs exactly one buffer category, found {len(buffers)}"
            )
        self._items = items
        self._buffer_key = buffers[0]

    # ── Mapping protocol ──────────────────────────────────────────────────────

    def __getitem__(self, key: str) -> Category:
        try:
            return self._items[key]
        except KeyError:
            raise UnknownCategoryError(key) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        shares = ", ".join(f"{k}={c.percentage:.2f}" for k, c in self._items.items())
        return f"CategorySet({shares})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategorySet):
            return NotImplemented
        return list(self._items.values()) == list(other._items.values())

    __hash__ = None  # type: ignore[assignment]

    # ── Accessors ─────────────────────────────────────────────────────────────

    @property
    def buffer_key(self) -> str:
        return self._buffer_key

    @property
    def buffer(self) -> Category:
        return self._items[self._buffer_key]

    @property
    def total(self) -> float:
        return sum(c.percentage for c in self._items.values())

    @property
    def is_normalized(self) -> bool:
        return abs(self.total - 100.0) <= config.PERCENT_TOLERANCE

    def percentages(self) -> dict[str, float]:
        return {k: c.percentage for k, c in self._items.items()}

    # ── Derivation (never mutates self) ───────────────────────────────────────

    def with_percentages(self, percentages: Mapping[str, float]) -> "CategorySet":
        """Return a copy with the given keys' percentages replaced."""
        for key in percentages:
            if key not in self._items:
                raise UnknownCategoryError(key)
        return CategorySet(
            c.with_percentage(percentages[k]) if k in percentages else c
            for k, c in self._items.items()
        )

    def with_category(self, category: Category) -> "CategorySet":
        """Return a copy with `category` replacing (or appended after) its key."""
        if category.key in self._items:
            return CategorySet(
                category if k == category.key else c for k, c in self._items.items()
            )
        return CategorySet([*self._items.values(), category])

    def without(self, key: str) -> "CategorySet":
        if key not in self._items:
            raise UnknownCategoryError(key)
        return CategorySet(c for k, c in self._items.items() if k != key)

    # ── Serialization ─────────────────────────────────────────────────────────

    def to_payload(self) -> dict[str, dict[str, Any]]:
        return {k: c.to_payload() for k, c in self._items.items()}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Mapping[str, Any]]) -> "CategorySet":
        """
        Build a set from the API payload shape.
        When no entry carries `is_buffer`, the entry keyed "buffer" is the buffer.
        """
        explicit = any("is_buffer" in entry for entry in payload.values())
        categories = []
        for key, entry in payload.items():
            try:
                percentage = float(entry.get("percentage", 0.0))
            except (TypeError, ValueError):
                raise InvalidArgumentError(
                    f"Percentage for {key!r} is not a number: {entry.get('percentage')!r}"
                ) from None
            categories.append(Category(
                key=key,
                label=entry.get("label") or key.title(),
                percentage=percentage,
                locked=bool(entry.get("locked", False)),
                is_buffer=bool(entry.get("is_buffer")) if explicit else key == config.BUFFER_KEY,
            ))
        return cls(categories)


def default_category_set() -> CategorySet:
    """Fresh per-session distribution (accommodation 30 … buffer 5)."""
    return CategorySet(
        Category(key=key, label=label, percentage=pct, is_buffer=(key == config.BUFFER_KEY))
        for key, label, pct in config.DEFAULT_CATEGORIES
    )


# ─────────────────────────────────────────────────────────────────────────────
# Budget status (user total vs. recommended total)
# ─────────────────────────────────────────────────────────────────────────────

class StatusKind(str, Enum):
    NEEDS_DATES = "NEEDS_DATES"      # recommended budget not yet computable
    NEEDS_BUDGET = "NEEDS_BUDGET"    # user has not entered a total
    MATCHED = "MATCHED"
    ABOVE = "ABOVE"
    BELOW = "BELOW"


@dataclass(frozen=True)
class BudgetStatus:
    kind: StatusKind
    difference_percent: float = 0.0   # signed; 0 while undetermined
    message: str = ""

    @property
    def determined(self) -> bool:
        return self.kind not in (StatusKind.NEEDS_DATES, StatusKind.NEEDS_BUDGET)

    @property
    def magnitude(self) -> float:
        return abs(self.difference_percent)
