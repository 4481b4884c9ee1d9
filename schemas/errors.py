"""
schemas/errors.py
-----------------
Exception hierarchy shared by the planner modules and the HTTP server.

  PlannerError
    ├── InvalidArgumentError (ValueError)
    │     ├── UnknownCategoryError (KeyError)
    │     ├── InvalidPercentageError
    │     └── InvalidExpenseError
    ├── RemoteServiceError          planner API unreachable / non-2xx
    └── NoProviderAvailableError    every provider in a FallbackChain failed
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for all planner errors."""


class InvalidArgumentError(PlannerError, ValueError):
    """A caller-supplied argument is outside the operation's domain."""


class UnknownCategoryError(InvalidArgumentError, KeyError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown budget category: {key!r}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class InvalidPercentageError(InvalidArgumentError):
    pass


class InvalidExpenseError(InvalidArgumentError):
    pass


class RemoteServiceError(PlannerError):
    def __init__(self, message: str, endpoint: str = "", status_code: int | None = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class NoProviderAvailableError(PlannerError):
    def __init__(self, capability: str, errors: list[Exception]):
        self.capability = capability
        self.errors = errors
        reasons = "; ".join(str(e) for e in errors) or "no providers configured"
        super().__init__(f"No provider could serve {capability!r}: {reasons}")
