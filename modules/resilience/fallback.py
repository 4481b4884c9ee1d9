"""
modules/resilience/fallback.py
--------------------------------
Remote-first, local-fallback selection for planner capabilities.

A FallbackChain holds providers that implement the same capability
interface (e.g. ExpenseCategorizer) and exposes that interface itself:

    categorizer = build_chain("auto-categorize", RemoteCategorizer(api), KeywordCategorizer())
    categorizer.categorize("Taxi to hotel")     # remote, or local if remote fails

A provider "fails" when it raises RemoteServiceError, or NotImplementedError
(remote not configured).  Any other exception is a real bug and propagates.
"""

from __future__ import annotations
from typing import Any, Callable, Generic, Sequence, TypeVar

from modules.tool_usage.planner_api_tool import PlannerApiTool
from schemas.errors import NoProviderAvailableError, RemoteServiceError
from utils.logger import get_logger

logger = get_logger(__name__)

P = TypeVar("P")

RECOVERABLE_ERRORS: tuple[type[Exception], ...] = (RemoteServiceError, NotImplementedError)


class FallbackChain(Generic[P]):

    def __init__(self, capability: str, providers: Sequence[P]):
        if not providers:
            raise ValueError(f"FallbackChain {capability!r} needs at least one provider")
        self.capability = capability
        self.providers: list[P] = list(providers)

    def run(self, call: Callable[[P], Any]) -> Any:
        """Invoke `call(provider)` on each provider until one succeeds."""
        errors: list[Exception] = []
        for index, provider in enumerate(self.providers):
            try:
                return call(provider)
            except RECOVERABLE_ERRORS as exc:
                errors.append(exc)
                remaining = len(self.providers) - index - 1
                logger.warning(
                    "%s: %s failed (%s); %s",
                    self.capability, type(provider).__name__, exc,
                    "falling back" if remaining else "no fallback left",
                )
        raise NoProviderAvailableError(self.capability, errors)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        # Only reached for names not defined on the chain itself.
        if name.startswith("_"):
            raise AttributeError(name)
        if not callable(getattr(self.providers[0], name, None)):
            raise AttributeError(f"{self.capability!r} providers have no method {name!r}")

        def _call(*args: Any, **kwargs: Any) -> Any:
            return self.run(lambda provider: getattr(provider, name)(*args, **kwargs))

        _call.__name__ = name
        return _call


def build_chain(capability: str, remote: P | None, local: P, api: PlannerApiTool | None = None) -> FallbackChain[P]:
    """
    Remote first when it exists and (if `api` is given) the API is configured,
    otherwise the local provider alone.
    """
    providers: list[P] = []
    if remote is not None and (api is None or api.configured):
        providers.append(remote)
    providers.append(local)
    return FallbackChain(capability, providers)
