"""Strategy protocol for pluggable authentication schemes."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from starlette.requests import Request

if TYPE_CHECKING:
    from starlette_passport.options import AuthenticateOptions
    from starlette_passport.strategies.actions import StrategyActions


@runtime_checkable
class Strategy(Protocol):
    """Protocol for authentication strategies.

    A strategy inspects the request and resolves the attempt by calling
    exactly one verb on ``actions``: ``success``, ``fail``, ``redirect``,
    ``pass_`` or ``error``. The verb may be called before ``authenticate``
    returns or later from work scheduled on the same event loop.

    Strategies are shared between requests and must not keep per-request
    state on ``self``; everything request-scoped lives on ``actions``.
    """

    def authenticate(
        self,
        request: Request,
        actions: StrategyActions,
        options: AuthenticateOptions,
    ) -> Awaitable[None] | None:
        """Authenticate ``request`` and report the outcome through ``actions``."""
        ...


def is_strategy(obj: object) -> bool:
    """True if ``obj`` exposes a callable ``authenticate``."""
    return callable(getattr(obj, "authenticate", None))


def strategy_name(obj: object) -> str:
    """Best-effort display name for logging."""
    if isinstance(obj, str):
        return obj
    return getattr(obj, "name", None) or type(obj).__name__
