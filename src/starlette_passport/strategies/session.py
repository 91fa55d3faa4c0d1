"""SessionStrategy: restores a login persisted by ``SessionManager``."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from starlette.requests import Request

from starlette_passport._utils import maybe_await
from starlette_passport.constants import DEFAULT_SESSION_KEY, DEFAULT_USER_PROPERTY, SESSION_STRATEGY_NAME
from starlette_passport.options import AuthenticateOptions
from starlette_passport.strategies.actions import StrategyActions
from starlette_passport.strategies.protocol import Strategy

logger = logging.getLogger(__name__)


class SessionStrategy:
    """Reads ``session[key]["user"]`` and deserializes it into the request user.

    Never fails the chain: with no stored login, or after invalidating a
    stale one, it passes so the application decides what an anonymous
    request may do.

    Args:
        deserializer: ``(serialized, request) -> user``; ``None`` or ``False``
            means the stored login is no longer valid.
        key: Session namespace written by ``SessionManager``.
        user_property: ASGI scope key the user is stored under.
    """

    name = SESSION_STRATEGY_NAME

    def __init__(
        self,
        deserializer: Callable[[Any, Request], Any | Awaitable[Any]],
        *,
        key: str = DEFAULT_SESSION_KEY,
        user_property: str = DEFAULT_USER_PROPERTY,
    ) -> None:
        self._deserializer = deserializer
        self._key = key
        self._user_property = user_property

    async def authenticate(
        self,
        request: Request,
        actions: StrategyActions,
        options: AuthenticateOptions,
    ) -> None:
        session: MutableMapping[str, Any] | None = request.scope.get("session")
        data = session.get(self._key) if session is not None else None
        serialized = data.get("user") if isinstance(data, MutableMapping) else None
        if serialized is None:
            actions.pass_()
            return

        try:
            user = await maybe_await(self._deserializer(serialized, request))
        except Exception as exc:
            actions.error(exc)
            return

        if user is None or user is False:
            logger.debug("Stored session login is no longer valid; removing it")
            data.pop("user", None)
        else:
            request.scope[self._user_property] = user
        actions.pass_()


# Verify protocol compliance at import time
assert isinstance(SessionStrategy.__new__(SessionStrategy), Strategy)
