"""SessionManager: writes and clears the serialized login in the session."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from starlette.requests import Request

from starlette_passport._utils import maybe_await
from starlette_passport.constants import DEFAULT_SESSION_KEY

logger = logging.getLogger(__name__)


class SessionManager:
    """Persists a logged-in user as ``session[key]["user"]``.

    The session mapping is the one Starlette's ``SessionMiddleware`` places
    at ``scope["session"]``; one is created if the scope has none. Other
    entries under ``session[key]`` belong to other subsystems and are never
    touched.

    Args:
        serializer: ``(user, request) -> serialized``, sync or async.
        key: Session namespace, ``"passport"`` by default.
    """

    def __init__(
        self,
        serializer: Callable[[Any, Request], Any | Awaitable[Any]],
        *,
        key: str = DEFAULT_SESSION_KEY,
    ) -> None:
        if not key:
            raise ValueError("Session key must not be empty")
        self._serializer = serializer
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def login(self, request: Request, user: Any) -> None:
        """Serialize ``user`` into the session.

        Raises whatever the serializer raises; the session is left untouched
        in that case.
        """
        serialized = await maybe_await(self._serializer(user, request))
        session: MutableMapping[str, Any] = request.scope.setdefault("session", {})
        data = session.get(self._key)
        if not isinstance(data, MutableMapping):
            data = session[self._key] = {}
        data["user"] = serialized
        logger.debug("Stored serialized user under session[%r]", self._key)

    async def logout(self, request: Request) -> None:
        """Remove the serialized user, if any. Never raises."""
        session = request.scope.get("session")
        data = session.get(self._key) if session is not None else None
        if isinstance(data, MutableMapping) and data.pop("user", None) is not None:
            logger.debug("Removed serialized user from session[%r]", self._key)

    def serialized_user(self, request: Request) -> Any:
        """The serialized user currently stored in the session, or ``None``."""
        session = request.scope.get("session")
        data = session.get(self._key) if session is not None else None
        return data.get("user") if isinstance(data, MutableMapping) else None
