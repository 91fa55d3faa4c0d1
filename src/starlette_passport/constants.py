"""Default keys and status codes shared across starlette-passport."""

from __future__ import annotations

# Session namespace that holds the serialized login.
DEFAULT_SESSION_KEY = "passport"

# ASGI scope key the authenticated user is stored under (``request.user``).
DEFAULT_USER_PROPERTY = "user"

# ASGI scope key for transformed auth info (``request.auth``).
AUTH_INFO_SCOPE_KEY = "auth"

# Session key holding a URL captured before authentication started.
DEFAULT_RETURN_TO_KEY = "returnTo"

# Session key for the persisted message list.
SESSION_MESSAGES_KEY = "messages"

DEFAULT_REDIRECT_STATUS = 302
DEFAULT_FAILURE_STATUS = 401

DEFAULT_FAILURE_FLASH_TYPE = "error"
DEFAULT_SUCCESS_FLASH_TYPE = "success"

SESSION_STRATEGY_NAME = "session"


class _Pass:
    """Sentinel returned by a serializer hook to defer to the next hook."""

    _instance: _Pass | None = None

    def __new__(cls) -> _Pass:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "PASS"

    def __bool__(self) -> bool:
        return False


PASS = _Pass()
