"""ASGI middleware that runs an authenticate handler in front of an app."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from starlette_passport._utils import maybe_await

if TYPE_CHECKING:
    from starlette_passport.middleware.dispatcher import AuthenticateHandler

logger = logging.getLogger(__name__)


class AuthenticateMiddleware:
    """ASGI middleware that authenticates every HTTP request with ``handler``.

    When the handler produces a response (redirect, failure, callback
    response) it is sent and the wrapped app is not called. Otherwise the
    request continues to the app with the user, auth info or assigned
    property already placed on the scope. An ``HTTPException`` raised by
    the handler (``fail_with_error``) is rendered by the application's
    matching exception handler, or as a plain-text error response.

    Args:
        app: The ASGI application to wrap.
        handler: An ``AuthenticateHandler`` from ``Authenticator.authenticate()``.
        exempt_paths: Exact paths that bypass authentication.
        exempt_prefixes: Path prefixes that bypass authentication.
    """

    def __init__(
        self,
        app: Any,
        handler: AuthenticateHandler,
        *,
        exempt_paths: set[str] | None = None,
        exempt_prefixes: set[str] | None = None,
    ) -> None:
        self._app = app
        self._handler = handler
        self._exempt_paths = exempt_paths or set()
        self._exempt_prefixes = exempt_prefixes or set()

    def _is_exempt(self, path: str) -> bool:
        """Check if a path is exempt from authentication."""
        if path in self._exempt_paths:
            return True
        return any(path.startswith(prefix) for prefix in self._exempt_prefixes)

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self._app(scope, receive, send)
            return

        path = scope.get("path", "")
        if self._is_exempt(path):
            await self._app(scope, receive, send)
            return

        request = Request(scope, receive, send)
        try:
            response = await self._handler(request)
        except HTTPException as exc:
            response = await self._handle_http_exception(request, exc)
        if response is None:
            await self._app(scope, receive, send)
            return

        logger.debug("Authentication answered %s %s with %d", scope.get("method", ""), path, response.status_code)
        await response(scope, receive, send)

    @staticmethod
    async def _handle_http_exception(request: Request, exc: HTTPException) -> Response:
        """Render an ``HTTPException`` raised by the handler.

        This middleware runs outside Starlette's ``ExceptionMiddleware``, so
        handlers registered on the application (by status code or by
        exception class) are looked up here. Without one, the exception is
        rendered the way Starlette renders ``HTTPException`` by default.
        """
        handlers = getattr(request.scope.get("app"), "exception_handlers", None) or {}
        handler = handlers.get(exc.status_code)
        if handler is None:
            for cls in type(exc).__mro__:
                if cls is Exception:
                    break
                if cls in handlers:
                    handler = handlers[cls]
                    break
        if handler is not None:
            logger.debug("Rendering %s with application handler", type(exc).__name__)
            return await maybe_await(handler(request, exc))
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)
