"""Dispatch handler and ASGI middleware."""

from starlette_passport.middleware.asgi import AuthenticateMiddleware
from starlette_passport.middleware.dispatcher import AuthenticateHandler

__all__ = ["AuthenticateHandler", "AuthenticateMiddleware"]
