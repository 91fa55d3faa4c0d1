"""Authenticator: strategy registry, session hooks and the dispatch factory."""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import Response

from starlette_passport._types import (
    AuthenticateCallback,
    DeserializerFn,
    FlashFn,
    InfoTransformerFn,
    SerializerFn,
    StrategyRef,
)
from starlette_passport._utils import maybe_await
from starlette_passport.constants import (
    DEFAULT_RETURN_TO_KEY,
    DEFAULT_SESSION_KEY,
    DEFAULT_USER_PROPERTY,
    PASS,
    SESSION_STRATEGY_NAME,
)
from starlette_passport.errors import DeserializationError, SerializationError
from starlette_passport.middleware.asgi import AuthenticateMiddleware
from starlette_passport.middleware.dispatcher import AuthenticateHandler
from starlette_passport.options import AuthenticateOptions
from starlette_passport.session import SessionManager
from starlette_passport.strategies.protocol import Strategy, strategy_name
from starlette_passport.strategies.registry import StrategyRegistry
from starlette_passport.strategies.session import SessionStrategy

logger = logging.getLogger(__name__)


class Authenticator:
    """Host object tying strategies, session persistence and dispatch together.

    Create one at application startup, register strategies and hooks, then
    build handlers with ``authenticate()``, ``middleware()`` or ``protect()``.
    The registry is frozen on the first dispatch.

    Args:
        registry: Strategy registry; a new one is created if omitted.
        session_key: Session namespace for the serialized login.
        user_property: ASGI scope key for the logged-in user.
        return_to_key: Session key consumed by ``success_return_to_or_redirect``.
        flash: ``(request, type, message)`` sink for flash messages. When
            omitted a callable ``request.state.flash`` is used if present.
        session_strategy: Register a ``SessionStrategy`` as ``"session"``.
    """

    def __init__(
        self,
        *,
        registry: StrategyRegistry | None = None,
        session_key: str = DEFAULT_SESSION_KEY,
        user_property: str = DEFAULT_USER_PROPERTY,
        return_to_key: str = DEFAULT_RETURN_TO_KEY,
        flash: FlashFn | None = None,
        session_strategy: bool = True,
    ) -> None:
        if not user_property:
            raise ValueError("user_property must not be empty")
        if not return_to_key:
            raise ValueError("return_to_key must not be empty")

        self._registry = registry if registry is not None else StrategyRegistry()
        self._user_property = user_property
        self._return_to_key = return_to_key
        self._flash = flash
        self._serializers: list[SerializerFn] = []
        self._deserializers: list[DeserializerFn] = []
        self._info_transformers: list[InfoTransformerFn] = []
        self._session_manager = SessionManager(self.serialize_user, key=session_key)

        if session_strategy and SESSION_STRATEGY_NAME not in self._registry:
            self._registry.register(
                SessionStrategy(self.deserialize_user, key=session_key, user_property=user_property)
            )

    @property
    def registry(self) -> StrategyRegistry:
        return self._registry

    @property
    def session_manager(self) -> SessionManager:
        return self._session_manager

    @property
    def user_property(self) -> str:
        return self._user_property

    @property
    def return_to_key(self) -> str:
        return self._return_to_key

    # -- setup ---------------------------------------------------------------

    def use(self, strategy: Strategy, name: str | None = None) -> Authenticator:
        """Register a strategy. Returns ``self`` for chaining."""
        self._registry.register(strategy, name)
        return self

    def unuse(self, name: str) -> Authenticator:
        """Unregister a strategy. Returns ``self`` for chaining."""
        self._registry.unregister(name)
        return self

    def freeze(self) -> None:
        self._registry.freeze()

    def serializer(self, fn: SerializerFn) -> SerializerFn:
        """Register a ``(user, request) -> serialized`` hook. Usable as a decorator."""
        self._serializers.append(fn)
        return fn

    def deserializer(self, fn: DeserializerFn) -> DeserializerFn:
        """Register a ``(serialized, request) -> user`` hook. Usable as a decorator."""
        self._deserializers.append(fn)
        return fn

    def info_transformer(self, fn: InfoTransformerFn) -> InfoTransformerFn:
        """Register an ``(info, request) -> info`` hook. Usable as a decorator."""
        self._info_transformers.append(fn)
        return fn

    # -- hooks -----------------------------------------------------------------

    async def serialize_user(self, user: Any, request: Request) -> Any:
        """Run serializer hooks in order until one returns a value.

        ``PASS``, ``None`` and ``False`` defer to the next hook.

        Raises:
            SerializationError: If no hook produced a value.
        """
        for hook in self._serializers:
            serialized = await maybe_await(hook(user, request))
            if serialized is PASS or serialized is None or serialized is False:
                continue
            return serialized
        raise SerializationError("Failed to serialize user into session")

    async def deserialize_user(self, serialized: Any, request: Request) -> Any:
        """Run deserializer hooks in order until one decides.

        ``PASS`` defers to the next hook; ``None`` or ``False`` means the stored
        login is invalid and ``False`` is returned.

        Raises:
            DeserializationError: If every hook deferred.
        """
        for hook in self._deserializers:
            user = await maybe_await(hook(serialized, request))
            if user is PASS:
                continue
            if user is None or user is False:
                return False
            return user
        raise DeserializationError("Failed to deserialize user out of session")

    async def transform_auth_info(self, info: Any, request: Request) -> Any:
        """Run info transformers in order; ``info`` is returned unchanged if none apply."""
        for hook in self._info_transformers:
            transformed = await maybe_await(hook(info, request))
            if transformed is PASS or transformed is None:
                continue
            return transformed
        return info

    def flash_sink(self, request: Request) -> Callable[[str, str], Any] | None:
        """The flash sink bound to ``request``, or ``None`` if there is none."""
        if self._flash is not None:
            return functools.partial(self._flash, request)
        sink = getattr(request.state, "flash", None)
        return sink if callable(sink) else None

    # -- login state ----------------------------------------------------------

    async def login(
        self,
        request: Request,
        user: Any,
        options: AuthenticateOptions | None = None,
    ) -> None:
        """Mark ``user`` as logged in and, unless ``options.session`` is false,
        persist it through the session manager.

        If persisting fails the user is cleared again and the error re-raised.
        """
        session = options.session if options is not None else True
        request.scope[self._user_property] = user
        if session:
            try:
                await self._session_manager.login(request, user)
            except Exception:
                request.scope[self._user_property] = None
                raise
        logger.info("Logged in %s (session=%s)", type(user).__name__, session)

    async def logout(self, request: Request) -> None:
        """Clear the logged-in user and its session entry. Never raises."""
        request.scope[self._user_property] = None
        await self._session_manager.logout(request)
        logger.info("Logged out")

    def get_user(self, request: Request) -> Any:
        return request.scope.get(self._user_property)

    def is_authenticated(self, request: Request) -> bool:
        return bool(request.scope.get(self._user_property))

    # -- dispatch -------------------------------------------------------------

    def authenticate(
        self,
        strategies: StrategyRef | Sequence[StrategyRef],
        options: AuthenticateOptions | Mapping[str, Any] | None = None,
        callback: AuthenticateCallback | None = None,
        **kwargs: Any,
    ) -> AuthenticateHandler:
        """Build a handler applying ``strategies`` with the given options.

        Options may be an ``AuthenticateOptions``, a mapping, or keyword
        arguments; unrecognised keys are kept for strategies in ``extra``.
        """
        resolved = self._build_options(options, kwargs)
        logger.debug(
            "Built authenticate handler for %s",
            [strategy_name(s) for s in (strategies if isinstance(strategies, (list, tuple)) else [strategies])],
        )
        return AuthenticateHandler(self, strategies, resolved, callback)

    def middleware(
        self,
        strategies: StrategyRef | Sequence[StrategyRef],
        options: AuthenticateOptions | Mapping[str, Any] | None = None,
        callback: AuthenticateCallback | None = None,
        *,
        exempt_paths: set[str] | None = None,
        exempt_prefixes: set[str] | None = None,
        **kwargs: Any,
    ) -> Middleware:
        """A ``starlette.middleware.Middleware`` entry running the chain on every request."""
        return Middleware(
            AuthenticateMiddleware,
            handler=self.authenticate(strategies, options, callback, **kwargs),
            exempt_paths=exempt_paths,
            exempt_prefixes=exempt_prefixes,
        )

    def protect(
        self,
        strategies: StrategyRef | Sequence[StrategyRef],
        options: AuthenticateOptions | Mapping[str, Any] | None = None,
        callback: AuthenticateCallback | None = None,
        **kwargs: Any,
    ) -> Callable[[Callable[[Request], Any]], Callable[[Request], Awaitable[Response]]]:
        """Decorate a Starlette endpoint so the chain runs before it."""
        handler = self.authenticate(strategies, options, callback, **kwargs)

        def decorator(endpoint: Callable[[Request], Any]) -> Callable[[Request], Awaitable[Response]]:
            @functools.wraps(endpoint)
            async def wrapper(request: Request) -> Response:
                response = await handler(request)
                if response is not None:
                    return response
                return await maybe_await(endpoint(request))

            return wrapper

        return decorator

    @staticmethod
    def _build_options(
        options: AuthenticateOptions | Mapping[str, Any] | None,
        kwargs: dict[str, Any],
    ) -> AuthenticateOptions:
        if isinstance(options, AuthenticateOptions):
            if kwargs:
                raise ValueError("Pass either an AuthenticateOptions instance or keyword options, not both")
            return options
        merged = {**(options or {}), **kwargs}
        return AuthenticateOptions.from_kwargs(**merged)
