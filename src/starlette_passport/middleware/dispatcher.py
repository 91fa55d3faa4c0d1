"""AuthenticateHandler: runs a strategy chain and turns its outcome into a response."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response

from starlette_passport._types import AuthenticateCallback, FlashSetting, MessageSetting, StrategyRef
from starlette_passport._utils import maybe_await, status_text
from starlette_passport.constants import (
    AUTH_INFO_SCOPE_KEY,
    DEFAULT_FAILURE_FLASH_TYPE,
    DEFAULT_FAILURE_STATUS,
    DEFAULT_REDIRECT_STATUS,
    DEFAULT_SUCCESS_FLASH_TYPE,
    SESSION_MESSAGES_KEY,
)
from starlette_passport.errors import AuthenticationError, ConfigurationError, UnknownStrategyError
from starlette_passport.options import AuthenticateOptions, resolve_flash, resolve_message
from starlette_passport.strategies.actions import Error, Failure, Outcome, Pass, Redirect, StrategyActions, Success
from starlette_passport.strategies.protocol import Strategy, is_strategy, strategy_name

if TYPE_CHECKING:
    from starlette_passport.authenticator import Authenticator

logger = logging.getLogger(__name__)


class AuthenticateHandler:
    """Applies one or more strategies, in order, to a request.

    The first strategy to succeed, redirect, pass or error ends the chain.
    Failures move on to the next strategy; once every strategy has failed
    the request is answered with a redirect, a ``401`` (or the first
    reported status) or an ``AuthenticationError``, depending on the options.

    Calling the handler returns the ``Response`` to send, or ``None`` when
    the request should continue down the pipeline.

    Args:
        authenticator: Provides strategy lookup, login and info transformation.
        strategies: A strategy or registered name, or a sequence of them.
            A single value makes failure results scalar in callback mode.
        options: Dispatch options.
        callback: ``(request, error, user, info, status)`` taking over
            outcome handling; no login, redirect or failure response is
            performed by the handler when given.
    """

    def __init__(
        self,
        authenticator: Authenticator,
        strategies: StrategyRef | Sequence[StrategyRef],
        options: AuthenticateOptions | None = None,
        callback: AuthenticateCallback | None = None,
    ) -> None:
        if isinstance(strategies, (list, tuple)):
            self._strategies: list[StrategyRef] = list(strategies)
            self._multi = True
        else:
            self._strategies = [strategies]
            self._multi = False
        self._authenticator = authenticator
        self._options = options or AuthenticateOptions()
        self._callback = callback

    @property
    def options(self) -> AuthenticateOptions:
        return self._options

    @property
    def strategies(self) -> list[StrategyRef]:
        return list(self._strategies)

    async def __call__(self, request: Request) -> Response | None:
        self._authenticator.freeze()
        failures: list[Failure] = []

        for index, layer in enumerate(self._strategies):
            strategy = self._resolve(layer)
            name = strategy_name(layer)
            logger.debug("Attempting strategy %r (%d/%d)", name, index + 1, len(self._strategies))

            outcome = await self._attempt(strategy, name, request)
            if isinstance(outcome, Failure):
                logger.debug("Strategy %r failed (status=%s)", name, outcome.status)
                failures.append(outcome)
                continue
            return await self._resolve_outcome(request, outcome)

        return await self._all_failed(request, failures)

    def _resolve(self, layer: StrategyRef) -> Strategy:
        if is_strategy(layer):
            return layer
        strategy = self._authenticator.registry.lookup(layer)
        if strategy is None:
            logger.warning("Unknown authentication strategy %r", layer)
            raise UnknownStrategyError(layer)
        return strategy

    async def _attempt(self, strategy: Strategy, name: str, request: Request) -> Outcome:
        actions = StrategyActions(name)
        try:
            await maybe_await(strategy.authenticate(request, actions, self._options))
        except Exception as exc:
            if actions.done:
                raise
            logger.debug("Strategy %r raised before resolving", name, exc_info=True)
            actions.error(exc)
        return await actions.wait()

    async def _resolve_outcome(self, request: Request, outcome: Outcome) -> Response | None:
        if isinstance(outcome, Success):
            return await self._success(request, outcome.user, outcome.info)
        if isinstance(outcome, Redirect):
            return Response(
                status_code=outcome.status,
                headers={"location": outcome.url, "content-length": "0"},
            )
        if isinstance(outcome, Pass):
            return None
        if isinstance(outcome, Error):
            if self._callback is not None:
                return await maybe_await(self._callback(request, outcome.cause, False, None, None))
            raise outcome.cause
        raise TypeError(f"Unexpected strategy outcome {outcome!r}")

    async def _success(self, request: Request, user: Any, info: Any) -> Response | None:
        if self._callback is not None:
            return await maybe_await(self._callback(request, None, user, info, None))

        options = self._options
        info = info or {}

        if options.success_flash:
            await self._flash(request, options.success_flash, info, DEFAULT_SUCCESS_FLASH_TYPE)
        if options.success_message:
            self._add_message(request, options.success_message, info)
        if options.assign_property:
            setattr(request.state, options.assign_property, user)
            return None

        await self._authenticator.login(request, user, options)

        if options.auth_info:
            request.scope[AUTH_INFO_SCOPE_KEY] = await self._authenticator.transform_auth_info(info, request)

        if options.success_return_to_or_redirect:
            url = options.success_return_to_or_redirect
            session = request.scope.get("session")
            return_to_key = self._authenticator.return_to_key
            if session is not None and session.get(return_to_key):
                url = session.pop(return_to_key)
            return await self._redirect(request, url)
        if options.success_redirect:
            return await self._redirect(request, options.success_redirect)
        return None

    async def _all_failed(self, request: Request, failures: list[Failure]) -> Response | None:
        if self._callback is not None:
            if not self._multi:
                first = failures[0] if failures else Failure()
                return await maybe_await(self._callback(request, None, False, first.challenge, first.status))
            challenges = [f.challenge for f in failures]
            statuses = [f.status for f in failures]
            return await maybe_await(self._callback(request, None, False, challenges, statuses))

        options = self._options
        # Strategies are ordered by priority; the first failure supplies the message.
        failure = failures[0] if failures else Failure()
        challenge = failure.challenge or {}

        if options.failure_flash:
            await self._flash(request, options.failure_flash, challenge, DEFAULT_FAILURE_FLASH_TYPE)
        if options.failure_message:
            self._add_message(request, options.failure_message, challenge)
        if options.failure_redirect:
            return await self._redirect(request, options.failure_redirect)

        challenges: list[str] = []
        first_status: int | None = None
        for f in failures:
            first_status = first_status or f.status
            if isinstance(f.challenge, str):
                challenges.append(f.challenge)

        status_code = first_status or DEFAULT_FAILURE_STATUS
        message = status_text(status_code)
        logger.debug("All %d strategies failed; responding %d", len(failures), status_code)

        if options.fail_with_error:
            headers = None
            if status_code == DEFAULT_FAILURE_STATUS and challenges:
                headers = {"www-authenticate": ", ".join(challenges)}
            raise AuthenticationError(message, status_code, challenges=challenges, headers=headers)

        response = PlainTextResponse(message, status_code=status_code)
        if status_code == DEFAULT_FAILURE_STATUS:
            for value in challenges:
                response.headers.append("www-authenticate", value)
        return response

    async def _redirect(self, request: Request, url: str) -> Response:
        """Redirect after the session is saved, if the session can be saved."""
        session = request.scope.get("session")
        save = getattr(session, "save", None)
        if callable(save):
            await maybe_await(save())
        return RedirectResponse(url, status_code=DEFAULT_REDIRECT_STATUS)

    async def _flash(self, request: Request, setting: FlashSetting, source: Any, default_type: str) -> None:
        flash_type, message = resolve_flash(setting, source, default_type)
        if not isinstance(message, str):
            return
        sink = self._authenticator.flash_sink(request)
        if sink is None:
            raise ConfigurationError("A flash option is set but no flash message sink is configured")
        await maybe_await(sink(flash_type, message))

    def _add_message(self, request: Request, setting: MessageSetting, source: Any) -> None:
        message = resolve_message(setting, source)
        if not isinstance(message, str):
            return
        session = request.scope.get("session")
        if session is None:
            raise ConfigurationError("A message option is set but the request has no session")
        messages = session.get(SESSION_MESSAGES_KEY)
        if not isinstance(messages, list):
            messages = session[SESSION_MESSAGES_KEY] = []
        messages.append(message)
