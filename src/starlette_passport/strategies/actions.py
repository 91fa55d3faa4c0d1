"""Per-attempt action verbs and the outcome records they produce."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Union

from starlette_passport._utils import is_status_code
from starlette_passport.constants import DEFAULT_REDIRECT_STATUS
from starlette_passport.errors import ActionAlreadyTakenError, StrategyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    user: Any
    info: Any = None


@dataclass(frozen=True)
class Failure:
    challenge: Any = None
    status: int | None = None


@dataclass(frozen=True)
class Redirect:
    url: str
    status: int = DEFAULT_REDIRECT_STATUS


@dataclass(frozen=True)
class Pass:
    """No decision; the pipeline continues."""


@dataclass(frozen=True)
class Error:
    cause: BaseException


Outcome = Union[Success, Failure, Redirect, Pass, Error]


class StrategyActions:
    """The five verbs a strategy may call during one ``authenticate`` attempt.

    Exactly one verb may be called; the first call settles the attempt and
    any further call raises ``ActionAlreadyTakenError``.
    """

    def __init__(self, strategy: str = "") -> None:
        self._strategy = strategy
        self._outcome: asyncio.Future[Outcome] = asyncio.get_running_loop().create_future()

    @property
    def done(self) -> bool:
        return self._outcome.done()

    def success(self, user: Any, info: Any = None) -> None:
        """Authenticate ``user``, with optional ``info`` from the strategy."""
        self._settle(Success(user, info))

    def fail(self, challenge: Any = None, status: int | None = None) -> None:
        """Fail this attempt; a numeric first argument is taken as the status."""
        if is_status_code(challenge):
            status = int(challenge)
            challenge = None
        self._settle(Failure(challenge, status))

    def redirect(self, url: str, status: int = DEFAULT_REDIRECT_STATUS) -> None:
        """Send the user agent to ``url``, typically a third-party provider."""
        self._settle(Redirect(url, status or DEFAULT_REDIRECT_STATUS))

    def pass_(self) -> None:
        """Continue the pipeline without a success or failure decision."""
        self._settle(Pass())

    def error(self, cause: Any) -> None:
        """Report an internal error, e.g. an unavailable user directory."""
        if not isinstance(cause, BaseException):
            cause = StrategyError(cause)
        self._settle(Error(cause))

    async def wait(self) -> Outcome:
        """Wait until the strategy has called a verb."""
        return await self._outcome

    def _settle(self, outcome: Outcome) -> None:
        if self._outcome.done():
            raise ActionAlreadyTakenError(
                f"Strategy {self._strategy or '<anonymous>'!r} already resolved with "
                f"{type(self._outcome.result()).__name__}; cannot {type(outcome).__name__.lower()}"
            )
        logger.debug("Strategy %r resolved with %s", self._strategy, type(outcome).__name__)
        self._outcome.set_result(outcome)
