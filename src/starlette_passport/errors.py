"""Exception hierarchy for starlette-passport."""

from __future__ import annotations

from collections.abc import Mapping

from starlette.exceptions import HTTPException

from starlette_passport._utils import status_text
from starlette_passport.constants import DEFAULT_FAILURE_STATUS


class PassportError(Exception):
    """Base class for errors raised by starlette-passport."""


class UnknownStrategyError(PassportError):
    """A strategy name could not be resolved through the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Unknown authentication strategy "{name}"')
        self.name = name


class ActionAlreadyTakenError(PassportError):
    """A strategy invoked a second action verb for the same attempt."""


class StrategyError(PassportError):
    """Internal error reported by a strategy through ``actions.error()``.

    Only used to wrap causes that are not already exceptions.
    """

    def __init__(self, cause: object) -> None:
        super().__init__(str(cause))
        self.cause = cause


class SerializationError(PassportError):
    """No serializer hook accepted the user."""


class DeserializationError(PassportError):
    """No deserializer hook accepted the serialized session user."""


class RegistryFrozenError(PassportError):
    """The strategy registry was modified after request handling began."""


class ConfigurationError(PassportError):
    """A dispatch option needs a collaborator the request does not provide."""


class AuthenticationError(HTTPException):
    """Raised instead of writing a failure response when ``fail_with_error`` is set.

    Carries the status code, its reason phrase and any ``WWW-Authenticate``
    challenges so Starlette exception handlers can render the response.

    Args:
        message: Reason phrase for the response body.
        status_code: HTTP status, defaults to 401.
        challenges: String challenges collected from the failed strategies.
    """

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        *,
        challenges: list[str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        status_code = status_code or DEFAULT_FAILURE_STATUS
        message = message or status_text(status_code)
        super().__init__(status_code=status_code, detail=message, headers=dict(headers) if headers else None)
        self.message = message
        self.challenges: list[str] = list(challenges or [])

    def __str__(self) -> str:
        return self.message
