"""AuthenticateOptions: per-dispatch configuration and message resolution."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from starlette_passport._types import FlashSetting, MessageSetting
from starlette_passport._utils import get_field


@dataclass(frozen=True)
class AuthenticateOptions:
    """Options recognised by the dispatcher, read-only for one dispatch.

    Attributes:
        session: Persist the logged-in user into the session.
        success_redirect: Redirect here after a successful login.
        success_return_to_or_redirect: Redirect to the session's stored
            return-to URL if present, otherwise here.
        success_message: ``True`` to store the strategy's info message in
            ``session["messages"]``, or a string override.
        success_flash: ``True``, a message, or ``{"type", "message"}`` to
            flash on success.
        failure_redirect: Redirect here once every strategy has failed.
        failure_message: Like ``success_message`` for the first failure.
        failure_flash: Like ``success_flash`` for the first failure.
        fail_with_error: Raise ``AuthenticationError`` instead of writing
            the failure response.
        assign_property: Store the user on ``request.state`` under this
            name and skip the session login.
        auth_info: Transform the strategy's info and expose it as
            ``request.auth``.
        extra: Strategy-specific options, passed through untouched.
    """

    session: bool = True
    success_redirect: str | None = None
    success_return_to_or_redirect: str | None = None
    success_message: MessageSetting = False
    success_flash: FlashSetting = False
    failure_redirect: str | None = None
    failure_message: MessageSetting = False
    failure_flash: FlashSetting = False
    fail_with_error: bool = False
    assign_property: str | None = None
    auth_info: bool = True
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("success_redirect", "success_return_to_or_redirect", "failure_redirect", "assign_property"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, str) or not value):
                raise ValueError(f"{name} must be a non-empty string, got {value!r}")
        for name in ("success_message", "failure_message"):
            value = getattr(self, name)
            if not isinstance(value, (bool, str)):
                raise ValueError(f"{name} must be a bool or a string, got {type(value).__name__}")
        for name in ("success_flash", "failure_flash"):
            value = getattr(self, name)
            if not isinstance(value, (bool, str, Mapping)):
                raise ValueError(f"{name} must be a bool, a string or a mapping, got {type(value).__name__}")
            if isinstance(value, Mapping):
                object.__setattr__(self, name, MappingProxyType(dict(value)))
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> AuthenticateOptions:
        """Build options, routing unrecognised keys into ``extra``."""
        known = {f.name for f in dataclasses.fields(cls)} - {"extra"}
        extra = dict(kwargs.pop("extra", None) or {})
        values: dict[str, Any] = {}
        for key, value in kwargs.items():
            if key in known:
                values[key] = value
            else:
                extra[key] = value
        return cls(extra=extra, **values)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a strategy-specific option."""
        return self.extra.get(key, default)


def resolve_flash(setting: FlashSetting, source: Any, default_type: str) -> tuple[str, Any]:
    """Resolve a flash option against a challenge or info value.

    A string setting is shorthand for ``{"type": default_type, "message": setting}``.
    The effective type is the setting's, then the source's, then ``default_type``;
    the message is the setting's, then the source's ``message``, then the source
    itself. The caller only records the message if it is a string.
    """
    flash: Mapping[str, Any]
    if isinstance(setting, str):
        flash = {"type": default_type, "message": setting}
    elif isinstance(setting, Mapping):
        flash = {**setting, "type": setting.get("type") or default_type}
    else:
        flash = {}

    flash_type = flash.get("type") or get_field(source, "type") or default_type
    message = flash.get("message") or get_field(source, "message") or source
    return flash_type, message


def resolve_message(setting: MessageSetting, source: Any) -> Any:
    """Resolve a session message option; ``True`` reads the source's message."""
    if isinstance(setting, bool):
        return get_field(source, "message") or source
    return setting
