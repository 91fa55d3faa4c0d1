"""Internal type definitions and type aliases for starlette-passport."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Union

from starlette.requests import Request
from starlette.responses import Response

# A strategy instance or the name it was registered under.
StrategyRef = Any

# (user, request) -> serialized form, or PASS
SerializerFn = Callable[[Any, Request], Union[Any, Awaitable[Any]]]

# (serialized, request) -> user, None/False to invalidate, or PASS
DeserializerFn = Callable[[Any, Request], Union[Any, Awaitable[Any]]]

# (info, request) -> transformed info, or PASS
InfoTransformerFn = Callable[[Any, Request], Union[Any, Awaitable[Any]]]

# (request, flash_type, message) -> None
FlashFn = Callable[[Request, str, str], Union[None, Awaitable[None]]]

# (request, error, user, info, status) -> Response or None to continue
AuthenticateCallback = Callable[
    [Request, Union[BaseException, None], Any, Any, Any],
    Union[Response, None, Awaitable[Union[Response, None]]],
]

# failure_flash / success_flash accept True, a message, or {"type", "message"}
FlashSetting = Union[bool, str, Mapping[str, Any]]

# failure_message / success_message accept True or a message override
MessageSetting = Union[bool, str]
