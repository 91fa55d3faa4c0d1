"""Internal utility functions for starlette-passport."""

from __future__ import annotations

import inspect
import numbers
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def status_text(status_code: int) -> str:
    """Return the standard reason phrase for an HTTP status code."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return str(status_code)


def get_field(source: Any, name: str) -> Any:
    """Read ``name`` from a mapping key or an attribute, ``None`` if absent."""
    if isinstance(source, Mapping):
        return source.get(name)
    if isinstance(source, str):
        return None
    return getattr(source, name, None)


def is_status_code(value: Any) -> bool:
    """True for real numbers that are not booleans."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
