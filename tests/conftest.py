"""Shared test fixtures for starlette-passport tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from starlette.requests import Request

from starlette_passport import Authenticator

# ---------------------------------------------------------------------------
# Stub strategies.
# Each one records how often it was invoked and calls a single verb with
# fixed arguments, either inline or from a later event-loop callback.
# ---------------------------------------------------------------------------


class StubStrategy:
    """Calls ``actions.<verb>(*args)`` once per attempt."""

    def __init__(self, name: str, verb: str, *args: Any, defer: bool = False) -> None:
        self.name = name
        self.verb = verb
        self.args = args
        self.defer = defer
        self.calls = 0
        self.seen_options: list[Any] = []

    async def authenticate(self, request: Request, actions: Any, options: Any) -> None:
        self.calls += 1
        self.seen_options.append(options)
        verb = getattr(actions, self.verb)
        if self.defer:
            asyncio.get_running_loop().call_soon(verb, *self.args)
        else:
            verb(*self.args)


class SyncStrategy:
    """A strategy with a plain (non-async) authenticate method."""

    name = "sync"

    def __init__(self, user: Any) -> None:
        self.user = user

    def authenticate(self, request: Request, actions: Any, options: Any) -> None:
        actions.success(self.user)


class RaisingStrategy:
    """Raises before choosing a verb."""

    name = "raising"

    async def authenticate(self, request: Request, actions: Any, options: Any) -> None:
        raise RuntimeError("directory unavailable")


class DoubleActionStrategy:
    """Buggy strategy that calls two verbs."""

    name = "double"

    def __init__(self) -> None:
        self.second_error: Exception | None = None

    async def authenticate(self, request: Request, actions: Any, options: Any) -> None:
        actions.fail("first")
        try:
            actions.success({"id": 1})
        except Exception as exc:
            self.second_error = exc


def failing(name: str, challenge: Any = None, status: int | None = None, **kw: Any) -> StubStrategy:
    args: tuple[Any, ...] = ()
    if challenge is not None or status is not None:
        args = (challenge, status)
    return StubStrategy(name, "fail", *args, **kw)


def succeeding(name: str, user: Any, info: Any = None, **kw: Any) -> StubStrategy:
    return StubStrategy(name, "success", user, info, **kw)


class SavingSession(dict):
    """Session mapping with an async ``save`` that records calls."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.saved = 0

    async def save(self) -> None:
        await asyncio.sleep(0)
        self.saved += 1


def make_request(
    session: dict[str, Any] | None = None,
    *,
    path: str = "/login",
    method: str = "POST",
    headers: list[tuple[bytes, bytes]] | None = None,
) -> Request:
    scope: dict[str, Any] = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": headers or [],
    }
    if session is not None:
        scope["session"] = session
    return Request(scope)


class FlashRecorder:
    """Flash sink recording ``(type, message)`` pairs."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def __call__(self, request: Request, flash_type: str, message: str) -> None:
        self.messages.append((flash_type, message))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def flash() -> FlashRecorder:
    return FlashRecorder()


@pytest.fixture
def authenticator(flash: FlashRecorder) -> Authenticator:
    """Authenticator serializing users by their ``id`` key."""
    auth = Authenticator(flash=flash)

    @auth.serializer
    def serialize(user: Any, request: Request) -> Any:
        return user["id"]

    @auth.deserializer
    async def deserialize(serialized: Any, request: Request) -> Any:
        if serialized == "gone":
            return None
        return {"id": serialized}

    return auth
