"""Tests for SessionManager login/logout."""

from __future__ import annotations

from typing import Any

import pytest

from starlette_passport.session import SessionManager
from tests.conftest import make_request


def _serialize(user: Any, request: Any) -> Any:
    return user["id"]


class TestLogin:
    @pytest.mark.asyncio
    async def test_stores_serialized_user(self):
        manager = SessionManager(_serialize)
        request = make_request(session={})
        await manager.login(request, {"id": 42, "name": "ada"})
        assert request.scope["session"] == {"passport": {"user": 42}}
        assert manager.serialized_user(request) == 42

    @pytest.mark.asyncio
    async def test_creates_session_when_absent(self):
        manager = SessionManager(_serialize)
        request = make_request()
        await manager.login(request, {"id": 1})
        assert request.scope["session"] == {"passport": {"user": 1}}

    @pytest.mark.asyncio
    async def test_keeps_sibling_data(self):
        manager = SessionManager(_serialize)
        session = {"cart": [3], "passport": {"csrf": "abc", "user": 9}}
        request = make_request(session=session)
        await manager.login(request, {"id": 10})
        assert session == {"cart": [3], "passport": {"csrf": "abc", "user": 10}}

    @pytest.mark.asyncio
    async def test_custom_key(self):
        manager = SessionManager(_serialize, key="auth")
        request = make_request(session={})
        await manager.login(request, {"id": 5})
        assert request.scope["session"] == {"auth": {"user": 5}}
        assert manager.key == "auth"

    @pytest.mark.asyncio
    async def test_async_serializer(self):
        async def serialize(user: Any, request: Any) -> Any:
            return f"user:{user['id']}"

        manager = SessionManager(serialize)
        request = make_request(session={})
        await manager.login(request, {"id": 3})
        assert request.scope["session"]["passport"]["user"] == "user:3"

    @pytest.mark.asyncio
    async def test_serializer_error_propagates_and_leaves_session(self):
        def serialize(user: Any, request: Any) -> Any:
            raise LookupError("no id")

        manager = SessionManager(serialize)
        session = {"passport": {"user": 1}}
        request = make_request(session=session)
        with pytest.raises(LookupError, match="no id"):
            await manager.login(request, {})
        assert session == {"passport": {"user": 1}}

    @pytest.mark.asyncio
    async def test_serializer_receives_request(self):
        seen: list[Any] = []

        def serialize(user: Any, request: Any) -> Any:
            seen.append(request)
            return 1

        manager = SessionManager(serialize)
        request = make_request(session={})
        await manager.login(request, {"id": 1})
        assert seen == [request]

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            SessionManager(_serialize, key="")


class TestLogout:
    @pytest.mark.asyncio
    async def test_removes_only_user(self):
        manager = SessionManager(_serialize)
        session = {"theme": "dark", "passport": {"user": 42, "nonce": "n"}}
        request = make_request(session=session)
        await manager.logout(request)
        assert session == {"theme": "dark", "passport": {"nonce": "n"}}

    @pytest.mark.asyncio
    async def test_twice_is_noop(self):
        manager = SessionManager(_serialize)
        session = {"passport": {"user": 42}}
        request = make_request(session=session)
        await manager.logout(request)
        await manager.logout(request)
        assert session == {"passport": {}}

    @pytest.mark.asyncio
    async def test_without_session(self):
        manager = SessionManager(_serialize)
        request = make_request()
        await manager.logout(request)
        assert "session" not in request.scope
        assert manager.serialized_user(request) is None
