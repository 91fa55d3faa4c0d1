"""Tests for logging across starlette-passport components."""

from __future__ import annotations

import logging

import pytest

import starlette_passport
from starlette_passport.errors import UnknownStrategyError
from tests.conftest import failing, make_request, succeeding


class TestDispatchLogging:
    @pytest.mark.asyncio
    async def test_unknown_strategy_warns(self, authenticator, caplog):
        with caplog.at_level(logging.WARNING, logger="starlette_passport"):
            with pytest.raises(UnknownStrategyError):
                await authenticator.authenticate("nope")(make_request())
        assert "Unknown authentication strategy 'nope'" in caplog.text

    @pytest.mark.asyncio
    async def test_attempts_logged_at_debug(self, authenticator, caplog):
        with caplog.at_level(logging.DEBUG, logger="starlette_passport"):
            await authenticator.authenticate([failing("basic", "Basic", 401), failing("bearer")])(make_request())
        assert "Attempting strategy 'basic' (1/2)" in caplog.text
        assert "Attempting strategy 'bearer' (2/2)" in caplog.text
        assert "Strategy 'basic' failed (status=401)" in caplog.text
        assert "All 2 strategies failed; responding 401" in caplog.text

    @pytest.mark.asyncio
    async def test_login_logs_type_not_identity(self, authenticator, caplog):
        with caplog.at_level(logging.INFO, logger="starlette_passport"):
            await authenticator.authenticate(succeeding("a", {"id": 42, "email": "ada@example.com"}))(
                make_request(session={})
            )
        assert "Logged in dict (session=True)" in caplog.text
        assert "ada@example.com" not in caplog.text

    @pytest.mark.asyncio
    async def test_logout_logged(self, authenticator, caplog):
        with caplog.at_level(logging.INFO, logger="starlette_passport"):
            await authenticator.logout(make_request(session={}))
        assert "Logged out" in caplog.text


class TestSetLogLevel:
    def test_sets_package_level(self):
        package_logger = logging.getLogger("starlette_passport")
        previous = package_logger.level
        try:
            starlette_passport.set_log_level("debug")
            assert package_logger.level == logging.DEBUG
        finally:
            package_logger.setLevel(previous)

    def test_rejects_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            starlette_passport.set_log_level("LOUD")
