"""Tests for StrategyRegistry."""

from __future__ import annotations

import pytest

from starlette_passport.errors import RegistryFrozenError
from starlette_passport.strategies.registry import StrategyRegistry
from tests.conftest import StubStrategy, failing


class TestRegistration:
    def test_register_uses_strategy_name(self):
        registry = StrategyRegistry()
        strategy = failing("basic")
        registry.register(strategy)
        assert registry.lookup("basic") is strategy
        assert "basic" in registry
        assert len(registry) == 1

    def test_register_with_explicit_name(self):
        registry = StrategyRegistry()
        strategy = failing("basic")
        registry.register(strategy, "api-basic")
        assert registry.lookup("api-basic") is strategy
        assert registry.lookup("basic") is None

    def test_register_replaces_existing(self):
        registry = StrategyRegistry()
        first, second = failing("basic"), failing("basic")
        registry.register(first)
        registry.register(second)
        assert registry.lookup("basic") is second

    def test_register_requires_name(self):
        registry = StrategyRegistry()
        strategy = StubStrategy("", "pass_")
        with pytest.raises(ValueError, match="must have a name"):
            registry.register(strategy)

    def test_register_requires_authenticate(self):
        registry = StrategyRegistry()
        with pytest.raises(ValueError, match="authenticate"):
            registry.register(object(), "bogus")  # type: ignore[arg-type]

    def test_unregister(self):
        registry = StrategyRegistry()
        registry.register(failing("basic"))
        registry.unregister("basic")
        assert registry.lookup("basic") is None
        registry.unregister("basic")

    def test_names_sorted(self):
        registry = StrategyRegistry()
        registry.register(failing("oauth"))
        registry.register(failing("basic"))
        assert registry.names() == ["basic", "oauth"]
        assert list(registry) == ["basic", "oauth"]


class TestFreeze:
    def test_frozen_registry_rejects_changes(self):
        registry = StrategyRegistry()
        registry.register(failing("basic"))
        registry.freeze()
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register(failing("bearer"))
        with pytest.raises(RegistryFrozenError):
            registry.unregister("basic")

    def test_lookup_still_works_after_freeze(self):
        registry = StrategyRegistry()
        strategy = failing("basic")
        registry.register(strategy)
        registry.freeze()
        registry.freeze()
        assert registry.lookup("basic") is strategy
