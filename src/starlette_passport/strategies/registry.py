"""StrategyRegistry: named strategies, mutable during setup only."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from starlette_passport.errors import RegistryFrozenError
from starlette_passport.strategies.protocol import Strategy, is_strategy

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Maps strategy names to strategy instances.

    Built by the host application at startup. Once request handling begins
    the registry is frozen and further registration raises
    ``RegistryFrozenError``; lookups remain available.
    """

    def __init__(self) -> None:
        self._strategies: dict[str, Strategy] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the registry read-only. Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.debug("Strategy registry frozen with %d strategies: %s", len(self), self.names())

    def register(self, strategy: Strategy, name: str | None = None) -> None:
        """Register ``strategy`` under ``name`` or its own ``name`` attribute.

        Raises:
            ValueError: If no name is available or ``strategy`` has no
                ``authenticate`` method.
            RegistryFrozenError: If the registry is frozen.
        """
        self._check_mutable()
        if not is_strategy(strategy):
            raise ValueError(f"{strategy!r} does not implement authenticate()")
        name = name or getattr(strategy, "name", None)
        if not name:
            raise ValueError("Authentication strategies must have a name")
        if name in self._strategies:
            logger.debug("Replacing strategy %r", name)
        self._strategies[name] = strategy
        logger.debug("Registered strategy %r", name)

    def unregister(self, name: str) -> None:
        """Remove the strategy registered as ``name``, if any."""
        self._check_mutable()
        if self._strategies.pop(name, None) is not None:
            logger.debug("Unregistered strategy %r", name)

    def lookup(self, name: str) -> Strategy | None:
        return self._strategies.get(name)

    def names(self) -> list[str]:
        return sorted(self._strategies)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Strategies cannot be changed once request handling has started")

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def __len__(self) -> int:
        return len(self._strategies)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
