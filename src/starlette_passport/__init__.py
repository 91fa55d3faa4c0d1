"""starlette-passport: strategy-chain authentication for Starlette and ASGI apps."""

from __future__ import annotations

import logging

from starlette_passport.authenticator import Authenticator
from starlette_passport.constants import DEFAULT_SESSION_KEY, DEFAULT_USER_PROPERTY, PASS
from starlette_passport.errors import (
    ActionAlreadyTakenError,
    AuthenticationError,
    ConfigurationError,
    DeserializationError,
    PassportError,
    RegistryFrozenError,
    SerializationError,
    StrategyError,
    UnknownStrategyError,
)
from starlette_passport.middleware import AuthenticateHandler, AuthenticateMiddleware
from starlette_passport.options import AuthenticateOptions
from starlette_passport.session import SessionManager
from starlette_passport.strategies import (
    SessionStrategy,
    Strategy,
    StrategyActions,
    StrategyRegistry,
)

__all__ = [
    # Public API
    "Authenticator",
    "AuthenticateOptions",
    # Building blocks
    "AuthenticateHandler",
    "AuthenticateMiddleware",
    "SessionManager",
    "StrategyRegistry",
    # Strategy contract
    "Strategy",
    "StrategyActions",
    "SessionStrategy",
    # Errors
    "PassportError",
    "AuthenticationError",
    "UnknownStrategyError",
    "ActionAlreadyTakenError",
    "StrategyError",
    "SerializationError",
    "DeserializationError",
    "RegistryFrozenError",
    "ConfigurationError",
    # Constants
    "PASS",
    "DEFAULT_SESSION_KEY",
    "DEFAULT_USER_PROPERTY",
    # Logging
    "set_log_level",
]

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def set_log_level(log_level: str) -> None:
    """Set the level of the starlette_passport logger (e.g. "DEBUG", "INFO")."""
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if log_level.upper() not in valid_levels:
        raise ValueError(f"Unknown log level: {log_level!r}. Valid: {sorted(valid_levels)}")
    logger.setLevel(getattr(logging, log_level.upper()))
