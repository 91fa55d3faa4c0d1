"""Strategy contract, registry and the built-in session strategy."""

from starlette_passport.strategies.actions import (
    Error,
    Failure,
    Outcome,
    Pass,
    Redirect,
    StrategyActions,
    Success,
)
from starlette_passport.strategies.protocol import Strategy, is_strategy
from starlette_passport.strategies.registry import StrategyRegistry
from starlette_passport.strategies.session import SessionStrategy

__all__ = [
    "Strategy",
    "StrategyActions",
    "StrategyRegistry",
    "SessionStrategy",
    "Outcome",
    "Success",
    "Failure",
    "Redirect",
    "Pass",
    "Error",
    "is_strategy",
]
