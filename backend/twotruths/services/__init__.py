"""Persistence services used by the game engine."""

from .store import (
    InvalidStatements,
    Opponent,
    SqlStatementStore,
    StatementNotFound,
    StoreError,
    StoreUnavailable,
)
