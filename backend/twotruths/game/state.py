"""Client-carried game state.

Every frame round trip carries one ``GameState`` snapshot. Snapshots are
frozen: the engine produces a new one per transition and never keeps
anything between requests.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class View(str, Enum):
    WELCOME = 'welcome'
    AUTH = 'auth'
    CREATE = 'create'
    PLAY = 'play'
    RESULT = 'result'
    LEADERBOARD = 'leaderboard'


@dataclass(frozen=True)
class UserSnapshot:
    id: str
    username: str
    total_points: int = 0


@dataclass(frozen=True)
class StatementSnapshot:
    id: str
    user_id: str
    text: str
    is_lie: bool


@dataclass(frozen=True)
class GuessSnapshot:
    id: str
    user_id: str
    statement_id: str
    is_correct: bool
    points_earned: int


@dataclass(frozen=True)
class GameState:
    current_view: View = View.WELCOME
    user: Optional[UserSnapshot] = None
    # Opponent statements, already shuffled for this round
    statements: Optional[Tuple[StatementSnapshot, ...]] = None
    current_statement_index: Optional[int] = None
    last_guess: Optional[GuessSnapshot] = None


@dataclass(frozen=True)
class Identity:
    """A verified user identity handed over by the transport."""
    user_id: str
    username: Optional[str] = None


@dataclass(frozen=True)
class FrameAction:
    button_index: int = 1
    input_text: Optional[str] = None
    identity: Optional[Identity] = None


def user_snapshot(user) -> UserSnapshot:
    return UserSnapshot(id=user.id, username=user.username, total_points=int(user.total_points or 0))


def statement_snapshot(statement) -> StatementSnapshot:
    return StatementSnapshot(
        id=statement.id,
        user_id=statement.user_id,
        text=statement.text,
        is_lie=bool(statement.is_lie),
    )


def guess_snapshot(guess) -> GuessSnapshot:
    return GuessSnapshot(
        id=guess.id,
        user_id=guess.user_id,
        statement_id=guess.statement_id,
        is_correct=bool(guess.is_correct),
        points_earned=int(guess.points_earned or 0),
    )
