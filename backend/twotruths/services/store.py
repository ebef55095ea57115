"""SQLAlchemy-backed statement store.

The game engine talks to persistence only through the methods of
``SqlStatementStore``; any object offering the same methods can stand in
for it (tests use an in-memory fake).
"""

import logging
import random
from typing import List, NamedTuple, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from twotruths import db
from twotruths.models import Guess, Statement, User

log = logging.getLogger(__name__)

POINTS_PER_CORRECT_GUESS = 100
STATEMENTS_PER_USER = 3


class StoreError(Exception):
    """Base class for collaborator failures surfaced to the transport."""


class StoreUnavailable(StoreError):
    pass


class StatementNotFound(StoreError):
    pass


class InvalidStatements(StoreError, ValueError):
    pass


class Opponent(NamedTuple):
    user: User
    statements: List[Statement]


class SqlStatementStore:
    def __init__(self, session=None, points_per_correct_guess=POINTS_PER_CORRECT_GUESS, rng=None):
        self.session = session or db.session
        self.points_per_correct_guess = points_per_correct_guess
        self.rng = rng or random

    def upsert_user(self, user_id: str, username: str) -> User:
        try:
            user = self.session.get(User, user_id)
            if user is None:
                user = User(id=user_id, username=username, total_points=0)
                log.info(f"[user-created] user={user_id}")
                self.session.add(user)
                try:
                    self.session.commit()
                except IntegrityError:
                    # Another request created the same user first
                    self.session.rollback()
                    user = self.session.get(User, user_id)
                    user.username = username
                    self.session.commit()
            elif user.username != username:
                user.username = username
                self.session.commit()
            return user
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailable(f"could not upsert user {user_id}") from exc

    def create_statements(self, user_id: str, truth1: str, truth2: str, lie: str) -> List[Statement]:
        texts = [t.strip() for t in (truth1, truth2, lie)]
        if not all(texts):
            raise InvalidStatements('statement texts must not be empty')
        try:
            existing = self.session.query(Statement).filter_by(user_id=user_id).count()
            if existing:
                log.warning(
                    f"[statements-recreate] user={user_id} already owns {existing} statements; "
                    f"adding another set"
                )
            created = [
                Statement(user_id=user_id, text=texts[0], is_lie=False),
                Statement(user_id=user_id, text=texts[1], is_lie=False),
                Statement(user_id=user_id, text=texts[2], is_lie=True),
            ]
            self.session.add_all(created)
            self.session.commit()
            return created
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailable(f"could not store statements for {user_id}") from exc

    def find_opponent_with_statements(self, excluding_user_id: str) -> Optional[Opponent]:
        try:
            eligible = (
                self.session.query(Statement.user_id)
                .filter(Statement.user_id != excluding_user_id)
                .group_by(Statement.user_id)
                .having(func.count(Statement.id) >= STATEMENTS_PER_USER)
                .order_by(Statement.user_id)
                .all()
            )
            if not eligible:
                return None
            opponent_id = self.rng.choice(eligible)[0]
            user = self.session.get(User, opponent_id)
            # Most recent complete set when a user has submitted more than once
            statements = (
                self.session.query(Statement)
                .filter_by(user_id=opponent_id)
                .order_by(Statement.created_at.desc(), Statement.id)
                .limit(STATEMENTS_PER_USER)
                .all()
            )
            return Opponent(user=user, statements=statements)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailable('could not select an opponent') from exc

    def record_guess(self, user_id: str, statement_id: str) -> Guess:
        try:
            statement = self.session.get(Statement, statement_id)
            if statement is None:
                raise StatementNotFound(f"statement {statement_id} not found")
            is_correct = bool(statement.is_lie)
            points = self.points_per_correct_guess if is_correct else 0
            guess = Guess(
                user_id=user_id,
                statement_id=statement_id,
                is_correct=is_correct,
                points_earned=points,
            )
            self.session.add(guess)
            if is_correct:
                # Server-side increment; the client-carried total is never written back
                self.session.execute(
                    update(User)
                    .where(User.id == user_id)
                    .values(total_points=User.total_points + points)
                )
            self.session.commit()
            return guess
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailable(f"could not record guess for {user_id}") from exc

    def top_users(self, limit: int = 10) -> List[User]:
        try:
            return (
                self.session.query(User)
                .order_by(User.total_points.desc(), User.created_at, User.id)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreUnavailable('could not load leaderboard') from exc
