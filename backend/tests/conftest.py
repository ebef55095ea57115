import os
import re
import sys
import itertools
from types import SimpleNamespace
import pytest

# Ensure the backend root (containing the `twotruths` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from twotruths import create_app, db
from twotruths.services import Opponent, StatementNotFound


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PUBLIC_HOST = 'http://frames.test'
    POINTS_PER_CORRECT_GUESS = 100
    LEADERBOARD_SIZE = 10
    ALLOW_UNSIGNED_FRAME_MESSAGES = True
    FRAME_MESSAGE_VERIFIER = None
    CORS_ORIGINS = ['*']


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import twotruths.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


class FakeStore:
    """In-memory stand-in for SqlStatementStore."""

    def __init__(self):
        self.users = {}
        self.statements = []
        self.guesses = []
        self._ids = itertools.count(1)
        self.calls = []

    def upsert_user(self, user_id, username):
        self.calls.append(('upsert_user', user_id, username))
        user = self.users.get(user_id)
        if user is None:
            user = SimpleNamespace(id=user_id, username=username, total_points=0)
            self.users[user_id] = user
        else:
            user.username = username
        return user

    def create_statements(self, user_id, truth1, truth2, lie):
        self.calls.append(('create_statements', user_id, truth1, truth2, lie))
        for text, is_lie in ((truth1, False), (truth2, False), (lie, True)):
            self.statements.append(
                SimpleNamespace(id=f"s{next(self._ids)}", user_id=user_id, text=text, is_lie=is_lie)
            )

    def add_player(self, user_id, username, texts, total_points=0):
        self.users[user_id] = SimpleNamespace(id=user_id, username=username, total_points=total_points)
        self.create_statements(user_id, *texts)
        self.calls.clear()
        return [s for s in self.statements if s.user_id == user_id]

    def find_opponent_with_statements(self, excluding_user_id):
        self.calls.append(('find_opponent_with_statements', excluding_user_id))
        for user_id, user in self.users.items():
            owned = [s for s in self.statements if s.user_id == user_id]
            if user_id != excluding_user_id and len(owned) >= 3:
                return Opponent(user=user, statements=owned[-3:])
        return None

    def record_guess(self, user_id, statement_id):
        self.calls.append(('record_guess', user_id, statement_id))
        statement = next((s for s in self.statements if s.id == statement_id), None)
        if statement is None:
            raise StatementNotFound(statement_id)
        points = 100 if statement.is_lie else 0
        guess = SimpleNamespace(
            id=f"g{next(self._ids)}",
            user_id=user_id,
            statement_id=statement_id,
            is_correct=statement.is_lie,
            points_earned=points,
        )
        self.guesses.append(guess)
        if user_id in self.users:
            self.users[user_id].total_points += points
        return guess

    def top_users(self, limit=10):
        ranked = sorted(self.users.values(), key=lambda u: -u.total_points)
        return ranked[:limit]


@pytest.fixture()
def fake_store():
    return FakeStore()


META_RE = re.compile(r'<meta property="([^"]+)" content="([^"]*)"')


def frame_meta(html):
    """Map of meta property -> content in a rendered frame document."""
    return dict(META_RE.findall(html))


@pytest.fixture()
def parse_frame():
    return frame_meta
