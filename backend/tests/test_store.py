import os
from concurrent.futures import ThreadPoolExecutor
import pytest

from conftest import TestConfig
from twotruths import create_app, db
from twotruths.game import FrameAction, GameState, View, advance
from twotruths.game.state import statement_snapshot, user_snapshot
from twotruths.models import Guess, Statement, User
from twotruths.services import InvalidStatements, SqlStatementStore, StatementNotFound


@pytest.fixture()
def store(flask_app):
    return SqlStatementStore(db.session)


def _lie(statements):
    return next(s for s in statements if s.is_lie)


def test_upsert_creates_then_refreshes_username(store):
    created = store.upsert_user('12345', 'testuser')
    assert created.total_points == 0
    refreshed = store.upsert_user('12345', 'renamed')
    assert refreshed.id == '12345'
    assert refreshed.username == 'renamed'
    assert User.query.count() == 1


def test_create_statements_marks_only_the_third_as_lie(store):
    store.upsert_user('u1', 'alice')
    store.create_statements('u1', ' truth one ', 'truth two', 'the lie')
    rows = {s.text: s.is_lie for s in Statement.query.filter_by(user_id='u1')}
    assert rows == {'truth one': False, 'truth two': False, 'the lie': True}


def test_create_statements_rejects_blank_text(store):
    store.upsert_user('u1', 'alice')
    with pytest.raises(InvalidStatements):
        store.create_statements('u1', 'a', '   ', 'c')
    assert Statement.query.count() == 0


def test_opponent_needs_three_statements(store):
    store.upsert_user('u1', 'alice')
    store.upsert_user('u2', 'bob')
    assert store.find_opponent_with_statements('u1') is None

    db.session.add_all([
        Statement(user_id='u2', text='one', is_lie=False),
        Statement(user_id='u2', text='two', is_lie=True),
    ])
    db.session.commit()
    assert store.find_opponent_with_statements('u1') is None

    store.upsert_user('u3', 'cara')
    store.create_statements('u3', 'x', 'y', 'z')
    for _ in range(20):
        opponent = store.find_opponent_with_statements('u1')
        assert opponent.user.id == 'u3'
        assert len(opponent.statements) == 3
        assert sum(1 for s in opponent.statements if s.is_lie) == 1


def test_opponent_excludes_requesting_user(store):
    store.upsert_user('u1', 'alice')
    store.create_statements('u1', 'a', 'b', 'c')
    assert store.find_opponent_with_statements('u1') is None


def test_opponent_returns_latest_set_after_resubmission(store):
    store.upsert_user('u2', 'bob')
    store.create_statements('u2', 'old1', 'old2', 'old3')
    store.create_statements('u2', 'new1', 'new2', 'new3')
    assert Statement.query.filter_by(user_id='u2').count() == 6
    opponent = store.find_opponent_with_statements('u1')
    assert sorted(s.text for s in opponent.statements) == ['new1', 'new2', 'new3']


def test_record_correct_guess_awards_points(store):
    store.upsert_user('u1', 'alice')
    store.upsert_user('u2', 'bob')
    statements = store.create_statements('u2', 'a', 'b', 'c')
    guess = store.record_guess('u1', _lie(statements).id)
    assert guess.is_correct is True
    assert guess.points_earned == 100
    assert db.session.get(User, 'u1').total_points == 100


def test_record_wrong_guess_leaves_total(store):
    store.upsert_user('u1', 'alice')
    store.upsert_user('u2', 'bob')
    statements = store.create_statements('u2', 'a', 'b', 'c')
    guess = store.record_guess('u1', statements[0].id)
    assert guess.is_correct is False
    assert guess.points_earned == 0
    assert db.session.get(User, 'u1').total_points == 0
    assert Guess.query.count() == 1


def test_record_guess_unknown_statement(store):
    store.upsert_user('u1', 'alice')
    with pytest.raises(StatementNotFound):
        store.record_guess('u1', 'missing')
    assert Guess.query.count() == 0


def test_top_users_orders_by_points_and_limits(store):
    for i, points in enumerate([300, 0, 500, 300, 100]):
        store.upsert_user(f"u{i}", f"player{i}")
        db.session.get(User, f"u{i}").total_points = points
    db.session.commit()
    top = store.top_users(3)
    assert [u.total_points for u in top] == [500, 300, 300]
    assert [u.id for u in top][1:] == ['u0', 'u3']


def test_top_users_empty(store):
    assert store.top_users(10) == []


def test_stale_snapshots_do_not_lose_increments(store):
    """Two rounds started from the same client snapshot both count."""
    user = user_snapshot(store.upsert_user('u1', 'alice'))
    store.upsert_user('u2', 'bob')
    statements = store.create_statements('u2', 'a', 'b', 'c')
    state = GameState(
        current_view=View.PLAY,
        user=user,
        statements=tuple(statement_snapshot(s) for s in statements),
        current_statement_index=0,
    )
    first = advance(state, FrameAction(button_index=3), store)
    second = advance(state, FrameAction(button_index=3), store)
    assert first.user.total_points == second.user.total_points == 100
    assert db.session.get(User, 'u1').total_points == 200


class FileDatabaseConfig(TestConfig):
    SQLALCHEMY_ENGINE_OPTIONS = {'connect_args': {'timeout': 30, 'check_same_thread': False}}


def test_concurrent_correct_guesses_all_count(tmp_path):
    FileDatabaseConfig.SQLALCHEMY_DATABASE_URI = 'sqlite:///' + os.path.join(str(tmp_path), 'race.db')
    application = create_app(FileDatabaseConfig)
    with application.app_context():
        db.create_all()
        setup = SqlStatementStore(db.session)
        setup.upsert_user('u1', 'alice')
        setup.upsert_user('u2', 'bob')
        lie_id = _lie(setup.create_statements('u2', 'a', 'b', 'c')).id
        db.session.remove()

    def guess(_):
        with application.app_context():
            try:
                return SqlStatementStore(db.session).record_guess('u1', lie_id).is_correct
            finally:
                db.session.remove()

    rounds = 8
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(guess, range(rounds)))

    with application.app_context():
        assert all(results)
        assert db.session.get(User, 'u1').total_points == 100 * rounds
        assert Guess.query.count() == rounds
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
