"""Frame state machine.

``advance`` maps (snapshot, action) to the next snapshot, calling the
statement store for the reads and writes a transition needs. Actions that
make no sense for the current view leave the snapshot untouched.
"""

import logging
import random
from dataclasses import replace
from typing import Callable, Dict

from .state import (
    FrameAction,
    GameState,
    View,
    guess_snapshot,
    statement_snapshot,
    user_snapshot,
)

log = logging.getLogger(__name__)

STATEMENT_SEPARATOR = '|'
GUESS_BUTTONS = (1, 2, 3)
LEADERBOARD_BUTTON = 4

_system_random = random.SystemRandom()


def advance(state: GameState, action: FrameAction, store, rng=None) -> GameState:
    handler = _HANDLERS.get(state.current_view, _unknown)
    next_state = handler(state, action, store, rng or _system_random)
    if next_state.current_view != state.current_view:
        log.info(
            f"[transition] {state.current_view.value} -> {next_state.current_view.value} "
            f"button={action.button_index}"
        )
    elif next_state is state:
        log.debug(f"[noop] view={state.current_view.value} button={action.button_index}")
    return next_state


def _welcome(state, action, store, rng):
    return replace(state, current_view=View.AUTH)


def _auth(state, action, store, rng):
    identity = action.identity
    if identity is None:
        return replace(state, current_view=View.WELCOME)
    user = store.upsert_user(identity.user_id, identity.username or f"User_{identity.user_id}")
    return replace(state, current_view=View.CREATE, user=user_snapshot(user))


def parse_statements(text):
    """Split ``truth|truth|lie`` input; returns None unless it has 3 non-empty parts."""
    parts = [p.strip() for p in text.split(STATEMENT_SEPARATOR)]
    if len(parts) != 3 or not all(parts):
        return None
    return parts


def _create(state, action, store, rng):
    button = action.button_index
    if button == 1 and action.input_text:
        parts = parse_statements(action.input_text)
        if parts is None or state.user is None:
            log.info(f"[create-rejected] user={state.user.id if state.user else None}")
            return state
        store.create_statements(state.user.id, *parts)
        return replace(
            state,
            current_view=View.PLAY,
            statements=None,
            current_statement_index=None,
        )
    if button == 2:
        return replace(state, current_view=View.PLAY)
    if button == 3:
        return replace(state, current_view=View.LEADERBOARD)
    return state


def _play(state, action, store, rng):
    if state.user is None:
        return replace(state, current_view=View.WELCOME)

    if not state.statements:
        return _load_opponent(state, store, rng)

    button = action.button_index
    if button in GUESS_BUTTONS:
        if len(state.statements) < 3:
            return state
        target = state.statements[button - 1]
        guess = store.record_guess(state.user.id, target.id)
        snapshot = guess_snapshot(guess)
        user = state.user
        if snapshot.is_correct:
            user = replace(user, total_points=user.total_points + snapshot.points_earned)
        return replace(state, current_view=View.RESULT, user=user, last_guess=snapshot)
    if button == LEADERBOARD_BUTTON:
        return replace(state, current_view=View.LEADERBOARD)
    return state


def _load_opponent(state, store, rng):
    opponent = store.find_opponent_with_statements(state.user.id)
    if opponent is None:
        log.info(f"[no-opponent] user={state.user.id}")
        return replace(state, current_view=View.CREATE)
    statements = [statement_snapshot(s) for s in opponent.statements]
    rng.shuffle(statements)
    return replace(state, statements=tuple(statements), current_statement_index=0)


def _new_round(state):
    return replace(
        state,
        current_view=View.PLAY,
        statements=None,
        current_statement_index=None,
        last_guess=None,
    )


def _result(state, action, store, rng):
    button = action.button_index
    if button == 1:
        return _new_round(state)
    if button == 2:
        return replace(state, current_view=View.CREATE)
    if button == 3:
        return replace(state, current_view=View.LEADERBOARD)
    return state


def _leaderboard(state, action, store, rng):
    button = action.button_index
    if button == 1:
        return _new_round(state)
    if button == 2:
        return replace(state, current_view=View.CREATE)
    return state


def _unknown(state, action, store, rng):
    return replace(state, current_view=View.WELCOME)


_HANDLERS: Dict[View, Callable] = {
    View.WELCOME: _welcome,
    View.AUTH: _auth,
    View.CREATE: _create,
    View.PLAY: _play,
    View.RESULT: _result,
    View.LEADERBOARD: _leaderboard,
}
