"""Opaque state tokens: base64-encoded JSON snapshots.

Tokens are not signed. Authenticity of a frame interaction is the concern of
the hub's signed message envelope, not of this codec.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional, Union

from .state import GameState, GuessSnapshot, StatementSnapshot, UserSnapshot, View

log = logging.getLogger(__name__)


class Decoded:
    __slots__ = ('state',)

    def __init__(self, state: GameState):
        self.state = state

    def __repr__(self):
        return f"Decoded({self.state!r})"


class Fallback:
    """A token that could not be decoded; callers continue from ``welcome``."""
    __slots__ = ('reason',)

    def __init__(self, reason: str):
        self.reason = reason

    @property
    def state(self) -> GameState:
        return GameState(current_view=View.WELCOME)

    def __repr__(self):
        return f"Fallback({self.reason!r})"


DecodeResult = Union[Decoded, Fallback]


def encode_state(state: GameState) -> str:
    payload = json.dumps(state_to_dict(state), separators=(',', ':'), ensure_ascii=False)
    return base64.b64encode(payload.encode('utf-8')).decode('ascii')


def decode_state(token: Optional[str]) -> GameState:
    result = decode_state_result(token)
    if isinstance(result, Fallback):
        log.info(f"[codec-fallback] reason={result.reason}")
    return result.state


def decode_state_result(token: Optional[str]) -> DecodeResult:
    if not token or not isinstance(token, str):
        return Fallback('empty')
    try:
        raw = base64.b64decode(token.strip(), validate=True)
    except (binascii.Error, ValueError):
        return Fallback('base64')
    try:
        data = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, ValueError, RecursionError):
        return Fallback('json')
    try:
        return Decoded(state_from_dict(data))
    except (KeyError, TypeError, ValueError):
        return Fallback('shape')


def state_to_dict(state: GameState) -> Dict[str, Any]:
    data: Dict[str, Any] = {'currentView': state.current_view.value}
    if state.user is not None:
        data['user'] = {
            'id': state.user.id,
            'username': state.user.username,
            'totalPoints': state.user.total_points,
        }
    if state.statements is not None:
        data['statements'] = [
            {'id': s.id, 'userId': s.user_id, 'text': s.text, 'isLie': s.is_lie}
            for s in state.statements
        ]
    if state.current_statement_index is not None:
        data['currentStatementIndex'] = state.current_statement_index
    if state.last_guess is not None:
        g = state.last_guess
        data['lastGuess'] = {
            'id': g.id,
            'userId': g.user_id,
            'statementId': g.statement_id,
            'isCorrect': g.is_correct,
            'pointsEarned': g.points_earned,
        }
    return data


def state_from_dict(data: Any) -> GameState:
    """Build a snapshot from decoded JSON; raises on any shape mismatch."""
    _expect(data, dict)
    view = View(data['currentView'])

    user = None
    if data.get('user') is not None:
        u = _expect(data['user'], dict)
        total = _int(u.get('totalPoints', 0))
        if total < 0:
            raise ValueError('totalPoints must be non-negative')
        user = UserSnapshot(id=_str(u['id']), username=_str(u['username']), total_points=total)

    statements = None
    if data.get('statements') is not None:
        statements = tuple(
            StatementSnapshot(
                id=_str(s['id']),
                user_id=_str(s['userId']),
                text=_str(s['text']),
                is_lie=_bool(s['isLie']),
            )
            for s in (_expect(item, dict) for item in _expect(data['statements'], list))
        )

    index = None
    if data.get('currentStatementIndex') is not None:
        index = _int(data['currentStatementIndex'])

    last_guess = None
    if data.get('lastGuess') is not None:
        g = _expect(data['lastGuess'], dict)
        last_guess = GuessSnapshot(
            id=_str(g['id']),
            user_id=_str(g['userId']),
            statement_id=_str(g['statementId']),
            is_correct=_bool(g['isCorrect']),
            points_earned=_int(g['pointsEarned']),
        )

    return GameState(
        current_view=view,
        user=user,
        statements=statements,
        current_statement_index=index,
        last_guess=last_guess,
    )


def _expect(value, kind):
    if not isinstance(value, kind):
        raise TypeError(f"expected {kind.__name__}, got {type(value).__name__}")
    return value


def _str(value) -> str:
    return _expect(value, str)


def _bool(value) -> bool:
    return _expect(value, bool)


def _int(value) -> int:
    # bool is an int subclass; a boolean is never a valid count
    if isinstance(value, bool):
        raise TypeError('expected int, got bool')
    return _expect(value, int)
