"""Game core: state snapshots, token codec, state machine and view content.

Nothing in this package knows about HTTP. Routes decode a token, call
``advance`` with the store and render what ``present`` returns.
"""

from .codec import decode_state, decode_state_result, encode_state
from .engine import advance
from .presentation import FramePrompt, image_lines, present
from .state import FrameAction, GameState, Identity, View

__all__ = [
    'FrameAction',
    'FramePrompt',
    'GameState',
    'Identity',
    'View',
    'advance',
    'decode_state',
    'decode_state_result',
    'encode_state',
    'image_lines',
    'present',
]
