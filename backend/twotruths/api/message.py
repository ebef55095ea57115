"""Turn a frame POST body into a ``FrameAction`` plus the incoming state token.

Two body shapes are understood:

- the hub format ``{"untrustedData": {...}, "trustedData": {"messageBytes": ...}}``,
  whose identity is only trusted once ``FRAME_MESSAGE_VERIFIER`` vouches for it;
- the simplified ``{"isValid": ..., "button": ..., "fid": ...}`` body used for
  local testing, accepted only when ``ALLOW_UNSIGNED_FRAME_MESSAGES`` is set.
"""

from typing import NamedTuple, Optional

from twotruths.game.state import FrameAction, Identity


class InvalidFrameMessage(Exception):
    pass


class FrameMessage(NamedTuple):
    action: FrameAction
    state_token: Optional[str]


def parse_frame_message(body, verifier=None, allow_unsigned=False) -> FrameMessage:
    if not isinstance(body, dict):
        raise InvalidFrameMessage('Invalid frame request format')
    if 'isValid' in body:
        if not allow_unsigned:
            raise InvalidFrameMessage('Unsigned frame messages are disabled')
        if not body.get('isValid'):
            raise InvalidFrameMessage('Invalid frame request')
        return _build(body, fid=body.get('fid'), username=body.get('username'))

    trusted = body.get('trustedData')
    if not isinstance(trusted, dict) or not trusted.get('messageBytes'):
        raise InvalidFrameMessage('Invalid frame request format')
    if verifier is None:
        raise InvalidFrameMessage('Frame message verification is not configured')
    verified = verifier(trusted['messageBytes'])
    if not isinstance(verified, dict) or not verified:
        raise InvalidFrameMessage('Invalid frame request')

    untrusted = body.get('untrustedData') or {}
    # Verified fields take precedence over anything the client claims
    merged = {
        'button': verified.get('button', verified.get('buttonIndex', untrusted.get('buttonIndex'))),
        'inputText': verified.get('inputText', untrusted.get('inputText')),
        'state': verified.get('state', untrusted.get('state')),
    }
    return _build(merged, fid=verified.get('fid'), username=verified.get('username'))


def _build(fields, fid, username) -> FrameMessage:
    try:
        button = int(fields.get('button') or 1)
    except (TypeError, ValueError):
        raise InvalidFrameMessage('Invalid button index')
    input_text = fields.get('inputText')
    if input_text is not None and not isinstance(input_text, str):
        raise InvalidFrameMessage('Invalid input text')
    state_token = fields.get('state')
    if state_token is not None and not isinstance(state_token, str):
        state_token = None
    identity = None
    if fid not in (None, '', 0):
        identity = Identity(user_id=str(fid), username=str(username) if username else None)
    return FrameMessage(
        action=FrameAction(button_index=button, input_text=input_text or None, identity=identity),
        state_token=state_token,
    )
