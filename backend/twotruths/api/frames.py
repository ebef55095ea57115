from flask import Blueprint, current_app, jsonify, make_response, render_template, request
from twotruths import db
from twotruths.api.message import InvalidFrameMessage, parse_frame_message
from twotruths.game import GameState, advance, decode_state, image_lines, present
from twotruths.services import SqlStatementStore, StoreError

frames = Blueprint('frames', __name__)


def _store():
    return SqlStatementStore(
        db.session,
        points_per_correct_guess=current_app.config.get('POINTS_PER_CORRECT_GUESS', 100),
    )


def render_frame(state: GameState, store=None):
    prompt = present(
        state,
        store or _store(),
        host=current_app.config['PUBLIC_HOST'],
        leaderboard_size=current_app.config.get('LEADERBOARD_SIZE', 10),
    )
    response = make_response(render_template('frame.html', prompt=prompt))
    response.headers['Content-Type'] = 'text/html; charset=utf-8'
    return response


@frames.errorhandler(InvalidFrameMessage)
def handle_invalid_frame(exc):
    current_app.logger.info(f"[frame-rejected] {exc}")
    return jsonify({'error': 'Invalid frame request'}), 400


@frames.errorhandler(StoreError)
def handle_store_error(exc):
    db.session.rollback()
    current_app.logger.exception(f"[frame-error] collaborator failure: {exc}")
    return jsonify({'error': 'Internal server error'}), 500


@frames.route('', methods=['GET'])
def initial_frame():
    """
    Serves the opening frame so the post URL can be shared as-is.
    """
    return render_frame(GameState())


@frames.route('', methods=['POST'])
def handle_frame():
    """
    Advances the game by one frame interaction and returns the next frame.
    """
    message = parse_frame_message(
        request.get_json(silent=True),
        verifier=current_app.config.get('FRAME_MESSAGE_VERIFIER'),
        allow_unsigned=current_app.config.get('ALLOW_UNSIGNED_FRAME_MESSAGES', False),
    )
    state = decode_state(message.state_token)
    store = _store()
    next_state = advance(state, message.action, store)
    current_app.logger.info(
        f"[frame] view={state.current_view.value} button={message.action.button_index} "
        f"next={next_state.current_view.value} user={next_state.user.id if next_state.user else None}"
    )
    return render_frame(next_state, store)


@frames.route('/image', methods=['GET'])
def frame_image():
    """
    Returns the preview card for the state embedded in the query string.
    """
    state = decode_state(request.args.get('state'))
    try:
        heading, lines = image_lines(state)
        body = render_template('frame_image.svg', heading=heading, lines=lines)
        cache = 'public, max-age=60'
    except Exception:
        current_app.logger.exception('[image-error] could not build preview card')
        body = render_template('frame_image.svg', heading='Error generating image', lines=[])
        cache = 'no-store'
    response = make_response(body)
    response.headers['Content-Type'] = 'image/svg+xml'
    response.headers['Cache-Control'] = cache
    return response
