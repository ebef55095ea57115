from flask import Blueprint, jsonify
from twotruths.game import GameState

main = Blueprint('main', __name__)

@main.route('/')
def index():
    # The landing page doubles as the first frame of the game
    from twotruths.api.frames import render_frame
    return render_frame(GameState())

@main.route('/health')
def health():
    return jsonify({'status': 'ok'})
