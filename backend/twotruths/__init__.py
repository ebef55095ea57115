from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
import click
from twotruths.config import Config

db = SQLAlchemy()
migrate = Migrate()

DEMO_PLAYERS = [
    ('1001', 'alice', ['I have climbed Kilimanjaro', 'I was born in Lisbon', 'I have never seen snow']),
    ('1002', 'bob', ['I play the cello', 'I once met a president', 'I can juggle five balls']),
    ('1003', 'cara', ['I speak four languages', 'I have run a marathon', 'I own a pet owl']),
]

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    # Hubs and clients fetch frames and preview images cross-origin
    CORS(flask_app, origins=flask_app.config.get('CORS_ORIGINS', '*'))

    from twotruths.main import main
    flask_app.register_blueprint(main)

    from twotruths.api.frames import frames
    flask_app.register_blueprint(frames, url_prefix='/api/frames')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from twotruths.services import SqlStatementStore
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed players that can be picked as opponents
            store = SqlStatementStore(db.session)
            for user_id, username, texts in DEMO_PLAYERS:
                store.upsert_user(user_id, username)
                store.create_statements(user_id, *texts)

            print('Database has been reset and seeded!')

    @click.command('frame-test')
    @click.option('--button', default=1, show_default=True, help='1-indexed button pressed.')
    @click.option('--view', default='welcome', show_default=True,
                  type=click.Choice(['welcome', 'auth', 'create', 'play', 'result', 'leaderboard']), help='View carried in the state token.')
    @click.option('--fid', default='12345', show_default=True, help='Identity of the simulated user.')
    @click.option('--username', default='testuser', show_default=True)
    @click.option('--input-text', default='', help='Free text typed into the frame.')
    def frame_test_command(button, view, fid, username, input_text):
        """Posts one simplified frame message to the local app and prints the response."""
        from twotruths.game import GameState, View, encode_state
        state = encode_state(GameState(current_view=View(view)))
        flask_app.config['ALLOW_UNSIGNED_FRAME_MESSAGES'] = True
        client = flask_app.test_client()
        res = client.post('/api/frames', json={
            'isValid': True,
            'button': button,
            'state': state,
            'fid': fid,
            'username': username,
            'inputText': input_text,
        })
        html = res.get_data(as_text=True)
        print(f"Response status: {res.status_code}")
        print('Response HTML (first 500 chars):')
        print(html[:500] + '...')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(frame_test_command)

    return flask_app
