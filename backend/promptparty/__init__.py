from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Process-scoped game engine: stores, hub and prompt source live as long as the app
    from promptparty.broadcast import BroadcastHub, run_inline
    from promptparty.prompts import prompt_source_from_config
    from promptparty.services.games import RoundLifecycleController
    from promptparty.stores import RoundStore, SessionStore

    # Deliver inline in tests so emitted events are observable right after the request
    spawn = run_inline if flask_app.config.get('TESTING') else socketio.start_background_task
    controller = RoundLifecycleController(
        sessions=SessionStore(code_length=int(flask_app.config.get('SESSION_CODE_LENGTH', 4))),
        rounds=RoundStore(),
        hub=BroadcastHub(spawn=spawn),
        prompt_source=prompt_source_from_config(flask_app.config),
        rounds_per_game=int(flask_app.config.get('ROUNDS_PER_GAME', 5)),
    )
    flask_app.extensions['promptparty'] = controller

    # Import and register blueprints here
    from promptparty.main import main
    flask_app.register_blueprint(main)

    from promptparty.api.games import games
    # Mount game routes under /api to match frontend API client
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from promptparty.errors import InternalError, PromptPartyError, error_response

    @flask_app.errorhandler(PromptPartyError)
    def handle_game_error(exc):
        return error_response(exc)

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        if isinstance(exc, HTTPException):
            return exc
        flask_app.logger.exception(f"[internal-error] {exc!r}")
        return error_response(InternalError('internal server error'))

    # Register Socket.IO event handlers
    from promptparty.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('check-prompts')
    def check_prompts_command():
        """Loads the configured prompt corpus and reports its size."""
        from promptparty.prompts import prompt_source_from_config as load
        deck = load(flask_app.config)
        source = flask_app.config.get('PROMPTS_FILE') or 'built-in deck'
        click.echo(f'{len(deck)} prompts available from {source}')

    flask_app.cli.add_command(check_prompts_command)

    return flask_app


def get_controller(flask_app=None):
    """Return the lifecycle controller bound to the given (or current) app."""
    if flask_app is None:
        from flask import current_app
        flask_app = current_app
    return flask_app.extensions['promptparty']
