import os
import sys
import pytest

# Ensure the backend root (containing the `promptparty` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from promptparty import create_app, socketio
from promptparty.broadcast import BroadcastHub
from promptparty.services.games import RoundLifecycleController
from promptparty.stores import RoundStore, SessionStore
from fakes import FixedPrompts


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    PROMPTS_FILE = None
    SESSION_CODE_LENGTH = 4
    ROUNDS_PER_GAME = 3
    CORS_ORIGINS = ['http://localhost:5173']


@pytest.fixture()
def prompts():
    return FixedPrompts()


@pytest.fixture()
def controller(prompts):
    return RoundLifecycleController(
        sessions=SessionStore(),
        rounds=RoundStore(),
        hub=BroadcastHub(),
        prompt_source=prompts,
        rounds_per_game=3,
    )


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
