import os
import sys
import pytest

# Ensure the backend root (containing the `findme` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from findme import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost']
    SOCKETIO_NAMESPACE = '/'
    ROOM_ID = 'lobby'
    BOARD_SIZE = 4
    # Deterministic winning tile for protocol tests
    WINNING_TILE = '0,0'
    ROUND_TIMEOUT_SEC = 30
    MIN_PLAYERS = 1
    REPORT_REJECTIONS = False


class ReportingConfig(TestConfig):
    REPORT_REJECTIONS = True


class ScriptedRandom:
    """Stands in for random.Random; randrange() replays the given values, then 0."""

    def __init__(self, *values):
        self._values = list(values)

    def randrange(self, stop):
        value = self._values.pop(0) if self._values else 0
        assert 0 <= value < stop
        return value


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def handler(flask_app):
    return flask_app.extensions['findme']


@pytest.fixture()
def store(handler):
    return handler.store


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Open Socket.IO test clients; any still connected are closed afterwards."""
    opened = []

    def _open():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        opened.append(test_client)
        return test_client

    yield _open
    for test_client in opened:
        if test_client.is_connected():
            test_client.disconnect()


def events(test_client, name=None):
    """Received packets as (name, payload) pairs, optionally filtered by name."""
    received = [(pkt['name'], pkt['args'][0] if pkt['args'] else None)
                for pkt in test_client.get_received()]
    if name is None:
        return received
    return [payload for event, payload in received if event == name]
