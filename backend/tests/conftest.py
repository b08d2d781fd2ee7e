import os
import sys
import pytest

# Ensure the backend root (containing the `poker` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from poker import create_app, directory, registry, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    ROOM_CODE_LENGTH = 4
    MAX_NAME_LENGTH = 32
    MAX_CODE_LENGTH = 16
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    directory.clear()
    registry.clear()
    application = create_app(TestConfig)
    yield application
    directory.clear()
    registry.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_client(flask_app):
    """Factory for extra Socket.IO clients; all are disconnected on teardown."""
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_client):
    return make_client()
