import os
import sys
import pytest

# Ensure the backend root (containing the `arena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from arena import create_app, db, socketio
from arena.services import SessionCoordinator, Transport
from arena.services.stats import StatsLedger


class TestConfig:
    __test__ = False

    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = False
    SOCKETIO_NAMESPACE = '/ws'
    CORS_ORIGINS = []


class RecordingTransport(Transport):
    """Collects outbound events; connections in ``failing`` raise on send."""

    def __init__(self):
        self.sent = []
        self.failing = set()

    def send(self, connection_id, event, payload):
        if connection_id in self.failing:
            raise ConnectionError(f'{connection_id} is gone')
        self.sent.append((connection_id, event, payload))

    def broadcast(self, event, payload):
        self.sent.append((None, event, payload))

    def events(self, connection_id, name=None):
        return [(e, p) for to, e, p in self.sent if to == connection_id and (name is None or e == name)]

    def payloads(self, connection_id, name):
        return [p for e, p in self.events(connection_id, name)]

    def broadcasts(self, name=None):
        return [p for to, e, p in self.sent if to is None and (name is None or e == name)]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Build Socket.IO test clients on /ws; all are disconnected at teardown."""
    clients = []

    def make():
        test_client = socketio.test_client(flask_app, namespace='/ws')
        clients.append(test_client)
        return test_client

    yield make
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def coordinator(flask_app, transport):
    return SessionCoordinator(transport, StatsLedger())


ALICE = 'sid-alice'
BOB = 'sid-bob'
CARA = 'sid-cara'


@pytest.fixture()
def registered(coordinator):
    coordinator.register(ALICE, 'Alice')
    coordinator.register(BOB, 'Bob')
    return coordinator


@pytest.fixture()
def playing(registered, transport):
    """Alice (X) and Bob (O) seated in a started match."""
    match = registered.create_match(ALICE, 'M1')
    registered.join_match(BOB, match.id)
    transport.clear()
    return match
