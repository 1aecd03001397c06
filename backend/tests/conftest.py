import os
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `telephone` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from telephone import create_app, socketio
from telephone.services.games.rooms import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['http://localhost:3000']
    DEFAULT_ROUNDS = 3
    DEFAULT_DRAW_TIME_SEC = 60
    ROOM_CODE_LENGTH = 7
    TICK_INTERVAL_SEC = 1
    ROUND_TIMER_ENABLED = False


class FakeTransport:
    """Records what the registry sends instead of talking to Socket.IO."""

    def __init__(self):
        self.sent = []
        self.groups = defaultdict(set)

    def send(self, event, payload, to):
        self.sent.append((event, payload, to))

    def enter(self, sid, room_id):
        self.groups[room_id].add(sid)

    def leave(self, sid, room_id):
        self.groups[room_id].discard(sid)

    def events(self, name):
        return [payload for event, payload, _ in self.sent if event == name]

    def clear(self):
        self.sent = []


class FakeTimer:
    def __init__(self, room):
        self.room_id = room.id
        self.seconds = room.settings.draw_time_sec
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def timers():
    return []


@pytest.fixture()
def registry(transport, timers):
    def factory(room):
        timer = FakeTimer(room)
        timers.append(timer)
        return timer
    return RoomRegistry(transport, timer_factory=factory)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        application.extensions['telephone_rooms'].shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        # The connect handler announces the connection id the server uses
        greeting = [pkt for pkt in test_client.get_received() if pkt['name'] == 'connected']
        test_client.player_id = greeting[0]['args'][0]['sid']
        return test_client

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()
