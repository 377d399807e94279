import os
import sys
import pytest
from sqlalchemy.exc import OperationalError

# Ensure the backend root (containing the `chessroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from chessroom import create_app, db, socketio
from chessroom.identity import IdentityVerifier
from chessroom.models import User
from chessroom.realtime import RecordingRelay, SessionCoordinator, SessionRegistry
from chessroom.store import GameStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TOKEN_MAX_AGE_SEC = 3600
    CORS_ORIGINS = ['http://localhost:3000']
    SOCKETIO_NAMESPACE = '/ws'
    STARTING_RATING = 1200
    MIN_PASSWORD_LENGTH = 6


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
def make_user(flask_app):
    """Create a user and return ``(user_id, bearer_token)``."""
    def _make(username, password='password'):
        user = User(username=username, email=f'{username}@example.com')
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id, flask_app.extensions['identity'].issue(user.id)
    return _make


@pytest.fixture()
def store(flask_app):
    return GameStore()


@pytest.fixture()
def relay():
    return RecordingRelay()


@pytest.fixture()
def coordinator(flask_app, store, relay):
    """A coordinator wired to the test database and an in-memory relay."""
    return SessionCoordinator(
        registry=SessionRegistry(),
        store=store,
        relay=relay,
        verifier=IdentityVerifier(TestConfig.SECRET_KEY),
        clock=lambda: '2026-01-01T00:00:00+00:00',
    )


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


@pytest.fixture()
def sio_factory(flask_app):
    """Open extra Socket.IO connections, optionally authenticated."""
    opened = []

    def _open(token=None):
        c = socketio.test_client(flask_app, namespace='/ws')
        opened.append(c)
        if token:
            c.emit('authenticate', {'token': token}, namespace='/ws')
        c.get_received('/ws')  # flush connect/auth acks
        return c

    yield _open
    for c in opened:
        if c.is_connected('/ws'):
            c.disconnect(namespace='/ws')


def named(received, name):
    """Payloads of every received packet called ``name``."""
    return [pkt['args'][0] for pkt in received if pkt['name'] == name]


class BrokenStatsStore(GameStore):
    """Fails the n-th stats write the way a dropped connection would."""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.calls = 0

    def _bump_stats(self, participant_id, personal_result):
        self.calls += 1
        if self.calls == self.fail_on:
            raise OperationalError('UPDATE user', {}, Exception('connection lost'))
        return super()._bump_stats(participant_id, personal_result)
