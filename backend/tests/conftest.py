import os
import sys
import threading
import pytest

# Ensure the backend root (containing the `bigbrain` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bigbrain import create_app, db
from bigbrain.models import User
from bigbrain.services.quiz import clock
from bigbrain.services.quiz.repository import games


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = []
    POLL_INTERVAL_SEC = 1
    SESSION_CODE_LENGTH = 6
    RESULTS_TOP_N = 5
    SESSION_IDLE_TIMEOUT_SEC = 0


QUESTIONS = [
    {
        'text': 'What is 2 + 2?',
        'type': 'single',
        'duration': 30,
        'points': 10,
        'answers': [{'text': '4', 'correct': True}, {'text': '5'}],
    },
    {
        'text': 'Pick the even numbers',
        'type': 'multiple',
        'duration': 20,
        'points': 20,
        'answers': [
            {'text': '2', 'correct': True},
            {'text': '3'},
            {'text': '4', 'correct': True},
            {'text': '5'},
        ],
    },
    {
        'text': 'Water is wet.',
        'type': 'judgement',
        'duration': 10,
        'points': 5,
        'answers': [{'text': 'True', 'correct': True}, {'text': 'False'}],
    },
]


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.t = start

    def __call__(self):
        return self.t

    def tick(self, seconds):
        self.t += seconds
        return self.t


@pytest.fixture()
def flask_app(request, tmp_path):
    config_class = TestConfig
    if request.node.get_closest_marker('threaded'):
        # worker threads need their own connections to one shared database
        config_class = type('ThreadedTestConfig', (TestConfig,), {
            'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'quiz.db'}",
        })
    application = create_app(config_class)
    with application.app_context():
        # Ensure models are imported so tables are created
        import bigbrain.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def run_threads(flask_app):
    """Run each callable in its own thread and app context.

    Returns the exceptions the callables raised.
    """
    def run(*calls):
        errors = []

        def worker(call):
            with flask_app.app_context():
                try:
                    call()
                except Exception as exc:
                    errors.append(exc)

        threads = [threading.Thread(target=worker, args=(call,)) for call in calls]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)
        assert not any(t.is_alive() for t in threads)
        return errors
    return run


@pytest.fixture()
def fake_clock(monkeypatch):
    fc = FakeClock()
    monkeypatch.setattr(clock, 'now', fc)
    return fc


def make_user(username, password='password'):
    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def user_factory(flask_app):
    return make_user


@pytest.fixture()
def owner(flask_app):
    return make_user('owner')


@pytest.fixture()
def game(owner):
    return games.add(owner.id, 'Arithmetic', QUESTIONS)


@pytest.fixture()
def owner_client(client, owner):
    res = client.post('/login', json={'username': 'owner', 'password': 'password'})
    assert res.status_code == 200
    return client
