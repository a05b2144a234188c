import pytest
from rental_manager import create_app, db
from rental_manager.config import TestingConfig
from rental_manager.models import *  # register models so metadata is available


@pytest.fixture(scope='function')
def app():
    """A fresh app (and a fresh in-memory database) for every test."""
    app = create_app(config_class=TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """
    The Flask-SQLAlchemy session inside an application context.

    Services and models use ``db.session`` directly, so tests that call them
    without going through HTTP need the context to stay pushed.
    """
    with app.app_context():
        yield db.session
        db.session.remove()


@pytest.fixture(scope='function')
def anon_client(app):
    """A Flask test client without credentials."""
    return app.test_client()


@pytest.fixture(scope='function')
def client(app):
    """A Flask test client that already carries a valid bearer token."""
    test_client = app.test_client()
    res = test_client.post('/auth/login', json={"username": "admin", "password": "admin"})
    assert res.status_code == 200
    test_client.environ_base['HTTP_AUTHORIZATION'] = f"Bearer {res.json['accessToken']}"
    return test_client
