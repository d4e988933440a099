import pytest

from reportcards import create_app
from reportcards.config import TestConfig
from reportcards.extensions import db
from reportcards.store import SQLAlchemyStore


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return SQLAlchemyStore()


@pytest.fixture
def school(store):
    return store.insert("schools", {"name": "Effort Academy", "address": "12 Ring Road"})[0]


@pytest.fixture
def class_row(store, school):
    return store.insert("classes", {"school_id": school["id"], "name": "JHS 1"})[0]
