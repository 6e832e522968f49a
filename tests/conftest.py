"""Pytest fixtures for the board service tests."""

import pytest

from src.config import load_config
from src.db.session import Database
from src.main import create_app

TEST_ENV = {
    "DATABASE_URL": "sqlite+pysqlite:///:memory:",
    "SQLALCHEMY_ECHO": "false",
    "LOG_LEVEL": "DEBUG",
}


@pytest.fixture(scope="session")
def config():
    return load_config(TEST_ENV)


@pytest.fixture(scope="session")
def database(config):
    db = Database(config)
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture(scope="session")
def app(config, database):
    application = create_app(config, database)
    application.config.update({"TESTING": True})
    yield application


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture(autouse=True)
def _db_cleanup(database):
    database.drop_all()
    database.create_all()
    yield
