# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from drains_api.config import load_settings
from drains_api.db import init_db, make_engine
from drains_api.main import create_app
from drains_api.store import EventStore
from tests.helpers import TEST_ENV, RecordingStore


@pytest.fixture
def env():
    return dict(TEST_ENV)


@pytest.fixture
def settings(env):
    return load_settings(env)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'drains.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return RecordingStore(engine)


@pytest.fixture
def make_client():
    """Build a TestClient for arbitrary settings/store combinations"""
    clients = []

    def _make(settings, store: EventStore):
        client = TestClient(create_app(settings, store))
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, settings, store):
    return make_client(settings, store)
