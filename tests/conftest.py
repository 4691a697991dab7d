from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from tempmon.config import Settings
from tempmon.main import create_app
from tempmon.services import MeasurementStore


BASE_TIME = datetime(2025, 3, 1, 12, 0, 0)


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{tmp_path / 'tempmon.db'}")


@pytest.fixture
def store(settings):
    store = MeasurementStore(settings)
    store.initialize()
    yield store
    store.engine.dispose()


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client
