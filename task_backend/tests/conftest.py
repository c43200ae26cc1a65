from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.api.settings import Settings

from .fakes import FakeClock


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings() -> Settings:
    return Settings(task_max_records=5)


@pytest.fixture()
def app(settings, clock):
    """A fresh app (and therefore a fresh in-memory store) per test."""
    return create_app(settings=settings, clock=clock)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)
