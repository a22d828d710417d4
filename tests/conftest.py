# Path: tests/conftest.py
# Purpose: Shared fixtures for search, learning, and API tests.
# Layer: tests.
# Details: Services run on the in-memory repository seeded from tests/catalog.py.

from __future__ import annotations

import pytest

from config.settings import AppSettings
from core.repository.memory_store import InMemoryRepository
from core.service import IntelligenceService

from .catalog import seeded


@pytest.fixture
def repository() -> InMemoryRepository:
    return seeded()


@pytest.fixture
def settings() -> AppSettings:
    settings = AppSettings()
    settings.repository.backend = "memory"
    return settings


@pytest.fixture
def service(repository, settings):
    with IntelligenceService(repository=repository, settings=settings) as svc:
        yield svc
