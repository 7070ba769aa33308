"""Shared test fixtures."""

import os

# Settings require a secret; set one before anything imports config.settings.
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest  # noqa: E402

from tests.fakes import (  # noqa: E402
    FakeAlertRepository,
    FakeEntryRepository,
    FakePartyRepository,
    FakeSession,
    FakeSettlementRepository,
    MemoryStore,
)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture
def entry_repo(store: MemoryStore) -> FakeEntryRepository:
    return FakeEntryRepository(store)


@pytest.fixture
def party_repo(store: MemoryStore) -> FakePartyRepository:
    return FakePartyRepository(store)


@pytest.fixture
def settlement_repo(store: MemoryStore) -> FakeSettlementRepository:
    return FakeSettlementRepository(store)


@pytest.fixture
def alert_repo(store: MemoryStore) -> FakeAlertRepository:
    return FakeAlertRepository(store)
