"""Test configuration and utilities."""

from unittest.mock import AsyncMock

import pytest

from pkglikes.core.entities import RecordRef
from pkglikes.core.interfaces import BacklinkIndex, RecordStore
from pkglikes.core.usecases import LikeCoordinator
from pkglikes.providers.cache import MemoryCacheProvider

ALICE = "did:plc:alice"
BOB = "did:plc:bob"
LIKE_COLLECTION = "dev.npmx.feed.like"


class FakeClock:
    """Controllable wall clock for TTL tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def memory_cache(fake_clock):
    """Create an in-process cache driven by the fake clock."""
    return MemoryCacheProvider(clock=fake_clock)


@pytest.fixture
def alice_like_record():
    """Like record written by alice."""
    return RecordRef(did=ALICE, collection=LIKE_COLLECTION, rkey="3kalicelike22")


@pytest.fixture
def mock_index():
    """Create a mock backlink index reporting 5 likes and no records for anyone."""
    mock = AsyncMock(spec=BacklinkIndex)
    mock.count_distinct_writers.return_value = 5
    mock.find_writer_records.return_value = []
    mock.health_check.return_value = True
    return mock


@pytest.fixture
def mock_record_store(alice_like_record):
    """Create a mock record store that accepts every write."""
    mock = AsyncMock(spec=RecordStore)
    mock.create_record.return_value = alice_like_record.uri
    mock.delete_record.return_value = None
    mock.health_check.return_value = True
    return mock


@pytest.fixture
def coordinator(memory_cache, mock_index, mock_record_store):
    """Create a like coordinator over the memory cache and mock collaborators."""
    return LikeCoordinator(
        cache=memory_cache,
        index=mock_index,
        record_store=mock_record_store,
    )
