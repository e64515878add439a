"""Unit tests for MemoryRecordStore."""

import pytest

from pkglikes.core.entities import RecordRef
from pkglikes.providers.exceptions import RecordStoreError
from pkglikes.providers.records import MemoryRecordStore
from pkglikes.providers.records.memory_record_store import _encode_tid

COLLECTION = "dev.npmx.feed.like"


class TestMemoryRecordStore:
    """Test the in-memory record store."""

    def test_encode_tid(self):
        """Test record key encoding."""
        assert _encode_tid(0) == "2222222222222"
        assert len(_encode_tid(2 ** 63 - 1)) == 13
        assert _encode_tid(1) < _encode_tid(2)

    @pytest.mark.asyncio
    async def test_create_record_returns_uri(self):
        """Test creating a record."""
        store = MemoryRecordStore()

        uri = await store.create_record("did:plc:a", COLLECTION, {"subjectRef": "x"})
        ref = RecordRef.from_uri(uri)

        assert ref.did == "did:plc:a"
        assert ref.collection == COLLECTION
        assert len(ref.rkey) == 13
        assert store.count() == 1

    @pytest.mark.asyncio
    async def test_record_keys_are_unique(self):
        """Test that consecutive records get distinct keys."""
        store = MemoryRecordStore()

        uris = {await store.create_record("did:plc:a", COLLECTION, {}) for _ in range(20)}

        assert len(uris) == 20

    @pytest.mark.asyncio
    async def test_create_record_requires_repo(self):
        """Test that a repository DID is required."""
        store = MemoryRecordStore()

        with pytest.raises(RecordStoreError, match="Repository DID is required"):
            await store.create_record("", COLLECTION, {})

    @pytest.mark.asyncio
    async def test_records_are_copied(self):
        """Test that the stored payload is isolated from the caller."""
        store = MemoryRecordStore()
        record = {"subjectRef": "https://npmx.dev/package/vue"}

        await store.create_record("did:plc:a", COLLECTION, record)
        record["subjectRef"] = "changed"

        [(_, stored)] = list(store.iter_records())
        assert stored["subjectRef"] == "https://npmx.dev/package/vue"

    @pytest.mark.asyncio
    async def test_delete_record(self):
        """Test deletion, including of a missing record."""
        store = MemoryRecordStore()
        ref = RecordRef.from_uri(await store.create_record("did:plc:a", COLLECTION, {}))

        await store.delete_record(ref.did, ref.collection, ref.rkey)
        await store.delete_record(ref.did, ref.collection, ref.rkey)
        await store.delete_record("did:plc:unknown", COLLECTION, "3kzzz")

        assert store.count() == 0

    @pytest.mark.asyncio
    async def test_health_check(self):
        assert await MemoryRecordStore().health_check() is True
