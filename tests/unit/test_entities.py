"""Tests for core entities."""

import pytest

from pkglikes.core.entities import PackageLikes, RecordRef
from pkglikes.core.exceptions import MalformedRecordIdentifierError


class TestRecordRef:
    """Test RecordRef entity."""

    def test_valid_record_ref(self):
        """Test creating a valid record reference."""
        ref = RecordRef(did="did:plc:alice", collection="dev.npmx.feed.like", rkey="3kabc")

        assert ref.uri == "at://did:plc:alice/dev.npmx.feed.like/3kabc"

    def test_empty_fields_raise_error(self):
        """Test that every field is required."""
        with pytest.raises(ValueError, match="DID cannot be empty"):
            RecordRef(did="", collection="dev.npmx.feed.like", rkey="3kabc")
        with pytest.raises(ValueError, match="collection cannot be empty"):
            RecordRef(did="did:plc:alice", collection=" ", rkey="3kabc")
        with pytest.raises(ValueError, match="key cannot be empty"):
            RecordRef(did="did:plc:alice", collection="dev.npmx.feed.like", rkey="")

    def test_from_uri(self):
        """Test parsing an at:// URI."""
        ref = RecordRef.from_uri("at://did:web:example.com/dev.npmx.feed.like/3kxyz")

        assert ref == RecordRef("did:web:example.com", "dev.npmx.feed.like", "3kxyz")

    @pytest.mark.parametrize(
        "uri",
        [
            "",
            "https://did:plc:alice/dev.npmx.feed.like/3kabc",
            "at://did:plc:alice/dev.npmx.feed.like",
            "at://did:plc:alice//3kabc",
            "at://did:plc:alice/dev.npmx.feed.like/3kabc/extra",
        ],
    )
    def test_from_uri_malformed(self, uri):
        """Test that URIs without a DID, collection and rkey are rejected."""
        with pytest.raises(MalformedRecordIdentifierError, match="Invalid record URI given"):
            RecordRef.from_uri(uri)

    def test_dict_conversion(self):
        """Test serialization used for shadow records."""
        ref = RecordRef("did:plc:alice", "dev.npmx.feed.like", "3kabc")
        data = ref.to_dict()

        assert data == {"did": "did:plc:alice", "collection": "dev.npmx.feed.like", "rkey": "3kabc"}
        assert RecordRef.from_dict(data) == ref

    def test_is_immutable(self):
        """Test that references cannot be modified."""
        ref = RecordRef("did:plc:alice", "dev.npmx.feed.like", "3kabc")

        with pytest.raises(AttributeError):
            ref.rkey = "other"


class TestPackageLikes:
    """Test PackageLikes entity."""

    def test_defaults(self):
        """Test default caller state."""
        likes = PackageLikes(package_name="vue", total_likes=3)

        assert likes.user_has_liked is False

    def test_to_dict(self):
        """Test response shape."""
        likes = PackageLikes(package_name="@nuxt/kit", total_likes=0, user_has_liked=True)

        assert likes.to_dict() == {"totalLikes": 0, "userHasLiked": True}

    def test_empty_package_name_raises_error(self):
        """Test that empty package name raises error."""
        with pytest.raises(ValueError, match="Package name cannot be empty"):
            PackageLikes(package_name="", total_likes=0)

    def test_negative_total_raises_error(self):
        """Test that totals are never negative."""
        with pytest.raises(ValueError, match="Total likes cannot be negative"):
            PackageLikes(package_name="vue", total_likes=-1)
