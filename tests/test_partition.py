"""
Tests for the Partitioner: shard ids and record keys.
"""

import pytest

from gistvault.vault.encryption import EncryptionService
from gistvault.vault.partition import FILENAME_LENGTH, Partitioner


@pytest.fixture
def partitioner(key):
    return Partitioner("alice", key)


class TestPartitionId:
    def test_length(self, partitioner):
        assert len(partitioner.partition_id(["example.com"])) == FILENAME_LENGTH

    def test_is_tail_of_first_tag_hash(self, partitioner, key):
        full = EncryptionService.keyed_hash("alice", key, "example.com")
        assert partitioner.partition_id(["example.com", "x"]) == full[-FILENAME_LENGTH:]

    def test_only_first_tag_matters(self, partitioner):
        assert (
            partitioner.partition_id(["example.com", "alice"])
            == partitioner.partition_id(["example.com", "bob", "/login"])
        )

    def test_different_first_tag(self, partitioner):
        assert partitioner.partition_id(["a.com"]) != partitioner.partition_id(["b.com"])

    def test_key_scoped(self, key, other_key):
        assert (
            Partitioner("alice", key).partition_id(["example.com"])
            != Partitioner("alice", other_key).partition_id(["example.com"])
        )

    def test_shard_filename(self, partitioner):
        filename = partitioner.shard_filename(["example.com"])
        assert filename == f"{partitioner.partition_id(['example.com'])}.json"

    def test_empty_tags_rejected(self, partitioner):
        with pytest.raises(ValueError):
            partitioner.partition_id([])


class TestRecordKey:
    def test_deterministic(self, partitioner):
        tags = ["example.com", "alice", "/login"]
        assert partitioner.record_key(tags) == partitioner.record_key(list(tags))

    def test_trailing_tags_order_independent(self, partitioner):
        assert (
            partitioner.record_key(["example.com", "alice", "/login"])
            == partitioner.record_key(["example.com", "/login", "alice"])
        )

    def test_first_tag_is_positional(self, partitioner):
        assert (
            partitioner.record_key(["alice", "example.com"])
            != partitioner.record_key(["example.com", "alice"])
        )

    def test_duplicates_count(self, partitioner):
        assert (
            partitioner.record_key(["example.com", "alice"])
            != partitioner.record_key(["example.com", "alice", "alice"])
        )

    def test_different_tags(self, partitioner):
        assert (
            partitioner.record_key(["example.com", "alice"])
            != partitioner.record_key(["example.com", "bob"])
        )

    def test_identity(self):
        assert Partitioner.identity(["h", "z", "a", "m"]) == ["h", "a", "m", "z"]

    def test_empty_tags_rejected(self, partitioner):
        with pytest.raises(ValueError):
            partitioner.record_key([])
