# Vault - Partitioner
#
# Maps a tag sequence to the shard file that holds it and to the key of
# the record inside that shard. Only the first tag selects the shard, so
# the number of shard files grows with the number of distinct first tags
# (hostnames for passwords, the note prefix for secure notes).

from typing import List, Sequence

from .encryption import EncryptionService

FILENAME_LENGTH = 16
SHARD_SUFFIX = ".json"


class Partitioner:
    """Derives key-scoped shard and record identifiers from tags.

    Args:
        username: Backend account name (mixed into every hash).
        key: Vault key.
    """

    def __init__(self, username: str, key: bytes):
        self._username = username
        self._key = key

    def _hash(self, data) -> str:
        return EncryptionService.keyed_hash(self._username, self._key, data)

    @staticmethod
    def _check(tags: Sequence[str]) -> None:
        if not tags:
            raise ValueError("At least one tag is required")

    def partition_id(self, tags: Sequence[str]) -> str:
        """Last FILENAME_LENGTH characters of the first tag's keyed hash."""
        self._check(tags)
        return self._hash(tags[0])[-FILENAME_LENGTH:]

    def shard_filename(self, tags: Sequence[str]) -> str:
        return f"{self.partition_id(tags)}{SHARD_SUFFIX}"

    @staticmethod
    def identity(tags: Sequence[str]) -> List[str]:
        """
        Canonical tag list used for the record key.

        The first tag stays in place (it already chose the shard); the
        rest are sorted so ["a", "x", "y"] and ["a", "y", "x"] address the
        same record. Duplicates are kept.
        """
        return [tags[0], *sorted(tags[1:])]

    def record_key(self, tags: Sequence[str]) -> str:
        """Keyed hash of the canonical tag list."""
        self._check(tags)
        return self._hash(self.identity(tags))
