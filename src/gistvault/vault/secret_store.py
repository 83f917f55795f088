# Vault - Secret Store
#
# Tag-indexed encrypted secrets on top of a RemoteBackend.
#
# Layout inside the vault collection:
#   .gistvault.json      settings record (see bootstrap.py)
#   <partition>.json     shard: {record_key: [nonce, box], ...}
#
# A secret is stored as encrypt(json([secret, tags])) under the record key
# of its tags, in the shard selected by its first tag. Reads decrypt the
# whole shard and rank every entry by how many query tags it carries.
#
# Writes are read-modify-write of a whole shard file. Writers to the same
# partition are serialized per store instance; writers in other processes
# still race (last write wins).

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..backends.base import RemoteBackend, RemoteCollection
from ..core.audit_log import EventSeverity, EventType, get_audit_logger
from ..exceptions import CorruptEntryError, MalformedRecordError
from .bootstrap import VaultBootstrapper, VaultSettings, dump_json
from .encryption import EncryptionService
from .keys import key_to_token
from .partition import Partitioner
from .urls import url_components

logger = logging.getLogger(__name__)

DEFAULT_TAGS = ("_",)

# All secure notes share this first tag, keeping them out of the
# partitions used by site passwords.
SECURE_NOTE_PREFIX = "__"

# Weight of the username when ranking password search results.
USERNAME_WEIGHT = 3


@dataclass
class _PartitionLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


@dataclass
class SecretMatch:
    """A decrypted secret and how many query tags it matched."""
    secret: str
    tags: List[str] = field(default_factory=list)
    matches: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "secret": self.secret,
            "tags": list(self.tags),
            "matches": self.matches,
        }


def count_matches(query: Sequence[str], stored_tags: Sequence[str]) -> int:
    """Number of query tags present in ``stored_tags``.

    Repeated query tags count once per repetition, which is how a tag
    is given more weight.
    """
    stored = set(stored_tags)
    return sum(1 for tag in query if tag in stored)


class SecretStore:
    """Encrypted, tag-indexed secret storage in one remote collection.

    The vault collection is resolved lazily on first use and memoized for
    the lifetime of the instance; concurrent first callers share the same
    bootstrap.

    Usage::

        store = SecretStore(backend, key, "octocat")
        await store.set_password("https://example.com/login", "alice", "hunter2")
        results = await store.get_passwords("example.com", "alice")

    Args:
        backend: Remote backend holding the vault.
        key: 32-byte vault key.
        username: Backend account name; scopes every keyed hash.
        skip_corrupt: Skip shard entries that fail to decrypt (True) or
            fail the whole read with CorruptEntryError (False).
    """

    def __init__(
        self,
        backend: RemoteBackend,
        key: bytes,
        username: str,
        *,
        skip_corrupt: bool = True,
    ):
        self._backend = backend
        self._key = key
        self._username = username
        self.skip_corrupt = skip_corrupt

        self._partitioner = Partitioner(username, key)
        self._bootstrapper = VaultBootstrapper(key, username, backend)
        self._bootstrap_task: Optional[asyncio.Future] = None
        self._partition_locks: Dict[str, _PartitionLock] = {}

    @property
    def key_token(self) -> str:
        """Shareable base-58 form of the vault key."""
        return key_to_token(self._key)

    @property
    def partitioner(self) -> Partitioner:
        return self._partitioner

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    def _start_bootstrap(self) -> asyncio.Future:
        # No await between the check and the assignment: at most one task.
        if self._bootstrap_task is None:
            task = asyncio.ensure_future(self._bootstrapper.bootstrap())
            task.add_done_callback(self._on_bootstrap_done)
            self._bootstrap_task = task
        return self._bootstrap_task

    def _on_bootstrap_done(self, task: asyncio.Future) -> None:
        # A failed bootstrap is forgotten so the next call starts over.
        if task.cancelled() or task.exception() is not None:
            if self._bootstrap_task is task:
                self._bootstrap_task = None

    async def ready(self) -> VaultSettings:
        """
        Wait for the vault collection to be located or created.

        Raises:
            BootstrapError: The backend rejected the credentials or failed
        """
        # Shielded so one cancelled caller does not cancel the shared task
        return await asyncio.shield(self._start_bootstrap())

    # ------------------------------------------------------------------
    # Shard helpers
    # ------------------------------------------------------------------

    @contextlib.asynccontextmanager
    async def _partition_lock(self, partition_id: str):
        """Hold the write lock of one partition.

        The lock is dropped from the table once no writer holds or waits
        for it, so the table only contains partitions being written.
        """
        entry = self._partition_locks.get(partition_id)
        if entry is None:
            entry = self._partition_locks[partition_id] = _PartitionLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._partition_locks.get(partition_id) is entry:
                del self._partition_locks[partition_id]

    async def _read_shard(
        self, collection: RemoteCollection, filename: str
    ) -> Optional[Dict[str, Any]]:
        """Shard mapping, or None when the shard file does not exist."""
        raw = await self._backend.read_file(collection, filename)
        if raw is None:
            return None
        try:
            shard = json.loads(raw)
        except ValueError as e:
            raise MalformedRecordError(filename, f"invalid JSON ({e})") from e
        if not isinstance(shard, dict):
            raise MalformedRecordError(filename, "expected a JSON object")
        return shard

    def _open_entry(
        self, filename: str, record_key: str, pair: Any
    ) -> Optional[SecretMatch]:
        """Decrypt one shard entry. None if it is corrupt and skipped."""
        plaintext = EncryptionService.decrypt(pair, self._key)
        record = None
        if plaintext is not None:
            try:
                record = json.loads(plaintext)
            except ValueError:
                record = None

        if (
            isinstance(record, list)
            and len(record) == 2
            and isinstance(record[0], str)
            and isinstance(record[1], list)
        ):
            return SecretMatch(secret=record[0], tags=record[1])

        if not self.skip_corrupt:
            raise CorruptEntryError(filename, record_key)

        logger.warning("Skipping undecryptable entry in shard %s", filename)
        get_audit_logger().log_vault_event(
            EventType.ENTRY_CORRUPT,
            "skipped corrupt shard entry",
            details={"shard": filename},
            severity=EventSeverity.ALERT,
        )
        return None

    # ------------------------------------------------------------------
    # Generic secrets
    # ------------------------------------------------------------------

    async def set_secret(
        self, secret: str = "", tags: Optional[Sequence[str]] = None
    ) -> RemoteCollection:
        """
        Store ``secret`` under ``tags``, replacing any secret stored under
        the same tags.

        Returns:
            The collection as returned by the backend update

        Raises:
            BootstrapError: The vault could not be opened
            MalformedRecordError: The existing shard is not a JSON object
            BackendError: The read or write failed
        """
        tags = list(tags) if tags else list(DEFAULT_TAGS)
        settings = await self.ready()

        partition_id = self._partitioner.partition_id(tags)
        filename = self._partitioner.shard_filename(tags)
        record_key = self._partitioner.record_key(tags)

        async with self._partition_lock(partition_id):
            collection = await self._backend.get_collection(settings.collection_id)
            shard = await self._read_shard(collection, filename) or {}

            shard[record_key] = EncryptionService.encrypt(
                json.dumps([secret, tags]), self._key
            )

            result = await self._backend.update_collection(
                settings.collection_id, {filename: dump_json(shard)}
            )

        logger.debug("Wrote shard %s (%d entries)", filename, len(shard))
        get_audit_logger().log_vault_event(
            EventType.SECRET_WRITTEN,
            "secret written",
            details={"shard": filename, "entries": len(shard)},
        )
        return result

    async def get_secrets(
        self, tags: Optional[Sequence[str]] = None
    ) -> Optional[List[SecretMatch]]:
        """
        Every secret in the partition of ``tags[0]``, best match first.

        Entries with equal match counts keep their shard order. Entries
        matching no tag are included.

        Returns:
            Ranked matches, or None if the partition has no shard file

        Raises:
            BootstrapError: The vault could not be opened
            MalformedRecordError: The shard is not a JSON object
            CorruptEntryError: An entry failed to decrypt (strict mode)
            BackendError: A read failed
        """
        tags = list(tags) if tags else list(DEFAULT_TAGS)
        settings = await self.ready()

        filename = self._partitioner.shard_filename(tags)
        collection = await self._backend.get_collection(settings.collection_id)
        shard = await self._read_shard(collection, filename)
        if shard is None:
            return None

        results: List[SecretMatch] = []
        for record_key, pair in shard.items():
            match = self._open_entry(filename, record_key, pair)
            if match is None:
                continue
            match.matches = count_matches(tags, match.tags)
            results.append(match)

        # list.sort is stable, ties keep shard order
        results.sort(key=lambda m: m.matches, reverse=True)

        get_audit_logger().log_vault_event(
            EventType.SECRETS_READ,
            "secrets read",
            details={
                "shard": filename,
                "entries": len(shard),
                "returned": len(results),
            },
        )
        return results

    # ------------------------------------------------------------------
    # Site passwords
    # ------------------------------------------------------------------

    @staticmethod
    def password_tags(url: str, username: str, username_weight: int = 1) -> List[str]:
        """Tags for a site login. The hostname always comes first."""
        parts = url_components(url)
        return [
            parts.hostname,
            *([username] * username_weight),
            parts.pathname,
            parts.protocol,
            parts.port,
            parts.search,
            parts.href,
        ]

    async def set_password(self, url: str, username: str, password: str) -> RemoteCollection:
        """Store the password for ``username`` at ``url``."""
        return await self.set_secret(password, self.password_tags(url, username))

    async def get_passwords(self, url: str, username: str = "") -> Optional[List[SecretMatch]]:
        """
        Passwords stored for the host of ``url``.

        The username counts three times when ranking, so the right account
        outranks a closer path match for another account.
        """
        return await self.get_secrets(
            self.password_tags(url, username, username_weight=USERNAME_WEIGHT)
        )

    # ------------------------------------------------------------------
    # Secure notes
    # ------------------------------------------------------------------

    async def set_note(self, note: str, tags: Sequence[str]) -> RemoteCollection:
        """Store a secure note under free-form ``tags``."""
        if not tags:
            raise ValueError("Secure notes need at least one tag")
        return await self.set_secret(note, [SECURE_NOTE_PREFIX, *tags])

    async def get_notes(self, tags: Sequence[str]) -> Optional[List[SecretMatch]]:
        """Secure notes ranked by overlap with ``tags``."""
        return await self.get_secrets([SECURE_NOTE_PREFIX, *tags])
