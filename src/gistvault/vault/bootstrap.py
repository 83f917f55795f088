# Vault - Bootstrapper
#
# Finds the one remote collection that belongs to a vault key, or
# creates it. The backend has no notion of "which gist is the vault";
# ownership is proven by a settings file whose "test" field decrypts
# to a known marker under the client's key.
#
# Scan order is the backend's listing order and the first match wins.
# Settings files that do not parse are skipped, as are markers that do
# not decrypt (they belong to other keys).

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..backends.base import RemoteBackend, RemoteCollection
from ..core.audit_log import EventSeverity, EventType, get_audit_logger
from ..exceptions import BackendError, BootstrapError
from .encryption import EncryptionService

logger = logging.getLogger(__name__)

SETTINGS_FILE = ".gistvault.json"
TEST_STRING = "GISTVAULT"


@dataclass
class VaultSettings:
    """Result of a bootstrap: where the vault lives and its settings."""
    collection_id: str
    settings: Dict[str, Any] = field(default_factory=dict)
    created: bool = False


def dump_json(data: Any) -> str:
    """Serialize a vault document the way every vault file is written."""
    return json.dumps(data, indent="\t")


class VaultBootstrapper:
    """Locates or creates the settings record for a vault key.

    Args:
        key: Vault key.
        username: Backend account name (audit context only).
        backend: Remote backend to scan.
    """

    def __init__(self, key: bytes, username: str, backend: RemoteBackend):
        self._key = key
        self._username = username
        self._backend = backend

    def is_vault_settings(self, settings: Any) -> bool:
        """True if ``settings`` carries a marker encrypted with our key."""
        if not isinstance(settings, dict):
            return False
        test = settings.get("test")
        if not test:
            return False
        return EncryptionService.decrypt(test, self._key) == TEST_STRING

    async def _read_settings(self, collection: RemoteCollection) -> Optional[Dict[str, Any]]:
        """Parsed settings of a candidate, or None if missing/unparseable."""
        raw = await self._backend.read_file(collection, SETTINGS_FILE)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.debug("Skipping collection %s: settings file is not JSON", collection.id)
            return None

    async def locate(self) -> Optional[VaultSettings]:
        """Scan the backend for an existing vault. None if there is none."""
        for collection in await self._backend.list_collections():
            if not collection.has_file(SETTINGS_FILE):
                continue

            settings = await self._read_settings(collection)
            if settings is None or not self.is_vault_settings(settings):
                continue

            logger.info("Found vault collection %s", collection.id)
            return VaultSettings(collection_id=collection.id, settings=settings)

        return None

    async def create(self) -> VaultSettings:
        """Create a new collection holding a fresh settings record."""
        settings = {"test": EncryptionService.encrypt(TEST_STRING, self._key)}
        collection = await self._backend.create_collection(
            {SETTINGS_FILE: dump_json(settings)}
        )
        logger.info("Created vault collection %s", collection.id)
        return VaultSettings(collection_id=collection.id, settings=settings, created=True)

    async def bootstrap(self) -> VaultSettings:
        """
        Locate the vault collection or create it.

        Raises:
            BootstrapError: The backend failed (bad credentials, network).
                            The backend error is chained as __cause__.
        """
        audit = get_audit_logger()
        try:
            result = await self.locate()
            if result is None:
                result = await self.create()
        except BackendError as e:
            audit.log_vault_event(
                EventType.VAULT_BOOTSTRAP_FAILED,
                "could not open vault",
                details={"account": self._username, "error": str(e)},
                severity=EventSeverity.CRITICAL,
            )
            raise BootstrapError(f"Could not open vault: {e}") from e

        audit.log_vault_event(
            EventType.VAULT_CREATED if result.created else EventType.VAULT_LOCATED,
            "created" if result.created else "located",
            details={"account": self._username, "collection_id": result.collection_id},
        )
        return result
