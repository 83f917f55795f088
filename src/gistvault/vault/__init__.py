# Vault Module - Encrypted Secret Store
#
# Secrets encrypted client-side (AES-256-GCM), indexed by tag sets and
# sharded across files of a single remote collection.

from .bootstrap import SETTINGS_FILE, VaultBootstrapper, VaultSettings
from .encryption import EncryptionService
from .keys import KEY_LENGTH, key_from_token, key_to_token, load_or_create_key
from .partition import FILENAME_LENGTH, Partitioner
from .secret_store import SECURE_NOTE_PREFIX, SecretMatch, SecretStore
from .urls import UrlComponents, normalize_url, url_components

__all__ = [
    "EncryptionService",
    "FILENAME_LENGTH",
    "KEY_LENGTH",
    "Partitioner",
    "SECURE_NOTE_PREFIX",
    "SETTINGS_FILE",
    "SecretMatch",
    "SecretStore",
    "UrlComponents",
    "VaultBootstrapper",
    "VaultSettings",
    "key_from_token",
    "key_to_token",
    "load_or_create_key",
    "normalize_url",
    "url_components",
]
