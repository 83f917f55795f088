# gistvault - Encrypted secret vault on GitHub gists
#
# Secrets never leave the client unencrypted. The only thing needed to
# reopen a vault is the base-58 key token plus the GitHub account.

__version__ = "0.1.0"
__description__ = "Encrypted, tag-indexed secret vault stored in GitHub gists"

from .exceptions import (
    BackendAuthError,
    BackendError,
    BootstrapError,
    CorruptEntryError,
    InvalidKeyError,
    MalformedRecordError,
    VaultError,
)
from .vault import SecretMatch, SecretStore

__all__ = [
    "__version__",
    "BackendAuthError",
    "BackendError",
    "BootstrapError",
    "CorruptEntryError",
    "InvalidKeyError",
    "MalformedRecordError",
    "SecretMatch",
    "SecretStore",
    "VaultError",
]
