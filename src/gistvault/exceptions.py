"""
Vault Exception Classes
"""

from typing import Optional


class VaultError(Exception):
    """Base exception for vault operations"""
    pass


class InvalidKeyError(VaultError):
    """Raised when a vault key token cannot be decoded to a valid key"""
    pass


class BootstrapError(VaultError):
    """Raised when the vault collection cannot be located or created.

    The original backend failure is chained as ``__cause__``. Callers
    typically re-prompt for credentials and build a new store.
    """
    pass


class MalformedRecordError(VaultError):
    """Raised when a shard file is not a JSON object"""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Malformed shard file {filename}: {reason}")
        self.filename = filename
        self.reason = reason


class CorruptEntryError(VaultError):
    """Raised when a shard entry fails authentication in strict mode"""

    def __init__(self, filename: str, record_key: str):
        super().__init__(
            f"Entry {record_key[:12]}... in {filename} failed authentication"
        )
        self.filename = filename
        self.record_key = record_key


class BackendError(VaultError):
    """Raised when a remote backend call fails (network, HTTP, payload)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BackendAuthError(BackendError):
    """Raised when the backend rejects the account credentials"""
    pass
