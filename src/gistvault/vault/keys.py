# Vault - Key Tokens
#
# The vault key is shared out-of-band (URL fragment, password manager
# entry, environment variable) as a base-58 token. Knowing the token
# plus the backend account credentials is enough to reopen the vault.

import logging
from typing import Optional, Tuple

from .codec import b58decode, b58encode
from .encryption import EncryptionService
from ..exceptions import InvalidKeyError

logger = logging.getLogger(__name__)

KEY_LENGTH = EncryptionService.KEY_LENGTH


def key_to_token(key: bytes) -> str:
    """Encode a vault key as a shareable base-58 token."""
    return b58encode(key)


def key_from_token(token: str) -> bytes:
    """
    Decode a base-58 token into a vault key.

    Raises:
        InvalidKeyError: Token is not base-58 or is not exactly 32 bytes
    """
    try:
        key = b58decode(token.strip())
    except (AttributeError, ValueError) as e:
        raise InvalidKeyError(f"Vault key is not valid base-58: {e}") from e

    if len(key) != KEY_LENGTH:
        raise InvalidKeyError(
            f"Vault key must be {KEY_LENGTH} bytes, got {len(key)}"
        )
    return key


def load_or_create_key(token: Optional[str] = None) -> Tuple[bytes, bool]:
    """
    Decode ``token`` if it holds a valid key, otherwise generate a new one.

    Returns:
        (key, created) where created is True for a freshly generated key
    """
    if token:
        try:
            return key_from_token(token), False
        except InvalidKeyError as e:
            logger.warning("Ignoring unusable vault key, generating a new one: %s", e)

    return EncryptionService.generate_key(KEY_LENGTH), True
