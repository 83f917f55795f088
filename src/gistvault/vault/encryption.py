# Vault - Encryption Service
#
# Symmetric authenticated encryption (AES-256-GCM) and keyed hashing
# for everything the vault writes to the remote backend.
#
# Ciphertext is persisted as a [nonce, box] pair of base-58 strings.
# Keyed hashes mix the account username and the vault key into the
# digest, so shard filenames and record keys are meaningless without
# the key even though they are stored in plaintext.

import hashlib
import json
import logging
import os
from typing import Any, List, Optional, Sequence

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .codec import b58decode, b58encode

logger = logging.getLogger(__name__)

CiphertextPair = List[str]


class EncryptionService:
    """
    Handles encryption, decryption and keyed hashing for vault records.

    Flow:
    1. Client generates (or decodes) a 32-byte vault key
    2. AES-256-GCM encrypts each record with a fresh random nonce
    3. Nonce and ciphertext (with GCM tag) are base-58 encoded
    4. Decryption failures are reported as None, never raised
    """

    KEY_LENGTH = 32  # 256 bits for AES-256
    NONCE_LENGTH = 12  # 96-bit nonce for GCM (recommended)
    TAG_LENGTH = 16  # GCM authentication tag appended to the ciphertext

    @staticmethod
    def generate_key(length: int = KEY_LENGTH) -> bytes:
        """Generate a cryptographically random key."""
        return os.urandom(length)

    @staticmethod
    def encrypt(plaintext: str, key: bytes) -> CiphertextPair:
        """
        Encrypt plaintext using AES-256-GCM.

        Args:
            plaintext: Secret or serialized record to encrypt
            key: 256-bit vault key

        Returns:
            [nonce_b58, box_b58]
            Both needed for decryption
        """
        # Generate random nonce (must be unique per encryption)
        nonce = os.urandom(EncryptionService.NONCE_LENGTH)

        aesgcm = AESGCM(key)
        box = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)

        return [b58encode(nonce), b58encode(box)]

    @staticmethod
    def decrypt(pair: Sequence[str], key: bytes) -> Optional[str]:
        """
        Decrypt a [nonce, box] pair using AES-256-GCM.

        Args:
            pair: Ciphertext pair as produced by encrypt()
            key: 256-bit vault key

        Returns:
            Decrypted plaintext, or None if authentication fails
            (wrong key, tampered or malformed data)
        """
        try:
            nonce_b58, box_b58 = pair
            nonce = b58decode(nonce_b58)
            box = b58decode(box_b58)
        except (TypeError, ValueError):
            return None

        if len(nonce) != EncryptionService.NONCE_LENGTH:
            return None
        if len(box) < EncryptionService.TAG_LENGTH:
            return None

        try:
            plaintext_bytes = AESGCM(key).decrypt(nonce, box, None)
        except InvalidTag:
            return None

        try:
            return plaintext_bytes.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Authenticated payload is not valid UTF-8")
            return None

    @staticmethod
    def keyed_hash(username: str, key: bytes, data: Any) -> str:
        """
        One-way hash of [username, key, data], base-58 encoded.

        The key bytes are serialized as a list of integers so the digest
        input is plain JSON. Equal data hashes to unrelated values under
        different keys or usernames; the same inputs always hash the same.

        Args:
            username: Backend account name
            key: Vault key
            data: Any JSON-serializable value (a tag, a tag list, ...)

        Returns:
            Base-58 SHA-512 digest
        """
        message = json.dumps(
            [username, list(key), data],
            separators=(",", ":"),
            ensure_ascii=False,
        )
        digest = hashlib.sha512(message.encode("utf-8")).digest()
        return b58encode(digest)
