# Vault - Base-58 Codec
#
# Every binary field that leaves the client (nonces, ciphertext, record
# hashes, the shareable vault key) is written as base-58 text using the
# Bitcoin alphabet. Base-58 avoids the "+", "/" and "=" characters of
# base64, so values are safe in filenames, JSON keys and URL fragments.

import base58

ALPHABET = base58.BITCOIN_ALPHABET.decode("ascii")


def b58encode(data: bytes) -> str:
    """
    Encode bytes as base-58 text.

    Leading zero bytes are preserved as leading "1" characters, so the
    encoding round-trips byte strings of any length (including b"").
    """
    return base58.b58encode(bytes(data)).decode("ascii")


def b58decode(text: str) -> bytes:
    """
    Decode base-58 text back to bytes.

    Raises:
        ValueError: If the input is not a str or contains a character
                    outside the alphabet
    """
    if not isinstance(text, str):
        raise ValueError(f"Base-58 input must be str, got {type(text).__name__}")
    if text != text.strip():
        # base58.b58decode would silently drop trailing whitespace
        raise ValueError("Base-58 input has surrounding whitespace")
    return base58.b58decode(text)
