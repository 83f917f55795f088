"""
Tests for EncryptionService: AES-256-GCM pairs and keyed hashing.
"""

import json

import pytest

from gistvault.vault.codec import b58decode, b58encode
from gistvault.vault.encryption import EncryptionService


class TestGenerateKey:
    def test_default_length(self):
        assert len(EncryptionService.generate_key()) == 32

    def test_custom_length(self):
        assert len(EncryptionService.generate_key(16)) == 16

    def test_keys_are_random(self):
        assert EncryptionService.generate_key() != EncryptionService.generate_key()


class TestEncryptDecrypt:
    @pytest.mark.parametrize("plaintext", ["hunter2", "", "ünïcödé ✓", "x" * 5000])
    def test_round_trip(self, key, plaintext):
        pair = EncryptionService.encrypt(plaintext, key)
        assert EncryptionService.decrypt(pair, key) == plaintext

    def test_pair_shape(self, key):
        nonce, box = EncryptionService.encrypt("secret", key)
        assert len(b58decode(nonce)) == EncryptionService.NONCE_LENGTH
        # ciphertext + 16 byte tag
        assert len(b58decode(box)) == len("secret") + EncryptionService.TAG_LENGTH

    def test_fresh_nonce_per_encryption(self, key):
        first = EncryptionService.encrypt("same", key)
        second = EncryptionService.encrypt("same", key)
        assert first[0] != second[0]
        assert first[1] != second[1]

    def test_wrong_key_returns_none(self, key, other_key):
        pair = EncryptionService.encrypt("secret", key)
        assert EncryptionService.decrypt(pair, other_key) is None

    def test_tampered_box_returns_none(self, key):
        nonce, box = EncryptionService.encrypt("secret", key)
        raw = bytearray(b58decode(box))
        raw[0] ^= 0x01
        assert EncryptionService.decrypt([nonce, b58encode(bytes(raw))], key) is None

    def test_swapped_nonce_returns_none(self, key):
        first = EncryptionService.encrypt("one", key)
        second = EncryptionService.encrypt("two", key)
        assert EncryptionService.decrypt([second[0], first[1]], key) is None

    @pytest.mark.parametrize("pair", [
        None,
        [],
        ["only-one"],
        ["a", "b", "c"],
        ["0OIl", "0OIl"],
        ["1", "1"],
        [1, 2],
    ])
    def test_malformed_pairs_return_none(self, key, pair):
        assert EncryptionService.decrypt(pair, key) is None

    def test_pair_is_json_serializable(self, key):
        pair = EncryptionService.encrypt("secret", key)
        restored = json.loads(json.dumps(pair))
        assert EncryptionService.decrypt(restored, key) == "secret"


class TestKeyedHash:
    def test_deterministic(self, key):
        a = EncryptionService.keyed_hash("alice", key, ["example.com", "alice"])
        b = EncryptionService.keyed_hash("alice", key, ["example.com", "alice"])
        assert a == b

    def test_sha512_length(self, key):
        digest = EncryptionService.keyed_hash("alice", key, "tag")
        assert len(b58decode(digest)) == 64

    def test_scoped_by_key(self, key, other_key):
        a = EncryptionService.keyed_hash("alice", key, "tag")
        b = EncryptionService.keyed_hash("alice", other_key, "tag")
        assert a != b

    def test_scoped_by_username(self, key):
        a = EncryptionService.keyed_hash("alice", key, "tag")
        b = EncryptionService.keyed_hash("bob", key, "tag")
        assert a != b

    def test_data_types_distinguished(self, key):
        a = EncryptionService.keyed_hash("alice", key, "tag")
        b = EncryptionService.keyed_hash("alice", key, ["tag"])
        assert a != b

    def test_does_not_contain_plaintext(self, key):
        digest = EncryptionService.keyed_hash("alice", key, "example")
        assert "example" not in digest
