"""
Passphrase-based ciphering of single private keys.

AES-256-GCM authenticated encryption under a PBKDF2-HMAC-SHA256 key,
with a fresh salt and nonce for every call.  The ciphered key is a hex
string packing every parameter needed to decipher it:

    version(1) | iterations(4, BE) | salt(16) | nonce(12) | tag(16) | ciphertext
"""

from __future__ import annotations

import hashlib
import os
import struct

from Crypto.Cipher import AES

from electra_core.errors import CipherError

BLOB_VERSION = 1
DEFAULT_KDF_ITERATIONS = 600_000
MAX_KDF_ITERATIONS = 10 * DEFAULT_KDF_ITERATIONS

_SALT_LEN = 16
_NONCE_LEN = 12
_TAG_LEN = 16
_HEADER_LEN = 1 + 4 + _SALT_LEN + _NONCE_LEN + _TAG_LEN


class CipherService:
    """Cipher / decipher private keys with a passphrase."""

    def __init__(self, iterations: int = DEFAULT_KDF_ITERATIONS):
        if not 1 <= iterations <= MAX_KDF_ITERATIONS:
            raise ValueError(f"iterations must be between 1 and {MAX_KDF_ITERATIONS}")
        self.iterations = iterations

    @staticmethod
    def _derive_key(passphrase: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", passphrase.encode("utf-8"), salt, iterations)

    def cipher_private_key(self, private_key: str, passphrase: str) -> str:
        salt = os.urandom(_SALT_LEN)
        nonce = os.urandom(_NONCE_LEN)
        key = self._derive_key(passphrase, salt, self.iterations)
        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        ciphertext, tag = cipher.encrypt_and_digest(private_key.encode("utf-8"))
        header = struct.pack(">BI", BLOB_VERSION, self.iterations)
        return (header + salt + nonce + tag + ciphertext).hex()

    def decipher_private_key(self, ciphered_key: str, passphrase: str) -> str:
        """Raises CipherError on a wrong passphrase or a tampered / malformed blob."""
        try:
            blob = bytes.fromhex(ciphered_key)
        except (TypeError, ValueError):
            raise CipherError("Ciphered private key is not a hex string") from None
        if len(blob) <= _HEADER_LEN:
            raise CipherError("Ciphered private key is truncated")

        version, iterations = struct.unpack(">BI", blob[:5])
        if version != BLOB_VERSION:
            raise CipherError(f"Unsupported ciphered key version {version}")
        if not 1 <= iterations <= MAX_KDF_ITERATIONS:
            raise CipherError(f"Ciphered private key has an invalid iteration count ({iterations})")

        offset = 5
        salt = blob[offset : offset + _SALT_LEN]
        offset += _SALT_LEN
        nonce = blob[offset : offset + _NONCE_LEN]
        offset += _NONCE_LEN
        tag = blob[offset : offset + _TAG_LEN]
        ciphertext = blob[_HEADER_LEN:]

        key = self._derive_key(passphrase, salt, iterations)
        cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
        try:
            plaintext = cipher.decrypt_and_verify(ciphertext, tag)
        except ValueError:
            raise CipherError("Wrong passphrase or corrupted ciphered private key") from None
        return plaintext.decode("utf-8")
