"""
Test suite for electra_core.cipher — passphrase ciphering of private keys.

Covers:
  - Cipher / decipher round-trip (empty, unicode passphrases)
  - Fresh salt / nonce per call
  - Wrong passphrase, tampered, truncated and non-hex blobs
  - Iteration count carried inside the blob
"""

import os
import unittest

from electra_core.cipher import MAX_KDF_ITERATIONS, CipherService
from electra_core.crypto_utils import encode_wif
from electra_core.errors import CipherError, ErrorCode


class TestCipherRoundTrip(unittest.TestCase):

    def setUp(self):
        self.cipher = CipherService(iterations=1_000)
        self.key = encode_wif(os.urandom(32))

    def test_round_trip(self):
        blob = self.cipher.cipher_private_key(self.key, "passphrase")
        self.assertEqual(self.cipher.decipher_private_key(blob, "passphrase"), self.key)

    def test_blob_does_not_contain_plaintext(self):
        blob = self.cipher.cipher_private_key(self.key, "passphrase")
        self.assertNotIn(self.key, blob)
        self.assertNotIn(self.key.encode().hex(), blob)

    def test_fresh_salt_and_nonce(self):
        a = self.cipher.cipher_private_key(self.key, "passphrase")
        b = self.cipher.cipher_private_key(self.key, "passphrase")
        self.assertNotEqual(a, b)

    def test_empty_passphrase(self):
        blob = self.cipher.cipher_private_key(self.key, "")
        self.assertEqual(self.cipher.decipher_private_key(blob, ""), self.key)

    def test_unicode_passphrase(self):
        blob = self.cipher.cipher_private_key(self.key, "pässwörd-日本")
        self.assertEqual(self.cipher.decipher_private_key(blob, "pässwörd-日本"), self.key)

    def test_iterations_read_from_blob(self):
        blob = CipherService(iterations=1_000).cipher_private_key(self.key, "pw")
        self.assertEqual(CipherService(iterations=2_000).decipher_private_key(blob, "pw"), self.key)

    def test_invalid_iterations(self):
        with self.assertRaises(ValueError):
            CipherService(iterations=0)
        with self.assertRaises(ValueError):
            CipherService(iterations=MAX_KDF_ITERATIONS + 1)


class TestCipherFailures(unittest.TestCase):

    def setUp(self):
        self.cipher = CipherService(iterations=1_000)
        self.blob = self.cipher.cipher_private_key(encode_wif(os.urandom(32)), "right")

    def test_wrong_passphrase(self):
        with self.assertRaises(CipherError) as ctx:
            self.cipher.decipher_private_key(self.blob, "wrong")
        self.assertEqual(ctx.exception.code, ErrorCode.KEY_CIPHER)

    def test_tampered_ciphertext(self):
        last = int(self.blob[-2:], 16) ^ 0x01
        tampered = self.blob[:-2] + f"{last:02x}"
        with self.assertRaises(CipherError):
            self.cipher.decipher_private_key(tampered, "right")

    def test_truncated(self):
        with self.assertRaises(CipherError):
            self.cipher.decipher_private_key(self.blob[:40], "right")

    def test_not_hex(self):
        with self.assertRaises(CipherError):
            self.cipher.decipher_private_key("zz" * 80, "right")

    def test_unknown_version(self):
        with self.assertRaises(CipherError):
            self.cipher.decipher_private_key("ff" + self.blob[2:], "right")

    def test_excessive_iteration_count(self):
        crafted = self.blob[:2] + "ffffffff" + self.blob[10:]
        with self.assertRaises(CipherError):
            self.cipher.decipher_private_key(crafted, "right")

    def test_zero_iteration_count(self):
        crafted = self.blob[:2] + "00000000" + self.blob[10:]
        with self.assertRaises(CipherError):
            self.cipher.decipher_private_key(crafted, "right")


if __name__ == "__main__":
    unittest.main()
