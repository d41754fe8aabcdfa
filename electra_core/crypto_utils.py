"""
Cryptographic helpers for Electra key material.

Covers:
  - SHA-256 / double-SHA-256 / RIPEMD-160 / Hash160
  - Base58 and Base58Check (Bitcoin alphabet)
  - secp256k1 public-key derivation
  - WIF private-key encoding and address derivation
"""

from __future__ import annotations

import hashlib

from Crypto.Hash import RIPEMD160
from ecdsa import SECP256k1, SigningKey

# Electra mainnet version bytes
PUBKEY_ADDRESS_VERSION = 0x21   # addresses start with "E"
SECRET_KEY_VERSION = 0xA1

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {c: i for i, c in enumerate(_B58_ALPHABET)}


# ── Hashing ──────────────────────────────────────────────────────

def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha256d(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def ripemd160(data: bytes) -> bytes:
    # hashlib only exposes ripemd160 when the linked OpenSSL still ships it
    return RIPEMD160.new(data).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160 of SHA-256."""
    return ripemd160(sha256(data))


# ── Base58 ───────────────────────────────────────────────────────

def base58_encode(data: bytes) -> str:
    n = int.from_bytes(data, "big")
    out = []
    while n > 0:
        n, rem = divmod(n, 58)
        out.append(_B58_ALPHABET[rem])
    pad = len(data) - len(data.lstrip(b"\x00"))
    return "1" * pad + "".join(reversed(out))


def base58_decode(text: str) -> bytes:
    n = 0
    for ch in text:
        try:
            n = n * 58 + _B58_INDEX[ch]
        except KeyError:
            raise ValueError(f"Invalid Base58 character {ch!r}") from None
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    pad = len(text) - len(text.lstrip("1"))
    return b"\x00" * pad + body


def base58check_encode(payload: bytes) -> str:
    return base58_encode(payload + sha256d(payload)[:4])


def base58check_decode(text: str) -> bytes:
    raw = base58_decode(text)
    if len(raw) < 4:
        raise ValueError("Base58Check string too short")
    payload, checksum = raw[:-4], raw[-4:]
    if sha256d(payload)[:4] != checksum:
        raise ValueError("Base58Check checksum mismatch")
    return payload


# ── Keys & addresses ─────────────────────────────────────────────

def private_to_public(private_key: bytes, compressed: bool = True) -> bytes:
    """
    Derive the secp256k1 public key of a 32-byte private key.

    Raises ValueError when the scalar is outside ``[1, n - 1]``.
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")
    if not 1 <= int.from_bytes(private_key, "big") < SECP256k1.order:
        raise ValueError("Private key is out of the secp256k1 range")
    sk = SigningKey.from_string(private_key, curve=SECP256k1)
    raw = sk.get_verifying_key().to_string()
    if not compressed:
        return b"\x04" + raw
    x, y = raw[:32], raw[32:]
    prefix = b"\x02" if y[-1] % 2 == 0 else b"\x03"
    return prefix + x


def derive_address(public_key: bytes) -> str:
    """Base58Check address hash of a public key."""
    return base58check_encode(bytes([PUBKEY_ADDRESS_VERSION]) + hash160(public_key))


def encode_wif(private_key: bytes, compressed: bool = True) -> str:
    payload = bytes([SECRET_KEY_VERSION]) + private_key
    if compressed:
        payload += b"\x01"
    return base58check_encode(payload)


def decode_wif(wif: str) -> tuple[bytes, bool]:
    """Return ``(private_key, compressed)`` for a WIF string."""
    payload = base58check_decode(wif)
    if payload[0] != SECRET_KEY_VERSION:
        raise ValueError(f"Unexpected WIF version byte 0x{payload[0]:02x}")
    if len(payload) == 34 and payload[-1] == 0x01:
        return payload[1:33], True
    if len(payload) == 33:
        return payload[1:], False
    raise ValueError("Malformed WIF payload")
