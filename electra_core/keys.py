"""
Key derivation for Electra wallets.

Provides:
  - BIP-39 mnemonic generation, validation and seed derivation
  - BIP-32 hierarchical deterministic key derivation (``HDNode``)
  - ``KeyDerivation``, the service the wallet core uses to turn mnemonics
    and private keys into addresses

Key encodings:
  - the HD master node private key is a serialised extended private key
    (``xprv…``), so chain addresses can be re-derived from it alone;
  - chain and random addresses carry a WIF private key.
"""

from __future__ import annotations

import hashlib
import hmac
import os
import struct
import unicodedata
from typing import Optional

from ecdsa import SECP256k1

from electra_core.crypto_utils import (
    base58check_decode,
    base58check_encode,
    decode_wif,
    derive_address,
    encode_wif,
    hash160,
    private_to_public,
)
from electra_core.errors import DerivationError
from electra_core.models import Address


# ===================================================================
#  BIP-39 Mnemonic Support
# ===================================================================

def _generate_entropy(strength: int = 128) -> bytes:
    """Generate random entropy for mnemonic (128/160/192/224/256 bits)."""
    if strength not in (128, 160, 192, 224, 256):
        raise ValueError("Strength must be 128/160/192/224/256")
    return os.urandom(strength // 8)


def _load_wordlist() -> list[str]:
    """Load the BIP-39 English wordlist shipped with the package."""
    wordlist_path = os.path.join(os.path.dirname(__file__), "bip39_english.txt")
    with open(wordlist_path, encoding="utf-8") as f:
        words = [line.strip() for line in f if line.strip()]
    if len(words) != 2048:
        raise RuntimeError(f"BIP-39 wordlist must hold 2048 words, found {len(words)}")
    return words


_WORDLIST: list[str] | None = None
_WORD_INDEX: dict[str, int] | None = None


def _get_wordlist() -> list[str]:
    global _WORDLIST
    if _WORDLIST is None:
        _WORDLIST = _load_wordlist()
    return _WORDLIST


def _get_word_index() -> dict[str, int]:
    global _WORD_INDEX
    if _WORD_INDEX is None:
        _WORD_INDEX = {w: i for i, w in enumerate(_get_wordlist())}
    return _WORD_INDEX


def entropy_to_mnemonic(entropy: bytes) -> str:
    """Convert entropy bytes to a BIP-39 mnemonic phrase."""
    if len(entropy) not in (16, 20, 24, 28, 32):
        raise ValueError("Entropy must be 16/20/24/28/32 bytes")
    wordlist = _get_wordlist()
    h = hashlib.sha256(entropy).digest()
    bits = bin(int.from_bytes(entropy, "big"))[2:].zfill(len(entropy) * 8)
    bits += bin(int.from_bytes(h, "big"))[2:].zfill(256)[: len(entropy) * 8 // 32]

    words = []
    for i in range(0, len(bits), 11):
        words.append(wordlist[int(bits[i : i + 11], 2)])
    return " ".join(words)


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """Convert a mnemonic phrase to a 64-byte seed (BIP-39)."""
    normalized = unicodedata.normalize("NFKD", mnemonic)
    salt = unicodedata.normalize("NFKD", "mnemonic" + passphrase).encode("utf-8")
    return hashlib.pbkdf2_hmac(
        "sha512", normalized.encode("utf-8"), salt, 2048, dklen=64,
    )


def generate_mnemonic(strength: int = 128) -> str:
    """Generate a new BIP-39 mnemonic phrase."""
    return entropy_to_mnemonic(_generate_entropy(strength))


def validate_mnemonic(mnemonic: str) -> bool:
    """Check word count, wordlist membership and the BIP-39 checksum."""
    words = mnemonic.strip().split()
    if len(words) not in (12, 15, 18, 21, 24):
        return False

    index = _get_word_index()
    try:
        bits = "".join(bin(index[w])[2:].zfill(11) for w in words)
    except KeyError:
        return False

    entropy_bits = len(words) * 11 * 32 // 33
    entropy = int(bits[:entropy_bits], 2).to_bytes(entropy_bits // 8, "big")
    h = hashlib.sha256(entropy).digest()
    expected = bin(int.from_bytes(h, "big"))[2:].zfill(256)[: len(bits) - entropy_bits]
    return bits[entropy_bits:] == expected


# ===================================================================
#  HD Key Derivation (BIP-32)
# ===================================================================

class HDNode:
    """
    Hierarchical Deterministic key derivation node.

    Implements BIP-32 derivation with HMAC-SHA512.
    Path notation: m/wallet'/chain
    """

    HARDENED = 0x80000000
    XPRV_VERSION = 0x0488ADE4

    def __init__(self, private_key: bytes, chain_code: bytes, depth: int = 0,
                 index: int = 0, parent_fingerprint: bytes = b"\x00" * 4):
        self.private_key = private_key
        self.chain_code = chain_code
        self.depth = depth
        self.index = index
        self.parent_fingerprint = parent_fingerprint

    @classmethod
    def from_seed(cls, seed: bytes) -> HDNode:
        """Create master node from a 64-byte seed."""
        I = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()
        return cls(private_key=I[:32], chain_code=I[32:])

    @property
    def public_key(self) -> bytes:
        """Compressed (33-byte) secp256k1 public key."""
        return private_to_public(self.private_key, compressed=True)

    @property
    def fingerprint(self) -> bytes:
        """First 4 bytes of Hash160 of public key."""
        return hash160(self.public_key)[:4]

    @property
    def address(self) -> str:
        return derive_address(self.public_key)

    def derive_child(self, index: int) -> HDNode:
        """Derive a child node at the given index."""
        if index >= self.HARDENED:
            data = b"\x00" + self.private_key + struct.pack(">I", index)
        else:
            data = self.public_key + struct.pack(">I", index)

        I = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        child_key_int = (int.from_bytes(I[:32], "big") +
                         int.from_bytes(self.private_key, "big")) % SECP256k1.order
        if child_key_int == 0:
            raise DerivationError(f"Invalid child key at index {index}")

        return HDNode(
            private_key=child_key_int.to_bytes(32, "big"),
            chain_code=I[32:],
            depth=self.depth + 1,
            index=index,
            parent_fingerprint=self.fingerprint,
        )

    def derive_path(self, path: str) -> HDNode:
        """Derive from a path string like ``"m/0'/3"``."""
        if path in ("m", ""):
            return self
        if path.startswith("m/"):
            path = path[2:]

        node = self
        for component in path.split("/"):
            if component.endswith("'"):
                index = int(component[:-1]) + self.HARDENED
            else:
                index = int(component)
            node = node.derive_child(index)
        return node

    # ---- serialisation ----

    def to_extended_key(self) -> str:
        """Serialise as a Base58Check extended private key."""
        payload = (
            struct.pack(">I", self.XPRV_VERSION)
            + bytes([self.depth])
            + self.parent_fingerprint
            + struct.pack(">I", self.index)
            + self.chain_code
            + b"\x00" + self.private_key
        )
        return base58check_encode(payload)

    @classmethod
    def from_extended_key(cls, xprv: str) -> HDNode:
        try:
            payload = base58check_decode(xprv)
        except ValueError as e:
            raise DerivationError(f"Malformed extended key: {e}") from e
        if len(payload) != 78:
            raise DerivationError("Extended key payload must be 78 bytes")
        (version,) = struct.unpack(">I", payload[:4])
        if version != cls.XPRV_VERSION or payload[45] != 0:
            raise DerivationError("Not an extended private key")
        if not 1 <= int.from_bytes(payload[46:], "big") < SECP256k1.order:
            raise DerivationError("Extended key holds an out-of-range private key")
        return cls(
            private_key=payload[46:],
            chain_code=payload[13:45],
            depth=payload[4],
            index=struct.unpack(">I", payload[9:13])[0],
            parent_fingerprint=payload[5:9],
        )


def _is_extended_key(private_key: str) -> bool:
    try:
        return len(base58check_decode(private_key)) == 78
    except ValueError:
        return False


# ===================================================================
#  KeyDerivation service
# ===================================================================

class KeyDerivation:
    """Turns mnemonics and private keys into wallet addresses."""

    def __init__(self, strength: int = 128):
        self.strength = strength

    def validate_mnemonic(self, mnemonic: str) -> bool:
        return validate_mnemonic(mnemonic)

    def get_random_mnemonic(self) -> str:
        return generate_mnemonic(self.strength)

    def get_master_node_address_from_mnemonic(
        self, mnemonic: str, mnemonic_extension: Optional[str] = None,
    ) -> Address:
        """
        Derive the HD master node address.

        The returned private key is the master extended private key.
        """
        seed = mnemonic_to_seed(mnemonic, mnemonic_extension or "")
        master = HDNode.from_seed(seed)
        return Address(
            hash=master.address,
            private_key=master.to_extended_key(),
            is_hd=True,
        )

    def get_derived_chain_from_master_node_private_key(
        self, private_key: str, wallet_index: int, chain_index: int,
    ) -> Address:
        """Derive the chain address at ``m/wallet_index'/chain_index``."""
        master = HDNode.from_extended_key(private_key)
        child = master.derive_path(f"m/{wallet_index}'/{chain_index}")
        return Address(hash=child.address, private_key=encode_wif(child.private_key))

    def get_address_hash_from_private_key(self, private_key: str) -> str:
        """Address hash of a WIF or extended private key."""
        if _is_extended_key(private_key):
            return HDNode.from_extended_key(private_key).address
        try:
            raw, compressed = decode_wif(private_key)
            public_key = private_to_public(raw, compressed=compressed)
        except ValueError as e:
            raise DerivationError(f"Malformed private key: {e}") from e
        return derive_address(public_key)
