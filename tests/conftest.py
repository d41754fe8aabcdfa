"""
Shared pytest fixtures for the Electra wallet core test suite.
"""

import os

import pytest

from electra_core.cipher import CipherService
from electra_core.crypto_utils import encode_wif
from electra_core.errors import TransportError
from electra_core.models import Address
from electra_core.rpc import ONE_YEAR_IN_SECONDS
from electra_core.wallet import Wallet

# keeps PBKDF2 cheap; the blob still records the count it was made with
FAST_KDF_ITERATIONS = 1_000


class FakeBalanceService:
    """In-memory stand-in for the explorer."""

    def __init__(self, balances=None, fail_on=()):
        self.balances = dict(balances or {})
        self.fail_on = set(fail_on)
        self.calls: list[str] = []
        self.closed = False

    async def get_balance_for(self, address_hash):
        self.calls.append(address_hash)
        if address_hash in self.fail_on:
            raise TransportError(f"explorer down for {address_hash}")
        return self.balances.get(address_hash, 0.0)

    async def close(self):
        self.closed = True


class FakeRemoteNode:
    """Records wallet RPC calls instead of sending them."""

    def __init__(self, fail_with=None, staking=None):
        self.fail_with = fail_with
        self.staking = staking or {"netstakeweight": 1500.5, "expectedtime": 3600, "weight": 42.0}
        self.calls: list[tuple] = []
        self.closed = False

    async def lock(self):
        self.calls.append(("walletlock",))
        if self.fail_with is not None:
            raise self.fail_with

    async def unlock(self, passphrase, timeout=ONE_YEAR_IN_SECONDS, staking_only=True):
        self.calls.append(("walletpassphrase", passphrase, timeout, staking_only))
        if self.fail_with is not None:
            raise self.fail_with

    async def get_staking_info(self):
        self.calls.append(("getstakinginfo",))
        if self.fail_with is not None:
            raise self.fail_with
        return self.staking

    async def close(self):
        self.closed = True


@pytest.fixture
def cipher():
    """Cipher service with a low KDF iteration count."""
    return CipherService(FAST_KDF_ITERATIONS)


@pytest.fixture
def balance_service():
    return FakeBalanceService()


@pytest.fixture
def wallet(cipher, balance_service):
    """Fresh EMPTY wallet holding its keys locally."""
    return Wallet(cipher=cipher, balance_service=balance_service)


@pytest.fixture
def remote_node():
    return FakeRemoteNode()


@pytest.fixture
def remote_wallet(cipher, balance_service, remote_node):
    """Wallet bound to a (fake) remote node."""
    return Wallet(cipher=cipher, balance_service=balance_service, remote_node=remote_node)


@pytest.fixture
def make_address():
    """Factory for plaintext random addresses (hash left for the wallet to compute)."""
    def _make(label=None):
        return Address(hash="", private_key=encode_wif(os.urandom(32)), label=label)
    return _make
