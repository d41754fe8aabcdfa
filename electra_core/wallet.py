"""
Wallet management for Electra.

``Wallet`` is the facade over one lifecycle state machine and the
components sharing its address collection:

  - ``AddressStore``       HD generation and random-address imports
  - ``KeyCustody``         lock / unlock, local or delegated to a node
  - ``BalanceAggregator``  balances and staking metrics
  - ``ExportGuard``        export with the locked / unsafe checks

Lifecycle::

    EMPTY --generate() / first import_random_address()--> READY
    READY --reset()--> EMPTY

A wallet bound to a remote node starts READY: its keys live on the node.

Usage:
    wallet = Wallet().generate(chains_count=3)
    phrase = wallet.mnemonic          # save it now, lock() purges it
    await wallet.lock("passphrase")
    data = wallet.export()
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from electra_core.address_store import AddressStore
from electra_core.balance import BalanceAggregator
from electra_core.cipher import CipherService
from electra_core.config import ElectraConfig, load_config
from electra_core.custody import KeyCustody, LocalKeyCustody, RemoteKeyCustody
from electra_core.errors import StateError
from electra_core.export_guard import ExportGuard
from electra_core.keys import KeyDerivation
from electra_core.logging_config import setup_logging_from_config
from electra_core.models import Address, StakingInfo, WalletData, WalletState
from electra_core.rpc import RemoteNode
from electra_core.web_services import BalanceService

logger = logging.getLogger("electra_wallet")


class Wallet:
    """Electra wallet: addresses, lock state, exports and balances."""

    def __init__(
        self,
        config: Optional[ElectraConfig] = None,
        *,
        derivation: Optional[KeyDerivation] = None,
        cipher: Optional[CipherService] = None,
        balance_service: Optional[BalanceService] = None,
        remote_node: Optional[RemoteNode] = None,
    ):
        config = config or ElectraConfig()
        self._state = WalletState.EMPTY
        self._is_locked = False
        self._transactions: list[dict[str, Any]] = []

        self._cipher = cipher or CipherService(config.cipher.kdf_iterations)
        self._store = AddressStore(derivation or KeyDerivation(), self._cipher)

        self._owns_remote_node = remote_node is None and config.rpc.enabled
        if self._owns_remote_node:
            remote_node = RemoteNode.from_config(config.rpc)
        self._custody: KeyCustody
        if remote_node is not None:
            self._custody = RemoteKeyCustody(remote_node)
            self._state = WalletState.READY
        else:
            self._custody = LocalKeyCustody(self._store, self._cipher)

        self._owns_balance_service = balance_service is None
        self._balance_service = balance_service or BalanceService.from_config(config.explorer)
        self._balances = BalanceAggregator(self._store, self._balance_service, self._custody)
        self._export_guard = ExportGuard(self._store)

    @classmethod
    def from_config(cls, path: Optional[str] = None, **collaborators: Any) -> Wallet:
        """
        Build a wallet from a TOML file plus ``ELECTRA_*`` environment
        overrides, applying its ``[logging]`` section first.
        """
        config = load_config(path)
        setup_logging_from_config(config.logging)
        logger.debug(f"Loaded wallet configuration from {path or 'environment'}")
        return cls(config, **collaborators)

    # ---- state ----

    @property
    def state(self) -> WalletState:
        """EMPTY after construction or reset(), READY once generated or seeded."""
        return self._state

    def _require_ready(self, what: str) -> None:
        if self._state != WalletState.READY:
            raise StateError(f'{what} is only available when the #state is "READY".')

    @property
    def is_remote(self) -> bool:
        """True when a remote node holds the keys."""
        return self._custody.is_remote

    # ---- accessors ----

    @property
    def addresses(self) -> list[Address]:
        """HD chain addresses."""
        self._require_ready("#addresses")
        return list(self._store.addresses)

    @property
    def random_addresses(self) -> list[Address]:
        """Random (non-HD) addresses, in import order."""
        self._require_ready("#random_addresses")
        return list(self._store.random_addresses)

    @property
    def all_addresses(self) -> list[Address]:
        self._require_ready("#all_addresses")
        return self._store.all_addresses

    @property
    def is_hd(self) -> bool:
        self._require_ready("#is_hd")
        return self._store.is_hd

    @property
    def is_locked(self) -> bool:
        """
        True when every private key is ciphered.  For a node-held wallet this
        mirrors the last successful lock() / unlock() call.
        """
        self._require_ready("#is_locked")
        return self._is_locked

    @property
    def mnemonic(self) -> str:
        """
        Mnemonic of a brand new wallet.

        Only available after generate() was called without a mnemonic, and
        until the wallet is locked.
        """
        self._require_ready("#mnemonic")
        if self._store.mnemonic is None:
            raise StateError(
                "#mnemonic is only available after a brand new wallet has been generated."
            )
        return self._store.mnemonic

    @property
    def transactions(self) -> list[dict[str, Any]]:
        self._require_ready("#transactions")
        return list(self._transactions)

    # ---- lifecycle ----

    def generate(
        self,
        mnemonic: Optional[str] = None,
        mnemonic_extension: Optional[str] = None,
        chains_count: int = 1,
    ) -> Wallet:
        """
        Generate an HD wallet from ``mnemonic``, or from a random one, with
        ``chains_count`` derived addresses.

        ``mnemonic_extension`` is the optional BIP-39 passphrase.
        """
        if self._state == WalletState.READY:
            raise StateError(
                "generate() can't be called on an already ready wallet. "
                "You need to reset() it first."
            )
        self._store.generate(mnemonic, mnemonic_extension, chains_count)
        self._state = WalletState.READY
        return self

    def import_random_address(
        self,
        address: Address,
        passphrase: Optional[str] = None,
        is_hd_master_node: bool = False,
    ) -> Wallet:
        """
        Import a random (legacy) private key, or a HD master node.

        A ciphered ``address`` is deciphered with ``passphrase``.  An EMPTY
        wallet becomes READY.
        """
        if self._state == WalletState.READY and self._is_locked:
            raise StateError("A locked wallet can't import addresses. unlock() it first.")
        self._store.import_address(address, passphrase, is_hd_master_node)
        self._state = WalletState.READY
        return self

    def reset(self) -> Wallet:
        """Forget every address, the mnemonic and transactions; back to EMPTY."""
        if self._state == WalletState.EMPTY:
            raise StateError('You can\'t reset() a wallet that is already empty (#state = "EMPTY").')
        self._store.clear()
        self._transactions = []
        self._is_locked = False
        self._state = WalletState.EMPTY
        logger.info("Wallet reset")
        return self

    # ---- custody ----

    async def lock(self, passphrase: str) -> None:
        """
        Lock the wallet, that is, cipher all the private keys.

        Postcondition: ``is_locked`` is True and the mnemonic of a freshly
        generated wallet is gone for good.  Already ciphered keys are left
        as they are.
        """
        self._require_ready("lock()")
        await self._custody.lock(passphrase)
        self._store.purge_mnemonic()
        self._is_locked = True
        logger.info("Wallet locked")

    async def unlock(self, passphrase: str, for_staking_only: bool = True) -> None:
        """
        Unlock the wallet, that is, decipher all the private keys.

        ``for_staking_only`` is forwarded to a remote node, which then keeps
        sending functions disabled.
        """
        self._require_ready("unlock()")
        await self._custody.unlock(passphrase, for_staking_only)
        self._is_locked = False
        logger.info("Wallet unlocked")

    # ---- export ----

    def export(self, unsafe: bool = False) -> WalletData:
        """Export wallet data with ciphered keys, or plaintext ones if ``unsafe``."""
        self._require_ready("export()")
        return self._export_guard.export(self._is_locked, unsafe)

    # ---- balances ----

    async def get_balance(self, address_hash: Optional[str] = None) -> float:
        """Balance of ``address_hash``, or of the whole wallet when omitted."""
        if self._state == WalletState.EMPTY:
            raise StateError('You can\'t get the balance of an empty wallet (#state = "EMPTY").')
        return await self._balances.get_balance(address_hash)

    async def get_staking_info(self) -> StakingInfo:
        """Current staking data; requires a wallet bound to a remote node."""
        return await self._balances.get_staking_info()

    # ---- resources ----

    async def close(self) -> None:
        """Close the HTTP sessions of collaborators this wallet created."""
        if self._owns_remote_node:
            await self._custody.close()
        if self._owns_balance_service:
            await self._balance_service.close()

    async def __aenter__(self) -> Wallet:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
