"""
Address collection shared by every wallet component.

Holds the HD master node address, the HD chain derived from it under a
fixed wallet index, and the independently imported ("random") addresses.

The HD master node is kept private to the wallet: revealing its hash is
not a security risk, but it is a privacy one, since the children could
in principle be guessed from it.  It only leaves the wallet through an
export.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterator, Optional

from electra_core.cipher import CipherService
from electra_core.errors import InvariantViolation
from electra_core.keys import KeyDerivation
from electra_core.models import Address

logger = logging.getLogger("electra_wallet")

WALLET_INDEX = 0


class AddressStore:
    """Generation and import of wallet addresses."""

    def __init__(self, derivation: KeyDerivation, cipher: CipherService):
        self._derivation = derivation
        self._cipher = cipher
        self.master_node_address: Optional[Address] = None
        self.addresses: list[Address] = []
        self.random_addresses: list[Address] = []
        self.mnemonic: Optional[str] = None

    def clear(self) -> None:
        self.master_node_address = None
        self.addresses = []
        self.random_addresses = []
        self.mnemonic = None

    @property
    def is_hd(self) -> bool:
        return self.master_node_address is not None

    @property
    def all_addresses(self) -> list[Address]:
        """HD chain addresses followed by random addresses."""
        return [*self.addresses, *self.random_addresses]

    def held_addresses(self) -> Iterator[Address]:
        """Every address holding a private key, master node first."""
        if self.master_node_address is not None:
            yield self.master_node_address
        yield from self.addresses
        yield from self.random_addresses

    def contains(self, address_hash: str) -> bool:
        return any(a.hash == address_hash for a in self.all_addresses)

    def purge_mnemonic(self) -> None:
        self.mnemonic = None

    def generate(
        self,
        mnemonic: Optional[str] = None,
        mnemonic_extension: Optional[str] = None,
        chains_count: int = 1,
    ) -> None:
        """
        Generate the HD branch from ``mnemonic``, or from a fresh random one
        which is then retained until the wallet is locked.

        ``mnemonic_extension`` is the optional BIP-39 passphrase.  Nothing is
        stored unless the master node and every chain address were derived.
        """
        if chains_count < 0:
            raise ValueError("chains_count must be >= 0")

        fresh_mnemonic = None
        if mnemonic is not None:
            if not self._derivation.validate_mnemonic(mnemonic):
                raise InvariantViolation("The <mnemonic> parameter MUST be a valid mnemonic.")
        else:
            mnemonic = fresh_mnemonic = self._derivation.get_random_mnemonic()

        master = self._derivation.get_master_node_address_from_mnemonic(
            mnemonic, mnemonic_extension,
        )
        master = replace(master, is_hd=True, is_ciphered=False, label=None)

        chain: list[Address] = []
        for chain_index in range(chains_count):
            address = self._derivation.get_derived_chain_from_master_node_private_key(
                master.private_key, WALLET_INDEX, chain_index,
            )
            chain.append(replace(address, is_hd=False, is_ciphered=False, label=None))

        self.master_node_address = master
        self.addresses = chain
        self.mnemonic = fresh_mnemonic
        logger.info(f"Generated HD branch with {chains_count} chain address(es)")

    def import_address(
        self,
        address: Address,
        passphrase: Optional[str] = None,
        is_hd_master_node: bool = False,
    ) -> Address:
        """
        Import a copy of ``address``, deciphering it first when needed.

        The hash is always recomputed from the plaintext private key.  The
        caller's object is left untouched.
        """
        if is_hd_master_node and self.master_node_address is not None:
            raise InvariantViolation(
                "This wallet already has a HD Master Node. Only one Master Node can be set."
            )

        imported = address.copy()
        if imported.is_ciphered:
            if passphrase is None:
                raise InvariantViolation(
                    "A ciphered private key can't be imported without its <passphrase>."
                )
            imported.private_key = self._cipher.decipher_private_key(
                imported.private_key, passphrase,
            )
            imported.is_ciphered = False

        imported.hash = self._derivation.get_address_hash_from_private_key(imported.private_key)

        if is_hd_master_node:
            imported.is_hd = True
            self.master_node_address = imported
            self.mnemonic = None
            logger.info("Imported HD master node")
        else:
            imported.is_hd = False
            self.random_addresses.append(imported)
            logger.info(f"Imported random address {imported.hash}")
        return imported
