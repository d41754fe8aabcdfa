"""
Key custody strategies.

A wallet either holds its private keys itself (``LocalKeyCustody``) or is
bound to a node that holds them (``RemoteKeyCustody``).  The strategy is
picked once when the wallet is built; lock, unlock and staking queries
go through it without further branching.

Local lock / unlock walk the master node, the HD chain and the random
addresses in that order.  A cipher failure stops the walk and propagates:
addresses already processed in the call keep their new representation.
"""

from __future__ import annotations

import abc
import logging

from electra_core.address_store import AddressStore
from electra_core.cipher import CipherService
from electra_core.errors import StateError, TransportError
from electra_core.models import StakingInfo
from electra_core.rpc import ONE_YEAR_IN_SECONDS, RemoteNode

logger = logging.getLogger("electra_wallet")


class KeyCustody(abc.ABC):
    """Where the private keys live and how they are locked."""

    is_remote: bool = False

    @abc.abstractmethod
    async def lock(self, passphrase: str) -> None:
        ...

    @abc.abstractmethod
    async def unlock(self, passphrase: str, for_staking_only: bool = True) -> None:
        ...

    @abc.abstractmethod
    async def get_staking_info(self) -> StakingInfo:
        ...

    async def close(self) -> None:
        return None


class LocalKeyCustody(KeyCustody):
    """Ciphers and deciphers the keys held in the address store."""

    def __init__(self, store: AddressStore, cipher: CipherService):
        self._store = store
        self._cipher = cipher

    async def lock(self, passphrase: str) -> None:
        ciphered = 0
        for address in self._store.held_addresses():
            if address.is_ciphered:
                continue
            address.private_key = self._cipher.cipher_private_key(address.private_key, passphrase)
            address.is_ciphered = True
            ciphered += 1
        logger.debug(f"Ciphered {ciphered} private key(s)")

    async def unlock(self, passphrase: str, for_staking_only: bool = True) -> None:
        # for_staking_only only has a meaning for a node-held wallet
        deciphered = 0
        for address in self._store.held_addresses():
            if not address.is_ciphered:
                continue
            address.private_key = self._cipher.decipher_private_key(address.private_key, passphrase)
            address.is_ciphered = False
            deciphered += 1
        logger.debug(f"Deciphered {deciphered} private key(s)")

    async def get_staking_info(self) -> StakingInfo:
        raise StateError("Staking info is only available for a wallet bound to a remote node.")


class RemoteKeyCustody(KeyCustody):
    """Delegates to the node's own encrypted key store."""

    is_remote = True

    def __init__(self, node: RemoteNode):
        self.node = node

    async def lock(self, passphrase: str) -> None:
        # the node locks with its own key; the passphrase is not sent
        await self.node.lock()

    async def unlock(self, passphrase: str, for_staking_only: bool = True) -> None:
        await self.node.unlock(passphrase, ONE_YEAR_IN_SECONDS, for_staking_only)

    async def get_staking_info(self) -> StakingInfo:
        res = await self.node.get_staking_info()
        try:
            return StakingInfo(
                network_weight=res["netstakeweight"],
                next_reward_in=res["expectedtime"],
                weight=res["weight"],
            )
        except (KeyError, TypeError) as e:
            raise TransportError(f"Unexpected getstakinginfo response: missing {e}") from e

    async def close(self) -> None:
        await self.node.close()
