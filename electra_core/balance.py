"""
Balance and staking queries.
"""

from __future__ import annotations

import logging
from typing import Optional

from electra_core.address_store import AddressStore
from electra_core.custody import KeyCustody
from electra_core.errors import MembershipError
from electra_core.models import StakingInfo
from electra_core.web_services import BalanceService

logger = logging.getLogger("electra_wallet")


class BalanceAggregator:
    """Resolves balances through the explorer and staking data through the custody."""

    def __init__(self, store: AddressStore, balance_service: BalanceService,
                 custody: KeyCustody):
        self._store = store
        self._balance_service = balance_service
        self._custody = custody

    async def get_balance(self, address_hash: Optional[str] = None) -> float:
        """
        Balance of ``address_hash``, or the sum over every wallet address.

        Lookups run one after the other; the first failure propagates and no
        partial total is returned.
        """
        if address_hash is not None:
            if not self._store.contains(address_hash):
                raise MembershipError(
                    f"You can't get the balance of {address_hash}: "
                    "it is not part of the current wallet."
                )
            return await self._balance_service.get_balance_for(address_hash)

        total = 0.0
        for address in self._store.all_addresses:
            total += await self._balance_service.get_balance_for(address.hash)
        logger.debug(f"Summed balance of {len(self._store.all_addresses)} address(es)")
        return total

    async def get_staking_info(self) -> StakingInfo:
        return await self._custody.get_staking_info()
