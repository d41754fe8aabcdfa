"""
Wallet export.

Only two (locked, unsafe) combinations may export:

    locked    + not unsafe  -> ciphered private keys
    unlocked  + unsafe      -> plaintext private keys, explicitly acknowledged

An unlocked wallet exported without ``unsafe`` would silently leak
plaintext keys; a locked wallet has nothing plaintext to give for an
unsafe export.  Every exported key must also be in the ciphered state
matching the lock flag, whatever the custody.  HD chain addresses are not
exported: they are re-derived from the master node, so only their count
is kept.
"""

from __future__ import annotations

from electra_core.address_store import AddressStore
from electra_core.errors import InvariantViolation
from electra_core.models import WalletData


class ExportGuard:

    def __init__(self, store: AddressStore):
        self._store = store

    def export(self, is_locked: bool, unsafe: bool = False) -> WalletData:
        if not is_locked and not unsafe:
            raise InvariantViolation(
                "The wallet is currently unlocked. Exporting it would thus export the "
                "private keys in clear. Either lock() it first, or set <unsafe> to True "
                "if you want to export the unlocked version."
            )
        if is_locked and unsafe:
            raise InvariantViolation(
                "The wallet is currently locked. You need to unlock() it first to "
                "export its unlocked version."
            )

        master = self._store.master_node_address
        exported = [a for a in (master, *self._store.random_addresses) if a is not None]
        if any(a.is_ciphered != is_locked for a in exported):
            raise InvariantViolation(
                "Some private keys are not in the expected ciphered state. "
                + ("lock() the wallet again before exporting it."
                   if is_locked else "unlock() the wallet again before exporting it.")
            )

        return WalletData(
            chains_count=len(self._store.addresses),
            master_node_address=master.copy() if master is not None else None,
            random_addresses=[a.copy() for a in self._store.random_addresses],
        )
