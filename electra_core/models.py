"""
Plain data types shared by the wallet components.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


class WalletState(str, Enum):
    """
    Wallet lifecycle state.

    - EMPTY, when it has just been instantiated or reset ;
    - READY, when it has been generated, or seeded with random (non-HD)
      private key imports.
    """
    EMPTY = "EMPTY"
    READY = "READY"


@dataclass
class Address:
    """
    One key-holding address.

    ``private_key`` is a WIF string (or a serialised extended key for the
    HD master node) while ``is_ciphered`` is False, and an opaque cipher
    blob while it is True.
    """
    hash: str
    private_key: str
    is_ciphered: bool = False
    is_hd: bool = False
    label: Optional[str] = None

    def copy(self) -> Address:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "private_key": self.private_key,
            "is_ciphered": self.is_ciphered,
            "is_hd": self.is_hd,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Address:
        return cls(
            hash=data.get("hash", ""),
            private_key=data["private_key"],
            is_ciphered=bool(data.get("is_ciphered", False)),
            is_hd=bool(data.get("is_hd", False)),
            label=data.get("label"),
        )

    def __repr__(self) -> str:
        # never leak key material through logs or tracebacks
        return f"Address({self.hash!r}, is_ciphered={self.is_ciphered}, is_hd={self.is_hd})"


@dataclass
class WalletData:
    """Exported wallet snapshot. HD chain addresses are represented by their count only."""
    chains_count: int
    master_node_address: Optional[Address]
    random_addresses: list[Address] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "chains_count": self.chains_count,
            "master_node_address": (
                self.master_node_address.to_dict() if self.master_node_address else None
            ),
            "random_addresses": [a.to_dict() for a in self.random_addresses],
        }


@dataclass
class StakingInfo:
    """Proof-of-stake metrics reported by a node."""
    network_weight: float
    next_reward_in: int
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "network_weight": self.network_weight,
            "next_reward_in": self.next_reward_in,
            "weight": self.weight,
        }
