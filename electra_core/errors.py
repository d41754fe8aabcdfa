"""
Error taxonomy for the Electra wallet core.

Every failure raised by this package derives from :class:`ElectraError`.
Each error carries an :class:`ErrorCode` naming its domain kind so callers
can branch on ``err.code`` without string matching.

Hierarchy::

    ElectraError
    ├── StateError           operation invalid for the lifecycle state
    ├── InvariantViolation   duplicate master node, bad export combination …
    ├── MembershipError      address not part of this wallet
    ├── DerivationError      malformed mnemonic / key material
    ├── CipherError          wrong passphrase, tampered or malformed blob
    └── TransportError       remote node or explorer call failed
        └── NodeError        node error code found in the translation table
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Domain error kinds."""

    UNKNOWN = "UNKNOWN"

    # Lifecycle / invariants
    WALLET_STATE = "WALLET_STATE"
    WALLET_INVARIANT = "WALLET_INVARIANT"
    ADDRESS_NOT_IN_WALLET = "ADDRESS_NOT_IN_WALLET"

    # Key material
    KEY_DERIVATION = "KEY_DERIVATION"
    KEY_CIPHER = "KEY_CIPHER"

    # Transport
    TRANSPORT = "TRANSPORT"
    RPC_WALLET_ERROR = "RPC_WALLET_ERROR"
    RPC_INVALID_ADDRESS_OR_KEY = "RPC_INVALID_ADDRESS_OR_KEY"
    RPC_WALLET_INSUFFICIENT_FUNDS = "RPC_WALLET_INSUFFICIENT_FUNDS"
    RPC_CLIENT_NOT_CONNECTED = "RPC_CLIENT_NOT_CONNECTED"
    RPC_CLIENT_IN_INITIAL_DOWNLOAD = "RPC_CLIENT_IN_INITIAL_DOWNLOAD"
    RPC_WALLET_KEYPOOL_RAN_OUT = "RPC_WALLET_KEYPOOL_RAN_OUT"
    RPC_WALLET_UNLOCK_NEEDED = "RPC_WALLET_UNLOCK_NEEDED"
    RPC_WALLET_PASSPHRASE_INCORRECT = "RPC_WALLET_PASSPHRASE_INCORRECT"
    RPC_WALLET_WRONG_ENC_STATE = "RPC_WALLET_WRONG_ENC_STATE"
    RPC_WALLET_ALREADY_UNLOCKED = "RPC_WALLET_ALREADY_UNLOCKED"
    RPC_IN_WARMUP = "RPC_IN_WARMUP"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNKNOWN: "Unknown error.",
    ErrorCode.WALLET_STATE: "This operation is not available in the current wallet state.",
    ErrorCode.WALLET_INVARIANT: "This operation would break a wallet invariant.",
    ErrorCode.ADDRESS_NOT_IN_WALLET: "This address is not part of the current wallet.",
    ErrorCode.KEY_DERIVATION: "The key material could not be decoded or derived.",
    ErrorCode.KEY_CIPHER: "The private key could not be ciphered or deciphered.",
    ErrorCode.TRANSPORT: "The remote service call failed.",
    ErrorCode.RPC_WALLET_ERROR: "The node reported an unspecified wallet error.",
    ErrorCode.RPC_INVALID_ADDRESS_OR_KEY: "Invalid address or key.",
    ErrorCode.RPC_WALLET_INSUFFICIENT_FUNDS: "Not enough funds in the node wallet.",
    ErrorCode.RPC_CLIENT_NOT_CONNECTED: "The node is not connected to the network.",
    ErrorCode.RPC_CLIENT_IN_INITIAL_DOWNLOAD: "The node is still downloading the initial blocks.",
    ErrorCode.RPC_WALLET_KEYPOOL_RAN_OUT: "The node wallet keypool ran out.",
    ErrorCode.RPC_WALLET_UNLOCK_NEEDED: "The node wallet must be unlocked first.",
    ErrorCode.RPC_WALLET_PASSPHRASE_INCORRECT: "The wallet passphrase entered was incorrect.",
    ErrorCode.RPC_WALLET_WRONG_ENC_STATE: "The node wallet is not encrypted, or already encrypted.",
    ErrorCode.RPC_WALLET_ALREADY_UNLOCKED: "The node wallet is already unlocked.",
    ErrorCode.RPC_IN_WARMUP: "The node is still warming up.",
}


class ElectraError(Exception):
    """Base class for every error raised by the wallet core."""

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[ErrorCode] = None):
        self.code = code or self.default_code
        self.message = message or ERROR_MESSAGES[self.code]
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": self.message}


class StateError(ElectraError):
    """Operation invalid for the current lifecycle state."""
    default_code = ErrorCode.WALLET_STATE


class InvariantViolation(ElectraError):
    """Operation would break a wallet invariant."""
    default_code = ErrorCode.WALLET_INVARIANT


class MembershipError(ElectraError):
    """Address hash does not belong to the wallet."""
    default_code = ErrorCode.ADDRESS_NOT_IN_WALLET


class DerivationError(ElectraError):
    default_code = ErrorCode.KEY_DERIVATION


class CipherError(ElectraError):
    default_code = ErrorCode.KEY_CIPHER


class TransportError(ElectraError):
    """
    A remote node or explorer call failed.

    ``status`` is the HTTP status when one was received and ``rpc_code``
    the raw JSON-RPC error code when the node returned one that is not
    in the translation table.
    """

    default_code = ErrorCode.TRANSPORT

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        status: Optional[int] = None,
        rpc_code: Optional[int] = None,
    ):
        super().__init__(message, code)
        self.status = status
        self.rpc_code = rpc_code

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        if self.status is not None:
            d["status"] = self.status
        if self.rpc_code is not None:
            d["rpc_code"] = self.rpc_code
        return d


class NodeError(TransportError):
    """Node error whose JSON-RPC code maps to a known :class:`ErrorCode`."""

    def __init__(self, code: ErrorCode, rpc_code: Optional[int] = None,
                 status: Optional[int] = None):
        super().__init__(None, code, status=status, rpc_code=rpc_code)
