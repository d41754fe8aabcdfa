"""
JSON-RPC client for an Electra node.

Calls are HTTP POSTs authenticated with basic credentials.  Node error
codes listed in ``RPC_ERRORS_TRANSLATION`` surface as :class:`NodeError`
with a domain :class:`ErrorCode`; any other failure surfaces as a plain
:class:`TransportError` carrying the node (or client) message.

Usage:
    async with RemoteNode("http://127.0.0.1:5788", "user", "pass") as node:
        info = await node.get_staking_info()
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Optional

import aiohttp
from yarl import URL

from electra_core.errors import ErrorCode, NodeError, TransportError

if TYPE_CHECKING:
    from electra_core.config import RPCConfig

logger = logging.getLogger("electra_rpc")

ONE_YEAR_IN_SECONDS = 60 * 60 * 24 * 365

RPC_ERRORS_TRANSLATION: dict[int, ErrorCode] = {
    -4: ErrorCode.RPC_WALLET_ERROR,
    -5: ErrorCode.RPC_INVALID_ADDRESS_OR_KEY,
    -6: ErrorCode.RPC_WALLET_INSUFFICIENT_FUNDS,
    -9: ErrorCode.RPC_CLIENT_NOT_CONNECTED,
    -10: ErrorCode.RPC_CLIENT_IN_INITIAL_DOWNLOAD,
    -12: ErrorCode.RPC_WALLET_KEYPOOL_RAN_OUT,
    -13: ErrorCode.RPC_WALLET_UNLOCK_NEEDED,
    -14: ErrorCode.RPC_WALLET_PASSPHRASE_INCORRECT,
    -15: ErrorCode.RPC_WALLET_WRONG_ENC_STATE,
    -17: ErrorCode.RPC_WALLET_ALREADY_UNLOCKED,
    -28: ErrorCode.RPC_IN_WARMUP,
}


class RemoteNode:
    """RPC server methods matching the node's RPC commands."""

    def __init__(
        self,
        uri: str,
        username: str = "",
        password: str = "",
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.uri = uri
        # credentials embedded in the URI win over explicit ones
        self._auth = None if URL(uri).user else aiohttp.BasicAuth(username, password)
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None
        self._request_id = 0

    @classmethod
    def from_config(cls, cfg: RPCConfig) -> RemoteNode:
        return cls(cfg.uri, cfg.username, cfg.password, timeout=cfg.timeout_seconds)

    # ---- session lifecycle ----

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def __aenter__(self) -> RemoteNode:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ---- transport ----

    async def query(self, method: str, params: Optional[list[Any]] = None) -> Any:
        """Send one JSON-RPC request and return its ``result``."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params if params is not None else [],
        }
        logger.debug(f"RPC -> {method}")

        session = self._get_session()
        try:
            async with session.post(
                self.uri, json=payload, auth=self._auth, timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except asyncio.TimeoutError as e:
            logger.warning(f"RPC {method} timed out")
            raise TransportError(f"RPC call {method} timed out") from e
        except aiohttp.ClientError as e:
            logger.warning(f"RPC {method} failed: {e}")
            raise TransportError(f"RPC call {method} failed: {e}") from e

        try:
            body = json.loads(text)
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            if isinstance(error, dict):
                rpc_code = error.get("code")
                message = error.get("message", "")
            else:
                rpc_code, message = None, str(error)
            kind = RPC_ERRORS_TRANSLATION.get(rpc_code) if isinstance(rpc_code, int) else None
            logger.warning(f"RPC {method} returned error {rpc_code}")
            if kind is not None:
                raise NodeError(kind, rpc_code=rpc_code, status=status)
            raise TransportError(f"RPC {method}: {message}", status=status, rpc_code=rpc_code)

        if status >= 400 or not isinstance(body, dict) or "result" not in body:
            logger.warning(f"RPC {method} got an unexpected response (HTTP {status})")
            raise TransportError(
                f"We didn't get the expected RPC response to {method} (HTTP {status})",
                status=status,
            )

        return body["result"]

    # ---- wallet ----

    async def lock(self) -> None:
        """
        Remove the wallet encryption key from memory, locking the wallet.
        ``unlock`` must be called again before any method that requires an
        unlocked wallet.
        """
        return await self.query("walletlock")

    async def unlock(
        self,
        passphrase: str,
        timeout: int = ONE_YEAR_IN_SECONDS,
        staking_only: bool = True,
    ) -> None:
        """
        Store the wallet decryption key in memory for ``timeout`` seconds.
        With ``staking_only`` set, sending functions stay disabled.
        """
        return await self.query("walletpassphrase", [passphrase, timeout, staking_only])

    async def change_passphrase(self, old_passphrase: str, new_passphrase: str) -> None:
        return await self.query("walletpassphrasechange", [old_passphrase, new_passphrase])

    async def encrypt_wallet(self, passphrase: str) -> str:
        return await self.query("encryptwallet", [passphrase])

    async def check(self) -> dict:
        """Check the wallet integrity."""
        return await self.query("checkwallet")

    async def get_account(self, address: str) -> str:
        return await self.query("getaccount", [address])

    async def get_balance(self, account: str = "*", min_confirmations: int = 1) -> float:
        return await self.query("getbalance", [account, min_confirmations])

    async def get_new_address(self, account: Optional[str] = None) -> str:
        return await self.query("getnewaddress", [account] if account is not None else None)

    async def get_staking_info(self) -> dict:
        return await self.query("getstakinginfo")

    async def get_transaction(self, transaction_hash: str) -> dict:
        return await self.query("gettransaction", [transaction_hash])

    async def list_address_groupings(self) -> list:
        return await self.query("listaddressgroupings")

    async def list_received_by_address(
        self, min_confirmations: int = 1, include_empty: bool = False,
    ) -> list:
        return await self.query("listreceivedbyaddress", [min_confirmations, include_empty])

    async def list_transactions(self, account: str = "*", count: int = 10, skip: int = 0) -> list:
        return await self.query("listtransactions", [account, count, skip])

    async def list_unspent(
        self,
        min_confirmations: int = 1,
        max_confirmations: int = 9_999_999,
        addresses: Optional[list[str]] = None,
    ) -> list:
        params: list[Any] = [min_confirmations, max_confirmations]
        if addresses is not None:
            params.append(addresses)
        return await self.query("listunspent", params)

    # ---- node / chain ----

    async def get_best_block_hash(self) -> str:
        return await self.query("getbestblockhash")

    async def get_block_info(self, block_hash: str) -> dict:
        return await self.query("getblock", [block_hash])

    async def get_connection_count(self) -> int:
        return await self.query("getconnectioncount")

    async def get_difficulty(self) -> dict:
        return await self.query("getdifficulty")

    async def get_info(self) -> dict:
        return await self.query("getinfo")

    async def get_local_block_height(self) -> int:
        return await self.query("getblockcount")

    async def get_peers_info(self) -> list:
        return await self.query("getpeerinfo")

    async def validate_address(self, address: str) -> dict:
        return await self.query("validateaddress", [address])

    async def validate_public_key(self, public_key: str) -> dict:
        return await self.query("validatepubkey", [public_key])

    async def verify_message(self, address: str, signature: str, message: str) -> bool:
        return await self.query("verifymessage", [address, signature, message])
