"""
Block explorer web services.

Only the per-address balance lookup is needed by the wallet core:

    GET {base_url}/ext/getbalance/{address_hash}

The explorer answers with a bare number, or with a JSON object carrying
an ``error`` key.  ``"address not found."`` means the address never
appeared on chain, which is a zero balance rather than a failure.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Optional

import aiohttp

from electra_core.errors import TransportError

if TYPE_CHECKING:
    from electra_core.config import ExplorerConfig

logger = logging.getLogger("electra_web_services")

_ADDRESS_NOT_FOUND = "address not found."


class BalanceService:
    """HTTP balance lookups against a block explorer."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, cfg: ExplorerConfig) -> BalanceService:
        return cls(cfg.base_url, timeout=cfg.timeout_seconds)

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

    async def __aenter__(self) -> BalanceService:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def get_balance_for(self, address_hash: str) -> float:
        url = f"{self.base_url}/ext/getbalance/{address_hash}"
        session = self._get_session()
        try:
            async with session.get(url, timeout=self._timeout) as resp:
                status = resp.status
                text = await resp.text()
        except asyncio.TimeoutError as e:
            raise TransportError(f"Balance lookup for {address_hash} timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Balance lookup for {address_hash} failed: {e}") from e

        if status >= 400:
            logger.warning(f"Explorer answered HTTP {status} for {address_hash}")
            raise TransportError(
                f"Balance lookup for {address_hash} failed (HTTP {status})", status=status,
            )

        try:
            body = json.loads(text)
        except ValueError:
            raise TransportError(
                f"Explorer returned a non-JSON balance for {address_hash}", status=status,
            ) from None

        if isinstance(body, dict):
            error = body.get("error")
            if error == _ADDRESS_NOT_FOUND:
                return 0.0
            raise TransportError(f"Explorer error for {address_hash}: {error}", status=status)

        if isinstance(body, bool) or not isinstance(body, (int, float, str)):
            raise TransportError(
                f"Explorer returned a non-numeric balance for {address_hash}", status=status,
            )
        try:
            return float(body)
        except ValueError:
            raise TransportError(
                f"Explorer returned a non-numeric balance for {address_hash}", status=status,
            ) from None
