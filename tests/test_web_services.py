"""
Tests for electra_core.web_services — explorer balance lookups.

Covers:
  - Numeric and numeric-string balances
  - "address not found." treated as a zero balance
  - Other explorer errors, HTTP failures, non-numeric bodies -> TransportError
"""

from __future__ import annotations

import pytest
from aiohttp import test_utils, web

from electra_core.config import ExplorerConfig
from electra_core.errors import TransportError
from electra_core.web_services import BalanceService


def _explorer_app(responses: dict[str, web.Response], seen: list[str]) -> web.Application:
    async def getbalance(request: web.Request) -> web.Response:
        address_hash = request.match_info["hash"]
        seen.append(address_hash)
        return responses[address_hash]

    app = web.Application()
    app.router.add_get("/ext/getbalance/{hash}", getbalance)
    return app


async def _lookup(responses: dict[str, web.Response], address_hash: str) -> float:
    seen: list[str] = []
    async with test_utils.TestServer(_explorer_app(responses, seen)) as server:
        async with BalanceService(str(server.make_url("/"))) as service:
            return await service.get_balance_for(address_hash)


class TestBalanceLookup:
    @pytest.mark.asyncio
    async def test_numeric_balance(self):
        balance = await _lookup({"Ea": web.json_response(12.5)}, "Ea")
        assert balance == 12.5

    @pytest.mark.asyncio
    async def test_integer_balance(self):
        assert await _lookup({"Ea": web.json_response(3)}, "Ea") == 3.0

    @pytest.mark.asyncio
    async def test_string_balance(self):
        assert await _lookup({"Ea": web.Response(text='"7.25"')}, "Ea") == 7.25

    @pytest.mark.asyncio
    async def test_unknown_address_is_zero(self):
        body = {"error": "address not found.", "hash": "Ea"}
        assert await _lookup({"Ea": web.json_response(body)}, "Ea") == 0.0

    @pytest.mark.asyncio
    async def test_url_path(self):
        seen: list[str] = []
        app = _explorer_app({"EhashX": web.json_response(1)}, seen)
        async with test_utils.TestServer(app) as server:
            async with BalanceService(str(server.make_url("/")) + "/") as service:
                await service.get_balance_for("EhashX")
        assert seen == ["EhashX"]

    def test_from_config(self):
        service = BalanceService.from_config(ExplorerConfig(base_url="http://explorer.local/"))
        assert service.base_url == "http://explorer.local"


class TestBalanceFailures:
    @pytest.mark.asyncio
    async def test_other_explorer_error(self):
        with pytest.raises(TransportError):
            await _lookup({"Ea": web.json_response({"error": "db offline"})}, "Ea")

    @pytest.mark.asyncio
    async def test_http_error(self):
        with pytest.raises(TransportError) as exc_info:
            await _lookup({"Ea": web.Response(status=503, text="busy")}, "Ea")
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_non_json(self):
        with pytest.raises(TransportError):
            await _lookup({"Ea": web.Response(text="<html/>")}, "Ea")

    @pytest.mark.asyncio
    async def test_non_numeric(self):
        with pytest.raises(TransportError):
            await _lookup({"Ea": web.json_response(["1"])}, "Ea")

    @pytest.mark.asyncio
    async def test_boolean_rejected(self):
        with pytest.raises(TransportError):
            await _lookup({"Ea": web.json_response(True)}, "Ea")

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        async with BalanceService("http://127.0.0.1:1") as service:
            with pytest.raises(TransportError):
                await service.get_balance_for("Ea")
