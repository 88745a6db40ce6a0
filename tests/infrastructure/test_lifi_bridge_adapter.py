"""Tests for the LI.FI bridge adapter using a mocked HTTP transport."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from gas_relayer.domain.exceptions import BridgeQuoteError
from gas_relayer.infrastructure.lifi_bridge_adapter import (
    CHAIN_IDS,
    ETH_ADDRESS,
    NATIVE_TOKEN,
    LiFiBridgeAdapter,
)
from tests.conftest import BRIDGER_ADDRESS

API_URL = "https://li.quest/v1"
RECIPIENT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

QUOTE_BODY = {
    "transactionRequest": {"data": "0xabcdef", "to": "0x1231DEB6f5749EF6cE6943a275A1D3E7486F4EaE"},
    "estimate": {"toAmount": "99000000000000000", "toAmountMin": "98500000000000000"},
    "toolDetails": {"name": "Stargate"},
}


def _adapter(handler: Callable[[httpx.Request], httpx.Response]) -> LiFiBridgeAdapter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LiFiBridgeAdapter(client, API_URL + "/")


class TestQuote:
    """Test cases for bridge quotes."""

    @pytest.mark.asyncio
    async def test_quote_request_and_mapping(self) -> None:
        # Arrange
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=QUOTE_BODY)

        adapter = _adapter(handler)

        # Act
        quote = await adapter.quote(
            "sepolia", "polygon", 10**17, BRIDGER_ADDRESS, RECIPIENT, max_slippage_bps=100
        )

        # Assert
        assert quote.calldata == "0xabcdef"
        assert quote.estimated_receive == 99_000_000_000_000_000
        assert quote.min_receive == 98_500_000_000_000_000
        assert quote.bridge_tool == "Stargate"

        params = seen[0].url.params
        assert seen[0].url.path == "/v1/quote"
        assert params["fromChain"] == "11155111"
        assert params["toChain"] == "80002"
        assert params["fromToken"] == ETH_ADDRESS
        assert params["toToken"] == NATIVE_TOKEN
        assert params["fromAmount"] == str(10**17)
        assert params["fromAddress"] == BRIDGER_ADDRESS
        assert params["toAddress"] == RECIPIENT
        assert params["slippage"] == "0.01"

    @pytest.mark.asyncio
    async def test_unknown_chain(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(200, json=QUOTE_BODY))
        with pytest.raises(BridgeQuoteError):
            await adapter.quote("sepolia", "solana", 1, BRIDGER_ADDRESS, RECIPIENT, 100)

    @pytest.mark.asyncio
    async def test_no_route(self) -> None:
        adapter = _adapter(
            lambda request: httpx.Response(404, json={"message": "No available quotes"})
        )
        with pytest.raises(BridgeQuoteError) as exc_info:
            await adapter.quote("sepolia", "base", 1, BRIDGER_ADDRESS, RECIPIENT, 100)
        assert "No available quotes" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        adapter = _adapter(handler)
        with pytest.raises(BridgeQuoteError):
            await adapter.quote("sepolia", "base", 1, BRIDGER_ADDRESS, RECIPIENT, 100)

    @pytest.mark.asyncio
    async def test_malformed_body(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(200, json={"estimate": {}}))
        with pytest.raises(BridgeQuoteError):
            await adapter.quote("sepolia", "base", 1, BRIDGER_ADDRESS, RECIPIENT, 100)


class TestSupportedChains:
    @pytest.mark.asyncio
    async def test_lists_chain_keys(self) -> None:
        body = {"chains": [{"key": "eth", "id": 1}, {"key": "arb", "id": 42161}]}
        adapter = _adapter(lambda request: httpx.Response(200, json=body))
        assert await adapter.list_supported_chains() == ["eth", "arb"]

    @pytest.mark.asyncio
    async def test_falls_back_to_builtin_table(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(500))
        assert await adapter.list_supported_chains() == list(CHAIN_IDS)
