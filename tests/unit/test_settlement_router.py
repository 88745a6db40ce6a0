"""Tests for the settlement router."""

from unittest.mock import AsyncMock

import pytest

from gas_relayer.application.settlement_router import DIRECT_TRANSFER_TOOL, SettlementRouter
from gas_relayer.domain.exceptions import BridgeQuoteError
from gas_relayer.domain.models import BridgeQuote, Position
from tests.conftest import BRIDGER_ADDRESS, make_position_detail

USER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def _quote(estimated: int = 1_000_000, minimum: int = 995_000) -> BridgeQuote:
    return BridgeQuote(
        calldata="0xdeadbeef",
        to_address="0x1231DEB6f5749EF6cE6943a275A1D3E7486F4EaE",
        min_receive=minimum,
        estimated_receive=estimated,
        bridge_tool="stargate",
    )


def _position(target_chain: str) -> Position:
    return Position.from_detail(1, USER, make_position_detail(target_chain=target_chain))


@pytest.fixture
def router(mock_bridge: AsyncMock) -> SettlementRouter:
    return SettlementRouter(mock_bridge, BRIDGER_ADDRESS, max_slippage_bps=100)


class TestRouteRedeem:
    """Test cases for redeem routing."""

    @pytest.mark.asyncio
    async def test_same_chain_is_direct(
        self, router: SettlementRouter, mock_bridge: AsyncMock
    ) -> None:
        # Act
        route = await router.route_redeem(_position("sepolia"), 10**17, "sepolia", USER)

        # Assert
        assert route.calldata == "0x"
        assert route.bridge_info.type == "direct"
        mock_bridge.quote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_chain_is_bridged(
        self, router: SettlementRouter, mock_bridge: AsyncMock
    ) -> None:
        # Arrange
        mock_bridge.quote.return_value = _quote()

        # Act
        route = await router.route_redeem(_position("arbitrum"), 10**17, "sepolia", USER)

        # Assert
        assert route.calldata == "0xdeadbeef"
        assert route.bridge_info.type == "bridge"
        assert route.bridge_info.tool == "stargate"
        assert route.bridge_info.min_receive == 995_000
        mock_bridge.quote.assert_awaited_once_with(
            "sepolia", "arbitrum", 10**17, BRIDGER_ADDRESS, USER, 100
        )

    @pytest.mark.asyncio
    async def test_slippage_beyond_limit_rejected(
        self, router: SettlementRouter, mock_bridge: AsyncMock
    ) -> None:
        mock_bridge.quote.return_value = _quote(estimated=1_000_000, minimum=989_999)
        with pytest.raises(BridgeQuoteError):
            await router.route_redeem(_position("base"), 10**17, "sepolia", USER)

    @pytest.mark.asyncio
    async def test_slippage_at_limit_accepted(
        self, router: SettlementRouter, mock_bridge: AsyncMock
    ) -> None:
        mock_bridge.quote.return_value = _quote(estimated=1_000_000, minimum=990_000)
        route = await router.route_redeem(_position("base"), 10**17, "sepolia", USER)
        assert route.bridge_info.min_receive == 990_000

    @pytest.mark.asyncio
    async def test_zero_estimate_rejected(
        self, router: SettlementRouter, mock_bridge: AsyncMock
    ) -> None:
        mock_bridge.quote.return_value = _quote(estimated=0, minimum=0)
        with pytest.raises(BridgeQuoteError):
            await router.route_redeem(_position("base"), 10**17, "sepolia", USER)

    @pytest.mark.asyncio
    async def test_unexpected_bridge_failure_wrapped(
        self, router: SettlementRouter, mock_bridge: AsyncMock
    ) -> None:
        mock_bridge.quote.side_effect = RuntimeError("socket closed")
        with pytest.raises(BridgeQuoteError) as exc_info:
            await router.route_redeem(_position("base"), 10**17, "sepolia", USER)
        assert "socket closed" in exc_info.value.message


class TestPreviewRoute:
    @pytest.mark.asyncio
    async def test_direct_preview_reports_full_amount(
        self, router: SettlementRouter, mock_bridge: AsyncMock
    ) -> None:
        route = await router.preview_route("sepolia", 5_000, USER, "sepolia")
        assert route.bridge_info.tool == DIRECT_TRANSFER_TOOL
        assert route.bridge_info.estimated_receive == 5_000
        assert route.bridge_info.min_receive == 5_000
        mock_bridge.quote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bridged_preview(self, router: SettlementRouter, mock_bridge: AsyncMock) -> None:
        mock_bridge.quote.return_value = _quote()
        route = await router.preview_route("optimism", 5_000, USER, "sepolia")
        assert route.bridge_info.type == "bridge"
        assert route.bridge_info.estimated_receive == 1_000_000

    @pytest.mark.asyncio
    async def test_list_bridge_chains(self, router: SettlementRouter) -> None:
        assert await router.list_bridge_chains() == ["sepolia", "arbitrum", "base"]


def test_invalid_slippage(mock_bridge: AsyncMock) -> None:
    with pytest.raises(ValueError):
        SettlementRouter(mock_bridge, BRIDGER_ADDRESS, max_slippage_bps=10_001)
