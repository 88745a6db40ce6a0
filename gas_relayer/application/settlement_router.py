"""Delivery routing for redemptions.

Same-chain redemptions are delivered directly by the settlement contract. Any
other target chain needs a bridge quote whose calldata the contract forwards to
the bridge aggregator.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..domain.exceptions import BridgeQuoteError
from ..domain.models import BridgeInfo, BridgeQuote, Position, RouteResult

if TYPE_CHECKING:
    from ..ports.bridge import BridgePort

logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10_000
DEFAULT_MAX_SLIPPAGE_BPS = 100
DIRECT_TRANSFER_TOOL = "direct-transfer"


class SettlementRouter:
    """Decides between direct and bridged delivery and fetches bridge calldata."""

    def __init__(
        self,
        bridge: BridgePort,
        bridger_address: str,
        max_slippage_bps: int = DEFAULT_MAX_SLIPPAGE_BPS,
    ):
        """Initialize the router.

        Args:
            bridge: Bridge aggregator collaborator
            bridger_address: Contract that sends bridged value on the source chain
            max_slippage_bps: Slippage requested from, and enforced on, quotes
        """
        if not 0 <= max_slippage_bps <= BPS_DENOMINATOR:
            raise ValueError(f"Invalid max slippage: {max_slippage_bps} bps")
        self._bridge = bridge
        self._bridger_address = bridger_address
        self._max_slippage_bps = max_slippage_bps

    @property
    def max_slippage_bps(self) -> int:
        return self._max_slippage_bps

    async def route_redeem(
        self, position: Position, redeem_amount: int, source_chain: str, recipient: str
    ) -> RouteResult:
        """Build the delivery path for redeeming part of a position.

        Args:
            position: Position being redeemed
            redeem_amount: Resolved amount in wei
            source_chain: Chain the settlement contract lives on
            recipient: Address receiving gas on the target chain

        Returns:
            RouteResult with empty calldata for direct delivery, or bridge calldata

        Raises:
            BridgeQuoteError: If no acceptable quote can be obtained
        """
        if source_chain == position.target_chain:
            return RouteResult(calldata="0x", bridge_info=BridgeInfo(type="direct"))

        logger.info(f"Getting bridge quote: {source_chain} -> {position.target_chain}")
        quote = await self._quote(source_chain, position.target_chain, redeem_amount, recipient)
        return RouteResult(calldata=quote.calldata, bridge_info=self._bridge_info(quote))

    async def preview_route(
        self, dest_chain: str, amount: int, recipient: str, source_chain: str
    ) -> RouteResult:
        """Quote delivery of an amount to a chain without a position.

        Direct delivery reports the full amount as both estimated and minimum.
        """
        if source_chain == dest_chain:
            return RouteResult(
                calldata="0x",
                bridge_info=BridgeInfo(
                    type="direct",
                    tool=DIRECT_TRANSFER_TOOL,
                    estimated_receive=amount,
                    min_receive=amount,
                ),
            )
        quote = await self._quote(source_chain, dest_chain, amount, recipient)
        return RouteResult(calldata=quote.calldata, bridge_info=self._bridge_info(quote))

    async def list_bridge_chains(self) -> list[str]:
        return await self._bridge.list_supported_chains()

    async def _quote(
        self, source_chain: str, dest_chain: str, amount: int, recipient: str
    ) -> BridgeQuote:
        try:
            quote = await self._bridge.quote(
                source_chain,
                dest_chain,
                amount,
                self._bridger_address,
                recipient,
                self._max_slippage_bps,
            )
        except BridgeQuoteError:
            raise
        except Exception as e:
            raise BridgeQuoteError(f"Bridge quote failed: {e}") from e

        self._check_slippage(quote)
        return quote

    def _check_slippage(self, quote: BridgeQuote) -> None:
        if quote.estimated_receive <= 0:
            raise BridgeQuoteError("Bridge quote estimates nothing received")
        floor = quote.estimated_receive * (BPS_DENOMINATOR - self._max_slippage_bps)
        if quote.min_receive * BPS_DENOMINATOR < floor:
            raise BridgeQuoteError(
                f"Bridge quote minimum {quote.min_receive} exceeds "
                f"{self._max_slippage_bps} bps slippage on {quote.estimated_receive}"
            )

    @staticmethod
    def _bridge_info(quote: BridgeQuote) -> BridgeInfo:
        return BridgeInfo(
            type="bridge",
            tool=quote.bridge_tool,
            estimated_receive=quote.estimated_receive,
            min_receive=quote.min_receive,
        )
