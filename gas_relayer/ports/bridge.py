"""Bridge aggregator port interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import BridgeQuote


class BridgePort(Protocol):
    """Protocol interface for cross-chain quote operations."""

    async def quote(
        self,
        source_chain: str,
        dest_chain: str,
        amount: int,
        from_address: str,
        to_address: str,
        max_slippage_bps: int,
    ) -> BridgeQuote:
        """Quote moving the gas token between chains.

        Args:
            source_chain: Chain the value leaves from
            dest_chain: Chain the value is delivered on
            amount: Amount in wei
            from_address: Sender on the source chain
            to_address: Recipient on the destination chain
            max_slippage_bps: Maximum slippage in basis points

        Returns:
            BridgeQuote with calldata and receive estimates

        Raises:
            BridgeQuoteError: If no route exists or the aggregator fails
        """
        ...

    async def list_supported_chains(self) -> list[str]:
        """List chain keys the aggregator can route between."""
        ...
