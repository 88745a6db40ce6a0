"""Settlement port interface.

Defines the protocol interface for the contract that owns positions and executes
purchases and redemptions. Reads return None for records that do not exist and
raise SettlementReadError when the read itself fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import PositionDetail, PurchaseReceipt, RedeemReceipt


class SettlementPort(Protocol):
    """Protocol interface for settlement contract operations."""

    @property
    def relayer_address(self) -> str:
        """Address of the credential that signs settlement calls."""
        ...

    async def is_chain_supported(self, chain: str) -> bool:
        """Check whether the contract accepts positions for a target chain.

        Raises:
            SettlementReadError: If the read fails
        """
        ...

    async def get_position(self, token_id: int) -> PositionDetail | None:
        """Read the stored record of a position.

        Returns:
            The position detail, or None if the token does not exist

        Raises:
            SettlementReadError: If the read fails
        """
        ...

    async def owner_of(self, token_id: int) -> str | None:
        """Read the current owner of a position token.

        Returns:
            Owner address, or None if the token was never minted or is burned

        Raises:
            SettlementReadError: If the read fails
        """
        ...

    async def balance_of(self, user: str) -> int:
        """Count the position tokens held by a user.

        Raises:
            SettlementReadError: If the read fails
        """
        ...

    async def get_gas_units_available(self, token_id: int) -> int:
        """Gas units the position's remaining amount buys at its locked price.

        Raises:
            SettlementReadError: If the read fails
        """
        ...

    async def get_protocol_fee_bps(self) -> int:
        """Protocol fee in basis points.

        Raises:
            SettlementReadError: If the read fails
        """
        ...

    async def is_authorized_caller(self) -> bool:
        """Check that the configured credential is the contract's relayer.

        Raises:
            SettlementReadError: If the read fails
        """
        ...

    async def purchase(
        self,
        usdc_amount: int,
        min_weth_out: int,
        locked_gas_price_wei: int,
        target_chain: str,
        expiry_duration_seconds: int,
        buyer: str,
    ) -> PurchaseReceipt:
        """Mint a new position for the buyer.

        Raises:
            SettlementCallError: If the transaction cannot be sent or reverts
        """
        ...

    async def redeem(
        self, token_id: int, weth_amount: int, bridge_calldata: str, recipient: str
    ) -> RedeemReceipt:
        """Redeem part of a position, delivering through the given calldata.

        Raises:
            SettlementCallError: If the transaction cannot be sent or reverts
        """
        ...
