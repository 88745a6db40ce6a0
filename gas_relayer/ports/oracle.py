"""Gas oracle port interface.

Defines the protocol interface for reading published gas prices.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import OraclePriceReading


class GasOraclePort(Protocol):
    """Protocol interface for gas oracle reads."""

    async def list_supported_chains(self) -> list[str]:
        """List the chains the oracle publishes prices for.

        Returns:
            Chain identifiers declared by the oracle

        Raises:
            OracleError: If the oracle cannot be read
        """
        ...

    async def read_price(self, chain: str) -> OraclePriceReading | None:
        """Read the latest price record for a chain.

        Args:
            chain: Chain identifier

        Returns:
            The price reading, or None if the oracle has no record for the chain

        Raises:
            OracleError: If the oracle cannot be read
        """
        ...
