"""Price gate over the gas oracle.

Reads prices from the oracle collaborator and applies the staleness policy.
Prices are never cached: every call reads the oracle again.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from ..domain.exceptions import CollaboratorError
from ..domain.models import GasPrice

if TYPE_CHECKING:
    from ..ports.clock import ClockPort
    from ..ports.oracle import GasOraclePort

logger = logging.getLogger(__name__)

DEFAULT_MAX_PRICE_AGE_MS = 5 * 60 * 1000


class PriceGate:
    """Oracle price lookup with a freshness check."""

    def __init__(self, oracle: GasOraclePort, clock: ClockPort):
        """Initialize the price gate.

        Args:
            oracle: Gas oracle collaborator
            clock: Clock used for staleness checks
        """
        self._oracle = oracle
        self._clock = clock

    async def get_price(self, chain: str) -> GasPrice | None:
        """Get the current gas price for a chain.

        Args:
            chain: Chain identifier

        Returns:
            GasPrice, or None if the oracle has no price for the chain

        Raises:
            OracleError: If the oracle cannot be read
        """
        reading = await self._oracle.read_price(chain)
        if reading is None:
            logger.info(f"No oracle price for chain {chain}")
            return None
        return GasPrice.from_reading(chain, reading)

    def staleness_ms(self, price: GasPrice) -> int:
        """Age of a price observation in milliseconds."""
        return self._clock.now_ms() - price.timestamp_ms

    def is_stale(self, price: GasPrice, max_age_ms: int = DEFAULT_MAX_PRICE_AGE_MS) -> bool:
        """Check whether a price is older than max_age_ms.

        A price exactly max_age_ms old is not stale.
        """
        return self.staleness_ms(price) > max_age_ms

    async def iter_prices(self) -> AsyncIterator[GasPrice]:
        """Yield the price of every chain the oracle supports.

        A chain whose price cannot be read is logged and skipped.

        Raises:
            OracleError: If the supported chain list cannot be read
        """
        chains = await self._oracle.list_supported_chains()
        for chain in chains:
            try:
                price = await self.get_price(chain)
            except CollaboratorError as e:
                logger.warning(f"Failed to fetch price for {chain}: {e}")
                continue
            if price is not None:
                yield price

    async def get_all_prices(self) -> list[GasPrice]:
        """Resolve the prices of all supported chains."""
        prices = [price async for price in self.iter_prices()]
        logger.info(f"Resolved {len(prices)} gas prices")
        return prices
