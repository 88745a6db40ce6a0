"""Read-through view of positions held on the settlement contract.

The contract exposes no enumerable ownership index, so a user's positions are
found by scanning token ids in bounded batches. Nothing is cached: every call
reads the contract again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from ..domain.exceptions import SettlementReadError, ValidationError
from ..domain.models import Position, PositionView, same_address

if TYPE_CHECKING:
    from ..ports.clock import ClockPort
    from ..ports.settlement import SettlementPort

logger = logging.getLogger(__name__)

DEFAULT_MAX_SCAN = 1000
DEFAULT_BATCH_SIZE = 50
MAX_SCAN_LIMIT = 10_000


class PositionRegistry:
    """Looks up single positions and enumerates the positions of a user."""

    def __init__(
        self,
        settlement: SettlementPort,
        clock: ClockPort,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        """Initialize the registry.

        Args:
            settlement: Settlement contract collaborator
            clock: Clock used for expiry flags
            batch_size: Token ids checked concurrently per scan batch
        """
        if batch_size < 1:
            raise ValueError(f"Invalid batch size: {batch_size}")
        self._settlement = settlement
        self._clock = clock
        self._batch_size = batch_size

    async def get_position(self, token_id: int) -> Position | None:
        """Get a position with its current owner.

        Returns:
            The position, or None if the token does not exist or cannot be read
        """
        owner = await self._owner_of(token_id)
        if owner is None:
            return None
        return await self._load_position(token_id, owner)

    async def iter_user_positions(
        self, user: str, max_scan: int = DEFAULT_MAX_SCAN
    ) -> AsyncIterator[Position]:
        """Yield the positions owned by a user among token ids below max_scan.

        Ownership checks run concurrently within a batch; batches run one after
        another. Scanning stops once as many positions as the user's balance
        have been found.

        Raises:
            ValidationError: If max_scan is out of range
            SettlementReadError: If the user's balance cannot be read
        """
        if not 1 <= max_scan <= MAX_SCAN_LIMIT:
            raise ValidationError(
                f"max_scan must be between 1 and {MAX_SCAN_LIMIT}", field="max_scan"
            )

        balance = await self._settlement.balance_of(user)
        if balance == 0:
            return

        found = 0
        for start in range(0, max_scan, self._batch_size):
            token_ids = range(start, min(start + self._batch_size, max_scan))
            owners = await asyncio.gather(*(self._owner_of(token_id) for token_id in token_ids))

            for token_id, owner in zip(token_ids, owners, strict=True):
                if owner is None or not same_address(owner, user):
                    continue
                position = await self._load_position(token_id, owner)
                if position is None:
                    continue
                found += 1
                yield position
                if found >= balance:
                    logger.debug(f"Found all {balance} positions of {user} by id {token_id}")
                    return

        if found < balance:
            logger.info(f"Found {found} of {balance} positions of {user} within {max_scan} ids")

    async def get_user_positions(
        self, user: str, max_scan: int = DEFAULT_MAX_SCAN
    ) -> list[Position]:
        """Get all positions owned by a user among token ids below max_scan."""
        positions = [position async for position in self.iter_user_positions(user, max_scan)]
        logger.info(f"Listed {len(positions)} positions for {user}")
        return positions

    async def get_position_view(self, token_id: int) -> PositionView | None:
        """Get a position enriched with gas units and lifecycle flags."""
        position = await self.get_position(token_id)
        if position is None:
            return None
        return await self._to_view(position)

    async def get_user_position_views(
        self, user: str, max_scan: int = DEFAULT_MAX_SCAN
    ) -> list[PositionView]:
        positions = await self.get_user_positions(user, max_scan)
        return list(await asyncio.gather(*(self._to_view(p) for p in positions)))

    async def _to_view(self, position: Position) -> PositionView:
        now = self._clock.now_seconds()
        gas_units = await self._settlement.get_gas_units_available(position.token_id)
        return PositionView(
            position=position,
            gas_units_available=gas_units,
            is_expired=position.is_expired(now),
            status=position.status(now),
        )

    async def _owner_of(self, token_id: int) -> str | None:
        try:
            owner = await self._settlement.owner_of(token_id)
        except SettlementReadError as e:
            logger.warning(f"Ownership read failed for token {token_id}: {e}")
            return None
        if owner is None:
            logger.debug(f"Token {token_id} has no owner")
        return owner

    async def _load_position(self, token_id: int, owner: str) -> Position | None:
        try:
            detail = await self._settlement.get_position(token_id)
        except SettlementReadError as e:
            logger.warning(f"Position read failed for token {token_id}: {e}")
            return None
        if detail is None:
            logger.debug(f"Token {token_id} has no position record")
            return None
        return Position.from_detail(token_id, owner, detail)
