"""Application service reporting relayer health."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .. import __version__
from ..domain.models import HealthStatus

if TYPE_CHECKING:
    from ..ports.settlement import SettlementPort

logger = logging.getLogger(__name__)


class HealthService:
    """Reports whether the relayer credential can act on the settlement contract."""

    def __init__(self, settlement: SettlementPort, hook_address: str, source_chain: str):
        self._settlement = settlement
        self._hook_address = hook_address
        self._source_chain = source_chain

    async def get_health_status(self) -> HealthStatus:
        """Read authorization and fee settings from the settlement contract.

        Raises:
            SettlementReadError: If the contract cannot be read
        """
        is_authorized = await self._settlement.is_authorized_caller()
        protocol_fee = await self._settlement.get_protocol_fee_bps()
        return HealthStatus(
            version=__version__,
            relayer_address=self._settlement.relayer_address,
            hook_address=self._hook_address,
            is_authorized_relayer=is_authorized,
            protocol_fee_bps=protocol_fee,
            source_chain=self._source_chain,
        )

    async def log_authorization(self) -> bool:
        """Startup sanity check; a failure to check is logged, never fatal."""
        try:
            is_authorized = await self._settlement.is_authorized_caller()
        except Exception as e:
            logger.warning(f"Could not verify relayer authorization: {e}")
            return False

        logger.info(f"Relayer address: {self._settlement.relayer_address}")
        logger.info(f"Is authorized relayer: {is_authorized}")
        if not is_authorized:
            logger.warning("This wallet is NOT the authorized relayer")
            logger.warning("Call setRelayer() on the hook contract to authorize this wallet")
        return is_authorized
