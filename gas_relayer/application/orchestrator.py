"""Intent-to-settlement workflows.

Purchase and redeem each run a fixed sequence of checks followed by at most one
state-mutating settlement call. A failed check raises its tagged DomainException
before anything is mutated. Unexpected collaborator failures surface as
UpstreamServiceError, and a failed mutating call as SettlementCallError. Nothing
is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar

from ..domain.exceptions import (
    DomainException,
    InsufficientBalanceError,
    NotOwnerError,
    PositionExpiredError,
    PositionNotFoundError,
    PriceUnavailableError,
    SettlementCallError,
    SignatureInvalidError,
    StalePriceError,
    UnsupportedChainError,
    UpstreamServiceError,
)
from ..domain.models import (
    PurchaseReceipt,
    PurchaseRequest,
    PurchaseResult,
    RedeemIntent,
    RedeemReceipt,
    RedeemRequest,
    RedeemResult,
)
from .price_gate import DEFAULT_MAX_PRICE_AGE_MS

if TYPE_CHECKING:
    from ..ports.clock import ClockPort
    from ..ports.settlement import SettlementPort
    from .intent_verifier import IntentVerifier
    from .position_registry import PositionRegistry
    from .price_gate import PriceGate
    from .settlement_router import SettlementRouter

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Slippage on purchase is covered by the price freshness check alone.
PURCHASE_MIN_WETH_OUT = 0


class RelayerOrchestrator:
    """Runs the purchase and redeem workflows for signed intents."""

    def __init__(
        self,
        price_gate: PriceGate,
        verifier: IntentVerifier,
        registry: PositionRegistry,
        router: SettlementRouter,
        settlement: SettlementPort,
        clock: ClockPort,
        source_chain: str,
        max_price_age_ms: int = DEFAULT_MAX_PRICE_AGE_MS,
    ):
        """Initialize the orchestrator.

        Args:
            price_gate: Oracle price lookup with staleness policy
            verifier: Intent signature verifier
            registry: Position read model
            router: Redemption delivery router
            settlement: Settlement contract collaborator, signing with the relayer credential
            clock: Clock for expiry checks
            source_chain: Chain the settlement contract is deployed on
            max_price_age_ms: Maximum accepted price age for purchases
        """
        self._price_gate = price_gate
        self._verifier = verifier
        self._registry = registry
        self._router = router
        self._settlement = settlement
        self._clock = clock
        self._source_chain = source_chain
        self._max_price_age_ms = max_price_age_ms

    @property
    def source_chain(self) -> str:
        return self._source_chain

    async def purchase(self, request: PurchaseRequest) -> PurchaseResult:
        """Lock the current gas price into a new position for the user.

        Raises:
            ValidationError, UnsupportedChainError, PriceUnavailableError,
            StalePriceError, SignatureInvalidError: Before any mutation
            SettlementCallError: If the purchase call fails
            UpstreamServiceError: If a collaborator read fails unexpectedly
        """
        return await self._guard("purchase", self._purchase(request))

    async def redeem(self, request: RedeemRequest) -> RedeemResult:
        """Redeem part or all of a position, bridging when the target chain differs.

        Raises:
            ValidationError, PositionNotFoundError, NotOwnerError,
            PositionExpiredError, InsufficientBalanceError,
            SignatureInvalidError, BridgeQuoteError: Before any mutation
            SettlementCallError: If the redeem call fails
            UpstreamServiceError: If a collaborator read fails unexpectedly
        """
        return await self._guard("redeem", self._redeem(request))

    async def _purchase(self, request: PurchaseRequest) -> PurchaseResult:
        intent = request.to_intent()
        signature = request.user_signature or ""

        if not await self._settlement.is_chain_supported(intent.target_chain):
            raise UnsupportedChainError(intent.target_chain)

        price = await self._price_gate.get_price(intent.target_chain)
        if price is None:
            raise PriceUnavailableError(intent.target_chain)

        if self._price_gate.is_stale(price, self._max_price_age_ms):
            raise StalePriceError(intent.target_chain, self._price_gate.staleness_ms(price))

        if not self._verifier.verify_purchase(intent, signature):
            raise SignatureInvalidError()

        locked_gas_price_wei = price.price_wei
        expiry_duration = intent.expiry_duration_seconds

        logger.info(
            f"Processing purchase for {intent.user}: {intent.usdc_amount} USDC -> "
            f"{intent.target_chain}, gas price {price.price_gwei} gwei, "
            f"expiry {intent.expiry_days} days"
        )

        receipt: PurchaseReceipt = await self._settle(
            "purchase",
            self._settlement.purchase(
                intent.usdc_amount,
                PURCHASE_MIN_WETH_OUT,
                locked_gas_price_wei,
                intent.target_chain,
                expiry_duration,
                intent.user,
            ),
        )
        logger.info(f"Purchase successful: {receipt.tx_hash}, tokenId: {receipt.token_id}")

        return PurchaseResult(
            tx_hash=receipt.tx_hash,
            token_id=receipt.token_id,
            locked_gas_price_wei=locked_gas_price_wei,
            locked_gas_price_gwei=price.price_gwei,
            expiry_timestamp=self._clock.now_seconds() + expiry_duration,
        )

    async def _redeem(self, request: RedeemRequest) -> RedeemResult:
        user, token_id, requested, timestamp = request.validated()
        signature = request.user_signature or ""

        position = await self._registry.get_position(token_id)
        if position is None:
            raise PositionNotFoundError(token_id)

        if not position.is_owned_by(user):
            raise NotOwnerError(token_id, user)

        if position.is_expired(self._clock.now_seconds()):
            raise PositionExpiredError(token_id, position.expiry)

        remaining = position.remaining_weth_amount
        redeem_amount = remaining if requested is None else requested
        if redeem_amount > remaining or redeem_amount == 0:
            raise InsufficientBalanceError(redeem_amount, remaining)

        intent = RedeemIntent(
            user=user, token_id=token_id, weth_amount=redeem_amount, timestamp=timestamp
        )
        if not self._verifier.verify_redeem(intent, signature):
            raise SignatureInvalidError()

        route = await self._router.route_redeem(position, redeem_amount, self._source_chain, user)

        logger.info(f"Processing redeem for {user}: token {token_id}, {redeem_amount} wei")

        receipt: RedeemReceipt = await self._settle(
            "redeem",
            self._settlement.redeem(token_id, redeem_amount, route.calldata, user),
        )
        logger.info(f"Redeem successful: {receipt.tx_hash}")

        return RedeemResult(
            tx_hash=receipt.tx_hash,
            weth_redeemed=redeem_amount,
            target_chain=position.target_chain,
            bridge_info=route.bridge_info,
        )

    @staticmethod
    async def _settle(operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except SettlementCallError:
            raise
        except Exception as e:
            raise SettlementCallError(f"{operation.capitalize()} call failed: {e}") from e

    @staticmethod
    async def _guard(workflow: str, run: Awaitable[T]) -> T:
        try:
            return await run
        except DomainException as e:
            logger.warning(f"{workflow.capitalize()} rejected: {e.message} (code: {e.error_code})")
            raise
        except Exception as e:
            logger.error(f"{workflow.capitalize()} failed on a downstream service", exc_info=e)
            raise UpstreamServiceError(f"{workflow.capitalize()} failed: {e}") from e
