"""API routes for the gas relayer.

Routes translate HTTP requests into calls on the application services and
domain results into response DTOs. Failures propagate as exceptions and are
rendered by the registered error handlers.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ...application.health_service import HealthService
from ...application.orchestrator import RelayerOrchestrator
from ...application.position_registry import MAX_SCAN_LIMIT, PositionRegistry
from ...application.price_gate import PriceGate
from ...application.settlement_router import SettlementRouter
from ...domain.exceptions import PositionNotFoundError, ValidationError
from ...domain.models import PurchaseRequest, RedeemRequest, RelayerConfiguration, is_address
from .dependencies import (
    get_configuration,
    get_health_service,
    get_orchestrator,
    get_position_registry,
    get_price_gate,
    get_settlement_router,
)
from .schemas import (
    BridgeChainsResponse,
    BridgeInfoResponse,
    BridgeQuoteResponse,
    GasPriceResponse,
    HealthResponse,
    PositionResponse,
    PositionsResponse,
    PriceResponse,
    PricesResponse,
    PurchaseResponse,
    RedeemResponse,
    SinglePositionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_address(value: str, field: str) -> str:
    if not is_address(value):
        raise ValidationError(f"Invalid address: {value}", field=field)
    return value


@router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
async def health_check(
    health_service: HealthService = Depends(get_health_service),  # noqa: B008
) -> HealthResponse:
    """Report relayer authorization and contract settings."""
    status = await health_service.get_health_status()
    return HealthResponse.from_domain(status)


@router.get("/api/prices", response_model=PricesResponse, response_model_by_alias=True)
async def list_prices(
    price_gate: PriceGate = Depends(get_price_gate),  # noqa: B008
    config: RelayerConfiguration = Depends(get_configuration),  # noqa: B008
) -> PricesResponse:
    """Current gas prices of every chain the oracle tracks."""
    prices = await price_gate.get_all_prices()
    return PricesResponse(
        gas_prices=[GasPriceResponse.from_domain(price) for price in prices],
        source_chain=config.source_chain,
    )


@router.get("/api/prices/{chain}", response_model=PriceResponse, response_model_by_alias=True)
async def get_price(
    chain: str,
    price_gate: PriceGate = Depends(get_price_gate),  # noqa: B008
    config: RelayerConfiguration = Depends(get_configuration),  # noqa: B008
) -> PriceResponse:
    price = await price_gate.get_price(chain)
    if price is None:
        raise HTTPException(status_code=404, detail=f"No gas price for chain {chain}")
    is_stale = price_gate.is_stale(price, config.price_staleness_ms)
    return PriceResponse(
        gas_price=GasPriceResponse.from_domain(price),
        is_stale=is_stale,
        stale_since_ms=price_gate.staleness_ms(price) if is_stale else 0,
    )


@router.get(
    "/api/positions/token/{token_id}",
    response_model=SinglePositionResponse,
    response_model_by_alias=True,
)
async def get_position(
    token_id: int,
    registry: PositionRegistry = Depends(get_position_registry),  # noqa: B008
) -> SinglePositionResponse:
    """Get one position by token id."""
    if token_id < 0:
        raise ValidationError(f"Invalid token id: {token_id}", field="tokenId")
    view = await registry.get_position_view(token_id)
    if view is None:
        raise PositionNotFoundError(token_id)
    return SinglePositionResponse(position=PositionResponse.from_domain(view))


@router.get(
    "/api/positions/{user}", response_model=PositionsResponse, response_model_by_alias=True
)
async def list_user_positions(
    user: str,
    max_scan: int | None = Query(None, alias="maxScan", ge=1, le=MAX_SCAN_LIMIT),
    registry: PositionRegistry = Depends(get_position_registry),  # noqa: B008
    config: RelayerConfiguration = Depends(get_configuration),  # noqa: B008
) -> PositionsResponse:
    """List the positions owned by a user among the first maxScan token ids."""
    _require_address(user, "user")
    views = await registry.get_user_position_views(user, max_scan or config.position_scan_limit)
    logger.info(f"Returning {len(views)} positions for {user}")
    return PositionsResponse(positions=[PositionResponse.from_domain(view) for view in views])


@router.post("/api/purchase", response_model=PurchaseResponse, response_model_by_alias=True)
async def purchase(
    request: PurchaseRequest,
    orchestrator: RelayerOrchestrator = Depends(get_orchestrator),  # noqa: B008
) -> PurchaseResponse:
    """Settle a signed purchase intent."""
    result = await orchestrator.purchase(request)
    return PurchaseResponse.from_domain(result)


@router.post("/api/redeem", response_model=RedeemResponse, response_model_by_alias=True)
async def redeem(
    request: RedeemRequest,
    orchestrator: RelayerOrchestrator = Depends(get_orchestrator),  # noqa: B008
) -> RedeemResponse:
    """Settle a signed redeem intent."""
    result = await orchestrator.redeem(request)
    return RedeemResponse.from_domain(result)


@router.get(
    "/api/bridge/quote", response_model=BridgeQuoteResponse, response_model_by_alias=True
)
async def bridge_quote(
    to_chain: str = Query(..., alias="toChain", min_length=1),
    amount: int = Query(..., gt=0),
    recipient: str = Query(...),
    router_service: SettlementRouter = Depends(get_settlement_router),  # noqa: B008
    config: RelayerConfiguration = Depends(get_configuration),  # noqa: B008
) -> BridgeQuoteResponse:
    """Preview how an amount would be delivered to a chain."""
    _require_address(recipient, "recipient")
    route = await router_service.preview_route(to_chain, amount, recipient, config.source_chain)
    info = BridgeInfoResponse.from_domain(route.bridge_info)
    return BridgeQuoteResponse(
        **info.model_dump(),
        calldata=route.calldata if route.bridge_info.type == "bridge" else None,
    )


@router.get(
    "/api/bridge/chains", response_model=BridgeChainsResponse, response_model_by_alias=True
)
async def bridge_chains(
    router_service: SettlementRouter = Depends(get_settlement_router),  # noqa: B008
    config: RelayerConfiguration = Depends(get_configuration),  # noqa: B008
) -> BridgeChainsResponse:
    chains = await router_service.list_bridge_chains()
    return BridgeChainsResponse(chains=chains, source_chain=config.source_chain)
