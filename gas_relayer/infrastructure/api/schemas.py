"""Response models for the relayer API (DTOs).

Field names are camelCase on the wire. Integer amounts are rendered as decimal
strings so no client loses precision on 256-bit values.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ...domain.models import (
    BridgeInfo,
    GasPrice,
    HealthStatus,
    PositionView,
    PurchaseResult,
    RedeemResult,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class HealthResponse(ApiModel):
    status: str
    version: str
    architecture: str = "uniswap-v4-hook"
    relayer_address: str = Field(alias="relayerAddress")
    hook_address: str = Field(alias="hookAddress")
    is_authorized_relayer: bool = Field(alias="isAuthorizedRelayer")
    protocol_fee_bps: int = Field(alias="protocolFeeBps")
    source_chain: str = Field(alias="sourceChain")

    @classmethod
    def from_domain(cls, health: HealthStatus) -> HealthResponse:
        return cls(
            status=health.status,
            version=health.version,
            relayer_address=health.relayer_address,
            hook_address=health.hook_address,
            is_authorized_relayer=health.is_authorized_relayer,
            protocol_fee_bps=health.protocol_fee_bps,
            source_chain=health.source_chain,
        )


class GasPriceResponse(ApiModel):
    chain: str
    price_wei: str = Field(alias="priceWei")
    price_gwei: str = Field(alias="priceGwei")
    high_24h: str = Field(alias="high24h")
    low_24h: str = Field(alias="low24h")
    timestamp_ms: int = Field(alias="timestampMs")
    gas_token: str = Field(alias="gasToken")

    @classmethod
    def from_domain(cls, price: GasPrice) -> GasPriceResponse:
        return cls(
            chain=price.chain,
            price_wei=str(price.price_wei),
            price_gwei=price.price_gwei,
            high_24h=str(price.high_24h),
            low_24h=str(price.low_24h),
            timestamp_ms=price.timestamp_ms,
            gas_token=price.gas_token,
        )


class PricesResponse(ApiModel):
    gas_prices: list[GasPriceResponse] = Field(alias="gasPrices")
    source_chain: str = Field(alias="sourceChain")


class PriceResponse(ApiModel):
    gas_price: GasPriceResponse = Field(alias="gasPrice")
    is_stale: bool = Field(alias="isStale")
    stale_since_ms: int = Field(alias="staleSinceMs")


class PositionResponse(ApiModel):
    token_id: int = Field(alias="tokenId")
    weth_amount: str = Field(alias="wethAmount")
    remaining_weth_amount: str = Field(alias="remainingWethAmount")
    locked_gas_price_wei: str = Field(alias="lockedGasPriceWei")
    purchase_timestamp: int = Field(alias="purchaseTimestamp")
    expiry: int
    target_chain: str = Field(alias="targetChain")
    owner: str
    gas_units_available: str = Field(alias="gasUnitsAvailable")
    is_expired: bool = Field(alias="isExpired")
    status: str

    @classmethod
    def from_domain(cls, view: PositionView) -> PositionResponse:
        position = view.position
        return cls(
            token_id=position.token_id,
            weth_amount=str(position.weth_amount),
            remaining_weth_amount=str(position.remaining_weth_amount),
            locked_gas_price_wei=str(position.locked_gas_price_wei),
            purchase_timestamp=position.purchase_timestamp,
            expiry=position.expiry,
            target_chain=position.target_chain,
            owner=position.owner,
            gas_units_available=str(view.gas_units_available),
            is_expired=view.is_expired,
            status=view.status.value,
        )


class PositionsResponse(ApiModel):
    positions: list[PositionResponse]


class SinglePositionResponse(ApiModel):
    position: PositionResponse


class BridgeInfoResponse(ApiModel):
    type: Literal["direct", "bridge"]
    tool: str | None = None
    estimated_receive: str | None = Field(default=None, alias="estimatedReceive")
    min_receive: str | None = Field(default=None, alias="minReceive")

    @classmethod
    def from_domain(cls, info: BridgeInfo) -> BridgeInfoResponse:
        return cls(
            type=info.type,
            tool=info.tool,
            estimated_receive=(
                str(info.estimated_receive) if info.estimated_receive is not None else None
            ),
            min_receive=str(info.min_receive) if info.min_receive is not None else None,
        )


class PurchaseResponse(ApiModel):
    success: bool = True
    tx_hash: str = Field(alias="txHash")
    token_id: str | None = Field(alias="tokenId")
    locked_gas_price_wei: str = Field(alias="lockedGasPriceWei")
    locked_gas_price_gwei: str = Field(alias="lockedGasPriceGwei")
    expiry_timestamp: int = Field(alias="expiryTimestamp")

    @classmethod
    def from_domain(cls, result: PurchaseResult) -> PurchaseResponse:
        return cls(
            tx_hash=result.tx_hash,
            token_id=str(result.token_id) if result.token_id is not None else None,
            locked_gas_price_wei=str(result.locked_gas_price_wei),
            locked_gas_price_gwei=result.locked_gas_price_gwei,
            expiry_timestamp=result.expiry_timestamp,
        )


class RedeemResponse(ApiModel):
    success: bool = True
    tx_hash: str = Field(alias="txHash")
    weth_redeemed: str = Field(alias="wethRedeemed")
    target_chain: str = Field(alias="targetChain")
    bridge: BridgeInfoResponse

    @classmethod
    def from_domain(cls, result: RedeemResult) -> RedeemResponse:
        return cls(
            tx_hash=result.tx_hash,
            weth_redeemed=str(result.weth_redeemed),
            target_chain=result.target_chain,
            bridge=BridgeInfoResponse.from_domain(result.bridge_info),
        )


class BridgeQuoteResponse(BridgeInfoResponse):
    calldata: str | None = None


class BridgeChainsResponse(ApiModel):
    chains: list[str]
    source_chain: str = Field(alias="sourceChain")
