"""Domain models for the gas futures relayer.

This module contains the domain entities and value objects with Pydantic v2
validation. Amounts are unscaled integers in their base unit (wei, USDC base
units); decimal renderings are derived for display and never used in comparisons
or settlement.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    computed_field,
    field_validator,
    model_validator,
)

from .exceptions import ValidationError

GWEI_DIVISOR = 10**9
GWEI_DISPLAY_PLACES = 6
SECONDS_PER_DAY = 86_400
REDEEM_ALL = "max"

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: Any) -> bool:
    """Check that a value is a 20-byte hex address (checksum not enforced)."""
    return isinstance(value, str) and bool(_ADDRESS_PATTERN.match(value))


def same_address(a: str, b: str) -> bool:
    """Compare two hex addresses case-insensitively."""
    return a.lower() == b.lower()


def format_gwei(price_wei: int) -> str:
    """Render a wei amount as gwei with six decimals, rounding half away from zero."""
    with localcontext() as ctx:
        ctx.prec = len(str(abs(price_wei))) + GWEI_DISPLAY_PLACES + 2
        gwei = Decimal(price_wei) / Decimal(GWEI_DIVISOR)
        quantum = Decimal(1).scaleb(-GWEI_DISPLAY_PLACES)
        return format(gwei.quantize(quantum, rounding=ROUND_HALF_UP), "f")


class ValidationLevel(str, Enum):
    """Value object representing validation issue severity levels."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ValidationIssue(BaseModel):
    """Value object representing a configuration validation issue."""

    level: ValidationLevel = Field(..., description="Issue severity")
    category: str = Field(..., description="Issue category: EVM, ORACLE, BRIDGE, CONFIG")
    message: str = Field(..., description="Human-readable issue description")
    resolution: str | None = Field(None, description="Suggested resolution steps")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional context")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Ensure category is uppercase."""
        return v.upper()

    model_config = ConfigDict(frozen=True, strict=True)


class ValidationResult(BaseModel):
    """Aggregate root representing the complete validation result."""

    is_valid: bool = Field(default=True, description="Overall validation status")
    context: str = Field(default="", description="Validation context")
    issues: list[ValidationIssue] = Field(default_factory=list, description="All validation issues")

    def add_issue(self, issue: ValidationIssue) -> None:
        """Add a validation issue to the result."""
        self.issues.append(issue)
        if issue.level == ValidationLevel.ERROR:
            self.is_valid = False

    def get_issues_by_level(self, level: ValidationLevel) -> list[ValidationIssue]:
        """Get all issues of a specific level."""
        return [issue for issue in self.issues if issue.level == level]

    model_config = ConfigDict(strict=True)


class RelayerConfiguration(BaseModel):
    """Domain model for relayer configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    evm_rpc_url: str = Field(default="", description="JSON-RPC URL of the settlement chain")
    hook_address: str = Field(default="", description="Settlement hook contract address")
    bridger_address: str = Field(default="", description="Bridger contract used as quote sender")
    relayer_private_key: SecretStr = Field(
        default=SecretStr(""), description="Key that signs settlement calls"
    )
    sui_network: Literal["testnet", "mainnet", "devnet"] = Field(default="testnet")
    sui_rpc_url: str | None = Field(default=None, description="Override for the Sui fullnode")
    sui_oracle_object_id: str = Field(default="", description="Gas oracle object id on Sui")
    lifi_api_url: str = Field(default="https://li.quest/v1")
    max_slippage_bps: int = Field(default=100, ge=0, le=10_000)
    source_chain: str = Field(default="sepolia", min_length=1)
    api_port: int = Field(default=3001, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    price_staleness_ms: int = Field(default=300_000, gt=0)
    position_scan_limit: int = Field(default=1000, ge=1, le=10_000)
    position_scan_batch_size: int = Field(default=50, ge=1, le=500)
    signing_domain_name: str = Field(default="InvestInGas", min_length=1)
    signing_domain_version: str = Field(default="1", min_length=1)
    signing_chain_id: int = Field(default=11155111, gt=0)
    http_timeout_seconds: float = Field(default=15.0, gt=0)


class GasPrice(BaseModel):
    """A point-in-time gas price quote for one destination chain."""

    model_config = ConfigDict(frozen=True, strict=True)

    chain: str = Field(..., min_length=1)
    price_wei: int = Field(..., ge=0)
    high_24h: int = Field(..., ge=0)
    low_24h: int = Field(..., ge=0)
    timestamp_ms: int = Field(..., ge=0, description="Observation time, ms since epoch")
    gas_token: str = Field(default="ETH")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def price_gwei(self) -> str:
        """Display-only gwei rendering of price_wei."""
        return format_gwei(self.price_wei)

    @classmethod
    def from_reading(cls, chain: str, reading: OraclePriceReading) -> GasPrice:
        """Build a price from an oracle reading, defaulting 24h extremes to the price."""
        return cls(
            chain=chain,
            price_wei=reading.price_wei,
            high_24h=reading.high_24h if reading.high_24h is not None else reading.price_wei,
            low_24h=reading.low_24h if reading.low_24h is not None else reading.price_wei,
            timestamp_ms=reading.timestamp_ms,
            gas_token=reading.gas_token or "ETH",
        )


class OraclePriceReading(BaseModel):
    """Typed record read from the oracle for one chain."""

    model_config = ConfigDict(frozen=True, strict=True)

    price_wei: int = Field(..., ge=0)
    high_24h: int | None = Field(default=None, ge=0)
    low_24h: int | None = Field(default=None, ge=0)
    timestamp_ms: int = Field(default=0, ge=0)
    gas_token: str | None = None


class PositionStatus(str, Enum):
    """Lifecycle state of a position."""

    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    EXPIRED = "expired"


class PositionDetail(BaseModel):
    """Per-token record held by the settlement contract."""

    model_config = ConfigDict(frozen=True, strict=True)

    weth_amount: int = Field(..., ge=0, description="Total purchased amount")
    remaining_weth_amount: int = Field(..., ge=0, description="Remaining redeemable amount")
    locked_gas_price_wei: int = Field(..., ge=0)
    purchase_timestamp: int = Field(..., ge=0)
    expiry: int = Field(..., ge=0)
    target_chain: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_invariants(self) -> PositionDetail:
        """Remaining never exceeds total; expiry is after purchase."""
        if self.remaining_weth_amount > self.weth_amount:
            raise ValueError("remaining_weth_amount exceeds weth_amount")
        if self.expiry <= self.purchase_timestamp:
            raise ValueError("expiry must be after purchase_timestamp")
        return self


class Position(PositionDetail):
    """A gas futures holding, one-to-one with an on-chain token id."""

    token_id: int = Field(..., ge=0)
    owner: str

    @field_validator("owner")
    @classmethod
    def validate_owner(cls, v: str) -> str:
        if not is_address(v):
            raise ValueError(f"Invalid owner address: {v}")
        return v

    @classmethod
    def from_detail(cls, token_id: int, owner: str, detail: PositionDetail) -> Position:
        return cls(token_id=token_id, owner=owner, **detail.model_dump())

    def is_expired(self, now_seconds: int) -> bool:
        return now_seconds >= self.expiry

    def status(self, now_seconds: int) -> PositionStatus:
        if self.is_expired(now_seconds):
            return PositionStatus.EXPIRED
        if self.remaining_weth_amount == 0:
            return PositionStatus.EXHAUSTED
        return PositionStatus.ACTIVE

    def is_owned_by(self, user: str) -> bool:
        return same_address(self.owner, user)


class PositionView(BaseModel):
    """Position enriched with delivery capacity and lifecycle flags."""

    model_config = ConfigDict(frozen=True)

    position: Position
    gas_units_available: int = Field(..., ge=0)
    is_expired: bool
    status: PositionStatus


class PurchaseIntent(BaseModel):
    """A user's signed request to buy a gas futures position."""

    model_config = ConfigDict(frozen=True, strict=True)

    user: str
    usdc_amount: int = Field(..., gt=0)
    target_chain: str = Field(..., min_length=1)
    expiry_days: int = Field(..., gt=0)
    timestamp: int = Field(..., gt=0)

    @property
    def expiry_duration_seconds(self) -> int:
        return self.expiry_days * SECONDS_PER_DAY


class RedeemIntent(BaseModel):
    """A user's signed request to redeem part or all of a position.

    weth_amount is always the resolved integer amount that was signed.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    user: str
    token_id: int = Field(..., ge=0)
    weth_amount: int = Field(..., gt=0)
    timestamp: int = Field(..., gt=0)


def _parse_uint(value: Any, field: str, minimum: int) -> int:
    """Parse an integer given as int or decimal string."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}", field=field)
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        try:
            parsed = int(value.strip())
        except ValueError as e:
            # Digit strings beyond the interpreter's int conversion limit
            raise ValidationError(f"Invalid {field}", field=field) from e
    else:
        raise ValidationError(f"Invalid {field}", field=field)
    if parsed < minimum:
        raise ValidationError(f"{field} must be at least {minimum}", field=field)
    return parsed


def _require(values: dict[str, Any]) -> None:
    for field, value in values.items():
        if value is None or value == "":
            raise ValidationError("Missing required fields", field=field)


def _parse_user(value: str) -> str:
    if not is_address(value):
        raise ValidationError("Invalid user address", field="user")
    return value


class PurchaseRequest(BaseModel):
    """Inbound purchase body as sent by the intent producer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user: str | None = None
    usdc_amount: int | str | None = Field(default=None, alias="usdcAmount")
    target_chain: str | None = Field(default=None, alias="targetChain")
    expiry_days: int | str | None = Field(default=None, alias="expiryDays")
    user_signature: str | None = Field(default=None, alias="userSignature")
    timestamp: int | str | None = None

    def to_intent(self) -> PurchaseIntent:
        """Check presence and shape of every field and build the signed intent.

        Raises:
            ValidationError: If a field is missing or malformed
        """
        _require(
            {
                "user": self.user,
                "usdcAmount": self.usdc_amount,
                "targetChain": self.target_chain,
                "expiryDays": self.expiry_days,
                "userSignature": self.user_signature,
                "timestamp": self.timestamp,
            }
        )
        return PurchaseIntent(
            user=_parse_user(self.user or ""),
            usdc_amount=_parse_uint(self.usdc_amount, "usdcAmount", 1),
            target_chain=self.target_chain or "",
            expiry_days=_parse_uint(self.expiry_days, "expiryDays", 1),
            timestamp=_parse_uint(self.timestamp, "timestamp", 1),
        )


class RedeemRequest(BaseModel):
    """Inbound redeem body; weth_amount may be the "max" sentinel."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user: str | None = None
    token_id: int | str | None = Field(default=None, alias="tokenId")
    weth_amount: int | str | None = Field(default=None, alias="wethAmount")
    user_signature: str | None = Field(default=None, alias="userSignature")
    timestamp: int | str | None = None

    def validated(self) -> tuple[str, int, int | None, int]:
        """Return (user, token_id, requested amount or None for "max", timestamp).

        Raises:
            ValidationError: If a field is missing or malformed
        """
        _require(
            {
                "user": self.user,
                "tokenId": self.token_id,
                "wethAmount": self.weth_amount,
                "userSignature": self.user_signature,
                "timestamp": self.timestamp,
            }
        )
        amount = (
            None
            if self.weth_amount == REDEEM_ALL
            else _parse_uint(self.weth_amount, "wethAmount", 1)
        )
        return (
            _parse_user(self.user or ""),
            _parse_uint(self.token_id, "tokenId", 0),
            amount,
            _parse_uint(self.timestamp, "timestamp", 1),
        )


class BridgeQuote(BaseModel):
    """Quote and calldata for moving value to a position's target chain."""

    model_config = ConfigDict(frozen=True, strict=True)

    calldata: str
    to_address: str
    min_receive: int = Field(..., ge=0)
    estimated_receive: int = Field(..., ge=0)
    bridge_tool: str


class BridgeInfo(BaseModel):
    """How a redemption is delivered."""

    model_config = ConfigDict(frozen=True)

    type: Literal["direct", "bridge"]
    tool: str | None = None
    estimated_receive: int | None = None
    min_receive: int | None = None


class RouteResult(BaseModel):
    """Calldata and delivery info handed to the redeem call."""

    model_config = ConfigDict(frozen=True)

    calldata: str = "0x"
    bridge_info: BridgeInfo


class PurchaseReceipt(BaseModel):
    """Result of the purchase settlement call."""

    model_config = ConfigDict(frozen=True, strict=True)

    tx_hash: str
    token_id: int | None = Field(default=None, ge=0, description="Minted token id")


class RedeemReceipt(BaseModel):
    """Result of the redeem settlement call."""

    model_config = ConfigDict(frozen=True, strict=True)

    tx_hash: str


class PurchaseResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_hash: str
    token_id: int | None
    locked_gas_price_wei: int
    locked_gas_price_gwei: str
    expiry_timestamp: int


class RedeemResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_hash: str
    weth_redeemed: int
    target_chain: str
    bridge_info: BridgeInfo


class HealthStatus(BaseModel):
    """Relayer health as reported by the settlement contract."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    version: str
    relayer_address: str
    hook_address: str
    is_authorized_relayer: bool
    protocol_fee_bps: int
    source_chain: str
