"""EIP-712 signing contract shared with intent producers.

Intents are signed as EIP-712 typed data under one versioned domain. The field
set and order of each message type below is part of the external contract: a
producer must sign exactly these fields, in this order, for the relayer to accept
the signature. The bare prefixed-hash scheme is not accepted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .models import PurchaseIntent, RedeemIntent

EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

PURCHASE_TYPE = [
    {"name": "user", "type": "address"},
    {"name": "usdcAmount", "type": "uint256"},
    {"name": "targetChain", "type": "string"},
    {"name": "expiryDays", "type": "uint256"},
    {"name": "timestamp", "type": "uint256"},
]

REDEEM_TYPE = [
    {"name": "user", "type": "address"},
    {"name": "tokenId", "type": "uint256"},
    {"name": "wethAmount", "type": "uint256"},
    {"name": "timestamp", "type": "uint256"},
]


class SigningDomain(BaseModel):
    """The EIP-712 domain separating relayer intents from other signed data."""

    model_config = ConfigDict(frozen=True, strict=True)

    name: str = Field(default="InvestInGas", min_length=1)
    version: str = Field(default="1", min_length=1)
    chain_id: int = Field(default=11155111, gt=0)
    verifying_contract: str = Field(..., pattern=r"^0x[0-9a-fA-F]{40}$")

    def as_typed_data(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract.lower(),
        }


def _typed_data(
    domain: SigningDomain, primary_type: str, fields: list[dict[str, str]], message: dict[str, Any]
) -> dict[str, Any]:
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN_TYPE, primary_type: fields},
        "primaryType": primary_type,
        "domain": domain.as_typed_data(),
        "message": message,
    }


def purchase_typed_data(domain: SigningDomain, intent: PurchaseIntent) -> dict[str, Any]:
    """Full EIP-712 payload for a purchase intent."""
    return _typed_data(
        domain,
        "Purchase",
        PURCHASE_TYPE,
        {
            "user": intent.user.lower(),
            "usdcAmount": intent.usdc_amount,
            "targetChain": intent.target_chain,
            "expiryDays": intent.expiry_days,
            "timestamp": intent.timestamp,
        },
    )


def redeem_typed_data(domain: SigningDomain, intent: RedeemIntent) -> dict[str, Any]:
    """Full EIP-712 payload for a redeem intent."""
    return _typed_data(
        domain,
        "Redeem",
        REDEEM_TYPE,
        {
            "user": intent.user.lower(),
            "tokenId": intent.token_id,
            "wethAmount": intent.weth_amount,
            "timestamp": intent.timestamp,
        },
    )
