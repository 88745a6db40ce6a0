"""ABI fragments of the settlement hook contract used by the relayer."""

from __future__ import annotations

from typing import Any


def _fn(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[dict[str, Any]],
    mutability: str = "view",
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": outputs,
    }


def _out(*types: str) -> list[dict[str, Any]]:
    return [{"name": "", "type": t} for t in types]


POSITION_TUPLE = {
    "name": "",
    "type": "tuple",
    "components": [
        {"name": "wethAmount", "type": "uint256"},
        {"name": "remainingWethAmount", "type": "uint256"},
        {"name": "lockedGasPriceWei", "type": "uint96"},
        {"name": "purchaseTimestamp", "type": "uint40"},
        {"name": "expiry", "type": "uint40"},
        {"name": "targetChain", "type": "string"},
    ],
}

HOOK_ABI: list[dict[str, Any]] = [
    _fn(
        "purchasePosition",
        [
            ("usdcAmount", "uint256"),
            ("minWethOut", "uint256"),
            ("lockedGasPriceWei", "uint96"),
            ("targetChain", "string"),
            ("expiryDuration", "uint40"),
            ("buyer", "address"),
        ],
        [{"name": "tokenId", "type": "uint256"}],
        "nonpayable",
    ),
    _fn(
        "redeemPosition",
        [
            ("tokenId", "uint256"),
            ("wethAmount", "uint256"),
            ("lifiData", "bytes"),
            ("recipient", "address"),
        ],
        [],
        "nonpayable",
    ),
    _fn("relayer", [], _out("address")),
    _fn("getPosition", [("tokenId", "uint256")], [POSITION_TUPLE]),
    _fn("getGasUnitsAvailable", [("tokenId", "uint256")], _out("uint256")),
    _fn("chainIds", [("chain", "string")], _out("uint256")),
    _fn("PROTOCOL_FEE_BPS", [], _out("uint16")),
    _fn("ownerOf", [("tokenId", "uint256")], _out("address")),
    _fn("balanceOf", [("owner", "address")], _out("uint256")),
    {
        "type": "event",
        "name": "Transfer",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "tokenId", "type": "uint256", "indexed": True},
        ],
    },
]
