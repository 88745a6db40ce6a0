"""Gas oracle adapter reading the Sui GasOracle object over JSON-RPC.

The oracle object lists its supported chains and holds a Table<String, GasPrice>
whose entries are read as dynamic fields. Responses are mapped into
OraclePriceReading; anything that does not match the expected shape is treated
as "no price" rather than trusted.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..domain.exceptions import OracleError
from ..domain.models import OraclePriceReading
from ..ports.oracle import GasOraclePort

logger = logging.getLogger(__name__)

SUI_FULLNODE_URLS = {
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
}

STRING_KEY_TYPE = "0x1::string::String"


def _move_fields(result: Any) -> dict[str, Any] | None:
    """Extract the fields of a Move object from a sui_getObject-style result."""
    if not isinstance(result, dict):
        return None
    data = result.get("data")
    if not isinstance(data, dict):
        return None
    content = data.get("content")
    if not isinstance(content, dict) or content.get("dataType") != "moveObject":
        return None
    fields = content.get("fields")
    return fields if isinstance(fields, dict) else None


def _nested(value: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


class SuiOracleAdapter(GasOraclePort):
    """Reads published gas prices from the Sui oracle object."""

    def __init__(self, client: httpx.AsyncClient, rpc_url: str, oracle_object_id: str):
        """Initialize the adapter.

        Args:
            client: Shared HTTP client
            rpc_url: Sui fullnode JSON-RPC URL
            oracle_object_id: Object id of the GasOracle
        """
        self._client = client
        self._rpc_url = rpc_url
        self._oracle_object_id = oracle_object_id

    async def list_supported_chains(self) -> list[str]:
        fields = await self._oracle_fields()
        if fields is None:
            raise OracleError("Invalid oracle object")

        chains = fields.get("supported_chains") or []
        if not isinstance(chains, list) or not all(isinstance(c, str) for c in chains):
            raise OracleError("Oracle supported_chains has an unexpected shape")
        return chains

    async def read_price(self, chain: str) -> OraclePriceReading | None:
        fields = await self._oracle_fields()
        if fields is None:
            return None

        table_id = _nested(fields, "prices", "fields", "id", "id")
        if not isinstance(table_id, str):
            logger.error("Prices table ID not found in oracle object")
            return None

        result = await self._rpc(
            "suix_getDynamicFieldObject",
            [table_id, {"type": STRING_KEY_TYPE, "value": chain}],
        )
        entry = _move_fields(result)
        value = _nested(entry, "value", "fields")
        if not isinstance(value, dict):
            return None

        try:
            return OraclePriceReading(
                price_wei=int(value["price_wei"]),
                high_24h=_optional_int(value.get("high_24h")),
                low_24h=_optional_int(value.get("low_24h")),
                timestamp_ms=int(value.get("timestamp_ms") or 0),
                gas_token=value.get("gas_token"),
            )
        except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
            logger.warning(f"Malformed oracle price for {chain}: {e}")
            return None

    async def _oracle_fields(self) -> dict[str, Any] | None:
        result = await self._rpc("sui_getObject", [self._oracle_object_id, {"showContent": True}])
        return _move_fields(result)

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        try:
            response = await self._client.post(self._rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise OracleError(f"Sui RPC {method} failed: {e}") from e

        if not isinstance(body, dict):
            raise OracleError(f"Sui RPC {method} returned an unexpected body")
        if body.get("error"):
            raise OracleError(f"Sui RPC {method} error: {body['error']}")
        return body.get("result")
