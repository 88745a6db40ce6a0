"""Bridge adapter for the LI.FI aggregator REST API.

Generates quotes and calldata for delivering the native gas token on a
position's target chain.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..domain.exceptions import BridgeQuoteError
from ..domain.models import BridgeQuote
from ..ports.bridge import BridgePort

logger = logging.getLogger(__name__)

DEFAULT_LIFI_API_URL = "https://li.quest/v1"

# Testnet deployments
CHAIN_IDS: dict[str, int] = {
    "sepolia": 11155111,
    "ethereum": 11155111,
    "arbitrum": 421614,
    "base": 84532,
    "polygon": 80002,
    "optimism": 11155420,
}

NATIVE_TOKEN = "0x0000000000000000000000000000000000000000"
ETH_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

GAS_TOKENS: dict[str, str] = {
    "sepolia": ETH_ADDRESS,
    "ethereum": ETH_ADDRESS,
    "arbitrum": ETH_ADDRESS,
    "base": ETH_ADDRESS,
    "polygon": NATIVE_TOKEN,
    "optimism": ETH_ADDRESS,
}


class LiFiBridgeAdapter(BridgePort):
    """Quotes cross-chain gas delivery through LI.FI."""

    def __init__(self, client: httpx.AsyncClient, api_url: str = DEFAULT_LIFI_API_URL):
        """Initialize the adapter.

        Args:
            client: Shared HTTP client
            api_url: LI.FI API base URL
        """
        self._client = client
        self._api_url = api_url.rstrip("/")

    @staticmethod
    def get_chain_id(chain: str) -> int | None:
        return CHAIN_IDS.get(chain)

    @staticmethod
    def get_gas_token(chain: str) -> str:
        return GAS_TOKENS.get(chain, ETH_ADDRESS)

    async def quote(
        self,
        source_chain: str,
        dest_chain: str,
        amount: int,
        from_address: str,
        to_address: str,
        max_slippage_bps: int,
    ) -> BridgeQuote:
        from_chain_id = self.get_chain_id(source_chain)
        to_chain_id = self.get_chain_id(dest_chain)
        if from_chain_id is None or to_chain_id is None:
            raise BridgeQuoteError(f"Unsupported chain: {source_chain} or {dest_chain}")

        params = {
            "fromChain": str(from_chain_id),
            "toChain": str(to_chain_id),
            "fromToken": self.get_gas_token(source_chain),
            "toToken": self.get_gas_token(dest_chain),
            "fromAmount": str(amount),
            "fromAddress": from_address,
            "toAddress": to_address,
            "slippage": str(max_slippage_bps / 10_000),
        }

        try:
            response = await self._client.get(f"{self._api_url}/quote", params=params)
        except httpx.HTTPError as e:
            raise BridgeQuoteError(f"LiFi quote failed: {e}") from e

        if response.status_code != 200:
            raise BridgeQuoteError(f"LiFi quote failed: {response.text}")

        try:
            return self._to_quote(response.json())
        except (KeyError, TypeError, ValueError) as e:
            raise BridgeQuoteError(f"LiFi quote response malformed: {e}") from e

    async def list_supported_chains(self) -> list[str]:
        """List LI.FI chain keys, falling back to the built-in table."""
        try:
            response = await self._client.get(f"{self._api_url}/chains")
            response.raise_for_status()
            chains = response.json().get("chains") or []
            keys = [c["key"] for c in chains if isinstance(c, dict) and "key" in c]
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(f"Failed to fetch LiFi chains, using built-in list: {e}")
            return list(CHAIN_IDS)
        return keys or list(CHAIN_IDS)

    @staticmethod
    def _to_quote(body: dict[str, Any]) -> BridgeQuote:
        transaction = body["transactionRequest"]
        estimate = body["estimate"]
        return BridgeQuote(
            calldata=str(transaction["data"]),
            to_address=str(transaction["to"]),
            min_receive=int(estimate["toAmountMin"]),
            estimated_receive=int(estimate["toAmount"]),
            bridge_tool=str(body["toolDetails"]["name"]),
        )
