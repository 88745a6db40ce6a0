"""Settlement adapter for the EVM hook contract.

Implements SettlementPort with web3's AsyncWeb3. Read calls map a contract
revert to "not found" and any other failure to SettlementReadError. Mutating
calls are signed with the relayer credential; a failure to send, or a reverted
receipt, raises SettlementCallError.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError
from web3.logs import DISCARD

from ..domain.exceptions import SettlementCallError, SettlementReadError
from ..domain.models import PositionDetail, PurchaseReceipt, RedeemReceipt
from ..ports.settlement import SettlementPort
from .credential import RelayerCredential
from .hook_abi import HOOK_ABI

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_RECEIPT_TIMEOUT_SECONDS = 120


class EvmSettlementAdapter(SettlementPort):
    """Reads positions from and submits transactions to the hook contract."""

    def __init__(
        self,
        w3: AsyncWeb3,
        hook_address: str,
        credential: RelayerCredential,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT_SECONDS,
    ):
        """Initialize the adapter.

        Args:
            w3: Connected AsyncWeb3 instance
            hook_address: Hook contract address
            credential: Relayer credential that signs transactions
            receipt_timeout: Seconds to wait for a transaction receipt
        """
        self._w3 = w3
        self._contract = w3.eth.contract(
            address=Web3.to_checksum_address(hook_address), abi=HOOK_ABI
        )
        self._credential = credential
        self._receipt_timeout = receipt_timeout
        self._chain_id: int | None = None
        # One account signs for every request: allocate nonces one at a time.
        self._send_lock = asyncio.Lock()

    @property
    def relayer_address(self) -> str:
        return self._credential.address

    async def is_chain_supported(self, chain: str) -> bool:
        chain_id = await self._read("chainIds", self._contract.functions.chainIds(chain))
        return int(chain_id) > 0

    async def get_position(self, token_id: int) -> PositionDetail | None:
        try:
            raw = await self._contract.functions.getPosition(token_id).call()
        except ContractLogicError:
            return None
        except Exception as e:
            raise SettlementReadError(f"getPosition({token_id}) failed: {e}") from e
        return self._to_position_detail(token_id, raw)

    async def owner_of(self, token_id: int) -> str | None:
        try:
            owner = await self._contract.functions.ownerOf(token_id).call()
        except ContractLogicError:
            return None
        except Exception as e:
            raise SettlementReadError(f"ownerOf({token_id}) failed: {e}") from e
        if not owner or owner == ZERO_ADDRESS:
            return None
        return str(owner)

    async def balance_of(self, user: str) -> int:
        call = self._contract.functions.balanceOf(Web3.to_checksum_address(user))
        return int(await self._read("balanceOf", call))

    async def get_gas_units_available(self, token_id: int) -> int:
        call = self._contract.functions.getGasUnitsAvailable(token_id)
        return int(await self._read("getGasUnitsAvailable", call))

    async def get_protocol_fee_bps(self) -> int:
        call = self._contract.functions.PROTOCOL_FEE_BPS()
        return int(await self._read("PROTOCOL_FEE_BPS", call))

    async def is_authorized_caller(self) -> bool:
        relayer = await self._read("relayer", self._contract.functions.relayer())
        return str(relayer).lower() == self._credential.address.lower()

    async def purchase(
        self,
        usdc_amount: int,
        min_weth_out: int,
        locked_gas_price_wei: int,
        target_chain: str,
        expiry_duration_seconds: int,
        buyer: str,
    ) -> PurchaseReceipt:
        call = self._contract.functions.purchasePosition(
            usdc_amount,
            min_weth_out,
            locked_gas_price_wei,
            target_chain,
            expiry_duration_seconds,
            Web3.to_checksum_address(buyer),
        )
        tx_hash, receipt = await self._transact("purchasePosition", call)
        token_id = self._minted_token_id(receipt)
        if token_id is None:
            logger.error(f"Purchase {tx_hash} succeeded but no mint Transfer log was found")
        return PurchaseReceipt(tx_hash=tx_hash, token_id=token_id)

    async def redeem(
        self, token_id: int, weth_amount: int, bridge_calldata: str, recipient: str
    ) -> RedeemReceipt:
        call = self._contract.functions.redeemPosition(
            token_id,
            weth_amount,
            Web3.to_bytes(hexstr=bridge_calldata),
            Web3.to_checksum_address(recipient),
        )
        tx_hash, _ = await self._transact("redeemPosition", call)
        return RedeemReceipt(tx_hash=tx_hash)

    async def _read(self, name: str, call: Any) -> Any:
        try:
            return await call.call()
        except Exception as e:
            raise SettlementReadError(f"{name} failed: {e}") from e

    async def _transact(self, name: str, call: Any) -> tuple[str, Any]:
        sender = self._credential.address
        async with self._send_lock:
            try:
                if self._chain_id is None:
                    self._chain_id = await self._w3.eth.chain_id
                nonce = await self._w3.eth.get_transaction_count(sender, "pending")
                transaction = await call.build_transaction(
                    {"from": sender, "nonce": nonce, "chainId": self._chain_id}
                )
                raw = self._credential.sign_transaction(transaction)
                tx_hash = Web3.to_hex(await self._w3.eth.send_raw_transaction(raw))
            except Exception as e:
                raise SettlementCallError(f"{name} could not be submitted: {e}") from e

        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
        except Exception as e:
            raise SettlementCallError(f"{name} receipt not received: {e}", tx_hash) from e

        if receipt["status"] != 1:
            raise SettlementCallError(f"{name} reverted", tx_hash)
        return tx_hash, receipt

    def _minted_token_id(self, receipt: Any) -> int | None:
        events = self._contract.events.Transfer().process_receipt(receipt, errors=DISCARD)
        for event in events:
            if event["args"]["from"] == ZERO_ADDRESS:
                return int(event["args"]["tokenId"])
        return None

    @staticmethod
    def _to_position_detail(token_id: int, raw: Any) -> PositionDetail | None:
        try:
            weth, remaining, locked_price, purchased_at, expiry, target_chain = raw
            return PositionDetail(
                weth_amount=int(weth),
                remaining_weth_amount=int(remaining),
                locked_gas_price_wei=int(locked_price),
                purchase_timestamp=int(purchased_at),
                expiry=int(expiry),
                target_chain=str(target_chain),
            )
        except (TypeError, ValueError) as e:
            logger.warning(f"Unexpected position record for token {token_id}: {e}")
            return None
