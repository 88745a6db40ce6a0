"""Shared pytest fixtures for gas relayer tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount

from gas_relayer.domain.models import PositionDetail, RelayerConfiguration
from gas_relayer.domain.signing import SigningDomain
from gas_relayer.ports.bridge import BridgePort
from gas_relayer.ports.clock import ClockPort
from gas_relayer.ports.oracle import GasOraclePort
from gas_relayer.ports.settlement import SettlementPort

# Well-known development keys; never funded outside local chains.
USER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OTHER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
RELAYER_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"

HOOK_ADDRESS = "0x1234567890abcdef1234567890abcdef12345678"
BRIDGER_ADDRESS = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
RELAYER_ADDRESS = Account.from_key(RELAYER_KEY).address

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)
NOW_SECONDS = int(NOW.timestamp())
NOW_MS = NOW_SECONDS * 1000


class FixedClock(ClockPort):
    """Clock frozen at a settable instant."""

    def __init__(self, current: datetime = NOW):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: Any) -> None:
        self.current = self.current + timedelta(**kwargs)


def sign_typed_data(account: LocalAccount, typed_data: dict[str, Any]) -> str:
    """Sign an EIP-712 payload and return a 0x-prefixed signature."""
    signed = account.sign_message(encode_typed_data(full_message=typed_data))
    return "0x" + bytes(signed.signature).hex()


def make_position_detail(**overrides: Any) -> PositionDetail:
    values: dict[str, Any] = {
        "weth_amount": 10**18,
        "remaining_weth_amount": 10**18,
        "locked_gas_price_wei": 25_000_000_000,
        "purchase_timestamp": NOW_SECONDS - 86_400,
        "expiry": NOW_SECONDS + 29 * 86_400,
        "target_chain": "sepolia",
    }
    values.update(overrides)
    return PositionDetail(**values)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def user_account() -> LocalAccount:
    return Account.from_key(USER_KEY)


@pytest.fixture
def other_account() -> LocalAccount:
    return Account.from_key(OTHER_KEY)


@pytest.fixture
def signing_domain() -> SigningDomain:
    return SigningDomain(verifying_contract=HOOK_ADDRESS)


@pytest.fixture
def relayer_config() -> RelayerConfiguration:
    """Valid configuration pointing at test addresses."""
    return RelayerConfiguration(
        evm_rpc_url="http://localhost:8545",
        hook_address=HOOK_ADDRESS,
        bridger_address=BRIDGER_ADDRESS,
        relayer_private_key=RELAYER_KEY,
        sui_oracle_object_id="0xoracle",
        source_chain="sepolia",
    )


@pytest.fixture
def mock_oracle() -> AsyncMock:
    """Mock gas oracle with no prices."""
    oracle = AsyncMock(spec=GasOraclePort)
    oracle.list_supported_chains.return_value = []
    oracle.read_price.return_value = None
    return oracle


@pytest.fixture
def mock_settlement() -> AsyncMock:
    """Mock settlement contract that supports every chain and knows no tokens."""
    settlement = AsyncMock(spec=SettlementPort)
    settlement.relayer_address = RELAYER_ADDRESS
    settlement.is_chain_supported.return_value = True
    settlement.get_position.return_value = None
    settlement.owner_of.return_value = None
    settlement.balance_of.return_value = 0
    settlement.get_gas_units_available.return_value = 0
    settlement.get_protocol_fee_bps.return_value = 50
    settlement.is_authorized_caller.return_value = True
    return settlement


@pytest.fixture
def mock_bridge() -> AsyncMock:
    bridge = AsyncMock(spec=BridgePort)
    bridge.list_supported_chains.return_value = ["sepolia", "arbitrum", "base"]
    return bridge
