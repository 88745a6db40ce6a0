"""Tests for the HTTP boundary.

The routes run against a container wired from mocked collaborators, so status
codes and response bodies are checked through the real error handlers.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from eth_account.signers.local import LocalAccount
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gas_relayer.domain.exceptions import SettlementReadError
from gas_relayer.domain.models import (
    OraclePriceReading,
    PurchaseIntent,
    PurchaseReceipt,
    RelayerConfiguration,
)
from gas_relayer.domain.signing import SigningDomain, purchase_typed_data
from gas_relayer.infrastructure.api.error_handlers import register_error_handlers
from gas_relayer.infrastructure.api.routes import router
from gas_relayer.infrastructure.factory import InfrastructureFactory
from tests.conftest import (
    HOOK_ADDRESS,
    NOW_MS,
    RELAYER_ADDRESS,
    FixedClock,
    make_position_detail,
    sign_typed_data,
)

USER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def app(
    relayer_config: RelayerConfiguration,
    mock_oracle: AsyncMock,
    mock_settlement: AsyncMock,
    mock_bridge: AsyncMock,
    clock: FixedClock,
) -> FastAPI:
    """Application with the relayer container installed on its state."""
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(router)
    app.state.container = InfrastructureFactory.create_container(
        relayer_config,
        oracle=mock_oracle,
        settlement=mock_settlement,
        bridge=mock_bridge,
        clock=clock,
    )
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        # Act
        response = client.get("/health")

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["relayerAddress"] == RELAYER_ADDRESS
        assert body["hookAddress"] == HOOK_ADDRESS
        assert body["isAuthorizedRelayer"] is True
        assert body["protocolFeeBps"] == 50
        assert body["sourceChain"] == "sepolia"

    def test_health_settlement_failure(
        self, client: TestClient, mock_settlement: AsyncMock
    ) -> None:
        mock_settlement.is_authorized_caller.side_effect = SettlementReadError("rpc down")

        response = client.get("/health")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "UPSTREAM_FAILURE"

    def test_missing_container(self) -> None:
        app = FastAPI()
        register_error_handlers(app)
        app.include_router(router)

        response = TestClient(app).get("/health")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"


class TestPrices:
    """Test cases for the price endpoints."""

    def test_list_prices(self, client: TestClient, mock_oracle: AsyncMock) -> None:
        # Arrange
        mock_oracle.list_supported_chains.return_value = ["arbitrum"]
        mock_oracle.read_price.return_value = OraclePriceReading(
            price_wei=123_456_789, timestamp_ms=NOW_MS
        )

        # Act
        response = client.get("/api/prices")

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["sourceChain"] == "sepolia"
        assert body["gasPrices"] == [
            {
                "chain": "arbitrum",
                "priceWei": "123456789",
                "priceGwei": "0.123457",
                "high24h": "123456789",
                "low24h": "123456789",
                "timestampMs": NOW_MS,
                "gasToken": "ETH",
            }
        ]

    def test_single_price_staleness(
        self, client: TestClient, mock_oracle: AsyncMock, clock: FixedClock
    ) -> None:
        mock_oracle.read_price.return_value = OraclePriceReading(price_wei=1, timestamp_ms=NOW_MS)
        clock.advance(minutes=10)

        body = client.get("/api/prices/base").json()

        assert body["isStale"] is True
        assert body["staleSinceMs"] == 600_000
        assert body["gasPrice"]["chain"] == "base"

    def test_fresh_price_has_no_staleness(
        self, client: TestClient, mock_oracle: AsyncMock, clock: FixedClock
    ) -> None:
        mock_oracle.read_price.return_value = OraclePriceReading(price_wei=1, timestamp_ms=NOW_MS)
        clock.advance(minutes=2)

        body = client.get("/api/prices/base").json()

        assert body["isStale"] is False
        assert body["staleSinceMs"] == 0

    def test_unknown_chain(self, client: TestClient) -> None:
        response = client.get("/api/prices/solana")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HTTP_404"


class TestPositions:
    """Test cases for the position endpoints."""

    def test_position_by_token(self, client: TestClient, mock_settlement: AsyncMock) -> None:
        # Arrange
        mock_settlement.owner_of.return_value = USER
        mock_settlement.get_position.return_value = make_position_detail()
        mock_settlement.get_gas_units_available.return_value = 40_000_000

        # Act
        response = client.get("/api/positions/token/4")

        # Assert
        assert response.status_code == 200
        position = response.json()["position"]
        assert position["tokenId"] == 4
        assert position["owner"] == USER
        assert position["wethAmount"] == str(10**18)
        assert position["gasUnitsAvailable"] == "40000000"
        assert position["status"] == "active"
        assert position["isExpired"] is False

    def test_position_not_found(self, client: TestClient) -> None:
        response = client.get("/api/positions/token/4")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "POSITION_NOT_FOUND"

    def test_user_positions(self, client: TestClient, mock_settlement: AsyncMock) -> None:
        # Arrange
        async def owner_of(token_id: int) -> str | None:
            return USER if token_id in (1, 3) else None

        mock_settlement.balance_of.return_value = 2
        mock_settlement.owner_of.side_effect = owner_of
        mock_settlement.get_position.return_value = make_position_detail()

        # Act
        response = client.get(f"/api/positions/{USER}", params={"maxScan": 10})

        # Assert
        assert response.status_code == 200
        assert [p["tokenId"] for p in response.json()["positions"]] == [1, 3]

    def test_invalid_user_address(self, client: TestClient) -> None:
        response = client.get("/api/positions/not-an-address")
        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"field": "user"}

    def test_max_scan_out_of_range(self, client: TestClient) -> None:
        response = client.get(f"/api/positions/{USER}", params={"maxScan": 10_001})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestPurchase:
    """Test cases for the purchase endpoint."""

    def test_purchase(
        self,
        client: TestClient,
        mock_oracle: AsyncMock,
        mock_settlement: AsyncMock,
        user_account: LocalAccount,
        signing_domain: SigningDomain,
    ) -> None:
        # Arrange
        intent = PurchaseIntent(
            user=user_account.address,
            usdc_amount=50_000_000,
            target_chain="base",
            expiry_days=7,
            timestamp=1_700_000_000,
        )
        mock_oracle.read_price.return_value = OraclePriceReading(
            price_wei=2_000_000_000, timestamp_ms=NOW_MS
        )
        mock_settlement.purchase.return_value = PurchaseReceipt(tx_hash="0xabc", token_id=9)

        # Act
        response = client.post(
            "/api/purchase",
            json={
                "user": intent.user,
                "usdcAmount": "50000000",
                "targetChain": "base",
                "expiryDays": 7,
                "userSignature": sign_typed_data(
                    user_account, purchase_typed_data(signing_domain, intent)
                ),
                "timestamp": 1_700_000_000,
            },
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["txHash"] == "0xabc"
        assert body["tokenId"] == "9"
        assert body["lockedGasPriceWei"] == "2000000000"
        assert body["lockedGasPriceGwei"] == "2.000000"

    def test_missing_fields(self, client: TestClient) -> None:
        response = client.post("/api/purchase", json={"user": USER})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Missing required fields"

    def test_stale_price(self, client: TestClient, mock_oracle: AsyncMock) -> None:
        mock_oracle.read_price.return_value = OraclePriceReading(
            price_wei=1, timestamp_ms=NOW_MS - 301_000
        )
        response = client.post(
            "/api/purchase",
            json={
                "user": USER,
                "usdcAmount": "1",
                "targetChain": "base",
                "expiryDays": 1,
                "userSignature": "0x00",
                "timestamp": 1,
            },
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "STALE_PRICE"


class TestRedeem:
    def test_invalid_signature_is_forbidden(
        self, client: TestClient, mock_settlement: AsyncMock
    ) -> None:
        # Arrange
        mock_settlement.owner_of.return_value = USER
        mock_settlement.get_position.return_value = make_position_detail()

        # Act
        response = client.post(
            "/api/redeem",
            json={
                "user": USER,
                "tokenId": 1,
                "wethAmount": "max",
                "userSignature": "0x" + "00" * 65,
                "timestamp": 1_700_000_000,
            },
        )

        # Assert
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "SIGNATURE_INVALID"
        mock_settlement.redeem.assert_not_awaited()


class TestBridge:
    """Test cases for the bridge preview endpoints."""

    def test_direct_quote(self, client: TestClient, mock_bridge: AsyncMock) -> None:
        # Act
        response = client.get(
            "/api/bridge/quote",
            params={"toChain": "sepolia", "amount": "1000", "recipient": USER},
        )

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["type"] == "direct"
        assert body["tool"] == "direct-transfer"
        assert body["estimatedReceive"] == "1000"
        assert body["minReceive"] == "1000"
        assert body["calldata"] is None
        mock_bridge.quote.assert_not_awaited()

    def test_missing_parameters(self, client: TestClient) -> None:
        response = client.get("/api/bridge/quote", params={"amount": "1000"})
        assert response.status_code == 422

    def test_invalid_recipient(self, client: TestClient) -> None:
        response = client.get(
            "/api/bridge/quote",
            params={"toChain": "base", "amount": "1000", "recipient": "0x12"},
        )
        assert response.status_code == 400

    def test_chains(self, client: TestClient) -> None:
        body = client.get("/api/bridge/chains").json()
        assert body == {"chains": ["sepolia", "arbitrum", "base"], "sourceChain": "sepolia"}


class TestErrorHandlers:
    def test_unexpected_error_is_internal(self, app: FastAPI, mock_bridge: AsyncMock) -> None:
        # Arrange
        mock_bridge.list_supported_chains.side_effect = RuntimeError("boom")
        client = TestClient(app, raise_server_exceptions=False)

        # Act
        response = client.get("/api/bridge/chains")

        # Assert
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"
