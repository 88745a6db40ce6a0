"""Infrastructure factory for creating adapters and dependencies.

This module follows the Factory pattern to centralize the creation of
infrastructure components and the wiring of the application services.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx
from web3 import AsyncHTTPProvider, AsyncWeb3

from ..application.health_service import HealthService
from ..application.intent_verifier import IntentVerifier
from ..application.orchestrator import RelayerOrchestrator
from ..application.position_registry import PositionRegistry
from ..application.price_gate import PriceGate
from ..application.settlement_router import SettlementRouter
from ..domain.models import RelayerConfiguration
from ..domain.signing import SigningDomain
from ..ports.bridge import BridgePort
from ..ports.clock import ClockPort
from ..ports.configuration import ConfigurationPort
from ..ports.oracle import GasOraclePort
from ..ports.settlement import SettlementPort
from .configuration_adapter import EnvironmentConfigurationAdapter
from .credential import RelayerCredential
from .evm_settlement_adapter import EvmSettlementAdapter
from .lifi_bridge_adapter import LiFiBridgeAdapter
from .sui_oracle_adapter import SUI_FULLNODE_URLS, SuiOracleAdapter
from .system_clock import SystemClock

logger = logging.getLogger(__name__)


@dataclass
class RelayerContainer:
    """Application services wired for one process, plus the resources they hold."""

    config: RelayerConfiguration
    orchestrator: RelayerOrchestrator
    price_gate: PriceGate
    registry: PositionRegistry
    router: SettlementRouter
    health: HealthService
    http_client: httpx.AsyncClient | None = None
    w3: AsyncWeb3 | None = None
    clock: ClockPort = field(default_factory=SystemClock)

    async def aclose(self) -> None:
        """Release network resources."""
        if self.http_client is not None:
            await self.http_client.aclose()
        provider = self.w3.provider if self.w3 is not None else None
        if provider is not None and hasattr(provider, "disconnect"):
            await provider.disconnect()


class InfrastructureFactory:
    """Factory for creating infrastructure adapters following hexagonal architecture."""

    @staticmethod
    def create_configuration_port() -> ConfigurationPort:
        return EnvironmentConfigurationAdapter()

    @staticmethod
    def create_http_client(config: RelayerConfiguration) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=config.http_timeout_seconds)

    @staticmethod
    def create_oracle_port(
        config: RelayerConfiguration, client: httpx.AsyncClient
    ) -> GasOraclePort:
        rpc_url = config.sui_rpc_url or SUI_FULLNODE_URLS[config.sui_network]
        return SuiOracleAdapter(client, rpc_url, config.sui_oracle_object_id)

    @staticmethod
    def create_bridge_port(config: RelayerConfiguration, client: httpx.AsyncClient) -> BridgePort:
        return LiFiBridgeAdapter(client, config.lifi_api_url)

    @staticmethod
    def create_web3(config: RelayerConfiguration) -> AsyncWeb3:
        return AsyncWeb3(
            AsyncHTTPProvider(
                config.evm_rpc_url, request_kwargs={"timeout": config.http_timeout_seconds}
            )
        )

    @staticmethod
    def create_settlement_port(config: RelayerConfiguration, w3: AsyncWeb3) -> SettlementPort:
        """Create the settlement adapter with the process-wide relayer credential."""
        credential = RelayerCredential(config.relayer_private_key)
        return EvmSettlementAdapter(w3, config.hook_address, credential)

    @staticmethod
    def create_signing_domain(config: RelayerConfiguration) -> SigningDomain:
        return SigningDomain(
            name=config.signing_domain_name,
            version=config.signing_domain_version,
            chain_id=config.signing_chain_id,
            verifying_contract=config.hook_address,
        )

    @classmethod
    def create_container(
        cls,
        config: RelayerConfiguration,
        oracle: GasOraclePort | None = None,
        settlement: SettlementPort | None = None,
        bridge: BridgePort | None = None,
        clock: ClockPort | None = None,
    ) -> RelayerContainer:
        """Wire the application services.

        Collaborators not passed in are created from the configuration.

        Args:
            config: Relayer configuration
            oracle: Optional gas oracle collaborator
            settlement: Optional settlement collaborator
            bridge: Optional bridge collaborator
            clock: Optional clock

        Returns:
            RelayerContainer holding the services and owned resources
        """
        http_client = None
        if oracle is None or bridge is None:
            http_client = cls.create_http_client(config)
        w3 = None
        if settlement is None:
            w3 = cls.create_web3(config)
            settlement = cls.create_settlement_port(config, w3)

        oracle = oracle or cls.create_oracle_port(config, http_client)  # type: ignore[arg-type]
        bridge = bridge or cls.create_bridge_port(config, http_client)  # type: ignore[arg-type]
        clock = clock or SystemClock()

        price_gate = PriceGate(oracle, clock)
        verifier = IntentVerifier(cls.create_signing_domain(config))
        registry = PositionRegistry(settlement, clock, config.position_scan_batch_size)
        router = SettlementRouter(bridge, config.bridger_address, config.max_slippage_bps)
        orchestrator = RelayerOrchestrator(
            price_gate=price_gate,
            verifier=verifier,
            registry=registry,
            router=router,
            settlement=settlement,
            clock=clock,
            source_chain=config.source_chain,
            max_price_age_ms=config.price_staleness_ms,
        )
        health = HealthService(settlement, config.hook_address, config.source_chain)

        logger.info(f"Relayer wired for source chain {config.source_chain}")
        return RelayerContainer(
            config=config,
            orchestrator=orchestrator,
            price_gate=price_gate,
            registry=registry,
            router=router,
            health=health,
            http_client=http_client,
            w3=w3,
            clock=clock,
        )
