"""FastAPI dependency injection setup.

The container is built once in the application lifespan and stored on
app.state; dependencies hand its services to the routes.
"""

from __future__ import annotations

from fastapi import Request

from ...application.health_service import HealthService
from ...application.orchestrator import RelayerOrchestrator
from ...application.position_registry import PositionRegistry
from ...application.price_gate import PriceGate
from ...application.settlement_router import SettlementRouter
from ...domain.exceptions import ConfigurationException
from ...domain.models import RelayerConfiguration
from ..factory import RelayerContainer


def get_container(request: Request) -> RelayerContainer:
    """Get the relayer container of the running application.

    Raises:
        ConfigurationException: If the application was not started
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise ConfigurationException("Relayer not initialized")
    return container


def get_configuration(request: Request) -> RelayerConfiguration:
    return get_container(request).config


def get_orchestrator(request: Request) -> RelayerOrchestrator:
    return get_container(request).orchestrator


def get_price_gate(request: Request) -> PriceGate:
    return get_container(request).price_gate


def get_position_registry(request: Request) -> PositionRegistry:
    return get_container(request).registry


def get_settlement_router(request: Request) -> SettlementRouter:
    return get_container(request).router


def get_health_service(request: Request) -> HealthService:
    return get_container(request).health
