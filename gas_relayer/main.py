"""Main entry point for the gas relayer.

This module sets up the FastAPI application using hexagonal architecture,
with clear separation between framework concerns and business logic.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from . import __version__
from .domain.models import ValidationLevel
from .infrastructure.api.error_handlers import register_error_handlers
from .infrastructure.api.routes import router
from .infrastructure.factory import InfrastructureFactory

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan manager.

    Builds the relayer container on startup unless one was installed on
    app.state beforehand, and releases its resources on shutdown.
    """
    logger.info("Starting gas relayer")
    container = getattr(app.state, "container", None)

    try:
        if container is None:
            config_port = InfrastructureFactory.create_configuration_port()
            config = config_port.load_configuration()
            for issue in config_port.validate_configuration(config).get_issues_by_level(
                ValidationLevel.WARNING
            ):
                logger.warning(issue.message)

            logger.info(f"Source chain: {config.source_chain}")
            logger.info(f"Hook address: {config.hook_address}")
            logger.info(f"API Port: {config.api_port}")

            container = InfrastructureFactory.create_container(config)
            app.state.container = container

        await container.health.log_authorization()
        logger.info("Relayer is ready to handle requests")

        yield

    except Exception as e:
        logger.error(f"Failed to start relayer: {e}")
        raise
    finally:
        logger.info("Shutting down gas relayer")
        if container is not None:
            await container.aclose()


app = FastAPI(
    title="Gas Relayer",
    description="Settles signed gas-price purchase and redeem intents on the hook contract",
    version=__version__,
    lifespan=lifespan,
)

# Register error handlers
register_error_handlers(app)

# Include routes from the infrastructure layer
app.include_router(router)


def run() -> None:
    """Run the relayer API with uvicorn."""
    config = InfrastructureFactory.create_configuration_port().load_configuration()
    uvicorn.run(app, host="0.0.0.0", port=config.api_port, log_level=config.log_level.lower())
