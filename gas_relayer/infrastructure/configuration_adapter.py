"""Configuration adapter implementation.

Concrete implementation of the ConfigurationPort interface.
Loads configuration from environment variables, optionally seeded from a .env file.
"""

from __future__ import annotations

import os
import re
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import SecretStr

from ..domain.exceptions import ConfigurationException
from ..domain.models import (
    RelayerConfiguration,
    ValidationIssue,
    ValidationLevel,
    ValidationResult,
    is_address,
)
from ..ports.configuration import ConfigurationPort

_PRIVATE_KEY_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


class EnvironmentConfigurationAdapter(ConfigurationPort):
    """Adapter that loads configuration from environment variables."""

    def __init__(self, use_dotenv: bool = True, dotenv_path: str | None = None):
        """Initialize the adapter.

        Args:
            use_dotenv: Load a .env file into the environment first
            dotenv_path: Explicit .env location; searched for when omitted
        """
        self._use_dotenv = use_dotenv
        self._dotenv_path = dotenv_path

    def load_configuration(self) -> RelayerConfiguration:
        """Load relayer configuration from environment variables.

        Returns:
            RelayerConfiguration: Validated configuration

        Raises:
            ConfigurationException: If configuration is invalid
        """
        if self._use_dotenv:
            load_dotenv(self._dotenv_path)

        try:
            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
            sui_network = os.getenv("SUI_NETWORK", "testnet").lower()

            if log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
                raise ValueError(f"Invalid log level: {log_level}")

            if sui_network not in ["testnet", "mainnet", "devnet"]:
                raise ValueError(f"Invalid Sui network: {sui_network}")

            config = RelayerConfiguration(
                evm_rpc_url=os.getenv("EVM_RPC_URL", ""),
                hook_address=os.getenv("HOOK_ADDRESS", ""),
                bridger_address=os.getenv("BRIDGER_ADDRESS", ""),
                relayer_private_key=SecretStr(os.getenv("RELAYER_PRIVATE_KEY", "")),
                sui_network=cast(Literal["testnet", "mainnet", "devnet"], sui_network),
                sui_rpc_url=os.getenv("SUI_RPC_URL") or None,
                sui_oracle_object_id=os.getenv("SUI_ORACLE_OBJECT_ID", ""),
                lifi_api_url=os.getenv("LIFI_API_URL", "https://li.quest/v1"),
                max_slippage_bps=int(os.getenv("MAX_SLIPPAGE_BPS", "100")),
                source_chain=os.getenv("SOURCE_CHAIN", "sepolia"),
                api_port=int(os.getenv("PORT", "3001")),
                log_level=cast(Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], log_level),
                price_staleness_ms=int(os.getenv("PRICE_STALENESS_MS", "300000")),
                position_scan_limit=int(os.getenv("POSITION_SCAN_LIMIT", "1000")),
                position_scan_batch_size=int(os.getenv("POSITION_SCAN_BATCH_SIZE", "50")),
                signing_domain_name=os.getenv("SIGNING_DOMAIN_NAME", "InvestInGas"),
                signing_domain_version=os.getenv("SIGNING_DOMAIN_VERSION", "1"),
                signing_chain_id=int(os.getenv("SIGNING_CHAIN_ID", "11155111")),
                http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "15")),
            )
        except Exception as e:
            raise ConfigurationException(f"Failed to load configuration: {str(e)}") from e

        validation_result = self.validate_configuration(config)
        if not validation_result.is_valid:
            error_messages = [
                issue.message
                for issue in validation_result.get_issues_by_level(ValidationLevel.ERROR)
            ]
            raise ConfigurationException(
                f"Configuration validation failed: {'; '.join(error_messages)}"
            )
        return config

    def validate_configuration(self, config: RelayerConfiguration) -> ValidationResult:
        """Validate a configuration object.

        Args:
            config: Configuration to validate

        Returns:
            ValidationResult: Result with validation status and any issues
        """
        result = ValidationResult(context="RelayerConfiguration")

        required = {
            "EVM_RPC_URL": config.evm_rpc_url,
            "HOOK_ADDRESS": config.hook_address,
            "RELAYER_PRIVATE_KEY": config.relayer_private_key.get_secret_value(),
        }
        for name, value in required.items():
            if not value:
                result.add_issue(
                    ValidationIssue(
                        level=ValidationLevel.ERROR,
                        category="CONFIG",
                        message=f"Missing required environment variable {name}",
                        resolution="Set it in the environment or the .env file",
                        details={"variable": name},
                    )
                )

        for name, value in {
            "HOOK_ADDRESS": config.hook_address,
            "BRIDGER_ADDRESS": config.bridger_address,
        }.items():
            if value and not is_address(value):
                result.add_issue(
                    ValidationIssue(
                        level=ValidationLevel.ERROR,
                        category="EVM",
                        message=f"{name} is not a valid address",
                        resolution="Use a 0x-prefixed 20-byte hex address",
                        details={"variable": name, "value": value},
                    )
                )

        private_key = config.relayer_private_key.get_secret_value()
        if private_key and not _PRIVATE_KEY_PATTERN.match(private_key):
            result.add_issue(
                ValidationIssue(
                    level=ValidationLevel.ERROR,
                    category="EVM",
                    message="RELAYER_PRIVATE_KEY is not a 32-byte hex key",
                    resolution="Use a 64-character hex private key",
                )
            )

        if not config.bridger_address:
            result.add_issue(
                ValidationIssue(
                    level=ValidationLevel.WARNING,
                    category="BRIDGE",
                    message="BRIDGER_ADDRESS is not set; cross-chain redemptions will fail",
                )
            )

        if not config.sui_oracle_object_id:
            result.add_issue(
                ValidationIssue(
                    level=ValidationLevel.WARNING,
                    category="ORACLE",
                    message="SUI_ORACLE_OBJECT_ID is not set; no prices can be read",
                )
            )

        return result
