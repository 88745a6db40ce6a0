"""Domain exceptions for the gas futures relayer.

Every workflow failure is a tagged DomainException carrying an error code and a
failure class, so the HTTP boundary can tell "your request was invalid" apart from
"something downstream broke".
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class FailureClass(str, Enum):
    """HTTP-status-equivalent class of a failure."""

    BAD_INPUT = "bad_input"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    SERVER_ERROR = "server_error"


class DomainException(Exception):
    """Base exception for all domain-related errors."""

    failure_class: FailureClass = FailureClass.SERVER_ERROR

    def __init__(self, message: str, error_code: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(DomainException):
    """Raised when a request is missing fields or carries malformed values."""

    failure_class = FailureClass.BAD_INPUT

    def __init__(self, message: str = "Missing required fields", field: str | None = None):
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else None)
        self.field = field


class UnsupportedChainError(DomainException):
    """Raised when the settlement contract does not support a target chain."""

    failure_class = FailureClass.BAD_INPUT

    def __init__(self, chain: str):
        super().__init__(f"Chain {chain} not supported", "UNSUPPORTED_CHAIN", {"chain": chain})
        self.chain = chain


class PriceUnavailableError(DomainException):
    """Raised when the oracle has no price for a chain."""

    failure_class = FailureClass.BAD_INPUT

    def __init__(self, chain: str):
        super().__init__(
            f"Failed to fetch gas price for chain {chain}", "PRICE_UNAVAILABLE", {"chain": chain}
        )
        self.chain = chain


class StalePriceError(DomainException):
    """Raised when the latest oracle price is older than the allowed age.

    Time-sensitive: the caller should retry shortly.
    """

    failure_class = FailureClass.BAD_INPUT

    def __init__(self, chain: str, stale_since_ms: int):
        super().__init__(
            "Gas price is stale",
            "STALE_PRICE",
            {"chain": chain, "stale_since_ms": stale_since_ms},
        )
        self.chain = chain
        self.stale_since_ms = stale_since_ms


class SignatureInvalidError(DomainException):
    """Raised when an intent signature does not recover to the claimed user."""

    failure_class = FailureClass.FORBIDDEN

    def __init__(self, message: str = "Invalid user signature"):
        super().__init__(message, "SIGNATURE_INVALID")


class PositionNotFoundError(DomainException):
    """Raised when a position token does not exist or cannot be read."""

    failure_class = FailureClass.NOT_FOUND

    def __init__(self, token_id: int):
        super().__init__(
            f"Position {token_id} not found", "POSITION_NOT_FOUND", {"token_id": token_id}
        )
        self.token_id = token_id


class NotOwnerError(DomainException):
    """Raised when the caller does not own the position."""

    failure_class = FailureClass.FORBIDDEN

    def __init__(self, token_id: int, user: str):
        super().__init__("Not position owner", "NOT_OWNER", {"token_id": token_id, "user": user})
        self.token_id = token_id
        self.user = user


class PositionExpiredError(DomainException):
    """Raised when redeeming an expired position; use claimExpired instead."""

    failure_class = FailureClass.BAD_INPUT

    def __init__(self, token_id: int, expiry: int):
        super().__init__(
            "Position expired, use claimExpired instead",
            "POSITION_EXPIRED",
            {"token_id": token_id, "expiry": expiry},
        )
        self.token_id = token_id
        self.expiry = expiry


class InsufficientBalanceError(DomainException):
    """Raised when a redeem asks for more than the position has left."""

    failure_class = FailureClass.BAD_INPUT

    def __init__(self, requested: int, remaining: int):
        super().__init__(
            "Insufficient remaining amount",
            "INSUFFICIENT_BALANCE",
            {"requested": str(requested), "remaining": str(remaining)},
        )
        self.requested = requested
        self.remaining = remaining


class BridgeQuoteError(DomainException):
    """Raised when the bridge aggregator is unavailable, has no route, or quotes badly."""

    def __init__(self, message: str):
        super().__init__(message, "BRIDGE_QUOTE_FAILED")


class SettlementCallError(DomainException):
    """Raised when the mutating settlement call fails or reverts.

    Never retried: the settlement contract is not assumed idempotent.
    """

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(
            message, "SETTLEMENT_CALL_FAILED", {"tx_hash": tx_hash} if tx_hash else None
        )
        self.tx_hash = tx_hash


class UpstreamServiceError(DomainException):
    """Raised when a collaborator fails unexpectedly during a workflow."""

    def __init__(self, message: str = "Upstream service failure"):
        super().__init__(message, "UPSTREAM_FAILURE")


class ConfigurationException(DomainException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


class CollaboratorError(Exception):
    """Transport-level failure talking to an external collaborator.

    Distinct from "not found": adapters return None for absent records and raise
    this when the read itself could not be completed.
    """

    def __init__(self, message: str, collaborator: str):
        super().__init__(message)
        self.message = message
        self.collaborator = collaborator


class OracleError(CollaboratorError):
    """The gas oracle could not be read."""

    def __init__(self, message: str):
        super().__init__(message, "oracle")


class SettlementReadError(CollaboratorError):
    """A read-only call against the settlement contract failed."""

    def __init__(self, message: str):
        super().__init__(message, "settlement")
