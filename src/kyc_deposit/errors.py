"""
KYC deposit error types.
"""

from typing import Any, Optional


class KYCDepositError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class ChargeServiceError(KYCDepositError):
    """The charge backend was unreachable or rejected the request."""

    def __init__(self, message: str, code: str = "charge_service_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class GenerationError(KYCDepositError):
    """A charge could not be created. The session is back in idle and may retry."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("generation_failed", message, details)


class PollError(KYCDepositError):
    """A status check failed. Logged by the orchestrator, never raised to callers."""

    def __init__(self, message: str, transaction_id: Optional[str] = None):
        super().__init__("poll_failed", message, {"transaction_id": transaction_id} if transaction_id else None)


class InvalidTransitionError(KYCDepositError):
    def __init__(self, current: str, requested: str):
        super().__init__("invalid_transition", f"Invalid transition: {current} -> {requested}")
        self.current = current
        self.requested = requested


class ConfigError(KYCDepositError):
    def __init__(self, message: str):
        super().__init__("config_error", message)
