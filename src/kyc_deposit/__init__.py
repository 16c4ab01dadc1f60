"""
kyc-deposit — verification-deposit flow for Python.

Generates a PIX charge, polls its status, and resolves the deposit
verification outcome by attempt number.
"""

from kyc_deposit.orchestrator import DepositOrchestrator
from kyc_deposit.config import DepositConfig
from kyc_deposit.charges import ChargeService, HttpChargeService, SandboxChargeService
from kyc_deposit.tracking import PixelTracker, RecordingTracker, TrackingSink
from kyc_deposit.policy import OutcomePolicy, always_succeed, decline_first_attempt, decline_until
from kyc_deposit.models.charge import Charge, PaymentStatus, StatusResult, format_brl
from kyc_deposit.models.session import Outcome, SessionState, Step
from kyc_deposit.models.kyc import KYCStatus
from kyc_deposit.errors import (
    KYCDepositError,
    ChargeServiceError,
    GenerationError,
    PollError,
    InvalidTransitionError,
    ConfigError,
)

__version__ = "0.1.0"
__all__ = [
    "DepositOrchestrator",
    "DepositConfig",
    "ChargeService",
    "HttpChargeService",
    "SandboxChargeService",
    "PixelTracker",
    "RecordingTracker",
    "TrackingSink",
    "OutcomePolicy",
    "always_succeed",
    "decline_first_attempt",
    "decline_until",
    "Charge",
    "PaymentStatus",
    "StatusResult",
    "format_brl",
    "Outcome",
    "SessionState",
    "Step",
    "KYCStatus",
    "KYCDepositError",
    "ChargeServiceError",
    "GenerationError",
    "PollError",
    "InvalidTransitionError",
    "ConfigError",
]
