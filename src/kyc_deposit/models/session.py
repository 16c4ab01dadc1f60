"""
Session models — deposit modal lifecycle state.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from kyc_deposit.models.charge import Charge


class Step(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    AWAITING_PAYMENT = "awaiting_payment"
    PROCESSING = "processing"
    DECLINED = "declined"
    SUCCESS = "success"


class Outcome(str, Enum):
    DECLINED = "declined"
    SUCCESS = "success"


class SessionState(BaseModel):
    step: Step = Step.IDLE
    attempt_number: int = Field(default=1, ge=1)
    has_tracked_conversion: bool = False
    is_resolving: bool = False
    charge: Optional[Charge] = None
    countdown: Optional[int] = None   # Seconds left on the declined screen
    last_error: Optional[str] = None
