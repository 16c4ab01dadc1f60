"""
Deposit flow configuration — amount and timing constants.

Historical variants of the flow used different decline-display durations
(3 s and 20 s); the default below follows the shorter one.
"""

from decimal import Decimal
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from kyc_deposit.errors import ConfigError

DEFAULT_DEPOSIT_AMOUNT = Decimal("4.90")
DEFAULT_POLL_INTERVAL_S = 3.0
DEFAULT_SETTLE_DELAY_S = 2.5
DEFAULT_DECLINE_DISPLAY_S = 3.0
DEFAULT_CLOSE_DELAY_S = 3.0


class DepositConfig(BaseModel):
    """Timing is in seconds."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    amount: Decimal = Field(default=DEFAULT_DEPOSIT_AMOUNT, gt=0)
    currency: str = "BRL"
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL_S, gt=0)
    settle_delay: float = Field(default=DEFAULT_SETTLE_DELAY_S, ge=0)
    decline_display: float = Field(default=DEFAULT_DECLINE_DISPLAY_S, ge=0)
    close_delay: float = Field(default=DEFAULT_CLOSE_DELAY_S, ge=0)
    countdown_interval: float = Field(default=1.0, gt=0)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DepositConfig":
        """Build from loosely-typed input (config file, CLI), raising ConfigError."""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigError(f"Invalid deposit config: {e}")

    def countdown_ticks(self) -> int:
        """Number of countdown ticks shown while the declined screen is up."""
        return int(round(self.decline_display / self.countdown_interval))
