"""
Caller-side KYC record. Owns the attempt counter across deposit sessions.
"""

from typing import Optional
from pydantic import BaseModel


class KYCStatus(BaseModel):
    identity_verified: bool = False
    deposit_verified: bool = False
    deposit_attempts: int = 0
    cpf: Optional[str] = None
    full_name: Optional[str] = None
    birth_date: Optional[str] = None  # DD/MM/YYYY

    @property
    def progress(self) -> int:
        if self.identity_verified and self.deposit_verified:
            return 100
        if self.identity_verified:
            return 50
        return 0

    def next_attempt_number(self) -> int:
        """1-indexed attempt number for the next deposit session."""
        return self.deposit_attempts + 1

    def record_failure(self) -> None:
        self.deposit_attempts += 1

    def record_success(self) -> None:
        self.deposit_attempts += 1
        self.deposit_verified = True
