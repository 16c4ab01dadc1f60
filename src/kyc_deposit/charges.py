"""
Charge services — create PIX charges and report their payment status.

Two implementations share one protocol:
- HttpChargeService: REST client for the charge backend
- SandboxChargeService: in-memory fictional backend for demos and tests
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from decimal import Decimal
from typing import Iterable, Optional, Protocol

from pydantic import ValidationError

from kyc_deposit.errors import ChargeServiceError
from kyc_deposit.models.charge import Charge, PaymentStatus, StatusResult
from kyc_deposit.transport.http import HttpClient

logger = logging.getLogger(__name__)


class ChargeService(Protocol):
    async def create_pix(self, amount: Decimal) -> Charge: ...

    async def check_status(self, transaction_id: str) -> StatusResult: ...


class HttpChargeService:
    def __init__(self, http: HttpClient):
        self._http = http

    async def create_pix(self, amount: Decimal) -> Charge:
        """Create a PIX charge: POST /v1/pix"""
        data = await self._http.post("/v1/pix", {"amount": str(amount)})
        if not isinstance(data, dict):
            raise ChargeServiceError(f"Unexpected charge payload: {data!r}", code="bad_response")
        try:
            return Charge.model_validate({"amount": amount, **data})
        except ValidationError as e:
            raise ChargeServiceError(f"Malformed charge: {e}", code="bad_response")

    async def check_status(self, transaction_id: str) -> StatusResult:
        """Check payment status: GET /v1/pix/{transaction_id}/status"""
        data = await self._http.get(f"/v1/pix/{transaction_id}/status")
        if not isinstance(data, dict):
            raise ChargeServiceError(f"Unexpected status payload: {data!r}", code="bad_response")
        try:
            return StatusResult.model_validate(data)
        except ValidationError as e:
            raise ChargeServiceError(f"Malformed status: {e}", code="bad_response")

    async def close(self) -> None:
        await self._http.close()


class SandboxChargeService:
    """Fictional PIX backend.

    A charge turns ``paid`` on its ``paid_after_checks``-th status check, or
    as soon as ``mark_paid()`` is called. ``paid_after_checks=None`` keeps
    charges pending until marked.
    """

    def __init__(
        self,
        paid_after_checks: Optional[int] = 3,
        latency: float = 0.0,
        fail_creates: int = 0,
        fail_checks: Iterable[int] = (),
    ):
        self._paid_after = paid_after_checks
        self._latency = latency
        self._fail_creates = fail_creates
        self._fail_checks = set(fail_checks)
        self._charges: dict[str, Charge] = {}
        self._paid: set[str] = set()
        self.check_counts: dict[str, int] = {}
        self.created: list[Charge] = []

    @property
    def total_checks(self) -> int:
        return sum(self.check_counts.values())

    def mark_paid(self, transaction_id: str) -> None:
        if transaction_id not in self._charges:
            raise ChargeServiceError(f"Unknown transaction: {transaction_id}", code="not_found")
        self._paid.add(transaction_id)

    async def create_pix(self, amount: Decimal) -> Charge:
        if self._latency:
            await asyncio.sleep(self._latency)
        if self._fail_creates > 0:
            self._fail_creates -= 1
            raise ChargeServiceError("Sandbox charge backend unavailable", code="unavailable")
        amount = Decimal(amount)
        if amount <= 0:
            raise ChargeServiceError("Amount must be positive", code="invalid_amount")

        tx_id = str(uuid.uuid4())
        charge = Charge(
            transaction_id=tx_id,
            payment_code=f"PIX:{tx_id}|AMOUNT:{amount:.2f}",
            amount=amount,
        )
        self._charges[tx_id] = charge
        self.check_counts[tx_id] = 0
        self.created.append(charge)
        logger.debug("sandbox charge %s created for %s", tx_id, amount)
        return charge

    async def check_status(self, transaction_id: str) -> StatusResult:
        if self._latency:
            await asyncio.sleep(self._latency)
        charge = self._charges.get(transaction_id)
        if charge is None:
            raise ChargeServiceError(f"Unknown transaction: {transaction_id}", code="not_found")

        self.check_counts[transaction_id] += 1
        count = self.check_counts[transaction_id]
        if count in self._fail_checks:
            raise ChargeServiceError(f"Sandbox status check {count} failed", code="unavailable")
        if self._paid_after is not None and count >= self._paid_after:
            self._paid.add(transaction_id)

        if transaction_id in self._paid:
            return StatusResult(status=PaymentStatus.PAID, value=charge.amount)
        return StatusResult(status=PaymentStatus.PENDING, value=charge.amount)
