"""
Integration tests against a real charge backend.

Requires environment variables:
  KYC_BASE_URL      — charge backend URL
  KYC_API_TOKEN     — (optional) bearer token

Run: KYC_INTEGRATION=1 pytest tests/integration/ -v
"""

import os
from decimal import Decimal

import pytest

from kyc_deposit import DepositConfig, DepositOrchestrator, HttpChargeService, Step
from kyc_deposit.transport.http import HttpClient

SKIP = not os.environ.get("KYC_INTEGRATION")
BASE_URL = os.environ.get("KYC_BASE_URL", "http://localhost:8080")
TOKEN = os.environ.get("KYC_API_TOKEN")

pytestmark = pytest.mark.skipif(SKIP, reason="KYC_INTEGRATION not set")


def make_service() -> HttpChargeService:
    return HttpChargeService(HttpClient(base_url=BASE_URL, token=TOKEN))


class TestChargeLifecycle:
    @pytest.mark.asyncio
    async def test_create_and_check(self):
        service = make_service()
        charge = await service.create_pix(Decimal("4.90"))
        assert charge.transaction_id
        assert charge.payment_code

        status = await service.check_status(charge.transaction_id)
        assert status.status in ("pending", "paid")
        await service.close()


class TestOrchestratorAgainstBackend:
    @pytest.mark.asyncio
    async def test_reaches_awaiting_payment(self):
        service = make_service()
        orchestrator = DepositOrchestrator(service, config=DepositConfig(poll_interval=1.0))
        orchestrator.open(1)
        await orchestrator.generate()
        assert orchestrator.step == Step.AWAITING_PAYMENT
        orchestrator.close()
        await service.close()
