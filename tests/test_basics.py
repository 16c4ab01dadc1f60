"""Basic unit tests for the kyc-deposit package."""

from kyc_deposit import (
    DepositOrchestrator,
    DepositConfig,
    KYCDepositError,
    ChargeServiceError,
    GenerationError,
    PollError,
    InvalidTransitionError,
    ConfigError,
    PaymentStatus,
    Step,
    Outcome,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert DepositOrchestrator is not None
    assert DepositConfig is not None


def test_error_hierarchy():
    for cls in (ChargeServiceError, GenerationError, PollError, InvalidTransitionError, ConfigError):
        assert issubclass(cls, KYCDepositError)


def test_error_attributes():
    err = KYCDepositError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    service_err = ChargeServiceError("backend down", details={"status_code": 503})
    assert service_err.code == "charge_service_error"
    assert service_err.details == {"status_code": 503}

    assert GenerationError("nope").code == "generation_failed"
    assert PollError("timeout", transaction_id="tx-1").details == {"transaction_id": "tx-1"}

    transition = InvalidTransitionError("processing", "generating")
    assert transition.code == "invalid_transition"
    assert str(transition) == "Invalid transition: processing -> generating"


def test_enum_constants():
    assert Step.AWAITING_PAYMENT == "awaiting_payment"
    assert PaymentStatus.PAID == "paid"
    assert Outcome.DECLINED == "declined"
