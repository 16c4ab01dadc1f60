"""
Verification-deposit orchestrator — drives one deposit modal session.

Lifecycle:
  idle -> generating -> awaiting_payment -> processing -> declined | success

- awaiting_payment polls the charge service immediately, then on a fixed
  period, until the charge is reported paid
- the poll timer is cancelled before processing is entered
- the outcome comes from the outcome policy (attempt number), never from the
  charge service
- closing from any step cancels every timer and resets to idle
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any, Callable, Optional

from kyc_deposit.charges import ChargeService
from kyc_deposit.config import DepositConfig
from kyc_deposit.errors import GenerationError, InvalidTransitionError, PollError
from kyc_deposit.models.charge import Charge
from kyc_deposit.models.session import Outcome, SessionState, Step
from kyc_deposit.policy import DEFAULT_POLICY, OutcomePolicy
from kyc_deposit.scheduler import ScheduledHandle, TaskScope
from kyc_deposit.tracking import TrackingSink

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]


class DepositOrchestrator:
    def __init__(
        self,
        service: ChargeService,
        tracker: Optional[TrackingSink] = None,
        config: Optional[DepositConfig] = None,
        policy: OutcomePolicy = DEFAULT_POLICY,
        *,
        on_complete: Optional[Callback] = None,
        on_failed: Optional[Callback] = None,
        on_close: Optional[Callback] = None,
        on_step: Optional[Callable[[Step], Any]] = None,
        on_countdown: Optional[Callable[[int], Any]] = None,
    ):
        self._service = service
        self._tracker = tracker
        self._config = config or DepositConfig()
        self._policy = policy
        self._on_complete = on_complete
        self._on_failed = on_failed
        self._on_close = on_close
        self._on_step = on_step
        self._on_countdown = on_countdown

        self._state = SessionState()
        self._open = False
        # Bumped on every open/close; timers and awaits from an older
        # generation are ignored.
        self._generation = 0
        self._outcome: Optional[Outcome] = None
        self._scope = TaskScope("deposit")
        self._poll_handle: Optional[ScheduledHandle] = None
        self._countdown_handle: Optional[ScheduledHandle] = None
        self._close_handle: Optional[ScheduledHandle] = None
        self._closed: Optional[asyncio.Event] = None

    @property
    def state(self) -> SessionState:
        return self._state.model_copy()

    @property
    def step(self) -> Step:
        return self._state.step

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def outcome(self) -> Optional[Outcome]:
        """Outcome resolved in the current (or most recently closed) session."""
        return self._outcome

    @property
    def config(self) -> DepositConfig:
        return self._config

    @property
    def pending_timers(self) -> int:
        return len(self._scope)

    # -- Caller operations --------------------------------------------------

    def open(self, attempt_number: int) -> None:
        """Open the modal for the caller's ``attempt_number`` (1-indexed)."""
        if attempt_number < 1:
            raise ValueError(f"attempt_number must be >= 1, got {attempt_number}")
        if self._open:
            self._teardown()
        self._generation += 1
        self._open = True
        self._outcome = None
        self._closed = asyncio.Event()
        self._state = SessionState(attempt_number=attempt_number)
        logger.debug(f"Deposit session opened (attempt {attempt_number})")
        self._emit(self._on_step, "on_step", Step.IDLE)

    async def generate(self) -> Charge:
        """Create the deposit charge and start polling for payment.

        Raises GenerationError when the charge service fails; the session is
        back in idle and ``generate()`` may be called again.
        """
        if not self._open:
            raise InvalidTransitionError("closed", Step.GENERATING.value)
        if self._state.step != Step.IDLE:
            raise InvalidTransitionError(self._state.step.value, Step.GENERATING.value)

        generation = self._generation
        self._cancel(self._close_handle)
        self._close_handle = None
        self._state.last_error = None
        self._set_step(Step.GENERATING)

        try:
            charge = await self._service.create_pix(self._config.amount)
        except Exception as e:
            logger.error(f"Failed to generate PIX charge: {e}")
            if self._is_current(generation):
                self._state.last_error = str(e)
                self._set_step(Step.IDLE)
            raise GenerationError(f"Failed to generate PIX charge: {e}", details={"amount": str(self._config.amount)}) from e
        except asyncio.CancelledError:
            logger.debug("PIX charge generation cancelled")
            if self._is_current(generation):
                self._set_step(Step.IDLE)
            raise

        if not self._is_current(generation):
            logger.debug(f"Charge {charge.transaction_id} discarded, session closed while generating")
            return charge

        self._state.charge = charge
        self._set_step(Step.AWAITING_PAYMENT)
        if not self._is_current(generation):
            return charge  # Caller closed from on_step
        self._poll_handle = self._scope.call_every(self._config.poll_interval, self._poll, generation)
        return charge

    def close(self) -> None:
        """Close the modal from any step. Idempotent."""
        if not self._open:
            return
        self._teardown()
        self._open = False
        self._generation += 1
        if self._closed is not None:
            self._closed.set()
        logger.debug("Deposit session closed")
        self._emit(self._on_close, "on_close")

    async def wait_closed(self) -> None:
        if self._open and self._closed is not None:
            await self._closed.wait()

    async def run(self, attempt_number: int) -> Optional[Outcome]:
        """Open, generate, and wait for the modal to close.

        Returns the resolved outcome, or None when the session was closed
        before a payment was confirmed.
        """
        self.open(attempt_number)
        try:
            await self.generate()
        except GenerationError:
            self.close()
            raise
        await self.wait_closed()
        return self._outcome

    # -- Polling --------------------------------------------------------------

    def _awaiting(self, generation: int) -> bool:
        return (
            self._is_current(generation)
            and self._state.step == Step.AWAITING_PAYMENT
            and not self._state.is_resolving
        )

    async def _poll(self, generation: int) -> None:
        if not self._awaiting(generation):
            return
        charge = self._state.charge
        if charge is None:
            return

        try:
            status = await self._service.check_status(charge.transaction_id)
        except Exception as e:
            err = PollError(str(e), transaction_id=charge.transaction_id)
            logger.warning(f"Payment check failed for {charge.transaction_id}: {err}")
            return

        # Closed, reopened, or an earlier tick already detected the payment.
        if not self._awaiting(generation):
            return
        if status.is_paid:
            self._payment_detected(generation, status.value)

    def _payment_detected(self, generation: int, value: Decimal) -> None:
        self._state.is_resolving = True
        self._cancel(self._poll_handle)
        self._poll_handle = None

        self._track_conversion(value)
        self._set_step(Step.PROCESSING)
        if not self._is_current(generation):
            return
        self._scope.call_later(self._config.settle_delay, self._resolve, generation)

    def _track_conversion(self, value: Decimal) -> None:
        if self._state.has_tracked_conversion:
            return
        self._state.has_tracked_conversion = True
        if self._tracker is None:
            return
        try:
            self._tracker.track_purchase(value)
        except Exception as e:
            logger.debug(f"Conversion tracking failed: {e}")

    # -- Outcome --------------------------------------------------------------

    def _resolve(self, generation: int) -> None:
        if not self._is_current(generation) or self._state.step != Step.PROCESSING:
            return
        outcome = self._policy(self._state.attempt_number)
        self._outcome = outcome
        logger.info(f"Deposit attempt {self._state.attempt_number} resolved: {outcome.value}")

        if outcome == Outcome.DECLINED:
            self._set_step(Step.DECLINED)
            if not self._is_current(generation):
                return
            self._start_countdown(generation)
            if not self._is_current(generation):
                return
            self._scope.call_later(self._config.decline_display, self._finish_declined, generation)
        else:
            self._set_step(Step.SUCCESS)
            if not self._is_current(generation):
                return
            self._emit(self._on_complete, "on_complete")
            if not self._is_current(generation):
                return  # Caller closed from on_complete
            self._close_handle = self._scope.call_later(self._config.close_delay, self._auto_close, generation)

    def _start_countdown(self, generation: int) -> None:
        ticks = self._config.countdown_ticks()
        self._state.countdown = ticks
        self._emit(self._on_countdown, "on_countdown", ticks)
        if ticks > 0 and self._is_current(generation):
            self._countdown_handle = self._scope.call_every(
                self._config.countdown_interval, self._countdown_tick, generation, immediate=False,
            )

    def _countdown_tick(self, generation: int) -> None:
        if not self._is_current(generation) or self._state.countdown is None:
            return
        self._state.countdown = max(self._state.countdown - 1, 0)
        self._emit(self._on_countdown, "on_countdown", self._state.countdown)
        if self._state.countdown == 0:
            self._cancel(self._countdown_handle)
            self._countdown_handle = None

    def _finish_declined(self, generation: int) -> None:
        if not self._is_current(generation) or self._state.step != Step.DECLINED:
            return
        self._cancel(self._countdown_handle)
        self._countdown_handle = None
        self._emit(self._on_failed, "on_failed")
        if not self._is_current(generation):
            return

        self._state = SessionState(attempt_number=self._state.attempt_number)
        self._emit(self._on_step, "on_step", Step.IDLE)
        if not self._is_current(generation):
            return
        self._close_handle = self._scope.call_later(self._config.close_delay, self._auto_close, generation)

    def _auto_close(self, generation: int) -> None:
        if self._is_current(generation):
            self.close()

    # -- Internals ------------------------------------------------------------

    def _is_current(self, generation: int) -> bool:
        return self._open and generation == self._generation

    def _set_step(self, step: Step) -> None:
        if step == self._state.step:
            return
        logger.debug(f"Deposit step {self._state.step.value} -> {step.value}")
        self._state.step = step
        self._emit(self._on_step, "on_step", step)

    def _teardown(self) -> None:
        self._scope.cancel_all()
        self._poll_handle = None
        self._countdown_handle = None
        self._close_handle = None
        previous = self._state.step
        self._state = SessionState(attempt_number=self._state.attempt_number)
        if previous != Step.IDLE:
            self._emit(self._on_step, "on_step", Step.IDLE)

    @staticmethod
    def _cancel(handle: Optional[ScheduledHandle]) -> None:
        if handle is not None:
            handle.cancel()

    @staticmethod
    def _emit(callback: Optional[Callable[..., Any]], name: str, *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception(f"{name} callback failed")
