"""
Outcome policies map the caller's attempt number to the flow's outcome.

The outcome is business configuration, not something the charge backend
reports. Any ``Callable[[int], Outcome]`` can be passed to the orchestrator.
"""

from typing import Callable

from kyc_deposit.models.session import Outcome

OutcomePolicy = Callable[[int], Outcome]


def decline_first_attempt(attempt_number: int) -> Outcome:
    """First attempt declines after payment, every later attempt succeeds."""
    return Outcome.DECLINED if attempt_number == 1 else Outcome.SUCCESS


def always_succeed(attempt_number: int) -> Outcome:
    return Outcome.SUCCESS


def decline_until(attempt: int) -> OutcomePolicy:
    """Decline every attempt before ``attempt``; succeed from it onwards."""
    def policy(attempt_number: int) -> Outcome:
        return Outcome.DECLINED if attempt_number < attempt else Outcome.SUCCESS
    return policy


DEFAULT_POLICY: OutcomePolicy = decline_first_attempt
