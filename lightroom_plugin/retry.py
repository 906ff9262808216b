"""
Bounded retries for unreliable operations such as network calls.

Each attempt is run under fault isolation and reduced to an AttemptOutcome, so
the retry loop only has to branch on the outcome. Exhausting the retry budget
is a normal result (None), never an exception.
"""

import functools
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .logging_setup import get_logger

logger = get_logger(__name__)

Validator = Callable[[Any], Any]
FailureHook = Callable[[int, int, "AttemptOutcome"], None]


@dataclass(frozen=True)
class RetryPolicy:
    """
    How often and how patiently to retry.

    max_retries counts retries beyond the first attempt: the default of 2
    gives 3 attempts in total.
    """
    max_retries: int = 2
    retry_delay: float = 1.0
    label: str = "API call"

    def __post_init__(self):
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ValueError("max_retries must be an integer")
        if self.max_retries < 0:
            raise ValueError("max_retries must be zero or greater")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be zero or greater")

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of a single attempt: a value, a raised error, or a rejected value."""
    value: Any = None
    error: Optional[BaseException] = None
    rejected: bool = False

    @classmethod
    def succeeded(cls, value: Any) -> "AttemptOutcome":
        return cls(value=value)

    @classmethod
    def faulted(cls, error: BaseException) -> "AttemptOutcome":
        return cls(error=error)

    @classmethod
    def rejected_value(cls, value: Any) -> "AttemptOutcome":
        return cls(value=value, rejected=True)

    @property
    def ok(self) -> bool:
        return self.error is None and not self.rejected

    def describe(self) -> str:
        if self.error is not None:
            return f"{type(self.error).__name__}: {self.error}"
        if self.rejected:
            return "empty or invalid result"
        return "ok"


def run_attempt(operation: Callable[[], Any], validate: Optional[Validator] = None) -> AttemptOutcome:
    """
    Run one attempt of an operation.

    Args:
        operation: Zero-argument callable
        validate: Optional predicate the returned value must satisfy

    Returns:
        AttemptOutcome describing the attempt
    """
    try:
        value = operation()
    except Exception as e:
        return AttemptOutcome.faulted(e)

    if not value:
        return AttemptOutcome.rejected_value(value)

    if validate is not None:
        try:
            accepted = validate(value)
        except Exception as e:
            logger.debug(f"Validator raised {type(e).__name__}: {e}")
            accepted = False
        if not accepted:
            return AttemptOutcome.rejected_value(value)

    return AttemptOutcome.succeeded(value)


def _wait(delay: float, cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None:
        cancel_event.wait(delay)
    elif delay > 0:
        time.sleep(delay)


def retry_call(operation: Callable[[], Any],
               validate: Optional[Validator] = None,
               policy: Optional[RetryPolicy] = None,
               on_failure: Optional[FailureHook] = None,
               cancel_event: Optional[threading.Event] = None) -> Any:
    """
    Call an operation until it returns an acceptable value or the budget runs out.

    Args:
        operation: Zero-argument callable; it may run more than once, so it
            should be safe to repeat
        validate: Optional predicate over the returned value
        policy: Retry policy (defaults to RetryPolicy())
        on_failure: Optional hook called as on_failure(attempt, max_retries, outcome)
            for every failed attempt, including the last one
        cancel_event: Optional event; once set, no further attempts are made
            and a pending delay ends early

    Returns:
        The first accepted value, or None when all attempts failed or the
        call was canceled
    """
    policy = policy or RetryPolicy()

    for attempt in range(1, policy.total_attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"{policy.label} canceled before attempt {attempt}")
            return None

        outcome = run_attempt(operation, validate)
        if outcome.ok:
            if attempt > 1:
                logger.debug(f"{policy.label} succeeded on attempt {attempt}/{policy.total_attempts}")
            return outcome.value

        if on_failure is not None:
            try:
                on_failure(attempt, policy.max_retries, outcome)
            except Exception as e:
                logger.debug(f"Retry failure hook raised {type(e).__name__}: {e}")

        if attempt <= policy.max_retries:
            logger.info(
                f"Retry {attempt}/{policy.max_retries}: {policy.label} failed "
                f"({outcome.describe()}), retrying in {policy.retry_delay:g} second(s)"
            )
            _wait(policy.retry_delay, cancel_event)
        else:
            logger.debug(f"{policy.label} attempt {attempt} failed: {outcome.describe()}")

    if cancel_event is not None and cancel_event.is_set():
        return None

    logger.warning(f"All retries failed for {policy.label}")
    return None


def with_retries(policy: Optional[RetryPolicy] = None, validate: Optional[Validator] = None):
    """
    Decorator form of retry_call.

    Example:
        @with_retries(RetryPolicy(max_retries=3, label="Get data"))
        def fetch():
            return api.get_data()
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return retry_call(lambda: func(*args, **kwargs), validate=validate, policy=policy)
        return wrapper
    return decorator
