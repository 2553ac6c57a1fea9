"""
Retry helpers: a small policy object plus an "attempt until success or
exhaustion" combinator.

The policy decides how many attempts are made and how long to sleep between
them; the combinator knows nothing about what is being retried.

Example
-------
from hooks_toolkit.utils.retry import RetryPolicy, retry_call

def flaky():
    ...

result = retry_call(flaky, policy=RetryPolicy(max_attempts=3, delay=1.0))

Backoff-based delays plug in through `delay_fn`:

policy = RetryPolicy(max_attempts=5, delay_fn=exponential_delay(base=0.2, max_delay=3.0))

Notes
-----
- By default, retries on Exception; customize via `exceptions`.
- `on_retry` callback receives (attempt_index, exception, sleep_seconds).
- Sleeping happens only *between* attempts, never after the last one.
- `sleep` is injectable so tests can record delays instead of waiting.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import (Any, Callable, Optional, Sequence, Tuple, Type, TypeVar,
                    Union)

__all__ = [
    "RetryError",
    "RetryPolicy",
    "fixed_delay",
    "exponential_delay",
    "retry_call",
]

T = TypeVar("T")

DelayFn = Callable[[int], float]


class RetryError(RuntimeError):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, last_exception: BaseException, attempts: int) -> None:
        super().__init__(f"exhausted after {attempts} attempts: {last_exception!r}")
        self.last_exception = last_exception
        self.attempts = attempts


def fixed_delay(seconds: float) -> DelayFn:
    """Same delay after every failed attempt (no growth, no jitter)."""
    seconds = max(0.0, float(seconds))

    def _delay(_attempt: int) -> float:
        return seconds

    return _delay


def exponential_delay(*, base: float, factor: float = 2.0, max_delay: float = 30.0) -> DelayFn:
    """base * factor**(attempt-1), capped at max_delay (attempt is 1-based)."""

    def _delay(attempt: int) -> float:
        return min(float(max_delay), float(base) * (float(factor) ** max(attempt - 1, 0)))

    return _delay


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to try and how long to wait in between.

    `delay` is the fixed per-attempt sleep in seconds; `delay_fn`, when given,
    overrides it with a function of the 1-based attempt that just failed.
    """

    max_attempts: int = 3
    delay: float = 1.0
    delay_fn: Optional[DelayFn] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay < 0:
            raise ValueError("delay must be >= 0")

    def delay_after(self, attempt: int) -> float:
        if self.delay_fn is not None:
            return max(0.0, float(self.delay_fn(attempt)))
        return float(self.delay)


def retry_call(
    fn: Callable[..., T],
    *args: Any,
    policy: Optional[RetryPolicy] = None,
    exceptions: Union[Type[BaseException], Sequence[Type[BaseException]]] = Exception,
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """
    Call `fn(*args, **kwargs)` until it returns or `policy.max_attempts` calls
    have failed, then raise RetryError chained to the last failure.

    Exceptions outside `exceptions` propagate immediately.
    """
    policy = policy or RetryPolicy()
    if isinstance(exceptions, type):
        exc_types: Tuple[Type[BaseException], ...] = (exceptions,)
    else:
        exc_types = tuple(exceptions)

    attempt = 0
    while True:
        attempt += 1
        try:
            return fn(*args, **kwargs)
        except exc_types as exc:
            if attempt >= policy.max_attempts:
                raise RetryError(exc, attempts=attempt) from exc

            sleep_s = policy.delay_after(attempt)
            if on_retry is not None:
                on_retry(attempt, exc, sleep_s)
            sleep(sleep_s)
