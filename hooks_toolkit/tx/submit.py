"""
Submission with a fixed-count retry policy.

Each attempt is a single `submit` call: `LedgerClient.submit_and_wait` sends
it with transport retries disabled, so the attempt count and the fixed delay
here are the whole retry budget. Polling for validation still uses the RPC
client's own transport retries.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Mapping, Optional

from hooks_toolkit.errors import SubmissionRetryError
from hooks_toolkit.logging import get_logger
from hooks_toolkit.tx.client import NetworkClient, SubmitOptions
from hooks_toolkit.utils.retry import RetryError, RetryPolicy, retry_call

log = get_logger(__name__)

DEFAULT_SUBMIT_POLICY = RetryPolicy(max_attempts=3, delay=1.0)


def submit_with_retries(
    client: NetworkClient,
    tx: Mapping[str, Any],
    options: SubmitOptions,
    *,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """
    Submit `tx` and wait for it, retrying any failure up to `policy.max_attempts`
    times with a fixed sleep in between. Raises SubmissionRetryError when every
    attempt failed; the last failure is chained as its cause.
    """
    policy = policy or DEFAULT_SUBMIT_POLICY

    def _on_retry(attempt: int, exc: BaseException, delay: float) -> None:
        log.warning(
            "submit_failed",
            attempt=attempt,
            max_attempts=policy.max_attempts,
            retry_in_s=delay,
            error=str(exc),
        )

    try:
        return retry_call(
            client.submit_and_wait,
            tx,
            options,
            policy=policy,
            on_retry=_on_retry,
            sleep=sleep,
        )
    except RetryError as e:
        log.error("submit_exhausted", attempts=e.attempts, error=str(e.last_exception))
        raise SubmissionRetryError(e.attempts, e.last_exception) from e.last_exception


__all__ = ["DEFAULT_SUBMIT_POLICY", "submit_with_retries"]
