"""Bounded polling with a fixed pause between attempts."""

from __future__ import annotations

import time
from collections.abc import Callable

from loguru import logger
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from .errors import PollExhaustedError


def _log_attempt(retry_state: RetryCallState) -> None:
    logger.debug("attempt {} not ready yet", retry_state.attempt_number)


def poll(
    check: Callable[[], bool],
    *,
    attempts: int,
    interval: float,
    what: str = "condition",
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Call ``check`` until it returns True.

    Args:
        check: Readiness check; True means ready
        attempts: Maximum number of calls to ``check``
        interval: Seconds to sleep between calls
        what: Description used in the exhaustion error
        sleep: Sleep function (injectable for tests)

    Returns:
        Number of attempts it took

    Raises:
        PollExhaustedError: If ``check`` never returned True
    """
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda ready: not ready),
        after=_log_attempt,
        sleep=sleep,
    )
    try:
        retrying(check)
    except RetryError as e:
        raise PollExhaustedError(
            f"exceeded retries waiting for {what}",
            details=f"Gave up after {attempts} attempts, {interval:g}s apart",
        ) from e
    return retrying.statistics["attempt_number"]
