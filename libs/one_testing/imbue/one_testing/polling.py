import math
import time
from collections.abc import Callable
from typing import TypeVar

from loguru import logger

from imbue.one_testing.config import DEFAULT_INTERVAL_SECONDS
from imbue.one_testing.config import DEFAULT_MAX_ATTEMPTS
from imbue.one_testing.config import PollSettings
from imbue.one_testing.errors import InvalidPollSettingsError
from imbue.one_testing.errors import ResourceWaitTimeoutError
from imbue.one_testing.logging import log_span

T = TypeVar("T")


def _check_budget(max_attempts: int, interval: float) -> None:
    if max_attempts < 0:
        raise InvalidPollSettingsError(f"max_attempts must be >= 0, got {max_attempts}")
    if not math.isfinite(interval) or interval < 0:
        raise InvalidPollSettingsError(f"interval must be a finite number >= 0, got {interval}")


def poll_for_value(
    producer: Callable[[], T | None],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL_SECONDS,
) -> tuple[T | None, int, float]:
    """Call a producer until it returns a non-None value or the attempt budget runs out.

    Returns (value, attempts, elapsed_seconds):
    - value: The first non-None value returned by the producer, or None if the budget ran out
    - attempts: Number of times the producer was called (never more than max_attempts)
    - elapsed_seconds: Total time spent polling

    Sleeps interval seconds between two attempts but not after the last one.
    Exceptions raised by the producer propagate unchanged.
    """
    _check_budget(max_attempts, interval)
    start_time = time.monotonic()
    attempts = 0
    while attempts < max_attempts:
        attempts += 1
        result = producer()
        logger.trace("Poll attempt {}/{}: {}", attempts, max_attempts, "ready" if result is not None else "not ready")
        if result is not None:
            return result, attempts, time.monotonic() - start_time
        if attempts < max_attempts:
            time.sleep(interval)
    return None, attempts, time.monotonic() - start_time


def wait_for_resource(
    predicate: Callable[[], bool],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL_SECONDS,
) -> bool:
    """Wait until a resource reaches the state checked by predicate.

    Returns True as soon as the predicate does, False once it has been
    evaluated max_attempts times without success. Running out of attempts is
    an expected outcome and is reported through the return value only.
    With max_attempts=0 the predicate is never called.
    """
    with log_span("Waiting for resource (max {} attempts, {}s apart)", max_attempts, interval):
        value, attempts, elapsed = poll_for_value(
            lambda: True if predicate() else None,
            max_attempts,
            interval,
        )
    if value is None:
        logger.debug("Resource not ready after {} attempts ({:.2f} sec)", attempts, elapsed)
        return False
    return True


def wait_for_resource_with_settings(predicate: Callable[[], bool], settings: PollSettings) -> bool:
    """wait_for_resource using a configured attempt budget and interval."""
    return wait_for_resource(predicate, settings.max_attempts, settings.interval_seconds)


def wait_for(
    predicate: Callable[[], bool],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL_SECONDS,
    error_message: str = "Resource did not reach the expected state",
) -> None:
    """Like wait_for_resource, but raises ResourceWaitTimeoutError when the budget runs out."""
    if not wait_for_resource(predicate, max_attempts, interval):
        raise ResourceWaitTimeoutError(f"{error_message} after {max_attempts} attempts")
