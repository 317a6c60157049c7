"""
Requeue utilities with configurable exponential backoff.

The convergence engine never retries on its own; these helpers play the
part of the control loop that re-invokes a pass after a retryable failure
or when a pass asks to be requeued.
"""

from __future__ import annotations

import time
from functools import wraps
from typing import Callable, Any, Iterator, TYPE_CHECKING

from .engine import PassOutcome
from .exceptions import RETRYABLE_ERRORS, ConvergenceError
from .logger import BucketforgeLogger, bf_logger
from .status import StorageRequest

if TYPE_CHECKING:
    from .driver import StorageDriverBlueprint


def backoff_delays(
    base_delay: float, max_delay: float, backoff_factor: float
) -> Iterator[float]:
    """Yield an endless series of capped, exponentially growing delays."""
    delay = base_delay
    while True:
        yield min(delay, max_delay)
        delay *= backoff_factor


def retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    retryable_exceptions: tuple[type[BaseException], ...] = RETRYABLE_ERRORS,
    log: BucketforgeLogger | None = None,
) -> Callable:
    """Decorator: re-invoke a call after a retryable failure, backing off between tries.

    Args:
        max_attempts: Total attempts, the first one included.
        base_delay: Seconds to wait before the second attempt.
        max_delay: Upper bound on any single wait.
        backoff_factor: Growth of the wait after each failed attempt.
        retryable_exceptions: Failures worth another attempt. Defaults to
            ``RETRYABLE_ERRORS``, so configuration errors surface at once.
        log: Logger the attempts are reported on.

    Returns:
        The decorator.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(fn: Callable) -> Callable:
        operation = getattr(fn, "__qualname__", repr(fn))

        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            out = log or bf_logger
            delays = backoff_delays(base_delay, max_delay, backoff_factor)
            attempt = 1
            while True:
                try:
                    return fn(*args, **kwargs)
                except retryable_exceptions as exc:
                    if attempt >= max_attempts:
                        out.error(
                            f"Giving up after {attempt} attempts: {exc}", operation=operation
                        )
                        raise
                    delay = next(delays)
                    out.warning(
                        f"Attempt {attempt}/{max_attempts} failed ({exc}), "
                        f"requeueing in {delay:.1f}s",
                        operation=operation,
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


def run_until_converged(
    driver: StorageDriverBlueprint,
    request: StorageRequest,
    log: BucketforgeLogger | None = None,
    max_passes: int = 5,
    max_attempts: int = 3,
    base_delay: float = 1.0,
) -> PassOutcome:
    """Run convergence passes until the bucket is converged.

    Each pass is retried on retryable errors; a pass that ends asking for a
    requeue is followed immediately by the next one.

    Raises:
        ConvergenceError: If the bucket is still not converged after
            ``max_passes`` passes.
    """
    if max_passes < 1:
        raise ValueError("max_passes must be at least 1")
    log = log or bf_logger
    run_pass = retry(max_attempts=max_attempts, base_delay=base_delay, log=log)(
        driver.create_storage
    )
    outcome = None
    for _ in range(max_passes):
        outcome = run_pass(log, request)
        if not outcome.requeue:
            return outcome
    raise ConvergenceError(
        f"Bucket not converged after {max_passes} passes (last outcome: {outcome.value})"
    )
