# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Bounded fixed-delay retries that honour a cancel event."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from velero_manager import logger
from velero_manager.errors import CancellationError, RetryExhaustedError

T = TypeVar("T")


def raise_if_cancelled(cancel: threading.Event | None, operation: str) -> None:
    """Raise CancellationError if *cancel* is set.

    Args:
        cancel: Caller's cancel event, or None when the call cannot be cancelled.
        operation: Operation name reported in the error.

    Raises:
        CancellationError: If the event is set.
    """
    if cancel is not None and cancel.is_set():
        raise CancellationError(operation)


def cancellable_sleep(cancel: threading.Event | None, operation: str) -> Callable[[float], None]:
    """Build a sleep function that wakes up early when *cancel* is set.

    Args:
        cancel: Caller's cancel event, or None for a plain ``time.sleep``.
        operation: Operation name reported if the sleep is interrupted.

    Returns:
        Callable taking a duration in seconds.
    """
    def _sleep(seconds: float) -> None:
        if cancel is None:
            time.sleep(seconds)
        elif cancel.wait(seconds):
            raise CancellationError(operation)

    return _sleep


def run_with_retry(
    operation: str,
    fn: Callable[[], T],
    *,
    attempts: int,
    delay: float,
    cancel: threading.Event | None = None,
) -> T:
    """Call *fn* until it succeeds or *attempts* calls have failed.

    Args:
        operation: Name used in log lines and errors.
        fn: Zero-argument callable to invoke.
        attempts: Maximum number of invocations.
        delay: Seconds to wait between invocations.
        cancel: Caller's cancel event; checked before every attempt and during waits.

    Returns:
        The first successful return value of *fn*.

    Raises:
        RetryExhaustedError: If every attempt failed; the last failure is the cause.
        CancellationError: If *cancel* is set. Never retried.
    """
    def _attempt() -> T:
        raise_if_cancelled(cancel, operation)
        return fn()

    def _log_retry(retry_state) -> None:
        logger.info("%s failed (attempt %d/%d): %s, retrying in %gs",
                    operation, retry_state.attempt_number, attempts,
                    retry_state.outcome.exception(), delay)

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        retry=retry_if_exception_type(Exception) & retry_if_not_exception_type(CancellationError),
        sleep=cancellable_sleep(cancel, operation),
        before_sleep=_log_retry,
    )
    try:
        return retrying(_attempt)
    except RetryError as err:
        last_error = err.last_attempt.exception()
        raise RetryExhaustedError(operation, err.last_attempt.attempt_number, last_error) from last_error
