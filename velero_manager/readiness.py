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

"""Fixed-interval polling until a condition holds."""

from __future__ import annotations

import threading
from collections.abc import Callable

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    retry_if_result,
    stop_after_delay,
)

from velero_manager import logger
from velero_manager.errors import CancellationError, ReadinessTimeoutError
from velero_manager.retry import cancellable_sleep, raise_if_cancelled


def wait_until(
    predicate: Callable[[], bool],
    *,
    interval: float,
    timeout: float,
    cancel: threading.Event | None = None,
    description: str = "readiness",
) -> None:
    """Poll *predicate* every *interval* seconds until it returns True.

    A predicate that raises counts as "not ready yet".

    Args:
        predicate: Zero-argument readiness check.
        interval: Seconds between checks.
        timeout: Ceiling in seconds for the whole wait.
        cancel: Caller's cancel event; aborts the wait immediately when set.
        description: Name used in log lines and errors.

    Raises:
        ReadinessTimeoutError: If the predicate never held within *timeout*.
        CancellationError: If *cancel* was set before the predicate held.
    """
    def _check() -> bool:
        raise_if_cancelled(cancel, description)
        return predicate()

    def _log_pending(retry_state) -> None:
        outcome = retry_state.outcome
        if outcome.failed:
            logger.debug("%s check failed: %s", description, outcome.exception())
        else:
            logger.debug("%s not met yet (%.0fs elapsed)", description, retry_state.seconds_since_start)

    def _next_wait(retry_state) -> float:
        # never sleep past the ceiling; the last check lands on it
        return max(0.0, min(interval, timeout - retry_state.seconds_since_start))

    retrying = Retrying(
        stop=stop_after_delay(timeout),
        wait=_next_wait,
        retry=(retry_if_result(lambda ready: not ready)
               | (retry_if_exception_type(Exception) & retry_if_not_exception_type(CancellationError))),
        sleep=cancellable_sleep(cancel, description),
        before_sleep=_log_pending,
    )
    try:
        retrying(_check)
    except RetryError as err:
        raise ReadinessTimeoutError(description, timeout) from err.last_attempt.exception()
