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

"""Exception hierarchy for orchestration and collaborator failures.

Every error carries the name of the operation that failed. Callers chain the
underlying exception with ``raise ... from err`` so the cause stays available
on ``__cause__``.
"""

from __future__ import annotations


class OrchestratorError(Exception):
    """Base class for all velero_manager errors."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.message = message


# ============================================================================
# Collaborator errors
# ============================================================================

class CollaboratorError(OrchestratorError):
    """A cluster, package, backup or object-storage call failed."""


class NotFoundError(CollaboratorError):
    """The requested resource does not exist."""


class AlreadyExistsError(CollaboratorError):
    """The resource being created already exists."""


# ============================================================================
# Orchestration errors
# ============================================================================

class StrategyDeterminationError(OrchestratorError):
    """The health snapshot could not be computed."""


class FatalInstallStepError(OrchestratorError):
    """A step the installation cannot continue without failed."""


class WarningStepError(OrchestratorError):
    """A non-fatal installation step failed."""


class CleanupStepError(OrchestratorError):
    """One or more cleanup steps failed.

    Attributes:
        failures: ``(step, error)`` pairs in execution order.
    """

    def __init__(self, operation: str, message: str,
                 failures: list[tuple[str, Exception]] | None = None) -> None:
        super().__init__(operation, message)
        self.failures = failures or []


class RetryExhaustedError(OrchestratorError):
    """An operation kept failing until its attempt budget ran out."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(operation, f"failed after {attempts} attempts: {last_error}")
        self.attempts = attempts


class ReadinessTimeoutError(OrchestratorError):
    """A readiness wait reached its ceiling."""

    def __init__(self, operation: str, timeout: float) -> None:
        super().__init__(operation, f"not ready after {timeout:g}s")
        self.timeout = timeout


class CancellationError(OrchestratorError):
    """The caller's cancel signal was set."""

    def __init__(self, operation: str) -> None:
        super().__init__(operation, "cancelled")
