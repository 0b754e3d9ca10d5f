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

"""Public entry points that compose inspection, install and cleanup."""

from __future__ import annotations

import threading
import time

from velero_manager import logger
from velero_manager.cleanup import STEP_RELEASE, CleanupExecutor
from velero_manager.config import OrchestratorConfig
from velero_manager.errors import (
    CancellationError,
    CleanupStepError,
    CollaboratorError,
    StrategyDeterminationError,
)
from velero_manager.inspector import StatusInspector
from velero_manager.installer import InstallExecutor
from velero_manager.interfaces import BackupAPI, ClusterAPI, PackageAPI, StorageFactory
from velero_manager.models import (
    CleanupReport,
    HealthSnapshot,
    InstallRequest,
    InstallResult,
    Strategy,
    UninstallRequest,
)
from velero_manager.retry import raise_if_cancelled
from velero_manager.strategy import resolve_strategy


class VeleroOrchestrator:
    """Install, uninstall and clean up Velero on a cluster.

    The orchestrator holds only its collaborators and configuration. Every
    call computes a fresh health snapshot and keeps no state afterwards.

    Args:
        cluster: Core Kubernetes API.
        packages: Helm release API.
        backups: Velero custom-resource API.
        storage_factory: Builds an object-store client for a StorageConfig.
        config: Orchestration settings; read from the environment when omitted.
    """

    def __init__(
        self,
        cluster: ClusterAPI,
        packages: PackageAPI,
        backups: BackupAPI,
        storage_factory: StorageFactory,
        config: OrchestratorConfig | None = None,
    ) -> None:
        self.config = config or OrchestratorConfig()
        self.inspector = StatusInspector(cluster, packages, self.config)
        self.cleanup = CleanupExecutor(cluster, packages, self.config)
        self.installer = InstallExecutor(
            cluster, packages, backups, storage_factory, self.inspector, self.cleanup, self.config)

    def determine_strategy(
        self, request: InstallRequest, cancel: threading.Event | None = None,
    ) -> tuple[Strategy, HealthSnapshot]:
        """Inspect the cluster and pick the install strategy.

        Args:
            request: Install parameters.
            cancel: Caller's cancel event.

        Returns:
            The strategy and the snapshot it was derived from.

        Raises:
            StrategyDeterminationError: If the health snapshot could not be computed.
            CancellationError: If *cancel* is set.
        """
        try:
            snapshot = self.inspector.inspect(request.namespace, cancel)
        except CancellationError:
            raise
        except Exception as err:
            raise StrategyDeterminationError(
                "determine strategy", f"could not inspect Velero in '{request.namespace}': {err}") from err
        strategy = resolve_strategy(snapshot, request.force)
        logger.info("Strategy for %s: %s (pods_running=%s, package_released=%s)",
                    request.namespace, strategy.value, snapshot.pods_running, snapshot.package_released)
        return strategy, snapshot

    def install_velero(self, request: InstallRequest, cancel: threading.Event | None = None) -> InstallResult:
        """Install Velero according to the cluster's current state.

        Args:
            request: Install parameters.
            cancel: Caller's cancel event.

        Returns:
            Sealed result with status ``success``. Non-fatal step failures and
            a step interrupted by *cancel* are listed in ``details``.

        Raises:
            StrategyDeterminationError: If the cluster could not be inspected. Nothing is mutated.
            FatalInstallStepError: If the chart could not be installed.
            CancellationError: If *cancel* is set before any mutation or during the chart install.
        """
        started = time.monotonic()
        result = InstallResult(namespace=request.namespace, force=request.force)
        strategy, snapshot = self.determine_strategy(request, cancel)
        result.details["health"] = snapshot.to_dict()
        try:
            self.installer.execute(request, strategy, result, cancel)
        finally:
            result.installation_time = round(time.monotonic() - started, 3)
        logger.info("Velero install in %s finished in %.1fs: %s",
                    request.namespace, result.installation_time, result.message)
        return result.seal()

    def uninstall_velero(self, request: UninstallRequest, cancel: threading.Event | None = None) -> None:
        """Remove Velero.

        Without ``force`` only the Helm release is uninstalled. With ``force``
        the full cleanup runs and any step failure is raised.

        Raises:
            CleanupStepError: If the release (or, with force, any cleanup step) could not be removed.
            CancellationError: If *cancel* is set.
        """
        if request.force:
            self.cleanup.run(request.namespace, force=False, cancel=cancel)
            return
        raise_if_cancelled(cancel, "uninstall")
        try:
            self.cleanup.uninstall_release(request.namespace)
        except CollaboratorError as err:
            raise CleanupStepError(STEP_RELEASE, str(err), [(STEP_RELEASE, err)]) from err

    def cleanup_velero(
        self, namespace: str, force: bool, cancel: threading.Event | None = None,
    ) -> CleanupReport:
        """Tear down every Velero artifact in *namespace*.

        Args:
            namespace: Namespace Velero was installed into.
            force: Keep going past failures and report them instead of raising.
            cancel: Caller's cancel event.

        Returns:
            Per-step outcomes.

        Raises:
            ValueError: If *namespace* is empty.
            CleanupStepError: In non-force mode, if any step failed.
            CancellationError: If *cancel* is set.
        """
        if not namespace:
            raise ValueError("namespace must not be empty")
        return self.cleanup.run(namespace, force=force, cancel=cancel)
