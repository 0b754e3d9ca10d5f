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

"""Health snapshot of an existing Velero installation."""

from __future__ import annotations

import threading

from velero_manager.config import OrchestratorConfig
from velero_manager.constants import POD_PHASE_RUNNING
from velero_manager.interfaces import ClusterAPI, PackageAPI
from velero_manager.models import HealthSnapshot, PodInfo
from velero_manager.retry import raise_if_cancelled


class StatusInspector:
    """Derive a HealthSnapshot from running pods and the Helm release.

    Collaborator failures propagate unchanged so callers can tell
    "not installed" apart from "could not determine".
    """

    def __init__(self, cluster: ClusterAPI, packages: PackageAPI, config: OrchestratorConfig) -> None:
        self.cluster = cluster
        self.packages = packages
        self.config = config

    def _workload_pods(self, namespace: str) -> list[PodInfo]:
        fragment = self.config.workload_name_fragment
        return [pod for pod in self.cluster.list_pods(namespace) if fragment in pod.name]

    def pods_running(self, namespace: str) -> bool:
        """Return True if at least one Velero pod is Running.

        Args:
            namespace: Namespace to list pods in.
        """
        return any(pod.phase == POD_PHASE_RUNNING for pod in self._workload_pods(namespace))

    def pods_ready(self, namespace: str) -> bool:
        """Return True if Velero pods exist and every one of them is Running.

        Args:
            namespace: Namespace to list pods in.
        """
        pods = self._workload_pods(namespace)
        return bool(pods) and all(pod.phase == POD_PHASE_RUNNING for pod in pods)

    def inspect(self, namespace: str, cancel: threading.Event | None = None) -> HealthSnapshot:
        """Compute a fresh health snapshot.

        Args:
            namespace: Namespace Velero is expected to run in.
            cancel: Caller's cancel event.

        Returns:
            Snapshot of pod and release state.

        Raises:
            CollaboratorError: If either signal could not be read.
            CancellationError: If *cancel* is set.
        """
        raise_if_cancelled(cancel, "status inspection")
        pods_running = self.pods_running(namespace)
        raise_if_cancelled(cancel, "status inspection")
        package_released = self.packages.is_installed(self.config.release_name)
        return HealthSnapshot(pods_running=pods_running, package_released=package_released)
