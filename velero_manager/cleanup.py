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

"""Ordered teardown of a Velero installation."""

from __future__ import annotations

import threading
from collections.abc import Callable

from rich.panel import Panel

from velero_manager import console, logger
from velero_manager.config import OrchestratorConfig
from velero_manager.constants import HELM_RELEASE_SECRET_PREFIX
from velero_manager.errors import CancellationError, CleanupStepError, CollaboratorError, NotFoundError
from velero_manager.interfaces import ClusterAPI, PackageAPI
from velero_manager.models import CleanupReport
from velero_manager.retry import raise_if_cancelled
from velero_manager.utils import unique

STEP_RELEASE = "release_uninstall"
STEP_RELEASE_SECRETS = "release_secrets"
STEP_NAMESPACE = "namespace_delete"
STEP_CRDS = "crd_delete"


class CleanupExecutor:
    """Remove the Helm release, its leftover secrets, the namespace and the CRDs.

    Steps always run in that order. In force mode every step runs and its
    failure is only recorded. Otherwise a failed release uninstall aborts the
    run, and failures of the later steps are collected into one error.
    """

    def __init__(self, cluster: ClusterAPI, packages: PackageAPI, config: OrchestratorConfig) -> None:
        self.cluster = cluster
        self.packages = packages
        self.config = config

    # ========================================================================
    # Individual steps
    # ========================================================================

    def uninstall_release(self, namespace: str) -> str:
        """Uninstall the release from the first candidate namespace that accepts it.

        Args:
            namespace: Target namespace, tried before the fallback namespaces.

        Returns:
            Namespace the release was uninstalled from.

        Raises:
            CollaboratorError: If no candidate namespace held the release.
        """
        release = self.config.release_name
        candidates = unique([namespace, *self.config.uninstall_fallback_namespaces])
        last_error: CollaboratorError | None = None
        for candidate in candidates:
            try:
                self.packages.uninstall(release, candidate)
            except CollaboratorError as err:
                logger.info("Release %s not uninstalled from %s: %s", release, candidate, err)
                last_error = err
                continue
            console.print(f"[green]\u2705 Release {release} uninstalled from {candidate}[/green]")
            return candidate
        raise CollaboratorError(
            STEP_RELEASE,
            f"release '{release}' could not be uninstalled from any of {', '.join(candidates)}: {last_error}",
        ) from last_error

    def delete_release_secrets(self, namespace: str) -> int:
        """Delete leftover Helm release secrets of the Velero release.

        Namespaces that cannot be listed are skipped.

        Args:
            namespace: Target namespace, scanned before the configured ones.

        Returns:
            Number of secrets deleted.

        Raises:
            CollaboratorError: If any matching secret could not be deleted.
        """
        prefix = f"{HELM_RELEASE_SECRET_PREFIX}{self.config.release_name}."
        deleted = 0
        failed: list[str] = []
        for candidate in unique([namespace, *self.config.release_secret_namespaces]):
            try:
                names = self.packages.list_release_secrets(self.config.release_name, candidate)
            except CollaboratorError as err:
                logger.info("Skipping release secrets in %s: %s", candidate, err)
                continue
            for name in names:
                if not name.startswith(prefix):
                    continue
                try:
                    self.cluster.delete_secret(candidate, name)
                except NotFoundError:
                    continue
                except CollaboratorError as err:
                    logger.warning("Failed to delete secret %s/%s: %s", candidate, name, err)
                    failed.append(f"{candidate}/{name}")
                    continue
                deleted += 1
        if failed:
            raise CollaboratorError(STEP_RELEASE_SECRETS, f"could not delete {', '.join(failed)}")
        console.print(f"[green]\u2705 Removed {deleted} release secret(s)[/green]")
        return deleted

    def delete_namespace(self, namespace: str) -> bool:
        """Delete the namespace if it exists.

        Returns:
            True if a delete was issued, False if the namespace was already gone.
        """
        try:
            self.cluster.get_namespace(namespace)
            self.cluster.delete_namespace(namespace)
        except NotFoundError:
            console.print(f"[yellow]   Namespace {namespace} not found, skipping[/yellow]")
            return False
        console.print(f"[green]\u2705 Namespace {namespace} deleted[/green]")
        return True

    def delete_crds(self) -> None:
        """Delete every Velero CRD, skipping ones that are already gone.

        Raises:
            CollaboratorError: If any CRD could not be deleted.
        """
        failed: list[str] = []
        for crd in self.config.crd_names:
            try:
                self.cluster.delete_crd(crd)
            except NotFoundError:
                continue
            except CollaboratorError as err:
                logger.warning("Failed to delete CRD %s: %s", crd, err)
                failed.append(crd)
        if failed:
            console.print("[yellow]\u26a0\ufe0f  Remove the remaining CRDs manually:[/yellow]")
            console.print(f"  kubectl delete crd {' '.join(failed)}")
            raise CollaboratorError(STEP_CRDS, f"could not delete {', '.join(failed)}")
        console.print("[green]\u2705 Velero CRDs removed[/green]")

    # ========================================================================
    # Full run
    # ========================================================================

    def run(self, namespace: str, force: bool, cancel: threading.Event | None = None) -> CleanupReport:
        """Run every cleanup step in order.

        Args:
            namespace: Namespace Velero was installed into.
            force: Record failures and keep going instead of raising.
            cancel: Caller's cancel event, checked before every step.

        Returns:
            Per-step outcomes.

        Raises:
            CleanupStepError: In non-force mode, if any step failed.
            CancellationError: If *cancel* is set.
        """
        console.print(Panel.fit(f"Cleaning up Velero in {namespace}", style="bold blue"))
        report = CleanupReport(namespace=namespace, force=force)
        steps: list[tuple[str, Callable[[], object]]] = [
            (STEP_RELEASE, lambda: self.uninstall_release(namespace)),
            (STEP_RELEASE_SECRETS, lambda: self.delete_release_secrets(namespace)),
            (STEP_NAMESPACE, lambda: self.delete_namespace(namespace)),
            (STEP_CRDS, self.delete_crds),
        ]
        failures: list[tuple[str, Exception]] = []
        for name, step in steps:
            raise_if_cancelled(cancel, f"cleanup {name}")
            try:
                step()
            except CancellationError:
                raise
            except Exception as err:
                report.steps[name] = str(err)
                failures.append((name, err))
                if force:
                    logger.warning("Cleanup step %s failed, continuing: %s", name, err)
                    console.print(f"[yellow]\u26a0\ufe0f  {name} failed: {err}[/yellow]")
                    continue
                if name == STEP_RELEASE:
                    raise CleanupStepError(name, f"aborting cleanup: {err}", failures) from err
                continue
            report.steps[name] = "ok"

        if failures and not force:
            first_step, first_error = failures[0]
            summary = "; ".join(f"{step}: {error}" for step, error in failures)
            raise CleanupStepError(first_step, summary, failures) from first_error
        return report
