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

"""Velero install sequence: namespace, credentials, chart, readiness, storage."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from rich.panel import Panel

from velero_manager import console, logger
from velero_manager.cleanup import CleanupExecutor
from velero_manager.config import OrchestratorConfig
from velero_manager.constants import BSL_PHASE_AVAILABLE, NS_PHASE_ACTIVE
from velero_manager.diagnostics import describe_unavailable_location
from velero_manager.errors import (
    AlreadyExistsError,
    CancellationError,
    CollaboratorError,
    FatalInstallStepError,
    NotFoundError,
    RetryExhaustedError,
    WarningStepError,
)
from velero_manager.inspector import StatusInspector
from velero_manager.interfaces import BackupAPI, ClusterAPI, PackageAPI, StorageFactory
from velero_manager.models import InstallRequest, InstallResult, InstallStatus, Strategy
from velero_manager.readiness import wait_until
from velero_manager.retry import cancellable_sleep, run_with_retry
from velero_manager.values import chart_values, credentials_file, storage_location_manifest

STEP_NAMESPACE = "namespace"
STEP_CREDENTIALS = "credentials_secret"
STEP_NAMESPACE_VERIFY = "namespace_verification"
STEP_PACKAGE = "package"
STEP_READINESS = "readiness"
STEP_STORAGE_LOCATION = "backup_storage_location"
STEP_STORAGE_VALIDATION = "storage_validation"
STEP_FORCE_CLEANUP = "force_cleanup"
STEP_STABILIZATION = "stabilization"
STEP_NAMESPACE_SETTLE = "namespace_settle"


def _outcome(status: str, err: BaseException | None = None, **extra: Any) -> dict[str, Any]:
    record: dict[str, Any] = {"status": status}
    if err is not None:
        record["error"] = str(err)
        record["kind"] = type(err).__name__
    record.update(extra)
    return record


def _steps_with(result: InstallResult, status: str) -> list[str]:
    return [step for step, record in result.details.items()
            if isinstance(record, dict) and record.get("status") == status]


class InstallExecutor:
    """Carry out the strategy chosen for an install request.

    Only the chart install is fatal. Every other step is retried or polled
    as configured, and a failure there is recorded in the result details as a
    warning before the sequence moves on.
    """

    def __init__(
        self,
        cluster: ClusterAPI,
        packages: PackageAPI,
        backups: BackupAPI,
        storage_factory: StorageFactory,
        inspector: StatusInspector,
        cleanup: CleanupExecutor,
        config: OrchestratorConfig,
    ) -> None:
        self.cluster = cluster
        self.packages = packages
        self.backups = backups
        self.storage_factory = storage_factory
        self.inspector = inspector
        self.cleanup = cleanup
        self.config = config

    # ========================================================================
    # Steps
    # ========================================================================

    def _require_active(self, operation: str, namespace: str) -> None:
        info = self.cluster.get_namespace(namespace)
        if info.phase != NS_PHASE_ACTIVE:
            raise CollaboratorError(operation, f"namespace '{namespace}' is {info.phase}")

    def _ensure_namespace_once(self, namespace: str) -> None:
        try:
            self._require_active("ensure namespace", namespace)
        except NotFoundError:
            try:
                self.cluster.create_namespace(namespace)
            except AlreadyExistsError:
                pass

    def ensure_namespace(self, namespace: str, cancel: threading.Event | None = None) -> None:
        """Create the namespace unless it already exists and is Active."""
        run_with_retry(
            "ensure namespace", lambda: self._ensure_namespace_once(namespace),
            attempts=self.config.retry_attempts, delay=self.config.retry_delay_seconds, cancel=cancel,
        )

    def ensure_credentials_secret(self, request: InstallRequest, cancel: threading.Event | None = None) -> None:
        """Create the object-storage credentials secret unless it already exists.

        Args:
            request: Install request carrying the storage credentials.
            cancel: Caller's cancel event.

        Raises:
            ValueError: If the access or secret key is empty.
            RetryExhaustedError: If the secret could not be created.
        """
        request.storage.require_credentials()
        namespace = request.namespace
        name = self.config.credentials_secret_name

        def _ensure() -> None:
            try:
                self.cluster.get_secret(namespace, name)
                return
            except NotFoundError:
                pass
            try:
                self.cluster.create_secret(
                    namespace, name, {self.config.credentials_secret_key: credentials_file(request.storage)})
            except AlreadyExistsError:
                pass

        run_with_retry("ensure credentials secret", _ensure,
                       attempts=self.config.retry_attempts, delay=self.config.retry_delay_seconds, cancel=cancel)

    def verify_namespace(self, namespace: str, cancel: threading.Event | None = None) -> None:
        """Re-read the namespace until the API server reports it as Active."""
        run_with_retry(
            "verify namespace", lambda: self._require_active("verify namespace", namespace),
            attempts=self.config.namespace_verify_attempts, delay=self.config.retry_delay_seconds, cancel=cancel,
        )

    def _install_or_upgrade(self, request: InstallRequest) -> str:
        cfg = self.config
        values = chart_values(request.storage, cfg)
        try:
            self.packages.install(cfg.release_name, cfg.chart_url, cfg.chart_version, request.namespace, values)
            return "installed"
        except AlreadyExistsError:
            logger.info("Release %s already exists, upgrading", cfg.release_name)
            self.packages.upgrade(cfg.release_name, cfg.chart_url, cfg.chart_version, request.namespace, values)
            return "upgraded"

    def install_package(self, request: InstallRequest, cancel: threading.Event | None = None) -> str:
        """Install the Velero chart, upgrading the release if it already exists.

        Returns:
            ``installed`` or ``upgraded``.

        Raises:
            FatalInstallStepError: If every attempt failed.
            CancellationError: If *cancel* is set.
        """
        console.print(f"[yellow]Chart: {self.config.chart_url} ({self.config.chart_version})[/yellow]")
        try:
            return run_with_retry(
                "install chart", lambda: self._install_or_upgrade(request),
                attempts=self.config.package_retry_attempts,
                delay=self.config.package_retry_delay_seconds,
                cancel=cancel,
            )
        except RetryExhaustedError as err:
            raise FatalInstallStepError(STEP_PACKAGE, f"Velero chart install failed: {err}") from err

    def wait_for_ready(self, namespace: str, cancel: threading.Event | None = None) -> None:
        """Poll until every Velero pod in *namespace* is Running."""
        wait_until(
            lambda: self.inspector.pods_ready(namespace),
            interval=self.config.readiness_interval_seconds,
            timeout=self.config.readiness_timeout_seconds,
            cancel=cancel,
            description=f"velero pods in {namespace}",
        )

    def ensure_storage_location(self, request: InstallRequest, cancel: threading.Event | None = None) -> None:
        """Create the default BackupStorageLocation unless it already exists."""
        manifest = storage_location_manifest(request.namespace, request.storage, self.config)

        def _ensure() -> None:
            try:
                self.backups.create_backup_storage_location(request.namespace, manifest)
            except AlreadyExistsError:
                pass

        run_with_retry("ensure backup storage location", _ensure,
                       attempts=self.config.retry_attempts, delay=self.config.retry_delay_seconds, cancel=cancel)

    def validate_storage(self, request: InstallRequest, result: InstallResult) -> None:
        """Check the object store answers and the storage location is Available.

        Sets ``result.storage_connected`` once the bucket listing succeeds.

        Raises:
            CollaboratorError: If the object store is unreachable or the location is not Available.
            NotFoundError: If the storage location does not exist.
        """
        request.storage.require_credentials()
        buckets = self.storage_factory(request.storage).list_buckets()
        result.storage_connected = True
        result.details["buckets"] = len(buckets)
        if request.storage.bucket not in buckets:
            logger.warning("Bucket %s not found at %s", request.storage.bucket, request.storage.endpoint)

        name = self.config.storage_location_name
        location = next(
            (loc for loc in self.backups.list_backup_storage_locations(request.namespace) if loc.name == name),
            None,
        )
        if location is None:
            raise NotFoundError("validate storage", f"BackupStorageLocation '{name}' not found")
        if location.phase != BSL_PHASE_AVAILABLE:
            raise CollaboratorError("validate storage", describe_unavailable_location(location, request.storage))

    # ========================================================================
    # Sequencing
    # ========================================================================

    def _warning_step(self, result: InstallResult, step: str, label: str, fn: Callable[[], object]) -> bool:
        """Run a non-fatal step and record its outcome under ``result.details[step]``.

        Returns:
            True if the step succeeded.
        """
        console.print(f"[yellow]\u2139\ufe0f  {label}...[/yellow]")
        try:
            fn()
        except CancellationError as err:
            result.details[step] = _outcome("cancelled", err)
            raise
        except Exception as err:
            warning = WarningStepError(step, str(err))
            warning.__cause__ = err
            logger.warning("%s (continuing)", warning)
            result.details[step] = _outcome("warning", err)
            console.print(f"[yellow]\u26a0\ufe0f  {label} failed: {err}[/yellow]")
            return False
        result.details[step] = _outcome("ok")
        console.print(f"[green]\u2705 {label} done[/green]")
        return True

    def _pause(self, result: InstallResult, seconds: float, step: str, cancel: threading.Event | None) -> None:
        if seconds <= 0:
            return
        try:
            cancellable_sleep(cancel, step)(seconds)
        except CancellationError as err:
            result.details[step] = _outcome("cancelled", err)
            raise

    def _force_cleanup(self, request: InstallRequest, result: InstallResult, cancel: threading.Event | None) -> None:
        try:
            report = self.cleanup.run(request.namespace, force=True, cancel=cancel)
        except CancellationError as err:
            result.details[STEP_FORCE_CLEANUP] = _outcome("cancelled", err)
            raise
        result.details[STEP_FORCE_CLEANUP] = dict(report.steps)
        console.print(
            f"[yellow]Waiting {self.config.stabilization_delay_seconds:g}s for the cluster to settle...[/yellow]")
        self._pause(result, self.config.stabilization_delay_seconds, STEP_STABILIZATION, cancel)

    def _fresh_install(self, request: InstallRequest, result: InstallResult, cancel: threading.Event | None) -> None:
        namespace = request.namespace
        if self._warning_step(result, STEP_NAMESPACE, f"Ensuring namespace {namespace}",
                              lambda: self.ensure_namespace(namespace, cancel)):
            self._pause(result, self.config.namespace_settle_delay_seconds, STEP_NAMESPACE_SETTLE, cancel)
        self._warning_step(result, STEP_CREDENTIALS, "Ensuring credentials secret",
                           lambda: self.ensure_credentials_secret(request, cancel))
        self._warning_step(result, STEP_NAMESPACE_VERIFY, "Verifying namespace",
                           lambda: self.verify_namespace(namespace, cancel))

        action = self.install_package(request, cancel)
        result.details[STEP_PACKAGE] = _outcome("ok", action=action)
        console.print(f"[green]\u2705 Velero chart {action}[/green]")

        self._warning_step(result, STEP_READINESS, "Waiting for Velero pods",
                           lambda: self.wait_for_ready(namespace, cancel))
        result.backup_location = self.config.storage_location_name
        self._warning_step(result, STEP_STORAGE_LOCATION, "Ensuring backup storage location",
                           lambda: self.ensure_storage_location(request, cancel))
        self._warning_step(result, STEP_STORAGE_VALIDATION, "Validating object storage",
                           lambda: self.validate_storage(request, result))

    def execute(
        self,
        request: InstallRequest,
        strategy: Strategy,
        result: InstallResult,
        cancel: threading.Event | None = None,
    ) -> InstallResult:
        """Apply *strategy* to *request*, filling in *result*.

        A cancel outside the chart install stops the sequence at the current
        step. That step is recorded as ``cancelled`` and the result is still
        returned.

        Args:
            request: Install parameters.
            strategy: Strategy chosen from the health snapshot.
            result: Result to update in place.
            cancel: Caller's cancel event.

        Returns:
            The same *result*, with status ``success``.

        Raises:
            FatalInstallStepError: If the chart could not be installed.
            CancellationError: If *cancel* is set while the chart is being installed.
        """
        result.details["strategy"] = strategy.value
        console.print(Panel.fit(f"Velero install ({strategy.value}) in {request.namespace}", style="bold blue"))

        if strategy is Strategy.SKIP_INSTALL:
            console.print("[green]\u2705 Velero is already installed and healthy[/green]")
            result.status = InstallStatus.SUCCESS
            result.message = "Velero is already installed and healthy"
            result.backup_location = self.config.storage_location_name
            return result

        try:
            if strategy is Strategy.FORCE_REINSTALL:
                self._force_cleanup(request, result, cancel)
            self._fresh_install(request, result, cancel)
        except CancellationError:
            cancelled = _steps_with(result, "cancelled")
            if not cancelled:
                raise
            logger.warning("Velero install in %s cancelled during %s", request.namespace, cancelled[0])
            console.print(f"[yellow]\u26a0\ufe0f  Install cancelled during {cancelled[0]}[/yellow]")
            result.status = InstallStatus.SUCCESS
            result.message = f"Velero install cancelled during {cancelled[0]}"
            return result

        warnings = _steps_with(result, "warning")
        result.status = InstallStatus.SUCCESS
        result.message = "Velero installed successfully"
        if warnings:
            result.message += f" with warnings in: {', '.join(warnings)}"
        return result
