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

"""Orchestrator configuration model."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from velero_manager.constants import (
    BSL_DEFAULT_NAME,
    CREDENTIALS_SECRET_KEY,
    CREDENTIALS_SECRET_NAME,
    DEFAULT_NAMESPACE_SETTLE_DELAY_SECONDS,
    DEFAULT_NAMESPACE_VERIFY_ATTEMPTS,
    DEFAULT_PACKAGE_RETRY_ATTEMPTS,
    DEFAULT_PACKAGE_RETRY_DELAY_SECONDS,
    DEFAULT_READINESS_INTERVAL_SECONDS,
    DEFAULT_READINESS_TIMEOUT_SECONDS,
    DEFAULT_RELEASE_SECRET_NAMESPACES,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_STABILIZATION_DELAY_SECONDS,
    DEFAULT_UNINSTALL_FALLBACK_NAMESPACES,
    HELM_RELEASE_VELERO,
    VELERO_CHART_URL,
    VELERO_CHART_VERSION,
    VELERO_CRDS,
)


class OrchestratorConfig(BaseSettings):
    """Velero orchestration settings, auto-loaded from VELERO_* env vars.

    List-valued fields are read from the environment as JSON arrays
    (e.g. ``VELERO_CRD_NAMES='["backups.velero.io"]'``).

    Attributes:
        release_name: Helm release name of the Velero chart.
        chart_url: Chart archive URL passed to ``helm install``.
        chart_version: Chart version passed to ``helm install``.
        workload_name_fragment: Substring identifying Velero pods by name.
        credentials_secret_name: Secret holding the object-storage credentials.
        credentials_secret_key: Key inside the credentials secret.
        storage_location_name: Name of the BackupStorageLocation to ensure.
        retry_attempts: Attempts for namespace, secret and storage-location steps.
        retry_delay_seconds: Fixed delay between those attempts.
        package_retry_attempts: Attempts for the chart install/upgrade step.
        package_retry_delay_seconds: Fixed delay between chart install attempts.
        namespace_verify_attempts: Attempts when re-reading the namespace.
        readiness_interval_seconds: Tick between pod readiness checks.
        readiness_timeout_seconds: Ceiling for the pod readiness wait.
        stabilization_delay_seconds: Pause after a force cleanup before reinstalling.
        namespace_settle_delay_seconds: Pause after the namespace is ensured.
        uninstall_fallback_namespaces: Namespaces tried after the target one on uninstall.
        release_secret_namespaces: Namespaces scanned for Helm release secrets.
        crd_names: Cluster-scoped CRDs owned by Velero.
    """

    model_config = SettingsConfigDict(env_prefix="VELERO_", extra="ignore")

    release_name: str = HELM_RELEASE_VELERO
    chart_url: str = VELERO_CHART_URL
    chart_version: str = Field(default=VELERO_CHART_VERSION, pattern=r"^v?[\d.]+(-[\w.]+)?$")
    workload_name_fragment: str = Field(default=HELM_RELEASE_VELERO, min_length=1)
    credentials_secret_name: str = CREDENTIALS_SECRET_NAME
    credentials_secret_key: str = CREDENTIALS_SECRET_KEY
    storage_location_name: str = BSL_DEFAULT_NAME

    retry_attempts: int = Field(default=DEFAULT_RETRY_ATTEMPTS, ge=1, le=20)
    retry_delay_seconds: float = Field(default=DEFAULT_RETRY_DELAY_SECONDS, ge=0)
    package_retry_attempts: int = Field(default=DEFAULT_PACKAGE_RETRY_ATTEMPTS, ge=1, le=20)
    package_retry_delay_seconds: float = Field(default=DEFAULT_PACKAGE_RETRY_DELAY_SECONDS, ge=0)
    namespace_verify_attempts: int = Field(default=DEFAULT_NAMESPACE_VERIFY_ATTEMPTS, ge=1, le=20)

    readiness_interval_seconds: float = Field(default=DEFAULT_READINESS_INTERVAL_SECONDS, ge=0)
    readiness_timeout_seconds: float = Field(default=DEFAULT_READINESS_TIMEOUT_SECONDS, gt=0)
    stabilization_delay_seconds: float = Field(default=DEFAULT_STABILIZATION_DELAY_SECONDS, ge=0)
    namespace_settle_delay_seconds: float = Field(default=DEFAULT_NAMESPACE_SETTLE_DELAY_SECONDS, ge=0)

    uninstall_fallback_namespaces: list[str] = Field(
        default_factory=lambda: list(DEFAULT_UNINSTALL_FALLBACK_NAMESPACES))
    release_secret_namespaces: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RELEASE_SECRET_NAMESPACES))
    crd_names: list[str] = Field(default_factory=lambda: list(VELERO_CRDS))
