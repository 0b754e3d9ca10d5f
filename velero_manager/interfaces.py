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

"""Capability interfaces the orchestrator consumes.

Implementations raise ``NotFoundError`` / ``AlreadyExistsError`` where the
method names a lookup or a creation, and ``CollaboratorError`` otherwise.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from velero_manager.models import (
    BackupStorageLocationInfo,
    NamespaceInfo,
    PodInfo,
    StorageConfig,
)


class ClusterAPI(Protocol):
    """Core Kubernetes resources."""

    def get_namespace(self, name: str) -> NamespaceInfo: ...

    def create_namespace(self, name: str) -> NamespaceInfo: ...

    def delete_namespace(self, name: str) -> None: ...

    def get_secret(self, namespace: str, name: str) -> dict[str, str]: ...

    def create_secret(self, namespace: str, name: str, string_data: dict[str, str]) -> None: ...

    def delete_secret(self, namespace: str, name: str) -> None: ...

    def list_pods(self, namespace: str) -> list[PodInfo]: ...

    def delete_crd(self, name: str) -> None: ...


class PackageAPI(Protocol):
    """Helm release management."""

    def install(self, name: str, chart: str, version: str, namespace: str,
                values: dict[str, Any]) -> None: ...

    def upgrade(self, name: str, chart: str, version: str, namespace: str,
                values: dict[str, Any]) -> None: ...

    def uninstall(self, name: str, namespace: str, dry_run: bool = False) -> None: ...

    def is_installed(self, name: str) -> bool: ...

    def list_release_secrets(self, name: str, namespace: str) -> list[str]: ...


class BackupAPI(Protocol):
    """Velero custom resources."""

    def create_backup_storage_location(self, namespace: str, manifest: dict[str, Any]) -> None: ...

    def list_backup_storage_locations(self, namespace: str) -> list[BackupStorageLocationInfo]: ...

    def delete_backup_storage_location(self, namespace: str, name: str) -> None: ...


class ObjectStorageAPI(Protocol):
    """S3-compatible object store, used as a connectivity probe."""

    def list_buckets(self) -> list[str]: ...


StorageFactory = Callable[[StorageConfig], ObjectStorageAPI]
