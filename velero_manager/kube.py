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

"""Cluster and Velero resource access through kubectl."""

from __future__ import annotations

import base64
import json
from typing import Any

from velero_manager.constants import BSL_RESOURCE
from velero_manager.errors import AlreadyExistsError, CollaboratorError, NotFoundError
from velero_manager.models import BackupStorageLocationInfo, NamespaceInfo, PodInfo
from velero_manager.utils import run_kubectl


def classify_kubectl_error(operation: str, stderr: str) -> CollaboratorError:
    """Map kubectl stderr to the matching collaborator error.

    Args:
        operation: Operation name for the error.
        stderr: kubectl error output.

    Returns:
        NotFoundError, AlreadyExistsError, or a plain CollaboratorError.
    """
    message = stderr.strip() or "kubectl failed"
    if "NotFound" in message or "not found" in message:
        return NotFoundError(operation, message)
    if "AlreadyExists" in message or "already exists" in message:
        return AlreadyExistsError(operation, message)
    return CollaboratorError(operation, message)


def _kubectl(operation: str, args: list[str], input_data: str | None = None) -> str:
    ok, stdout, stderr = run_kubectl(args, input_data=input_data)
    if not ok:
        raise classify_kubectl_error(operation, stderr)
    return stdout


def kubectl_json(operation: str, args: list[str]) -> dict[str, Any]:
    stdout = _kubectl(operation, [*args, "-o", "json"])
    try:
        return json.loads(stdout)
    except json.JSONDecodeError as err:
        raise CollaboratorError(operation, f"unparseable kubectl output: {err}") from err


def _create_from_manifest(operation: str, manifest: dict[str, Any]) -> None:
    _kubectl(operation, ["create", "-f", "-"], input_data=json.dumps(manifest))


class KubectlClusterAPI:
    """Namespaces, secrets, pods and CRDs via kubectl."""

    def get_namespace(self, name: str) -> NamespaceInfo:
        data = kubectl_json("get namespace", ["get", "namespace", name])
        return NamespaceInfo(name=name, phase=data.get("status", {}).get("phase", ""))

    def create_namespace(self, name: str) -> NamespaceInfo:
        _kubectl("create namespace", ["create", "namespace", name])
        return NamespaceInfo(name=name)

    def delete_namespace(self, name: str) -> None:
        _kubectl("delete namespace", ["delete", "namespace", name, "--wait=false"])

    def get_secret(self, namespace: str, name: str) -> dict[str, str]:
        data = kubectl_json("get secret", ["get", "secret", name, "-n", namespace])
        return {key: base64.b64decode(value).decode("utf-8", errors="replace")
                for key, value in (data.get("data") or {}).items()}

    def create_secret(self, namespace: str, name: str, string_data: dict[str, str]) -> None:
        _create_from_manifest("create secret", {
            "apiVersion": "v1",
            "kind": "Secret",
            "type": "Opaque",
            "metadata": {"name": name, "namespace": namespace},
            "stringData": string_data,
        })

    def delete_secret(self, namespace: str, name: str) -> None:
        _kubectl("delete secret", ["delete", "secret", name, "-n", namespace])

    def list_pods(self, namespace: str) -> list[PodInfo]:
        data = kubectl_json("list pods", ["get", "pods", "-n", namespace])
        return [
            PodInfo(
                name=item["metadata"]["name"],
                phase=item.get("status", {}).get("phase", ""),
                labels=item["metadata"].get("labels") or {},
            )
            for item in data.get("items", [])
        ]

    def delete_crd(self, name: str) -> None:
        _kubectl("delete crd", ["delete", "crd", name])


class KubectlBackupAPI:
    """Velero BackupStorageLocation resources via kubectl."""

    def create_backup_storage_location(self, namespace: str, manifest: dict[str, Any]) -> None:
        manifest = {**manifest, "metadata": {**manifest.get("metadata", {}), "namespace": namespace}}
        _create_from_manifest("create backup storage location", manifest)

    def list_backup_storage_locations(self, namespace: str) -> list[BackupStorageLocationInfo]:
        data = kubectl_json("list backup storage locations", ["get", BSL_RESOURCE, "-n", namespace])
        locations = []
        for item in data.get("items", []):
            status = item.get("status") or {}
            locations.append(BackupStorageLocationInfo(
                name=item["metadata"]["name"],
                namespace=namespace,
                phase=status.get("phase", ""),
                message=status.get("message", ""),
                default=bool(item.get("spec", {}).get("default", False)),
            ))
        return locations

    def delete_backup_storage_location(self, namespace: str, name: str) -> None:
        _kubectl("delete backup storage location", ["delete", BSL_RESOURCE, name, "-n", namespace])
