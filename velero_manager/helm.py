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

"""Helm release management through the helm CLI."""

from __future__ import annotations

import json
import tempfile
from typing import Any

import sh
import yaml

from velero_manager import logger
from velero_manager.constants import HELM_REUSE_NAME_MARKER
from velero_manager.errors import AlreadyExistsError, CollaboratorError, NotFoundError
from velero_manager.kube import kubectl_json
from velero_manager.models import ReleaseInfo


def _stderr_text(err: sh.ErrorReturnCode) -> str:
    stderr = err.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return (stderr or "").strip()


def _helm(operation: str, *args: str) -> str:
    """Run helm and map its failures to collaborator errors.

    Args:
        operation: Operation name for the error.
        *args: helm arguments.

    Returns:
        Captured stdout.

    Raises:
        AlreadyExistsError: If helm refuses to re-use a release name.
        NotFoundError: If the release does not exist.
        CollaboratorError: For any other failure.
    """
    try:
        return str(sh.helm(*args))
    except sh.ErrorReturnCode as err:
        message = _stderr_text(err) or str(err)
        if HELM_REUSE_NAME_MARKER in message:
            raise AlreadyExistsError(operation, message) from err
        if "not found" in message:
            raise NotFoundError(operation, message) from err
        raise CollaboratorError(operation, message) from err


class HelmPackageAPI:
    """Install, upgrade and look up Helm releases."""

    def _with_values(self, operation: str, verb: str, name: str, chart: str, version: str,
                     namespace: str, values: dict[str, Any]) -> None:
        with tempfile.NamedTemporaryFile("w", prefix=f"{name}-values-", suffix=".yaml") as values_file:
            yaml.safe_dump(values, values_file, sort_keys=False)
            values_file.flush()
            _helm(operation, verb, name, chart,
                  "--version", version,
                  "--namespace", namespace,
                  "-f", values_file.name)

    def install(self, name: str, chart: str, version: str, namespace: str, values: dict[str, Any]) -> None:
        self._with_values("helm install", "install", name, chart, version, namespace, values)

    def upgrade(self, name: str, chart: str, version: str, namespace: str, values: dict[str, Any]) -> None:
        self._with_values("helm upgrade", "upgrade", name, chart, version, namespace, values)

    def uninstall(self, name: str, namespace: str, dry_run: bool = False) -> None:
        args = ["uninstall", name, "--namespace", namespace]
        if dry_run:
            args.append("--dry-run")
        _helm("helm uninstall", *args)

    def list_releases(self) -> list[ReleaseInfo]:
        """List releases in every namespace."""
        output = _helm("helm list", "list", "--all-namespaces", "--output", "json")
        try:
            entries = json.loads(output or "[]")
        except json.JSONDecodeError as err:
            raise CollaboratorError("helm list", f"unparseable helm output: {err}") from err
        return [
            ReleaseInfo(
                name=entry.get("name", ""),
                namespace=entry.get("namespace", ""),
                status=entry.get("status", ""),
                chart=entry.get("chart", ""),
            )
            for entry in entries or []
        ]

    def is_installed(self, name: str) -> bool:
        releases = [release for release in self.list_releases() if release.name == name]
        for release in releases:
            logger.debug("Found release %s in %s (%s)", release.name, release.namespace, release.status)
        return bool(releases)

    def list_release_secrets(self, name: str, namespace: str) -> list[str]:
        data = kubectl_json(
            "list release secrets",
            ["get", "secrets", "-n", namespace, "-l", f"owner=helm,name={name}"],
        )
        return [item["metadata"]["name"] for item in data.get("items", [])]
