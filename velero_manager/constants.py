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

"""Constants, dependency loading, and dep_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_dependencies() -> dict:
    """Load chart and image versions from dependencies.yaml.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    deps_file = Path(__file__).resolve().parent / "dependencies.yaml"
    with open(deps_file) as f:
        return yaml.safe_load(f)


DEPENDENCIES = load_dependencies()


def dep_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the DEPENDENCIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = DEPENDENCIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- Helm release --
HELM_RELEASE_VELERO = dep_value("velero_chart", "release", default="velero")
VELERO_CHART_VERSION = dep_value("velero_chart", "version", default="11.1.0")
VELERO_CHART_URL = dep_value("velero_chart", "url", default="")
HELM_RELEASE_SECRET_PREFIX = "sh.helm.release.v1."
HELM_REUSE_NAME_MARKER = "cannot re-use a name"

# -- Namespaces --
NS_VELERO = "velero"
NS_DEFAULT = "default"
NS_KUBE_SYSTEM = "kube-system"

# -- Phases --
POD_PHASE_RUNNING = "Running"
NS_PHASE_ACTIVE = "Active"

# -- Credentials secret --
CREDENTIALS_SECRET_NAME = "cloud-credentials"
CREDENTIALS_SECRET_KEY = "cloud"

# -- Backup storage location --
BSL_DEFAULT_NAME = "minio"
BSL_PROVIDER = "aws"
BSL_PHASE_AVAILABLE = "Available"
BSL_PREFIX = "backups"
VSL_DEFAULT_NAME = "minio-snapshot"
VELERO_API_VERSION = "velero.io/v1"
BSL_RESOURCE = "backupstoragelocations.velero.io"

# -- Object storage defaults --
DEFAULT_BUCKET = "velero"
DEFAULT_REGION = "minio"

VELERO_CRDS = (
    "backups.velero.io",
    "backupstoragelocations.velero.io",
    "volumesnapshotlocations.velero.io",
    "restores.velero.io",
    "podvolumebackups.velero.io",
    "podvolumerestores.velero.io",
    "downloadrequests.velero.io",
    "backuprepositories.velero.io",
    "serverstatusrequests.velero.io",
)

# -- Retry and wait defaults --
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 2.0
DEFAULT_PACKAGE_RETRY_ATTEMPTS = 3
DEFAULT_PACKAGE_RETRY_DELAY_SECONDS = 5.0
DEFAULT_NAMESPACE_VERIFY_ATTEMPTS = 5
DEFAULT_READINESS_INTERVAL_SECONDS = 10.0
DEFAULT_READINESS_TIMEOUT_SECONDS = 300.0
DEFAULT_STABILIZATION_DELAY_SECONDS = 5.0
DEFAULT_NAMESPACE_SETTLE_DELAY_SECONDS = 3.0

DEFAULT_UNINSTALL_FALLBACK_NAMESPACES = (NS_VELERO, NS_DEFAULT)
DEFAULT_RELEASE_SECRET_NAMESPACES = (NS_VELERO, NS_DEFAULT, NS_KUBE_SYSTEM)

# -- Subprocess timeouts --
KUBECTL_TIMEOUT_SECONDS = 30
