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

"""Helm values, credentials file, and storage-location manifest builders."""

from __future__ import annotations

from typing import Any

from velero_manager.config import OrchestratorConfig
from velero_manager.constants import (
    BSL_PREFIX,
    BSL_PROVIDER,
    VELERO_API_VERSION,
    VSL_DEFAULT_NAME,
    dep_value,
)
from velero_manager.models import StorageConfig


def credentials_file(storage: StorageConfig) -> str:
    """Render the AWS-style credentials file the Velero AWS plugin reads.

    Args:
        storage: Object-storage connection parameters.

    Returns:
        INI text with a ``[default]`` profile.
    """
    return (
        "[default]\n"
        f"aws_access_key_id={storage.access_key}\n"
        f"aws_secret_access_key={storage.secret_key}\n"
        f"region={storage.region}\n"
    )


def _location_config(storage: StorageConfig) -> dict[str, str]:
    return {
        "region": storage.region,
        "s3Url": storage.s3_url,
        "s3ForcePathStyle": "true",
    }


def chart_values(storage: StorageConfig, config: OrchestratorConfig) -> dict[str, Any]:
    """Build install-time values for the Velero chart.

    Args:
        storage: Object-storage connection parameters.
        config: Orchestrator configuration with secret and location names.

    Returns:
        Nested values dictionary ready for YAML serialization.
    """
    credential_ref = {"name": config.credentials_secret_name, "key": config.credentials_secret_key}
    return {
        "image": {
            "repository": dep_value("images", "velero", "repository", default="velero/velero"),
            "tag": dep_value("images", "velero", "tag", default="latest"),
        },
        "kubectl": {
            "image": {"repository": dep_value("images", "kubectl", "repository", default="bitnami/kubectl")},
        },
        "credentials": {
            "useSecret": True,
            "existingSecret": config.credentials_secret_name,
        },
        "features": "EnableCSI",
        "deployNodeAgent": True,
        "defaultVolumesToFsBackup": True,
        "configuration": {
            "backupStorageLocation": [{
                "name": config.storage_location_name,
                "provider": BSL_PROVIDER,
                "bucket": storage.bucket,
                "default": True,
                "config": _location_config(storage),
                "credential": credential_ref,
            }],
            "volumeSnapshotLocation": [{
                "name": VSL_DEFAULT_NAME,
                "provider": BSL_PROVIDER,
                "config": {"region": storage.region},
                "credential": credential_ref,
            }],
        },
        "initContainers": [{
            "name": "velero-plugin-for-aws",
            "image": dep_value("images", "aws_plugin", "image", default="velero/velero-plugin-for-aws"),
            "imagePullPolicy": "IfNotPresent",
            "volumeMounts": [{"name": "plugins", "mountPath": "/target"}],
        }],
    }


def storage_location_manifest(namespace: str, storage: StorageConfig, config: OrchestratorConfig) -> dict:
    """Build the default BackupStorageLocation resource.

    Args:
        namespace: Namespace Velero runs in.
        storage: Object-storage connection parameters.
        config: Orchestrator configuration with secret and location names.

    Returns:
        BackupStorageLocation resource as a dictionary.
    """
    return {
        "apiVersion": VELERO_API_VERSION,
        "kind": "BackupStorageLocation",
        "metadata": {"name": config.storage_location_name, "namespace": namespace},
        "spec": {
            "provider": BSL_PROVIDER,
            "default": True,
            "objectStorage": {"bucket": storage.bucket, "prefix": BSL_PREFIX},
            "config": _location_config(storage),
            "credential": {"name": config.credentials_secret_name, "key": config.credentials_secret_key},
        },
    }
