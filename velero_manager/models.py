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

"""Request, result, and cluster record types."""

from __future__ import annotations

import copy
import enum
from dataclasses import FrozenInstanceError, dataclass, field, fields
from types import MappingProxyType
from typing import Any

from velero_manager.constants import DEFAULT_BUCKET, DEFAULT_REGION, NS_PHASE_ACTIVE


# ============================================================================
# Requests
# ============================================================================

@dataclass(frozen=True)
class StorageConfig:
    """Connection parameters for the S3-compatible object store.

    Attributes:
        endpoint: Host (and optional port or scheme) of the object store.
        access_key: Access key id.
        secret_key: Secret access key.
        use_ssl: Whether to talk to the endpoint over TLS.
        bucket: Bucket holding Velero backups.
        region: Region reported to the S3 client.
    """

    endpoint: str
    access_key: str = ""
    secret_key: str = field(default="", repr=False)
    use_ssl: bool = False
    bucket: str = DEFAULT_BUCKET
    region: str = DEFAULT_REGION

    @property
    def s3_url(self) -> str:
        """Endpoint URL with a scheme matching ``use_ssl``."""
        if self.endpoint.startswith(("http://", "https://")):
            return self.endpoint
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}"

    def require_credentials(self) -> None:
        """Raise ValueError unless both keys are set."""
        missing = [name for name, value in (("access_key", self.access_key),
                                            ("secret_key", self.secret_key)) if not value]
        if missing:
            raise ValueError(f"Object storage credentials missing: {', '.join(missing)}")


@dataclass(frozen=True)
class InstallRequest:
    """Caller-owned install parameters."""

    storage: StorageConfig
    namespace: str
    force: bool = False

    def __post_init__(self) -> None:
        if not self.namespace:
            raise ValueError("namespace must not be empty")


@dataclass(frozen=True)
class UninstallRequest:
    """Caller-owned uninstall parameters."""

    namespace: str
    force: bool = False

    def __post_init__(self) -> None:
        if not self.namespace:
            raise ValueError("namespace must not be empty")


# ============================================================================
# Decisions and results
# ============================================================================

@dataclass(frozen=True)
class HealthSnapshot:
    """Point-in-time health of the Velero installation."""

    pods_running: bool
    package_released: bool

    @property
    def is_healthy(self) -> bool:
        return self.pods_running and self.package_released

    def to_dict(self) -> dict[str, bool]:
        return {
            "pods_running": self.pods_running,
            "package_released": self.package_released,
            "is_healthy": self.is_healthy,
        }


class Strategy(str, enum.Enum):
    """Installation strategy chosen for a request."""

    FORCE_REINSTALL = "force_reinstall"
    FRESH_INSTALL = "fresh_install"
    SKIP_INSTALL = "skip_install"


class InstallStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"


@dataclass
class InstallResult:
    """Outcome of an install call, filled in as steps complete.

    The executor mutates the result while it runs. ``seal`` freezes it before
    it is handed back to the caller; any later assignment raises
    ``FrozenInstanceError`` and ``details`` becomes a read-only mapping.

    Attributes:
        namespace: Namespace Velero was installed into.
        force: Force flag echoed from the request.
        status: ``in_progress`` while running, ``success`` when returned.
        message: Human-readable summary.
        storage_connected: Whether the object store answered a bucket listing.
        backup_location: Name of the ensured BackupStorageLocation.
        installation_time: Elapsed seconds.
        details: Per-step outcome records keyed by step name.
    """

    namespace: str
    force: bool
    status: InstallStatus = InstallStatus.IN_PROGRESS
    message: str = ""
    storage_connected: bool = False
    backup_location: str = ""
    installation_time: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)
    _sealed: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if self._sealed:
            raise FrozenInstanceError(f"cannot assign to field '{name}' of a sealed InstallResult")
        super().__setattr__(name, value)

    def seal(self) -> InstallResult:
        """Freeze the result in place and return it."""
        if not self._sealed:
            self.details = MappingProxyType(copy.deepcopy(dict(self.details)))
            self._sealed = True
        return self

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self) if not f.name.startswith("_")}
        data["status"] = self.status.value
        data["details"] = copy.deepcopy(dict(self.details))
        return data


@dataclass
class CleanupReport:
    """Per-step outcome of a cleanup run.

    Attributes:
        namespace: Namespace that was torn down.
        force: Whether failures were tolerated.
        steps: Step name to ``ok`` or the error message.
    """

    namespace: str
    force: bool
    steps: dict[str, str] = field(default_factory=dict)

    @property
    def failed_steps(self) -> list[str]:
        return [name for name, outcome in self.steps.items() if outcome != "ok"]


# ============================================================================
# Collaborator records
# ============================================================================

@dataclass(frozen=True)
class NamespaceInfo:
    name: str
    phase: str = NS_PHASE_ACTIVE


@dataclass(frozen=True)
class PodInfo:
    name: str
    phase: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ReleaseInfo:
    name: str
    namespace: str
    status: str = ""
    chart: str = ""


@dataclass(frozen=True)
class BackupStorageLocationInfo:
    name: str
    namespace: str
    phase: str = ""
    message: str = ""
    default: bool = False
