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

"""Readable explanations for a BackupStorageLocation that is not Available."""

from __future__ import annotations

from velero_manager.models import BackupStorageLocationInfo, StorageConfig

MAX_SUGGESTIONS = 3

# (status message markers, short description)
_CORE_ERRORS: list[tuple[tuple[str, ...], str]] = [
    (("no Host in request URL",), "Invalid object storage endpoint URL"),
    (("connection refused",), "Cannot connect to object storage server"),
    (("access denied",), "Object storage access denied"),
    (("timeout", "exceeded maximum number of attempts"), "Object storage connection timeout"),
]


def _bucket_missing(message: str) -> bool:
    return "bucket" in message and ("not found" in message or "does not exist" in message)


def extract_core_error(message: str) -> str:
    """Reduce a storage-location status message to a short cause.

    Args:
        message: ``status.message`` reported by Velero.

    Returns:
        Short description, or the text before the first colon when unrecognized.
    """
    if not message:
        return ""
    if _bucket_missing(message):
        return "Object storage bucket not found"
    for markers, description in _CORE_ERRORS:
        if any(marker in message for marker in markers):
            return description
    return message.split(":", 1)[0].strip()


def suggest_actions(message: str, storage: StorageConfig) -> list[str]:
    """List remediation hints matching a storage-location status message.

    Args:
        message: ``status.message`` reported by Velero.
        storage: Connection parameters the location was configured with.

    Returns:
        Suggested actions, most specific first.
    """
    actions: list[str] = []
    if "no Host in request URL" in message or "connection refused" in message:
        actions += [
            "Check object storage endpoint URL format and accessibility",
            f"Verify object storage is running at: {storage.endpoint}",
        ]
    if "access denied" in message or "invalid credentials" in message:
        actions += [
            "Verify the access key and secret key are correct",
            f"Check user permissions for the '{storage.bucket}' bucket",
        ]
    if _bucket_missing(message):
        actions += [
            f"Create the '{storage.bucket}' bucket",
            f"Verify bucket name is '{storage.bucket}' (case-sensitive)",
        ]
    if "timeout" in message or "exceeded maximum number of attempts" in message:
        actions += [
            "Check network connectivity to object storage",
            "Verify the object storage server is responsive",
        ]
    if not actions:
        actions = [
            "Check object storage server status and connectivity",
            "Verify object storage credentials and permissions",
            "Check Velero configuration",
        ]
    return actions


def select_top_actions(actions: list[str]) -> list[str]:
    """Pick at most three actions, endpoint and liveness hints first."""
    if len(actions) <= MAX_SUGGESTIONS:
        return actions
    priority = [a for a in actions if "endpoint" in a or "running" in a]
    rest = [a for a in actions if a not in priority]
    return (priority + rest)[:MAX_SUGGESTIONS]


def describe_unavailable_location(location: BackupStorageLocationInfo, storage: StorageConfig) -> str:
    """Build a one-line explanation for a location that is not Available.

    Args:
        location: Storage location as reported by the cluster.
        storage: Connection parameters the location was configured with.

    Returns:
        Message of the form ``BackupStorageLocation '<name>' is <phase>: <cause> | Try: ...``.
    """
    phase = (location.phase or "unknown").lower()
    text = f"BackupStorageLocation '{location.name}' is {phase}"
    core = extract_core_error(location.message)
    if core:
        text += f": {core}"
    top = select_top_actions(suggest_actions(location.message, storage))
    if top:
        text += f" | Try: {', '.join(top)}"
    return text
