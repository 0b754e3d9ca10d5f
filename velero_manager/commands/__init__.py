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

"""Shared helpers for the CLI subcommands."""

from __future__ import annotations

import json
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NoReturn

import typer

from velero_manager import console
from velero_manager.config import OrchestratorConfig
from velero_manager.helm import HelmPackageAPI
from velero_manager.kube import KubectlBackupAPI, KubectlClusterAPI
from velero_manager.orchestrator import VeleroOrchestrator
from velero_manager.storage import storage_from_config
from velero_manager.utils import require_command

PREREQUISITES = ("kubectl", "helm")


def build_orchestrator(config: OrchestratorConfig | None = None) -> VeleroOrchestrator:
    """Wire the orchestrator to kubectl, helm and boto3."""
    for cmd in PREREQUISITES:
        require_command(cmd)
    return VeleroOrchestrator(
        KubectlClusterAPI(), HelmPackageAPI(), KubectlBackupAPI(), storage_from_config, config)


@contextmanager
def cancel_after(timeout: float | None) -> Iterator[threading.Event]:
    """Yield a cancel event that is set once *timeout* seconds have passed.

    Args:
        timeout: Deadline in seconds, or None for no deadline.
    """
    cancel = threading.Event()
    timer = None
    if timeout:
        timer = threading.Timer(timeout, cancel.set)
        timer.daemon = True
        timer.start()
    try:
        yield cancel
    finally:
        if timer is not None:
            timer.cancel()


def emit(data: Any) -> None:
    """Print a result as JSON on stdout."""
    typer.echo(json.dumps(data, indent=2, default=str))


def fail(err: Exception) -> NoReturn:
    """Report *err* in red and exit with status 1."""
    console.print(f"[red]\u274c {err}[/red]")
    raise typer.Exit(code=1)
