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

"""Cleanup subcommands (velero)."""

from __future__ import annotations

import typer

from velero_manager.commands import build_orchestrator, cancel_after, emit, fail
from velero_manager.constants import NS_VELERO
from velero_manager.errors import OrchestratorError

app = typer.Typer(help="Remove every trace of a component.")


@app.command()
def velero(
    namespace: str = typer.Option(NS_VELERO, "--namespace", help="Namespace Velero was installed into"),
    force: bool = typer.Option(False, "--force", help="Keep going past failed steps"),
    timeout: float | None = typer.Option(None, "--timeout", help="Cancel after N seconds"),
) -> None:
    """Remove the Velero release, release secrets, namespace and CRDs."""
    try:
        orchestrator = build_orchestrator()
        with cancel_after(timeout) as cancel:
            report = orchestrator.cleanup_velero(namespace, force, cancel)
    except (OrchestratorError, RuntimeError, ValueError) as err:
        fail(err)
    emit({"namespace": report.namespace, "force": report.force, "steps": report.steps})
