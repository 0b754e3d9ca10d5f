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

"""Status subcommands (strategy)."""

from __future__ import annotations

import typer

from velero_manager.commands import build_orchestrator, emit, fail
from velero_manager.constants import NS_VELERO
from velero_manager.errors import OrchestratorError
from velero_manager.models import InstallRequest, StorageConfig

app = typer.Typer(help="Inspect the current installation.")


@app.command()
def strategy(
    namespace: str = typer.Option(NS_VELERO, "--namespace", help="Namespace Velero runs in"),
    force: bool = typer.Option(False, "--force", help="Evaluate as if --force were passed to install"),
) -> None:
    """Show the health snapshot and the strategy an install would take."""
    try:
        request = InstallRequest(storage=StorageConfig(endpoint=""), namespace=namespace, force=force)
        chosen, snapshot = build_orchestrator().determine_strategy(request)
    except (OrchestratorError, RuntimeError, ValueError) as err:
        fail(err)
    emit({"namespace": namespace, "strategy": chosen.value, "health": snapshot.to_dict()})
