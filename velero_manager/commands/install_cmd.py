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

"""Install subcommands (velero)."""

from __future__ import annotations

import typer

from velero_manager.commands import build_orchestrator, cancel_after, emit, fail
from velero_manager.config import OrchestratorConfig
from velero_manager.constants import DEFAULT_BUCKET, DEFAULT_REGION, NS_VELERO
from velero_manager.errors import OrchestratorError
from velero_manager.models import InstallRequest, StorageConfig

app = typer.Typer(help="Install components.")


@app.command()
def velero(
    endpoint: str = typer.Option(..., "--endpoint", help="Object storage endpoint (host:port or URL)"),
    access_key: str = typer.Option(..., "--access-key", envvar="VELERO_STORAGE_ACCESS_KEY",
                                   help="Object storage access key"),
    secret_key: str = typer.Option(..., "--secret-key", envvar="VELERO_STORAGE_SECRET_KEY",
                                   help="Object storage secret key"),
    use_ssl: bool = typer.Option(False, "--use-ssl", help="Talk to the endpoint over HTTPS"),
    bucket: str = typer.Option(DEFAULT_BUCKET, "--bucket", help="Bucket holding backups"),
    region: str = typer.Option(DEFAULT_REGION, "--region", help="Object storage region"),
    namespace: str = typer.Option(NS_VELERO, "--namespace", help="Namespace to install Velero into"),
    force: bool = typer.Option(False, "--force", help="Clean up any existing installation first"),
    readiness_timeout: float | None = typer.Option(
        None, "--readiness-timeout", help="Seconds to wait for Velero pods (overrides VELERO_READINESS_TIMEOUT_SECONDS)"),
    timeout: float | None = typer.Option(None, "--timeout", help="Cancel the whole install after N seconds"),
) -> None:
    """Install Velero backed by an S3-compatible object store."""
    config = OrchestratorConfig()
    if readiness_timeout is not None:
        config = config.model_copy(update={"readiness_timeout_seconds": readiness_timeout})
    try:
        request = InstallRequest(
            storage=StorageConfig(
                endpoint=endpoint,
                access_key=access_key,
                secret_key=secret_key,
                use_ssl=use_ssl,
                bucket=bucket,
                region=region,
            ),
            namespace=namespace,
            force=force,
        )
        orchestrator = build_orchestrator(config)
        with cancel_after(timeout) as cancel:
            result = orchestrator.install_velero(request, cancel)
    except (OrchestratorError, RuntimeError, ValueError) as err:
        fail(err)
    emit(result.to_dict())
