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

"""
cli.py - Velero installation management.

Subcommands:
    install    Install Velero against an S3-compatible object store
    uninstall  Uninstall the Velero release (--force for a full cleanup)
    cleanup    Remove the release, release secrets, namespace and CRDs
    status     Show the health snapshot and the install strategy

Environment Variables:
    Orchestration settings can be overridden via VELERO_* environment variables:
    - VELERO_RETRY_ATTEMPTS (default: 3)
    - VELERO_READINESS_TIMEOUT_SECONDS (default: 300)
    - VELERO_UNINSTALL_FALLBACK_NAMESPACES (default: ["velero", "default"])
    - And more (see OrchestratorConfig for the full list)

Examples:
    # Install against a local MinIO
    velero-manager install velero --endpoint minio.minio:9000 --access-key minio --secret-key minio123

    # Reinstall from scratch, giving up after 10 minutes
    velero-manager install velero --endpoint minio.minio:9000 --access-key minio --secret-key minio123 \\
        --force --timeout 600

    # Which strategy would an install take?
    velero-manager status strategy --namespace velero

    # Tear everything down, ignoring failures
    velero-manager cleanup velero --namespace velero --force
"""

from __future__ import annotations

import logging
import sys

import typer

from velero_manager import console
from velero_manager.commands import cleanup_cmd, install_cmd, status_cmd, uninstall_cmd

app = typer.Typer(
    help="Velero installation management.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.add_typer(install_cmd.app, name="install")
app.add_typer(uninstall_cmd.app, name="uninstall")
app.add_typer(cleanup_cmd.app, name="cleanup")
app.add_typer(status_cmd.app, name="status")


def main() -> None:
    """Console-script entry point."""
    try:
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
