"""Tests for the velero-manager CLI."""
import threading
from unittest.mock import patch

from typer.testing import CliRunner

from velero_manager.cli import app
from velero_manager.commands import cancel_after
from velero_manager.errors import CollaboratorError

runner = CliRunner()

INSTALL_ARGS = ["install", "velero", "--endpoint", "minio.minio:9000",
                "--access-key", "minio", "--secret-key", "minio123"]


def test_install_prints_result(orchestrator, cluster, packages):
    with patch("velero_manager.commands.install_cmd.build_orchestrator", return_value=orchestrator):
        result = runner.invoke(app, INSTALL_ARGS)

    assert result.exit_code == 0, result.output
    assert '"status": "success"' in result.output
    assert '"backup_location": "minio"' in result.output
    assert packages.releases == {"velero": "velero"}


def test_install_passes_readiness_override(orchestrator):
    with patch("velero_manager.commands.install_cmd.build_orchestrator", return_value=orchestrator) as build:
        runner.invoke(app, [*INSTALL_ARGS, "--readiness-timeout", "42"])

    config = build.call_args[0][0]
    assert config.readiness_timeout_seconds == 42.0


def test_install_failure_exits_nonzero(orchestrator, cluster):
    cluster.fail("list_pods", CollaboratorError("list pods", "connection refused"))

    with patch("velero_manager.commands.install_cmd.build_orchestrator", return_value=orchestrator):
        result = runner.invoke(app, INSTALL_ARGS)

    assert result.exit_code == 1


def test_missing_prerequisite_exits_nonzero():
    with patch("velero_manager.commands.install_cmd.build_orchestrator",
               side_effect=RuntimeError("Required command 'helm' not found. Please install it first.")):
        result = runner.invoke(app, INSTALL_ARGS)

    assert result.exit_code == 1


def test_status_strategy(orchestrator, cluster, packages):
    cluster.run_velero("velero")
    packages.releases["velero"] = "velero"

    with patch("velero_manager.commands.status_cmd.build_orchestrator", return_value=orchestrator):
        result = runner.invoke(app, ["status", "strategy", "--namespace", "velero"])

    assert result.exit_code == 0, result.output
    assert '"strategy": "skip_install"' in result.output


def test_cleanup_force_reports_steps(orchestrator, cluster):
    with patch("velero_manager.commands.cleanup_cmd.build_orchestrator", return_value=orchestrator):
        result = runner.invoke(app, ["cleanup", "velero", "--namespace", "velero", "--force"])

    assert result.exit_code == 0, result.output
    assert '"crd_delete": "ok"' in result.output
    assert cluster.crds == set()


def test_uninstall_without_release_fails(orchestrator):
    with patch("velero_manager.commands.uninstall_cmd.build_orchestrator", return_value=orchestrator):
        result = runner.invoke(app, ["uninstall", "velero", "--namespace", "velero"])

    assert result.exit_code == 1


def test_cancel_after_sets_event():
    with cancel_after(0.01) as cancel:
        assert cancel.wait(5)


def test_cancel_after_without_timeout():
    with cancel_after(None) as cancel:
        assert isinstance(cancel, threading.Event)
        assert not cancel.is_set()
