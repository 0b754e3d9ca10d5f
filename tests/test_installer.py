"""Tests for InstallExecutor step sequencing."""
import threading

import pytest

from tests.fakes import FakeBackups, FakeObjectStorage, FakePackages
from velero_manager.cleanup import CleanupExecutor
from velero_manager.errors import (
    CancellationError,
    CollaboratorError,
    FatalInstallStepError,
    RetryExhaustedError,
)
from velero_manager.inspector import StatusInspector
from velero_manager.installer import InstallExecutor
from velero_manager.models import InstallResult, InstallStatus, Strategy


def make_executor(cluster, packages, backups, object_storage, config):
    inspector = StatusInspector(cluster, packages, config)
    cleanup = CleanupExecutor(cluster, packages, config)
    return InstallExecutor(cluster, packages, backups, object_storage, inspector, cleanup, config)


@pytest.fixture
def executor(cluster, packages, backups, object_storage, config):
    return make_executor(cluster, packages, backups, object_storage, config)


def run(executor, request, strategy=Strategy.FRESH_INSTALL, cancel=None):
    result = InstallResult(namespace=request.namespace, force=request.force)
    return executor.execute(request, strategy, result, cancel)


def test_fresh_install_runs_every_step(executor, request_for, cluster, packages, backups, object_storage):
    result = run(executor, request_for())

    assert result.status is InstallStatus.SUCCESS
    assert result.message == "Velero installed successfully"
    assert result.storage_connected
    assert result.backup_location == "minio"
    for step in ("namespace", "credentials_secret", "namespace_verification", "package",
                 "readiness", "backup_storage_location", "storage_validation"):
        assert result.details[step]["status"] == "ok", step
    assert result.details["package"]["action"] == "installed"
    assert result.details["strategy"] == "fresh_install"

    assert "velero" in cluster.namespaces
    secret = cluster.secrets[("velero", "cloud-credentials")]
    assert secret == {"cloud": "[default]\naws_access_key_id=minio\naws_secret_access_key=minio123\nregion=minio\n"}
    assert packages.releases == {"velero": "velero"}
    manifest = backups.locations[("velero", "minio")]
    assert manifest["spec"]["default"] is True
    assert manifest["spec"]["objectStorage"] == {"bucket": "velero", "prefix": "backups"}
    assert object_storage.configs[0].endpoint == "minio.minio:9000"


def test_install_passes_chart_and_values(executor, request_for, packages, config):
    run(executor, request_for(namespace="backup"))

    name, chart, version, namespace, values = packages.args_of("install")[0]
    assert (name, chart, version, namespace) == ("velero", config.chart_url, config.chart_version, "backup")
    assert values["credentials"] == {"useSecret": True, "existingSecret": "cloud-credentials"}
    location = values["configuration"]["backupStorageLocation"][0]
    assert location["config"]["s3Url"] == "http://minio.minio:9000"


def test_ensure_namespace_is_idempotent(executor, cluster):
    executor.ensure_namespace("velero")
    executor.ensure_namespace("velero")

    assert cluster.count("create_namespace") == 1
    assert cluster.namespaces == {"velero": "Active"}


def test_existing_secret_is_kept(executor, request_for, cluster):
    cluster.namespaces["velero"] = "Active"
    cluster.secrets[("velero", "cloud-credentials")] = {"cloud": "existing"}

    run(executor, request_for())

    assert cluster.count("create_secret") == 0
    assert cluster.secrets[("velero", "cloud-credentials")] == {"cloud": "existing"}


def test_existing_release_is_upgraded(executor, request_for, packages):
    packages.releases["velero"] = "velero"

    result = run(executor, request_for())

    assert packages.count("upgrade") == 1
    assert result.details["package"]["action"] == "upgraded"


def test_package_failure_is_fatal(executor, request_for, packages, backups, config):
    """Chart install failure stops the sequence after the configured attempts."""
    packages.fail("install", CollaboratorError("helm install", "chart not reachable"))

    with pytest.raises(FatalInstallStepError) as exc_info:
        run(executor, request_for())

    assert exc_info.value.operation == "package"
    assert isinstance(exc_info.value.__cause__, RetryExhaustedError)
    assert packages.count("install") == config.package_retry_attempts
    assert backups.calls == []


def test_transient_package_failure_is_retried(executor, request_for, packages):
    packages.fail("install", CollaboratorError("helm install", "timeout"), times=2)

    result = run(executor, request_for())

    assert packages.count("install") == 3
    assert result.details["package"]["status"] == "ok"


def test_secret_failure_is_a_warning(executor, request_for, cluster, config):
    cluster.fail("create_secret", CollaboratorError("create secret", "forbidden"))

    result = run(executor, request_for())

    assert result.status is InstallStatus.SUCCESS
    assert result.details["credentials_secret"]["status"] == "warning"
    assert result.details["credentials_secret"]["kind"] == "RetryExhaustedError"
    assert cluster.count("create_secret") == config.retry_attempts
    assert result.details["package"]["status"] == "ok"
    assert "credentials_secret" in result.message


def test_missing_credentials_are_warnings(executor, request_for, cluster):
    result = run(executor, request_for(access_key="", secret_key=""))

    assert result.details["credentials_secret"]["kind"] == "ValueError"
    assert result.details["storage_validation"]["kind"] == "ValueError"
    assert not result.storage_connected
    assert cluster.count("create_secret") == 0


def test_readiness_timeout_is_recorded(cluster, backups, object_storage, config, request_for):
    packages = FakePackages(cluster, start_pods=False)
    executor = make_executor(cluster, packages, backups, object_storage, config)

    result = run(executor, request_for())

    assert result.status is InstallStatus.SUCCESS
    assert result.details["readiness"]["status"] == "warning"
    assert result.details["readiness"]["kind"] == "ReadinessTimeoutError"
    assert result.details["backup_storage_location"]["status"] == "ok"


def test_unavailable_location_is_explained(cluster, packages, object_storage, config, request_for):
    backups = FakeBackups(phase="Unavailable", message="rpc error: dial tcp: connection refused")
    executor = make_executor(cluster, packages, backups, object_storage, config)

    result = run(executor, request_for())

    validation = result.details["storage_validation"]
    assert validation["status"] == "warning"
    assert "BackupStorageLocation 'minio' is unavailable: Cannot connect to object storage server" in validation["error"]
    assert "Try:" in validation["error"]
    assert result.storage_connected


def test_unreachable_object_store(cluster, packages, backups, config, request_for):
    object_storage = FakeObjectStorage()
    object_storage.fail("list_buckets", CollaboratorError("list buckets", "connection refused"))
    executor = make_executor(cluster, packages, backups, object_storage, config)

    result = run(executor, request_for())

    assert not result.storage_connected
    assert result.details["storage_validation"]["kind"] == "CollaboratorError"
    assert backups.count("list_backup_storage_locations") == 0


def test_existing_storage_location_is_success(executor, request_for, backups):
    request = request_for()
    run(executor, request)

    result = run(executor, request)

    assert backups.count("create_backup_storage_location") == 2
    assert result.details["backup_storage_location"]["status"] == "ok"


def test_skip_install_mutates_nothing(executor, request_for, cluster, packages, backups, object_storage):
    result = run(executor, request_for(), strategy=Strategy.SKIP_INSTALL)

    assert result.status is InstallStatus.SUCCESS
    assert result.message == "Velero is already installed and healthy"
    assert cluster.calls == packages.calls == backups.calls == object_storage.calls == []


def test_force_reinstall_cleans_up_first(executor, request_for, cluster, packages):
    cluster.namespaces["velero"] = "Active"
    packages.releases["velero"] = "velero"
    cluster.run_velero("velero")

    result = run(executor, request_for(force=True), strategy=Strategy.FORCE_REINSTALL)

    assert set(result.details["force_cleanup"].values()) == {"ok"}
    assert packages.args_of("uninstall")[0] == ("velero", "velero")
    assert cluster.count("delete_namespace") == 1
    assert cluster.count("create_namespace") == 1
    assert packages.count("install") == 1
    first_install = next(i for i, (name, _) in enumerate(packages.calls) if name == "install")
    last_uninstall = max(i for i, (name, _) in enumerate(packages.calls) if name == "uninstall")
    assert last_uninstall < first_install


def test_force_cleanup_failures_do_not_stop_install(executor, request_for, cluster, packages):
    cluster.fail("delete_crd", CollaboratorError("delete crd", "forbidden"))

    result = run(executor, request_for(force=True), strategy=Strategy.FORCE_REINSTALL)

    cleanup = result.details["force_cleanup"]
    assert cleanup["release_uninstall"] != "ok"
    assert cleanup["crd_delete"] != "ok"
    assert result.status is InstallStatus.SUCCESS
    assert packages.count("install") == 1


def test_cancel_after_chart_install_returns_result(executor, request_for, packages, backups):
    cancel = threading.Event()
    packages.on("install", lambda *args: cancel.set())
    request = request_for()
    result = InstallResult(namespace=request.namespace, force=False)

    returned = executor.execute(request, Strategy.FRESH_INSTALL, result, cancel)

    assert returned is result
    assert result.status is InstallStatus.SUCCESS
    assert result.message == "Velero install cancelled during readiness"
    assert result.details["package"]["status"] == "ok"
    assert result.details["readiness"]["status"] == "cancelled"
    assert result.details["readiness"]["kind"] == "CancellationError"
    assert "backup_storage_location" not in result.details
    assert "storage_validation" not in result.details
    assert backups.calls == []


def test_cancel_during_chart_install_raises(executor, request_for, packages):
    cancel = threading.Event()

    def refuse_and_cancel(*args):
        cancel.set()
        raise CollaboratorError("helm install", "timed out waiting for the condition")

    packages.on("install", refuse_and_cancel)
    request = request_for()
    result = InstallResult(namespace=request.namespace, force=False)

    with pytest.raises(CancellationError):
        executor.execute(request, Strategy.FRESH_INSTALL, result, cancel)

    assert packages.count("install") == 1
    assert "package" not in result.details
    assert result.status is InstallStatus.IN_PROGRESS


def test_cancel_during_force_cleanup_skips_install(executor, request_for, cluster, packages):
    cluster.namespaces["velero"] = "Active"
    packages.releases["velero"] = "velero"
    cancel = threading.Event()
    cluster.on("delete_namespace", lambda *args: cancel.set())
    request = request_for(force=True)
    result = InstallResult(namespace=request.namespace, force=True)

    executor.execute(request, Strategy.FORCE_REINSTALL, result, cancel)

    assert result.details["force_cleanup"]["status"] == "cancelled"
    assert result.message == "Velero install cancelled during force_cleanup"
    assert cluster.count("delete_crd") == 0
    assert packages.count("install") == 0


def test_terminating_namespace_fails_verification(executor, cluster, config):
    cluster.namespaces["velero"] = "Terminating"

    with pytest.raises(RetryExhaustedError) as exc_info:
        executor.verify_namespace("velero")

    assert exc_info.value.attempts == config.namespace_verify_attempts
    assert cluster.count("get_namespace") == config.namespace_verify_attempts
    assert "Terminating" in str(exc_info.value.__cause__)


def test_terminating_namespace_is_a_verification_warning(executor, request_for, cluster):
    cluster.namespaces["velero"] = "Terminating"

    result = run(executor, request_for())

    assert result.details["namespace"]["status"] == "warning"
    assert result.details["namespace_verification"]["status"] == "warning"
    assert "namespace_verification" in result.message
