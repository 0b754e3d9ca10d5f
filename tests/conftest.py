from dataclasses import replace

import pytest

from tests.fakes import FakeBackups, FakeCluster, FakeObjectStorage, FakePackages
from velero_manager.config import OrchestratorConfig
from velero_manager.models import InstallRequest, StorageConfig
from velero_manager.orchestrator import VeleroOrchestrator


@pytest.fixture
def config():
    return OrchestratorConfig(
        retry_delay_seconds=0,
        package_retry_delay_seconds=0,
        readiness_interval_seconds=0.01,
        readiness_timeout_seconds=0.2,
        stabilization_delay_seconds=0,
        namespace_settle_delay_seconds=0,
    )


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def packages(cluster):
    return FakePackages(cluster)


@pytest.fixture
def backups():
    return FakeBackups()


@pytest.fixture
def object_storage():
    return FakeObjectStorage()


@pytest.fixture
def orchestrator(cluster, packages, backups, object_storage, config):
    return VeleroOrchestrator(cluster, packages, backups, object_storage, config)


@pytest.fixture
def storage():
    return StorageConfig(endpoint="minio.minio:9000", access_key="minio", secret_key="minio123")


@pytest.fixture
def request_for(storage):
    def _build(namespace="velero", force=False, **storage_overrides):
        cfg = storage
        if storage_overrides:
            cfg = replace(storage, **storage_overrides)
        return InstallRequest(storage=cfg, namespace=namespace, force=force)
    return _build
