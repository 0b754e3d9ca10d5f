"""Tests for OrchestratorConfig and the dependency manifest."""
import pytest
from pydantic import ValidationError

from velero_manager.config import OrchestratorConfig
from velero_manager.constants import VELERO_CHART_URL, VELERO_CHART_VERSION, VELERO_CRDS, dep_value


def test_defaults(monkeypatch):
    monkeypatch.delenv("VELERO_RETRY_ATTEMPTS", raising=False)
    cfg = OrchestratorConfig()

    assert cfg.release_name == "velero"
    assert cfg.chart_version == VELERO_CHART_VERSION == "11.1.0"
    assert cfg.chart_url == VELERO_CHART_URL
    assert cfg.chart_url.endswith("velero-11.1.0.tgz")
    assert cfg.retry_attempts == 3
    assert cfg.retry_delay_seconds == 2.0
    assert cfg.package_retry_delay_seconds == 5.0
    assert cfg.namespace_verify_attempts == 5
    assert cfg.readiness_interval_seconds == 10.0
    assert cfg.readiness_timeout_seconds == 300.0
    assert cfg.uninstall_fallback_namespaces == ["velero", "default"]
    assert cfg.release_secret_namespaces == ["velero", "default", "kube-system"]
    assert cfg.crd_names == list(VELERO_CRDS)
    assert len(cfg.crd_names) == 9


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("VELERO_RETRY_ATTEMPTS", "5")
    monkeypatch.setenv("VELERO_READINESS_TIMEOUT_SECONDS", "60")
    monkeypatch.setenv("VELERO_UNINSTALL_FALLBACK_NAMESPACES", '["backup"]')

    cfg = OrchestratorConfig()

    assert cfg.retry_attempts == 5
    assert cfg.readiness_timeout_seconds == 60.0
    assert cfg.uninstall_fallback_namespaces == ["backup"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"retry_attempts": 0},
        {"retry_attempts": 21},
        {"readiness_timeout_seconds": 0},
        {"retry_delay_seconds": -1},
        {"chart_version": "latest"},
        {"workload_name_fragment": ""},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        OrchestratorConfig(**overrides)


def test_model_copy_override():
    cfg = OrchestratorConfig()
    updated = cfg.model_copy(update={"readiness_timeout_seconds": 30.0})

    assert updated.readiness_timeout_seconds == 30.0
    assert cfg.readiness_timeout_seconds == 300.0


def test_dep_value_lookup():
    assert dep_value("images", "velero", "tag") == "v1.17.0"
    assert dep_value("images", "missing", "tag", default="x") == "x"
    assert dep_value("velero_chart", "version", "nested", default=None) is None
