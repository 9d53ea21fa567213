"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from meshwarden.core.config import RetryConfig
from meshwarden.core.models import MeshStatus, SidecarMigration
from meshwarden.interfaces.chart_values import ChartValueSource
from meshwarden.interfaces.performer import Performer


@pytest.fixture
def make_status() -> Callable[..., MeshStatus]:
    """Build MeshStatus snapshots with sensible defaults."""

    def _make(
        client: str = "1.2.0",
        target: str = "1.2.0",
        pilot: str = "",
        data_plane: tuple[str, ...] = (),
        prefix: str = "eu.gcr.io/kyma-project/external/istio",
    ) -> MeshStatus:
        return MeshStatus(
            client_version=client,
            target_version=target,
            target_prefix=prefix,
            pilot_version=pilot,
            data_plane_versions=frozenset(data_plane),
        )

    return _make


@pytest.fixture
def fast_retry() -> RetryConfig:
    """Retry budget without waiting."""
    return RetryConfig(
        attempts=3,
        delay_seconds=0,
        conflict_delay_seconds=0,
        timeout_seconds=5,
    )


@pytest.fixture
def mock_performer() -> MagicMock:
    """Mock performer for testing."""
    return MagicMock(spec=Performer)


@pytest.fixture
def mock_chart_values() -> MagicMock:
    """Mock chart value source with migration enabled."""
    chart_values = MagicMock(spec=ChartValueSource)
    chart_values.target_version.return_value = "1.2.0"
    chart_values.target_prefix.return_value = "eu.gcr.io/kyma-project/external/istio"
    chart_values.sidecar_migration.return_value = SidecarMigration.ENABLED
    chart_values.inject_namespaces_by_default.return_value = False
    return chart_values


@pytest.fixture
def mock_kubernetes_client() -> MagicMock:
    """Mock Kubernetes client for testing."""
    return MagicMock()
