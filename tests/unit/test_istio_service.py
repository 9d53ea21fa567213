"""Unit tests for IstioService facade."""

from unittest.mock import patch

import pytest

from meshwarden.adapters.k8s_adapter import ManifestResourceCleaner
from meshwarden.core.config import MeshWardenConfig
from meshwarden.core.exceptions import ConfigurationError
from meshwarden.core.models import Phase
from meshwarden.services.istio.istio_service import IstioService
from meshwarden.services.istio.performer import IstioctlPerformer


@pytest.fixture
def config(tmp_path) -> MeshWardenConfig:
    manifest = tmp_path / "manifest.yaml"
    manifest.write_text("kind: IstioOperator\nmetadata:\n  name: installed-state\n")
    return MeshWardenConfig(
        istio={
            "chart_path": str(tmp_path),
            "manifest_path": str(manifest),
            "istioctl_binaries": {"1.20": "/bin/istioctl-1.20"},
            "reserved_namespace": "kube-system",
        },
        retry={"attempts": 2},
    )


@pytest.fixture
def istio_service(config, mock_kubernetes_client) -> IstioService:
    """Create IstioService with a mocked Kubernetes client."""
    return IstioService(config, kubernetes=mock_kubernetes_client)


class TestIstioService:
    """Tests for IstioService wiring."""

    def test_service_name(self, istio_service) -> None:
        assert istio_service.service_name == "istio"

    def test_load_manifest(self, istio_service) -> None:
        assert "IstioOperator" in istio_service.load_manifest()

    def test_load_manifest_not_configured(self, config, mock_kubernetes_client) -> None:
        """Test no manifest path means an empty manifest."""
        config.istio.manifest_path = None

        assert IstioService(config, kubernetes=mock_kubernetes_client).load_manifest() == ""

    def test_load_manifest_missing(self, config, mock_kubernetes_client, tmp_path) -> None:
        """Test a configured but absent manifest is a configuration error."""
        config.istio.manifest_path = str(tmp_path / "absent.yaml")

        with pytest.raises(ConfigurationError, match="Manifest file not found"):
            IstioService(config, kubernetes=mock_kubernetes_client).load_manifest()

    def test_build_performer(self, istio_service, mock_kubernetes_client) -> None:
        """Test the performer is wired from configuration."""
        performer = istio_service.build_performer()

        assert isinstance(performer, IstioctlPerformer)
        assert performer.kubernetes is mock_kubernetes_client
        assert performer.resolver.binaries == {"1.20": "/bin/istioctl-1.20"}
        assert performer.label_reconciler.reserved_namespace == "kube-system"
        assert performer.label_reconciler.retry.attempts == 2
        assert performer.istio_namespace == "istio-system"
        assert "IstioOperator" in performer.manifest

    def test_action_context(self, istio_service) -> None:
        context = istio_service.action_context()

        assert isinstance(context.resource_cleaner, ManifestResourceCleaner)
        assert context.resource_cleaner.namespaces == ["kyma-system", "istio-system"]
        assert context.retry.attempts == 2
        assert context.chart_values is istio_service.chart_values

    @pytest.mark.parametrize(
        "phase,action_name",
        [
            (Phase.PRE_CHECK, "StatusPreAction"),
            (Phase.RECONCILE, "MainReconcileAction"),
            (Phase.POST_RESET, "ProxyResetPostAction"),
            (Phase.UNINSTALL, "UninstallAction"),
        ],
    )
    def test_run_phase_dispatches(self, istio_service, phase, action_name) -> None:
        """Test each phase runs its action with a fresh performer factory."""
        with patch(f"meshwarden.services.istio.istio_service.{action_name}") as action_class:
            action_class.return_value.run.return_value = "result"

            assert istio_service.run_phase(phase) == "result"

        action_class.assert_called_once_with(istio_service.build_performer)
        action_class.return_value.run.assert_called_once()

    def test_kubernetes_client_created_lazily(self, config) -> None:
        """Test the client is only created on first use."""
        with patch("meshwarden.services.istio.istio_service.KubernetesClient") as client_class:
            service = IstioService(config)
            client_class.assert_not_called()

            assert service.kubernetes is client_class.return_value
            assert service.kubernetes is client_class.return_value

        client_class.assert_called_once_with(kubeconfig_path=None, context=None)
