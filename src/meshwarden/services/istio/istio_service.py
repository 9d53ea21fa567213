"""Istio service facade - single entry point for all Istio reconciliation phases."""

from pathlib import Path

from meshwarden.adapters.chart_adapter import HelmChartValueSource
from meshwarden.adapters.k8s_adapter import (
    KubernetesNamespaceStore,
    KubernetesStatusGatherer,
    ManifestResourceCleaner,
)
from meshwarden.clients.istioctl import IstioctlResolver
from meshwarden.clients.kubernetes_client import KubernetesClient
from meshwarden.core.config import MeshWardenConfig
from meshwarden.core.exceptions import ConfigurationError
from meshwarden.core.models import Phase
from meshwarden.lifecycle.actions import (
    ActionContext,
    MainReconcileAction,
    ProxyResetPostAction,
    StatusPreAction,
    UninstallAction,
)
from meshwarden.reconciler.namespace_labels import NamespaceLabelReconciler
from meshwarden.services.istio.performer import IstioctlPerformer
from meshwarden.services.istio.proxy_reset import ProxyResetter
from meshwarden.utils.logging import get_logger

logger = get_logger(__name__)


class IstioService:
    """Facade wiring configuration, clients and adapters into phase actions.

    The Kubernetes client is created lazily so that commands that never reach
    the cluster do not need credentials.
    """

    def __init__(self, config: MeshWardenConfig, kubernetes: KubernetesClient | None = None):
        """Initialize Istio service.

        Args:
            config: MESHWARDEN configuration
            kubernetes: Kubernetes client (optional, created from config if omitted)
        """
        self.config = config
        self._kubernetes = kubernetes
        self.chart_values = HelmChartValueSource(config.istio.chart_path)
        logger.debug("istio_service_initialized")

    @property
    def kubernetes(self) -> KubernetesClient:
        """Get or create Kubernetes client lazily."""
        if self._kubernetes is None:
            self._kubernetes = KubernetesClient(
                kubeconfig_path=self.config.kubernetes.kubeconfig_path,
                context=self.config.kubernetes.context,
            )
        return self._kubernetes

    def load_manifest(self) -> str:
        """Read the rendered chart manifest, empty if none is configured.

        Raises:
            ConfigurationError: If the configured manifest file is missing
        """
        if not self.config.istio.manifest_path:
            return ""

        path = Path(self.config.istio.manifest_path).expanduser()
        if not path.exists():
            raise ConfigurationError(f"Manifest file not found: {path}")
        return path.read_text()

    def build_performer(self) -> IstioctlPerformer:
        """Build the istioctl performer for one phase."""
        istio = self.config.istio
        retry = self.config.retry

        resolver = IstioctlResolver(
            default_binary=istio.istioctl_path,
            binaries=istio.istioctl_binaries,
            kubeconfig_path=self.config.kubernetes.kubeconfig_path,
            context=self.config.kubernetes.context,
        )

        return IstioctlPerformer(
            resolver=resolver,
            kubernetes=self.kubernetes,
            gatherer=KubernetesStatusGatherer(
                self.kubernetes, namespace=istio.namespace, retry=retry
            ),
            chart_values=self.chart_values,
            label_reconciler=NamespaceLabelReconciler(
                KubernetesNamespaceStore(self.kubernetes),
                retry=retry,
                label=istio.injection_label,
                reserved_namespace=istio.reserved_namespace,
            ),
            proxy_resetter=ProxyResetter(
                self.kubernetes,
                injection_label=istio.injection_label,
                excluded_namespaces=(istio.namespace, istio.reserved_namespace),
            ),
            manifest=self.load_manifest(),
            istio_namespace=istio.namespace,
        )

    def action_context(self) -> ActionContext:
        """Build the context shared by the phase actions."""
        cleaner = ManifestResourceCleaner(
            self.kubernetes,
            manifest=self.load_manifest(),
            namespaces=self.config.istio.related_resource_namespaces,
        )
        return ActionContext(
            chart_values=self.chart_values,
            resource_cleaner=cleaner,
            retry=self.config.retry,
        )

    def run_phase(self, phase: Phase):
        """Run a single reconciliation phase.

        Args:
            phase: Phase to run

        Returns:
            Result of the phase action (MeshStatus for pre-check, Decision otherwise)
        """
        actions = {
            Phase.PRE_CHECK: StatusPreAction,
            Phase.RECONCILE: MainReconcileAction,
            Phase.POST_RESET: ProxyResetPostAction,
            Phase.UNINSTALL: UninstallAction,
        }
        action = actions[phase](self.build_performer)

        logger.info("running_phase", phase=phase.value)
        return action.run(self.action_context())

    @property
    def service_name(self) -> str:
        """Get service name."""
        return "istio"
