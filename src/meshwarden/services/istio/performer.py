"""Default performer driving Istio through istioctl and the Kubernetes API."""

from meshwarden.clients.istioctl import IstioctlResolver
from meshwarden.clients.kubernetes_client import KubernetesClient
from meshwarden.core.exceptions import VersionMismatchError
from meshwarden.core.models import MeshStatus, ProxyResetConfig, SidecarMigration
from meshwarden.core.version import SemanticVersion
from meshwarden.interfaces.chart_values import ChartValueSource
from meshwarden.interfaces.performer import Performer
from meshwarden.interfaces.status_gatherer import StatusGatherer
from meshwarden.reconciler.namespace_labels import NamespaceLabelReconciler
from meshwarden.services.istio.manifest import extract_istio_operator
from meshwarden.services.istio.proxy_reset import ProxyResetter
from meshwarden.services.istio.version_output import map_version_output
from meshwarden.utils.logging import get_logger

logger = get_logger(__name__)


class IstioctlPerformer(Performer):
    """Performs Istio lifecycle actions.

    The istioctl binary for each operation is picked by the resolver from the
    version being worked with. Install and update are confirmed against the
    version reported by the status gatherer.
    """

    def __init__(
        self,
        resolver: IstioctlResolver,
        kubernetes: KubernetesClient,
        gatherer: StatusGatherer,
        chart_values: ChartValueSource,
        label_reconciler: NamespaceLabelReconciler,
        proxy_resetter: ProxyResetter,
        manifest: str = "",
        istio_namespace: str = "istio-system",
    ):
        """Initialize performer.

        Args:
            resolver: istioctl resolver
            kubernetes: Kubernetes client
            gatherer: Live version gatherer used for convergence checks
            chart_values: Source of the target version and prefix
            label_reconciler: Namespace label reconciler
            proxy_resetter: Sidecar proxy resetter
            manifest: Rendered Istio chart manifest
            istio_namespace: Istio control plane namespace
        """
        self.resolver = resolver
        self.kubernetes = kubernetes
        self.gatherer = gatherer
        self.chart_values = chart_values
        self.label_reconciler = label_reconciler
        self.proxy_resetter = proxy_resetter
        self.manifest = manifest
        self.istio_namespace = istio_namespace

    def _ensure_converged(self, operation: str, target: SemanticVersion) -> None:
        installed = self.gatherer.installed_version()
        installed_version = SemanticVersion.parse(installed)

        if installed_version.major_minor_patch != target.major_minor_patch:
            raise VersionMismatchError(operation, installed, target.major_minor_patch)

    def install(self, target_version: str) -> None:
        logger.debug("istio_installation_starting", version=target_version)

        version = SemanticVersion.parse(target_version)
        operator = extract_istio_operator(self.manifest)

        self.resolver.get_commander(version).install(operator)
        self._ensure_converged("Installed", version)

        logger.info("istio_installed", version=target_version)

    def update(self, target_version: str) -> None:
        logger.debug("istio_update_starting", version=target_version)

        version = SemanticVersion.parse(target_version)
        operator = extract_istio_operator(self.manifest)

        self.resolver.get_commander(version).upgrade(operator)
        self._ensure_converged("Updated", version)

        logger.info("istio_updated", version=target_version)

    def uninstall(self, version: str) -> None:
        logger.debug("istio_uninstallation_starting", version=version)

        self.resolver.get_commander(SemanticVersion.parse(version)).uninstall()
        self.kubernetes.delete_namespace(self.istio_namespace)

        logger.debug("istio_namespace_deleted", namespace=self.istio_namespace)

    def reset_proxies(self, config: ProxyResetConfig) -> None:
        self.proxy_resetter.run(config)

    def version(self) -> MeshStatus:
        target_version = self.chart_values.target_version()
        target_prefix = self.chart_values.target_prefix()

        commander = self.resolver.get_commander(SemanticVersion.parse(target_version))
        return map_version_output(commander.version(), target_version, target_prefix)

    def label_namespaces(self, policy: SidecarMigration) -> None:
        self.label_reconciler.reconcile(policy)
