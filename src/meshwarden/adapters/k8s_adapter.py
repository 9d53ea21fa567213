"""Kubernetes adapters implementing the collaborator interfaces."""

from meshwarden.clients.kubernetes_client import KubernetesClient
from meshwarden.core.config import RetryConfig
from meshwarden.core.exceptions import ConflictError, KubernetesError
from meshwarden.core.version import version_from_image
from meshwarden.interfaces.exceptions import (
    NamespaceStoreError,
    ResourceCleanerError,
    StatusGathererError,
)
from meshwarden.interfaces.namespace_store import NamespaceSnapshot, NamespaceStore
from meshwarden.interfaces.resource_cleaner import ResourceCleaner
from meshwarden.interfaces.status_gatherer import StatusGatherer
from meshwarden.services.istio.manifest import without_istio_operator
from meshwarden.utils.logging import get_logger
from meshwarden.utils.retry import fixed_delay_retrying

logger = get_logger(__name__)


class KubernetesNamespaceStore(NamespaceStore):
    """Namespace store backed by the Kubernetes API.

    Conflicts are passed through as ConflictError so callers can retry them.
    """

    def __init__(self, client: KubernetesClient):
        """Initialize namespace store.

        Args:
            client: Kubernetes client
        """
        self.client = client

    def list(self) -> list[NamespaceSnapshot]:
        try:
            namespaces = self.client.get_namespaces()
        except KubernetesError as e:
            raise NamespaceStoreError(f"Failed to list namespaces: {e}") from e

        return [
            NamespaceSnapshot(name=ns.metadata.name, labels=dict(ns.metadata.labels or {}))
            for ns in namespaces
        ]

    def patch(self, name: str, body: dict) -> None:
        try:
            self.client.patch_namespace(name, body)
        except ConflictError:
            raise
        except KubernetesError as e:
            raise NamespaceStoreError(f"Failed to patch namespace {name}: {e}") from e


class KubernetesStatusGatherer(StatusGatherer):
    """Reads the running control plane version from the istiod pods.

    The version is polled until every istiod pod runs the same proxy image
    version, bounded by the retry budget.
    """

    def __init__(
        self,
        client: KubernetesClient,
        namespace: str = "istio-system",
        label_selector: str = "app=istiod",
        retry: RetryConfig | None = None,
    ):
        """Initialize status gatherer.

        Args:
            client: Kubernetes client
            namespace: Istio control plane namespace
            label_selector: Selector matching istiod pods
            retry: Retry budget for polling
        """
        self.client = client
        self.namespace = namespace
        self.label_selector = label_selector
        self.retry = retry or RetryConfig()

    def _read_version(self) -> str:
        try:
            pods = self.client.get_pods(namespace=self.namespace, label_selector=self.label_selector)
        except KubernetesError as e:
            raise StatusGathererError(f"Failed to list istiod pods: {e}") from e

        versions = set()
        for pod in pods:
            if pod.metadata.deletion_timestamp is not None:
                continue
            for container in pod.spec.containers:
                version = version_from_image(container.image)
                if version:
                    versions.add(version)

        if not versions:
            raise StatusGathererError(f"No istiod pods found in {self.namespace}")
        if len(versions) > 1:
            raise StatusGathererError(
                f"istiod pods run different versions: {', '.join(sorted(versions))}"
            )

        return versions.pop()

    def installed_version(self) -> str:
        retrying = fixed_delay_retrying(
            exceptions=(StatusGathererError,),
            max_attempts=self.retry.attempts,
            delay=self.retry.delay_seconds,
            timeout=self.retry.timeout_seconds,
        )
        version = retrying(self._read_version)

        logger.info("istio_installed_version_gathered", version=version)
        return version


class ManifestResourceCleaner(ResourceCleaner):
    """Deletes the non-operator resources of the rendered Istio manifest."""

    def __init__(self, client: KubernetesClient, manifest: str, namespaces: list[str]):
        """Initialize resource cleaner.

        Args:
            client: Kubernetes client
            manifest: Rendered Istio chart manifest
            namespaces: Namespaces to delete resources from, in order
        """
        self.client = client
        self.manifest = manifest
        self.namespaces = namespaces

    def remove_related_resources(self) -> None:
        related = without_istio_operator(self.manifest)
        if not related:
            logger.debug("no_related_resources")
            return

        # Each namespace needs its own pass
        for namespace in self.namespaces:
            logger.debug("undeploying_related_resources", namespace=namespace)
            try:
                self.client.delete_manifest(related, namespace)
            except KubernetesError as e:
                raise ResourceCleanerError(
                    f"Failed to remove related resources from {namespace}: {e}"
                ) from e
