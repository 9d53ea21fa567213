"""Restart of workloads whose Istio sidecars run an outdated proxy image."""

from dataclasses import dataclass

from kubernetes.client.models import V1Pod

from meshwarden.clients.kubernetes_client import KubernetesClient
from meshwarden.core.exceptions import KubernetesError
from meshwarden.core.models import ProxyResetConfig
from meshwarden.core.version import SemanticVersion, version_from_image
from meshwarden.utils.logging import get_logger
from meshwarden.utils.retry import fixed_delay_retrying

logger = get_logger(__name__)

PROXY_CONTAINER = "istio-proxy"


@dataclass(frozen=True)
class Workload:
    """Workload owning one or more pods."""

    kind: str
    namespace: str
    name: str


class ProxyResetter:
    """Finds pods with outdated sidecars and rolls out their workloads."""

    def __init__(
        self,
        client: KubernetesClient,
        injection_label: str = "istio-injection",
        excluded_namespaces: tuple[str, ...] = ("istio-system", "kube-system"),
    ):
        """Initialize proxy resetter.

        Args:
            client: Kubernetes client
            injection_label: Namespace label controlling sidecar injection
            excluded_namespaces: Namespaces whose pods are never restarted
        """
        self.client = client
        self.injection_label = injection_label
        self.excluded_namespaces = excluded_namespaces

    def _injected_namespaces(self, by_default: bool) -> set[str]:
        injected = set()
        for namespace in self.client.get_namespaces():
            name = namespace.metadata.name
            if name in self.excluded_namespaces:
                continue

            value = (namespace.metadata.labels or {}).get(self.injection_label)
            if value == "enabled" or (by_default and value != "disabled"):
                injected.add(name)

        return injected

    @staticmethod
    def _has_outdated_proxy(pod: V1Pod, config: ProxyResetConfig) -> bool:
        expected = SemanticVersion.parse(config.image_version)

        for container in pod.spec.containers:
            if container.name != PROXY_CONTAINER:
                continue

            if config.image_prefix and not container.image.startswith(config.image_prefix):
                return True

            actual = version_from_image(container.image)
            if actual is None:
                return True
            return SemanticVersion.parse(actual).major_minor_patch != expected.major_minor_patch

        return False

    def outdated_pods(self, config: ProxyResetConfig) -> list[V1Pod]:
        """Get pods in injected namespaces whose proxy image differs from the target.

        Raises:
            KubernetesError: If namespaces or pods cannot be listed
            VersionParseError: If the target image version is malformed
        """
        injected = self._injected_namespaces(config.sidecar_injection_by_default)

        return [
            pod
            for pod in self.client.get_all_pods()
            if pod.metadata.namespace in injected and self._has_outdated_proxy(pod, config)
        ]

    def _owner_workload(self, pod: V1Pod) -> Workload | None:
        owners = pod.metadata.owner_references or []
        if not owners:
            return None

        owner = owners[0]
        namespace = pod.metadata.namespace

        if owner.kind == "ReplicaSet":
            replica_set = self.client.get_replica_set(owner.name, namespace)
            rs_owners = replica_set.metadata.owner_references or []
            if rs_owners and rs_owners[0].kind == "Deployment":
                return Workload("Deployment", namespace, rs_owners[0].name)
            return None

        if owner.kind in ("StatefulSet", "DaemonSet"):
            return Workload(owner.kind, namespace, owner.name)

        return None

    def _restart(self, workload: Workload) -> None:
        self.client.restart_workload(workload.kind, workload.name, workload.namespace)

    def run(self, config: ProxyResetConfig) -> list[Workload]:
        """Restart every workload with an outdated sidecar.

        Args:
            config: Target proxy image and retry budget

        Returns:
            Workloads that were restarted

        Raises:
            KubernetesError: If pods cannot be listed or a restart keeps failing
        """
        logger.info(
            "proxy_reset_started",
            image_prefix=config.image_prefix,
            image_version=config.image_version,
        )

        workloads: list[Workload] = []
        for pod in self.outdated_pods(config):
            workload = self._owner_workload(pod)
            if workload is None:
                logger.warning(
                    "proxy_reset_pod_without_workload",
                    pod=pod.metadata.name,
                    namespace=pod.metadata.namespace,
                )
                continue
            if workload not in workloads:
                workloads.append(workload)

        retrying = fixed_delay_retrying(
            exceptions=(KubernetesError,),
            max_attempts=config.retries_count,
            delay=config.delay_between_retries,
            timeout=config.timeout,
        )
        for workload in workloads:
            retrying(self._restart, workload)

        logger.info("proxy_reset_completed", restarted=len(workloads))
        return workloads
