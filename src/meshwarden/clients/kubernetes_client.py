"""Kubernetes client for cluster operations."""

from datetime import datetime, timezone
from typing import Any

import yaml
from kubernetes import client, config, dynamic
from kubernetes.client.exceptions import ApiException
from kubernetes.client.models import V1Namespace, V1Pod, V1ReplicaSet
from kubernetes.dynamic.exceptions import NotFoundError, ResourceNotFoundError

from meshwarden.core.exceptions import ConflictError, KubernetesError
from meshwarden.utils.logging import get_logger

logger = get_logger(__name__)

RESTART_ANNOTATION = "kubectl.kubernetes.io/restartedAt"


class KubernetesClient:
    """Kubernetes client wrapper."""

    def __init__(self, kubeconfig_path: str | None = None, context: str | None = None):
        """Initialize Kubernetes client.

        Args:
            kubeconfig_path: Path to kubeconfig file (optional)
            context: Kubernetes context to use (optional)
        """
        try:
            if kubeconfig_path:
                config.load_kube_config(config_file=kubeconfig_path, context=context)
            else:
                # Try to load from default location or in-cluster config
                try:
                    config.load_kube_config(context=context)
                except config.ConfigException:
                    config.load_incluster_config()

            self.core_v1 = client.CoreV1Api()
            self.apps_v1 = client.AppsV1Api()
            self._dynamic: dynamic.DynamicClient | None = None

            logger.debug("k8s_client_initialized", context=context)

        except Exception as e:
            logger.error("k8s_client_initialization_failed", error=str(e))
            raise KubernetesError("Failed to initialize Kubernetes client") from e

    @property
    def dynamic_client(self) -> dynamic.DynamicClient:
        """Get or create the dynamic client lazily."""
        if self._dynamic is None:
            self._dynamic = dynamic.DynamicClient(client.ApiClient())
        return self._dynamic

    def get_namespaces(self, label_selector: str | None = None) -> list[V1Namespace]:
        """List namespaces, optionally filtered by a label selector.

        Raises:
            KubernetesError: If the API call fails
        """
        try:
            namespaces = self.core_v1.list_namespace(label_selector=label_selector).items
        except ApiException as e:
            logger.error("namespace_list_failed", selector=label_selector, status=e.status)
            raise KubernetesError(f"Failed to get namespaces: {e.reason}") from e
        except Exception as e:
            logger.error("namespace_list_failed", selector=label_selector, error=str(e))
            raise KubernetesError(f"Failed to get namespaces: {e}") from e

        logger.debug("namespaces_listed", selector=label_selector, count=len(namespaces))
        return namespaces

    def patch_namespace(self, name: str, body: dict[str, Any]) -> V1Namespace:
        """Apply a merge patch to a namespace.

        Args:
            name: Namespace name
            body: Merge patch body

        Returns:
            Patched V1Namespace

        Raises:
            ConflictError: If the namespace was modified concurrently
            KubernetesError: If the patch fails
        """
        try:
            namespace = self.core_v1.patch_namespace(name=name, body=body)
            logger.debug("namespace_patched", name=name)
            return namespace

        except ApiException as e:
            if e.status == 409:
                logger.warning("namespace_patch_conflict", name=name)
                raise ConflictError(f"Namespace {name} was modified concurrently") from e

            logger.error("patch_namespace_failed", name=name, status=e.status, reason=e.reason)
            raise KubernetesError(f"Failed to patch namespace {name}: {e.reason}") from e
        except Exception as e:
            logger.error("patch_namespace_failed", name=name, error=str(e))
            raise KubernetesError(f"Failed to patch namespace {name}: {e}") from e

    def delete_namespace(self, name: str, propagation_policy: str = "Foreground") -> bool:
        """Delete a namespace.

        Args:
            name: Namespace name
            propagation_policy: Deletion propagation policy

        Returns:
            True if deletion was requested, False if the namespace did not exist

        Raises:
            KubernetesError: If deletion fails
        """
        try:
            logger.info("deleting_namespace", name=name)
            self.core_v1.delete_namespace(
                name=name,
                body=client.V1DeleteOptions(propagation_policy=propagation_policy),
            )
            return True

        except ApiException as e:
            if e.status == 404:
                logger.warning("namespace_not_found", name=name)
                return False

            logger.error("delete_namespace_failed", name=name, status=e.status, reason=e.reason)
            raise KubernetesError(f"Failed to delete namespace {name}: {e.reason}") from e
        except Exception as e:
            logger.error("delete_namespace_failed", name=name, error=str(e))
            raise KubernetesError(f"Failed to delete namespace {name}: {e}") from e

    def get_pods(self, namespace: str, label_selector: str | None = None) -> list[V1Pod]:
        """List pods of one namespace.

        Raises:
            KubernetesError: If the API call fails
        """
        try:
            pods = self.core_v1.list_namespaced_pod(
                namespace=namespace, label_selector=label_selector
            ).items
        except ApiException as e:
            logger.error("pod_list_failed", namespace=namespace, status=e.status)
            raise KubernetesError(f"Failed to get pods in {namespace}: {e.reason}") from e
        except Exception as e:
            logger.error("pod_list_failed", namespace=namespace, error=str(e))
            raise KubernetesError(f"Failed to get pods in {namespace}: {e}") from e

        logger.debug("pods_listed", namespace=namespace, selector=label_selector, count=len(pods))
        return pods

    def get_all_pods(self, label_selector: str | None = None) -> list[V1Pod]:
        """List pods across all namespaces.

        Raises:
            KubernetesError: If the API call fails
        """
        try:
            pods = self.core_v1.list_pod_for_all_namespaces(label_selector=label_selector).items
        except ApiException as e:
            logger.error("pod_list_failed", status=e.status)
            raise KubernetesError(f"Failed to get pods: {e.reason}") from e
        except Exception as e:
            logger.error("pod_list_failed", error=str(e))
            raise KubernetesError(f"Failed to get pods: {e}") from e

        logger.debug("pods_listed", selector=label_selector, count=len(pods))
        return pods

    def get_replica_set(self, name: str, namespace: str) -> V1ReplicaSet:
        """Get a replica set.

        Raises:
            KubernetesError: If the replica set cannot be retrieved
        """
        try:
            return self.apps_v1.read_namespaced_replica_set(name=name, namespace=namespace)
        except ApiException as e:
            logger.error(
                "get_replica_set_failed", name=name, namespace=namespace, status=e.status
            )
            raise KubernetesError(f"Failed to get replica set {name}: {e.reason}") from e
        except Exception as e:
            logger.error("get_replica_set_failed", name=name, namespace=namespace, error=str(e))
            raise KubernetesError(f"Failed to get replica set {name}: {e}") from e

    @staticmethod
    def _restart_body() -> dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        return {"spec": {"template": {"metadata": {"annotations": {RESTART_ANNOTATION: now}}}}}

    def restart_workload(self, kind: str, name: str, namespace: str) -> None:
        """Trigger a rollout of a Deployment, StatefulSet or DaemonSet.

        The pod template is annotated the same way ``kubectl rollout restart``
        does, so the controller replaces every pod.

        Raises:
            ValueError: If the kind cannot be restarted
            KubernetesError: If the patch fails
        """
        patchers = {
            "Deployment": self.apps_v1.patch_namespaced_deployment,
            "StatefulSet": self.apps_v1.patch_namespaced_stateful_set,
            "DaemonSet": self.apps_v1.patch_namespaced_daemon_set,
        }
        if kind not in patchers:
            raise ValueError(f"Cannot restart workloads of kind {kind}")

        logger.info("workload_rollout_requested", kind=kind, name=name, namespace=namespace)
        try:
            patchers[kind](name=name, namespace=namespace, body=self._restart_body())
        except ApiException as e:
            logger.error(
                "workload_rollout_failed",
                kind=kind,
                name=name,
                namespace=namespace,
                status=e.status,
            )
            raise KubernetesError(f"Failed to restart {kind} {namespace}/{name}: {e.reason}") from e
        except Exception as e:
            logger.error(
                "workload_rollout_failed", kind=kind, name=name, namespace=namespace, error=str(e)
            )
            raise KubernetesError(f"Failed to restart {kind} {namespace}/{name}: {e}") from e

    def delete_manifest(self, manifest: str, namespace: str) -> int:
        """Delete every resource of a multi-document manifest from a namespace.

        Resources that do not exist (or whose kind is unknown to the cluster)
        are skipped.

        Args:
            manifest: Multi-document YAML manifest
            namespace: Namespace for namespaced resources

        Returns:
            Number of resources deleted

        Raises:
            KubernetesError: If the manifest is invalid or a deletion fails
        """
        try:
            documents = [doc for doc in yaml.safe_load_all(manifest) if doc]
        except yaml.YAMLError as e:
            raise KubernetesError(f"Invalid manifest: {e}") from e

        deleted = 0
        for doc in documents:
            api_version = doc.get("apiVersion")
            kind = doc.get("kind")
            name = doc.get("metadata", {}).get("name")

            try:
                resource = self.dynamic_client.resources.get(api_version=api_version, kind=kind)
                if resource.namespaced:
                    resource.delete(name=name, namespace=namespace)
                else:
                    resource.delete(name=name)
                deleted += 1
                logger.debug("resource_deleted", kind=kind, name=name, namespace=namespace)

            except (NotFoundError, ResourceNotFoundError):
                logger.debug("resource_already_absent", kind=kind, name=name, namespace=namespace)
            except ApiException as e:
                logger.error("resource_delete_failed", kind=kind, name=name, status=e.status)
                raise KubernetesError(f"Failed to delete {kind} {name}: {e.reason}") from e
            except Exception as e:
                logger.error("resource_delete_failed", kind=kind, name=name, error=str(e))
                raise KubernetesError(f"Failed to delete {kind} {name}: {e}") from e

        logger.info("manifest_resources_deleted", namespace=namespace, count=deleted)
        return deleted
