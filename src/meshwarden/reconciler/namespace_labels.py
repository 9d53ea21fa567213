"""Sidecar injection label reconciliation across namespaces."""

from typing import Any

from meshwarden.core.config import RetryConfig
from meshwarden.core.exceptions import ConflictError
from meshwarden.core.models import SidecarMigration
from meshwarden.interfaces.namespace_store import NamespaceSnapshot, NamespaceStore
from meshwarden.utils.logging import get_logger
from meshwarden.utils.retry import retry_on_conflict

logger = get_logger(__name__)

DEFAULT_INJECTION_LABEL = "istio-injection"
DEFAULT_RESERVED_NAMESPACE = "kube-system"


class NamespaceLabelReconciler:
    """Adds the sidecar injection label to namespaces that do not carry it.

    The reconciler only ever adds the label. Namespaces that already have any
    value for it, including an explicit disable, are left untouched, and the
    reserved system namespace is never patched.
    """

    def __init__(
        self,
        store: NamespaceStore,
        retry: RetryConfig | None = None,
        label: str = DEFAULT_INJECTION_LABEL,
        reserved_namespace: str = DEFAULT_RESERVED_NAMESPACE,
    ):
        """Initialize namespace label reconciler.

        Args:
            store: Namespace store used to list and patch namespaces
            retry: Retry budget for conflicts
            label: Injection label key
            reserved_namespace: Namespace that must never be labeled
        """
        self.store = store
        self.retry = retry or RetryConfig()
        self.label = label
        self.reserved_namespace = reserved_namespace

    @property
    def patch_body(self) -> dict[str, Any]:
        return {"metadata": {"labels": {self.label: "enabled"}}}

    def plan(self, namespaces: list[NamespaceSnapshot]) -> list[str]:
        """Compute the namespaces that need the injection label.

        Args:
            namespaces: Current namespace snapshots

        Returns:
            Names of namespaces to patch, in listing order
        """
        return [
            namespace.name
            for namespace in namespaces
            if namespace.name != self.reserved_namespace and self.label not in namespace.labels
        ]

    def _label_once(self) -> list[str]:
        namespaces = self.store.list()
        to_patch = self.plan(namespaces)

        for name in to_patch:
            logger.debug("patching_namespace", namespace=name, label=self.label)
            self.store.patch(name, self.patch_body)

        return to_patch

    def reconcile(self, policy: SidecarMigration) -> list[str]:
        """Label namespaces when sidecar migration is explicitly enabled.

        The whole list-then-patch pass is repeated on conflict, up to the
        configured number of attempts. Other errors propagate immediately.

        Args:
            policy: Sidecar migration policy

        Returns:
            Names of namespaces patched in the successful pass

        Raises:
            ConflictError: If conflicts persist after all attempts
            NamespaceStoreError: If listing or patching fails
        """
        if policy is not SidecarMigration.ENABLED:
            logger.debug("namespace_labeling_skipped", policy=policy.value)
            return []

        logger.debug("labeling_namespaces", label=self.label)

        retrying = retry_on_conflict(self.retry, exceptions=(ConflictError,))
        patched = retrying(self._label_once)

        logger.info("namespaces_labeled", count=len(patched), namespaces=patched)
        return patched
