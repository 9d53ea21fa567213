"""Chart value source interface."""

from abc import ABC, abstractmethod

from meshwarden.core.models import SidecarMigration


class ChartValueSource(ABC):
    """Abstract interface exposing packaged Istio chart configuration.

    Values are read once per reconciliation phase; implementations should not
    cache across phases.
    """

    @abstractmethod
    def target_version(self) -> str:
        """Get the Istio version the chart deploys.

        Raises:
            ChartValueSourceError: If no version can be resolved
        """

    @abstractmethod
    def target_prefix(self) -> str:
        """Get the proxy image prefix (registry path and directory)."""

    @abstractmethod
    def sidecar_migration(self) -> SidecarMigration:
        """Get the sidecar migration policy, distinguishing unset from disabled."""

    @abstractmethod
    def inject_namespaces_by_default(self) -> bool:
        """Whether sidecar injection applies to unlabeled namespaces."""
