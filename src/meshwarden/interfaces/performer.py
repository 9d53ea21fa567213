"""Performer interface executing mesh lifecycle actions."""

from abc import ABC, abstractmethod

from meshwarden.core.models import MeshStatus, ProxyResetConfig, SidecarMigration


class Performer(ABC):
    """Abstract interface for actions on the Istio installation.

    Every method is treated as atomic and fallible; partial completion inside
    a call is the implementation's concern.
    """

    @abstractmethod
    def install(self, target_version: str) -> None:
        """Install Istio in the given version.

        Raises:
            VersionMismatchError: If the installed version differs from the target
            CollaboratorError: If installation fails
        """

    @abstractmethod
    def update(self, target_version: str) -> None:
        """Update Istio to the given version.

        Raises:
            VersionMismatchError: If the updated version differs from the target
            CollaboratorError: If the update fails
        """

    @abstractmethod
    def uninstall(self, version: str) -> None:
        """Uninstall Istio using istioctl of the given version."""

    @abstractmethod
    def reset_proxies(self, config: ProxyResetConfig) -> None:
        """Restart workloads whose sidecars do not run the configured proxy image."""

    @abstractmethod
    def version(self) -> MeshStatus:
        """Report the current mesh status.

        Raises:
            CollaboratorError: If the status cannot be gathered
        """

    @abstractmethod
    def label_namespaces(self, policy: SidecarMigration) -> None:
        """Label namespaces for sidecar injection according to the policy."""
