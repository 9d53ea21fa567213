"""Interface for removing resources that depend on the mesh."""

from abc import ABC, abstractmethod


class ResourceCleaner(ABC):
    """Removes mesh-related cluster resources (dashboards, rules) before uninstall."""

    @abstractmethod
    def remove_related_resources(self) -> None:
        """Delete all resources related to the mesh installation.

        Raises:
            ResourceCleanerError: If resources cannot be removed
        """
