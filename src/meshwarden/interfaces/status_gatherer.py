"""Status gatherer interface for live version reporting."""

from abc import ABC, abstractmethod


class StatusGatherer(ABC):
    """Abstract interface reporting the version actually running on the cluster."""

    @abstractmethod
    def installed_version(self) -> str:
        """Get the installed control plane version.

        Returns:
            Version string as reported by the cluster

        Raises:
            StatusGathererError: If the version cannot be determined
        """
