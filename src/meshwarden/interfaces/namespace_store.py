"""Namespace store interface for label reconciliation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class NamespaceSnapshot:
    """Namespace name and labels as read from the cluster."""

    name: str
    labels: dict[str, str] = field(default_factory=dict)


class NamespaceStore(ABC):
    """Abstract interface for listing and patching namespaces."""

    @abstractmethod
    def list(self) -> list[NamespaceSnapshot]:
        """List all namespaces with their current labels.

        Returns:
            Fresh namespace snapshots

        Raises:
            NamespaceStoreError: If namespaces cannot be listed
        """

    @abstractmethod
    def patch(self, name: str, body: dict[str, Any]) -> None:
        """Apply a merge patch to a namespace.

        Args:
            name: Namespace name
            body: Merge patch body

        Raises:
            ConflictError: If the namespace changed since it was read
            NamespaceStoreError: If the patch fails for any other reason
        """
