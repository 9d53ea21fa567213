"""Interface definitions for the collaborators used by the decision engine."""

from meshwarden.interfaces.chart_values import ChartValueSource
from meshwarden.interfaces.namespace_store import NamespaceSnapshot, NamespaceStore
from meshwarden.interfaces.performer import Performer
from meshwarden.interfaces.resource_cleaner import ResourceCleaner
from meshwarden.interfaces.status_gatherer import StatusGatherer

__all__ = [
    "ChartValueSource",
    "NamespaceSnapshot",
    "NamespaceStore",
    "Performer",
    "ResourceCleaner",
    "StatusGatherer",
]
