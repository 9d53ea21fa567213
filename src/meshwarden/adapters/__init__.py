"""Adapter implementations of the collaborator interfaces."""

from meshwarden.adapters.chart_adapter import HelmChartValueSource
from meshwarden.adapters.k8s_adapter import (
    KubernetesNamespaceStore,
    KubernetesStatusGatherer,
    ManifestResourceCleaner,
)

__all__ = [
    "HelmChartValueSource",
    "KubernetesNamespaceStore",
    "KubernetesStatusGatherer",
    "ManifestResourceCleaner",
]
