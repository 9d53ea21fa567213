"""Namespace reconciliation."""

from meshwarden.reconciler.namespace_labels import NamespaceLabelReconciler

__all__ = ["NamespaceLabelReconciler"]
