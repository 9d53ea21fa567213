"""Lifecycle decisions and reconciliation phase actions."""

from meshwarden.lifecycle.actions import (
    ActionContext,
    MainReconcileAction,
    ProxyResetPostAction,
    StatusPreAction,
    UninstallAction,
)
from meshwarden.lifecycle.engine import Decision, LifecycleDecisionEngine

__all__ = [
    "ActionContext",
    "Decision",
    "LifecycleDecisionEngine",
    "MainReconcileAction",
    "ProxyResetPostAction",
    "StatusPreAction",
    "UninstallAction",
]
