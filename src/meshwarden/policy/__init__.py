"""Compatibility policy for mesh lifecycle decisions."""

from meshwarden.policy.compatibility import (
    CompatibilityResult,
    Compatible,
    Incompatible,
    can_install,
    can_uninstall,
    can_update,
    client_compatible_with_target,
    component_compatible,
    ensure_can_reset_proxies,
    within_one_minor,
)

__all__ = [
    "CompatibilityResult",
    "Compatible",
    "Incompatible",
    "can_install",
    "can_uninstall",
    "can_update",
    "client_compatible_with_target",
    "component_compatible",
    "ensure_can_reset_proxies",
    "within_one_minor",
]
