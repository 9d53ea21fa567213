"""Version compatibility rules for mesh components.

Every check reduces to a single primitive: two versions are compatible when they
share a major version and their minor versions differ by at most one.
"""

from dataclasses import dataclass

from meshwarden.core.exceptions import (
    IncompatibilityError,
    PilotVersionMismatchError,
    VersionParseError,
)
from meshwarden.core.models import Direction, MeshStatus
from meshwarden.core.version import SemanticVersion

PILOT = "Pilot"
DATA_PLANE = "Data plane"


@dataclass(frozen=True)
class Compatible:
    """Component can move to the target version."""

    component: str
    component_version: str = ""

    @property
    def is_compatible(self) -> bool:
        return True


@dataclass(frozen=True)
class Incompatible:
    """Component is outside the one-minor window of the target version."""

    component: str
    component_version: str
    target_version: str
    direction: Direction

    @property
    def is_compatible(self) -> bool:
        return False

    def to_error(self) -> IncompatibilityError:
        """Build the diagnostic error for this result."""
        return IncompatibilityError(
            component=self.component,
            component_version=self.component_version,
            target_version=self.target_version,
            direction=self.direction,
        )


CompatibilityResult = Compatible | Incompatible


def within_one_minor(first: SemanticVersion, second: SemanticVersion) -> bool:
    """Check that two versions differ by at most one minor version.

    Patch versions are ignored; the check is symmetric.
    """
    return first.within_one_minor(second)


def direction_of(component: SemanticVersion, target: SemanticVersion) -> Direction:
    """Classify the move from component version to target version."""
    comparison = target.compare(component)
    if comparison > 0:
        return Direction.UPGRADE
    if comparison < 0:
        return Direction.DOWNGRADE
    return Direction.RECONCILIATION


def component_compatible(
    component_version: str, target_version: str, component_name: str
) -> CompatibilityResult:
    """Check a single component version against the target version.

    An empty component version means the component is absent, which is
    compatible.

    Args:
        component_version: Observed version of the component
        target_version: Version to converge to
        component_name: Component name used in diagnostics

    Returns:
        Compatible or Incompatible result

    Raises:
        VersionParseError: If either version cannot be parsed
    """
    if component_version == "":
        return Compatible(component=component_name)

    component = SemanticVersion.parse(component_version)
    target = SemanticVersion.parse(target_version)

    if not within_one_minor(component, target):
        return Incompatible(
            component=component_name,
            component_version=component_version,
            target_version=target_version,
            direction=direction_of(component, target),
        )

    return Compatible(component=component_name, component_version=component_version)


def can_install(status: MeshStatus) -> bool:
    """Mesh can be installed only when no component is present."""
    return not status.is_installed


def can_update(status: MeshStatus) -> CompatibilityResult:
    """Check that pilot and every data plane version can move to the target.

    Stops at the first incompatible component.

    Raises:
        VersionParseError: If any version cannot be parsed
    """
    result = component_compatible(status.pilot_version, status.target_version, PILOT)
    if not result.is_compatible:
        return result

    for dp_version in sorted(status.data_plane_versions):
        result = component_compatible(dp_version, status.target_version, DATA_PLANE)
        if not result.is_compatible:
            return result

    return Compatible(component=PILOT, component_version=status.pilot_version)


def can_uninstall(status: MeshStatus) -> bool:
    """Mesh can be uninstalled when present and istioctl is available."""
    return status.is_installed and status.client_version != ""


def ensure_can_reset_proxies(status: MeshStatus) -> None:
    """Verify that the control plane has converged so sidecars can be reset.

    Pilot must match the target exactly at major.minor.patch; data plane
    versions may still lag by one minor.

    Raises:
        VersionParseError: If pilot or target version cannot be parsed
        PilotVersionMismatchError: If pilot is not at the target version
        IncompatibilityError: If a data plane version drifted too far
    """
    pilot = SemanticVersion.parse(status.pilot_version)
    target = SemanticVersion.parse(status.target_version)

    if pilot.major_minor_patch != target.major_minor_patch:
        raise PilotVersionMismatchError(status.pilot_version, status.target_version)

    for dp_version in sorted(status.data_plane_versions):
        result = component_compatible(dp_version, status.target_version, DATA_PLANE)
        if isinstance(result, Incompatible):
            raise result.to_error()


def client_compatible_with_target(status: MeshStatus) -> bool:
    """Check istioctl against the target version; unparsable versions fail."""
    try:
        client = SemanticVersion.parse(status.client_version)
        target = SemanticVersion.parse(status.target_version)
    except VersionParseError:
        return False

    return within_one_minor(client, target)
