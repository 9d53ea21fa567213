"""Custom exceptions for MESHWARDEN."""

from meshwarden.core.models import Direction


class MeshWardenError(Exception):
    """Base exception for all MESHWARDEN errors."""


class ConfigurationError(MeshWardenError):
    """Configuration-related errors."""


class VersionParseError(MeshWardenError, ValueError):
    """Version string is not a valid major.minor.patch[-suffix] version."""

    def __init__(self, version: str, reason: str = "expected major.minor.patch"):
        super().__init__(f"Invalid version '{version}': {reason}")
        self.version = version
        self.reason = reason


class IncompatibilityError(MeshWardenError):
    """A component is more than one minor version away from the target.

    Attributes:
        component: Component name (e.g. "Pilot", "Data plane")
        component_version: Version currently observed for the component
        target_version: Version the mesh should converge to
        direction: Whether reaching the target is an upgrade, downgrade or reconciliation
    """

    def __init__(
        self,
        component: str,
        component_version: str,
        target_version: str,
        direction: Direction,
    ):
        super().__init__(
            f"Could not perform {direction.value} for {component} from version: "
            f"{component_version} to version: {target_version} - the difference "
            f"between versions exceed one minor version"
        )
        self.component = component
        self.component_version = component_version
        self.target_version = target_version
        self.direction = direction


class PilotVersionMismatchError(MeshWardenError):
    """Pilot is not running exactly the target version."""

    def __init__(self, pilot_version: str, target_version: str):
        super().__init__(
            f"Istio pilot version {pilot_version} does not match target version {target_version}"
        )
        self.pilot_version = pilot_version
        self.target_version = target_version


class VersionMismatchError(MeshWardenError):
    """Live version reported after install or update differs from the requested one."""

    def __init__(self, operation: str, installed_version: str, target_version: str):
        super().__init__(
            f"{operation} Istio version: {installed_version} does not match "
            f"target version: {target_version}"
        )
        self.operation = operation
        self.installed_version = installed_version
        self.target_version = target_version


class PreCheckFailedError(MeshWardenError):
    """Client tooling is not compatible with the target version."""


class ConflictError(MeshWardenError):
    """Resource was modified concurrently (optimistic concurrency conflict)."""


class CollaboratorError(MeshWardenError):
    """External call failed."""


class IstioError(CollaboratorError):
    """Istio operation failed."""


class KubernetesError(CollaboratorError):
    """Kubernetes operation failed."""


class ReconcileError(MeshWardenError):
    """Main reconcile failed in deployment, namespace labeling, or both.

    Both causes are kept so callers can tell them apart; the message joins them.
    """

    def __init__(
        self,
        deploy_error: Exception | None = None,
        label_error: Exception | None = None,
    ):
        if deploy_error is None and label_error is None:
            raise ValueError("ReconcileError requires at least one cause")

        parts = []
        if label_error is not None:
            parts.append(f"Could not label namespaces: {label_error}")
        if deploy_error is not None:
            parts.append(str(deploy_error))

        super().__init__(": ".join(parts))
        self.deploy_error = deploy_error
        self.label_error = label_error

    @property
    def causes(self) -> list[Exception]:
        """Get all non-empty causes, deployment first."""
        return [e for e in (self.deploy_error, self.label_error) if e is not None]
