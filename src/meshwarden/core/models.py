"""Core data models for MESHWARDEN."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Direction(str, Enum):
    """Direction of a version change relative to the target."""

    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"
    RECONCILIATION = "reconciliation"


class SidecarMigration(str, Enum):
    """Sidecar migration policy.

    UNSET means the chart does not mention the flag at all (respect the existing
    namespace labels); DISABLED means it is present and false.
    """

    UNSET = "unset"
    DISABLED = "disabled"
    ENABLED = "enabled"

    @classmethod
    def from_flags(cls, enabled: bool, explicitly_set: bool) -> "SidecarMigration":
        """Build the policy from the raw chart flag and its presence."""
        if not explicitly_set:
            return cls.UNSET
        return cls.ENABLED if enabled else cls.DISABLED


class MeshState(str, Enum):
    """State derived from a single MeshStatus snapshot."""

    NOT_INSTALLED = "not-installed"
    INSTALL_ELIGIBLE = "install-eligible"
    UPDATE_ELIGIBLE = "update-eligible"
    INCOMPATIBLE = "incompatible"
    UNINSTALL_ELIGIBLE = "uninstall-eligible"
    RESET_ELIGIBLE = "reset-eligible"


class Phase(str, Enum):
    """Reconciliation phase."""

    PRE_CHECK = "pre-check"
    RECONCILE = "reconcile"
    POST_RESET = "post-reset"
    UNINSTALL = "uninstall"


class LifecycleAction(str, Enum):
    """Action selected for a phase."""

    INSTALL = "install"
    UPDATE = "update"
    RESET_PROXIES = "reset-proxies"
    UNINSTALL = "uninstall"
    SKIP = "skip"


class MeshStatus(BaseModel):
    """Point-in-time snapshot of the mesh versions on a cluster."""

    model_config = ConfigDict(frozen=True)

    client_version: str = Field("", description="istioctl version, empty if absent")
    target_version: str = Field(..., description="Version to converge to")
    target_prefix: str = Field("", description="Proxy image prefix for the target version")
    pilot_version: str = Field("", description="Control plane version, empty if not installed")
    data_plane_versions: frozenset[str] = Field(
        default_factory=frozenset, description="Distinct sidecar proxy versions"
    )

    @property
    def is_installed(self) -> bool:
        """Whether any mesh component is present on the cluster."""
        return bool(self.data_plane_versions) or self.pilot_version != ""

    def data_plane_versions_string(self, delimiter: str = ",") -> str:
        """Render the data plane versions in a stable order."""
        return delimiter.join(sorted(self.data_plane_versions))


class ProxyResetConfig(BaseModel):
    """Parameters for restarting workloads with outdated sidecars."""

    model_config = ConfigDict(frozen=True)

    image_prefix: str
    image_version: str
    sidecar_injection_by_default: bool = False
    retries_count: int = 5
    delay_between_retries: float = 5.0
    timeout: float = 300.0
