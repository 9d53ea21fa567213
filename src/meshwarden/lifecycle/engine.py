"""Lifecycle decision engine selecting one action per reconciliation phase."""

from dataclasses import dataclass

from meshwarden.core.exceptions import MeshWardenError, PreCheckFailedError
from meshwarden.core.models import LifecycleAction, MeshState, MeshStatus, Phase
from meshwarden.policy.compatibility import (
    Incompatible,
    can_install,
    can_uninstall,
    can_update,
    client_compatible_with_target,
    ensure_can_reset_proxies,
)
from meshwarden.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Decision:
    """Outcome of classifying a MeshStatus for one phase.

    Attributes:
        phase: Phase the decision was made for
        state: State derived from the snapshot
        action: Action to dispatch (SKIP when nothing may be done)
        reason: Why the action was rejected, for SKIP decisions
    """

    phase: Phase
    state: MeshState
    action: LifecycleAction
    reason: Exception | None = None

    @property
    def is_skip(self) -> bool:
        return self.action is LifecycleAction.SKIP


class LifecycleDecisionEngine:
    """Classifies mesh snapshots and picks the lifecycle action.

    The engine keeps no state between calls. Each phase derives its decision
    from the snapshot it is given, so re-running a phase after a partial
    failure is safe.
    """

    def check_client(self, status: MeshStatus) -> None:
        """Gate the cycle on istioctl being compatible with the target.

        Raises:
            PreCheckFailedError: If the client is more than one minor away
        """
        if not client_compatible_with_target(status):
            raise PreCheckFailedError(
                f"Istio could not be updated since the binary version: {status.client_version} "
                f"is not compatible with the target version: {status.target_version} - the "
                f"difference between versions exceeds one minor version"
            )
        logger.debug(
            "client_version_compatible",
            client_version=status.client_version,
            target_version=status.target_version,
        )

    def decide_reconcile(self, status: MeshStatus) -> Decision:
        """Choose between install, update and skip.

        Raises:
            VersionParseError: If an installed component reports a malformed version
        """
        if can_install(status):
            return Decision(Phase.RECONCILE, MeshState.INSTALL_ELIGIBLE, LifecycleAction.INSTALL)

        result = can_update(status)
        if isinstance(result, Incompatible):
            error = result.to_error()
            logger.warning(
                "istio_update_rejected",
                component=result.component,
                component_version=result.component_version,
                target_version=result.target_version,
                direction=result.direction.value,
            )
            return Decision(
                Phase.RECONCILE, MeshState.INCOMPATIBLE, LifecycleAction.SKIP, reason=error
            )

        return Decision(Phase.RECONCILE, MeshState.UPDATE_ELIGIBLE, LifecycleAction.UPDATE)

    def decide_reset(self, status: MeshStatus) -> Decision:
        """Choose whether sidecar proxies may be reset."""
        try:
            ensure_can_reset_proxies(status)
        except MeshWardenError as e:
            state = MeshState.INCOMPATIBLE if status.is_installed else MeshState.NOT_INSTALLED
            return Decision(Phase.POST_RESET, state, LifecycleAction.SKIP, reason=e)

        return Decision(Phase.POST_RESET, MeshState.RESET_ELIGIBLE, LifecycleAction.RESET_PROXIES)

    def decide_uninstall(self, status: MeshStatus) -> Decision:
        """Choose whether the mesh may be uninstalled."""
        if can_uninstall(status):
            return Decision(
                Phase.UNINSTALL, MeshState.UNINSTALL_ELIGIBLE, LifecycleAction.UNINSTALL
            )

        if not status.is_installed:
            reason = "Istio is not installed"
            state = MeshState.NOT_INSTALLED
        else:
            reason = "istioctl is not available"
            state = MeshState.INCOMPATIBLE

        return Decision(
            Phase.UNINSTALL, state, LifecycleAction.SKIP, reason=MeshWardenError(reason)
        )
