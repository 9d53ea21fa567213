"""Reconciliation phase actions for the Istio component.

Each action builds a fresh performer, reads a fresh MeshStatus, asks the
decision engine what to do and dispatches the chosen action.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from meshwarden.core.config import RetryConfig
from meshwarden.core.exceptions import CollaboratorError, ReconcileError
from meshwarden.core.models import LifecycleAction, MeshStatus, Phase, ProxyResetConfig
from meshwarden.interfaces.chart_values import ChartValueSource
from meshwarden.interfaces.performer import Performer
from meshwarden.interfaces.resource_cleaner import ResourceCleaner
from meshwarden.lifecycle.engine import Decision, LifecycleDecisionEngine
from meshwarden.utils.logging import bind_phase, get_logger, log_error

logger = get_logger(__name__)

PerformerFactory = Callable[[], Performer]


@dataclass
class ActionContext:
    """Collaborators shared by the phase actions of one reconciliation cycle."""

    chart_values: ChartValueSource
    resource_cleaner: ResourceCleaner | None = None
    retry: RetryConfig = field(default_factory=RetryConfig)


def get_installed_version(performer: Performer) -> MeshStatus:
    """Fetch the mesh status through the performer.

    Raises:
        CollaboratorError: If the status cannot be fetched
    """
    try:
        status = performer.version()
    except CollaboratorError as e:
        raise CollaboratorError(f"Could not fetch Istio version: {e}") from e

    logger.debug(
        "istio_status_detected",
        client_version=status.client_version,
        target_version=status.target_version,
        pilot_version=status.pilot_version,
        data_plane_versions=status.data_plane_versions_string(),
    )
    return status


class _PhaseAction:
    phase: Phase

    def __init__(
        self,
        get_performer: PerformerFactory,
        engine: LifecycleDecisionEngine | None = None,
    ):
        """Initialize phase action.

        Args:
            get_performer: Factory returning the performer for this run
            engine: Decision engine (optional)
        """
        self.get_performer = get_performer
        self.engine = engine or LifecycleDecisionEngine()

    def _start(self) -> Performer:
        bind_phase(self.phase.value)
        logger.debug("istio_action_triggered", phase=self.phase.value)
        return self.get_performer()


class StatusPreAction(_PhaseAction):
    """Fails the cycle when istioctl cannot drive the target version."""

    phase = Phase.PRE_CHECK

    def run(self, context: ActionContext) -> MeshStatus:
        """Run the pre-check.

        Raises:
            PreCheckFailedError: If istioctl is incompatible with the target
            CollaboratorError: If the status cannot be fetched
        """
        performer = self._start()
        status = get_installed_version(performer)

        self.engine.check_client(status)
        logger.debug("pre_version_check_successful")
        return status


class MainReconcileAction(_PhaseAction):
    """Installs or updates Istio, then labels namespaces."""

    phase = Phase.RECONCILE

    def run(self, context: ActionContext) -> Decision | None:
        """Run the main reconcile.

        Namespace labeling is attempted whatever the deployment outcome, and
        both failures are reported together.

        Returns:
            Decision taken for the deployment, or None if the status could not be read

        Raises:
            ReconcileError: If deployment, labeling, or both failed
        """
        performer = self._start()

        decision = None
        deploy_error: Exception | None = None
        try:
            decision = self._deploy(performer)
            if decision.is_skip:
                deploy_error = decision.reason
        except Exception as e:
            deploy_error = e

        label_error: Exception | None = None
        try:
            performer.label_namespaces(context.chart_values.sidecar_migration())
        except Exception as e:
            log_error(logger, e, operation="label_namespaces")
            label_error = e

        if deploy_error is not None or label_error is not None:
            raise ReconcileError(deploy_error=deploy_error, label_error=label_error)

        return decision

    def _deploy(self, performer: Performer) -> Decision:
        status = get_installed_version(performer)
        decision = self.engine.decide_reconcile(status)

        if decision.action is LifecycleAction.INSTALL:
            logger.info(
                "istio_install_started",
                reason="no Istio version detected on the cluster",
                target_version=status.target_version,
            )
            try:
                performer.install(status.target_version)
            except Exception as e:
                log_error(logger, e, operation="install")
                raise

        elif decision.action is LifecycleAction.UPDATE:
            logger.info(
                "istio_update_started",
                pilot_version=status.pilot_version,
                data_plane_versions=status.data_plane_versions_string(),
                target_version=status.target_version,
            )
            try:
                performer.update(status.target_version)
            except Exception as e:
                log_error(logger, e, operation="update")
                raise

        return decision


class ProxyResetPostAction(_PhaseAction):
    """Restarts outdated sidecars once the control plane has converged.

    Reset problems never fail the cycle; the next cycle retries.
    """

    phase = Phase.POST_RESET

    def run(self, context: ActionContext) -> Decision:
        """Run the proxy reset.

        Raises:
            CollaboratorError: If the status cannot be fetched
        """
        performer = self._start()
        status = get_installed_version(performer)

        decision = self.engine.decide_reset(status)
        if decision.is_skip:
            logger.warning("proxy_reset_not_possible", reason=str(decision.reason))
            return decision

        try:
            config = ProxyResetConfig(
                image_prefix=status.target_prefix,
                image_version=status.target_version,
                sidecar_injection_by_default=context.chart_values.inject_namespaces_by_default(),
                retries_count=context.retry.attempts,
                delay_between_retries=context.retry.delay_seconds,
                timeout=context.retry.timeout_seconds,
            )
            performer.reset_proxies(config)
        except Exception as e:
            logger.warning("proxy_reset_failed", error=str(e))

        return decision


class UninstallAction(_PhaseAction):
    """Removes related resources and then Istio itself."""

    phase = Phase.UNINSTALL

    def run(self, context: ActionContext) -> Decision:
        """Run the uninstall.

        Raises:
            CollaboratorError: If status, cleanup or uninstall fails
        """
        performer = self._start()
        status = get_installed_version(performer)

        decision = self.engine.decide_uninstall(status)
        if decision.is_skip:
            logger.warning("istio_uninstall_skipped", reason=str(decision.reason))
            return decision

        # Related resources (dashboards, rules) go first
        if context.resource_cleaner is not None:
            context.resource_cleaner.remove_related_resources()

        try:
            performer.uninstall(status.target_version)
        except CollaboratorError as e:
            raise CollaboratorError(f"Could not uninstall Istio: {e}") from e

        logger.info("istio_uninstalled")
        return decision
