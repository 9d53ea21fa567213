"""Main CLI entry point for MESHWARDEN."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

from meshwarden import __version__
from meshwarden.core.exceptions import MeshWardenError, ReconcileError
from meshwarden.core.models import MeshStatus, Phase

if TYPE_CHECKING:
    from meshwarden.core.config import MeshWardenConfig
    from meshwarden.services.istio.istio_service import IstioService

console = Console()

DEFAULT_CONFIG_PATH = "~/.meshwarden/config.yaml"


class MeshWardenContext:
    """Shared context for CLI commands with lazy initialization."""

    def __init__(self, config_path: str):
        """Initialize context with config path.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = config_path
        self._config: MeshWardenConfig | None = None
        self._service: IstioService | None = None

    @property
    def config(self) -> MeshWardenConfig:
        """Get or create config lazily; a missing default config means defaults."""
        if self._config is None:
            from meshwarden.core.config import MeshWardenConfig

            config_path = Path(self.config_path).expanduser()
            if self.config_path == DEFAULT_CONFIG_PATH and not config_path.exists():
                self._config = MeshWardenConfig()
            else:
                self._config = MeshWardenConfig.from_file(config_path)
        return self._config

    @property
    def service(self) -> IstioService:
        """Get or create the Istio service lazily."""
        if self._service is None:
            from meshwarden.services.istio.istio_service import IstioService
            from meshwarden.utils.logging import setup_logging

            logging_config = self.config.logging
            setup_logging(
                level=logging_config.level,
                format=logging_config.format,
                output=logging_config.output,
            )
            self._service = IstioService(self.config)
        return self._service


def _fail(message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")
    sys.exit(1)


def _print_status(status: MeshStatus) -> None:
    table = Table(title="Istio status")
    table.add_column("Component", style="cyan")
    table.add_column("Version")

    table.add_row("istioctl", status.client_version or "-")
    table.add_row("Target", status.target_version)
    table.add_row("Target prefix", status.target_prefix or "-")
    table.add_row("Pilot", status.pilot_version or "-")
    table.add_row("Data plane", status.data_plane_versions_string(", ") or "-")

    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(),
    default=DEFAULT_CONFIG_PATH,
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx: click.Context, config: str) -> None:
    """Mesh version warden (MESHWARDEN) - Keep Istio components within one minor version."""
    ctx.obj = MeshWardenContext(config_path=config)


@cli.command()
@click.pass_obj
def precheck(obj: MeshWardenContext) -> None:
    """Check that istioctl is compatible with the target version."""
    try:
        status = obj.service.run_phase(Phase.PRE_CHECK)
    except MeshWardenError as e:
        _fail(str(e))
        return

    console.print(
        f"[green]✓ istioctl {status.client_version} is compatible with "
        f"target {status.target_version}[/green]"
    )


@cli.command()
@click.pass_obj
def reconcile(obj: MeshWardenContext) -> None:
    """Install or update Istio and label namespaces."""
    try:
        decision = obj.service.run_phase(Phase.RECONCILE)
    except ReconcileError as e:
        if e.deploy_error is not None:
            console.print(f"[red]✗ Deployment: {e.deploy_error}[/red]")
        if e.label_error is not None:
            console.print(f"[red]✗ Namespace labeling: {e.label_error}[/red]")
        sys.exit(1)
    except MeshWardenError as e:
        _fail(str(e))
        return

    console.print(f"[green]✓ Reconcile completed: {decision.action.value}[/green]")


@cli.command(name="reset-proxies")
@click.pass_obj
def reset_proxies(obj: MeshWardenContext) -> None:
    """Restart workloads whose sidecars run an outdated proxy."""
    try:
        decision = obj.service.run_phase(Phase.POST_RESET)
    except MeshWardenError as e:
        _fail(str(e))
        return

    if decision.is_skip:
        console.print(f"[yellow]→ Proxy reset skipped: {decision.reason}[/yellow]")
    else:
        console.print("[green]✓ Proxy reset completed[/green]")


@cli.command()
@click.confirmation_option(prompt="Uninstall Istio from the cluster?")
@click.pass_obj
def uninstall(obj: MeshWardenContext) -> None:
    """Remove related resources and uninstall Istio."""
    try:
        decision = obj.service.run_phase(Phase.UNINSTALL)
    except MeshWardenError as e:
        _fail(str(e))
        return

    if decision.is_skip:
        console.print(f"[yellow]→ Uninstall skipped: {decision.reason}[/yellow]")
    else:
        console.print("[green]✓ Istio uninstalled[/green]")


@cli.command()
@click.pass_obj
def status(obj: MeshWardenContext) -> None:
    """Show detected versions and the action each phase would take."""
    from meshwarden.lifecycle.engine import LifecycleDecisionEngine

    try:
        mesh_status = obj.service.build_performer().version()
    except MeshWardenError as e:
        _fail(str(e))
        return

    _print_status(mesh_status)

    engine = LifecycleDecisionEngine()
    try:
        decisions = [
            engine.decide_reconcile(mesh_status),
            engine.decide_reset(mesh_status),
            engine.decide_uninstall(mesh_status),
        ]
    except MeshWardenError as e:
        _fail(str(e))
        return

    for decision in decisions:
        line = f"{decision.phase.value}: {decision.action.value} ({decision.state.value})"
        if decision.reason is not None:
            line += f" - {decision.reason}"
        console.print(line)


if __name__ == "__main__":
    cli()
