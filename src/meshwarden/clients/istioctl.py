"""Istioctl wrapper for Istio operations."""

import subprocess
import tempfile
from pathlib import Path

from meshwarden.core.exceptions import IstioError
from meshwarden.core.version import SemanticVersion
from meshwarden.utils.logging import get_logger

logger = get_logger(__name__)


class IstioctlWrapper:
    """Runs one istioctl binary against the configured cluster."""

    def __init__(
        self,
        kubeconfig_path: str | None = None,
        context: str | None = None,
        binary: str = "istioctl",
    ):
        self.kubeconfig_path = kubeconfig_path
        self.context = context
        self.binary = binary

    def _cluster_flags(self) -> list[str]:
        flags = []
        if self.kubeconfig_path:
            flags += ["--kubeconfig", self.kubeconfig_path]
        if self.context:
            flags += ["--context", self.context]
        return flags

    def _run_command(self, args: list[str]) -> subprocess.CompletedProcess:
        """Run istioctl with the given arguments.

        Raises:
            IstioError: If the binary is missing or exits non-zero
        """
        cmd = [self.binary, *args, *self._cluster_flags()]
        logger.debug("istioctl_invoked", binary=self.binary, args=args)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
        except FileNotFoundError as e:
            logger.error("istioctl_missing", binary=self.binary)
            raise IstioError(f"{self.binary} command not found") from e
        except subprocess.CalledProcessError as e:
            output = e.stderr or e.stdout
            logger.error("istioctl_exited", args=args, returncode=e.returncode, output=output)
            raise IstioError(f"istioctl command failed: {output}") from e

        return result

    def _run_with_operator(self, subcommand: str, operator_manifest: str) -> None:
        with tempfile.TemporaryDirectory(prefix="meshwarden-") as tmp_dir:
            operator_file = Path(tmp_dir) / "istio-operator.yaml"
            operator_file.write_text(operator_manifest)

            self._run_command([subcommand, "-f", str(operator_file), "--skip-confirmation"])

    def install(self, operator_manifest: str) -> None:
        """Install Istio from an IstioOperator manifest.

        Args:
            operator_manifest: IstioOperator resource as YAML

        Raises:
            IstioError: If installation fails
        """
        logger.info("running_istioctl_install")
        self._run_with_operator("install", operator_manifest)
        logger.info("istioctl_install_completed")

    def upgrade(self, operator_manifest: str) -> None:
        """Upgrade Istio from an IstioOperator manifest.

        Args:
            operator_manifest: IstioOperator resource as YAML

        Raises:
            IstioError: If the upgrade fails
        """
        logger.info("running_istioctl_upgrade")
        self._run_with_operator("upgrade", operator_manifest)
        logger.info("istioctl_upgrade_completed")

    def uninstall(self) -> None:
        """Purge Istio control plane resources.

        Raises:
            IstioError: If uninstall fails
        """
        logger.info("running_istioctl_uninstall")
        self._run_command(["uninstall", "--purge", "--skip-confirmation"])
        logger.info("istioctl_uninstall_completed")

    def version(self) -> str:
        """Get raw Istio version information as JSON text.

        Returns:
            Output of ``istioctl version -o json``

        Raises:
            IstioError: If command fails
        """
        logger.debug("getting_istio_version")
        result = self._run_command(["version", "-o", "json"])
        return result.stdout


class IstioctlResolver:
    """Selects the istioctl binary matching an Istio version.

    Binaries are keyed by "major.minor"; versions without an entry fall back to
    the default binary.
    """

    def __init__(
        self,
        default_binary: str = "istioctl",
        binaries: dict[str, str] | None = None,
        kubeconfig_path: str | None = None,
        context: str | None = None,
    ):
        self.default_binary = default_binary
        self.binaries = binaries or {}
        self.kubeconfig_path = kubeconfig_path
        self.context = context

    def get_commander(self, version: SemanticVersion) -> IstioctlWrapper:
        """Get an istioctl wrapper for the given version."""
        binary = self.binaries.get(f"{version.major}.{version.minor}", self.default_binary)
        logger.debug("istioctl_resolved", version=str(version), binary=binary)
        return IstioctlWrapper(
            kubeconfig_path=self.kubeconfig_path, context=self.context, binary=binary
        )
