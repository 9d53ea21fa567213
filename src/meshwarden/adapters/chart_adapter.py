"""Helm chart adapter implementing the ChartValueSource interface."""

from pathlib import Path
from typing import Any

import yaml

from meshwarden.core.models import SidecarMigration
from meshwarden.interfaces.chart_values import ChartValueSource
from meshwarden.interfaces.exceptions import ChartValueSourceError
from meshwarden.utils.logging import get_logger

logger = get_logger(__name__)


def _lookup(values: dict[str, Any], path: str) -> tuple[Any, bool]:
    """Follow a dotted path through nested dictionaries.

    Returns:
        Tuple of (value, found)
    """
    current: Any = values
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None, False
        current = current[part]
    return current, True


class HelmChartValueSource(ChartValueSource):
    """Reads Istio settings from a Helm chart directory.

    Files are read on every call so that each reconciliation phase sees the
    chart as it is now.
    """

    def __init__(self, chart_path: str | Path):
        """Initialize chart value source.

        Args:
            chart_path: Directory containing Chart.yaml and values.yaml
        """
        self.chart_path = Path(chart_path).expanduser()
        logger.debug("chart_value_source_initialized", chart_path=str(self.chart_path))

    def _load(self, filename: str) -> dict[str, Any]:
        path = self.chart_path / filename
        if not path.exists():
            raise ChartValueSourceError(f"Chart file not found: {path}")

        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ChartValueSourceError(f"Failed to parse {path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ChartValueSourceError(f"Failed to read {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ChartValueSourceError(f"Unexpected content in {path}")
        return data

    def _flag(self, path: str) -> bool | None:
        """Read an optional boolean value, None when absent or null."""
        value, _ = _lookup(self.values(), path)
        if value is not None and not isinstance(value, bool):
            raise ChartValueSourceError(f"{path} must be a boolean, got {type(value).__name__}")
        return value

    def values(self) -> dict[str, Any]:
        """Get the chart values."""
        return self._load("values.yaml")

    def target_version(self) -> str:
        pilot_version, _ = _lookup(self.values(), "global.images.istio_pilot.version")
        if pilot_version:
            logger.debug("target_version_resolved", version=str(pilot_version), source="values")
            return str(pilot_version)

        chart_version, _ = _lookup(self._load("Chart.yaml"), "version")
        if chart_version:
            logger.debug("target_version_resolved", version=str(chart_version), source="chart")
            return str(chart_version)

        raise ChartValueSourceError(
            "Target Istio version could not be found neither in Chart.yaml nor in helm values"
        )

    def target_prefix(self) -> str:
        values = self.values()
        registry, _ = _lookup(values, "global.images.istio_proxyv2.containerRegistryPath")
        directory, _ = _lookup(values, "global.images.istio_proxyv2.directory")

        # Missing settings render as empty strings, e.g. "/" when the block is absent
        prefix = f"{registry or ''}/{directory or ''}"
        logger.debug("target_prefix_resolved", prefix=prefix)
        return prefix

    def sidecar_migration(self) -> SidecarMigration:
        enabled = self._flag("global.sidecarMigration")
        return SidecarMigration.from_flags(
            enabled=bool(enabled), explicitly_set=enabled is not None
        )

    def inject_namespaces_by_default(self) -> bool:
        return self._flag("helmValues.sidecarInjectorWebhook.enableNamespacesByDefault") is True
