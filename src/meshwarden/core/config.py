"""Configuration management for MESHWARDEN."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from meshwarden.core.exceptions import ConfigurationError


class KubernetesConfig(BaseModel):
    """Kubernetes access configuration."""

    kubeconfig_path: str | None = None
    context: str | None = None


class IstioConfig(BaseModel):
    """Istio installation configuration."""

    namespace: str = "istio-system"
    reserved_namespace: str = "kube-system"
    injection_label: str = "istio-injection"
    chart_path: str = "resources/istio"
    manifest_path: str | None = None  # Rendered chart manifest, produced outside MESHWARDEN
    # Related resources are removed from these namespaces before uninstall
    related_resource_namespaces: list[str] = Field(
        default_factory=lambda: ["kyma-system", "istio-system"]
    )
    istioctl_path: str = "istioctl"
    # Binaries keyed by "major.minor", e.g. {"1.20": "/usr/local/bin/istioctl-1.20"}
    istioctl_binaries: dict[str, str] = Field(default_factory=dict)


class RetryConfig(BaseModel):
    """Retry budget shared by the reconciler and the status gatherer."""

    attempts: int = Field(5, ge=1)
    delay_seconds: float = Field(5.0, ge=0)
    conflict_delay_seconds: float = Field(0.01, ge=0)
    timeout_seconds: float = Field(300.0, gt=0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    output: str = "stdout"


class MeshWardenConfig(BaseModel):
    """Main MESHWARDEN configuration."""

    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    istio: IstioConfig = Field(default_factory=IstioConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "MeshWardenConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            MeshWardenConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**(data or {}))
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation
        """
        return self.model_dump()
