"""Configuration management for K8s Manifest Sync."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from . import CONFIG_FILE, SYNC_DIR
from .errors import ConfigError
from .kubectl import ConnectionContext


class SyncConfig(BaseModel):
    """Configuration for K8s Manifest Sync."""

    version: int = 1
    kubeconfig: str = ""
    namespace: str = ""
    kubectl_path: str = "kubectl"
    timeout_seconds: float | None = Field(default=None, gt=0)

    def to_context(self) -> ConnectionContext:
        """Build the connection context passed to kubectl."""
        return ConnectionContext(
            kubeconfig=self.kubeconfig,
            namespace=self.namespace,
            binary=self.kubectl_path,
            timeout=self.timeout_seconds,
        )


def get_sync_dir(project_root: Path) -> Path:
    """Get the .k8s-manifest-sync directory path."""
    return project_root / SYNC_DIR


def get_config_path(project_root: Path) -> Path:
    """Get the config file path."""
    return get_sync_dir(project_root) / CONFIG_FILE


def load_config(project_root: Path) -> SyncConfig:
    """Load configuration from the project's config file.

    Falls back to defaults if file doesn't exist.
    Environment variables can override config values.

    Raises:
        ConfigError: If the file or an override does not validate
    """
    config_path = get_config_path(project_root)

    if config_path.exists():
        with open(config_path) as f:
            data = json.load(f)
        try:
            config = SyncConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid {config_path}: {e}") from e
    else:
        config = SyncConfig()

    try:
        return _apply_env_overrides(config)
    except ValidationError as e:
        raise ConfigError(f"Invalid environment override: {e}") from e


def save_config(config: SyncConfig, project_root: Path) -> None:
    """Save configuration to the project's config file."""
    config_path = get_config_path(project_root)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config.model_dump(), f, indent=2)


def _apply_env_overrides(config: SyncConfig) -> SyncConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    if kubeconfig := os.environ.get("K8SMS_KUBECONFIG"):
        data["kubeconfig"] = kubeconfig

    if namespace := os.environ.get("K8SMS_NAMESPACE"):
        data["namespace"] = namespace

    if kubectl_path := os.environ.get("K8SMS_KUBECTL"):
        data["kubectl_path"] = kubectl_path

    # Validated (and rejected if non-numeric) by the model
    if timeout := os.environ.get("K8SMS_TIMEOUT"):
        data["timeout_seconds"] = timeout

    return SyncConfig.model_validate(data)
