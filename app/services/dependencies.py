from __future__ import annotations

from app.services.config import ProvisioningConfig


def get_provisioning_config() -> ProvisioningConfig:
    """FastAPI dependency provider for the env-configured provisioning inputs."""

    config = ProvisioningConfig.from_env()
    config.validate()
    return config
