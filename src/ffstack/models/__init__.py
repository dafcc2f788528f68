"""Data models for ffstack."""

from ffstack.models.deployment import (
    Acceleration,
    AdvancedConfig,
    DeploymentConfig,
    ImageConfig,
    LoggingConfig,
    NetworkConfig,
    ResourcesConfig,
    RocmConfig,
    SecurityConfig,
)

__all__ = [
    "Acceleration",
    "AdvancedConfig",
    "DeploymentConfig",
    "ImageConfig",
    "LoggingConfig",
    "NetworkConfig",
    "ResourcesConfig",
    "RocmConfig",
    "SecurityConfig",
]
