"""Pydantic models for the FaceFusion deployment configuration.

This module defines the option schema for the stack: image reference,
acceleration backend, network binding, resource limits, security flags,
log rotation and ROCm-specific overrides. Option names follow the camelCase
spelling used in configuration files (``bindAddress``, ``shmSize``);
snake_case field names are accepted as well.
"""

import ipaddress
import re
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ffstack.config.defaults import (
    COMPOSE_FILE_NAME,
    CONTAINER_PORT,
    LOOPBACK_ADDRESS,
)


class Acceleration(str, Enum):
    """GPU acceleration backend for the container image."""

    NONE = "none"
    ROCM = "rocm"
    CUDA = "cuda"
    TENSORRT = "tensorrt"

    @property
    def is_gpu(self) -> bool:
        """Whether any GPU runtime is requested."""
        return self is not Acceleration.NONE

    @property
    def is_nvidia(self) -> bool:
        """Whether the backend runs on the NVIDIA container runtime."""
        return self in (Acceleration.CUDA, Acceleration.TENSORRT)

    @property
    def tag_suffix(self) -> str:
        """Suffix appended to the image tag (e.g. ``-rocm``)."""
        return "" if self is Acceleration.NONE else f"-{self.value}"


# Regex patterns for validation
REPOSITORY_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._/-]*[a-z0-9]$|^[a-z0-9]$")
REGISTRY_PATTERN = re.compile(r"^[a-zA-Z0-9]([a-zA-Z0-9.-]*[a-zA-Z0-9])?(:\d+)?$")
TAG_PATTERN = re.compile(r"^[\w][\w.-]{0,127}$")
BYTE_SIZE_PATTERN = re.compile(r"^\d+([bkmg]b?)?$", re.IGNORECASE)


def url_host(address: str) -> str:
    """Format an IP address for the host part of a URL (IPv6 in brackets)."""
    if ipaddress.ip_address(address).version == 6:
        return f"[{address}]"
    return address


def _validate_byte_size(value: str, field_name: str) -> str:
    if not BYTE_SIZE_PATTERN.fullmatch(value):
        raise ValueError(
            f"Invalid {field_name}: {value}. "
            "Must be a number optionally followed by b, k, m or g (e.g. 8g, 512m)."
        )
    return value


class _OptionModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ImageConfig(_OptionModel):
    """Container image reference.

    Attributes:
        registry: Container registry host
        repository: Image repository
        tag: Image tag; the acceleration suffix is appended automatically
    """

    registry: str = Field(default="docker.io", description="Container registry")
    repository: str = Field(
        default="facefusion/facefusion", description="Image repository"
    )
    tag: str = Field(
        default="3.5.2",
        description="Image tag (acceleration suffix added automatically)",
    )

    @field_validator("registry")
    @classmethod
    def validate_registry(cls, v: str) -> str:
        """Validate registry host[:port] format."""
        if not REGISTRY_PATTERN.fullmatch(v):
            raise ValueError(f"Invalid registry: {v}. Expected host or host:port")
        return v

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:
        """Validate repository name pattern."""
        if not REPOSITORY_PATTERN.fullmatch(v):
            raise ValueError(
                f"Invalid repository name: {v}. "
                "Must contain only lowercase letters, numbers, '.', '_', '/', '-'"
            )
        return v

    @field_validator("tag")
    @classmethod
    def validate_tag(cls, v: str) -> str:
        """Validate image tag format."""
        if not TAG_PATTERN.fullmatch(v):
            raise ValueError(
                f"Invalid image tag: {v}. "
                "Must start with a letter, digit or '_' and contain only "
                "letters, digits, '_', '.', '-' (max 128 characters)"
            )
        return v


class NetworkConfig(_OptionModel):
    """Host network binding for the web UI.

    Attributes:
        bind_address: Listen address; 0.0.0.0 exposes the UI on the LAN
        port: Host port mapped to the container's web UI port
    """

    bind_address: str = Field(
        default=LOOPBACK_ADDRESS,
        description="Listen address. Use 0.0.0.0 for LAN access.",
    )
    port: Annotated[int, Field(ge=1, le=65535)] = Field(
        default=CONTAINER_PORT, description="Host port for web UI"
    )

    @field_validator("bind_address")
    @classmethod
    def validate_bind_address(cls, v: str) -> str:
        """Validate that the bind address is an IP address."""
        try:
            ipaddress.ip_address(v)
        except ValueError as exc:
            raise ValueError(f"Invalid bind address: {v}. Must be an IP address") from exc
        return v

    @property
    def is_loopback(self) -> bool:
        """Whether the UI is only reachable from this host."""
        return self.bind_address == LOOPBACK_ADDRESS


class ResourcesConfig(_OptionModel):
    """Container resource limits.

    Attributes:
        shm_size: Shared memory size (for model loading)
        memory_limit: Container memory limit, applied with GPU backends
        gpu_count: Number of GPUs to reserve or "all" (NVIDIA only)
    """

    shm_size: str = Field(
        default="8g", description="Shared memory size (for model loading)"
    )
    memory_limit: str = Field(default="32g", description="Container memory limit")
    gpu_count: Annotated[int, Field(ge=1)] | Literal["all"] = Field(
        default="all", description="Number of GPUs to allocate (NVIDIA only)"
    )

    @field_validator("shm_size")
    @classmethod
    def validate_shm_size(cls, v: str) -> str:
        """Validate shared memory size format."""
        return _validate_byte_size(v, "shared memory size")

    @field_validator("memory_limit")
    @classmethod
    def validate_memory_limit(cls, v: str) -> str:
        """Validate memory limit format."""
        return _validate_byte_size(v, "memory limit")


class SecurityConfig(_OptionModel):
    """Container hardening options."""

    read_only_rootfs: bool = Field(
        default=False, description="Run container with read-only root filesystem"
    )


class LoggingConfig(_OptionModel):
    """json-file log rotation policy for the container."""

    max_size: str = Field(default="50m", description="Maximum log file size")
    max_files: Annotated[int, Field(ge=1)] = Field(
        default=3, description="Number of log files to retain"
    )

    @field_validator("max_size")
    @classmethod
    def validate_max_size(cls, v: str) -> str:
        """Validate log file size format."""
        return _validate_byte_size(v, "log file size")


class RocmConfig(_OptionModel):
    """ROCm runtime overrides.

    Attributes:
        visible_devices: ROCR_VISIBLE_DEVICES value
        gfx_version_override: HSA_OVERRIDE_GFX_VERSION for unsupported GPUs
    """

    visible_devices: str = Field(default="0", description="ROCR_VISIBLE_DEVICES value")
    gfx_version_override: str | None = Field(
        default=None,
        description="HSA_OVERRIDE_GFX_VERSION for unsupported GPUs",
        examples=["11.0.3"],
    )


class AdvancedConfig(_OptionModel):
    """Backend-specific tuning."""

    rocm: RocmConfig = Field(default_factory=RocmConfig)


class DeploymentConfig(_OptionModel):
    """Complete, validated stack configuration.

    Instances are immutable. Two field-wise equal configurations render the
    same compose file byte for byte.

    Attributes:
        user: Account owning the state directories
        group: Group owning the state directories
        state_directory: Root for models and the deployed compose file
        image: Container image reference
        acceleration: GPU backend; ``none`` runs on CPU
        cuda_capable: Whether the host exposes an NVIDIA CUDA-capable GPU
        network: Host network binding
        resources: Resource limits
        security: Hardening options
        logging: Container log rotation
        advanced: Backend-specific overrides
    """

    user: str = Field(
        default="facefusion",
        description="User account to run FaceFusion management commands",
    )
    group: str = Field(default="facefusion", description="Group for FaceFusion files")
    state_directory: Path = Field(
        default=Path("/var/lib/facefusion"),
        description="Directory for FaceFusion state, models, and compose files",
    )
    image: ImageConfig = Field(default_factory=ImageConfig)
    acceleration: Acceleration = Field(
        default=Acceleration.NONE,
        description="GPU acceleration backend. none for CPU-only.",
    )
    cuda_capable: bool = Field(
        default=False,
        description="Host has an NVIDIA CUDA-capable GPU (required for tensorrt)",
    )
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    resources: ResourcesConfig = Field(default_factory=ResourcesConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)

    @field_validator("state_directory")
    @classmethod
    def validate_state_directory(cls, v: Path) -> Path:
        """Require an absolute state directory."""
        if not v.is_absolute():
            raise ValueError(f"Invalid state directory: {v}. Must be an absolute path")
        return v

    @field_validator("acceleration", mode="before")
    @classmethod
    def normalize_acceleration(cls, v: object) -> object:
        """Treat a null backend as CPU-only."""
        if v is None:
            return Acceleration.NONE
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def validate_tensorrt_hardware(self) -> "DeploymentConfig":
        """Validate that TensorRT is only selected on CUDA-capable hosts."""
        if self.acceleration is Acceleration.TENSORRT and not self.cuda_capable:
            raise ValueError(
                "TensorRT requires CUDA-capable hardware "
                "(set cudaCapable: true on hosts with an NVIDIA GPU)"
            )
        return self

    @property
    def image_reference(self) -> str:
        """Full image reference including the acceleration suffix."""
        return (
            f"{self.image.registry}/{self.image.repository}:"
            f"{self.image.tag}{self.acceleration.tag_suffix}"
        )

    @property
    def models_dir(self) -> Path:
        return self.state_directory / "models"

    @property
    def compose_dir(self) -> Path:
        return self.state_directory / "compose"

    @property
    def compose_file(self) -> Path:
        return self.compose_dir / COMPOSE_FILE_NAME

    @property
    def service_url(self) -> str:
        """URL of the web UI as advertised to the user."""
        return f"http://{url_host(self.network.bind_address)}:{self.network.port}"
