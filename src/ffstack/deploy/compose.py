"""Docker Compose definition rendering for the FaceFusion stack.

This module maps a validated DeploymentConfig onto the compose file consumed
by ``docker compose``. Rendering is pure and deterministic: the same
configuration always produces the same text, which is what lets the sync
step skip rewriting an unchanged deployment.
"""

from __future__ import annotations

from typing import Any

import yaml

from ffstack.config.defaults import (
    COMPOSE_SCHEMA_VERSION,
    CONTAINER_MODELS_PATH,
    CONTAINER_NAME,
    CONTAINER_PORT,
    HEALTHCHECK,
    ROCM_DEVICES,
    ROCM_GROUPS,
    SERVICE_NAME,
)
from ffstack.models.deployment import Acceleration, DeploymentConfig

COMPOSE_HEADER = (
    "# FaceFusion stack definition\n"
    "# Generated by ffstack; manual edits are replaced on the next start or pull.\n"
)


class QuotedString(str):
    """Marker for scalars that are always emitted double-quoted."""


class _ComposeDumper(yaml.SafeDumper):
    """Safe dumper that indents block sequences under their parent key."""

    def increase_indentation(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indentation(flow, False)


def _represent_quoted(dumper: yaml.SafeDumper, data: QuotedString) -> yaml.Node:
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style='"')


_ComposeDumper.add_representer(QuotedString, _represent_quoted)


def build_environment(config: DeploymentConfig) -> dict[str, QuotedString]:
    """Build the container environment block.

    Args:
        config: Validated deployment configuration

    Returns:
        Ordered mapping of environment variable names to quoted values
    """
    env = {"GRADIO_SERVER_NAME": QuotedString("0.0.0.0")}
    if config.acceleration is Acceleration.ROCM:
        rocm = config.advanced.rocm
        env["ROCR_VISIBLE_DEVICES"] = QuotedString(rocm.visible_devices)
        if rocm.gfx_version_override is not None:
            env["HSA_OVERRIDE_GFX_VERSION"] = QuotedString(rocm.gfx_version_override)
    return env


def _build_deploy_section(config: DeploymentConfig) -> dict[str, Any]:
    resources: dict[str, Any] = {}
    if config.acceleration.is_nvidia:
        gpu_count = config.resources.gpu_count
        resources["reservations"] = {
            "devices": [
                {
                    "driver": "nvidia",
                    "count": gpu_count if isinstance(gpu_count, int) else "all",
                    "capabilities": ["gpu"],
                }
            ]
        }
    resources["limits"] = {"memory": config.resources.memory_limit}
    return {"resources": resources}


def build_compose(config: DeploymentConfig) -> dict[str, Any]:
    """Build the compose definition as an ordered mapping.

    Args:
        config: Validated deployment configuration

    Returns:
        Compose document with a single ``facefusion`` service
    """
    acceleration = config.acceleration
    service: dict[str, Any] = {
        "image": config.image_reference,
        "container_name": CONTAINER_NAME,
        "restart": "unless-stopped",
        "ipc": "host",
        "shm_size": QuotedString(config.resources.shm_size),
        "security_opt": ["no-new-privileges:true"],
    }

    if config.security.read_only_rootfs:
        service["read_only"] = True

    if acceleration is Acceleration.ROCM:
        service["devices"] = [QuotedString(device) for device in ROCM_DEVICES]
        service["group_add"] = list(ROCM_GROUPS)

    if acceleration.is_gpu:
        service["deploy"] = _build_deploy_section(config)

    volumes = [f"{config.models_dir}:{CONTAINER_MODELS_PATH}"]
    if config.security.read_only_rootfs:
        volumes.append("/tmp")
    service["volumes"] = volumes

    service["ports"] = [
        QuotedString(
            f"{config.network.bind_address}:{config.network.port}:{CONTAINER_PORT}"
        )
    ]
    service["environment"] = build_environment(config)
    service["healthcheck"] = {
        key: list(value) if isinstance(value, list) else value
        for key, value in HEALTHCHECK.items()
    }
    service["logging"] = {
        "driver": QuotedString("json-file"),
        "options": {
            "max-size": QuotedString(config.logging.max_size),
            "max-file": QuotedString(str(config.logging.max_files)),
        },
    }

    return {
        "version": QuotedString(COMPOSE_SCHEMA_VERSION),
        "services": {SERVICE_NAME: service},
    }


def render_compose(config: DeploymentConfig) -> str:
    """Render the compose file text for a deployment configuration.

    Args:
        config: Validated deployment configuration

    Returns:
        Compose YAML, byte-identical across calls for equal configurations

    Example:
        >>> text = render_compose(DeploymentConfig())
        >>> "image: docker.io/facefusion/facefusion:3.5.2" in text
        True
    """
    body = yaml.dump(
        build_compose(config),
        Dumper=_ComposeDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=4096,
    )
    return COMPOSE_HEADER + "\n" + body
