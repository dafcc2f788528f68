"""Configuration loader for the FaceFusion stack.

This module provides the ConfigLoader class for locating, parsing and
validating the stack configuration from a YAML file and environment
variable overrides.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ffstack.config.defaults import CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_PATH
from ffstack.config.env_loader import substitute_env_vars
from ffstack.config.validator import flatten_pydantic_errors
from ffstack.lib.errors import ConfigError
from ffstack.lib.logging_config import get_logger
from ffstack.models.deployment import DeploymentConfig

logger = get_logger(__name__)

# Environment variable to option path mapping
ENV_VAR_MAP: dict[tuple[str, ...], str] = {
    ("state_directory",): "FFSTACK_STATE_DIR",
    ("image", "tag"): "FFSTACK_IMAGE_TAG",
    ("acceleration",): "FFSTACK_ACCELERATION",
    ("cuda_capable",): "FFSTACK_CUDA_CAPABLE",
    ("network", "bind_address"): "FFSTACK_BIND_ADDRESS",
    ("network", "port"): "FFSTACK_PORT",
}


def _parse_env_value(path: tuple[str, ...], value: str) -> Any:
    """Parse environment variable value to appropriate type.

    Args:
        path: Option path (used to determine type)
        value: String value from environment variable

    Returns:
        Parsed value in correct type (int, bool, None or str)

    Raises:
        ValueError: If value cannot be parsed
    """
    if path == ("network", "port"):
        return int(value)
    if path == ("cuda_capable",):
        return value.lower() in ("true", "1", "yes", "on")
    if path == ("acceleration",) and value.lower() in ("", "null", "none", "cpu"):
        return None
    return value


def _set_option(data: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    """Set a nested option, replacing both spellings of the key.

    Keys are written in their camelCase alias form so that an override wins
    over a value the file gave under either spelling.
    """
    node = data
    for key in path[:-1]:
        alias = to_camel(key)
        child = node.pop(key, None) if key != alias else None
        child = node.get(alias, child)
        if not isinstance(child, dict):
            child = {}
        node[alias] = child
        node = child

    leaf = path[-1]
    alias = to_camel(leaf)
    if leaf != alias:
        node.pop(leaf, None)
    node[alias] = value


class ConfigLoader:
    """Loads and validates the stack configuration.

    Resolution order for the configuration file:
    1. Path passed to :meth:`load`
    2. ``FFSTACK_CONFIG`` environment variable
    3. ``/etc/ffstack/config.yaml`` (optional; defaults apply if missing)

    Environment overrides from ``ENV_VAR_MAP`` are applied on top of the
    file before validation.
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        default_path: Path = DEFAULT_CONFIG_PATH,
    ) -> None:
        self.env: Mapping[str, str] = os.environ if env is None else env
        self.default_path = default_path

    def resolve_path(self, config_path: str | Path | None = None) -> tuple[Path, bool]:
        """Return the configuration file path and whether it was requested.

        A requested path must exist; the built-in default may be absent.
        """
        if config_path:
            return Path(config_path), True
        env_path = self.env.get(CONFIG_PATH_ENV_VAR)
        if env_path:
            return Path(env_path), True
        return self.default_path, False

    def read_yaml(self, path: Path) -> dict[str, Any]:
        """Read a YAML configuration file with environment substitution.

        Raises:
            ConfigError: If the file cannot be read or parsed, or is not a mapping
        """
        try:
            raw_text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(
                field="config_file",
                message=f"Cannot read configuration file {path}: {exc}",
            ) from exc

        substituted = substitute_env_vars(raw_text, self.env)
        try:
            content = yaml.safe_load(substituted)
        except yaml.YAMLError as exc:
            raise ConfigError(
                field="config_file",
                message=f"Invalid YAML in {path}: {exc}",
            ) from exc

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigError(
                field="config_file",
                message=f"{path} must contain a mapping of options",
            )
        return content

    def apply_env_overrides(self, data: dict[str, Any]) -> dict[str, Any]:
        """Apply ``FFSTACK_*`` environment overrides to raw option data."""
        for path, env_var in ENV_VAR_MAP.items():
            if env_var not in self.env:
                continue
            try:
                value = _parse_env_value(path, self.env[env_var])
            except ValueError as exc:
                raise ConfigError(
                    field=env_var,
                    message=f"Invalid value {self.env[env_var]!r}: {exc}",
                ) from exc
            logger.debug(f"Override {'.'.join(path)} from {env_var}")
            _set_option(data, path, value)
        return data

    def build_config(self, data: dict[str, Any]) -> DeploymentConfig:
        """Validate raw option data into a DeploymentConfig.

        Raises:
            ConfigError: If validation fails, with every field error listed
        """
        try:
            return DeploymentConfig.model_validate(data)
        except PydanticValidationError as exc:
            raise ConfigError(
                field="options",
                message="\n".join(flatten_pydantic_errors(exc)),
            ) from exc

    def load(self, config_path: str | Path | None = None) -> DeploymentConfig:
        """Load the stack configuration.

        Args:
            config_path: Explicit configuration file, overriding the default

        Returns:
            Validated, immutable DeploymentConfig

        Raises:
            ConfigError: If a requested file is missing or any option is invalid
        """
        path, requested = self.resolve_path(config_path)
        if path.exists():
            logger.debug(f"Loading configuration from {path}")
            data = self.read_yaml(path)
        elif requested:
            raise ConfigError(
                field="config_file",
                message=f"Configuration file not found: {path}",
            )
        else:
            logger.debug(f"{path} not found, using built-in defaults")
            data = {}

        return self.build_config(self.apply_env_overrides(data))
