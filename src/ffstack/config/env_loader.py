"""Environment variable helpers for configuration files.

Supports ``${VAR}`` and ``${VAR:-default}`` references inside YAML text.
"""

import os
import re
from collections.abc import Mapping

from ffstack.lib.errors import ConfigError

ENV_REFERENCE_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def get_env_var(
    name: str,
    default: str | None = None,
    env: Mapping[str, str] | None = None,
) -> str | None:
    """Return an environment variable, treating empty values as unset."""
    source = os.environ if env is None else env
    value = source.get(name)
    return value if value else default


def substitute_env_vars(text: str, env: Mapping[str, str] | None = None) -> str:
    """Replace ``${VAR}`` references in ``text`` with environment values.

    Args:
        text: Raw configuration text
        env: Environment mapping (defaults to ``os.environ``)

    Returns:
        Text with every reference substituted

    Raises:
        ConfigError: If a referenced variable is unset and has no default
    """

    def _replace(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        value = get_env_var(name, default, env)
        if value is None:
            raise ConfigError(
                field=name,
                message=(
                    f"Environment variable '{name}' is not set. "
                    f"Export it or use ${{{name}:-default}}."
                ),
            )
        return value

    return ENV_REFERENCE_PATTERN.sub(_replace, text)
