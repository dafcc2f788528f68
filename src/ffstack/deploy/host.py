"""Host-side helpers: group membership, state directories and port exposure."""

from __future__ import annotations

import grp
import os
import shutil
import stat
from pathlib import Path

from ffstack.config.defaults import DOCKER_GROUP, ROCM_GROUPS, STATE_DIR_MODE
from ffstack.lib.logging_config import get_logger
from ffstack.models.deployment import Acceleration, DeploymentConfig

logger = get_logger(__name__)


def current_groups() -> set[str]:
    """Return the group names of the invoking process.

    Includes the supplementary groups and the effective primary group.
    Group ids without a name entry are skipped.
    """
    gids = set(os.getgroups())
    gids.add(os.getegid())

    names: set[str] = set()
    for gid in gids:
        try:
            names.add(grp.getgrgid(gid).gr_name)
        except KeyError:
            logger.debug(f"No group entry for gid {gid}")
    return names


def required_groups(config: DeploymentConfig) -> list[str]:
    """Groups the management account needs for this configuration."""
    groups = [DOCKER_GROUP]
    if config.acceleration is Acceleration.ROCM:
        groups.extend(ROCM_GROUPS)
    return groups


def firewall_ports(config: DeploymentConfig) -> list[int]:
    """TCP ports to open on the host firewall.

    The UI port is only exposed when the service binds beyond loopback.
    """
    if config.network.is_loopback:
        return []
    return [config.network.port]


def state_directories(config: DeploymentConfig) -> list[Path]:
    """Directories provisioned before any engine call, parents first."""
    return [config.state_directory, config.models_dir, config.compose_dir]


def provision_directory(
    path: Path,
    mode: int = STATE_DIR_MODE,
    owner: str | None = None,
    group: str | None = None,
) -> None:
    """Create ``path`` if needed and apply permission bits and ownership.

    The mode is only applied when it differs and the directory belongs to
    the invoking user (or the caller is root), so an operator can reuse
    directories provisioned by another account. Ownership is only changed
    when running as root.

    Raises:
        OSError: If the directory cannot be created, chmod-ed or chown-ed
        LookupError: If the owner or group does not exist
    """
    path.mkdir(parents=True, exist_ok=True)
    euid = os.geteuid()
    info = path.stat()
    if stat.S_IMODE(info.st_mode) != mode:
        if euid in (0, info.st_uid):
            os.chmod(path, mode)
        else:
            logger.debug(f"Leaving mode of {path} (owned by uid {info.st_uid})")
    if euid == 0 and (owner or group):
        shutil.chown(path, user=owner, group=group)
