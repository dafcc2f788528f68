"""Lifecycle command dispatch for the FaceFusion stack.

Each invocation handles exactly one verb. Verbs that (re)deploy the stack
first provision the state directories and sync the rendered compose file,
then hand over to ``docker compose``. Engine exit statuses are returned
verbatim and never retried.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Callable
from enum import Enum

import requests

from ffstack.config.defaults import (
    DOCKER_GROUP,
    HEALTH_PROBE_TIMEOUT,
    SHELL_COMMAND,
    STOP_TIMEOUT,
)
from ffstack.deploy.compose import render_compose
from ffstack.deploy.engine import ComposeEngine
from ffstack.deploy.host import current_groups, provision_directory, state_directories
from ffstack.deploy.sync import write_if_changed
from ffstack.deploy.usage import render_usage
from ffstack.lib.errors import (
    DeploymentError,
    GroupMembershipError,
    NotDeployedError,
    UnknownCommandError,
)
from ffstack.lib.logging_config import get_logger
from ffstack.lib.ui.console import Console
from ffstack.models.deployment import DeploymentConfig, url_host

logger = get_logger(__name__)

INTERRUPTED_EXIT_CODE = 130


class Verb(str, Enum):
    """Lifecycle commands understood by ff-stack."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"
    STATUS = "status"
    LOGS = "logs"
    PULL = "pull"
    UPDATE = "update"
    SHELL = "shell"
    HELP = "help"

    @classmethod
    def parse(cls, name: str) -> Verb:
        """Resolve a command name or alias to a Verb.

        Raises:
            UnknownCommandError: If the name is not a known verb or alias
        """
        try:
            return cls(VERB_ALIASES.get(name, name))
        except ValueError as e:
            raise UnknownCommandError(name) from e


VERB_ALIASES: dict[str, str] = {
    "up": "start",
    "down": "stop",
    "sh": "shell",
    "--help": "help",
    "-h": "help",
}


def health_url(config: DeploymentConfig) -> str:
    """URL used for the direct liveness probe.

    An unspecified bind address (0.0.0.0 or ::) is probed over loopback.
    """
    address = ipaddress.ip_address(config.network.bind_address)
    if address.is_unspecified:
        address = ipaddress.ip_address("::1" if address.version == 6 else "127.0.0.1")
    return f"http://{url_host(str(address))}:{config.network.port}/"


def http_probe(url: str, timeout: float = HEALTH_PROBE_TIMEOUT) -> bool:
    """Return True if an HTTP GET against ``url`` succeeds with a 2xx/3xx."""
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.debug(f"Health probe {url} failed: {e}")
        return False
    logger.debug(f"Health probe {url} returned {response.status_code}")
    return response.ok


class StackManager:
    """Runs lifecycle verbs against one FaceFusion deployment.

    Collaborators are injectable so the sequencing can be exercised without
    a docker daemon.

    Args:
        config: Validated deployment configuration
        engine: Compose engine wrapper; defaults to one rooted at compose_dir
        console: Severity-tagged output
        groups_provider: Returns the invoking user's group names
        probe: Liveness probe taking a URL
    """

    def __init__(
        self,
        config: DeploymentConfig,
        engine: ComposeEngine | None = None,
        console: Console | None = None,
        groups_provider: Callable[[], set[str]] | None = None,
        probe: Callable[[str], bool] | None = None,
    ) -> None:
        self.config = config
        self.engine = engine or ComposeEngine(config.compose_dir)
        self.console = console or Console()
        self._groups_provider = groups_provider or current_groups
        self._probe = probe or http_probe

    def run(self, verb: Verb) -> int:
        """Execute a verb and return its exit status."""
        handlers: dict[Verb, Callable[[], int]] = {
            Verb.START: self.start,
            Verb.STOP: self.stop,
            Verb.RESTART: self.restart,
            Verb.STATUS: self.status,
            Verb.LOGS: self.logs,
            Verb.PULL: self.pull,
            Verb.UPDATE: self.update,
            Verb.SHELL: self.shell,
            Verb.HELP: self.help,
        }
        logger.debug(f"Dispatching '{verb.value}'")
        return handlers[verb]()

    # -- preconditions and local state ---------------------------------

    def require_docker_group(self) -> None:
        """Fail unless the invoking user can talk to the docker daemon."""
        if DOCKER_GROUP not in self._groups_provider():
            raise GroupMembershipError(DOCKER_GROUP)

    def require_deployed(self) -> None:
        """Fail unless the compose directory exists."""
        if not self.config.compose_dir.is_dir():
            raise NotDeployedError(str(self.config.compose_dir))

    def ensure_dirs(self) -> None:
        """Create the state, models and compose directories.

        Raises:
            DeploymentError: If any directory cannot be provisioned
        """
        for path in state_directories(self.config):
            try:
                provision_directory(
                    path, owner=self.config.user, group=self.config.group
                )
            except (OSError, LookupError) as e:
                raise DeploymentError(
                    operation="ensure_dirs",
                    message=f"Cannot provision {path}: {e}",
                ) from e

    def sync_definition(self) -> bool:
        """Replace the deployed compose file if the rendered one differs.

        Returns:
            True if the deployed file was written

        Raises:
            DeploymentError: If the file cannot be read or replaced
        """
        rendered = render_compose(self.config)
        try:
            changed = write_if_changed(self.config.compose_file, rendered)
        except OSError as e:
            raise DeploymentError(
                operation="sync",
                message=f"Cannot update {self.config.compose_file}: {e}",
            ) from e
        if changed:
            self.console.info("Compose configuration updated")
        return changed

    def _prepare(self) -> None:
        self.require_docker_group()
        self.ensure_dirs()
        self.sync_definition()

    def _engine_failed(self, action: str, code: int) -> int:
        self.console.error(f"{action} failed (docker compose exit status {code})")
        return code

    # -- verbs ---------------------------------------------------------

    def start(self) -> int:
        """Sync the definition and bring the service up."""
        self._prepare()
        code = self.engine.up(remove_orphans=True)
        if code != 0:
            return self._engine_failed("Start", code)
        self.console.success(f"FaceFusion starting at {self.config.service_url}")
        self.console.info("Run 'ff-stack logs' to watch startup progress")
        return 0

    def stop(self) -> int:
        """Tear the service down; a missing deployment counts as stopped."""
        if not self.config.compose_dir.is_dir():
            self.console.warn("Not running")
            return 0
        code = self.engine.down(timeout=STOP_TIMEOUT)
        if code != 0:
            return self._engine_failed("Stop", code)
        self.console.success("FaceFusion stopped")
        return 0

    def restart(self) -> int:
        """Stop, then start; a failed stop skips the start."""
        code = self.stop()
        if code != 0:
            return code
        return self.start()

    def status(self) -> int:
        """Show the engine's process table and a direct health verdict."""
        self.require_deployed()
        code = self.engine.ps()
        self.console.echo()
        if self._probe(health_url(self.config)):
            self.console.success("Health: OK")
        else:
            self.console.warn("Health: Unhealthy or starting")
        return code

    def logs(self) -> int:
        """Follow the service logs until the stream ends or is interrupted."""
        self.require_deployed()
        try:
            return self.engine.logs(follow=True)
        except KeyboardInterrupt:
            logger.debug("Log stream interrupted")
            return INTERRUPTED_EXIT_CODE

    def pull(self) -> int:
        """Sync the definition and fetch the image without restarting."""
        self._prepare()
        code = self.engine.pull()
        if code != 0:
            return self._engine_failed("Pull", code)
        self.console.success(f"Image pulled: {self.config.image_reference}")
        return 0

    def update(self) -> int:
        """Pull, then restart; a failed pull leaves the running stack alone."""
        code = self.pull()
        if code != 0:
            return code
        return self.restart()

    def shell(self) -> int:
        """Open an interactive shell in the running container."""
        self.require_deployed()
        return self.engine.exec(SHELL_COMMAND, interactive=True)

    def help(self) -> int:
        """Print the usage text."""
        self.console.echo(render_usage(self.config))
        return 0


def dispatch(
    verb: Verb,
    config: DeploymentConfig,
    **collaborators: object,
) -> int:
    """Run one lifecycle verb for ``config``.

    Args:
        verb: Command to execute
        config: Validated deployment configuration
        **collaborators: Optional StackManager collaborators
            (engine, console, groups_provider, probe)

    Returns:
        Process exit status for the command

    Raises:
        GroupMembershipError: If the user is not in the docker group
        NotDeployedError: If status, logs or shell run before any deployment
        DeploymentError: If directory provisioning or the compose sync fails
    """
    manager = StackManager(config, **collaborators)  # type: ignore[arg-type]
    return manager.run(verb)


__all__ = [
    "StackManager",
    "Verb",
    "dispatch",
    "health_url",
    "http_probe",
]
