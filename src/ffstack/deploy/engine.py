"""Thin wrapper around the ``docker compose`` command line.

Only six engine operations are used by the stack: bring-up, tear-down,
process listing, image pull, exec and log streaming. Each call inherits the
caller's terminal so engine output reaches the user unmodified, and returns
the engine's exit status without interpretation.
"""

from __future__ import annotations

import subprocess  # nosec B404
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from ffstack.config.defaults import LOG_TAIL_LINES, SERVICE_NAME, STOP_TIMEOUT
from ffstack.lib.errors import EngineNotAvailableError
from ffstack.lib.logging_config import get_logger

logger = get_logger(__name__)

PS_FORMAT = "table {{.Name}}\t{{.Status}}\t{{.Ports}}"

Runner = Callable[..., "subprocess.CompletedProcess[Any]"]


class ComposeEngine:
    """Runs ``docker compose`` operations for one compose project.

    Example:
        >>> engine = ComposeEngine(Path("/var/lib/facefusion/compose"))
        >>> engine.up()
        0
    """

    def __init__(
        self,
        project_dir: Path,
        service: str = SERVICE_NAME,
        runner: Runner | None = None,
        executable: str = "docker",
    ) -> None:
        """Initialize the engine wrapper.

        Args:
            project_dir: Directory holding docker-compose.yml
            service: Compose service targeted by exec and logs
            runner: Callable with the ``subprocess.run`` signature (for testing)
            executable: Docker CLI executable
        """
        self.project_dir = project_dir
        self.service = service
        self.executable = executable
        self._runner: Runner = runner or subprocess.run

    def _run(self, operation: str, args: Sequence[str]) -> int:
        cmd = [self.executable, "compose", *args]
        logger.debug(f"Running {' '.join(cmd)} in {self.project_dir}")
        try:
            result = self._runner(  # noqa: S603  # nosec B603
                cmd,
                cwd=str(self.project_dir),
                check=False,
            )
        except FileNotFoundError as e:
            raise EngineNotAvailableError(
                operation=operation, command=self.executable
            ) from e
        logger.debug(f"{operation} exited with status {result.returncode}")
        return int(result.returncode)

    def up(self, remove_orphans: bool = True) -> int:
        """Create and start the service in the background."""
        args = ["up", "-d"]
        if remove_orphans:
            args.append("--remove-orphans")
        return self._run("up", args)

    def down(self, timeout: int = STOP_TIMEOUT) -> int:
        """Stop and remove the service, allowing ``timeout`` seconds to exit."""
        return self._run("down", ["down", "--timeout", str(timeout)])

    def ps(self) -> int:
        """Print the project's container table."""
        return self._run("ps", ["ps", "--format", PS_FORMAT])

    def pull(self) -> int:
        """Fetch the images referenced by the compose file."""
        return self._run("pull", ["pull"])

    def exec(self, command: Sequence[str], interactive: bool = True) -> int:
        """Run ``command`` inside the running service container.

        Args:
            command: Command and arguments to execute
            interactive: Attach a TTY; False passes ``-T`` for scripted use
        """
        args = ["exec"]
        if not interactive:
            args.append("-T")
        args.extend([self.service, *command])
        return self._run("exec", args)

    def logs(self, follow: bool = True, tail: int = LOG_TAIL_LINES) -> int:
        """Stream service logs; blocks until the stream ends when following."""
        args = ["logs"]
        if follow:
            args.append("-f")
        args.extend([f"--tail={tail}", self.service])
        return self._run("logs", args)
