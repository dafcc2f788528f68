"""The ``ff-stack`` command.

Takes a single lifecycle verb, loads the stack configuration and hands the
verb to the dispatcher. Every failure is reported as one severity-tagged
line and mapped to an exit code.
"""

from __future__ import annotations

import sys
from collections.abc import Generator
from contextlib import contextmanager

import click

from ffstack.config.loader import ConfigLoader
from ffstack.deploy.dispatcher import Verb, dispatch
from ffstack.deploy.usage import render_usage
from ffstack.lib.errors import (
    ConfigError,
    DeploymentError,
    GroupMembershipError,
    NotDeployedError,
    UnknownCommandError,
)
from ffstack.lib.logging_config import get_logger, setup_logging
from ffstack.lib.ui.console import Console
from ffstack.models.deployment import DeploymentConfig

logger = get_logger(__name__)

EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


@contextmanager
def handle_stack_errors(console: Console) -> Generator[None, None, None]:
    """Context manager for consistent error handling in ff-stack.

    Exit codes:
        1: Precondition, filesystem or unexpected failure
        2: Configuration error
    """
    try:
        yield
    except ConfigError as e:
        logger.debug(f"Configuration error: {e}")
        console.error("Configuration error")
        for line in e.message.splitlines():
            click.echo(f"  {line}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except GroupMembershipError as e:
        console.error(e.message)
        sys.exit(EXIT_FAILURE)
    except NotDeployedError as e:
        logger.debug(str(e))
        console.error(e.message)
        sys.exit(EXIT_FAILURE)
    except DeploymentError as e:
        logger.debug(f"Deployment error: {e}")
        console.error(f"{e.operation} failed: {e.message}")
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        console.error(str(e))
        sys.exit(EXIT_FAILURE)


def _usage_config(config_path: str | None, console: Console) -> DeploymentConfig:
    """Configuration shown in the help text.

    An invalid or missing configuration falls back to the built-in defaults
    with a warning.
    """
    try:
        return ConfigLoader().load(config_path)
    except ConfigError as e:
        logger.debug(f"Showing usage with defaults: {e}")
        console.warn("Configuration is invalid; showing built-in defaults")
        return DeploymentConfig()


@click.command(
    name="ff-stack",
    add_help_option=False,
    context_settings={"ignore_unknown_options": True},
)
@click.argument("command", default="help", required=False)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Stack configuration file (default: $FFSTACK_CONFIG or /etc/ffstack/config.yaml)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose debug logging",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Only log errors",
)
def main(command: str, config_path: str | None, verbose: bool, quiet: bool) -> None:
    """Manage the FaceFusion container stack.

    COMMAND is one of start (up), stop (down), restart, status, logs,
    pull, update, shell (sh) or help. Defaults to help.

    Example:

        ff-stack start

        ff-stack --config ./facefusion.yaml status
    """
    setup_logging(verbose=verbose, quiet=quiet)
    console = Console()

    with handle_stack_errors(console):
        try:
            verb = Verb.parse(command)
        except UnknownCommandError as e:
            console.error(e.message)
            console.echo(render_usage(_usage_config(config_path, console)))
            sys.exit(EXIT_FAILURE)

        if verb is Verb.HELP:
            config = _usage_config(config_path, console)
        else:
            config = ConfigLoader().load(config_path)

        code = dispatch(verb, config, console=console)

    sys.exit(code)


if __name__ == "__main__":
    main()
