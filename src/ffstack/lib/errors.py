"""Custom exception hierarchy for ffstack configuration and lifecycle commands."""


class FFStackError(Exception):
    """Base exception for all ffstack errors.

    All ffstack-specific exceptions inherit from this class, enabling
    centralized exception handling in the CLI.
    """

    pass


class ConfigError(FFStackError):
    """Exception raised for configuration errors.

    Raised when the configuration file cannot be read or parsed, or when
    the resulting options fail validation.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class DeploymentError(FFStackError):
    """Exception raised when a local deployment step fails.

    Covers filesystem work done before the container engine is invoked
    (directory provisioning, compose file replacement).

    Attributes:
        operation: Name of the step that failed (e.g. "ensure_dirs", "sync")
        message: Human-readable error message
    """

    def __init__(self, operation: str, message: str) -> None:
        """Create a deployment error for a named operation."""
        self.operation = operation
        self.message = message
        super().__init__(f"Deployment operation '{operation}' failed: {message}")


class EngineNotAvailableError(DeploymentError):
    """Exception raised when the docker CLI cannot be executed."""

    def __init__(self, operation: str, command: str = "docker") -> None:
        """Create an error for a missing container engine binary.

        Args:
            operation: Engine operation that was attempted
            command: Executable that could not be found
        """
        self.command = command
        super().__init__(
            operation=operation,
            message=(
                f"'{command}' executable not found. "
                "Install Docker with the compose plugin and make sure it is on PATH."
            ),
        )


class GroupMembershipError(FFStackError):
    """Exception raised when the invoking user lacks a required group.

    Attributes:
        group: The missing group name
        message: Remediation hint shown to the user
    """

    def __init__(self, group: str) -> None:
        """Create an error for a missing group membership."""
        self.group = group
        self.message = (
            f"Current user not in '{group}' group. "
            f"Run: sudo usermod -aG {group} $USER && newgrp {group}"
        )
        super().__init__(self.message)


class NotDeployedError(FFStackError):
    """Exception raised when a command needs an existing deployment."""

    def __init__(self, compose_dir: str) -> None:
        """Create an error for a missing compose directory."""
        self.compose_dir = compose_dir
        self.message = "Not deployed"
        super().__init__(f"Not deployed: {compose_dir} does not exist")


class UnknownCommandError(FFStackError):
    """Exception raised for a command name outside the known verbs."""

    def __init__(self, command: str) -> None:
        """Create an error for an unrecognized command."""
        self.command = command
        self.message = f"Unknown command: {command}"
        super().__init__(self.message)
