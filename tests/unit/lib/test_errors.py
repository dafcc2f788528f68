"""Unit tests for the ffstack exception hierarchy."""

import pytest

from ffstack.lib.errors import (
    ConfigError,
    DeploymentError,
    EngineNotAvailableError,
    FFStackError,
    GroupMembershipError,
    NotDeployedError,
    UnknownCommandError,
)


@pytest.mark.unit
class TestErrorHierarchy:
    """Tests for exception attributes and inheritance."""

    @pytest.mark.parametrize(
        "error",
        [
            ConfigError("network.port", "out of range"),
            DeploymentError("sync", "disk full"),
            EngineNotAvailableError("up"),
            GroupMembershipError("docker"),
            NotDeployedError("/var/lib/facefusion/compose"),
            UnknownCommandError("frobnicate"),
        ],
    )
    def test_all_errors_are_ffstack_errors(self, error: FFStackError) -> None:
        assert isinstance(error, FFStackError)

    def test_config_error(self) -> None:
        error = ConfigError("network.port", "out of range")

        assert error.field == "network.port"
        assert error.message == "out of range"
        assert str(error) == "Configuration error in 'network.port': out of range"

    def test_engine_not_available_is_deployment_error(self) -> None:
        error = EngineNotAvailableError("pull", command="podman")

        assert isinstance(error, DeploymentError)
        assert error.operation == "pull"
        assert "'podman' executable not found" in error.message

    def test_group_membership_remediation(self) -> None:
        error = GroupMembershipError("docker")

        assert error.message == (
            "Current user not in 'docker' group. "
            "Run: sudo usermod -aG docker $USER && newgrp docker"
        )

    def test_not_deployed(self) -> None:
        error = NotDeployedError("/srv/compose")

        assert error.message == "Not deployed"
        assert "/srv/compose" in str(error)

    def test_unknown_command(self) -> None:
        assert str(UnknownCommandError("frobnicate")) == "Unknown command: frobnicate"
