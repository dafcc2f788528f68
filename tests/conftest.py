"""Pytest configuration and shared fixtures for ffstack tests."""

import grp
import os
import pwd
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import yaml

from ffstack.models.deployment import DeploymentConfig


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Remove FFSTACK_* variables so the host environment cannot leak in."""
    for name in list(os.environ):
        if name.startswith("FFSTACK_"):
            monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def current_owner() -> dict[str, str]:
    """User and group names of the test process.

    Lets directory provisioning chown successfully when tests run as root.
    """
    return {
        "user": pwd.getpwuid(os.getuid()).pw_name,
        "group": grp.getgrgid(os.getgid()).gr_name,
    }


@pytest.fixture
def make_config(
    tmp_path: Path, current_owner: dict[str, str]
) -> Callable[..., DeploymentConfig]:
    """Factory for configs whose state directory lives under tmp_path."""

    def _make(**overrides: Any) -> DeploymentConfig:
        data: dict[str, Any] = {
            "stateDirectory": str(tmp_path / "state"),
            **current_owner,
        }
        data.update(overrides)
        return DeploymentConfig.model_validate(data)

    return _make


@pytest.fixture
def config_file(
    tmp_path: Path, current_owner: dict[str, str]
) -> Callable[..., Path]:
    """Write a YAML configuration file and return its path."""

    def _write(options: dict[str, Any] | None = None) -> Path:
        data: dict[str, Any] = {
            "stateDirectory": str(tmp_path / "state"),
            **current_owner,
        }
        data.update(options or {})
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_engine() -> MagicMock:
    """ComposeEngine double whose operations all succeed."""
    engine = MagicMock()
    for name in ("up", "down", "ps", "pull", "exec", "logs"):
        getattr(engine, name).return_value = 0
    return engine
