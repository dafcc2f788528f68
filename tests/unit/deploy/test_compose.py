"""Unit tests for compose definition rendering."""

from __future__ import annotations

from typing import Any

import pytest
import yaml

from ffstack.deploy.compose import (
    COMPOSE_HEADER,
    build_compose,
    build_environment,
    render_compose,
)
from ffstack.models.deployment import DeploymentConfig


def _service(config: DeploymentConfig) -> dict[str, Any]:
    document = yaml.safe_load(render_compose(config))
    return document["services"]["facefusion"]


@pytest.mark.unit
class TestRenderDeterminism:
    """Rendering is a pure function of the configuration."""

    @pytest.mark.parametrize(
        "options",
        [
            {},
            {"acceleration": "rocm", "advanced": {"rocm": {"gfxVersionOverride": "11.0.3"}}},
            {"acceleration": "cuda", "resources": {"gpuCount": 2}},
            {"acceleration": "tensorrt", "cudaCapable": True},
            {"security": {"readOnlyRootfs": True}},
        ],
    )
    def test_render_twice_is_identical(self, options: dict[str, Any]) -> None:
        config = DeploymentConfig.model_validate(options)

        assert render_compose(config) == render_compose(config)

    def test_equal_configs_render_identically(self) -> None:
        first = DeploymentConfig.model_validate({"network": {"port": 9000}})
        second = DeploymentConfig(network={"port": 9000})

        assert render_compose(first) == render_compose(second)

    def test_output_is_valid_yaml_with_header(self) -> None:
        text = render_compose(DeploymentConfig())

        assert text.startswith(COMPOSE_HEADER)
        document = yaml.safe_load(text)
        assert document["version"] == "3.8"
        assert list(document["services"]) == ["facefusion"]


@pytest.mark.unit
class TestAlwaysEmittedSections:
    """Sections present regardless of backend."""

    def test_base_service_fields(self) -> None:
        service = _service(DeploymentConfig())

        assert service["image"] == "docker.io/facefusion/facefusion:3.5.2"
        assert service["container_name"] == "facefusion"
        assert service["restart"] == "unless-stopped"
        assert service["ipc"] == "host"
        assert service["shm_size"] == "8g"
        assert service["security_opt"] == ["no-new-privileges:true"]
        assert service["ports"] == ["127.0.0.1:7860:7860"]
        assert service["volumes"] == ["/var/lib/facefusion/models:/root/.facefusion"]

    def test_healthcheck_is_fixed(self) -> None:
        service = _service(DeploymentConfig())

        assert service["healthcheck"] == {
            "test": ["CMD", "curl", "-f", "http://localhost:7860/"],
            "interval": "30s",
            "timeout": "10s",
            "retries": 3,
            "start_period": "60s",
        }

    def test_logging_rotation(self) -> None:
        config = DeploymentConfig(logging={"maxSize": "10m", "maxFiles": 5})
        service = _service(config)

        assert service["logging"] == {
            "driver": "json-file",
            "options": {"max-size": "10m", "max-file": "5"},
        }

    def test_environment_binds_all_interfaces(self) -> None:
        service = _service(DeploymentConfig())
        assert service["environment"] == {"GRADIO_SERVER_NAME": "0.0.0.0"}

    def test_string_values_are_double_quoted(self) -> None:
        text = render_compose(DeploymentConfig())

        assert 'shm_size: "8g"' in text
        assert '- "127.0.0.1:7860:7860"' in text
        assert 'GRADIO_SERVER_NAME: "0.0.0.0"' in text


@pytest.mark.unit
class TestConditionalSections:
    """Backend-dependent blocks."""

    def test_cpu_has_no_gpu_blocks(self) -> None:
        service = _service(DeploymentConfig())

        assert "devices" not in service
        assert "group_add" not in service
        assert "deploy" not in service

    def test_rocm_has_passthrough_and_groups(self) -> None:
        service = _service(DeploymentConfig(acceleration="rocm"))

        assert service["devices"] == ["/dev/kfd:/dev/kfd", "/dev/dri:/dev/dri"]
        assert service["group_add"] == ["video", "render"]
        assert service["deploy"] == {"resources": {"limits": {"memory": "32g"}}}
        assert service["image"].endswith(":3.5.2-rocm")

    @pytest.mark.parametrize(
        ("options", "expected_count"),
        [
            ({"acceleration": "cuda"}, "all"),
            ({"acceleration": "cuda", "resources": {"gpuCount": 2}}, 2),
            ({"acceleration": "tensorrt", "cudaCapable": True}, "all"),
            (
                {
                    "acceleration": "tensorrt",
                    "cudaCapable": True,
                    "resources": {"gpuCount": 1},
                },
                1,
            ),
        ],
    )
    def test_nvidia_reservation(
        self, options: dict[str, Any], expected_count: int | str
    ) -> None:
        config = DeploymentConfig.model_validate(options)
        service = _service(config)

        assert "devices" not in service
        assert "group_add" not in service
        resources = service["deploy"]["resources"]
        assert resources["reservations"]["devices"] == [
            {"driver": "nvidia", "count": expected_count, "capabilities": ["gpu"]}
        ]
        assert resources["limits"] == {"memory": "32g"}

    def test_read_only_rootfs(self) -> None:
        config = DeploymentConfig(
            state_directory="/srv/ff", security={"readOnlyRootfs": True}
        )
        service = _service(config)

        assert service["read_only"] is True
        assert service["volumes"] == ["/srv/ff/models:/root/.facefusion", "/tmp"]

    def test_writable_rootfs_has_no_read_only_flag(self) -> None:
        service = _service(DeploymentConfig())

        assert "read_only" not in service
        assert "/tmp" not in service["volumes"]


@pytest.mark.unit
class TestEnvironment:
    """Environment block construction."""

    def test_rocm_without_override(self) -> None:
        env = build_environment(DeploymentConfig(acceleration="rocm"))

        assert env == {"GRADIO_SERVER_NAME": "0.0.0.0", "ROCR_VISIBLE_DEVICES": "0"}

    def test_rocm_with_override(self) -> None:
        config = DeploymentConfig(
            acceleration="rocm", advanced={"rocm": {"gfxVersionOverride": "11.0.3"}}
        )
        env = build_environment(config)

        assert env["HSA_OVERRIDE_GFX_VERSION"] == "11.0.3"

    def test_override_ignored_without_rocm(self) -> None:
        config = DeploymentConfig(
            acceleration="cuda", advanced={"rocm": {"gfxVersionOverride": "11.0.3"}}
        )
        env = build_environment(config)

        assert "HSA_OVERRIDE_GFX_VERSION" not in env
        assert "ROCR_VISIBLE_DEVICES" not in env


@pytest.mark.unit
class TestRocmLanScenario:
    """ROCm on the LAN with two visible devices and no gfx override."""

    @pytest.fixture
    def rendered(self) -> str:
        config = DeploymentConfig.model_validate(
            {
                "acceleration": "rocm",
                "network": {"bindAddress": "0.0.0.0", "port": 9000},
                "advanced": {"rocm": {"visibleDevices": "0,1"}},
            }
        )
        return render_compose(config)

    def test_port_mapping(self, rendered: str) -> None:
        assert "0.0.0.0:9000:7860" in rendered

    def test_visible_devices(self, rendered: str) -> None:
        assert 'ROCR_VISIBLE_DEVICES: "0,1"' in rendered

    def test_device_passthrough(self, rendered: str) -> None:
        assert "/dev/kfd" in rendered
        assert "/dev/dri" in rendered

    def test_no_gfx_override(self, rendered: str) -> None:
        assert "HSA_OVERRIDE_GFX_VERSION" not in rendered


@pytest.mark.unit
class TestEscaping:
    """User strings never change the document structure."""

    def test_visible_devices_with_quotes_and_newlines(self) -> None:
        hostile = '0"\n    privileged: true\n  x: "'
        config = DeploymentConfig(
            acceleration="rocm", advanced={"rocm": {"visibleDevices": hostile}}
        )
        service = _service(config)

        assert service["environment"]["ROCR_VISIBLE_DEVICES"] == hostile
        assert "privileged" not in service

    def test_build_compose_matches_rendered_document(self) -> None:
        config = DeploymentConfig(acceleration="cuda", resources={"gpuCount": 4})

        assert yaml.safe_load(render_compose(config)) == build_compose(config)
