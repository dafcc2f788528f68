"""Default values and fixed constants for the FaceFusion stack."""

from pathlib import Path

# Configuration file resolution
DEFAULT_CONFIG_PATH = Path("/etc/ffstack/config.yaml")
CONFIG_PATH_ENV_VAR = "FFSTACK_CONFIG"

# Container identity
SERVICE_NAME = "facefusion"
CONTAINER_NAME = "facefusion"
CONTAINER_PORT = 7860
CONTAINER_MODELS_PATH = "/root/.facefusion"
COMPOSE_FILE_NAME = "docker-compose.yml"
COMPOSE_SCHEMA_VERSION = "3.8"

# Lifecycle constants
STOP_TIMEOUT = 30  # seconds, passed to `docker compose down --timeout`
LOG_TAIL_LINES = 100
HEALTH_PROBE_TIMEOUT = 5.0  # seconds
SHELL_COMMAND = ["/bin/bash"]

# Directory provisioning
STATE_DIR_MODE = 0o750

# Groups
DOCKER_GROUP = "docker"
ROCM_GROUPS = ["video", "render"]

# Container healthcheck, emitted verbatim into the compose file
HEALTHCHECK: dict[str, str | int | list[str]] = {
    "test": ["CMD", "curl", "-f", f"http://localhost:{CONTAINER_PORT}/"],
    "interval": "30s",
    "timeout": "10s",
    "retries": 3,
    "start_period": "60s",
}

ROCM_DEVICES = ["/dev/kfd:/dev/kfd", "/dev/dri:/dev/dri"]
LOOPBACK_ADDRESS = "127.0.0.1"
