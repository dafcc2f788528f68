"""ffstack - Deploy and manage FaceFusion through Docker Compose.

ffstack renders a Docker Compose definition for the FaceFusion container
from a small typed configuration (image tag, GPU backend, network binding,
resource limits) and provides the ``ff-stack`` lifecycle command.

Main features:
- Deterministic compose rendering for CPU, ROCm, CUDA and TensorRT images
- Idempotent sync of the deployed compose file
- start/stop/restart/status/logs/pull/update/shell commands
"""

from ffstack.config.loader import ConfigLoader
from ffstack.lib.errors import ConfigError, FFStackError
from ffstack.models.deployment import DeploymentConfig

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigLoader",
    "ConfigError",
    "DeploymentConfig",
    "FFStackError",
]
