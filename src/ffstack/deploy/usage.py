"""Usage text for the ff-stack command."""

from jinja2 import Template

from ffstack.deploy.host import firewall_ports, required_groups
from ffstack.models.deployment import DeploymentConfig

# Jinja2 template for the help screen
FFSTACK_USAGE_TEMPLATE = """\
FaceFusion Stack Manager

Usage: ff-stack [--config PATH] <command>

Commands:
  start, up     Start FaceFusion container
  stop, down    Stop FaceFusion container
  restart       Restart container with latest config
  status        Show container status and health
  logs          Follow container logs
  pull          Pull latest image
  update        Pull and restart
  shell, sh     Open shell in container
  help          Show this help

Image: {{ image }}
State: {{ state_dir }}
URL:   {{ url }}
Groups: {{ groups | join(", ") }}
{% if ports %}
Firewall: open TCP {{ ports | join(", ") }} for LAN access
{% endif %}
"""


def render_usage(config: DeploymentConfig) -> str:
    """Render the help text for the resolved configuration.

    Args:
        config: Validated deployment configuration

    Returns:
        Help text listing commands, image, state directory and access details
    """
    template = Template(FFSTACK_USAGE_TEMPLATE, trim_blocks=True)
    return template.render(
        image=config.image_reference,
        state_dir=str(config.state_directory),
        url=config.service_url,
        groups=required_groups(config),
        ports=firewall_ports(config),
    )
