"""FaceFusion stack deployment engine.

This package renders the compose definition, keeps the deployed copy in
sync and drives ``docker compose`` for the lifecycle commands.
"""

from ffstack.deploy.compose import build_compose, render_compose
from ffstack.deploy.dispatcher import StackManager, Verb, dispatch
from ffstack.deploy.engine import ComposeEngine
from ffstack.deploy.sync import write_if_changed

__all__ = [
    "ComposeEngine",
    "StackManager",
    "Verb",
    "build_compose",
    "dispatch",
    "render_compose",
    "write_if_changed",
]
