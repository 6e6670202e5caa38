"""
Factory for creating the demo module.
"""
from typing import Callable, Optional

import requests

from .executor import CommandExecutor, LogBuffer
from .routes import create_demo_routes


def create_demo_module(emitter_options: Optional[dict] = None,
                       http_session_factory: Optional[Callable[[], requests.Session]] = None,
                       command_defaults: Optional[dict] = None) -> dict:
    """
    Create the demo module with all its components.

    Args:
        emitter_options: Emitter settings applied when the tracker is initialized
        http_session_factory: Optional builder for the emitter's HTTP session
        command_defaults: Per-command default fields, e.g. the configured tracker
            settings for "initialize"

    Returns:
        Dictionary containing:
            - service: CommandExecutor instance
            - blueprint: Flask blueprint for routes
    """
    executor = CommandExecutor(
        log=LogBuffer(),
        emitter_options=emitter_options,
        http_session_factory=http_session_factory,
    )
    blueprint = create_demo_routes(executor, command_defaults)

    return {
        "service": executor,
        "blueprint": blueprint
    }
