"""
Convenience factory mirroring the one-call tracker setup of the mobile SDKs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from .event_types import Environment
from .models.events import source_event
from .plugin import SurfsidePlugin
from .tracker import Credentials, Tracker, TrackerRegistry

logger = logging.getLogger(__name__)


@dataclass
class TrackerBundle:
    """A tracker together with the plugin it was registered with."""
    tracker: Tracker
    plugin: SurfsidePlugin
    source_event_id: str


def create_tracker(
    registry: TrackerRegistry,
    namespace: str,
    environment: Union[Environment, str],
    account_id: str,
    source_id: str,
    endpoint: Optional[str] = None,
    plugin: Optional[SurfsidePlugin] = None,
    **options: Any,
) -> TrackerBundle:
    """Initialize a tracker, register it with a plugin and fire the source event.

    Args:
        registry: Registry that owns the new tracker
        namespace: Tracker namespace
        environment: Collector environment, used when *endpoint* is not given
        account_id: Surfside account identifier
        source_id: Surfside source identifier
        endpoint: Optional explicit collector URL
        plugin: Existing plugin to register with (a new one is created if omitted)
        **options: Passed through to TrackerRegistry.initialize

    Returns:
        TrackerBundle with the tracker, the plugin and the source event's tracking id
    """
    if not isinstance(environment, Environment):
        environment = Environment.from_name(environment)
    endpoint = endpoint or environment.endpoint

    tracker = registry.initialize(
        namespace,
        endpoint,
        Credentials(account_id=account_id, source_id=source_id),
        **options,
    )
    plugin = plugin if plugin is not None else SurfsidePlugin()
    plugin.register_tracker(tracker)

    source_id_event = tracker.track(source_event(tracker.contexts.source))
    logger.info(f"Source event fired for '{namespace}' ({account_id}/{source_id})")
    return TrackerBundle(tracker=tracker, plugin=plugin, source_event_id=source_id_event)
