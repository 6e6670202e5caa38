"""
Surfside plugin

Fans context calls out to every registered tracker, or to an explicit list of
namespaces, so one call updates all trackers of an application.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .errors import ConfigurationError
from .models.contexts import Product
from .models.events import source_event
from .tracker import Tracker

logger = logging.getLogger(__name__)


class SurfsidePlugin:
    """Context controller shared by several trackers."""

    def __init__(self, trackers: Iterable[Tracker] = ()):
        self._trackers: Dict[str, Tracker] = {}
        for tracker in trackers:
            self.register_tracker(tracker)

    def register_tracker(self, tracker: Tracker) -> None:
        """Register *tracker*; registering it again is a no-op."""
        if self._trackers.get(tracker.namespace) is tracker:
            return
        self._trackers[tracker.namespace] = tracker
        logger.debug(f"Registered tracker '{tracker.namespace}' with plugin")

    def unregister_tracker(self, namespace: str) -> None:
        self._trackers.pop(namespace, None)

    @property
    def namespaces(self) -> List[str]:
        return list(self._trackers)

    def _targets(self, tracker_namespaces: Optional[Iterable[str]]) -> List[Tracker]:
        if tracker_namespaces is None:
            return list(self._trackers.values())
        targets = []
        for namespace in tracker_namespaces:
            tracker = self._trackers.get(namespace)
            if tracker is None:
                raise ConfigurationError(f"No tracker registered for namespace '{namespace}'")
            targets.append(tracker)
        return targets

    def set_location(self, latitude: str, longitude: str, country_code: Optional[str] = None,
                     state: Optional[str] = None, city: Optional[str] = None,
                     tracker_namespaces: Optional[Iterable[str]] = None) -> None:
        for tracker in self._targets(tracker_namespaces):
            tracker.contexts.set_location(latitude, longitude, country_code, state, city)

    def source(self, account_id: str, source_id: str,
               tracker_namespaces: Optional[Iterable[str]] = None) -> List[str]:
        """Replace the source context and track a source event on each target.

        Returns:
            Tracking ids of the source events, one per target tracker
        """
        tracking_ids = []
        for tracker in self._targets(tracker_namespaces):
            source = tracker.contexts.set_source(account_id, source_id)
            tracking_ids.append(tracker.track(source_event(source)))
        return tracking_ids

    def segment(self, segment_id: str, segment_value: str,
                tracker_namespaces: Optional[Iterable[str]] = None) -> None:
        for tracker in self._targets(tracker_namespaces):
            tracker.contexts.set_segment(segment_id, segment_value)

    def add_product(self, tracker_namespaces: Optional[Iterable[str]] = None,
                    **attributes: Any) -> List[Product]:
        """Add a product (see ContextRegistry.add_product) to each target.

        Returns the validated products, one per target tracker.
        """
        return [tracker.contexts.add_product(**attributes)
                for tracker in self._targets(tracker_namespaces)]

    def set_commerce_action(self, action: str,
                            tracker_namespaces: Optional[Iterable[str]] = None) -> List[str]:
        """Track a commerce action on each target, consuming its products."""
        return [tracker.track_commerce_action(action)
                for tracker in self._targets(tracker_namespaces)]
