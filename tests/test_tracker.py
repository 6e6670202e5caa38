"""
Tests for Tracker and TrackerRegistry.
"""

import json

import pytest

from surfside_tracker import Credentials, TrackerRegistry
from surfside_tracker.errors import ConfigurationError, ValidationError
from surfside_tracker.models import screen_view, self_describing
from surfside_tracker.models.events import Event
from surfside_tracker.models.schemas import LOCATION_SCHEMA, SOURCE_SCHEMA

ENDPOINT = "https://collector.example.com/com.snowplowanalytics.snowplow/tp2"


def _delivered_events(http_session):
    """Decode every event POSTed through the fake session."""
    events = []
    for call in http_session.post.call_args_list:
        for wire in call.kwargs["json"]["data"]:
            events.append({
                "eid": wire["eid"],
                "event": json.loads(wire["ue_pr"])["data"],
                "contexts": json.loads(wire["co"])["data"] if "co" in wire else [],
            })
    return events


class TestInitialize:
    """Test tracker initialization."""

    def test_initialize_registers_tracker(self, registry, credentials, http_session):
        """Test that initialize registers the tracker under its namespace."""
        tracker = registry.initialize("iosTracker", ENDPOINT, credentials, session=http_session)
        assert registry.get("iosTracker") is tracker
        assert "iosTracker" in registry
        assert registry.namespaces() == ["iosTracker"]
        assert tracker.emitter.endpoint == ENDPOINT

    def test_initialize_sets_source_context(self, tracker):
        """Test that the credentials become the source context."""
        assert tracker.contexts.source.account_id == "00000-1"
        assert tracker.contexts.source.source_id == "00000-2"

    def test_initialize_makes_no_network_call(self, tracker, http_session):
        """Test that initialize works offline."""
        http_session.post.assert_not_called()

    def test_duplicate_namespace_rejected(self, registry, tracker, credentials, http_session):
        """Test rejecting a namespace that is already in use."""
        with pytest.raises(ConfigurationError, match="already initialized"):
            registry.initialize("iosTracker", ENDPOINT, credentials, session=http_session)

    @pytest.mark.parametrize("namespace", ["", "   ", None])
    def test_empty_namespace_rejected(self, registry, credentials, namespace):
        """Test rejecting an empty namespace."""
        with pytest.raises(ConfigurationError):
            registry.initialize(namespace, ENDPOINT, credentials)

    @pytest.mark.parametrize("endpoint", [
        "",
        "c-dev.surfside.io",
        "ftp://c-dev.surfside.io",
        "https://",
    ])
    def test_malformed_endpoint_rejected(self, registry, credentials, endpoint):
        """Test rejecting malformed endpoints."""
        with pytest.raises(ConfigurationError):
            registry.initialize("iosTracker", endpoint, credentials)
        assert "iosTracker" not in registry

    def test_missing_credentials_rejected(self, registry):
        """Test rejecting missing credentials."""
        with pytest.raises(ConfigurationError):
            registry.initialize("iosTracker", ENDPOINT, Credentials(account_id="", source_id="s"))

    @pytest.mark.parametrize("settings", [{"batch_size": 0}, {"max_attempts": 0}])
    def test_invalid_emitter_settings_rejected(self, registry, credentials, http_session, settings):
        """Test that bad emitter settings fail initialize and register nothing."""
        with pytest.raises(ConfigurationError):
            registry.initialize("iosTracker", ENDPOINT, credentials, session=http_session, **settings)
        assert "iosTracker" not in registry

    def test_separate_registries_are_independent(self, credentials, http_session):
        """Test that namespaces are unique per registry."""
        first, second = TrackerRegistry(), TrackerRegistry()
        try:
            first.initialize("iosTracker", ENDPOINT, credentials, session=http_session)
            second.initialize("iosTracker", ENDPOINT, credentials, session=http_session)
        finally:
            first.shutdown()
            second.shutdown()

    def test_remove(self, registry, tracker):
        """Test removing a tracker."""
        registry.remove("iosTracker")
        assert registry.get("iosTracker") is None
        with pytest.raises(ConfigurationError):
            registry.remove("iosTracker")


class TestTrack:
    """Test queueing through track()."""

    def test_track_returns_tracking_id(self, tracker):
        """Test tracking a valid event."""
        tracking_id = tracker.track(screen_view("Home"))
        assert isinstance(tracking_id, str) and tracking_id
        assert tracker.emitter.pending()[0].event_id == tracking_id

    def test_queue_matches_call_order(self, tracker):
        """Test that the queue matches track call order."""
        events = [screen_view(f"Screen {i}") for i in range(10)]
        ids = [tracker.track(e) for e in events]

        pending = tracker.emitter.pending()
        assert [p.event for p in pending] == events
        assert all(p.event is e for p, e in zip(pending, events))
        assert [p.event_id for p in pending] == ids

    def test_tracking_ids_unique(self, tracker):
        """Test that every tracking id is unique."""
        ids = {tracker.track(screen_view("Home")) for _ in range(20)}
        assert len(ids) == 20

    def test_invalid_event_not_enqueued(self, tracker):
        """Test that an invalid event is rejected and not queued."""
        with pytest.raises(ValidationError):
            tracker.track(Event(schema="", payload={}))
        with pytest.raises(ValidationError):
            tracker.track(Event(schema="iglu:com.example/e/jsonschema/1-0-0", payload={"x": [1, 2]}))
        assert tracker.emitter.pending_count == 0

    def test_track_does_not_touch_network(self, tracker, http_session):
        """Test that track only enqueues."""
        tracker.track(screen_view("Home"))
        http_session.post.assert_not_called()

    def test_snapshot_carries_latest_location(self, tracker):
        """Test that events carry the latest location."""
        tracker.contexts.set_location("40.7128", "-74.0060", "US", "NY", "New York")
        tracker.contexts.set_location("37.7749", "-122.4194", "US", "CA", "San Francisco")
        tracker.track(screen_view("Home"))

        contexts = tracker.emitter.pending()[0].contexts
        locations = [c for c in contexts if c.schema_uri == LOCATION_SCHEMA]
        assert len(locations) == 1
        assert locations[0].data["latitude"] == "37.7749"
        assert all(c.data.get("latitude") != "40.7128" for c in contexts)

    def test_snapshot_taken_at_track_time(self, tracker):
        """Test that later context changes do not alter queued events."""
        tracker.contexts.set_location("40.7128", "-74.0060")
        tracker.track(screen_view("Home"))
        tracker.contexts.set_location("37.7749", "-122.4194")

        contexts = tracker.emitter.pending()[0].contexts
        location = [c for c in contexts if c.schema_uri == LOCATION_SCHEMA][0]
        assert location.data["latitude"] == "40.7128"

    def test_on_message_channel(self, registry, credentials, http_session):
        """Test the diagnostic message callback."""
        messages = []
        tracker = registry.initialize(
            "iosTracker", ENDPOINT, credentials, session=http_session, on_message=messages.append
        )
        tracker.track(screen_view("Home"))
        assert any("screen_view" in m for m in messages)


class TestFlushScenarios:
    """End-to-end scenarios through the fake collector."""

    def test_screen_view_delivered_once(self, tracker, http_session):
        """Test that a flushed screen view is posted exactly once."""
        tracker.track(screen_view("Home"))
        future = tracker.flush()
        assert future.result(timeout=5) == 1

        delivered = _delivered_events(http_session)
        assert len(delivered) == 1
        event = delivered[0]["event"]
        assert event["schema"].split("/")[1] == "screen_view"
        assert event["data"] == {"name": "Home"}

    def test_flush_without_events(self, tracker, http_session):
        """Test flushing with nothing tracked."""
        assert tracker.flush() is None
        http_session.post.assert_not_called()

    def test_delivered_event_carries_contexts(self, tracker, http_session):
        """Test that delivered events include their contexts."""
        tracker.contexts.set_location("37.7749", "-122.4194", "US", "CA", "San Francisco")
        tracker.track(self_describing(
            "iglu:com.snowplowanalytics.snowplow/link_click/jsonschema/1-0-1",
            {"targetUrl": "https://example.com"},
        ))
        tracker.flush().result(timeout=5)

        contexts = _delivered_events(http_session)[0]["contexts"]
        schemas = [c["schema"] for c in contexts]
        assert SOURCE_SCHEMA in schemas
        assert LOCATION_SCHEMA in schemas

    def test_three_products_purchase(self, tracker, http_session):
        """Test a purchase with three products end to end."""
        for i in range(3):
            tracker.contexts.add_product(id=f"P{i}", name=f"Product {i}", price=10.0, quantity=1)
        tracker.track_commerce_action("purchase")

        assert tracker.contexts.products == []
        pending = tracker.emitter.pending()
        assert len(pending) == 1
        assert len(pending[0].event.products) == 3

        tracker.flush().result(timeout=5)
        contexts = _delivered_events(http_session)[0]["contexts"]
        products = [c for c in contexts if c["schema"].split("/")[1] == "product"]
        assert [p["data"]["id"] for p in products] == ["P0", "P1", "P2"]
