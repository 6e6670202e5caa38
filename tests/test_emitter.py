"""
Tests for queueing, batching, retry and delivery in the Emitter.
"""

import json
import threading
from unittest.mock import MagicMock

import pytest
import requests

from surfside_tracker.emitter import Emitter
from surfside_tracker.errors import ConfigurationError, DeliveryError
from surfside_tracker.models import TrackedEvent, screen_view
from surfside_tracker.models.schemas import PAYLOAD_DATA_SCHEMA

ENDPOINT = "https://collector.example.com/com.snowplowanalytics.snowplow/tp2"


def _response(status_code):
    response = MagicMock()
    response.status_code = status_code
    return response


def _tracked(n: int) -> TrackedEvent:
    return TrackedEvent(event_id=f"evt-{n}", namespace="iosTracker", event=screen_view(f"Screen {n}"))


def _posted_ids(session):
    """Event ids per POST, in call order."""
    batches = []
    for call in session.post.call_args_list:
        body = call.kwargs["json"]
        batches.append([e["eid"] for e in body["data"]])
    return batches


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    session.post.return_value = _response(200)
    return session


@pytest.fixture
def make_emitter(session):
    emitters = []

    def factory(**kwargs):
        kwargs.setdefault("retry_delay", 0)
        kwargs.setdefault("session", session)
        emitter = Emitter(ENDPOINT, **kwargs)
        emitters.append(emitter)
        return emitter

    yield factory
    for emitter in emitters:
        emitter.shutdown(wait=True)


class TestQueue:
    """Test the FIFO queue."""

    def test_pending_in_enqueue_order(self, make_emitter):
        """Test that pending events keep enqueue order."""
        emitter = make_emitter()
        events = [_tracked(i) for i in range(5)]
        for e in events:
            emitter.enqueue(e)
        assert emitter.pending() == events
        assert emitter.pending_count == 5

    def test_pending_returns_copy(self, make_emitter):
        """Test that pending() returns a snapshot."""
        emitter = make_emitter()
        emitter.enqueue(_tracked(1))
        emitter.pending().clear()
        assert emitter.pending_count == 1

    def test_concurrent_enqueue(self, make_emitter):
        """Test enqueueing from several threads."""
        emitter = make_emitter()

        def producer(offset):
            for i in range(100):
                emitter.enqueue(_tracked(offset + i))

        threads = [threading.Thread(target=producer, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert emitter.pending_count == 400

    @pytest.mark.parametrize("settings", [
        {"batch_size": 0},
        {"batch_size": "5"},
        {"max_attempts": 0},
        {"max_attempts": 2.5},
        {"retry_delay": -1},
        {"backoff_factor": 0.5},
        {"request_timeout": 0},
    ])
    def test_invalid_settings(self, settings):
        """Test that out-of-range delivery settings are configuration errors."""
        with pytest.raises(ConfigurationError):
            Emitter(ENDPOINT, session=MagicMock(), **settings)


class TestFlush:
    """Test delivery on flush."""

    def test_flush_empty_queue_is_noop(self, make_emitter, session):
        """Test flushing an empty queue."""
        emitter = make_emitter()
        assert emitter.flush() is None
        assert emitter.flush_sync() == 0
        session.post.assert_not_called()

    def test_flush_sends_everything_in_one_batch(self, make_emitter, session):
        """Test that without a batch size one POST carries everything."""
        emitter = make_emitter()
        for i in range(3):
            emitter.enqueue(_tracked(i))

        assert emitter.flush().result(timeout=5) == 3

        assert _posted_ids(session) == [["evt-0", "evt-1", "evt-2"]]
        assert emitter.pending_count == 0
        assert emitter.sent_count == 3

    def test_post_target_and_body(self, make_emitter, session):
        """Test the POST URL and payload_data body."""
        emitter = make_emitter(request_timeout=2.5)
        emitter.enqueue(_tracked(0))
        emitter.flush_sync(timeout=5)

        call = session.post.call_args
        assert call.args[0] == ENDPOINT
        assert call.kwargs["timeout"] == 2.5
        body = call.kwargs["json"]
        assert body["schema"] == PAYLOAD_DATA_SCHEMA
        wire = body["data"][0]
        assert wire["e"] == "ue"
        assert wire["tna"] == "iosTracker"
        unstruct = json.loads(wire["ue_pr"])
        assert unstruct["data"]["data"] == {"name": "Screen 0"}

    def test_batch_size_splits_requests(self, make_emitter, session):
        """Test splitting the queue into batches."""
        emitter = make_emitter(batch_size=2)
        for i in range(5):
            emitter.enqueue(_tracked(i))
        emitter.flush_sync(timeout=5)
        assert _posted_ids(session) == [["evt-0", "evt-1"], ["evt-2", "evt-3"], ["evt-4"]]

    def test_successive_flushes_keep_order(self, make_emitter, session):
        """Test that deliveries follow enqueue order across flushes."""
        emitter = make_emitter()
        emitter.enqueue(_tracked(0))
        first = emitter.flush()
        emitter.enqueue(_tracked(1))
        second = emitter.flush()
        # The first drain may already have picked up evt-1
        for future in (first, second):
            if future is not None:
                future.result(timeout=5)
        delivered = [eid for batch in _posted_ids(session) for eid in batch]
        assert delivered == ["evt-0", "evt-1"]

    def test_on_success_callback(self, session):
        """Test the success callback."""
        sent = []
        emitter = Emitter(ENDPOINT, session=session, on_success=sent.append)
        try:
            emitter.enqueue(_tracked(0))
            emitter.enqueue(_tracked(1))
            emitter.flush_sync(timeout=5)
        finally:
            emitter.shutdown()
        assert sent == [2]

    def test_flush_after_shutdown_ignored(self, session):
        """Test flushing a closed emitter."""
        emitter = Emitter(ENDPOINT, session=session)
        emitter.enqueue(_tracked(0))
        emitter.shutdown()
        assert emitter.flush() is None


class TestRetry:
    """Test requeue, retry and drop."""

    def test_retry_then_success(self, make_emitter, session):
        """Test a batch that succeeds on retry."""
        session.post.side_effect = [_response(503), _response(200)]
        emitter = make_emitter(max_attempts=3)
        emitter.enqueue(_tracked(0))
        emitter.enqueue(_tracked(1))

        assert emitter.flush_sync(timeout=5) == 2
        assert _posted_ids(session) == [["evt-0", "evt-1"], ["evt-0", "evt-1"]]
        assert emitter.dropped_count == 0

    def test_failed_batch_retried_before_later_batches(self, make_emitter, session):
        """Test that a failed batch stays ahead of later events."""
        session.post.side_effect = [_response(500), _response(200), _response(200)]
        emitter = make_emitter(batch_size=1, max_attempts=2)
        emitter.enqueue(_tracked(0))
        emitter.enqueue(_tracked(1))

        emitter.flush_sync(timeout=5)
        assert _posted_ids(session) == [["evt-0"], ["evt-0"], ["evt-1"]]

    def test_dropped_after_max_attempts(self, make_emitter, session):
        """Test dropping a batch after the last attempt."""
        session.post.return_value = _response(500)
        failures = []
        emitter = make_emitter(max_attempts=3, on_failure=failures.append)
        emitter.enqueue(_tracked(0))

        assert emitter.flush_sync(timeout=5) == 0

        assert session.post.call_count == 3
        assert emitter.pending_count == 0
        assert emitter.dropped_count == 1
        assert len(failures) == 1
        error = failures[0]
        assert isinstance(error, DeliveryError)
        assert error.attempts == 3
        assert error.status_code == 500
        assert error.event_ids == ["evt-0"]

    def test_transport_error_is_delivery_error(self, make_emitter, session):
        """Test that a connection error is reported as a DeliveryError."""
        session.post.side_effect = requests.ConnectionError("unreachable")
        failures = []
        emitter = make_emitter(max_attempts=1, on_failure=failures.append)
        emitter.enqueue(_tracked(0))

        future = emitter.flush()
        assert future.result(timeout=5) == 0
        assert future.exception() is None
        assert "unreachable" in str(failures[0])
        assert failures[0].status_code is None

    def test_failing_callback_does_not_break_worker(self, make_emitter, session):
        """Test that a raising callback does not stop delivery."""
        def explode(_):
            raise RuntimeError("callback bug")

        emitter = make_emitter(on_success=explode)
        emitter.enqueue(_tracked(0))
        assert emitter.flush_sync(timeout=5) == 1

    def test_backoff_delays(self, make_emitter, session, monkeypatch):
        """Test exponential backoff between attempts."""
        delays = []
        monkeypatch.setattr("surfside_tracker.emitter.time.sleep", delays.append)
        session.post.return_value = _response(502)
        emitter = make_emitter(max_attempts=3, retry_delay=0.5, backoff_factor=2.0)
        emitter.enqueue(_tracked(0))
        emitter.flush_sync(timeout=5)
        assert delays == [0.5, 1.0]
