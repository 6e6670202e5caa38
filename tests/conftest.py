"""
Shared fixtures for tracker tests.
"""

from unittest.mock import MagicMock

import pytest

from surfside_tracker import Credentials, TrackerRegistry

ENDPOINT = "https://collector.example.com/com.snowplowanalytics.snowplow/tp2"


def _response(status_code: int = 200) -> MagicMock:
    """Build a fake requests response."""
    response = MagicMock()
    response.status_code = status_code
    return response


@pytest.fixture
def http_session():
    """A requests.Session stand-in whose POSTs succeed."""
    session = MagicMock()
    session.headers = {}
    session.post.return_value = _response(200)
    return session


@pytest.fixture
def registry():
    """A tracker registry that is shut down after the test."""
    registry = TrackerRegistry()
    yield registry
    registry.shutdown(wait=True)


@pytest.fixture
def credentials():
    return Credentials(account_id="00000-1", source_id="00000-2")


@pytest.fixture
def tracker(registry, credentials, http_session):
    """An initialized tracker delivering through the fake session."""
    return registry.initialize(
        "iosTracker",
        ENDPOINT,
        credentials,
        retry_delay=0,
        session=http_session,
    )
