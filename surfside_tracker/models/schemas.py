"""
Schema identifiers used by the tracker client.

All schemas are Iglu URIs of the form ``iglu:<vendor>/<name>/<format>/<version>``.
"""

import re
from typing import Optional

# Envelopes
PAYLOAD_DATA_SCHEMA = "iglu:com.snowplowanalytics.snowplow/payload_data/jsonschema/1-0-4"
UNSTRUCT_EVENT_SCHEMA = "iglu:com.snowplowanalytics.snowplow/unstruct_event/jsonschema/1-0-0"
CONTEXTS_SCHEMA = "iglu:com.snowplowanalytics.snowplow/contexts/jsonschema/1-0-1"

# Built-in events
SCREEN_VIEW_SCHEMA = "iglu:com.snowplowanalytics.mobile/screen_view/jsonschema/1-0-0"
COMMERCE_ACTION_SCHEMA = "iglu:io.surfside/commerce_action/jsonschema/1-0-0"
SOURCE_EVENT_SCHEMA = "iglu:io.surfside/source/jsonschema/1-0-0"

# Context entities
LOCATION_SCHEMA = "iglu:io.surfside/location/jsonschema/1-0-0"
SOURCE_SCHEMA = "iglu:io.surfside/source_context/jsonschema/1-0-0"
SEGMENT_SCHEMA = "iglu:io.surfside/segment/jsonschema/1-0-0"
PRODUCT_SCHEMA = "iglu:io.surfside/product/jsonschema/1-0-0"

_IGLU_PATTERN = re.compile(
    r"^iglu:(?P<vendor>[a-zA-Z0-9_.\-]+)/(?P<name>[a-zA-Z0-9_\-]+)/"
    r"(?P<format>[a-zA-Z0-9_\-]+)/(?P<version>\d+-\d+-\d+)$"
)


def schema_name(schema: str) -> str:
    """Return the name segment of a schema URI.

    Falls back to the last path segment for non-Iglu identifiers, so
    ``"iglu:com.acme/link_click/jsonschema/1-0-1"`` gives ``"link_click"`` and
    ``"custom_event"`` gives ``"custom_event"``.
    """
    match = _IGLU_PATTERN.match(schema)
    if match:
        return match.group("name")
    return schema.rstrip("/").rsplit("/", 1)[-1]


def schema_version(schema: str) -> Optional[str]:
    """Return the SchemaVer of an Iglu URI, or None for other identifiers."""
    match = _IGLU_PATTERN.match(schema)
    return match.group("version") if match else None


def is_iglu_uri(schema: str) -> bool:
    """Check whether *schema* is a well-formed Iglu URI."""
    return bool(_IGLU_PATTERN.match(schema))
