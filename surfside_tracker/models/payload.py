"""
Wire payload models.

A TrackedEvent is the queued envelope around an Event: the tracking id, the
namespace of the tracker that accepted it and the context snapshot taken at
``track()`` time. Batches are serialized in the Snowplow ``payload_data``
format.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from .contexts import ContextEntity
from .events import Event
from .schemas import CONTEXTS_SCHEMA, PAYLOAD_DATA_SCHEMA, UNSTRUCT_EVENT_SCHEMA


def _to_millis(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return str(int(moment.timestamp() * 1000))


class WireEvent(BaseModel):
    """Single event as sent to the collector."""
    e: str = Field(default="ue", description="Event type; 'ue' for self-describing events")
    eid: str = Field(description="Event id")
    tna: str = Field(description="Tracker namespace")
    aid: Optional[str] = Field(default=None, description="Application id")
    p: str = Field(default="mob", description="Platform")
    dtm: str = Field(description="Device created timestamp (ms)")
    stm: str = Field(description="Device sent timestamp (ms)")
    ue_pr: str = Field(description="Unstructured event wrapper as a JSON string")
    co: Optional[str] = Field(default=None, description="Contexts wrapper as a JSON string")


@dataclass
class TrackedEvent:
    """Queued envelope around an immutable Event."""

    event_id: str
    namespace: str
    event: Event
    contexts: Tuple[ContextEntity, ...] = ()
    app_id: Optional[str] = None
    platform: str = "mob"
    attempts: int = field(default=0, compare=False)

    def all_contexts(self) -> List[ContextEntity]:
        """Snapshot contexts followed by the event's own product contexts."""
        return list(self.contexts) + [p.to_entity() for p in self.event.products]

    def to_wire(self, sent_at: Optional[datetime] = None) -> Dict[str, Any]:
        """Serialize for the collector."""
        sent_at = sent_at or datetime.now(timezone.utc)
        contexts = self.all_contexts()
        wire = WireEvent(
            eid=self.event_id,
            tna=self.namespace,
            aid=self.app_id,
            p=self.platform,
            dtm=_to_millis(self.event.timestamp),
            stm=_to_millis(sent_at),
            ue_pr=json.dumps({"schema": UNSTRUCT_EVENT_SCHEMA, "data": self.event.to_dict()}),
            co=json.dumps({
                "schema": CONTEXTS_SCHEMA,
                "data": [c.to_json() for c in contexts],
            }) if contexts else None,
        )
        return wire.model_dump(exclude_none=True)


def build_batch_payload(events: Iterable[TrackedEvent],
                        sent_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the POST body for a batch of queued events."""
    sent_at = sent_at or datetime.now(timezone.utc)
    return {
        "schema": PAYLOAD_DATA_SCHEMA,
        "data": [e.to_wire(sent_at) for e in events],
    }
