"""Batch timeline events."""

import uuid
from typing import List, Optional

from models.event import EventCreate, EventItem
from models.keys import event_key
from services.batches import load_owned_batch
from services.entities import KefirEntities
from utils.clock import to_iso, utc_now_iso


class EventService:
    def __init__(self, entities: Optional[KefirEntities] = None):
        self.entities = entities or KefirEntities()

    def create_event(self, batch_id: str, user_id: str, data: EventCreate) -> EventItem:
        """
        Log an event on a batch's timeline.

        The event timestamp is part of the sort key, so two events logged at
        the same instant share a key and the later write replaces the first.
        """
        load_owned_batch(self.entities, batch_id, user_id)

        now = utc_now_iso()
        timestamp = to_iso(data.timestamp) if data.timestamp else now
        event = EventItem(
            **event_key(batch_id, timestamp),
            event_id=str(uuid.uuid4()),
            batch_id=batch_id,
            user_id=user_id,
            type=data.type,
            timestamp=timestamp,
            description=data.description,
            metadata=data.metadata,
            photo_key=data.photo_key,
            created_at=now,
        )
        return EventItem.from_item(self.entities.store.put(event.to_item()))

    def list_events(
        self, batch_id: str, user_id: str, limit: Optional[int] = None
    ) -> List[EventItem]:
        """Most recent first."""
        load_owned_batch(self.entities, batch_id, user_id)
        return [
            EventItem.from_item(item)
            for item in self.entities.get_batch_events(batch_id, limit)
        ]
