"""Named query shapes over the store, one per entity collection."""

from typing import List, Optional

from models.keys import (BATCH_PREFIX, DEVICE_PREFIX, EVENT_PREFIX,
                         REMINDER_PREFIX, batch_pk, user_key, user_pk)
from services.store import BeginsWith, Item, KeyValueStore, get_store
from utils.clock import utc_now_iso


class KefirEntities:
    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        if self._store is not None:
            return self._store
        return get_store()

    def get_or_create_user(self, user_id: str, email: str) -> Item:
        """
        Return the user record, creating it on first sight.

        Two concurrent first requests may both create it; the last write
        wins and both writes carry the same fields.
        """
        keys = user_key(user_id)
        user = self.store.get(keys["PK"], keys["SK"])
        if user is None:
            now = utc_now_iso()
            user = self.store.put(
                {**keys, "userId": user_id, "email": email, "createdAt": now}
            )
        return user

    def get_user_batches(self, user_id: str, limit: Optional[int] = None) -> List[Item]:
        return self.store.query(
            user_pk(user_id),
            BeginsWith(prefix=BATCH_PREFIX),
            limit=limit,
            sort_ascending=False,
        )

    def get_batch_by_id(self, batch_id: str) -> Optional[Item]:
        results = self.store.query_gsi1(batch_pk(batch_id), limit=1)
        return results[0] if results else None

    def get_batch_events(self, batch_id: str, limit: Optional[int] = None) -> List[Item]:
        """Most recent first."""
        return self.store.query(
            batch_pk(batch_id),
            BeginsWith(prefix=EVENT_PREFIX),
            limit=limit,
            sort_ascending=False,
        )

    def get_user_reminders(self, user_id: str) -> List[Item]:
        return self.store.query(
            user_pk(user_id), BeginsWith(prefix=REMINDER_PREFIX), sort_ascending=True
        )

    def get_user_devices(self, user_id: str) -> List[Item]:
        return self.store.query(user_pk(user_id), BeginsWith(prefix=DEVICE_PREFIX))
