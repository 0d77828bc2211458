"""
Services package for data access, business logic and AWS integrations.

The key-value store facade (``store``, ``dynamodb``, ``memory_store``) sits at
the bottom; entity wrappers and the per-resource services build on it.
"""

from .entities import KefirEntities
from .reminder_suggestions import suggest_reminders
from .store import (BeginsWith, Between, DeleteRequest, Equals, KeyValueStore,
                    PutRequest, get_store, set_store)

__all__ = [
    "BeginsWith",
    "Between",
    "DeleteRequest",
    "Equals",
    "KefirEntities",
    "KeyValueStore",
    "PutRequest",
    "get_store",
    "set_store",
    "suggest_reminders",
]
