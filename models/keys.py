"""
Key builders for the single-table layout.

Every item's sort key prefix identifies its entity type. Callers must build
keys through these functions rather than formatting key strings inline.
"""

from typing import Dict

USER_PREFIX = "USER#"
BATCH_PREFIX = "BATCH#"
EVENT_PREFIX = "EVENT#"
REMINDER_PREFIX = "REMINDER#"
DEVICE_PREFIX = "DEVICE#"


def user_pk(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def batch_pk(batch_id: str) -> str:
    return f"{BATCH_PREFIX}{batch_id}"


def user_key(user_id: str) -> Dict[str, str]:
    return {"PK": user_pk(user_id), "SK": user_pk(user_id)}


def batch_key(user_id: str, batch_id: str) -> Dict[str, str]:
    """Batch key, including the GSI1 pair used to look a batch up by ID alone."""
    return {
        "PK": user_pk(user_id),
        "SK": f"{BATCH_PREFIX}{batch_id}",
        "GSI1PK": batch_pk(batch_id),
        "GSI1SK": user_pk(user_id),
    }


def event_key(batch_id: str, timestamp: str) -> Dict[str, str]:
    return {"PK": batch_pk(batch_id), "SK": f"{EVENT_PREFIX}{timestamp}"}


def reminder_key(user_id: str, reminder_id: str) -> Dict[str, str]:
    return {"PK": user_pk(user_id), "SK": f"{REMINDER_PREFIX}{reminder_id}"}


def device_key(user_id: str, device_id: str) -> Dict[str, str]:
    return {"PK": user_pk(user_id), "SK": f"{DEVICE_PREFIX}{device_id}"}


def primary_key(item_or_key: Dict[str, str]) -> Dict[str, str]:
    """Strip a key dict (or a whole item) down to its PK/SK pair."""
    return {"PK": item_or_key["PK"], "SK": item_or_key["SK"]}
