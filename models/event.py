"""Batch timeline events. Events are written once and never changed."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field

from models.dynamodb import CamelModel, DynamoDBItem


class EventType(str, Enum):
    STAGE_CHANGE = "stage_change"
    OBSERVATION = "observation"
    PHOTO_ADDED = "photo_added"
    STATUS_CHANGE = "status_change"
    NOTE = "note"


class EventItem(DynamoDBItem):
    PK: str = Field(alias="PK")  # BATCH#{batch_id}
    SK: str = Field(alias="SK")  # EVENT#{timestamp}
    event_id: str
    batch_id: str
    user_id: str
    type: EventType
    timestamp: str
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    photo_key: Optional[str] = None


class EventCreate(CamelModel):
    type: EventType
    description: str = Field(..., max_length=1000)
    timestamp: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None
    photo_key: Optional[str] = None
