"""Reminder model objects for the kefir tracker."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from models.dynamodb import CamelModel, DynamoDBItem


class ReminderStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    CANCELLED = "cancelled"


class ReminderItem(DynamoDBItem):
    """A one-time notification scheduled through EventBridge Scheduler."""

    reminder_id: str
    user_id: str
    batch_id: str
    scheduled_time: str
    message: str
    status: ReminderStatus = ReminderStatus.PENDING
    schedule_arn: Optional[str] = None
    sent_at: Optional[str] = None


class ReminderSuggestion(CamelModel):
    type: str
    suggested_time: str
    message: str
    description: Optional[str] = None


class ReminderRequest(CamelModel):
    scheduled_time: datetime
    message: str = Field(..., min_length=1, max_length=200)

    @field_validator("scheduled_time")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Times without an offset are taken as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ConfirmReminders(CamelModel):
    reminders: List[ReminderRequest]
