"""
Models package for data structures and database entities.

This package contains Pydantic models for request validation and
DynamoDB item representations, plus the single-table key builders.
"""

from .batch import (AddPhotoRequest, BatchCreate, BatchFilters, BatchItem,
                    BatchStage, BatchStatus, BatchUpdate, PhotoUploadRequest,
                    PublicBatchView)
from .device import DeviceItem, DevicePlatform, DeviceRegister
from .dynamodb import CamelModel, DynamoDBItem
from .event import EventCreate, EventItem, EventType
from .reminder import (ConfirmReminders, ReminderItem, ReminderRequest,
                       ReminderStatus, ReminderSuggestion)
from .users import UserItem

__all__ = [
    "AddPhotoRequest",
    "BatchCreate",
    "BatchFilters",
    "BatchItem",
    "BatchStage",
    "BatchStatus",
    "BatchUpdate",
    "CamelModel",
    "ConfirmReminders",
    "DeviceItem",
    "DevicePlatform",
    "DeviceRegister",
    "DynamoDBItem",
    "EventCreate",
    "EventItem",
    "EventType",
    "PhotoUploadRequest",
    "PublicBatchView",
    "ReminderItem",
    "ReminderRequest",
    "ReminderStatus",
    "ReminderSuggestion",
    "UserItem",
]
