"""Push notification device registrations."""

from enum import Enum
from typing import Optional

from pydantic import Field

from models.dynamodb import CamelModel, DynamoDBItem


class DevicePlatform(str, Enum):
    IOS = "ios"
    ANDROID = "android"


class DeviceItem(DynamoDBItem):
    device_id: str
    user_id: str
    platform: DevicePlatform
    token: str  # Expo push token
    device_name: Optional[str] = None
    app_version: Optional[str] = None
    last_active_at: str


class DeviceRegister(CamelModel):
    device_id: str = Field(..., min_length=1)
    platform: DevicePlatform
    token: str = Field(..., min_length=1)
    device_name: Optional[str] = None
    app_version: Optional[str] = None
