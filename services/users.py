"""User profile and push-notification device registration."""

import logging
from typing import List, Optional

from models.device import DeviceItem, DeviceRegister
from models.keys import device_key
from models.users import UserItem
from services.entities import KefirEntities
from utils.clock import utc_now_iso

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, entities: Optional[KefirEntities] = None):
        self.entities = entities or KefirEntities()

    @property
    def store(self):
        return self.entities.store

    def ensure_user(self, user_id: str, email: str) -> UserItem:
        return UserItem.from_item(self.entities.get_or_create_user(user_id, email))

    def register_device(self, user_id: str, data: DeviceRegister) -> DeviceItem:
        """Register a device, or refresh its token if it is already known."""
        keys = device_key(user_id, data.device_id)
        now = utc_now_iso()

        if self.store.get(keys["PK"], keys["SK"]) is not None:
            changes = data.model_dump(
                by_alias=True, exclude={"device_id"}, exclude_none=True
            )
            updated = self.store.update(
                keys["PK"], keys["SK"], {**changes, "lastActiveAt": now}
            )
            if updated:
                return DeviceItem.from_item(updated)

        device = DeviceItem(
            **keys,
            device_id=data.device_id,
            user_id=user_id,
            platform=data.platform,
            token=data.token,
            device_name=data.device_name,
            app_version=data.app_version,
            last_active_at=now,
            created_at=now,
        )
        logger.info(
            "Registered device", extra={"user_id": user_id, "device_id": data.device_id}
        )
        return DeviceItem.from_item(self.store.put(device.to_item()))

    def list_devices(self, user_id: str) -> List[DeviceItem]:
        return [
            DeviceItem.from_item(item)
            for item in self.entities.get_user_devices(user_id)
        ]

    def unregister_device(self, user_id: str, device_id: str) -> None:
        keys = device_key(user_id, device_id)
        self.store.delete(keys["PK"], keys["SK"])

    def touch_device(self, user_id: str, device_id: str) -> Optional[DeviceItem]:
        """Refresh ``lastActiveAt``; returns None for an unknown device."""
        keys = device_key(user_id, device_id)
        updated = self.store.update(
            keys["PK"], keys["SK"], {"lastActiveAt": utc_now_iso()}
        )
        return DeviceItem.from_item(updated)
