"""Reminder suggestions, confirmation, listing and cancellation."""

import logging
import uuid
from typing import List, Optional

import botocore

from models.keys import reminder_key
from models.reminder import (ConfirmReminders, ReminderItem, ReminderStatus,
                             ReminderSuggestion)
from services.batches import load_owned_batch
from services.entities import KefirEntities
from services.reminder_suggestions import suggest_reminders
from services.scheduler import ReminderScheduler
from utils.clock import parse_iso, to_iso, utc_now, utc_now_iso
from utils.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


class ReminderService:
    def __init__(
        self,
        entities: Optional[KefirEntities] = None,
        scheduler: Optional[ReminderScheduler] = None,
    ):
        self.entities = entities or KefirEntities()
        self.scheduler = scheduler or ReminderScheduler()

    @property
    def store(self):
        return self.entities.store

    def get_suggestions(self, batch_id: str, user_id: str) -> List[ReminderSuggestion]:
        batch = load_owned_batch(self.entities, batch_id, user_id)
        return suggest_reminders(batch.stage, batch.start_date, batch.target_duration)

    def confirm_reminders(
        self, batch_id: str, user_id: str, data: ConfirmReminders
    ) -> List[ReminderItem]:
        """
        Schedule the reminders the user picked.

        All requested times are checked before anything is scheduled, so a
        request with one past time creates no reminders at all.
        """
        load_owned_batch(self.entities, batch_id, user_id)

        now = utc_now()
        if any(request.scheduled_time <= now for request in data.reminders):
            raise BadRequestError("Scheduled time must be in the future")

        created = []
        for request in data.reminders:
            reminder_id = str(uuid.uuid4())
            created_at = utc_now_iso()
            schedule_arn = self.scheduler.create_reminder(
                reminder_id=reminder_id,
                user_id=user_id,
                batch_id=batch_id,
                schedule_time=request.scheduled_time,
                message=request.message,
            )
            reminder = ReminderItem(
                **reminder_key(user_id, reminder_id),
                reminder_id=reminder_id,
                user_id=user_id,
                batch_id=batch_id,
                scheduled_time=to_iso(request.scheduled_time),
                message=request.message,
                status=ReminderStatus.PENDING,
                schedule_arn=schedule_arn,
                created_at=created_at,
            )
            created.append(ReminderItem.from_item(self.store.put(reminder.to_item())))

        logger.info(
            "Scheduled reminders",
            extra={"batch_id": batch_id, "user_id": user_id, "count": len(created)},
        )
        return created

    def list_reminders(self, user_id: str, include_all: bool = False) -> List[ReminderItem]:
        """All reminders, or by default only pending ones still in the future."""
        reminders = [
            ReminderItem.from_item(item)
            for item in self.entities.get_user_reminders(user_id)
        ]
        if include_all:
            return reminders

        now = utc_now()
        return [
            r
            for r in reminders
            if r.status == ReminderStatus.PENDING and parse_iso(r.scheduled_time) > now
        ]

    def get_reminder(self, user_id: str, reminder_id: str) -> ReminderItem:
        keys = reminder_key(user_id, reminder_id)
        reminder = ReminderItem.from_item(self.store.get(keys["PK"], keys["SK"]))
        if reminder is None:
            raise NotFoundError("Reminder not found")
        return reminder

    def cancel_reminder(self, reminder_id: str, user_id: str) -> ReminderItem:
        """
        Cancel a reminder. The item stays in the table with status cancelled.

        A failure to remove the schedule is logged and does not stop the
        cancellation; the notification Lambda skips cancelled reminders.
        """
        reminder = self.get_reminder(user_id, reminder_id)

        try:
            self.scheduler.delete_reminder(reminder_id)
        except botocore.exceptions.ClientError as err:
            logger.error(
                "Failed to delete reminder schedule",
                extra={
                    "reminder_id": reminder_id,
                    "error_code": err.response["Error"]["Code"],
                },
            )

        updated = self.store.update(
            reminder.PK, reminder.SK, {"status": ReminderStatus.CANCELLED.value}
        )
        return ReminderItem.from_item(updated)

    def mark_sent(self, user_id: str, reminder_id: str) -> Optional[ReminderItem]:
        keys = reminder_key(user_id, reminder_id)
        updated = self.store.update(
            keys["PK"],
            keys["SK"],
            {"status": ReminderStatus.SENT.value, "sentAt": utc_now_iso()},
        )
        return ReminderItem.from_item(updated)
