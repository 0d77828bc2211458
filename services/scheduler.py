"""
EventBridge Scheduler integration for one-time reminder delivery.

Each reminder gets its own ``at(...)`` schedule that invokes the reminder
notification Lambda once and is then left to expire.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

import boto3
import botocore

from services.parameter_store import ParameterStoreConfig, config as default_config
from utils.clock import parse_iso

logger = logging.getLogger(__name__)


def schedule_name(reminder_id: str) -> str:
    return f"reminder-{reminder_id}"


def schedule_expression(when: datetime) -> str:
    """One-time expression in UTC, e.g. ``at(2024-01-01T12:00:00)``."""
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return f"at({when.strftime('%Y-%m-%dT%H:%M:%S')})"


class ReminderScheduler:
    def __init__(
        self,
        client=None,
        settings: Optional[ParameterStoreConfig] = None,
        offline: Optional[bool] = None,
    ):
        self.settings = settings or default_config
        self.offline = self.settings.is_offline if offline is None else offline
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("scheduler")
        return self._client

    @property
    def group_name(self) -> str:
        return self.settings.scheduler_group_name

    def target_lambda_arn(self) -> str:
        return (
            f"arn:aws:lambda:{self.settings.region}:{self.settings.account_id}"
            f":function:kefir-reminder-notification-{self.settings.stage}"
        )

    def scheduler_role_arn(self) -> str:
        return (
            f"arn:aws:iam::{self.settings.account_id}"
            f":role/kefir-scheduler-role-{self.settings.stage}"
        )

    def schedule_arn(self, reminder_id: str) -> str:
        return (
            f"arn:aws:scheduler:{self.settings.region}:{self.settings.account_id}"
            f":schedule/{self.group_name}/{schedule_name(reminder_id)}"
        )

    def create_reminder(
        self,
        reminder_id: str,
        user_id: str,
        batch_id: str,
        schedule_time: datetime,
        message: str,
    ) -> str:
        """
        Create the one-time schedule for a reminder.

        Returns:
            The schedule ARN
        """
        name = schedule_name(reminder_id)
        if isinstance(schedule_time, str):
            schedule_time = parse_iso(schedule_time)

        if self.offline:
            logger.info(
                "Offline mode: skipping schedule creation",
                extra={"schedule": name, "scheduled_for": schedule_time.isoformat()},
            )
            return f"arn:aws:scheduler:local:000000000000:schedule/mock/{name}"

        self.client.create_schedule(
            Name=name,
            GroupName=self.group_name,
            ScheduleExpression=schedule_expression(schedule_time),
            ScheduleExpressionTimezone="UTC",
            FlexibleTimeWindow={"Mode": "OFF"},
            Target={
                "Arn": self.target_lambda_arn(),
                "RoleArn": self.scheduler_role_arn(),
                "Input": json.dumps(
                    {
                        "reminderId": reminder_id,
                        "userId": user_id,
                        "batchId": batch_id,
                        "message": message,
                    }
                ),
            },
            State="ENABLED",
        )
        logger.info("Created reminder schedule", extra={"schedule": name})
        return self.schedule_arn(reminder_id)

    def delete_reminder(self, reminder_id: str) -> None:
        """Delete a reminder's schedule; a schedule that is already gone is fine."""
        name = schedule_name(reminder_id)
        if self.offline:
            logger.info("Offline mode: skipping schedule deletion", extra={"schedule": name})
            return

        try:
            self.client.delete_schedule(Name=name, GroupName=self.group_name)
        except botocore.exceptions.ClientError as err:
            if err.response["Error"]["Code"] != "ResourceNotFoundException":
                raise
            logger.info("Schedule already deleted", extra={"schedule": name})

    def reminder_exists(self, reminder_id: str) -> bool:
        if self.offline:
            return False
        try:
            self.client.get_schedule(
                Name=schedule_name(reminder_id), GroupName=self.group_name
            )
        except botocore.exceptions.ClientError as err:
            if err.response["Error"]["Code"] == "ResourceNotFoundException":
                return False
            raise
        return True
