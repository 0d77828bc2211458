import json
from datetime import datetime, timedelta, timezone

import botocore
import pytest

from services.parameter_store import config
from services.scheduler import (ReminderScheduler, schedule_expression,
                                schedule_name)


def _not_found(operation):
    return botocore.exceptions.ClientError(
        {"Error": {"Code": "ResourceNotFoundException", "Message": "gone"}}, operation
    )


@pytest.fixture
def scheduler(scheduler_client):
    yield ReminderScheduler(client=scheduler_client, settings=config, offline=False)


def test_schedule_expression():
    assert schedule_name("r1") == "reminder-r1"
    assert (
        schedule_expression(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
        == "at(2024-01-01T12:00:00)"
    )
    plus_two = timezone(timedelta(hours=2))
    assert (
        schedule_expression(datetime(2024, 1, 1, 14, 30, 15, tzinfo=plus_two))
        == "at(2024-01-01T12:30:15)"
    )


def test_create_reminder(scheduler, scheduler_client):
    arn = scheduler.create_reminder(
        reminder_id="r1",
        user_id="u1",
        batch_id="b1",
        schedule_time=datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc),
        message="Check your kefir",
    )

    assert arn == "arn:aws:scheduler:us-east-1:123456789012:schedule/default/reminder-r1"

    kwargs = scheduler_client.create_schedule.call_args.kwargs
    assert kwargs["Name"] == "reminder-r1"
    assert kwargs["GroupName"] == "default"
    assert kwargs["ScheduleExpression"] == "at(2024-01-02T08:00:00)"
    assert kwargs["ScheduleExpressionTimezone"] == "UTC"
    assert kwargs["FlexibleTimeWindow"] == {"Mode": "OFF"}
    assert kwargs["Target"]["Arn"] == (
        "arn:aws:lambda:us-east-1:123456789012:function:kefir-reminder-notification-test"
    )
    assert kwargs["Target"]["RoleArn"] == (
        "arn:aws:iam::123456789012:role/kefir-scheduler-role-test"
    )
    assert json.loads(kwargs["Target"]["Input"]) == {
        "reminderId": "r1",
        "userId": "u1",
        "batchId": "b1",
        "message": "Check your kefir",
    }


def test_create_reminder_offline(scheduler_client):
    scheduler = ReminderScheduler(client=scheduler_client, offline=True)
    arn = scheduler.create_reminder(
        "r1", "u1", "b1", "2024-01-02T08:00:00.000Z", "Check your kefir"
    )
    assert arn == "arn:aws:scheduler:local:000000000000:schedule/mock/reminder-r1"
    scheduler_client.create_schedule.assert_not_called()


def test_delete_reminder(scheduler, scheduler_client):
    scheduler.delete_reminder("r1")
    scheduler_client.delete_schedule.assert_called_once_with(
        Name="reminder-r1", GroupName="default"
    )

    # already gone
    scheduler_client.delete_schedule.side_effect = _not_found("DeleteSchedule")
    scheduler.delete_reminder("r1")

    scheduler_client.delete_schedule.side_effect = botocore.exceptions.ClientError(
        {"Error": {"Code": "AccessDeniedException", "Message": "no"}}, "DeleteSchedule"
    )
    with pytest.raises(botocore.exceptions.ClientError):
        scheduler.delete_reminder("r1")


def test_reminder_exists(scheduler, scheduler_client):
    assert scheduler.reminder_exists("r1") is True

    scheduler_client.get_schedule.side_effect = _not_found("GetSchedule")
    assert scheduler.reminder_exists("r1") is False
