from datetime import timedelta

import botocore
import pytest

from models.batch import BatchCreate
from models.keys import reminder_key
from models.reminder import ConfirmReminders
from services.batches import BatchService
from services.parameter_store import config
from services.reminders import ReminderService
from services.scheduler import ReminderScheduler
from services.storage import PhotoStorage
from utils.clock import to_iso, utc_now
from utils.errors import BadRequestError, ForbiddenError, NotFoundError


@pytest.fixture
def batch(entities):
    service = BatchService(entities=entities, storage=PhotoStorage(offline=True))
    yield service.create_batch(
        "u1",
        BatchCreate(
            name="Plain",
            stage="stage1_open",
            startDate="2024-01-01T00:00:00Z",
            targetDuration=48,
        ),
    )


@pytest.fixture
def reminder_service(entities, scheduler_client):
    scheduler = ReminderScheduler(client=scheduler_client, settings=config, offline=False)
    yield ReminderService(entities=entities, scheduler=scheduler)


def _confirm(*offsets_hours):
    return ConfirmReminders(
        reminders=[
            {
                "scheduledTime": to_iso(utc_now() + timedelta(hours=hours)),
                "message": f"Check in {hours}h",
            }
            for hours in offsets_hours
        ]
    )


def test_get_suggestions(reminder_service, batch):
    suggestions = reminder_service.get_suggestions(batch.batch_id, "u1")
    assert [(s.type, s.suggested_time) for s in suggestions] == [
        ("midpoint_check", "2024-01-02T00:00:00Z"),
        ("stage1_complete", "2024-01-03T00:00:00Z"),
    ]

    with pytest.raises(ForbiddenError):
        reminder_service.get_suggestions(batch.batch_id, "u2")


def test_confirm_reminders(reminder_service, batch, scheduler_client, memory_store):
    reminders = reminder_service.confirm_reminders(batch.batch_id, "u1", _confirm(1, 24))

    assert len(reminders) == 2
    assert scheduler_client.create_schedule.call_count == 2

    for reminder in reminders:
        assert reminder.status == "pending"
        assert reminder.batch_id == batch.batch_id
        assert reminder.schedule_arn.endswith(
            f"schedule/default/reminder-{reminder.reminder_id}"
        )
        keys = reminder_key("u1", reminder.reminder_id)
        stored = memory_store.get(keys["PK"], keys["SK"])
        assert stored["scheduleArn"] == reminder.schedule_arn

    names = {c.kwargs["Name"] for c in scheduler_client.create_schedule.call_args_list}
    assert names == {f"reminder-{r.reminder_id}" for r in reminders}


def test_confirm_rejects_past_times_before_scheduling(
    reminder_service, batch, scheduler_client, memory_store
):
    with pytest.raises(BadRequestError):
        reminder_service.confirm_reminders(batch.batch_id, "u1", _confirm(2, -1))

    scheduler_client.create_schedule.assert_not_called()
    assert reminder_service.list_reminders("u1", include_all=True) == []


def test_confirm_requires_owner(reminder_service, batch, scheduler_client):
    with pytest.raises(ForbiddenError):
        reminder_service.confirm_reminders(batch.batch_id, "u2", _confirm(1))
    scheduler_client.create_schedule.assert_not_called()


def test_list_reminders(reminder_service, batch, memory_store):
    upcoming, later = reminder_service.confirm_reminders(
        batch.batch_id, "u1", _confirm(1, 2)
    )
    reminder_service.cancel_reminder(later.reminder_id, "u1")

    # a pending reminder whose time has passed
    past = reminder_key("u1", "past")
    memory_store.put(
        {
            **past,
            "reminderId": "past",
            "userId": "u1",
            "batchId": batch.batch_id,
            "scheduledTime": to_iso(utc_now() - timedelta(hours=1)),
            "message": "Too late",
            "status": "pending",
        }
    )

    assert [r.reminder_id for r in reminder_service.list_reminders("u1")] == [
        upcoming.reminder_id
    ]

    everything = reminder_service.list_reminders("u1", include_all=True)
    assert {r.reminder_id for r in everything} == {
        upcoming.reminder_id,
        later.reminder_id,
        "past",
    }


def test_cancel_reminder(reminder_service, batch, scheduler_client):
    (reminder,) = reminder_service.confirm_reminders(batch.batch_id, "u1", _confirm(3))

    cancelled = reminder_service.cancel_reminder(reminder.reminder_id, "u1")

    assert cancelled.status == "cancelled"
    scheduler_client.delete_schedule.assert_called_once_with(
        Name=f"reminder-{reminder.reminder_id}", GroupName="default"
    )
    assert reminder_service.get_reminder("u1", reminder.reminder_id).status == "cancelled"


def test_cancel_reminder_survives_scheduler_errors(
    reminder_service, batch, scheduler_client
):
    (reminder,) = reminder_service.confirm_reminders(batch.batch_id, "u1", _confirm(3))
    scheduler_client.delete_schedule.side_effect = botocore.exceptions.ClientError(
        {"Error": {"Code": "AccessDeniedException", "Message": "no"}}, "DeleteSchedule"
    )

    cancelled = reminder_service.cancel_reminder(reminder.reminder_id, "u1")
    assert cancelled.status == "cancelled"


def test_cancel_missing_reminder(reminder_service):
    with pytest.raises(NotFoundError):
        reminder_service.cancel_reminder("missing", "u1")


def test_cancel_is_scoped_to_user(reminder_service, batch):
    (reminder,) = reminder_service.confirm_reminders(batch.batch_id, "u1", _confirm(3))
    with pytest.raises(NotFoundError):
        reminder_service.cancel_reminder(reminder.reminder_id, "u2")


def test_mark_sent(reminder_service, batch):
    (reminder,) = reminder_service.confirm_reminders(batch.batch_id, "u1", _confirm(3))

    sent = reminder_service.mark_sent("u1", reminder.reminder_id)

    assert sent.status == "sent"
    assert sent.sent_at is not None
    assert reminder_service.mark_sent("u1", "missing") is None
