"""
Reminder notification handler.

Invoked by EventBridge Scheduler (not API Gateway) with the payload written
by ``ReminderScheduler.create_reminder``:
``{"reminderId", "userId", "batchId", "message"}``.
"""

import time

from models.reminder import ReminderStatus
from services.push import PushNotifier
from services.reminders import ReminderService
from services.users import UserService
from utils.errors import NotFoundError
from utils.logging import log_lambda_event, setup_logger

logger = setup_logger(__name__)

NOTIFICATION_TITLE = "Kefir reminder"

reminder_service = ReminderService()
user_service = UserService()
notifier = PushNotifier()


def send_reminder(event, context):
    """
    Push a due reminder to every device the user has registered.

    Reminders that no longer exist or are no longer pending (cancelled, or
    already sent on an earlier attempt) are skipped. Failures from the push
    API propagate so the scheduler's retry policy applies.
    """
    start_time = time.time()
    log_lambda_event(logger, event, context)

    reminder_id = event.get("reminderId")
    user_id = event.get("userId")
    if not reminder_id or not user_id:
        logger.error("Reminder payload is missing reminderId or userId")
        return {"status": "invalid"}

    try:
        reminder = reminder_service.get_reminder(user_id, reminder_id)
    except NotFoundError:
        logger.warning("Reminder not found", extra={"reminder_id": reminder_id})
        return {"status": "skipped", "reason": "not_found"}

    if reminder.status != ReminderStatus.PENDING:
        logger.info(
            "Reminder is not pending",
            extra={"reminder_id": reminder_id, "reminder_status": reminder.status},
        )
        return {"status": "skipped", "reason": reminder.status}

    tokens = [device.token for device in user_service.list_devices(user_id)]
    if not tokens:
        logger.info("User has no registered devices", extra={"user_id": user_id})

    tickets = notifier.send(
        tokens,
        body=reminder.message,
        title=NOTIFICATION_TITLE,
        data={"batchId": reminder.batch_id, "reminderId": reminder_id},
    )
    reminder_service.mark_sent(user_id, reminder_id)

    logger.info(
        "Reminder sent",
        extra={
            "reminder_id": reminder_id,
            "user_id": user_id,
            "device_count": len(tokens),
            "execution_time_ms": (time.time() - start_time) * 1000,
        },
    )
    return {"status": "sent", "deviceCount": len(tokens), "tickets": tickets}
