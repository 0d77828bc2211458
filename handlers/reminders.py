"""
Reminder handlers for the kefir tracker API.

Suggestions are computed from the batch's stage and start date; confirmed
reminders become one-time EventBridge schedules.
"""

from handlers.common import ensure_user
from models.reminder import ConfirmReminders
from services.reminders import ReminderService
from utils.decorators import (extract_path_params, lambda_handler, query_params,
                              require_auth, validate_json_body)
from utils.responses import created_response, success_response

reminder_service = ReminderService()


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
def get_suggestions(event, context):
    """GET /batches/{id}/reminders/suggestions"""
    suggestions = reminder_service.get_suggestions(
        event["path_params"]["id"], event["auth"]["user_id"]
    )
    return success_response({"suggestions": suggestions})


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
@validate_json_body(ConfirmReminders)
def confirm_reminders(event, context):
    """
    Schedule the reminders the user accepted.

    POST /batches/{id}/reminders/confirm

    Every scheduled time must be in the future; otherwise nothing is
    scheduled and the request fails with 400.
    """
    reminders = reminder_service.confirm_reminders(
        event["path_params"]["id"], event["auth"]["user_id"], event["payload"]
    )
    return created_response({"reminders": reminders, "count": len(reminders)})


@lambda_handler()
@require_auth
@ensure_user
def list_reminders(event, context):
    """
    GET /me/reminders?includeAll=true

    Only upcoming pending reminders unless ``includeAll`` is ``true``.
    """
    include_all = query_params(event).get("includeAll") == "true"
    reminders = reminder_service.list_reminders(
        event["auth"]["user_id"], include_all=include_all
    )
    return success_response({"reminders": reminders, "count": len(reminders)})


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
def cancel_reminder(event, context):
    reminder_service.cancel_reminder(
        event["path_params"]["id"], event["auth"]["user_id"]
    )
    return success_response(message="Reminder cancelled successfully")
