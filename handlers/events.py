"""Batch timeline event handlers."""

from handlers.common import ensure_user
from models.event import EventCreate
from services.events import EventService
from utils.decorators import (extract_path_params, lambda_handler, query_params,
                              require_auth, validate_json_body)
from utils.errors import BadRequestError
from utils.responses import created_response, success_response

event_service = EventService()


def _parse_limit(raw):
    if raw is None or raw == "":
        return None
    try:
        limit = int(raw)
    except ValueError:
        raise BadRequestError("limit must be a positive integer")
    if limit < 1:
        raise BadRequestError("limit must be a positive integer")
    return limit


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
@validate_json_body(EventCreate)
def create_event(event, context):
    """
    Log an observation, stage change or note on a batch.

    POST /batches/{id}/events
    """
    batch_event = event_service.create_event(
        event["path_params"]["id"], event["auth"]["user_id"], event["payload"]
    )
    return created_response({"event": batch_event})


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
def list_events(event, context):
    """
    GET /batches/{id}/events?limit=N

    Most recent events first.
    """
    limit = _parse_limit(query_params(event).get("limit"))
    events = event_service.list_events(
        event["path_params"]["id"], event["auth"]["user_id"], limit
    )
    return success_response({"events": events, "count": len(events)})
