"""
Batch handlers for the kefir tracker API.

Batches are addressed by ID alone (``/batches/{id}``); ownership is checked
against the caller's Cognito identity on every request.
"""

from handlers.common import ensure_user
from models.batch import (AddPhotoRequest, BatchCreate, BatchFilters,
                          BatchUpdate, PhotoUploadRequest)
from services.batches import BatchService
from utils.decorators import (extract_path_params, lambda_handler, query_params,
                              require_auth, validate_json_body)
from utils.responses import created_response, success_response

batch_service = BatchService()


@lambda_handler()
@require_auth
@ensure_user
@validate_json_body(BatchCreate)
def create_batch(event, context):
    """
    Start a new batch for the authenticated user.

    POST /batches
    """
    batch = batch_service.create_batch(event["auth"]["user_id"], event["payload"])
    return created_response({"batch": batch})


@lambda_handler()
@require_auth
@ensure_user
def list_batches(event, context):
    """
    GET /batches

    Optional query parameters: ``stage``, ``status`` and ``limit``.
    """
    filters = BatchFilters.model_validate(query_params(event))
    batches = batch_service.list_batches(event["auth"]["user_id"], filters)
    return success_response({"batches": batches, "count": len(batches)})


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
def get_batch(event, context):
    batch = batch_service.get_batch(
        event["path_params"]["id"], event["auth"]["user_id"]
    )
    return success_response({"batch": batch})


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
@validate_json_body(BatchUpdate)
def update_batch(event, context):
    """
    Update the provided fields of a batch.

    PUT /batches/{id}
    """
    batch = batch_service.update_batch(
        event["path_params"]["id"], event["auth"]["user_id"], event["payload"]
    )
    return success_response({"batch": batch})


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
def delete_batch(event, context):
    """
    Archive a batch. The record is kept with status ``archived``.

    DELETE /batches/{id}
    """
    batch_service.archive_batch(event["path_params"]["id"], event["auth"]["user_id"])
    return success_response(message="Batch archived successfully")


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
@validate_json_body(PhotoUploadRequest)
def get_photo_upload_url(event, context):
    """
    Presigned S3 upload URL for a new batch photo.

    POST /batches/{id}/photo/upload-url
    """
    request = event["payload"]
    result = batch_service.get_photo_upload_url(
        event["path_params"]["id"],
        event["auth"]["user_id"],
        request.filename,
        request.content_type,
    )
    return success_response(result)


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
@validate_json_body(AddPhotoRequest)
def add_photo(event, context):
    """Attach an uploaded photo key to the batch."""
    batch = batch_service.add_photo(
        event["path_params"]["id"],
        event["auth"]["user_id"],
        event["payload"].photo_key,
    )
    return success_response({"batch": batch})


@lambda_handler()
@require_auth
@ensure_user
@extract_path_params("id")
def get_photos(event, context):
    urls = batch_service.get_photo_urls(
        event["path_params"]["id"], event["auth"]["user_id"]
    )
    return success_response({"photoUrls": urls})
