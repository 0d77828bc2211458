"""
Public share page handler.

No authentication: anyone with the link can read the safe subset of a batch
its owner marked public.
"""

from services.public import PublicService
from utils.decorators import extract_path_params, lambda_handler
from utils.responses import success_response

public_service = PublicService()


@lambda_handler()
@extract_path_params("batchId")
def get_public_batch(event, context):
    """GET /public/b/{batchId}"""
    batch = public_service.get_public_batch(event["path_params"]["batchId"])
    return success_response({"batch": batch})
