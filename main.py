"""
Health check endpoint for the kefir tracker API.

Used by monitoring and deployment smoke tests; requires no authentication.
"""

from utils.decorators import lambda_handler
from utils.responses import success_response

SERVICE_NAME = "kefir-tracker-api"
SERVICE_VERSION = "1.0.0"


@lambda_handler()
def healthz(event, context):
    """
    GET /healthz

    Returns a simple success response to indicate the service is running.
    """
    return success_response(
        data={
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
        },
        message="Service is running",
    )
