"""CSV data export handler."""

from handlers.common import ensure_user
from services.export import ExportService
from utils.clock import utc_now
from utils.decorators import lambda_handler, require_auth
from utils.responses import csv_response

export_service = ExportService()


@lambda_handler(log_response=False)
@require_auth
@ensure_user
def export_csv(event, context):
    """
    Download everything the user has stored as a CSV attachment.

    GET /export.csv
    """
    content = export_service.export_user_data(event["auth"]["user_id"])
    filename = f"kefir-export-{utc_now().strftime('%Y-%m-%d')}.csv"
    return csv_response(content, filename)
