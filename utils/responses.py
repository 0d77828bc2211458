"""
Standardized HTTP response utilities for Lambda functions.

This module provides consistent response formatting and JSON serialization
across all API endpoints.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union


class HTTPStatus(Enum):
    """HTTP status codes for API responses."""

    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500


# CORS headers for API responses; the mobile client and share page call cross-origin.
cors_headers = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}


class APIJSONEncoder(json.JSONEncoder):
    """
    JSON encoder for API responses that handles:
    - Decimal objects (from DynamoDB), as int when integral
    - datetime objects
    - Pydantic models, dumped with their camelCase aliases
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return int(obj) if obj == obj.to_integral_value() else float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, "model_dump"):
            return obj.model_dump(by_alias=True, exclude_none=True)
        return super().default(obj)


def create_response(
    status_code: Union[int, HTTPStatus],
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    cors_enabled: bool = True,
) -> Dict[str, Any]:
    """
    Create a standardized Lambda HTTP response.

    Args:
        status_code: HTTP status code
        body: Response body (dicts, lists and models are JSON serialized)
        headers: Additional headers
        cors_enabled: Whether to include CORS headers

    Returns:
        Lambda HTTP response dictionary
    """
    if isinstance(status_code, HTTPStatus):
        status_code = status_code.value

    response_headers = {}

    if cors_enabled:
        response_headers.update(cors_headers)

    if body is not None and (
        isinstance(body, (dict, list)) or hasattr(body, "model_dump")
    ):
        response_headers["Content-Type"] = "application/json"

    if headers:
        response_headers.update(headers)

    response = {
        "statusCode": status_code,
        "headers": response_headers,
    }

    if body is not None:
        if isinstance(body, (dict, list)) or hasattr(body, "model_dump"):
            response["body"] = json.dumps(body, cls=APIJSONEncoder)
        else:
            response["body"] = str(body)

    return response


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: Union[int, HTTPStatus] = HTTPStatus.OK,
) -> Dict[str, Any]:
    """
    Create a success response.

    Dict data is merged into the top level of the body; anything else is
    returned under ``data``.
    """
    body = {}

    if message:
        body["message"] = message

    if data is not None:
        if isinstance(data, dict):
            body.update(data)
        else:
            body["data"] = data

    return create_response(status_code, body)


def created_response(data: Any = None, message: Optional[str] = None):
    return success_response(data, message, HTTPStatus.CREATED)


def csv_response(content: str, filename: str) -> Dict[str, Any]:
    return create_response(
        HTTPStatus.OK,
        content,
        headers={
            "Content-Type": "text/csv; charset=utf-8",
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )


def error_response(
    message: str,
    status_code: Union[int, HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Create an error response.

    Args:
        message: Error message
        status_code: HTTP status code
        error_code: Application-specific error code
        details: Additional error details

    Returns:
        Lambda HTTP response dictionary
    """
    body = {"error": message}

    if error_code:
        body["error_code"] = error_code

    if details:
        body["details"] = details

    return create_response(status_code, body)


def validation_error_response(
    message: str = "Validation failed", errors: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    return error_response(
        message=message,
        status_code=HTTPStatus.BAD_REQUEST,
        error_code="VALIDATION_ERROR",
        details=errors,
    )


def not_found_response(
    resource: str, identifier: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a not found error response.

    Args:
        resource: Resource type (e.g., "Batch", "Reminder")
        identifier: Resource identifier
    """
    if identifier:
        message = f"{resource} '{identifier}' not found"
    else:
        message = f"{resource} not found"

    return error_response(
        message=message,
        status_code=HTTPStatus.NOT_FOUND,
        error_code="RESOURCE_NOT_FOUND",
    )


def unauthorized_response(message: str = "Unauthorized access") -> Dict[str, Any]:
    return error_response(
        message=message, status_code=HTTPStatus.UNAUTHORIZED, error_code="UNAUTHORIZED"
    )
