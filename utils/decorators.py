"""
Decorators for Lambda function handlers.

This module provides decorators that add consistent logging, error handling,
authentication context and request parsing to Lambda functions.
"""

import base64
import json
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel, ValidationError

from .errors import AppError
from .logging import (log_error, log_lambda_event, log_lambda_response,
                      setup_logger)
from .responses import (HTTPStatus, error_response, unauthorized_response,
                        validation_error_response)


def _validation_details(error: ValidationError) -> Dict[str, Any]:
    return {
        "validation_errors": [
            {
                "path": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in error.errors(include_url=False, include_context=False)
        ]
    }


def lambda_handler(
    logger_name: Optional[str] = None,
    log_event: bool = True,
    log_response: bool = True,
    structured_logging: bool = True,
) -> Callable:
    """
    Decorator for Lambda function handlers that provides:
    - Consistent logging setup
    - Automatic event/response logging
    - Mapping of application and validation errors to responses
    - Execution time tracking

    Args:
        logger_name: Logger name (defaults to function module name)
        log_event: Whether to log incoming events
        log_response: Whether to log responses
        structured_logging: Whether to use structured JSON logging

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            logger = setup_logger(
                logger_name or func.__module__, structured=structured_logging
            )

            start_time = time.time()

            try:
                if log_event:
                    log_lambda_event(logger, event, context)

                response = func(event, context)

                if not isinstance(response, dict) or "statusCode" not in response:
                    logger.warning("Handler returned invalid response format")
                    response = error_response(
                        "Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR
                    )

            except AppError as e:
                logger.info(
                    f"Request failed: {e.message}",
                    extra={"error_code": e.code, "status_code": e.status_code},
                )
                response = error_response(e.message, e.status_code, e.code)

            except ValidationError as e:
                response = validation_error_response(
                    "Validation failed", _validation_details(e)
                )

            except Exception as e:
                execution_time = (time.time() - start_time) * 1000

                log_error(
                    logger,
                    e,
                    {
                        "function_name": getattr(context, "function_name", "unknown"),
                        "request_id": getattr(context, "aws_request_id", "unknown"),
                        "execution_time_ms": execution_time,
                        "event_path": event.get("rawPath") or event.get("path"),
                        "event_method": event.get("requestContext", {})
                        .get("http", {})
                        .get("method")
                        or event.get("httpMethod"),
                    },
                )

                return error_response(
                    "Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR
                )

            if log_response:
                execution_time = (time.time() - start_time) * 1000
                log_lambda_response(logger, response, execution_time)

            return response

        return wrapper

    return decorator


def require_auth(func: Callable) -> Callable:
    """
    Decorator that ensures the request carries verified Cognito claims.

    API Gateway's JWT authorizer has already checked the token; this only
    reads ``requestContext.authorizer.jwt.claims`` and exposes the caller as
    ``event["auth"] = {"user_id": ..., "email": ...}``.
    """

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        claims = (
            event.get("requestContext", {})
            .get("authorizer", {})
            .get("jwt", {})
            .get("claims")
        )

        if not claims:
            return unauthorized_response("Unauthorized: No JWT claims found")

        user_id = claims.get("sub")
        email = claims.get("email")
        if not user_id or not email:
            return unauthorized_response("Unauthorized: Invalid JWT claims")

        event["auth"] = {"user_id": user_id, "email": email}

        return func(event, context)

    return wrapper


def _read_body(event: Dict[str, Any]) -> str:
    body = event.get("body") or "{}"
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body


def validate_json_body(
    model: Optional[Type[BaseModel]] = None, required_fields: Optional[list] = None
) -> Callable:
    """
    Decorator that parses the JSON request body.

    The raw dict is available as ``event["json_body"]``. When ``model`` is
    given, the validated instance is available as ``event["payload"]``.

    Args:
        model: Pydantic model to validate the body against
        required_fields: List of required field names
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            try:
                body = json.loads(_read_body(event))
            except json.JSONDecodeError as e:
                return validation_error_response(
                    "Invalid JSON in request body", {"json_error": str(e)}
                )

            if not isinstance(body, dict):
                return validation_error_response("Request body must be a JSON object")

            event["json_body"] = body

            if required_fields:
                missing_fields = [
                    field
                    for field in required_fields
                    if field not in body or body[field] is None
                ]

                if missing_fields:
                    return validation_error_response(
                        f"Missing required fields: {', '.join(missing_fields)}",
                        {"missing_fields": missing_fields},
                    )

            if model is not None:
                try:
                    event["payload"] = model.model_validate(body)
                except ValidationError as e:
                    return validation_error_response(
                        "Validation failed", _validation_details(e)
                    )

            return func(event, context)

        return wrapper

    return decorator


def extract_path_params(*param_names: str) -> Callable:
    """
    Decorator that extracts and validates path parameters.

    Args:
        param_names: Names of path parameters to extract
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            path_params = event.get("pathParameters") or {}

            missing_params = [
                param
                for param in param_names
                if param not in path_params or not path_params[param]
            ]

            if missing_params:
                return validation_error_response(
                    f"Missing path parameters: {', '.join(missing_params)}",
                    {"missing_parameters": missing_params},
                )

            event["path_params"] = {param: path_params[param] for param in param_names}

            return func(event, context)

        return wrapper

    return decorator


def query_params(event: Dict[str, Any]) -> Dict[str, str]:
    return event.get("queryStringParameters") or {}
