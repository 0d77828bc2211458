"""
Utils package for shared utilities and cross-cutting concerns.

This package contains decorators, logging utilities, response formatters,
application errors and clock helpers used across the application.
"""

from .clock import parse_iso, to_iso, utc_now, utc_now_iso
from .decorators import (extract_path_params, lambda_handler, query_params,
                         require_auth, validate_json_body)
from .errors import (AppError, BadRequestError, ConflictError, ForbiddenError,
                     NotFoundError, UnauthorizedError)
from .logging import (log_error, log_lambda_event, log_lambda_response,
                      setup_logger)
from .responses import (HTTPStatus, created_response, csv_response,
                        error_response, not_found_response, success_response,
                        validation_error_response)

__all__ = [
    # Decorators
    "lambda_handler",
    "require_auth",
    "validate_json_body",
    "extract_path_params",
    "query_params",
    # Errors
    "AppError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    # Logging
    "setup_logger",
    "log_lambda_event",
    "log_lambda_response",
    "log_error",
    # Responses
    "HTTPStatus",
    "success_response",
    "created_response",
    "csv_response",
    "error_response",
    "validation_error_response",
    "not_found_response",
    # Clock
    "utc_now",
    "utc_now_iso",
    "to_iso",
    "parse_iso",
]
