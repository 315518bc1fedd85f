"""
Error envelope middleware - Standardize all error responses.

Provides consistent error response format:
{
    "error": {
        "code": "CONTRACT_PATH_NOT_FOUND",
        "message": "Path '/pets/abc' not found",
        "requestId": "uuid",
        "details": {"violations": [...]}
    }
}
"""

import logging
from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

from contract_guard.contracts.validate import ContractLoadError, ContractViolation


logger = logging.getLogger('contract_guard.middleware.error')


def setup_error_handlers(app: Flask) -> None:
    """
    Set up standardized error handlers on Flask app.

    Handles:
    - ContractViolation raised by contract enforcement
    - ContractLoadError (a broken contract document is a server fault)
    - HTTP exceptions (400, 404, 500, etc.)
    - Unhandled Python exceptions

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ContractViolation)
    def handle_contract_violation(error):
        """Handle contract violations raised in STRICT mode."""
        violations = error.details.get("violations") or [{}]
        return make_error_response(
            code=error.code,
            message=error.message,
            status_code=error.status_code,
            details=error.details,
            hint=violations[0].get("how_to_fix"),
        )

    @app.errorhandler(ContractLoadError)
    def handle_contract_load_error(error):
        """Handle contracts that cannot be rendered or loaded."""
        logger.error(
            f"Contract load error: {error}",
            extra={
                "event": "contract_load_error",
                "request_id": getattr(g, 'request_id', None),
                "field": error.field,
            }
        )
        return make_error_response(
            code="CONTRACT_UNAVAILABLE",
            message="The API contract could not be applied",
            status_code=500,
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """Handle Flask/Werkzeug HTTP exceptions."""
        # Convert error name to error code
        # "Not Found" -> "NOT_FOUND"
        code = error.name.upper().replace(' ', '_')
        return make_error_response(
            code=code,
            message=error.description,
            status_code=error.code,
        )

    @app.errorhandler(Exception)
    def handle_generic_error(error):
        """Handle unhandled Python exceptions."""
        request_id = getattr(g, 'request_id', None)

        # Log the full exception
        logger.exception(
            f"Unhandled error: {error}",
            extra={
                "event": "unhandled_error",
                "request_id": request_id,
                "error_type": type(error).__name__,
            }
        )

        return make_error_response(
            code="INTERNAL_ERROR",
            message="An unexpected error occurred",
            status_code=500,
        )


# Error codes reference
ERROR_CODES = {
    # Client errors (4xx)
    "BAD_REQUEST": 400,
    "NOT_FOUND": 404,
    "METHOD_NOT_ALLOWED": 405,

    # Contract errors
    "CONTRACT_PATH_NOT_FOUND": 404,
    "CONTRACT_VIOLATION": 400,
    "RESPONSE_SCHEMA_MISMATCH": 500,
    "CONTRACT_UNAVAILABLE": 500,

    # Server errors (5xx)
    "INTERNAL_ERROR": 500,
}


def make_error_response(
    code: str,
    message: str,
    status_code: int = None,
    details: dict = None,
    hint: str = None,
):
    """
    Create a standardized error response.

    Args:
        code: Error code (e.g., "CONTRACT_VIOLATION")
        message: Human-readable error message
        status_code: HTTP status code (defaults based on error code)
        details: Optional additional details dict
        hint: Optional hint for fixing the error

    Returns:
        Tuple of (response, status_code)
    """
    request_id = getattr(g, 'request_id', None)

    # Default status code based on error code
    if status_code is None:
        status_code = ERROR_CODES.get(code, 500)

    error = {
        "error": {
            "code": code,
            "message": message,
            "requestId": request_id,
        }
    }

    if details:
        error["error"]["details"] = details
    if hint:
        error["error"]["hint"] = hint

    response = jsonify(error)
    if request_id:
        response.headers['X-Request-ID'] = request_id

    return response, status_code
