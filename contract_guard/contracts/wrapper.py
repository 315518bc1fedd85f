"""
@api_contract decorator - applies contract enforcement to route handlers.

Usage:
    register_contract(load_contract("openapi.yaml"), mode=SchemaMode.STRICT)

    @app.route("/pets/<pet_id>", methods=["GET"])
    @api_contract("Petstore")
    def get_pet(pet_id):
        # g.matched_template == "/pets/{petId}"
        ...

The decorator:
1. Resolves method + path against the registered contract
2. Validates the JSON request body against the operation's request schema
3. STRICT: rejects violations (404 for unknown paths, 400 otherwise)
   WARN: logs violations and calls the handler anyway
4. After the handler, validates the JSON response against the response schema
5. Adds X-Request-ID and X-API-Contract-Version headers
"""

import functools
import logging
import time
import uuid
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Union

from flask import Response, g, jsonify, make_response, request

from contract_guard.constants import (
    BODY_METHODS,
    HOW_TO_FIX_MISSING_BODY,
    SUBTYPE_MISSING,
    VALIDATION_REQUEST_BODY,
)

from . import feature_flags
from .paths import find_path
from .registry import Contract, Operation, PathItem, SchemaMode, get_contract, get_contract_mode
from .schema_validation import validate_schema
from .validate import ContractViolation, ValidationError

logger = logging.getLogger('contract_guard.contracts')


class RequestMatch(NamedTuple):
    """Outcome of validating one request against a contract."""
    path_item: Optional[PathItem]
    operation: Optional[Operation]
    errors: List[ValidationError]
    template: str

    @property
    def path_found(self) -> bool:
        return self.path_item is not None


def validate_request(
    contract: Contract,
    method: str,
    path: str,
    body: Any = None,
    content_type: Optional[str] = None,
    *,
    report_parameter_types: Optional[bool] = None,
) -> RequestMatch:
    """
    Resolve a request and validate its body.

    Args:
        contract: Contract to validate against
        method: HTTP method token
        path: URL path (no query string)
        body: Raw body (bytes/str) or decoded object, None when absent
        content_type: Request Content-Type, defaults to application/json

    Returns:
        RequestMatch; errors is empty when the request conforms
    """
    path_item, errors, template = find_path(
        method, path, contract, report_parameter_types=report_parameter_types
    )
    if path_item is None:
        return RequestMatch(None, None, errors, "")

    operation = path_item.get_operation(method)
    errors = list(errors)

    if method in BODY_METHODS and feature_flags.validate_request_bodies():
        schema = operation.request_schema(content_type)
        if body is None or body == b"" or body == "":
            if operation.request_body_required:
                errors.append(ValidationError(
                    validation_type=VALIDATION_REQUEST_BODY,
                    validation_sub_type=SUBTYPE_MISSING,
                    message=f"{method} operation request body for '{template}' is missing",
                    reason=f"The request body is required for {method} '{template}' but none was sent",
                    how_to_fix=HOW_TO_FIX_MISSING_BODY,
                ))
        elif schema is not None:
            _, body_errors = validate_schema(schema, body)
            errors.extend(body_errors)

    return RequestMatch(path_item, operation, errors, template)


def validate_response_body(
    operation: Operation,
    status_code: int,
    body: Any,
    content_type: Optional[str] = None,
) -> List[ValidationError]:
    """Validate a response body against the operation's schema for that status."""
    schema = operation.response_schema(status_code, content_type)
    if schema is None:
        return []
    _, errors = validate_schema(schema, body)
    return errors


def violation_for(match: RequestMatch) -> ContractViolation:
    """Turn request errors into a ContractViolation with the right status."""
    if not match.path_found:
        return ContractViolation.from_errors(
            match.errors, status_code=404, code="CONTRACT_PATH_NOT_FOUND"
        )
    return ContractViolation.from_errors(match.errors, status_code=400)


def enforce_request(contract_name: str, path: Optional[str] = None) -> Optional[RequestMatch]:
    """
    Validate the current Flask request against a registered contract.

    Stores the match on g (g.matched_template, g.contract_operation).

    Args:
        contract_name: Name the contract was registered under
        path: Path to resolve, defaults to request.path

    Returns:
        RequestMatch, or None when no contract is registered under the name

    Raises:
        ContractViolation: On violations when the contract is STRICT
    """
    contract = get_contract(contract_name)
    if contract is None:
        logger.debug(f"No contract '{contract_name}', passing through")
        return None

    body = request.get_data(cache=True) if request.method in BODY_METHODS else None
    match = validate_request(
        contract, request.method, path or request.path, body, request.content_type
    )
    g.matched_template = match.template
    g.contract_operation = match.operation

    if match.errors:
        violation = violation_for(match)
        if get_contract_mode(contract_name) == SchemaMode.STRICT:
            raise violation
        _log_violation(contract_name, violation, current_request_id(), stage="request")
    return match


def api_contract(contract_name: str):
    """
    Decorator that enforces an API contract on a route handler.

    Args:
        contract_name: Name the contract was registered under

    Returns:
        Decorated function with contract enforcement
    """
    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> Union[Response, Tuple[Response, int]]:
            start_time = time.perf_counter()
            request_id = current_request_id()

            contract = get_contract(contract_name)
            if not contract:
                # No contract registered - pass through without enforcement
                logger.debug(f"No contract '{contract_name}', passing through")
                return fn(*args, **kwargs)

            # 1. Request side
            try:
                match = enforce_request(contract_name)
            except ContractViolation as e:
                return _make_error_response(
                    code=e.code,
                    message=str(e),
                    details=e.details,
                    request_id=request_id,
                    status_code=e.status_code,
                )

            # 2. Call the handler
            try:
                result = fn(*args, **kwargs)
            except Exception:
                logger.exception(f"Handler error for {contract_name} {request.method} {request.path}")
                return _make_error_response(
                    code="INTERNAL_ERROR",
                    message="An unexpected error occurred",
                    request_id=request_id,
                    status_code=500,
                )

            response = make_response(result)

            # 3. Response side (only JSON bodies of matched operations)
            operation = match.operation if match is not None else None
            if operation is not None and response.is_json and feature_flags.validate_response_bodies():
                errors = validate_response_body(
                    operation,
                    response.status_code,
                    response.get_data(),
                    response.content_type,
                )
                if errors:
                    violation = ContractViolation.from_errors(
                        errors, status_code=500, code="RESPONSE_SCHEMA_MISMATCH"
                    )
                    if get_contract_mode(contract_name) == SchemaMode.STRICT:
                        return _make_error_response(
                            code=violation.code,
                            message="Response does not match contract",
                            details=violation.details,
                            request_id=request_id,
                            status_code=500,
                        )
                    _log_violation(contract_name, violation, request_id, stage="response")

            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.debug(f"{contract_name} {request.method} {request.path} checked in {elapsed_ms:.2f}ms")

            response.headers['X-Request-ID'] = request_id
            response.headers['X-API-Contract-Version'] = contract.version
            return response

        return wrapper
    return decorator


def current_request_id() -> str:
    """Get or generate request ID, shared through g."""
    request_id = getattr(g, 'request_id', None)
    if not request_id:
        request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        g.request_id = request_id
    return request_id


def _make_error_response(
    code: str,
    message: str,
    details: Optional[Dict] = None,
    request_id: Optional[str] = None,
    status_code: int = 400,
) -> Tuple[Response, int]:
    """Build standardized error response."""
    error = {
        "error": {
            "code": code,
            "message": message,
            "requestId": request_id,
        }
    }
    if details:
        error["error"]["details"] = details

    response = jsonify(error)
    if request_id:
        response.headers['X-Request-ID'] = request_id
    return response, status_code


def _log_violation(
    contract_name: str,
    violation: ContractViolation,
    request_id: str,
    stage: str = "request"
) -> None:
    """Log contract violation for observability."""
    logger.warning(
        f"Contract violation: contract={contract_name} stage={stage} "
        f"request_id={request_id} message={violation.message}",
        extra={
            "event": "contract_violation",
            "contract": contract_name,
            "stage": stage,
            "request_id": request_id,
            "details": violation.details,
        }
    )
