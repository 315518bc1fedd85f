"""
Path resolution - finds the path item a request targets.

Matching rules:
- Templates are visited in declared order; the first match wins
- A template is only considered if it declares an operation for the method
- A request path byte-identical to the template matches immediately
- Otherwise segment counts must agree, literal segments must agree, and
  every placeholder value must fit its path parameter's declared type

There is no "most specific wins" scoring. A contract that wants
'/pets/mine' to beat '/pets/{petId}' declares it first.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from contract_guard.constants import NUMERIC_TYPES, SUBTYPE_NUMBER, SUBTYPE_STRING, TYPE_STRING
from contract_guard.utils.normalize import (
    is_number,
    is_placeholder,
    join_segments,
    placeholder_name,
    split_path,
)

from . import feature_flags
from .registry import Contract, ParameterSpec, PathItem
from .validate import ValidationError, parameter_type_error, path_missing_error

logger = logging.getLogger('contract_guard.contracts.paths')

MatchResult = Tuple[Optional[PathItem], List[ValidationError], str]


def find_path(
    method: str,
    request_path: str,
    contract: Contract,
    *,
    report_parameter_types: Optional[bool] = None,
) -> MatchResult:
    """
    Find the path item in the contract that matches a request.

    Args:
        method: HTTP method token (e.g. "GET"), compared case-sensitively
        request_path: URL path of the request, without query string
        contract: Contract to search
        report_parameter_types: Add path parameter type errors to a
            not-found result. None defers to CONTRACT_REPORT_PARAM_TYPES.

    Returns:
        (path item, errors, matched template). On success the template is
        the contract's own key, with placeholders intact, so callers can
        look models up by it. On failure: (None, [path missing error], "").
    """
    if report_parameter_types is None:
        report_parameter_types = feature_flags.report_param_type_errors()

    requested = split_path(request_path)
    type_errors: List[ValidationError] = []

    for item in contract.paths:
        operation = item.get_operation(method)
        if operation is None:
            continue

        # literal match
        if request_path == item.template:
            logger.debug(f"Literal match {method} {request_path}")
            return item, [], item.template

        matched, errors = compare_paths(
            split_path(item.template),
            requested,
            item.parameters_for(operation),
            request_path,
        )
        if matched:
            logger.debug(f"Matched {method} {request_path} -> {item.template}")
            return item, errors, item.template
        type_errors.extend(errors)

    errors = [path_missing_error(request_path)]
    if report_parameter_types:
        errors.extend(type_errors)
    return None, errors, ""


def compare_paths(
    mapped: Sequence[str],
    requested: Sequence[str],
    params: Sequence[ParameterSpec],
    request_path: str,
) -> Tuple[bool, List[ValidationError]]:
    """
    Structurally compare template segments with request segments.

    Returns:
        (True, []) on a match. (False, []) when the shapes differ.
        (False, [error]) when a placeholder value fails its type check;
        the first such failure stops the comparison.
    """
    if len(mapped) != len(requested):
        return False, []  # short circuit out

    imploded = []
    for segment, value in zip(mapped, requested):
        if not is_placeholder(segment):
            imploded.append(segment)
            continue

        name = placeholder_name(segment)
        spec = find_path_parameter(params, name)
        if spec is not None:
            failed = check_parameter_type(spec, value)
            if failed is not None:
                schema = spec.schema
                return False, [parameter_type_error(
                    request_path,
                    name,
                    value,
                    failed,
                    spec_line=schema.type_line,
                    spec_col=schema.type_col,
                    context=schema.schema,
                )]
        imploded.append(value)

    return join_segments(imploded) == join_segments(requested), []


def find_path_parameter(params: Sequence[ParameterSpec], name: str) -> Optional[ParameterSpec]:
    """First path-located parameter with the given name."""
    for spec in params:
        if spec.in_path and spec.name == name:
            return spec
    return None


def check_parameter_type(spec: ParameterSpec, value: str) -> Optional[str]:
    """
    Check a path segment value against a parameter's declared types.

    A string parameter must not look like a number; a number or integer
    parameter must parse as one. Every declared string/number/integer type
    is checked, so '[string, integer]' accepts no value at all. Other types
    ('null', 'boolean', ...) are not checked.

    Returns:
        None if the value conforms, else the first failed type ('string' or 'number').
    """
    numeric = is_number(value)
    for declared in spec.types:
        if declared == TYPE_STRING and numeric:
            return SUBTYPE_STRING
        if declared in NUMERIC_TYPES and not numeric:
            return SUBTYPE_NUMBER
    return None
