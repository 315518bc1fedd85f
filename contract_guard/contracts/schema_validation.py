"""
Schema validation for payloads.

Structural validation is delegated to jsonschema. This module only:
- Renders the contract schema inline (local '$ref's resolved)
- Decodes the payload
- Flattens validator output into SchemaValidationFailure records
- Locates each failing keyword inside the rendered schema (line/column)

Failures that carry no actionable information are dropped:
- Failures with an empty keyword location
- anyOf/oneOf/allOf wrappers whose nested failures are reported instead
"""

import json
import logging
from typing import Any, Iterable, Iterator, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator
from jsonschema.validators import validator_for

from contract_guard.constants import (
    HOW_TO_FIX_INVALID_JSON,
    HOW_TO_FIX_INVALID_SCHEMA,
    SUBTYPE_JSON,
    UNKNOWN_POSITION,
    VALIDATION_SCHEMA,
)

from .registry import SchemaDefinition
from .validate import SchemaValidationFailure, ValidationError

logger = logging.getLogger('contract_guard.contracts.schema_validation')

# Keywords whose own failure only says "a nested schema failed"
COMBINATOR_KEYWORDS = {'anyOf', 'oneOf', 'allOf'}


def validate_schema(schema: SchemaDefinition, payload: Any) -> Tuple[bool, List[ValidationError]]:
    """
    Validate a payload against a contract schema.

    Args:
        schema: SchemaDefinition from the contract
        payload: JSON text (str/bytes) or an already-decoded object

    Returns:
        (True, []) when valid, else (False, [one aggregated ValidationError])

    Raises:
        ContractLoadError: If the schema holds a reference cycle and cannot
            be rendered inline
    """
    rendered = schema.render_inline()
    rendered_yaml = yaml.safe_dump(rendered, sort_keys=False, allow_unicode=True)

    try:
        decoded = decode_payload(payload)
    except ValueError as e:
        return False, [ValidationError(
            validation_type=VALIDATION_SCHEMA,
            validation_sub_type=SUBTYPE_JSON,
            message="payload cannot be decoded",
            reason=f"The payload is not valid JSON: {e}",
            how_to_fix=HOW_TO_FIX_INVALID_JSON,
            spec_line=schema.type_line,
            spec_col=schema.type_col,
            context=rendered_yaml,
        )]

    validator_cls = validator_for(rendered, default=Draft202012Validator)
    validator = validator_cls(rendered)
    raw_errors = list(validator.iter_errors(decoded))
    if not raw_errors:
        return True, []

    rendered_node = yaml.compose(rendered_yaml, Loader=yaml.SafeLoader)

    failures = []
    for error in flatten_errors(raw_errors):
        location = keyword_location(error)
        if not location:
            continue
        if error.validator in COMBINATOR_KEYWORDS and error.context:
            continue  # nested failures carry the detail

        line, column = UNKNOWN_POSITION, UNKNOWN_POSITION
        located = locate_schema_property_node(rendered_node, location)
        if located is not None:
            line = located.start_mark.line + 1
            column = located.start_mark.column + 1

        failures.append(SchemaValidationFailure(
            reason=error.message,
            location=location,
            line=line,
            column=column,
            original_error=error,
        ))

    logger.debug(f"Schema validation produced {len(failures)} failure(s)")

    return False, [ValidationError(
        validation_type=VALIDATION_SCHEMA,
        message="schema does not pass validation",
        reason="Schema failed to validate against the contract requirements",
        how_to_fix=HOW_TO_FIX_INVALID_SCHEMA,
        spec_line=schema.type_line,
        spec_col=schema.type_col,
        schema_validation_errors=failures,
        context=rendered_yaml,
    )]


def decode_payload(payload: Any) -> Any:
    """Decode JSON bytes/str; anything else is taken as already decoded."""
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode('utf-8')
    if isinstance(payload, str):
        return json.loads(payload)
    return payload


def flatten_errors(errors: Iterable[Any]) -> Iterator[Any]:
    """Depth-first walk over validator errors and their nested context."""
    for error in errors:
        yield error
        if error.context:
            yield from flatten_errors(error.context)


def keyword_location(error: Any) -> str:
    """JSON pointer of the failing keyword: '/properties/name/type'."""
    parts = [str(p) for p in error.absolute_schema_path]
    if not parts:
        return ""
    return "/" + "/".join(parts)


def locate_schema_property_node(root: Optional[yaml.Node], location: str) -> Optional[yaml.Node]:
    """
    Walk a composed YAML node tree along a JSON pointer.

    Returns:
        The key node of the last mapping step (or the item node of a final
        sequence step), None if the pointer leaves the tree.
    """
    if root is None:
        return None

    node = root
    located = None
    for part in location.lstrip('/').split('/'):
        part = part.replace('~1', '/').replace('~0', '~')
        if isinstance(node, yaml.MappingNode):
            match = None
            for key_node, value_node in node.value:
                if key_node.value == part:
                    match = (key_node, value_node)
                    break
            if match is None:
                return None
            located, node = match
        elif isinstance(node, yaml.SequenceNode):
            if not part.isdigit() or int(part) >= len(node.value):
                return None
            node = node.value[int(part)]
            located = node
        else:
            return None
    return located
