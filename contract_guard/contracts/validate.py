"""
Validation error records and contract exceptions.

Every check in the package reports failure as a ValidationError record
rather than raising:
- Path resolution (path not found, path parameter type mismatch)
- Schema validation (payload does not satisfy a schema)

Records are frozen pydantic models so they can be collected, compared in
tests and dumped straight into an error envelope.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from contract_guard.constants import (
    HOW_TO_FIX_PARAM_NUMBER,
    HOW_TO_FIX_PARAM_STRING,
    HOW_TO_FIX_PATH,
    SUBTYPE_MISSING,
    SUBTYPE_NUMBER,
    SUBTYPE_STRING,
    UNKNOWN_POSITION,
    VALIDATION_PATH,
)


class BaseErrorModel(BaseModel):
    """
    Base model for error records.

    - frozen=True: records are never edited after creation
    - arbitrary_types_allowed: original validator errors ride along untouched
    """
    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )


class SchemaValidationFailure(BaseErrorModel):
    """A single keyword failure reported by the schema validator."""
    reason: str
    location: str
    line: int = UNKNOWN_POSITION
    column: int = UNKNOWN_POSITION
    original_error: Any = Field(default=None, exclude=True, repr=False)

    def __str__(self):
        return f"Reason: {self.reason}, Location: {self.location}"


class ValidationError(BaseErrorModel):
    """
    A structured, locatable validation failure.

    spec_line/spec_col point into the contract document. They are -1 when
    the failure cannot be tied to a position (e.g. the path does not exist).
    """
    validation_type: str
    validation_sub_type: str = ""
    message: str
    reason: str
    how_to_fix: Optional[str] = None
    spec_line: int = UNKNOWN_POSITION
    spec_col: int = UNKNOWN_POSITION
    schema_validation_errors: List[SchemaValidationFailure] = Field(default_factory=list)
    context: Any = Field(default=None, repr=False)

    def __str__(self):
        return (
            f"Error: {self.message}, Reason: {self.reason}, "
            f"Line: {self.spec_line}, Column: {self.spec_col}"
        )

    @property
    def is_path_missing(self) -> bool:
        return (
            self.validation_type == VALIDATION_PATH
            and self.validation_sub_type == SUBTYPE_MISSING
        )

    @property
    def is_located(self) -> bool:
        return self.spec_line != UNKNOWN_POSITION and self.spec_col != UNKNOWN_POSITION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization (context omitted)."""
        return self.model_dump(exclude={'context'})


@dataclass
class ContractViolation(Exception):
    """Raised when contract is violated."""
    message: str
    details: Dict[str, Any]
    status_code: int = 400
    code: str = "CONTRACT_VIOLATION"

    def __str__(self):
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "message": self.message,
            "details": self.details,
        }

    @classmethod
    def from_errors(
        cls,
        errors: List[ValidationError],
        status_code: int = 400,
        code: str = "CONTRACT_VIOLATION",
    ) -> "ContractViolation":
        message = errors[0].message if len(errors) == 1 else f"{len(errors)} contract violation(s)"
        return cls(
            message=message,
            details={"violations": [e.to_dict() for e in errors]},
            status_code=status_code,
            code=code,
        )


class ContractLoadError(ValueError):
    """Raised when a contract document cannot be turned into a Contract."""

    def __init__(self, message: str, field: str = None, received_value=None):
        super().__init__(message)
        self.field = field
        self.received_value = received_value


def path_missing_error(request_path: str) -> ValidationError:
    """The single error returned when no template+method combination matches."""
    return ValidationError(
        validation_type=VALIDATION_PATH,
        validation_sub_type=SUBTYPE_MISSING,
        message=f"Path '{request_path}' not found",
        reason=(
            f"The request contains a path of '{request_path}' "
            "however that path does not exist in the specification"
        ),
        how_to_fix=HOW_TO_FIX_PATH,
        spec_line=UNKNOWN_POSITION,
        spec_col=UNKNOWN_POSITION,
    )


def parameter_type_error(
    request_path: str,
    param_name: str,
    value: str,
    expected: str,
    spec_line: int = UNKNOWN_POSITION,
    spec_col: int = UNKNOWN_POSITION,
    context: Any = None,
) -> ValidationError:
    """
    Error for a path parameter whose value does not fit its declared type.

    Args:
        request_path: Raw request path that structurally matched a template
        param_name: Parameter name from the placeholder
        value: The offending segment value
        expected: 'string' or 'number' (integer is reported as number)
    """
    if expected == SUBTYPE_STRING:
        message = (
            f"Match for path '{request_path}', but the parameter "
            f"'{param_name}' is not a string"
        )
        reason = (
            f"The parameter '{param_name}' is defined as a string, "
            f"but the value '{value}' is a number"
        )
        how_to_fix = HOW_TO_FIX_PARAM_STRING.format(value=value, name=param_name)
    else:
        message = (
            f"Match for path '{request_path}', but the parameter "
            f"'{param_name}' is not a number"
        )
        reason = (
            f"The parameter '{param_name}' is defined as a number, "
            f"but the value '{value}' is not a number"
        )
        how_to_fix = HOW_TO_FIX_PARAM_NUMBER.format(value=value)
        expected = SUBTYPE_NUMBER

    return ValidationError(
        validation_type=VALIDATION_PATH,
        validation_sub_type=expected,
        message=message,
        reason=reason,
        how_to_fix=how_to_fix,
        spec_line=spec_line,
        spec_col=spec_col,
        context=context,
    )
