"""
Contract Registry - Single source of truth for loaded API contracts.

Each contract has:
- Contract: ordered path items, as declared in the document
- PathItem: one path template, its per-method operations and shared params
- Operation: method-specific params, request body and response schemas
- ParameterSpec / SchemaDefinition: what a single parameter or payload must be

All model objects are frozen. Nothing downstream mutates a loaded contract;
hot reload means registering a new Contract under the same name.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from contract_guard.constants import (
    HTTP_METHODS,
    JSON_CONTENT_TYPE,
    PARAM_IN_PATH,
    UNKNOWN_POSITION,
)

from .refs import inline_refs


class SchemaMode(Enum):
    """Contract enforcement mode."""
    WARN = "warn"      # Log violations, don't fail (production default)
    STRICT = "strict"  # Fail on violations (dev/staging)


def _get_default_mode() -> SchemaMode:
    """Get schema mode from environment."""
    mode = os.environ.get('CONTRACT_MODE', 'warn').lower()
    return SchemaMode.STRICT if mode == 'strict' else SchemaMode.WARN


def _is_production_env() -> bool:
    """Detect production environment for contract enforcement."""
    env = (
        os.environ.get("ENV")
        or os.environ.get("FLASK_ENV")
        or os.environ.get("APP_ENV")
        or ""
    ).lower()
    return env in {"prod", "production"}


def _get_strict_contracts() -> List[str]:
    """Get contract names that must be strict in production."""
    raw = os.environ.get("CONTRACT_STRICT_NAMES", "")
    return [name.strip() for name in raw.split(",") if name.strip()]


@dataclass(frozen=True)
class SchemaDefinition:
    """
    A schema as declared in the contract.

    `schema` is the raw mapping (it may still hold local '$ref's), `document`
    is the root document those references resolve against. `types` is the
    declared primitive type set; type_line/type_col locate the `type` key.
    """
    schema: Mapping[str, Any]
    types: Tuple[str, ...] = ()
    type_line: int = UNKNOWN_POSITION
    type_col: int = UNKNOWN_POSITION
    document: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def render_inline(self) -> Dict[str, Any]:
        """Schema with every local reference inlined, ready for a validator."""
        return inline_refs(self.schema, self.document)


@dataclass(frozen=True)
class ParameterSpec:
    """Specification for a single operation or path-level parameter."""
    name: str
    location: str
    schema: Optional[SchemaDefinition] = None
    required: bool = False

    @property
    def in_path(self) -> bool:
        return self.location == PARAM_IN_PATH

    @property
    def types(self) -> Tuple[str, ...]:
        return self.schema.types if self.schema else ()


@dataclass(frozen=True)
class Operation:
    """Method-specific definition under a path template."""
    method: str
    parameters: Tuple[ParameterSpec, ...] = ()
    operation_id: Optional[str] = None
    request_body: Mapping[str, SchemaDefinition] = field(default_factory=dict)
    request_body_required: bool = False
    responses: Mapping[str, Mapping[str, SchemaDefinition]] = field(default_factory=dict)

    def request_schema(self, content_type: str = JSON_CONTENT_TYPE) -> Optional[SchemaDefinition]:
        """Request body schema for a media type (parameters like charset ignored)."""
        return self.request_body.get(_media_type(content_type))

    def response_schema(
        self,
        status_code: int,
        content_type: str = JSON_CONTENT_TYPE,
    ) -> Optional[SchemaDefinition]:
        """
        Response schema for a status code.

        Lookup order: exact code ('200'), range ('2XX'), then 'default'.
        """
        code = str(status_code)
        for key in (code, f"{code[0]}XX", "default"):
            content = self.responses.get(key)
            if content is not None:
                return content.get(_media_type(content_type))
        return None


@dataclass(frozen=True)
class PathItem:
    """One path template and everything declared beneath it."""
    template: str
    operations: Mapping[str, Operation] = field(default_factory=dict)
    parameters: Tuple[ParameterSpec, ...] = ()
    line: int = UNKNOWN_POSITION
    col: int = UNKNOWN_POSITION

    def get_operation(self, method: str) -> Optional[Operation]:
        """Operation for an HTTP method token, or None (unknown tokens never match)."""
        if method not in HTTP_METHODS:
            return None
        return self.operations.get(method)

    @property
    def methods(self) -> List[str]:
        """Declared methods, in canonical HTTP_METHODS order."""
        return [m for m in HTTP_METHODS if m in self.operations]

    def parameters_for(self, operation: Operation) -> Tuple[ParameterSpec, ...]:
        """
        Operation params followed by path-level params it does not override.

        A path-level param is overridden by an operation param with the same
        name and location.
        """
        declared = {(p.name, p.location) for p in operation.parameters}
        inherited = tuple(
            p for p in self.parameters if (p.name, p.location) not in declared
        )
        return tuple(operation.parameters) + inherited


@dataclass(frozen=True)
class Contract:
    """Complete contract: path items in declared order."""
    name: str
    version: str
    paths: Tuple[PathItem, ...] = ()
    source: Optional[str] = None

    def get_path_item(self, template: str) -> Optional[PathItem]:
        for item in self.paths:
            if item.template == template:
                return item
        return None

    @property
    def templates(self) -> List[str]:
        return [item.template for item in self.paths]


@dataclass
class RegisteredContract:
    """Registry entry: the immutable contract plus its enforcement mode."""
    contract: Contract
    mode: SchemaMode = field(default_factory=_get_default_mode)


# Global registry instance
CONTRACTS: Dict[str, RegisteredContract] = {}


def register_contract(contract: Contract, mode: Optional[SchemaMode] = None) -> RegisteredContract:
    """
    Register a contract under its name.

    Re-registration replaces the previous entry (hot reload). In production,
    names listed in CONTRACT_STRICT_NAMES are forced to STRICT.

    Args:
        contract: The Contract to register
        mode: Enforcement mode, defaults to CONTRACT_MODE

    Returns:
        The registry entry
    """
    entry = RegisteredContract(contract=contract)
    if mode is not None:
        entry.mode = mode
    if _is_production_env() and contract.name in _get_strict_contracts():
        entry.mode = SchemaMode.STRICT
    CONTRACTS[contract.name] = entry
    return entry


def get_contract(name: str) -> Optional[Contract]:
    """
    Get contract by name.

    Args:
        name: The contract name

    Returns:
        Contract if found, None otherwise
    """
    entry = CONTRACTS.get(name)
    return entry.contract if entry else None


def get_contract_mode(name: str) -> Optional[SchemaMode]:
    """Get enforcement mode for a registered contract."""
    entry = CONTRACTS.get(name)
    return entry.mode if entry else None


def list_contracts() -> List[str]:
    """Get list of registered contract names."""
    return list(CONTRACTS.keys())


def unregister_contract(name: str) -> None:
    CONTRACTS.pop(name, None)


def set_contract_mode(name: str, mode: SchemaMode) -> None:
    """
    Set enforcement mode for a specific contract.

    Useful for gradual rollout (e.g., enable STRICT for one contract at a time).
    """
    entry = CONTRACTS.get(name)
    if entry:
        entry.mode = mode


def set_global_mode(mode: SchemaMode) -> None:
    """Set enforcement mode for all registered contracts."""
    for entry in CONTRACTS.values():
        entry.mode = mode


def _media_type(content_type: Optional[str]) -> str:
    if not content_type:
        return JSON_CONTENT_TYPE
    return content_type.split(';', 1)[0].strip().lower()
