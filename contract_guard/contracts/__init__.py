"""
Contract enforcement package.

Provides the contract model and registry, path resolution, schema
validation, and the @api_contract decorator.
"""

from .registry import (
    SchemaMode,
    SchemaDefinition,
    ParameterSpec,
    Operation,
    PathItem,
    Contract,
    register_contract,
    get_contract,
    get_contract_mode,
    list_contracts,
    set_contract_mode,
    set_global_mode,
    CONTRACTS,
)
from .validate import (
    ValidationError,
    SchemaValidationFailure,
    ContractViolation,
    ContractLoadError,
)
from .loader import load_contract, parse_contract, contract_from_document
from .paths import find_path
from .schema_validation import validate_schema
from .wrapper import api_contract, validate_request, enforce_request

__all__ = [
    'SchemaMode',
    'SchemaDefinition',
    'ParameterSpec',
    'Operation',
    'PathItem',
    'Contract',
    'register_contract',
    'get_contract',
    'get_contract_mode',
    'list_contracts',
    'set_contract_mode',
    'set_global_mode',
    'CONTRACTS',
    'ValidationError',
    'SchemaValidationFailure',
    'ContractViolation',
    'ContractLoadError',
    'load_contract',
    'parse_contract',
    'contract_from_document',
    'find_path',
    'validate_schema',
    'api_contract',
    'validate_request',
    'enforce_request',
]
