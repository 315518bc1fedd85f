"""
contract_guard - resolve HTTP requests against an OpenAPI contract.

This package provides:
- Path resolution: request method + path -> contract path item and template
- Schema validation of payloads with located, structured errors
- Flask integration (@api_contract decorator, enforcement middleware)
"""

from .contracts import (
    api_contract,
    find_path,
    get_contract,
    load_contract,
    register_contract,
    validate_schema,
    SchemaMode,
)

__version__ = "1.0.0"

__all__ = [
    'api_contract',
    'find_path',
    'get_contract',
    'load_contract',
    'register_contract',
    'validate_schema',
    'SchemaMode',
]
