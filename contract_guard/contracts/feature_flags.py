"""
Feature flags for contract enforcement.

These flags switch optional checks on or off without code changes:
- REPORT_PARAM_TYPE_ERRORS: When no path matches, also return the path
  parameter type errors found on templates that matched structurally
- VALIDATE_REQUEST_BODIES: Validate JSON request bodies against the
  operation's request schema
- VALIDATE_RESPONSE_BODIES: Validate JSON responses against the
  operation's response schema

Flags are read on every call, so tests can flip them with monkeypatch.

Usage:
    # Surface "parameter is not a number" instead of a bare "path not found"
    export CONTRACT_REPORT_PARAM_TYPES=true

    # Skip response validation on hot endpoints
    export CONTRACT_VALIDATE_RESPONSES=false
"""
import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def report_param_type_errors() -> bool:
    # Default: false (not-found results carry exactly one error)
    return _flag("CONTRACT_REPORT_PARAM_TYPES", "false")


def validate_request_bodies() -> bool:
    return _flag("CONTRACT_VALIDATE_BODIES", "true")


def validate_response_bodies() -> bool:
    return _flag("CONTRACT_VALIDATE_RESPONSES", "true")
