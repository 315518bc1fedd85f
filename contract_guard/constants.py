"""
Centralized Constants - SINGLE SOURCE OF TRUTH

HTTP method tokens, parameter locations, schema primitive types and the
validation type tags attached to every ValidationError are defined here and
imported elsewhere.

DO NOT duplicate these definitions in other files.
"""

# =============================================================================
# HTTP METHODS
# =============================================================================

# Only these tokens key operations under a path item. Anything else never matches.
HTTP_METHODS = (
    'GET',
    'POST',
    'PUT',
    'DELETE',
    'OPTIONS',
    'HEAD',
    'PATCH',
    'TRACE',
)

# Methods whose request body is validated against the contract
BODY_METHODS = ('POST', 'PUT', 'PATCH')


# =============================================================================
# PARAMETER LOCATIONS
# =============================================================================

# Only path-located parameters take part in path resolution
PARAM_IN_PATH = 'path'


# =============================================================================
# SCHEMA PRIMITIVE TYPES
# =============================================================================

TYPE_STRING = 'string'
TYPE_NUMBER = 'number'
TYPE_INTEGER = 'integer'

NUMERIC_TYPES = (TYPE_NUMBER, TYPE_INTEGER)


# =============================================================================
# VALIDATION TYPE TAGS
# =============================================================================

VALIDATION_PATH = 'path'
VALIDATION_SCHEMA = 'schema'
VALIDATION_REQUEST_BODY = 'requestBody'

SUBTYPE_MISSING = 'missing'
SUBTYPE_STRING = 'string'
SUBTYPE_NUMBER = 'number'
SUBTYPE_JSON = 'json'

# Line/column sentinel for errors that cannot be located in the contract
UNKNOWN_POSITION = -1


# =============================================================================
# HOW-TO-FIX HINTS
# =============================================================================

HOW_TO_FIX_PATH = (
    "Check the path is correct, and check that the correct HTTP method "
    "has been used (e.g. GET, POST, PUT, DELETE)"
)
HOW_TO_FIX_INVALID_SCHEMA = (
    "Ensure that the object being submitted, matches the schema correctly"
)
HOW_TO_FIX_INVALID_JSON = "Ensure the payload is well-formed JSON"
HOW_TO_FIX_MISSING_BODY = "Send a request body, the operation requires one"
HOW_TO_FIX_PARAM_NUMBER = "Convert the value '{value}' into a number"
HOW_TO_FIX_PARAM_STRING = (
    "The value '{value}' is numeric, use a non-numeric value for '{name}'"
)

JSON_CONTENT_TYPE = 'application/json'
