"""
Contract enforcement middleware - resolve every request against a contract.

App-wide alternative to decorating each route with @api_contract:
- Requests whose path/method are not in the contract are rejected (STRICT)
  or logged (WARN) before any route runs
- g.matched_template holds the contract template for matched requests
- g.request_id is taken from X-Request-ID (or generated) and echoed back
  on every response, so violation logs and error envelopes correlate

Env vars:
  - CONTRACT_ENFORCE_PREFIX (default: "/") only paths under this prefix
    are checked; the prefix is stripped before resolution
"""

import logging
import os
from typing import Optional

from flask import Flask, g, request

from contract_guard.contracts.wrapper import current_request_id, enforce_request


logger = logging.getLogger("contract_guard.middleware.enforcement")


def strip_prefix(path: str, prefix: str) -> Optional[str]:
    """
    Path relative to a mount prefix, or None when the path lies outside it.

    The prefix only matches on a segment boundary: '/api' covers '/api'
    and '/api/pets' but not '/apiv2/pets'.
    """
    prefix = prefix.rstrip("/")
    if not prefix:
        return path
    if path == prefix:
        return "/"
    if path.startswith(prefix + "/"):
        return path[len(prefix):]
    return None


def setup_contract_enforcement(app: Flask, contract_name: str) -> None:
    """
    Set up contract enforcement on Flask app.

    Violations in STRICT mode raise ContractViolation, which the error
    envelope turns into a JSON error response. Register
    setup_error_handlers() on the same app.

    Args:
        app: Flask application instance
        contract_name: Name the contract was registered under
    """
    prefix = os.environ.get("CONTRACT_ENFORCE_PREFIX", "/")

    @app.before_request
    def _enforce_contract():
        current_request_id()
        path = strip_prefix(request.path, prefix)
        if path is None:
            return None
        enforce_request(contract_name, path=path)
        return None

    @app.after_request
    def _add_request_id_header(response):
        request_id = g.get("request_id")
        if request_id:
            response.headers['X-Request-ID'] = request_id
        return response

    logger.info(f"Contract enforcement enabled: contract={contract_name} prefix={prefix}")
