"""
Global middleware for contract-enforced Flask apps.

Provides:
- Error envelope standardization
- App-wide contract enforcement with X-Request-ID correlation
"""

from .error_envelope import setup_error_handlers
from .contract_enforcement import setup_contract_enforcement

__all__ = [
    'setup_error_handlers',
    'setup_contract_enforcement',
]
