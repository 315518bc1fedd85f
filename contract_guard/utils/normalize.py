"""
Input Normalization Utilities
=============================

Single source of truth for turning raw request paths and path segment
values into the shapes the resolver compares.

Usage:
    from contract_guard.utils.normalize import split_path, join_segments, is_number

    segments = split_path("/users/42/orders")   # ['users', '42', 'orders']
    is_number(segments[1])                      # True
"""

import math
import posixpath
from typing import Iterable, List, Optional


class NormalizationError(ValueError):
    """Raised when input cannot be normalized to expected type."""

    def __init__(self, message: str, field: str = None, received_value=None):
        super().__init__(message)
        self.field = field
        self.received_value = received_value


def to_float(
    value: Optional[str],
    *,
    field: str = None
) -> float:
    """
    Convert a path segment to float, strictly.

    Leading/trailing whitespace and digit-group underscores are rejected,
    since a URL segment carrying them is not a plain numeric literal.
    Finite text that overflows to infinity ("1e400") is rejected too.

    Args:
        value: Raw segment text
        field: Parameter name for error messages

    Returns:
        Parsed float

    Raises:
        NormalizationError: If value is not a numeric literal
    """
    if value is None or value == "" or value != value.strip() or "_" in value:
        raise NormalizationError(
            f"Expected number, got {value!r}",
            field=field,
            received_value=value
        )
    try:
        result = float(value)
    except (ValueError, TypeError):
        raise NormalizationError(
            f"Expected number, got {type(value).__name__}: {value!r}",
            field=field,
            received_value=value
        )
    # "1e400" overflows to inf; only a spelled-out infinity may parse as one
    if math.isinf(result) and value.lstrip("+-").lower() not in ("inf", "infinity"):
        raise NormalizationError(
            f"Number out of range: {value!r}",
            field=field,
            received_value=value
        )
    return result


def is_number(value: Optional[str]) -> bool:
    """True if value parses as a floating-point number."""
    try:
        to_float(value)
    except NormalizationError:
        return False
    return True


def split_path(path: str) -> List[str]:
    """
    Split a path on '/' and drop the single leading empty segment.

    Interior and trailing empty segments are kept, so '/pets/' has two
    segments and never lines up with the one-segment '/pets'.
    """
    segments = path.split('/')
    if segments and segments[0] == '':
        segments = segments[1:]
    return segments


def join_segments(segments: Iterable[str]) -> str:
    """
    Join segments with path-join semantics.

    Empty components are dropped and '.' / '..' are collapsed, so the
    result is a canonical relative path ('' when nothing remains).
    """
    parts = [s for s in segments if s]
    if not parts:
        return ''
    return posixpath.normpath('/'.join(parts))


def is_placeholder(segment: str) -> bool:
    """A template segment is a placeholder when it contains a brace."""
    return '{' in segment


def placeholder_name(segment: str) -> str:
    """Strip the delimiting braces from a placeholder segment: '{id}' -> 'id'."""
    return segment[1:-1]
