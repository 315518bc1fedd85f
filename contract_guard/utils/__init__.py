"""
Utility modules for contract resolution.
"""
from .normalize import (
    NormalizationError,
    to_float,
    is_number,
    split_path,
    join_segments,
    is_placeholder,
    placeholder_name,
)

__all__ = [
    'NormalizationError',
    'to_float',
    'is_number',
    'split_path',
    'join_segments',
    'is_placeholder',
    'placeholder_name',
]
