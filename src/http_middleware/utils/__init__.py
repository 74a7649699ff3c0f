"""Utility functions."""

from .sanitizer import add_sensitive_keys, is_sensitive_key, mask_sensitive_data

__all__ = [
    'mask_sensitive_data',
    'is_sensitive_key',
    'add_sensitive_keys',
]
