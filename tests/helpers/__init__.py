"""Test helper modules for converter testing.

This package provides utilities for unit tests:
- assertion_helpers: Well-formedness and tag counting for storage format
"""

from .assertion_helpers import (
    assert_well_formed_storage,
    count_tags,
)

__all__ = [
    'assert_well_formed_storage',
    'count_tags',
]
