"""
Age-length key construction and checks.

Modules:
    key:
        Length categories, key construction from aged fish, key validation
        (numeric labels, row proportions), ``xlim`` restriction and the
        long-form table used for bubble plots.

Design Principle:
    This subpackage has no dependencies on plotting/ or matplotlib.
"""

from .key import (
    AgeLengthSummary,
    adjust_key_for_xlim,
    age_length_key,
    bubble_table,
    check_alk,
    find_ages_and_lens,
    length_categories,
)

__all__ = [
    "AgeLengthSummary",
    "adjust_key_for_xlim",
    "age_length_key",
    "bubble_table",
    "check_alk",
    "find_ages_and_lens",
    "length_categories",
]
