"""
Core math modules для probspace

Арифметика расширенных неотрицательных вещественных и толерантные сравнения.
"""

from probspace.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    INF,
    # Types
    MeasureValue,
    # Classification
    is_exact,
    is_infinite,
    is_real_number,
    is_valid_float,
    # Validation
    validate_ennreal,
    validate_in_range,
    validate_non_negative,
    # Extended arithmetic
    ext_add,
    ext_mul,
    ext_prod,
    ext_sum,
    reciprocal,
    # Comparisons
    format_value,
    is_close,
    is_zero,
)

__all__ = [
    # Epsilon constants
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    "INF",
    # Types
    "MeasureValue",
    # Classification
    "is_exact",
    "is_infinite",
    "is_real_number",
    "is_valid_float",
    # Validation
    "validate_ennreal",
    "validate_in_range",
    "validate_non_negative",
    # Extended arithmetic
    "ext_add",
    "ext_mul",
    "ext_prod",
    "ext_sum",
    "reciprocal",
    # Comparisons
    "format_value",
    "is_close",
    "is_zero",
]
