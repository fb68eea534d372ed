"""
Core math modules для hypersphere AMM

Математические примитивы и численные алгоритмы с гарантией стабильности.
"""

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    # Epsilon constants
    EPS_CALC,
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    EPS_INVARIANT,
    EPS_INVARIANT_REL,
    EPS_PERCENTAGE,
    EPS_ROUTE_REMAINDER,
    # NaN/Inf checks
    all_valid_floats,
    is_valid_float,
    # Epsilon comparisons
    clamp_tiny_negative,
    is_close,
    is_zero,
    # Validation
    validate_in_range,
    validate_non_negative,
    validate_positive,
)

# Sphere Math
from src.core.math.sphere_math import (
    decompose_reserves,
    equal_price_point,
    solve_radius,
    sphere_invariant,
)

__all__ = [
    # Numerical Safeguards — Epsilon constants
    "EPS_CALC",
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    "EPS_INVARIANT",
    "EPS_INVARIANT_REL",
    "EPS_PERCENTAGE",
    "EPS_ROUTE_REMAINDER",
    # Numerical Safeguards — NaN/Inf checks
    "all_valid_floats",
    "is_valid_float",
    # Numerical Safeguards — Epsilon comparisons
    "clamp_tiny_negative",
    "is_close",
    "is_zero",
    # Numerical Safeguards — Validation
    "validate_in_range",
    "validate_non_negative",
    "validate_positive",
    # Sphere Math
    "decompose_reserves",
    "equal_price_point",
    "solve_radius",
    "sphere_invariant",
]
