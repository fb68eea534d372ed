"""
Numerical Safeguards — Safe Math Primitives для hypersphere AMM

Модуль обеспечивает численную устойчивость всех вычислений пула:
- Epsilon-параметры для инварианта, радиуса, маршрутизации и LP-долей
- NaN/Inf проверки для входных векторов резервов
- Epsilon-сравнения float с учётом машинной точности
- Clamp крошечных отрицательных дискриминантов к нулю

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Все толерантности фиксированы (никакой arbitrary-precision арифметики)
2. NaN/Inf никогда не попадают в резервы (валидация на границе)
3. Все операции детерминированы и воспроизводимы
"""

import math
from typing import Final, Sequence

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Epsilon для общих вычислений: вырожденный коэффициент квадратного уравнения,
# знаменатель spot price, минимально доступный резерв при маршрутизации
EPS_CALC: Final[float] = 1e-12

# Толерантность проверки инварианта Σ (r − xᵢ)² = r²
# Также используется для классификации interior/boundary
EPS_INVARIANT: Final[float] = 1e-6

# Относительная толерантность инварианта для пулов с большим r²
EPS_INVARIANT_REL: Final[float] = 1e-12

# Допустимый неисполненный остаток маршрутизированной сделки
EPS_ROUTE_REMAINDER: Final[float] = 1e-8

# Толерантность "percentage ≈ 1" при полном выводе ликвидности
EPS_PERCENTAGE: Final[float] = 1e-12

# Epsilon для сравнения float (относительная/абсолютная толерантность)
EPS_FLOAT_COMPARE_REL: Final[float] = 1e-9
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12


# =============================================================================
# NaN/Inf ПРОВЕРКИ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение валидное (finite), False если NaN или Inf
    """
    return math.isfinite(value)


def all_valid_floats(values: Sequence[float]) -> bool:
    """True если каждый элемент вектора конечен."""
    return all(is_valid_float(v) for v in values)


# =============================================================================
# EPSILON-СРАВНЕНИЯ FLOAT
# =============================================================================


def is_close(
    a: float,
    b: float,
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Сравнение float с учётом машинной точности.

    Алгоритм:
        abs(a - b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol)

    Examples:
        >>> is_close(1.0, 1.0 + 1e-10)
        True
        >>> is_close(1.0, 1.1)
        False
    """
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


def is_zero(value: float, tol: float = EPS_FLOAT_COMPARE_ABS) -> bool:
    """True если abs(value) <= tol."""
    return abs(value) <= tol


def clamp_tiny_negative(value: float, eps: float = EPS_CALC) -> float:
    """
    Clamp крошечных отрицательных значений к нулю.

    Используется для дискриминанта квадратного уравнения радиуса:
    значения в (-eps, 0) являются шумом округления и трактуются как 0.
    Более отрицательные значения возвращаются без изменений.

    Examples:
        >>> clamp_tiny_negative(-1e-13)
        0.0
        >>> clamp_tiny_negative(-1.0)
        -1.0
        >>> clamp_tiny_negative(4.0)
        4.0
    """
    if -eps < value < 0.0:
        return 0.0
    return value


# =============================================================================
# ВАЛИДАЦИЯ И ПРОВЕРКИ
# =============================================================================


def validate_positive(value: float, name: str, eps: float = 0.0) -> None:
    """
    Валидация, что значение положительное.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)
        eps: Минимальный порог (default: 0.0)

    Raises:
        ValueError: Если value <= eps или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value <= eps:
        raise ValueError(f"{name} must be positive (> {eps}), got {value}")


def validate_non_negative(value: float, name: str) -> None:
    """
    Валидация, что значение неотрицательное.

    Raises:
        ValueError: Если value < 0 или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_in_range(
    value: float,
    name: str,
    min_value: float | None = None,
    max_value: float | None = None,
) -> None:
    """
    Валидация, что значение в заданном диапазоне.

    Raises:
        ValueError: Если value вне диапазона или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if min_value is not None and value < min_value:
        raise ValueError(f"{name} must be >= {min_value}, got {value}")

    if max_value is not None and value > max_value:
        raise ValueError(f"{name} must be <= {max_value}, got {value}")
