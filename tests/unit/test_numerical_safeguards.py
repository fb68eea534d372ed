"""
Тесты для модуля Numerical Safeguards

Проверяет:
1. NaN/Inf проверки
2. Epsilon-сравнения float
3. Clamp шума округления дискриминанта
4. Валидацию параметров
"""


import pytest

from src.core.math.numerical_safeguards import (
    EPS_CALC,
    EPS_INVARIANT,
    EPS_ROUTE_REMAINDER,
    all_valid_floats,
    clamp_tiny_negative,
    is_close,
    is_valid_float,
    is_zero,
    validate_in_range,
    validate_non_negative,
    validate_positive,
)

# =============================================================================
# ТЕСТЫ NaN/Inf ПРОВЕРОК
# =============================================================================


class TestIsValidFloat:
    """Тесты для is_valid_float"""

    def test_normal_values_valid(self) -> None:
        """Обычные значения валидны"""
        assert is_valid_float(0.0)
        assert is_valid_float(1.0)
        assert is_valid_float(-1.0)
        assert is_valid_float(1e10)

    def test_nan_invalid(self) -> None:
        """NaN невалиден"""
        assert not is_valid_float(float("nan"))

    def test_inf_invalid(self) -> None:
        """Inf невалиден"""
        assert not is_valid_float(float("inf"))
        assert not is_valid_float(float("-inf"))


class TestAllValidFloats:
    def test_finite_vector(self) -> None:
        assert all_valid_floats([100.0, 0.0, 1e-9])

    def test_vector_with_nan(self) -> None:
        assert not all_valid_floats([100.0, float("nan")])

    def test_empty_vector_valid(self) -> None:
        assert all_valid_floats([])


# =============================================================================
# ТЕСТЫ EPSILON-СРАВНЕНИЙ
# =============================================================================


class TestIsClose:
    """Тесты для is_close"""

    def test_exact_match(self) -> None:
        """Точное совпадение"""
        assert is_close(1.0, 1.0)
        assert is_close(0.0, 0.0)

    def test_close_values_within_tolerance(self) -> None:
        """Близкие значения в пределах толерантности"""
        assert is_close(1.0, 1.0 + 1e-10)
        assert is_close(1.0, 1.0 - 1e-10)

    def test_far_values_not_close(self) -> None:
        """Далёкие значения не близки"""
        assert not is_close(1.0, 2.0)
        assert not is_close(1.0, 1.1)

    def test_small_absolute_difference(self) -> None:
        """Малая абсолютная разница (вблизи нуля)"""
        assert is_close(0.0, 1e-13, abs_tol=1e-12)
        assert not is_close(0.0, 1e-10, abs_tol=1e-12)

    def test_relative_tolerance_for_large_values(self) -> None:
        """Относительная толерантность для больших значений"""
        assert is_close(1e10, 1e10 + 1.0, rel_tol=1e-9)
        assert not is_close(1e10, 1e10 + 100.0, rel_tol=1e-9)


class TestIsZero:
    def test_exact_zero(self) -> None:
        assert is_zero(0.0)

    def test_tiny_value_is_zero(self) -> None:
        assert is_zero(1e-13)
        assert is_zero(-1e-13)

    def test_custom_tolerance(self) -> None:
        assert not is_zero(1e-7)
        assert is_zero(1e-7, tol=EPS_INVARIANT)


class TestClampTinyNegative:
    """Тесты для clamp_tiny_negative"""

    def test_tiny_negative_clamped(self) -> None:
        """Значения в (-eps, 0) становятся 0"""
        assert clamp_tiny_negative(-1e-13) == 0.0
        assert clamp_tiny_negative(-EPS_CALC / 2) == 0.0

    def test_eps_boundary_not_clamped(self) -> None:
        """Ровно -eps уже не шум"""
        assert clamp_tiny_negative(-EPS_CALC) == -EPS_CALC

    def test_large_negative_unchanged(self) -> None:
        assert clamp_tiny_negative(-1.0) == -1.0

    def test_positive_unchanged(self) -> None:
        assert clamp_tiny_negative(4.0) == 4.0
        assert clamp_tiny_negative(0.0) == 0.0

    def test_custom_eps(self) -> None:
        assert clamp_tiny_negative(-1e-7, eps=EPS_INVARIANT) == 0.0


# =============================================================================
# ТЕСТЫ ВАЛИДАЦИИ
# =============================================================================


class TestValidatePositive:
    """Тесты для validate_positive"""

    def test_positive_value_passes(self) -> None:
        """Положительное значение проходит"""
        validate_positive(1.0, "x")
        validate_positive(EPS_ROUTE_REMAINDER, "x")

    def test_zero_raises(self) -> None:
        """Ноль не положительный"""
        with pytest.raises(ValueError, match="must be positive"):
            validate_positive(0.0, "plane_constant")

    def test_negative_raises(self) -> None:
        with pytest.raises(ValueError, match="plane_constant"):
            validate_positive(-1.0, "plane_constant")

    def test_custom_eps(self) -> None:
        """Значение ниже порога eps отклоняется"""
        with pytest.raises(ValueError):
            validate_positive(1e-7, "x", eps=1e-6)

    def test_nan_raises(self) -> None:
        with pytest.raises(ValueError, match="NaN/Inf"):
            validate_positive(float("nan"), "x")


class TestValidateNonNegative:
    def test_zero_passes(self) -> None:
        validate_non_negative(0.0, "reserve")

    def test_negative_raises(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            validate_non_negative(-1e-9, "reserve")

    def test_inf_raises(self) -> None:
        with pytest.raises(ValueError, match="NaN/Inf"):
            validate_non_negative(float("inf"), "reserve")


class TestValidateInRange:
    """Тесты для validate_in_range"""

    def test_within_range(self) -> None:
        validate_in_range(0.5, "headroom_fraction", 0.0, 1.0)

    def test_bounds_inclusive(self) -> None:
        """Границы диапазона включены"""
        validate_in_range(0.0, "pct", 0.0, 1.0)
        validate_in_range(1.0, "pct", 0.0, 1.0)

    def test_below_min_raises(self) -> None:
        with pytest.raises(ValueError, match=">= 0.0"):
            validate_in_range(-0.1, "pct", 0.0, 1.0)

    def test_above_max_raises(self) -> None:
        with pytest.raises(ValueError, match="<= 1.0"):
            validate_in_range(1.5, "pct", 0.0, 1.0)

    def test_open_bounds(self) -> None:
        """None означает отсутствие границы"""
        validate_in_range(1e12, "x", min_value=0.0)
        validate_in_range(-1e12, "x", max_value=0.0)
