"""
Тесты для модуля Sphere Math

Проверяет:
1. Решение радиуса (общий случай, n = 1, отсутствие вещественного корня)
2. Невязку инварианта
3. Разложение резервов на parallel/orthogonal
4. Точку равных цен
"""

import math

import pytest

from src.core.math.sphere_math import (
    decompose_reserves,
    equal_price_point,
    solve_radius,
    sphere_invariant,
)


class TestSolveRadius:
    """Тесты для solve_radius"""

    def test_two_equal_reserves(self) -> None:
        """[100, 100] → r = (2 + √2)·100"""
        r = solve_radius([100.0, 100.0])
        assert r == pytest.approx((2.0 + math.sqrt(2.0)) * 100.0, rel=1e-12)

    def test_three_equal_reserves(self) -> None:
        """[x, x, x] → r = x·(3 + √3)/2"""
        r = solve_radius([1000.0, 1000.0, 1000.0])
        assert r == pytest.approx(1000.0 * (3.0 + math.sqrt(3.0)) / 2.0, rel=1e-12)

    def test_radius_satisfies_invariant(self) -> None:
        """Найденный радиус удовлетворяет Σ(r − xᵢ)² = r²"""
        for reserves in ([100.0, 100.0], [50.0, 150.0], [10.0, 20.0, 30.0, 40.0]):
            r = solve_radius(reserves)
            assert abs(sphere_invariant(reserves, r)) < 1e-6

    def test_larger_root_chosen(self) -> None:
        """Выбирается корень r1 (больший), он лежит выше всех резервов"""
        reserves = [50.0, 150.0]
        r = solve_radius(reserves)
        assert r > max(reserves)

    def test_single_token_degenerate_rule(self) -> None:
        """n = 1: r = Σx (инвариант при этом не выполняется)"""
        r = solve_radius([100.0])
        assert r == 100.0
        assert sphere_invariant([100.0], r) != 0.0

    def test_empty_reserves(self) -> None:
        assert solve_radius([]) == 0.0

    def test_zero_reserves(self) -> None:
        """Нулевые резервы → нулевой радиус"""
        assert solve_radius([0.0, 0.0]) == 0.0

    def test_zero_discriminant_two_tokens(self) -> None:
        """[100, 0]: disc = 0, r = 100"""
        assert solve_radius([100.0, 0.0]) == pytest.approx(100.0)

    def test_no_real_radius_raises(self) -> None:
        """[100, 0, 0]: disc < 0, вещественного радиуса нет"""
        with pytest.raises(ValueError, match="no real radius"):
            solve_radius([100.0, 0.0, 0.0])


class TestSphereInvariant:
    def test_exact_point_on_sphere(self) -> None:
        """[r, 0] при r: (0)² + (r)² − r² = 0"""
        assert sphere_invariant([10.0, 0.0], 10.0) == 0.0

    def test_residual_sign(self) -> None:
        """Невязка положительна вне сферы и отрицательна внутри"""
        assert sphere_invariant([0.0, 0.0], 10.0) > 0.0
        assert sphere_invariant([10.0, 10.0], 10.0) < 0.0


class TestDecomposeReserves:
    """Тесты для decompose_reserves"""

    def test_balanced_reserves_have_no_orthogonal_part(self) -> None:
        parallel, orthogonal = decompose_reserves([100.0, 100.0, 100.0])
        assert parallel == pytest.approx(300.0 / math.sqrt(3.0))
        assert orthogonal == pytest.approx([0.0, 0.0, 0.0], abs=1e-9)

    def test_orthogonal_component_sums_to_zero(self) -> None:
        """Ортогональная компонента перпендикулярна (1, …, 1)"""
        _, orthogonal = decompose_reserves([10.0, 50.0, 90.0])
        assert sum(orthogonal) == pytest.approx(0.0, abs=1e-9)
        assert orthogonal == pytest.approx([-40.0, 0.0, 40.0])

    def test_parallel_magnitude_formula(self) -> None:
        parallel, _ = decompose_reserves([100.0, 100.0])
        assert parallel == 200.0 / math.sqrt(2.0)

    def test_empty(self) -> None:
        assert decompose_reserves([]) == (0.0, [])


class TestEqualPricePoint:
    def test_two_tokens(self) -> None:
        """q = r·(1 − 1/√2)"""
        r = (2.0 + math.sqrt(2.0)) * 100.0
        assert equal_price_point(r, 2) == pytest.approx(r * (1.0 - 1.0 / math.sqrt(2.0)))

    def test_equal_price_point_lies_on_sphere(self) -> None:
        """Точка (q, …, q) лежит на сфере радиуса r"""
        r = 500.0
        for n in (2, 3, 5):
            q = equal_price_point(r, n)
            assert abs(sphere_invariant([q] * n, r)) < 1e-6

    def test_zero_tokens(self) -> None:
        assert equal_price_point(100.0, 0) == 0.0
