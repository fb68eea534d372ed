"""
Sphere Math — закрытые формулы hypersphere-инварианта

Инвариант пула из n токенов с радиусом r:
    Σ (r − xᵢ)² = r²

ФОРМУЛЫ:
    Радиус (раскрытие инварианта по r):
        (n − 1)·r² − 2·Σxᵢ·r + Σxᵢ² = 0
        a = n − 1,  b = −2·Σxᵢ,  c = Σxᵢ²
    Вырожденный случай n = 1 (|a| < EPS_CALC): r = Σxᵢ
        (упрощение, не выводится из общего уравнения; сохраняется буквально)

    Разложение резервов по направлению v = (1, 1, …, 1)/√n:
        parallel_magnitude = Σxᵢ / √n
        orthogonal = x − (parallel_magnitude / √n)·(1, …, 1)

    Точка равных цен:
        q = r·(1 − 1/√n)
"""

import math
from typing import Sequence

from src.core.math.numerical_safeguards import EPS_CALC, clamp_tiny_negative


def solve_radius(reserves: Sequence[float]) -> float:
    """
    Решение квадратного уравнения радиуса для вектора резервов.

    Args:
        reserves: Резервы [x₁, …, xₙ]

    Returns:
        Радиус r. Пустой вектор → 0.0.
        Выбирается корень r1 = (−b + √disc)/2a, если он положительный, иначе r2.

    Raises:
        ValueError: disc < 0 после clamp (резервы слишком несбалансированы
            для n >= 3, вещественного радиуса нет)
    """
    if not reserves:
        return 0.0

    n = len(reserves)
    sum_x = sum(reserves)
    sum_x2 = sum(x * x for x in reserves)

    a = n - 1.0
    if abs(a) < EPS_CALC:
        return sum_x

    b = -2.0 * sum_x
    c = sum_x2

    disc = clamp_tiny_negative(b * b - 4.0 * a * c)
    if disc < 0.0 or not math.isfinite(disc):
        raise ValueError(
            f"reserve vector admits no real radius (discriminant={disc!r})"
        )
    sqrt_disc = math.sqrt(disc)

    r1 = (-b + sqrt_disc) / (2.0 * a)
    r2 = (-b - sqrt_disc) / (2.0 * a)
    if r1 > 0.0:
        return r1
    return r2


def sphere_invariant(reserves: Sequence[float], radius: float) -> float:
    """
    Невязка инварианта Σ (r − xᵢ)² − r² (равна 0 при выполнении инварианта).
    """
    lhs = sum((radius - x) ** 2 for x in reserves)
    return lhs - radius * radius


def decompose_reserves(reserves: Sequence[float]) -> tuple[float, list[float]]:
    """
    Разложение резервов на компоненты вдоль (1, …, 1)/√n и ортогональную.

    Returns:
        (parallel_magnitude, orthogonal_component)
        Пустой вектор → (0.0, []).
    """
    n = len(reserves)
    if n == 0:
        return 0.0, []

    norm_factor = math.sqrt(n)
    parallel_mag = sum(reserves) / norm_factor
    per_coord = parallel_mag / norm_factor
    orthogonal = [x - per_coord for x in reserves]
    return parallel_mag, orthogonal


def equal_price_point(radius: float, n_tokens: int) -> float:
    """Координата точки равных цен q = r·(1 − 1/√n); для n = 0 → 0.0."""
    if n_tokens <= 0:
        return 0.0
    return radius * (1.0 - 1.0 / math.sqrt(n_tokens))
