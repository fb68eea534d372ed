"""
LiquidityBand — полоса ликвидности ("tick") поверх SpherePool

Полоса владеет одним пулом, plane constant c и упрощённым LP-учётом.

КЛАССИФИКАЦИЯ (вычисляется по требованию, не хранится):
    parallel = Σxᵢ / √n
    interior:  parallel > c + EPS_INVARIANT
    boundary:  |parallel − c| < EPS_INVARIANT
    exterior:  иначе

LP SHARES:
    Доли — сырая сумма внесённых количеств токенов, а не доля стоимости пула.
    Это упрощение зависит от масштаба и может перераспределять стоимость между
    депозитами, сделанными при разных уровнях резервов. Поведение сохраняется
    намеренно; см. tests/unit/test_liquidity_band.py.
"""

from enum import Enum
from typing import Sequence

from src.core.domain.errors import (
    InvalidPercentage,
    LengthMismatch,
    LPNotFound,
    ZeroShares,
)
from src.core.domain.sphere_pool import SpherePool
from src.core.math.numerical_safeguards import (
    EPS_INVARIANT,
    EPS_PERCENTAGE,
    is_zero,
)
from src.core.math.sphere_math import decompose_reserves


class BandRegime(str, Enum):
    """Положение полосы относительно её плоскости."""

    INTERIOR = "interior"
    BOUNDARY = "boundary"
    EXTERIOR = "exterior"


class LiquidityBand:
    """
    Полоса ликвидности.

    Attributes:
        pool: Пул (эксклюзивное владение)
        plane_constant: Порог parallel magnitude для классификации
        lp_shares: LP id → shares (неотрицательные)
    """

    def __init__(
        self,
        token_names: Sequence[str],
        reserves: Sequence[float],
        plane_constant: float,
    ):
        self.pool = SpherePool(token_names, reserves)
        self.plane_constant = float(plane_constant)
        self.lp_shares: dict[str, float] = {}

    @classmethod
    def from_pool(
        cls,
        pool: SpherePool,
        plane_constant: float,
        lp_shares: dict[str, float] | None = None,
    ) -> "LiquidityBand":
        """Сборка полосы из готового пула (восстановление снапшота)."""
        band = cls.__new__(cls)
        band.pool = pool
        band.plane_constant = plane_constant
        band.lp_shares = dict(lp_shares or {})
        return band

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    def parallel_magnitude(self) -> float:
        """Проекция резервов на направление (1, …, 1)/√n."""
        magnitude, _ = decompose_reserves(self.pool.reserves)
        return magnitude

    def orthogonal_component(self) -> list[float]:
        _, orthogonal = decompose_reserves(self.pool.reserves)
        return orthogonal

    def is_interior(self) -> bool:
        return self.parallel_magnitude() > self.plane_constant + EPS_INVARIANT

    def is_boundary(self) -> bool:
        return abs(self.parallel_magnitude() - self.plane_constant) < EPS_INVARIANT

    def regime(self) -> BandRegime:
        if self.is_interior():
            return BandRegime.INTERIOR
        if self.is_boundary():
            return BandRegime.BOUNDARY
        return BandRegime.EXTERIOR

    # =========================================================================
    # LP OPERATIONS
    # =========================================================================

    def add_liquidity(self, lp_id: str, amounts: Sequence[float]) -> float:
        """
        Депозит LP: резервы растут поэлементно, радиус решается заново.

        Депозит меняет саму сферу (это не invariant-preserving сделка).
        Отрицательные суммы на этом уровне не отклоняются (проверка на границе).

        Args:
            lp_id: Идентификатор LP
            amounts: Суммы по токенам, длина n

        Returns:
            Начисленные shares (Σamounts)

        Raises:
            LengthMismatch: len(amounts) != n
            InvalidReserves: новые резервы не допускают вещественного радиуса
        """
        reserves = self.pool.reserves
        if len(amounts) != len(reserves):
            raise LengthMismatch(
                f"Amounts length mismatch: {len(amounts)} != {len(reserves)}"
            )

        new_reserves = [r + a for r, a in zip(reserves, amounts)]
        self.pool.set_reserves(new_reserves)

        share_delta = sum(amounts)
        self.lp_shares[lp_id] = self.lp_shares.get(lp_id, 0.0) + share_delta
        return share_delta

    def withdraw_liquidity(self, lp_id: str, percentage: float) -> list[float]:
        """
        Вывод доли percentage ∈ [0, 1] позиции LP.

        ratio = (shares[lp] · percentage) / Σshares
        withdrawn[i] = reserves[i] · ratio

        При percentage ≈ 1 (EPS_PERCENTAGE) запись LP удаляется целиком.

        Returns:
            Выведенные суммы по токенам

        Raises:
            InvalidPercentage: percentage вне [0, 1]
            LPNotFound: LP отсутствует
            ZeroShares: shares LP равны 0 (в пределах EPS_FLOAT_COMPARE_ABS)
        """
        if not 0.0 <= percentage <= 1.0:
            raise InvalidPercentage(f"percentage must be in [0,1], got {percentage}")

        if lp_id not in self.lp_shares:
            raise LPNotFound(lp_id)
        user_shares = self.lp_shares[lp_id]
        if is_zero(user_shares):
            raise ZeroShares(lp_id)

        total_shares = sum(self.lp_shares.values())
        if total_shares <= 0.0:
            raise ZeroShares(lp_id)
        shares_to_remove = user_shares * percentage
        ratio = shares_to_remove / total_shares

        withdrawn = [r * ratio for r in self.pool.reserves]
        self.pool.set_reserves([r - w for r, w in zip(self.pool.reserves, withdrawn)])

        if percentage >= 1.0 - EPS_PERCENTAGE:
            del self.lp_shares[lp_id]
        else:
            self.lp_shares[lp_id] -= shares_to_remove

        return withdrawn

    def total_shares(self) -> float:
        return sum(self.lp_shares.values())

    def liquidity(self) -> float:
        """Грубый прокси размера полосы: сумма резервов."""
        return sum(self.pool.reserves)

    def __repr__(self) -> str:
        return (
            f"LiquidityBand(plane_constant={self.plane_constant!r}, "
            f"pool={self.pool!r}, lp_shares={self.lp_shares!r})"
        )
