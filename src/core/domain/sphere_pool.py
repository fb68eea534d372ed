"""
SpherePool — единичный пул с hypersphere-инвариантом

Пул хранит n резервов на поверхности гиперсферы радиуса r:
    Σ (r − xᵢ)² = r²

Радиус решается при создании (см. sphere_math.solve_radius). Свопы сохраняют
инвариант: меняются только координаты from/to, остальные неизменны.

ФОРМУЛА СВОПА:
    A = r − x_from,  B = r − x_to  (до свопа), Δx = amount_in
    (A − Δx)² + (B + Δy)² = A² + B²
    ⇒ Δy² + 2B·Δy + (Δx² − 2A·Δx) = 0
    disc = B² − (Δx² − 2A·Δx)
    Δy = −B + √disc

Пул не потокобезопасен: вызывающая сторона обеспечивает эксклюзивный доступ
на время мутации.
"""

import math
from typing import Sequence

from src.core.domain.errors import (
    ComplexSolution,
    DivisionByZero,
    DuplicateToken,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidReserves,
    InvariantViolation,
    LengthMismatch,
    SameToken,
    TokenNotFound,
)
from src.core.math.numerical_safeguards import (
    EPS_CALC,
    EPS_INVARIANT,
    EPS_INVARIANT_REL,
    is_close,
    is_valid_float,
)
from src.core.math.sphere_math import (
    equal_price_point,
    solve_radius,
    sphere_invariant,
)


class SpherePool:
    """
    Hypersphere AMM пул.

    Attributes:
        radius: Радиус гиперсферы r
        reserves: Резервы, индекс совпадает с token_names
        token_names: Уникальные идентификаторы токенов
    """

    def __init__(self, token_names: Sequence[str], reserves: Sequence[float]):
        """
        Args:
            token_names: Имена токенов (уникальные)
            reserves: Начальные резервы, той же длины

        Raises:
            LengthMismatch: len(token_names) != len(reserves)
            DuplicateToken: имена токенов не уникальны
            InvalidReserves: для вектора резервов не существует вещественного радиуса
        """
        if len(token_names) != len(reserves):
            raise LengthMismatch(
                f"token_names and reserves length mismatch: "
                f"{len(token_names)} != {len(reserves)}"
            )
        if len(set(token_names)) != len(token_names):
            raise DuplicateToken(f"token names must be unique: {list(token_names)}")

        self.token_names: list[str] = list(token_names)
        self.reserves: list[float] = [float(x) for x in reserves]
        self.radius: float = self._solve(self.reserves)

        self._assert_invariant("construction")

    @classmethod
    def from_state(
        cls,
        token_names: Sequence[str],
        reserves: Sequence[float],
        radius: float,
    ) -> "SpherePool":
        """
        Восстановление пула из снапшота без пересчёта радиуса.

        Радиус берётся как есть, чтобы round-trip сохранял float бит-в-бит.
        """
        if len(token_names) != len(reserves):
            raise LengthMismatch(
                f"token_names and reserves length mismatch: "
                f"{len(token_names)} != {len(reserves)}"
            )
        pool = cls.__new__(cls)
        pool.token_names = list(token_names)
        pool.reserves = list(reserves)
        pool.radius = radius
        return pool

    # =========================================================================
    # RADIUS
    # =========================================================================

    @staticmethod
    def _solve(reserves: Sequence[float]) -> float:
        try:
            return solve_radius(reserves)
        except ValueError as e:
            raise InvalidReserves(str(e)) from e

    def resolve_radius(self) -> float:
        """Пересчёт радиуса по текущим резервам (после депозита/вывода/overwrite)."""
        self.radius = self._solve(self.reserves)
        return self.radius

    def set_reserves(self, reserves: Sequence[float]) -> None:
        """
        Прямая перезапись резервов с пересчётом радиуса.

        Радиус решается до присвоения: при ошибке пул не изменяется.

        Raises:
            LengthMismatch: длина не совпадает с числом токенов
            InvalidReserves: вещественного радиуса не существует
        """
        if len(reserves) != len(self.reserves):
            raise LengthMismatch(
                f"reserves length {len(reserves)} != token count {len(self.reserves)}"
            )
        new_reserves = [float(x) for x in reserves]
        new_radius = self._solve(new_reserves)
        self.reserves = new_reserves
        self.radius = new_radius

    # =========================================================================
    # INVARIANT
    # =========================================================================

    def invariant_residual(self) -> float:
        """Невязка Σ (r − xᵢ)² − r²."""
        return sphere_invariant(self.reserves, self.radius)

    def check_invariant(self) -> bool:
        """Проверка инварианта в пределах EPS_INVARIANT (без side effects)."""
        return abs(self.invariant_residual()) < EPS_INVARIANT

    def _assert_invariant(self, context: str) -> None:
        # n = 1: радиус задан вырожденным правилом и инвариант не выполняется.
        if len(self.reserves) < 2:
            return
        r_sq = self.radius * self.radius
        residual = self.invariant_residual()
        if not is_close(
            residual + r_sq, r_sq, rel_tol=EPS_INVARIANT_REL, abs_tol=EPS_INVARIANT
        ):
            raise InvariantViolation(
                f"Invariant broken after {context}: residual={residual!r}, "
                f"radius={self.radius!r}, reserves={self.reserves!r}"
            )

    # =========================================================================
    # PRICES & SWAPS
    # =========================================================================

    def index_of(self, token: str) -> int:
        """
        Индекс токена по имени.

        Raises:
            TokenNotFound: токен отсутствует в пуле
        """
        try:
            return self.token_names.index(token)
        except ValueError:
            raise TokenNotFound(token) from None

    def get_spot_price(self, from_token: str, to_token: str) -> float:
        """
        Spot price to_token в единицах from_token: (r − x_to) / (r − x_from).

        Raises:
            TokenNotFound: любой из токенов отсутствует
            DivisionByZero: |r − x_from| < EPS_CALC
        """
        i = self.index_of(from_token)
        j = self.index_of(to_token)

        denom = self.radius - self.reserves[i]
        if abs(denom) < EPS_CALC:
            raise DivisionByZero("Division by zero: from-token is at radius")

        return (self.radius - self.reserves[j]) / denom

    def quote_swap(self, from_token: str, to_token: str, amount_in: float) -> float:
        """
        Расчёт выхода свопа без изменения состояния.

        Raises:
            InvalidAmount: amount_in <= 0 или NaN/Inf
            TokenNotFound: любой из токенов отсутствует
            SameToken: from_token == to_token
            ComplexSolution: disc < 0 (вход слишком велик относительно резервов)
            InsufficientLiquidity: output <= 0, output > x_to или output не конечен
        """
        if not is_valid_float(amount_in) or amount_in <= 0.0:
            raise InvalidAmount(f"Swap amount must be a positive finite number, got {amount_in}")

        i = self.index_of(from_token)
        j = self.index_of(to_token)
        if i == j:
            raise SameToken(f"Cannot swap {from_token} for itself")

        r = self.radius
        x_to = self.reserves[j]
        a_dist = r - self.reserves[i]
        b_dist = r - x_to

        c = amount_in * amount_in - 2.0 * a_dist * amount_in
        disc = b_dist * b_dist - c
        if disc < 0.0:
            raise ComplexSolution(
                "Swap leads to complex solution: input amount too large"
            )

        output = -b_dist + math.sqrt(disc)
        if not is_valid_float(output) or output <= 0.0 or output > x_to:
            raise InsufficientLiquidity("Insufficient liquidity for the requested swap")

        return output

    def swap(self, from_token: str, to_token: str, amount_in: float) -> float:
        """
        Исполнение свопа from_token → to_token с сохранением инварианта.

        Args:
            from_token: Токен, который вносится в пул
            to_token: Токен, который выводится из пула
            amount_in: Сумма входа (> 0)

        Returns:
            Сумма выхода Δy, 0 < Δy <= x_to (до свопа)

        Raises:
            См. quote_swap. При ошибке состояние не изменяется.
            InvariantViolation: инвариант нарушен после свопа (ошибка программирования)
        """
        output = self.quote_swap(from_token, to_token, amount_in)

        i = self.index_of(from_token)
        j = self.index_of(to_token)
        self.reserves[i] += amount_in
        self.reserves[j] -= output

        self._assert_invariant("swap")
        return output

    # =========================================================================
    # HELPERS
    # =========================================================================

    @property
    def n_tokens(self) -> int:
        return len(self.token_names)

    def equal_price_point(self) -> float:
        """Координата точки равных цен для текущего радиуса."""
        return equal_price_point(self.radius, self.n_tokens)

    def __repr__(self) -> str:
        return (
            f"SpherePool(radius={self.radius!r}, "
            f"reserves={self.reserves!r}, token_names={self.token_names!r})"
        )


def new_pool(token_names: Sequence[str], reserves: Sequence[float]) -> SpherePool:
    """Конструктор пула для внешних слоёв."""
    return SpherePool(token_names, reserves)
