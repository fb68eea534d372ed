"""GATE: Валидация запросов до мутации рынка

Каждый мутирующий запрос полностью проверяется до применения
(validate-then-apply, частичной валидации нет):
- Длина вектора резервов/сумм == числу токенов
- Резервы и суммы конечны и неотрицательны
- Plane constant положительный
- Сумма сделки положительна, токены существуют и различны
- Percentage в [0, 1]
- Индекс полосы в диапазоне

Gate stateless: читает рынок, но не изменяет его.
"""

from dataclasses import dataclass
from typing import Sequence

from src.core.domain.errors import (
    BandIndexOutOfRange,
    DuplicateToken,
    EmptyTokenList,
    InvalidAmount,
    InvalidLPId,
    InvalidPercentage,
    InvalidPlaneConstant,
    InvalidReserves,
    LengthMismatch,
    SameToken,
    TokenNotFound,
)
from src.core.domain.market import MarketAggregator
from src.core.math.numerical_safeguards import all_valid_floats, is_valid_float
from src.gatekeeper.requests import (
    AddBandRequest,
    AddLiquidityRequest,
    ReconfigureRequest,
    SetReservesRequest,
    TradeRequest,
    WithdrawLiquidityRequest,
)


@dataclass(frozen=True)
class ValidationResult:
    """Результат валидации запроса."""

    passed: bool
    error_code: str
    details: str


_PASS = ValidationResult(passed=True, error_code="", details="PASS")


def _block(code: str, details: str) -> ValidationResult:
    return ValidationResult(passed=False, error_code=code, details=details)


class RequestValidationGate:
    """Валидация запросов против текущего состояния рынка.

    Порядок проверок внутри каждого запроса фиксирован: структура
    (индекс, длины) → числовая корректность → доменные ограничения.
    """

    # =========================================================================
    # SHARED CHECKS
    # =========================================================================

    @staticmethod
    def _check_vector(
        values: Sequence[float], n_tokens: int, name: str
    ) -> ValidationResult:
        if len(values) != n_tokens:
            return _block(
                LengthMismatch.code,
                f"{name} length mismatch: {len(values)} != {n_tokens}",
            )
        if not all_valid_floats(values):
            return _block(InvalidReserves.code, f"{name} must be finite numbers")
        if any(v < 0.0 for v in values):
            return _block(InvalidReserves.code, f"All {name} must be non-negative")
        return _PASS

    @staticmethod
    def _check_plane(plane_constant: float) -> ValidationResult:
        if not is_valid_float(plane_constant) or plane_constant <= 0.0:
            return _block(
                InvalidPlaneConstant.code,
                f"Plane constant must be positive, got {plane_constant}",
            )
        return _PASS

    @staticmethod
    def _check_band_index(market: MarketAggregator, index: int) -> ValidationResult:
        if not 0 <= index < len(market.bands):
            return _block(
                BandIndexOutOfRange.code,
                f"Invalid tick index {index} (tick_count={len(market.bands)})",
            )
        return _PASS

    # =========================================================================
    # PER-REQUEST GATES
    # =========================================================================

    def check_trade(self, market: MarketAggregator, req: TradeRequest) -> ValidationResult:
        for token in (req.from_token, req.to_token):
            if token not in market.token_names:
                return _block(TokenNotFound.code, f"Token '{token}' not found in pool")
        if req.from_token == req.to_token:
            return _block(SameToken.code, f"Cannot swap {req.from_token} for itself")
        if not is_valid_float(req.amount) or req.amount <= 0.0:
            return _block(InvalidAmount.code, f"Swap amount must be positive, got {req.amount}")
        return _PASS

    def check_add_band(
        self, market: MarketAggregator, req: AddBandRequest
    ) -> ValidationResult:
        result = self._check_vector(req.reserves, len(market.token_names), "reserves")
        if not result.passed:
            return result
        return self._check_plane(req.plane_constant)

    def check_set_reserves(
        self, market: MarketAggregator, req: SetReservesRequest
    ) -> ValidationResult:
        result = self._check_band_index(market, req.band_index)
        if not result.passed:
            return result
        return self._check_vector(req.reserves, len(market.token_names), "reserves")

    def check_add_liquidity(
        self, market: MarketAggregator, req: AddLiquidityRequest
    ) -> ValidationResult:
        result = self._check_band_index(market, req.band_index)
        if not result.passed:
            return result
        if not req.lp_id:
            return _block(InvalidLPId.code, "lp_id must be non-empty")
        return self._check_vector(req.amounts, len(market.token_names), "amounts")

    def check_withdraw_liquidity(
        self, market: MarketAggregator, req: WithdrawLiquidityRequest
    ) -> ValidationResult:
        result = self._check_band_index(market, req.band_index)
        if not result.passed:
            return result
        if not is_valid_float(req.percentage) or not 0.0 <= req.percentage <= 1.0:
            return _block(
                InvalidPercentage.code,
                f"percentage must be in [0,1], got {req.percentage}",
            )
        return _PASS

    def check_reconfigure(self, req: ReconfigureRequest) -> ValidationResult:
        if not req.token_names:
            return _block(EmptyTokenList.code, "At least one token is required")
        if len(set(req.token_names)) != len(req.token_names):
            return _block(DuplicateToken.code, f"Token names must be unique: {req.token_names}")
        if len(req.initial_reserves) != len(req.token_names):
            return _block(LengthMismatch.code, "Token names and reserves length mismatch")
        result = self._check_vector(
            req.initial_reserves, len(req.token_names), "reserves"
        )
        if not result.passed:
            return result
        return self._check_plane(req.initial_plane)
