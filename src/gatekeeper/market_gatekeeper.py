"""MarketGatekeeper — граница между внешними слоями и ядром рынка

Порядок обработки мутирующего запроса:
1. Захват GuardedMarket.mutate() на всю операцию
2. RequestValidationGate → блокировка с кодом ошибки (состояние не тронуто)
3. Применение операции ядра; MarketError → GateResult с кодом
4. Сохранение снапшота (если настроен SnapshotStore) после успешной мутации

route_trade сохраняет снапшот и при неудаче: частично исполненные полосы
остаются изменёнными (weak atomicity) и должны быть персистированы.

InvariantViolation не перехватывается: это ошибка программирования.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from src.core.domain.errors import MarketError
from src.core.domain.market import MarketAggregator, MarketDefaults
from src.core.domain.snapshot import MarketStateView, PriceQuote
from src.gatekeeper.gates.request_validation import (
    RequestValidationGate,
    ValidationResult,
)
from src.gatekeeper.guard import GuardedMarket
from src.gatekeeper.requests import (
    AddBandRequest,
    AddLiquidityRequest,
    ReconfigureRequest,
    SetReservesRequest,
    TradeRequest,
    WithdrawLiquidityRequest,
)
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class GateResult:
    """Результат операции на границе."""

    success: bool
    error_code: str
    details: str

    # Payload (заполняется в зависимости от операции)
    output: Optional[float] = None
    withdrawn: Optional[tuple[float, ...]] = None
    band_index: Optional[int] = None


def _blocked(validation: ValidationResult) -> GateResult:
    return GateResult(
        success=False, error_code=validation.error_code, details=validation.details
    )


def _failed(error: MarketError) -> GateResult:
    return GateResult(success=False, error_code=error.code, details=error.message)


class MarketGatekeeper:
    """Validate-then-apply фасад над GuardedMarket."""

    def __init__(
        self,
        guarded: GuardedMarket,
        store: SnapshotStore | None = None,
        defaults: MarketDefaults | None = None,
        gate: RequestValidationGate | None = None,
    ):
        self.guarded = guarded
        self.store = store
        self.defaults = defaults or MarketDefaults()
        self.gate = gate or RequestValidationGate()

    @classmethod
    def open(
        cls,
        store: SnapshotStore,
        defaults: MarketDefaults | None = None,
    ) -> "MarketGatekeeper":
        """
        Загрузка рынка из хранилища; пустой рынок получает полосу по умолчанию.
        """
        defaults = defaults or MarketDefaults()
        market = store.load(defaults.token_names)
        if not market.bands:
            market.add_band(
                defaults.plane_constant, defaults.reserves_for(len(market.token_names))
            )
            store.save(market)
            logger.info(
                "Initialized with tick: plane=%s, reserves=%s",
                defaults.plane_constant,
                market.bands[0].pool.reserves,
            )
        return cls(GuardedMarket(market), store=store, defaults=defaults)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _persist(self, market: MarketAggregator) -> None:
        if self.store is not None:
            self.store.save(market)

    def _apply(
        self,
        name: str,
        validate: Callable[[MarketAggregator], ValidationResult],
        apply: Callable[[MarketAggregator], GateResult],
        persist_on_failure: bool = False,
    ) -> GateResult:
        with self.guarded.mutate() as market:
            validation = validate(market)
            if not validation.passed:
                logger.debug("%s rejected: %s (%s)", name, validation.error_code, validation.details)
                return _blocked(validation)
            try:
                result = apply(market)
            except MarketError as e:
                logger.warning("%s failed: %s", name, e)
                if persist_on_failure:
                    self._persist(market)
                return _failed(e)
            self._persist(market)
            return result

    # =========================================================================
    # MUTATORS
    # =========================================================================

    def route_trade(self, req: TradeRequest) -> GateResult:
        def apply(market: MarketAggregator) -> GateResult:
            output = market.route_trade(req.from_token, req.to_token, req.amount)
            return GateResult(
                success=True,
                error_code="",
                details=f"Swapped {req.amount} {req.from_token} for {output} {req.to_token}",
                output=output,
            )

        return self._apply(
            "route_trade",
            lambda m: self.gate.check_trade(m, req),
            apply,
            persist_on_failure=True,
        )

    def add_band(self, req: AddBandRequest) -> GateResult:
        def apply(market: MarketAggregator) -> GateResult:
            index = market.add_band(req.plane_constant, req.reserves)
            return GateResult(
                success=True,
                error_code="",
                details=f"Added tick with plane constant {req.plane_constant}",
                band_index=index,
            )

        return self._apply("add_band", lambda m: self.gate.check_add_band(m, req), apply)

    def set_reserves(self, req: SetReservesRequest) -> GateResult:
        def apply(market: MarketAggregator) -> GateResult:
            market.set_band_reserves(req.band_index, req.reserves)
            return GateResult(
                success=True,
                error_code="",
                details=f"Set reserves for tick {req.band_index}",
                band_index=req.band_index,
            )

        return self._apply(
            "set_reserves", lambda m: self.gate.check_set_reserves(m, req), apply
        )

    def add_liquidity(self, req: AddLiquidityRequest) -> GateResult:
        def apply(market: MarketAggregator) -> GateResult:
            shares = market.add_liquidity(req.band_index, req.lp_id, req.amounts)
            return GateResult(
                success=True,
                error_code="",
                details=f"Added liquidity for LP {req.lp_id}",
                output=shares,
                band_index=req.band_index,
            )

        return self._apply(
            "add_liquidity", lambda m: self.gate.check_add_liquidity(m, req), apply
        )

    def withdraw_liquidity(self, req: WithdrawLiquidityRequest) -> GateResult:
        def apply(market: MarketAggregator) -> GateResult:
            withdrawn = market.withdraw_liquidity(req.band_index, req.lp_id, req.percentage)
            return GateResult(
                success=True,
                error_code="",
                details=f"Removed liquidity for LP {req.lp_id}",
                withdrawn=tuple(withdrawn),
                band_index=req.band_index,
            )

        return self._apply(
            "withdraw_liquidity",
            lambda m: self.gate.check_withdraw_liquidity(m, req),
            apply,
        )

    def reset(self) -> GateResult:
        def apply(market: MarketAggregator) -> GateResult:
            market.reset(self.defaults)
            return GateResult(
                success=True, error_code="", details="AMM state reset with default tick"
            )

        return self._apply("reset", lambda m: ValidationResult(True, "", "PASS"), apply)

    def reconfigure(self, req: ReconfigureRequest) -> GateResult:
        def apply(market: MarketAggregator) -> GateResult:
            market.reconfigure(req.token_names, req.initial_reserves, req.initial_plane)
            return GateResult(
                success=True,
                error_code="",
                details=f"AMM reconfigured with tokens: {req.token_names}",
            )

        return self._apply(
            "reconfigure", lambda m: self.gate.check_reconfigure(req), apply
        )

    # =========================================================================
    # READERS
    # =========================================================================

    def _read(self, fn: Callable[[MarketAggregator], T]) -> T:
        with self.guarded.read() as market:
            return fn(market)

    def get_state(self) -> MarketStateView:
        return self._read(lambda m: m.get_state())

    def get_prices(self) -> list[PriceQuote]:
        return self._read(lambda m: m.get_all_prices())

    def get_price(self, from_token: str, to_token: str) -> GateResult:
        def read(market: MarketAggregator) -> GateResult:
            try:
                price = market.get_aggregated_price(from_token, to_token)
            except MarketError as e:
                return _failed(e)
            return GateResult(
                success=True,
                error_code="",
                details=f"Price of {to_token} in {from_token}",
                output=price,
            )

        return self._read(read)
