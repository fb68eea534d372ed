"""
MarketAggregator — рынок из нескольких полос ликвидности

Агрегатор владеет упорядоченным списком LiquidityBand с общим списком токенов,
поддерживает global_reserves (проекция: Σ резервов по полосам), классифицирует
полосы, маршрутизирует сделки и считает взвешенную по ликвидности цену.

МАРШРУТИЗАЦИЯ (детерминированный greedy):
1. Индексы полос сортируются по plane_constant по возрастанию
   (стабильная сортировка: при равенстве порядок вставки).
2. Для каждой полосы, пока amount > 0:
   available = reserves[from]; пропуск если available <= min_available
   trade_in = min(amount, available · headroom_fraction)
3. swap(from, to, trade_in) в пуле полосы; amount −= trade_in.
4. global_reserves пересчитываются; остаток > remainder_tolerance →
   InsufficientLiquidity.

WEAK ATOMICITY: route_trade НЕ атомарен. Полосы, успешно исполнившие свопы до
точки отказа, остаются изменёнными. Вызывающая сторона, которой нужна
атомарность, делает snapshot/restore вокруг вызова сама.

Агрегатор не потокобезопасен: мутации сериализуются снаружи
(см. src.gatekeeper.guard.GuardedMarket).
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from src.core.domain.errors import (
    BandIndexOutOfRange,
    DuplicateToken,
    EmptyTokenList,
    InsufficientLiquidity,
    InvalidAmount,
    LengthMismatch,
    MarketError,
    NoLiquidityForPrice,
    TokenNotFound,
)
from src.core.domain.liquidity_band import LiquidityBand
from src.core.domain.snapshot import (
    BandRecord,
    BandView,
    MarketSnapshot,
    MarketStateView,
    PoolRecord,
    PriceQuote,
)
from src.core.domain.sphere_pool import SpherePool
from src.core.math.numerical_safeguards import (
    EPS_CALC,
    EPS_ROUTE_REMAINDER,
    is_valid_float,
    validate_in_range,
    validate_non_negative,
    validate_positive,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass(frozen=True)
class RoutingConfig:
    """
    Параметры greedy-маршрутизации.

    - headroom_fraction: доля резерва from-токена, доступная одной полосе за hop
    - min_available: полосы с резервом <= порога пропускаются
    - remainder_tolerance: допустимый неисполненный остаток
    """

    headroom_fraction: float = 0.9
    min_available: float = EPS_CALC
    remainder_tolerance: float = EPS_ROUTE_REMAINDER

    def __post_init__(self) -> None:
        validate_in_range(self.headroom_fraction, "headroom_fraction", 0.0, 1.0)
        validate_positive(self.headroom_fraction, "headroom_fraction")
        validate_non_negative(self.min_available, "min_available")
        validate_non_negative(self.remainder_tolerance, "remainder_tolerance")


@dataclass(frozen=True)
class MarketDefaults:
    """Полоса по умолчанию для bootstrap и reset."""

    token_names: tuple[str, ...] = ("USDC", "USDT", "DAI")
    reserve_per_token: float = 1000.0
    plane_constant: float = 600.0

    def __post_init__(self) -> None:
        validate_non_negative(self.reserve_per_token, "reserve_per_token")
        validate_positive(self.plane_constant, "plane_constant")

    def reserves_for(self, n_tokens: int) -> list[float]:
        return [self.reserve_per_token] * n_tokens


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class BandClassification:
    """Индексы interior и boundary полос (exterior не входит ни в один)."""

    interior: tuple[int, ...]
    boundary: tuple[int, ...]


@dataclass(frozen=True)
class RouteFill:
    """Исполнение маршрута в одной полосе."""

    band_index: int
    amount_in: float
    amount_out: float


@dataclass(frozen=True)
class RouteResult:
    """Результат маршрутизированной сделки."""

    from_token: str
    to_token: str
    amount_requested: float
    total_output: float
    fills: tuple[RouteFill, ...] = field(default_factory=tuple)

    @property
    def amount_filled(self) -> float:
        return sum(f.amount_in for f in self.fills)


# =============================================================================
# AGGREGATOR
# =============================================================================


class MarketAggregator:
    """
    Multi-band рынок.

    Attributes:
        token_names: Общий список токенов (каждый пул совпадает по длине и порядку)
        bands: Полосы в порядке вставки
        global_reserves: Σ резервов по полосам для каждого токена
    """

    def __init__(
        self,
        token_names: Sequence[str],
        routing_config: RoutingConfig | None = None,
    ):
        """
        Raises:
            EmptyTokenList: пустой список токенов
            DuplicateToken: имена не уникальны
        """
        if not token_names:
            raise EmptyTokenList("At least one token is required")
        if len(set(token_names)) != len(token_names):
            raise DuplicateToken(f"token names must be unique: {list(token_names)}")

        self.token_names: list[str] = list(token_names)
        self.bands: list[LiquidityBand] = []
        self.global_reserves: list[float] = [0.0] * len(self.token_names)
        self.routing_config = routing_config or RoutingConfig()

    # =========================================================================
    # STRUCTURE
    # =========================================================================

    def recompute_global_reserves(self) -> None:
        totals = [0.0] * len(self.token_names)
        for band in self.bands:
            for k, reserve in enumerate(band.pool.reserves):
                totals[k] += reserve
        self.global_reserves = totals

    def add_band(self, plane_constant: float, reserves: Sequence[float]) -> int:
        """
        Добавление полосы.

        Returns:
            Индекс новой полосы

        Raises:
            LengthMismatch: len(reserves) != len(token_names)
            InvalidReserves: для резервов нет вещественного радиуса
        """
        if len(reserves) != len(self.token_names):
            raise LengthMismatch(
                f"Reserve length mismatch: {len(reserves)} != {len(self.token_names)}"
            )
        band = LiquidityBand(self.token_names, reserves, plane_constant)
        self.bands.append(band)
        self.recompute_global_reserves()

        index = len(self.bands) - 1
        logger.info(
            "Added band %d: plane_constant=%s, reserves=%s, radius=%s",
            index,
            plane_constant,
            band.pool.reserves,
            band.pool.radius,
        )
        return index

    def band(self, index: int) -> LiquidityBand:
        """
        Raises:
            BandIndexOutOfRange: индекс вне [0, len(bands))
        """
        if not 0 <= index < len(self.bands):
            raise BandIndexOutOfRange(index, len(self.bands))
        return self.bands[index]

    def set_band_reserves(self, index: int, reserves: Sequence[float]) -> None:
        """Административная перезапись резервов полосы с пересчётом радиуса."""
        band = self.band(index)
        band.pool.set_reserves(reserves)
        self.recompute_global_reserves()
        logger.info(
            "Set reserves for band %d: reserves=%s, radius=%s",
            index,
            band.pool.reserves,
            band.pool.radius,
        )

    def reset(self, defaults: MarketDefaults | None = None) -> None:
        """Замена всех полос одной полосой по умолчанию (токены сохраняются)."""
        defaults = defaults or MarketDefaults()
        band = LiquidityBand(
            self.token_names,
            defaults.reserves_for(len(self.token_names)),
            defaults.plane_constant,
        )
        self.bands = [band]
        self.recompute_global_reserves()
        logger.info("Market reset with default band (plane_constant=%s)", band.plane_constant)

    def reconfigure(
        self,
        token_names: Sequence[str],
        reserves: Sequence[float],
        plane_constant: float,
    ) -> None:
        """
        Полная замена конфигурации: новый список токенов и одна начальная полоса.

        Новое состояние собирается целиком до присвоения.
        """
        fresh = MarketAggregator(token_names, self.routing_config)
        fresh.add_band(plane_constant, reserves)

        self.token_names = fresh.token_names
        self.bands = fresh.bands
        self.global_reserves = fresh.global_reserves
        logger.info("Market reconfigured with tokens %s", self.token_names)

    # =========================================================================
    # LIQUIDITY
    # =========================================================================

    def add_liquidity(self, index: int, lp_id: str, amounts: Sequence[float]) -> float:
        """Депозит LP в полосу index. Возвращает начисленные shares."""
        band = self.band(index)
        shares = band.add_liquidity(lp_id, amounts)
        self.recompute_global_reserves()
        logger.info("LP %s added %s to band %d (shares +%s)", lp_id, list(amounts), index, shares)
        return shares

    def withdraw_liquidity(self, index: int, lp_id: str, percentage: float) -> list[float]:
        """Вывод доли позиции LP из полосы index. Возвращает выведенные суммы."""
        band = self.band(index)
        withdrawn = band.withdraw_liquidity(lp_id, percentage)
        self.recompute_global_reserves()
        logger.info(
            "LP %s withdrew %s of position from band %d: %s",
            lp_id,
            percentage,
            index,
            withdrawn,
        )
        return withdrawn

    # =========================================================================
    # CLASSIFICATION & ROUTING
    # =========================================================================

    def classify_bands(self) -> BandClassification:
        interior: list[int] = []
        boundary: list[int] = []
        for idx, band in enumerate(self.bands):
            if band.is_interior():
                interior.append(idx)
            elif band.is_boundary():
                boundary.append(idx)
        return BandClassification(interior=tuple(interior), boundary=tuple(boundary))

    def _token_index(self, token: str) -> int:
        try:
            return self.token_names.index(token)
        except ValueError:
            raise TokenNotFound(token) from None

    def routing_order(self) -> list[int]:
        """Индексы полос по возрастанию plane_constant (стабильно)."""
        return sorted(range(len(self.bands)), key=lambda i: self.bands[i].plane_constant)

    def route_trade_detailed(
        self, from_token: str, to_token: str, amount: float
    ) -> RouteResult:
        """
        Greedy-исполнение сделки по полосам.

        Raises:
            InvalidAmount: amount <= 0 или NaN/Inf
            TokenNotFound: токен отсутствует
            InsufficientLiquidity: остаток после обхода всех полос > remainder_tolerance
                (remaining и total_output в атрибутах ошибки)
            MarketError: ошибка свопа в полосе (ComplexSolution и т.п.)

        Полосы, исполненные до точки отказа, остаются изменёнными.
        """
        if not is_valid_float(amount) or amount <= 0.0:
            raise InvalidAmount(f"Trade amount must be a positive finite number, got {amount}")
        from_idx = self._token_index(from_token)
        self._token_index(to_token)

        cfg = self.routing_config
        remaining = amount
        total_output = 0.0
        fills: list[RouteFill] = []

        try:
            for idx in self.routing_order():
                if remaining <= 0.0:
                    break
                pool = self.bands[idx].pool

                available = pool.reserves[from_idx]
                if available <= cfg.min_available:
                    logger.debug("Band %d skipped: no %s available", idx, from_token)
                    continue
                trade_in = min(remaining, available * cfg.headroom_fraction)
                if trade_in <= 0.0:
                    continue

                out = pool.swap(from_token, to_token, trade_in)
                remaining -= trade_in
                total_output += out
                fills.append(RouteFill(band_index=idx, amount_in=trade_in, amount_out=out))
        except MarketError:
            logger.warning(
                "Route %s->%s aborted after %d fill(s); earlier fills stay applied",
                from_token,
                to_token,
                len(fills),
            )
            raise
        finally:
            self.recompute_global_reserves()

        if remaining > cfg.remainder_tolerance:
            logger.warning(
                "Route %s->%s unfilled: remaining=%s of %s", from_token, to_token, remaining, amount
            )
            raise InsufficientLiquidity(
                "Not enough liquidity across ticks to satisfy trade",
                remaining=remaining,
                total_output=total_output,
            )

        logger.info(
            "Routed %s %s -> %s %s across %d band(s)",
            amount,
            from_token,
            total_output,
            to_token,
            len(fills),
        )
        return RouteResult(
            from_token=from_token,
            to_token=to_token,
            amount_requested=amount,
            total_output=total_output,
            fills=tuple(fills),
        )

    def route_trade(self, from_token: str, to_token: str, amount: float) -> float:
        """Greedy-исполнение сделки; возвращает суммарный выход."""
        return self.route_trade_detailed(from_token, to_token, amount).total_output

    # =========================================================================
    # PRICES
    # =========================================================================

    def get_aggregated_price(self, from_token: str, to_token: str) -> float:
        """
        Средняя spot price по полосам, взвешенная резервом from-токена.

        price = Σ(price_b · w_b) / Σw_b, полосы с w_b == 0 пропускаются.

        Raises:
            TokenNotFound: токен отсутствует
            DivisionByZero: spot price полосы не определена
            NoLiquidityForPrice: Σw == 0
        """
        from_idx = self._token_index(from_token)
        self._token_index(to_token)

        num = 0.0
        denom = 0.0
        for band in self.bands:
            weight = band.pool.reserves[from_idx]
            if weight == 0.0:
                continue
            num += band.pool.get_spot_price(from_token, to_token) * weight
            denom += weight

        if denom == 0.0:
            raise NoLiquidityForPrice(f"No liquidity for {from_token} across ticks")
        return num / denom

    def get_all_prices(self) -> list[PriceQuote]:
        """Агрегированные цены всех упорядоченных пар i != j (ошибочные пары пропускаются)."""
        quotes: list[PriceQuote] = []
        for from_token in self.token_names:
            for to_token in self.token_names:
                if from_token == to_token:
                    continue
                try:
                    price = self.get_aggregated_price(from_token, to_token)
                except MarketError as e:
                    logger.debug("Price %s->%s unavailable: %s", from_token, to_token, e.code)
                    continue
                quotes.append(PriceQuote(from_token=from_token, to_token=to_token, price=price))
        return quotes

    # =========================================================================
    # STATE & SNAPSHOTS
    # =========================================================================

    def liquidity(self) -> float:
        return sum(band.liquidity() for band in self.bands)

    def get_state(self) -> MarketStateView:
        ticks = [
            BandView(
                index=i,
                plane_constant=band.plane_constant,
                parallel_magnitude=band.parallel_magnitude(),
                reserves=list(band.pool.reserves),
                radius=band.pool.radius,
                is_interior=band.is_interior(),
                is_boundary=band.is_boundary(),
                regime=band.regime(),
                liquidity=band.liquidity(),
            )
            for i, band in enumerate(self.bands)
        ]
        return MarketStateView(
            ticks=ticks,
            token_names=list(self.token_names),
            global_reserves=list(self.global_reserves),
            tick_count=len(self.bands),
        )

    def to_snapshot(self) -> MarketSnapshot:
        return MarketSnapshot(
            bands=[
                BandRecord(
                    pool=PoolRecord(
                        radius=band.pool.radius,
                        reserves=list(band.pool.reserves),
                        token_names=list(band.pool.token_names),
                    ),
                    plane_constant=band.plane_constant,
                    lp_shares=dict(band.lp_shares),
                )
                for band in self.bands
            ],
            global_reserves=list(self.global_reserves),
            token_names=list(self.token_names),
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: MarketSnapshot,
        routing_config: RoutingConfig | None = None,
    ) -> "MarketAggregator":
        """
        Восстановление рынка без пересчёта радиусов.

        Raises:
            LengthMismatch: пул полосы не совпадает с token_names рынка
        """
        market = cls(snapshot.token_names, routing_config)
        for i, record in enumerate(snapshot.bands):
            if record.pool.token_names != market.token_names:
                raise LengthMismatch(
                    f"Band {i} token_names {record.pool.token_names} "
                    f"do not match market {market.token_names}"
                )
            pool = SpherePool.from_state(
                record.pool.token_names, record.pool.reserves, record.pool.radius
            )
            market.bands.append(
                LiquidityBand.from_pool(pool, record.plane_constant, record.lp_shares)
            )
        market.recompute_global_reserves()
        return market


def new_aggregator(token_names: Sequence[str]) -> MarketAggregator:
    """Конструктор рынка для внешних слоёв."""
    return MarketAggregator(token_names)
