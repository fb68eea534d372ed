"""
Тесты для LiquidityBand

Проверяет:
1. Классификацию interior / boundary / exterior
2. Депозит LP (пересчёт радиуса, shares = Σamounts)
3. Вывод LP (пропорция от общих shares, удаление записи при 100%)
4. Ошибки LP без мутации состояния
5. Зависимость shares от масштаба (сырые суммы, а не доля стоимости)
"""

import math

import pytest

from src.core.domain import (
    BandRegime,
    InvalidPercentage,
    LengthMismatch,
    LiquidityBand,
    LPNotFound,
    SpherePool,
    ZeroShares,
)

TOKENS = ["A", "B"]


@pytest.fixture
def band() -> LiquidityBand:
    return LiquidityBand(TOKENS, [100.0, 100.0], 50.0)


# =============================================================================
# CLASSIFICATION
# =============================================================================


class TestClassification:
    """parallel = Σx/√n против plane_constant"""

    def test_interior(self, band: LiquidityBand) -> None:
        """parallel ≈ 141.42 > 50"""
        assert band.parallel_magnitude() == pytest.approx(200.0 / math.sqrt(2.0))
        assert band.is_interior()
        assert not band.is_boundary()
        assert band.regime() is BandRegime.INTERIOR

    def test_exterior(self) -> None:
        band = LiquidityBand(TOKENS, [100.0, 100.0], 200.0)
        assert not band.is_interior()
        assert not band.is_boundary()
        assert band.regime() is BandRegime.EXTERIOR

    def test_boundary(self) -> None:
        band = LiquidityBand(TOKENS, [100.0, 100.0], 200.0 / math.sqrt(2.0))
        assert band.is_boundary()
        assert not band.is_interior()
        assert band.regime() is BandRegime.BOUNDARY

    def test_boundary_within_tolerance(self) -> None:
        """Отклонение меньше 1e-6 всё ещё boundary"""
        band = LiquidityBand(TOKENS, [100.0, 100.0], 200.0 / math.sqrt(2.0) + 5e-7)
        assert band.is_boundary()

    def test_classification_follows_reserves(self) -> None:
        """Классификация вычисляется по текущим резервам"""
        band = LiquidityBand(TOKENS, [100.0, 100.0], 150.0)
        assert band.regime() is BandRegime.EXTERIOR
        band.add_liquidity("lp", [50.0, 50.0])
        assert band.regime() is BandRegime.INTERIOR

    def test_orthogonal_component(self) -> None:
        band = LiquidityBand(TOKENS, [50.0, 150.0], 10.0)
        assert band.orthogonal_component() == pytest.approx([-50.0, 50.0])

    def test_regime_is_string_enum(self) -> None:
        assert BandRegime.BOUNDARY == "boundary"


# =============================================================================
# ADD LIQUIDITY
# =============================================================================


class TestAddLiquidity:
    """Депозит LP"""

    def test_reserves_and_shares(self, band: LiquidityBand) -> None:
        shares = band.add_liquidity("alice", [10.0, 10.0])
        assert shares == 20.0
        assert band.pool.reserves == [110.0, 110.0]
        assert band.lp_shares == {"alice": 20.0}

    def test_radius_resolved(self, band: LiquidityBand) -> None:
        band.add_liquidity("alice", [10.0, 10.0])
        assert band.pool.radius == pytest.approx((2.0 + math.sqrt(2.0)) * 110.0)
        assert band.pool.check_invariant()

    def test_repeat_deposit_accumulates(self, band: LiquidityBand) -> None:
        band.add_liquidity("alice", [10.0, 10.0])
        band.add_liquidity("alice", [5.0, 0.0])
        assert band.lp_shares["alice"] == 25.0
        assert band.total_shares() == 25.0

    def test_length_mismatch(self, band: LiquidityBand) -> None:
        with pytest.raises(LengthMismatch):
            band.add_liquidity("alice", [10.0])
        assert band.pool.reserves == [100.0, 100.0]
        assert band.lp_shares == {}


# =============================================================================
# WITHDRAW LIQUIDITY
# =============================================================================


class TestWithdrawLiquidity:
    """Вывод доли позиции"""

    @pytest.fixture
    def shared_band(self, band: LiquidityBand) -> LiquidityBand:
        """alice: 20 shares, bob: 60 shares, резервы [140, 140]"""
        band.add_liquidity("alice", [10.0, 10.0])
        band.add_liquidity("bob", [30.0, 30.0])
        return band

    def test_full_withdraw_single_lp(self, band: LiquidityBand) -> None:
        """Единственный LP получает все резервы, включая начальные"""
        band.add_liquidity("alice", [10.0, 10.0])
        withdrawn = band.withdraw_liquidity("alice", 1.0)
        assert withdrawn == [110.0, 110.0]
        assert band.pool.reserves == [0.0, 0.0]
        assert "alice" not in band.lp_shares

    def test_full_withdraw_ratio(self, shared_band: LiquidityBand) -> None:
        """ratio = 20 / 80 = 0.25"""
        withdrawn = shared_band.withdraw_liquidity("alice", 1.0)
        assert withdrawn == pytest.approx([35.0, 35.0])
        assert shared_band.pool.reserves == pytest.approx([105.0, 105.0])
        assert shared_band.lp_shares == {"bob": 60.0}

    def test_partial_withdraw(self, shared_band: LiquidityBand) -> None:
        """bob выводит половину: 30 из 80 shares"""
        withdrawn = shared_band.withdraw_liquidity("bob", 0.5)
        assert withdrawn == pytest.approx([140.0 * 30.0 / 80.0] * 2)
        assert shared_band.lp_shares["bob"] == pytest.approx(30.0)
        assert shared_band.lp_shares["alice"] == 20.0

    def test_radius_resolved_after_withdraw(self, shared_band: LiquidityBand) -> None:
        shared_band.withdraw_liquidity("bob", 0.5)
        assert shared_band.pool.check_invariant()

    def test_zero_percentage_is_noop(self, shared_band: LiquidityBand) -> None:
        withdrawn = shared_band.withdraw_liquidity("alice", 0.0)
        assert withdrawn == [0.0, 0.0]
        assert shared_band.pool.reserves == [140.0, 140.0]
        assert shared_band.lp_shares["alice"] == 20.0

    def test_near_full_percentage_removes_entry(self, shared_band: LiquidityBand) -> None:
        shared_band.withdraw_liquidity("alice", 1.0 - 1e-13)
        assert "alice" not in shared_band.lp_shares


class TestWithdrawErrors:
    """Ошибки вывода: резервы и shares не меняются"""

    def test_unknown_lp(self) -> None:
        band = LiquidityBand(TOKENS, [100.0, 100.0], 50.0)
        with pytest.raises(LPNotFound) as exc_info:
            band.withdraw_liquidity("unknown", 0.5)
        assert exc_info.value.lp_id == "unknown"
        assert band.pool.reserves == [100.0, 100.0]
        assert band.lp_shares == {}

    @pytest.mark.parametrize("percentage", [-0.1, 1.5])
    def test_invalid_percentage(self, band: LiquidityBand, percentage: float) -> None:
        band.add_liquidity("alice", [10.0, 10.0])
        with pytest.raises(InvalidPercentage):
            band.withdraw_liquidity("alice", percentage)
        assert band.pool.reserves == [110.0, 110.0]

    def test_zero_shares(self, band: LiquidityBand) -> None:
        band.add_liquidity("ghost", [0.0, 0.0])
        with pytest.raises(ZeroShares):
            band.withdraw_liquidity("ghost", 0.5)
        assert band.pool.reserves == [100.0, 100.0]

    def test_dust_shares_treated_as_zero(self, band: LiquidityBand) -> None:
        """Shares ниже EPS_FLOAT_COMPARE_ABS — нулевая позиция"""
        band.add_liquidity("dust", [1e-13, 0.0])
        reserves = list(band.pool.reserves)
        radius = band.pool.radius

        with pytest.raises(ZeroShares):
            band.withdraw_liquidity("dust", 1.0)
        assert band.pool.reserves == reserves
        assert band.pool.radius == radius
        assert "dust" in band.lp_shares


# =============================================================================
# SHARE ACCOUNTING
# =============================================================================


class TestShareScaleDependence:
    """
    Shares — сырые суммы депозитов. Депозит равных количеств даёт равные
    shares независимо от состава пула в момент депозита.
    """

    def test_same_shares_after_swap(self, band: LiquidityBand) -> None:
        band.add_liquidity("early", [10.0, 10.0])
        band.pool.swap("A", "B", 50.0)
        band.add_liquidity("late", [10.0, 10.0])
        assert band.lp_shares["early"] == band.lp_shares["late"]

    def test_equal_shares_withdraw_equal_amounts(self, band: LiquidityBand) -> None:
        band.add_liquidity("early", [10.0, 10.0])
        band.add_liquidity("late", [10.0, 10.0])
        first = band.withdraw_liquidity("early", 1.0)
        # После вывода early у late 100% shares
        second = band.withdraw_liquidity("late", 1.0)
        assert first == pytest.approx([60.0, 60.0])
        assert second == pytest.approx([60.0, 60.0])


class TestFromPool:
    def test_lp_shares_copied(self) -> None:
        pool = SpherePool(TOKENS, [100.0, 100.0])
        shares = {"alice": 5.0}
        band = LiquidityBand.from_pool(pool, 50.0, shares)
        shares["alice"] = 0.0
        assert band.lp_shares == {"alice": 5.0}
        assert band.pool is pool

    def test_liquidity_proxy(self, band: LiquidityBand) -> None:
        assert band.liquidity() == 200.0
