"""Tests for position valuation under a price shock"""

import pytest

from marginrisk.state.models import Position
from marginrisk.stress.models import IMPACT_LIQ, IMPACT_SAFE, IMPACT_WATCH
from marginrisk.stress.valuation import (
    SHOCK_ALL,
    price_multiplier,
    shocked_values,
    value_position_at_shock,
)


@pytest.fixture
def long_position():
    """150 USD of SUI collateral against 100 USD of quote debt, threshold 1.1"""
    return Position(
        position_id="0xlong",
        base_asset_usd=150.0,
        quote_asset_usd=0.0,
        base_debt_usd=0.0,
        quote_debt_usd=100.0,
        liquidation_threshold=1.1,
        base_asset_symbol="SUI",
    )


class TestPriceMultiplier:
    """Test which positions a shock applies to"""

    def test_all_assets(self, long_position):
        assert price_multiplier(long_position, -10.0, SHOCK_ALL) == pytest.approx(0.9)

    def test_matching_asset(self, long_position):
        assert price_multiplier(long_position, 20.0, "SUI") == pytest.approx(1.2)

    def test_other_asset_unshocked(self, long_position):
        assert price_multiplier(long_position, -50.0, "ETH") == 1.0


class TestValuePositionAtShock:
    """Test re-valuation of a single position"""

    def test_zero_shock(self, long_position):
        result = value_position_at_shock(long_position, 0.0)

        assert result.risk_ratio.value == pytest.approx(1.5)
        assert not result.is_liquidatable
        assert result.impact == IMPACT_SAFE

    def test_liquidating_shock(self, long_position):
        """-35% leaves 97.5 USD of collateral against 100 USD of debt"""
        result = value_position_at_shock(long_position, -35.0)

        assert result.collateral_usd == pytest.approx(97.5)
        assert result.debt_usd == pytest.approx(100.0)
        assert result.risk_ratio.value == pytest.approx(0.975)
        assert result.is_liquidatable
        assert result.impact == IMPACT_LIQ

    def test_base_only_ratio_is_shock_invariant(self):
        """Base collateral and base debt at 1.5:1 move together"""
        position = Position("0xbase", 150.0, 0.0, 100.0, 0.0, 1.1)

        for pct in (0.0, -35.0):
            result = value_position_at_shock(position, pct)
            assert result.risk_ratio.value == pytest.approx(1.5)
            assert not result.is_liquidatable

        result = value_position_at_shock(position, -35.0)
        assert result.collateral_usd == pytest.approx(97.5)
        assert result.debt_usd == pytest.approx(65.0)

    def test_watch_impact(self, long_position):
        """-20% leaves a 9% buffer, under the 15% watch buffer"""
        result = value_position_at_shock(long_position, -20.0)

        assert result.risk_ratio.value == pytest.approx(1.2)
        assert not result.is_liquidatable
        assert result.impact == IMPACT_WATCH

    def test_deltas(self, long_position):
        result = value_position_at_shock(long_position, -20.0)

        assert result.ratio_delta == pytest.approx(-0.3)
        assert result.buffer_delta_pct < 0

    def test_quote_legs_hold_value(self):
        position = Position("0x1", 100.0, 50.0, 0.0, 80.0, 1.1)

        collateral, debt = shocked_values(position, -50.0)

        assert collateral == pytest.approx(100.0)
        assert debt == pytest.approx(80.0)

    def test_base_debt_scales_with_price(self):
        position = Position("0xshort", 0.0, 150.0, 100.0, 0.0, 1.1)

        result = value_position_at_shock(position, 20.0)

        assert result.debt_usd == pytest.approx(120.0)
        assert result.risk_ratio.value == pytest.approx(1.25)

    def test_zero_debt_stays_safe(self):
        position = Position("0xfree", 100.0, 0.0, 0.0, 0.0, 1.1)

        result = value_position_at_shock(position, -50.0)

        assert result.risk_ratio.is_unbounded
        assert not result.is_liquidatable
        assert result.impact == IMPACT_SAFE

    def test_other_asset_not_shocked(self, long_position):
        result = value_position_at_shock(long_position, -50.0, shock_asset="ETH")
        assert result.risk_ratio.value == pytest.approx(1.5)

    def test_position_not_modified(self, long_position):
        before = long_position.to_dict()
        value_position_at_shock(long_position, -40.0)
        assert long_position.to_dict() == before
