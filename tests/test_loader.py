"""Tests for position loading and snapshots"""

import json
from pathlib import Path

import pandas as pd
import pytest

from marginrisk.state.loader import (
    PositionLoader,
    load_snapshot,
    pyth_price_to_usd,
    save_snapshot,
)
from marginrisk.state.models import InterestRateConfig, PoolState

SAMPLE_POOL = Path(__file__).parent.parent / "data" / "sample_pool.json"


def raw_state(manager_id, base_asset=0.0, quote_asset=0.0, base_debt=0.0, quote_debt=0.0):
    """Raw state with SUI at 3.5 USD and USDC at 1 USD"""
    return {
        "margin_manager_id": manager_id,
        "deepbook_pool_id": "0xpool",
        "base_asset_symbol": "SUI",
        "quote_asset_symbol": "USDC",
        "base_asset": base_asset,
        "quote_asset": quote_asset,
        "base_debt": base_debt,
        "quote_debt": quote_debt,
        "base_pyth_price": 350000000,
        "base_pyth_decimals": -8,
        "quote_pyth_price": 100000000,
        "quote_pyth_decimals": -8,
    }


@pytest.fixture
def pool_config():
    return {"risk_ratios": {"liquidation_risk_ratio": 1100000000}}


class TestPythPrice:
    """Test oracle price conversion"""

    def test_conversion(self):
        assert pyth_price_to_usd(10.0, 350000000, -8) == pytest.approx(35.0)

    def test_missing_price(self):
        assert pyth_price_to_usd(10.0, 0, -8) == 0.0

    def test_missing_decimals(self):
        assert pyth_price_to_usd(10.0, 350000000, None) == 0.0


class TestPositionLoader:
    """Test suite for PositionLoader"""

    def test_threshold_from_pool_config(self, pool_config):
        assert PositionLoader(pool_config).liquidation_threshold == pytest.approx(1.1)

    def test_default_threshold(self):
        assert PositionLoader().liquidation_threshold == 1.05

    def test_usd_values(self, pool_config):
        positions = PositionLoader(pool_config).load_positions([
            raw_state("0x1", base_asset=1000.0, quote_debt=2800.0),
        ])

        position = positions[0]
        assert position.base_asset_usd == pytest.approx(3500.0)
        assert position.quote_debt_usd == pytest.approx(2800.0)
        assert position.liquidation_threshold == pytest.approx(1.1)
        assert position.base_price == pytest.approx(3.5)
        assert position.base_asset_symbol == "SUI"

    def test_debt_free_dropped(self, pool_config):
        positions = PositionLoader(pool_config).load_positions([
            raw_state("0x1", base_asset=1000.0, quote_debt=2800.0),
            raw_state("0x2", base_asset=50.0, quote_asset=100.0),
        ])

        assert [p.position_id for p in positions] == ["0x1"]

    def test_sorted_by_ratio(self, pool_config):
        positions = PositionLoader(pool_config).load_positions([
            raw_state("0xsafe", base_asset=1000.0, quote_debt=1000.0),
            raw_state("0xrisky", base_asset=300.0, quote_debt=1000.0),
        ])

        assert [p.position_id for p in positions] == ["0xrisky", "0xsafe"]

    def test_malformed_skipped(self, pool_config):
        bad = raw_state("0xbad", base_asset=1000.0, quote_debt="not a number")
        missing_id = raw_state("0xnoid", base_asset=1000.0, quote_debt=100.0)
        del missing_id["margin_manager_id"]

        positions = PositionLoader(pool_config).load_positions([
            bad,
            missing_id,
            raw_state("0xgood", base_asset=1000.0, quote_debt=100.0),
        ])

        assert [p.position_id for p in positions] == ["0xgood"]

    def test_dataframe_input(self, pool_config):
        states = pd.DataFrame([
            raw_state("0x1", base_asset=1000.0, quote_debt=2800.0),
            raw_state("0x2", quote_asset=1500.0, base_debt=300.0),
        ])

        positions = PositionLoader(pool_config).load_positions(states)

        assert len(positions) == 2
        assert positions[0].pool_id == "0xpool"

    def test_empty(self):
        assert PositionLoader().load_positions([]) == []

    def test_sample_pool_file(self):
        with open(SAMPLE_POOL) as f:
            data = json.load(f)

        positions = PositionLoader(data["pool_config"]).load_positions(data["states"])

        assert len(positions) == 4
        assert positions[0].position_id == "0xa4"
        assert positions[0].is_liquidatable


class TestRateConfig:
    """Test rate config parsing"""

    def test_nested(self):
        config = PositionLoader.load_rate_config({
            "interest_config": {
                "base_rate": 0.02,
                "base_slope": 0.1,
                "optimal_utilization": 0.8,
                "excess_slope": 2.0,
            },
            "margin_pool_config": {"protocol_spread": 0.1},
        })

        assert config == InterestRateConfig(0.8, 0.02, 0.1, 0.1, 2.0)

    def test_flat(self):
        config = PositionLoader.load_rate_config({
            "base_rate": 0.02,
            "base_slope": 0.1,
            "optimal_utilization": 0.8,
            "protocol_spread": 0.05,
        })

        assert config.protocol_spread == 0.05
        assert config.excess_slope == 0.0


class TestSnapshot:
    """Test snapshot save / load"""

    def test_round_trip(self, tmp_path, pool_config):
        positions = PositionLoader(pool_config).load_positions([
            raw_state("0x1", base_asset=1000.0, quote_debt=2800.0),
            raw_state("0x2", quote_asset=1500.0, base_debt=300.0),
        ])
        rate_config = InterestRateConfig(0.8, 0.02, 0.1, 0.1, 2.0)
        pool_state = PoolState(supply=250000.0, borrow=150000.0)

        path = tmp_path / "snapshots" / "pool.json"
        save_snapshot(positions, path, rate_config, pool_state)
        loaded = load_snapshot(path)

        assert loaded["positions"] == positions
        assert loaded["interest_rate_config"] == rate_config
        assert loaded["pool_state"] == pool_state

    def test_positions_only(self, tmp_path, pool_config):
        positions = PositionLoader(pool_config).load_positions([
            raw_state("0x1", base_asset=1000.0, quote_debt=2800.0),
        ])

        path = tmp_path / "pool.json"
        save_snapshot(positions, path)
        loaded = load_snapshot(path)

        assert loaded["positions"] == positions
        assert loaded["interest_rate_config"] is None
        assert loaded["pool_state"] is None
