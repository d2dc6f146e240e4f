"""Tests for risk distribution buckets"""

import random

import pytest

from marginrisk.config import EngineConfig
from marginrisk.metrics.buckets import (
    MODE_COUNT,
    MODE_DEBT,
    RiskBucketAggregator,
    RiskDistributionBucket,
)
from marginrisk.state.models import Position


def position(position_id, collateral_usd, debt_usd, threshold=1.1):
    return Position(position_id, collateral_usd, 0.0, 0.0, debt_usd, threshold)


@pytest.fixture
def sample_positions():
    """One position per status bucket plus a debt-free one (threshold 1.1)"""
    return [
        position("0xliq", 1050.0, 1000.0),    # ratio 1.05, liquidatable
        position("0xcrit", 1150.0, 1000.0),   # 4.5% buffer
        position("0xwatch", 2600.0, 2000.0),  # 18.2% buffer
        position("0xsafe", 4000.0, 2000.0),   # 81.8% buffer
        position("0xfree", 500.0, 0.0),       # no debt
    ]


class TestStatusBuckets:
    """Test the Liquidatable / Critical / Watch / Safe scheme"""

    def test_labels_in_order(self):
        buckets = RiskBucketAggregator().aggregate([])
        assert [b.label for b in buckets] == ["Liquidatable", "Critical", "Watch", "Safe"]

    def test_counts(self, sample_positions):
        buckets = RiskBucketAggregator().aggregate(sample_positions)
        assert [b.count for b in buckets] == [1, 1, 1, 2]

    def test_counts_sum_to_positions(self, sample_positions):
        buckets = RiskBucketAggregator().aggregate(sample_positions)
        assert sum(b.count for b in buckets) == len(sample_positions)

    def test_debt_sums(self, sample_positions):
        buckets = RiskBucketAggregator().aggregate(sample_positions)

        assert [b.total_debt_usd for b in buckets] == [1000.0, 1000.0, 2000.0, 2000.0]
        assert sum(b.total_debt_usd for b in buckets) == sum(p.total_debt_usd for p in sample_positions)

    def test_threshold_is_liquidatable(self):
        aggregator = RiskBucketAggregator()
        assert aggregator.classify(position("0x1", 1100.0, 1000.0)) == 0

    def test_unbounded_is_safe(self):
        aggregator = RiskBucketAggregator()
        assert aggregator.classify(position("0xfree", 500.0, 0.0)) == 3

    def test_order_independent(self, sample_positions):
        shuffled = list(sample_positions)
        random.Random(7).shuffle(shuffled)

        aggregator = RiskBucketAggregator()

        assert [b.count for b in aggregator.aggregate(shuffled)] == [
            b.count for b in aggregator.aggregate(sample_positions)
        ]

    def test_custom_boundaries(self):
        config = EngineConfig(critical_buffer_pct=5, watch_buffer_pct=20)
        buckets = RiskBucketAggregator(config=config).aggregate([position("0xcrit", 1180.0, 1000.0)])

        # 7.3% buffer is Watch once Critical ends at 5%
        assert [b.count for b in buckets] == [0, 0, 1, 0]


class TestRatioBuckets:
    """Test raw ratio bands"""

    def test_labels(self):
        buckets = RiskBucketAggregator("ratio").aggregate([])
        assert [b.label for b in buckets] == ["< 1.05", "1.05-1.10", "1.10-1.20", "1.20-1.50", "1.50+"]

    def test_classification(self):
        positions = [
            position("0x1", 1000.0, 1000.0),
            position("0x2", 1070.0, 1000.0),
            position("0x3", 1100.0, 1000.0),
            position("0x4", 1300.0, 1000.0),
            position("0x5", 2000.0, 1000.0),
            position("0x6", 500.0, 0.0),
        ]

        buckets = RiskBucketAggregator("ratio").aggregate(positions)

        assert [b.count for b in buckets] == [1, 1, 1, 1, 2]


class TestHistogramFrame:
    """Test histogram data for charting"""

    def test_count_mode(self, sample_positions):
        frame = RiskBucketAggregator().to_frame(sample_positions, MODE_COUNT)

        assert list(frame["value"]) == [1, 1, 1, 2]
        assert frame["share_pct"].sum() == pytest.approx(100.0)

    def test_debt_mode(self, sample_positions):
        frame = RiskBucketAggregator().to_frame(sample_positions, MODE_DEBT)

        assert list(frame["value"]) == [1000.0, 1000.0, 2000.0, 2000.0]
        assert frame.loc[0, "share_pct"] == pytest.approx(1000.0 / 6000.0 * 100)

    def test_empty(self):
        frame = RiskBucketAggregator().to_frame([])

        assert len(frame) == 4
        assert frame["share_pct"].sum() == 0.0


class TestInvalidInput:
    """Test rejected scheme and mode names"""

    def test_unknown_scheme(self):
        with pytest.raises(ValueError):
            RiskBucketAggregator("percentile")

    def test_unknown_mode(self):
        bucket = RiskDistributionBucket("Safe", "#10b981", 30.0, float("inf"))
        with pytest.raises(ValueError):
            bucket.value("volume")
