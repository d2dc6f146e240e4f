"""
Risk distribution buckets for health histograms
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Optional

import pandas as pd

from ..config import EngineConfig
from ..state.models import Position

MODE_COUNT = "count"
MODE_DEBT = "debt"

SCHEME_STATUS = "status"
SCHEME_RATIO = "ratio"

RATIO_BAND_COLORS = ["#fb7185", "#fbbf24", "#fcd34d", "#2dd4bf", "#22d3ee"]


@dataclass(frozen=True)
class BucketDefinition:
    """Half-open range [lower, upper) over a per-position metric"""

    label: str
    color: str
    lower: float
    upper: float


@dataclass
class RiskDistributionBucket:
    """Histogram bucket with accumulated position count and debt"""

    label: str
    color: str
    lower: float
    upper: float
    count: int = 0
    total_debt_usd: float = 0.0

    def value(self, mode: str = MODE_COUNT) -> float:
        if mode == MODE_COUNT:
            return self.count
        if mode == MODE_DEBT:
            return self.total_debt_usd
        raise ValueError(f"Unknown histogram mode: {mode}")


def status_buckets(config: EngineConfig) -> List[BucketDefinition]:
    """
    Liquidatable / Critical / Watch / Safe over the buffer above the threshold

    Liquidatable positions have a buffer <= 0 and are matched first.
    """
    return [
        BucketDefinition("Liquidatable", "#fb923c", -math.inf, 0.0),
        BucketDefinition("Critical", "#fbbf24", 0.0, config.critical_buffer_pct),
        BucketDefinition("Watch", "#2dd4bf", config.critical_buffer_pct, config.watch_buffer_pct),
        BucketDefinition("Safe", "#10b981", config.watch_buffer_pct, math.inf),
    ]


def ratio_buckets(config: EngineConfig) -> List[BucketDefinition]:
    """Bands over the raw collateral / debt ratio"""
    edges = list(config.ratio_band_edges)
    bounds = [-math.inf] + edges + [math.inf]
    colors = RATIO_BAND_COLORS

    definitions = []
    for i, (lower, upper) in enumerate(zip(bounds, bounds[1:])):
        if lower == -math.inf:
            label = f"< {upper:.2f}"
        elif upper == math.inf:
            label = f"{lower:.2f}+"
        else:
            label = f"{lower:.2f}-{upper:.2f}"
        definitions.append(BucketDefinition(label, colors[min(i, len(colors) - 1)], lower, upper))

    return definitions


class RiskBucketAggregator:
    """Classifies positions into ordered, mutually exclusive health buckets"""

    def __init__(self, scheme: str = SCHEME_STATUS, config: Optional[EngineConfig] = None):
        """
        Initialize aggregator

        Args:
            scheme: "status" (buffer-based bands) or "ratio" (raw ratio bands)
            config: Engine configuration with bucket boundaries
        """
        self.config = config or EngineConfig()
        self.scheme = scheme

        if scheme == SCHEME_STATUS:
            self.definitions = status_buckets(self.config)
            self._metric: Callable[[Position], float] = self._status_metric
        elif scheme == SCHEME_RATIO:
            self.definitions = ratio_buckets(self.config)
            self._metric = self._ratio_metric
        else:
            raise ValueError(f"Unknown bucket scheme: {scheme}")

    @staticmethod
    def _status_metric(position: Position) -> float:
        if position.is_liquidatable:
            return -math.inf
        return position.distance_to_liquidation_pct

    @staticmethod
    def _ratio_metric(position: Position) -> float:
        return position.risk_ratio.as_float()

    def classify(self, position: Position) -> int:
        """
        Index of the bucket a position falls in

        The last bucket is closed above so unbounded ratios land in it.
        """
        metric = self._metric(position)
        last = len(self.definitions) - 1

        for i, bucket in enumerate(self.definitions):
            if bucket.lower <= metric < bucket.upper:
                return i
            if i == last and metric >= bucket.lower:
                return i

        # NaN compares false everywhere; treat it as most at risk
        return 0

    def aggregate(self, positions: List[Position]) -> List[RiskDistributionBucket]:
        """
        Count positions and debt per bucket

        Args:
            positions: Current (unshocked) positions

        Returns:
            Buckets in fixed order, most at risk first
        """
        buckets = [
            RiskDistributionBucket(d.label, d.color, d.lower, d.upper)
            for d in self.definitions
        ]

        for pos in positions:
            bucket = buckets[self.classify(pos)]
            bucket.count += 1
            bucket.total_debt_usd += pos.total_debt_usd

        return buckets

    def to_frame(self, positions: List[Position], mode: str = MODE_COUNT) -> pd.DataFrame:
        """
        Histogram data for charting

        Args:
            positions: Current positions
            mode: "count" or "debt" display mode

        Returns:
            DataFrame with label, color, value and share_pct per bucket
        """
        buckets = self.aggregate(positions)
        values = [b.value(mode) for b in buckets]
        total = sum(values)

        return pd.DataFrame({
            "label": [b.label for b in buckets],
            "color": [b.color for b in buckets],
            "count": [b.count for b in buckets],
            "total_debt_usd": [b.total_debt_usd for b in buckets],
            "value": values,
            "share_pct": [(v / total * 100) if total > 0 else 0.0 for v in values],
        })
