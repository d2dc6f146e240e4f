"""
Pool risk analysis - runs every analytic over one position snapshot
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

import pandas as pd

from .config import EngineConfig
from .data.cache import ResultCache, make_key
from .metrics.buckets import SCHEME_STATUS, RiskBucketAggregator, RiskDistributionBucket
from .metrics.core import RiskMetrics
from .rates.earnings import EarningsProjection, EarningsProjector
from .state.models import InterestRateConfig, PoolState, Position
from .stress.curve import StressCurveGenerator
from .stress.engine import StressTestEngine
from .stress.models import CliffPoint, ShockResult, SimulationPoint
from .stress.valuation import SHOCK_ALL

logger = logging.getLogger(__name__)


def _copy_shock(result: ShockResult) -> ShockResult:
    return replace(result, liquidated_position_ids=list(result.liquidated_position_ids))


@dataclass(frozen=True)
class RiskAnalysis:
    """Everything the presentation layer needs for one snapshot"""

    curve: pd.DataFrame
    points: List[SimulationPoint]
    buckets: List[RiskDistributionBucket]
    first_liquidation_pct: Optional[float]
    cliff: Optional[CliffPoint]
    current: SimulationPoint
    metrics: dict

    def copy(self) -> "RiskAnalysis":
        """Copy whose curve, lists and metrics are not shared with this one"""
        return replace(
            self,
            curve=self.curve.copy(),
            points=list(self.points),
            buckets=[replace(b) for b in self.buckets],
            metrics=dict(self.metrics),
        )


class PoolRiskAnalyzer:
    """Memoized entry point over the stress, bucket and metrics modules"""

    def __init__(self, config: Optional[EngineConfig] = None, cache: Optional[ResultCache] = None):
        self.config = config or EngineConfig()
        self.cache = cache if cache is not None else ResultCache(self.config.cache_max_entries)

    def analyze(
        self,
        positions: List[Position],
        shock_asset: str = SHOCK_ALL,
        bucket_scheme: str = SCHEME_STATUS,
    ) -> RiskAnalysis:
        """
        Full risk analysis of a position set

        Results are cached on a hash of the positions and parameters; a new
        snapshot or parameter produces a new key. Every call returns its own
        copy, so changes made by a caller never reach the cache.

        Args:
            positions: Current positions
            shock_asset: Base asset to shock, or "ALL"
            bucket_scheme: "status" or "ratio"

        Returns:
            RiskAnalysis
        """
        key = make_key("analysis", positions, shock_asset, bucket_scheme, self.config)
        cached = self.cache.get(key)
        if cached is not None:
            return cached.copy()

        generator = StressCurveGenerator(positions, shock_asset, self.config)
        curve = generator.generate()

        analysis = RiskAnalysis(
            curve=curve,
            points=generator.points(curve),
            buckets=RiskBucketAggregator(bucket_scheme, self.config).aggregate(positions),
            first_liquidation_pct=generator.first_liquidation_point(),
            cliff=generator.find_cliff_point(curve),
            current=generator.point_at(0.0, curve),
            metrics=RiskMetrics(positions, self.config).compute_all_metrics(),
        )

        logger.info(
            f"Analyzed {len(positions)} positions: "
            f"{analysis.current.liquidatable_count} liquidatable, "
            f"cliff={'yes' if analysis.cliff else 'no'}"
        )

        self.cache.set(key, analysis)
        return analysis.copy()

    def shock(
        self,
        positions: List[Position],
        price_change_pct: float,
        shock_asset: str = SHOCK_ALL,
    ) -> ShockResult:
        """Single user-selected shock, cached like analyze()"""
        key = make_key("shock", positions, price_change_pct, shock_asset, self.config)
        cached = self.cache.get(key)
        if cached is not None:
            return _copy_shock(cached)

        engine = StressTestEngine(positions, shock_asset, self.config)
        result = engine.apply_price_shock(price_change_pct)

        self.cache.set(key, result)
        return _copy_shock(result)

    def earnings(
        self,
        amount: float,
        days: int,
        rate_config: Optional[InterestRateConfig] = None,
        pool_state: Optional[PoolState] = None,
        current_apy_pct: Optional[float] = None,
    ) -> EarningsProjection:
        """Earnings projection triple for a deposit and horizon"""
        projector = EarningsProjector(rate_config, pool_state, current_apy_pct, self.config)
        return projector.project(amount, days)
