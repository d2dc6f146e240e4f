"""Risk metrics modules"""

from .buckets import RiskBucketAggregator, RiskDistributionBucket
from .core import RiskMetrics

__all__ = ["RiskMetrics", "RiskBucketAggregator", "RiskDistributionBucket"]
