"""Interest rate and earnings projection modules"""

from .curve import InterestRateModel
from .earnings import EarningsProjection, EarningsProjector, project_earnings

__all__ = ["InterestRateModel", "EarningsProjector", "EarningsProjection", "project_earnings"]
