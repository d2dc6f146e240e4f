"""Position state models and loading"""

from .loader import PositionLoader, load_snapshot, save_snapshot
from .models import InterestRateConfig, PoolState, Position, RiskRatio

__all__ = [
    "Position",
    "RiskRatio",
    "InterestRateConfig",
    "PoolState",
    "PositionLoader",
    "save_snapshot",
    "load_snapshot",
]
