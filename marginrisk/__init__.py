"""Risk analytics for margin lending pools"""

from .analyzer import PoolRiskAnalyzer, RiskAnalysis
from .config import EngineConfig, load_config
from .state.models import InterestRateConfig, PoolState, Position, RiskRatio

__all__ = [
    "PoolRiskAnalyzer",
    "RiskAnalysis",
    "EngineConfig",
    "load_config",
    "Position",
    "RiskRatio",
    "InterestRateConfig",
    "PoolState",
]
