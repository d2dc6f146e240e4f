"""Stress testing modules"""

from .curve import StressCurveGenerator
from .engine import StressTestEngine
from .models import CliffPoint, PositionShockResult, ShockResult, SimulationPoint
from .valuation import SHOCK_ALL, value_position_at_shock

__all__ = [
    'StressTestEngine',
    'StressCurveGenerator',
    'ShockResult',
    'SimulationPoint',
    'CliffPoint',
    'PositionShockResult',
    'SHOCK_ALL',
    'value_position_at_shock',
]
