"""
Stress Testing Models - Data structures for shock simulation results
"""

from dataclasses import dataclass, field
from typing import Dict, List

from ..state.models import RiskRatio

IMPACT_SAFE = "SAFE"
IMPACT_WATCH = "WATCH"
IMPACT_LIQ = "LIQ"


@dataclass(frozen=True)
class PositionShockResult:
    """A single position re-valued at a base price shock"""

    position_id: str
    price_change_pct: float
    collateral_usd: float
    debt_usd: float
    risk_ratio: RiskRatio
    original_risk_ratio: RiskRatio
    distance_to_liquidation_pct: float
    original_distance_pct: float
    is_liquidatable: bool
    impact: str

    @property
    def buffer_delta_pct(self) -> float:
        return self.distance_to_liquidation_pct - self.original_distance_pct

    @property
    def ratio_delta(self) -> float:
        return self.risk_ratio.as_float() - self.original_risk_ratio.as_float()


@dataclass
class ShockResult:
    """Aggregate outcome of one uniform price shock over a position set"""

    price_change_pct: float
    liquidatable_count: int
    debt_at_risk_usd: float
    collateral_at_risk_usd: float
    long_liquidatable_count: int = 0
    short_liquidatable_count: int = 0
    long_debt_at_risk_usd: float = 0.0
    short_debt_at_risk_usd: float = 0.0
    new_liquidations: int = 0
    pct_pool_affected: float = 0.0
    liquidated_position_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            "price_change_pct": self.price_change_pct,
            "liquidatable_count": self.liquidatable_count,
            "debt_at_risk_usd": self.debt_at_risk_usd,
            "collateral_at_risk_usd": self.collateral_at_risk_usd,
            "long_liquidatable_count": self.long_liquidatable_count,
            "short_liquidatable_count": self.short_liquidatable_count,
            "long_debt_at_risk_usd": self.long_debt_at_risk_usd,
            "short_debt_at_risk_usd": self.short_debt_at_risk_usd,
            "new_liquidations": self.new_liquidations,
            "pct_pool_affected": self.pct_pool_affected,
        }

    def summary(self) -> str:
        """Generate human-readable summary"""
        return f"""
Price Shock: {self.price_change_pct:+.1f}%
----------------------------------------
Liquidatable Positions: {self.liquidatable_count} ({self.new_liquidations} new)
Collateral at Risk: ${self.collateral_at_risk_usd:,.2f}
Debt at Risk: ${self.debt_at_risk_usd:,.2f}
Pool Affected: {self.pct_pool_affected:.1f}%
"""


@dataclass(frozen=True)
class SimulationPoint:
    """One point on the stress curve"""

    price_change_pct: float
    liquidatable_count: int
    debt_at_risk_usd: float
    collateral_at_risk_usd: float
    long_liquidatable_count: int = 0
    short_liquidatable_count: int = 0
    long_debt_at_risk_usd: float = 0.0
    short_debt_at_risk_usd: float = 0.0
    new_liquidations: int = 0


@dataclass(frozen=True)
class CliffPoint:
    """Largest disproportionate jump in debt-at-risk between neighbouring shocks"""

    pct: float
    debt_before: float
    debt_after: float
    multiplier: float

    def describe(self) -> str:
        if self.multiplier == float("inf"):
            jump = "from zero"
        else:
            jump = f"{self.multiplier:.1f}x"
        return f"Cliff at {self.pct:+.0f}%: debt jumps {jump} (${self.debt_before:,.0f} -> ${self.debt_after:,.0f})"
