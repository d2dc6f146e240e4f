"""
Stress Testing Engine - Simulates uniform base price shocks on margin positions
"""

from typing import Dict, List, Optional

import pandas as pd

from ..config import EngineConfig
from ..state.models import LONG, Position
from .models import PositionShockResult, ShockResult
from .valuation import SHOCK_ALL, value_position_at_shock


class StressTestEngine:
    """Runs price shock scenarios on a set of margin positions"""

    def __init__(
        self,
        positions: List[Position],
        shock_asset: str = SHOCK_ALL,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize stress test engine

        Args:
            positions: Positions to shock (never modified)
            shock_asset: Base asset symbol to shock, or "ALL"
            config: Engine configuration (default: EngineConfig())
        """
        self.positions = list(positions)
        self.shock_asset = shock_asset
        self.config = config or EngineConfig()

    @property
    def total_debt_usd(self) -> float:
        return sum(p.total_debt_usd for p in self.positions)

    def simulate_positions(self, price_change_pct: float) -> List[PositionShockResult]:
        """Per-position view of a shock, in input order"""
        return [
            value_position_at_shock(
                pos,
                price_change_pct,
                self.shock_asset,
                self.config.watch_impact_buffer_pct,
            )
            for pos in self.positions
        ]

    def apply_price_shock(self, price_change_pct: float) -> ShockResult:
        """
        Apply a base price shock and aggregate liquidation impact

        Args:
            price_change_pct: Price change in percent (e.g., -10 for a 10% drop)

        Returns:
            ShockResult summed over positions liquidatable at that shock
        """
        result = ShockResult(
            price_change_pct=price_change_pct,
            liquidatable_count=0,
            debt_at_risk_usd=0.0,
            collateral_at_risk_usd=0.0,
        )

        for pos, sim in zip(self.positions, self.simulate_positions(price_change_pct)):
            if not sim.is_liquidatable:
                continue

            result.liquidatable_count += 1
            result.debt_at_risk_usd += sim.debt_usd
            result.collateral_at_risk_usd += sim.collateral_usd
            result.liquidated_position_ids.append(pos.position_id)

            if pos.direction == LONG:
                result.long_liquidatable_count += 1
                result.long_debt_at_risk_usd += sim.debt_usd
            else:
                result.short_liquidatable_count += 1
                result.short_debt_at_risk_usd += sim.debt_usd

            if not pos.is_liquidatable:
                result.new_liquidations += 1

        total_debt = self.total_debt_usd
        result.pct_pool_affected = (
            result.debt_at_risk_usd / total_debt * 100 if total_debt > 0 else 0.0
        )

        return result

    def run_scenarios(self, shocks: List[float]) -> pd.DataFrame:
        """
        Run a list of shocks and return one row per shock

        Args:
            shocks: Price changes in percent

        Returns:
            DataFrame in the order the shocks were given
        """
        rows = [self.apply_price_shock(shock).to_dict() for shock in shocks]
        columns = list(ShockResult(0.0, 0, 0.0, 0.0).to_dict().keys())
        return pd.DataFrame(rows, columns=columns)

    def impact_counts(self, price_change_pct: float) -> Dict[str, int]:
        """Number of positions per impact label (SAFE / WATCH / LIQ) at a shock"""
        counts = {"SAFE": 0, "WATCH": 0, "LIQ": 0}
        for sim in self.simulate_positions(price_change_pct):
            counts[sim.impact] += 1
        return counts
