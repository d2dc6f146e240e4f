"""
Stress Curve Generator - Sweeps price shocks and analyzes the resulting curve
"""

import math
from typing import List, Optional

import numpy as np
import pandas as pd

from ..config import EngineConfig
from ..state.models import Position
from .engine import StressTestEngine
from .models import CliffPoint, SimulationPoint
from .valuation import SHOCK_ALL


class StressCurveGenerator:
    """Builds the debt-at-risk curve over a fixed grid of price shocks"""

    def __init__(
        self,
        positions: List[Position],
        shock_asset: str = SHOCK_ALL,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or EngineConfig()
        self.positions = list(positions)
        self.engine = StressTestEngine(self.positions, shock_asset, self.config)

    def shock_grid(self) -> List[float]:
        """
        Deterministic sweep grid, both ends inclusive

        Returns:
            Price changes in percent, ascending (default -50, -48, ..., +20)
        """
        start = self.config.sweep_start_pct
        stop = self.config.sweep_stop_pct
        step = self.config.sweep_step_pct

        n_steps = int(math.floor((stop - start) / step + 1e-9))
        grid = np.round(start + np.arange(n_steps + 1) * step, 10)

        return [float(pct) for pct in grid]

    def generate(self) -> pd.DataFrame:
        """
        Run the simulator at every grid point

        Returns:
            DataFrame ordered by price_change_pct
        """
        return self.engine.run_scenarios(self.shock_grid())

    def points(self, curve: pd.DataFrame = None) -> List[SimulationPoint]:
        """Curve rows as SimulationPoint objects"""
        if curve is None:
            curve = self.generate()

        return [
            SimulationPoint(
                price_change_pct=float(row["price_change_pct"]),
                liquidatable_count=int(row["liquidatable_count"]),
                debt_at_risk_usd=float(row["debt_at_risk_usd"]),
                collateral_at_risk_usd=float(row["collateral_at_risk_usd"]),
                long_liquidatable_count=int(row["long_liquidatable_count"]),
                short_liquidatable_count=int(row["short_liquidatable_count"]),
                long_debt_at_risk_usd=float(row["long_debt_at_risk_usd"]),
                short_debt_at_risk_usd=float(row["short_debt_at_risk_usd"]),
                new_liquidations=int(row["new_liquidations"]),
            )
            for _, row in curve.iterrows()
        ]

    def first_liquidation_point(self) -> Optional[float]:
        """
        Closest-to-zero price drop at which a currently safe position liquidates

        Uses a first-order estimate per position:
            pct = (threshold * debt - collateral) / net_base_exposure * 100
        which is exact only when the quote legs are zero. Positions without
        debt or with (near) zero net base exposure are skipped.

        Returns:
            Negative percentage within the sweep range, or None
        """
        first = None
        lower_bound = self.config.sweep_start_pct

        for pos in self.positions:
            if pos.is_liquidatable:
                continue

            if pos.total_debt_usd <= 0:
                continue

            exposure = pos.net_base_exposure_usd
            if abs(exposure) <= self.config.exposure_epsilon_usd:
                continue

            target_collateral = pos.liquidation_threshold * pos.total_debt_usd
            pct_change = (target_collateral - pos.collateral_usd) / exposure * 100

            if pct_change >= 0 or pct_change < lower_bound:
                continue

            if first is None or pct_change > first:
                first = pct_change

        return first

    def find_cliff_point(self, curve: pd.DataFrame = None) -> Optional[CliffPoint]:
        """
        Find the largest multiplicative jump in debt-at-risk

        Adjacent points are compared in ascending price_change_pct order,
        debt(curr) / debt(prev). A jump qualifies when it is at least
        cliff_min_multiplier and lands above cliff_min_debt_usd.

        Args:
            curve: DataFrame from generate() (if None, will run it)

        Returns:
            CliffPoint for the largest qualifying jump, or None
        """
        if curve is None:
            curve = self.generate()

        if len(curve) < 2:
            return None

        curve = curve.sort_values("price_change_pct").reset_index(drop=True)
        pcts = curve["price_change_pct"].tolist()
        debts = curve["debt_at_risk_usd"].tolist()

        best = None

        for i in range(1, len(curve)):
            prev = debts[i - 1]
            curr = debts[i]

            if prev > 0:
                multiplier = curr / prev
            elif curr > 0:
                # Zero to non-zero debt at risk
                multiplier = float("inf")
            else:
                continue

            if multiplier < self.config.cliff_min_multiplier:
                continue
            if curr <= self.config.cliff_min_debt_usd:
                continue

            if best is None or multiplier > best.multiplier:
                best = CliffPoint(
                    pct=float(pcts[i]),
                    debt_before=float(prev),
                    debt_after=float(curr),
                    multiplier=float(multiplier),
                )

        return best

    def point_at(self, price_change_pct: float, curve: pd.DataFrame = None) -> SimulationPoint:
        """
        Curve point for a shock, simulated directly when off the grid

        Args:
            price_change_pct: Price change in percent
            curve: DataFrame from generate() (optional)
        """
        if curve is not None:
            match = curve[curve["price_change_pct"] == price_change_pct]
            if len(match) > 0:
                return self.points(match)[0]

        return self.points(self.engine.run_scenarios([price_change_pct]))[0]

    def price_at(self, price_change_pct: float) -> Optional[float]:
        """Base price level after a shock, from the first position with an oracle price"""
        for pos in self.positions:
            if pos.base_price > 0:
                return pos.base_price * (1 + price_change_pct / 100)
        return None
