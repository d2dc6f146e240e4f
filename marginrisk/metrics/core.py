"""
Risk Metrics Engine - Current (unshocked) risk metrics for a position set
"""

from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from ..config import EngineConfig
from ..state.models import LONG, Position


class RiskMetrics:
    """Calculates current-state risk metrics for a set of margin positions"""

    def __init__(self, positions: List[Position], config: Optional[EngineConfig] = None):
        self.positions = list(positions)
        self.config = config or EngineConfig()

    # ====== Liquidation Status ======

    def liquidatable_positions(self) -> List[Position]:
        """Positions liquidatable right now, most at risk first"""
        liquidatable = [p for p in self.positions if p.is_liquidatable]
        return sorted(liquidatable, key=lambda p: p.risk_ratio.as_float())

    def liquidatable_summary(self) -> Dict[str, float]:
        """
        Current liquidatable count and debt

        Returns:
            Dict with liquidatable_count and liquidatable_debt_usd
        """
        liquidatable = self.liquidatable_positions()
        return {
            "liquidatable_count": len(liquidatable),
            "liquidatable_debt_usd": sum(p.total_debt_usd for p in liquidatable),
        }

    def positions_at_risk(self) -> List[Position]:
        """
        Positions within at_risk_buffer above their liquidation threshold

        Returns:
            List of at-risk positions (liquidatable ones included), sorted by ratio
        """
        factor = 1 + self.config.at_risk_buffer
        at_risk = [
            p for p in self.positions
            if p.risk_ratio.at_or_below(p.liquidation_threshold * factor)
        ]
        return sorted(at_risk, key=lambda p: p.risk_ratio.as_float())

    def at_risk_summary(self) -> Dict[str, float]:
        at_risk = self.positions_at_risk()
        return {
            "at_risk_count": len(at_risk),
            "at_risk_debt_usd": sum(p.total_debt_usd for p in at_risk),
        }

    def system_status(self) -> str:
        """
        Overall status label

        Returns:
            "critical" with liquidatable positions, "stressed" with positions
            under the critical buffer, else "healthy"
        """
        if any(p.is_liquidatable for p in self.positions):
            return "critical"

        critical = self.config.critical_buffer_pct
        if any(p.distance_to_liquidation_pct < critical for p in self.positions):
            return "stressed"

        return "healthy"

    # ====== Positioning ======

    def positioning(self) -> Dict[str, float]:
        """
        Long / short split by net base exposure

        Returns:
            Dict with long_count, short_count, long_pct and net exposure totals
        """
        long_positions = [p for p in self.positions if p.direction == LONG]
        short_positions = [p for p in self.positions if p.direction != LONG]
        total = len(self.positions)

        return {
            "long_count": len(long_positions),
            "short_count": len(short_positions),
            "long_pct": (len(long_positions) / total * 100) if total > 0 else 50.0,
            "long_exposure_usd": sum(p.net_base_exposure_usd for p in long_positions),
            "short_exposure_usd": sum(p.net_base_exposure_usd for p in short_positions),
        }

    # ====== Liquidation Prices ======

    @staticmethod
    def liquidation_price(position: Position) -> Optional[float]:
        """
        Base price at which a position's ratio reaches its threshold

        Solves (base*k + quote) / (base_debt*k + quote_debt) = L for the
        base price multiplier k.

        Returns:
            Price level, or None when unreachable or without an oracle price
        """
        L = position.liquidation_threshold
        denom = L * position.base_debt_usd - position.base_asset_usd
        numer = position.quote_asset_usd - L * position.quote_debt_usd

        if abs(denom) < 0.001:
            return None

        k = numer / denom
        if k <= 0 or k > 100:
            return None

        current_price = position.base_price
        if current_price <= 0:
            return None

        return k * current_price

    def liquidation_price_bins(self, num_bins: int = 20) -> pd.DataFrame:
        """
        Debt that liquidates within each price bin around the current price

        Bins span 0.6x to 1.4x of the current base price.

        Args:
            num_bins: Number of equal-width price bins

        Returns:
            DataFrame with price_low, price_high, price_center and long/short
            debt and counts (empty when no liquidation price is known)
        """
        columns = [
            "price_low", "price_high", "price_center",
            "long_debt_usd", "short_debt_usd", "long_count", "short_count",
        ]

        current_price = next((p.base_price for p in self.positions if p.base_price > 0), 0.0)

        infos = []
        for pos in self.positions:
            if pos.total_debt_usd < 0.01:
                continue
            price = self.liquidation_price(pos)
            if price is not None:
                infos.append((price, pos))

        if not infos or current_price <= 0:
            return pd.DataFrame(columns=columns)

        edges = np.linspace(current_price * 0.6, current_price * 1.4, num_bins + 1)
        bins = pd.DataFrame({
            "price_low": edges[:-1],
            "price_high": edges[1:],
            "price_center": (edges[:-1] + edges[1:]) / 2,
            "long_debt_usd": 0.0,
            "short_debt_usd": 0.0,
            "long_count": 0,
            "short_count": 0,
        })

        bin_width = edges[1] - edges[0]
        for price, pos in infos:
            idx = int(np.floor((price - edges[0]) / bin_width))
            if idx < 0 or idx >= num_bins:
                continue
            side = "long" if pos.direction == LONG else "short"
            bins.loc[idx, f"{side}_debt_usd"] += pos.total_debt_usd
            bins.loc[idx, f"{side}_count"] += 1

        return bins[columns]

    # ====== Summary ======

    def compute_all_metrics(self) -> Dict[str, float]:
        """
        Compute all current-state metrics

        Returns:
            Dict with all metrics
        """
        liquidatable = self.liquidatable_summary()
        at_risk = self.at_risk_summary()
        positioning = self.positioning()

        return {
            "total_positions": len(self.positions),
            "total_debt_usd": sum(p.total_debt_usd for p in self.positions),
            "total_collateral_usd": sum(p.collateral_usd for p in self.positions),
            "liquidatable_count": liquidatable["liquidatable_count"],
            "liquidatable_debt_usd": liquidatable["liquidatable_debt_usd"],
            "at_risk_count": at_risk["at_risk_count"],
            "at_risk_debt_usd": at_risk["at_risk_debt_usd"],
            "long_count": positioning["long_count"],
            "short_count": positioning["short_count"],
            "long_pct": positioning["long_pct"],
            "system_status": self.system_status(),
        }
