"""Utilization-based interest rate curve of a margin pool"""

from typing import Dict

from ..state.models import InterestRateConfig, PoolState


class InterestRateModel:
    """Borrow and supply rates as a function of pool utilization"""

    def __init__(self, config: InterestRateConfig):
        self.config = config

    def borrow_rate(self, utilization: float) -> float:
        """
        Linear borrow rate used for projections

        Args:
            utilization: Utilization as a decimal

        Returns:
            base_rate + base_slope * utilization (decimal)
        """
        return self.config.base_rate + self.config.base_slope * utilization

    def supply_apy_pct(self, utilization: float) -> float:
        """
        Supplier APY at a utilization, net of the protocol spread

        Returns:
            APY in percent
        """
        return (
            self.borrow_rate(utilization)
            * utilization
            * (1 - self.config.protocol_spread)
            * 100
        )

    def kinked_borrow_apr_pct(self, utilization: float) -> float:
        """
        Borrow APR including the excess slope above optimal utilization

        Args:
            utilization: Utilization as a decimal

        Returns:
            APR in percent
        """
        c = self.config
        if utilization <= c.optimal_utilization:
            rate = c.base_rate + c.base_slope * utilization
        else:
            rate = (
                c.base_rate
                + c.base_slope * c.optimal_utilization
                + c.excess_slope * (utilization - c.optimal_utilization)
            )
        return rate * 100

    def kinked_supply_apr_pct(self, utilization: float) -> float:
        """Supply APR in percent matching kinked_borrow_apr_pct"""
        return self.kinked_borrow_apr_pct(utilization) * utilization * (1 - self.config.protocol_spread)

    def pool_rates(self, state: PoolState) -> Dict[str, float]:
        """
        Current rates of a pool

        Returns:
            Dict with utilization_pct, borrow_apr_pct and supply_apr_pct
        """
        u = state.utilization
        return {
            "utilization_pct": u * 100,
            "borrow_apr_pct": self.kinked_borrow_apr_pct(u),
            "supply_apr_pct": self.kinked_supply_apr_pct(u),
        }
