"""
Earnings Projector - Supplier earnings over a horizon with a low / high range
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..config import EngineConfig
from ..state.models import InterestRateConfig, PoolState
from .curve import InterestRateModel

TIME_HORIZONS: Dict[str, int] = {
    "1W": 7,
    "1M": 30,
    "3M": 90,
    "6M": 180,
    "1Y": 365,
}


def project_earnings(
    amount: float,
    apy_pct: float,
    days: int,
    simple_interest_max_days: int = 30,
) -> float:
    """
    Projected earnings on a deposit

    Short horizons (days <= simple_interest_max_days) use simple interest,
    longer ones compound daily.

    Args:
        amount: Deposit amount
        apy_pct: Supply APY in percent
        days: Horizon in days

    Returns:
        Earnings, excluding the deposit itself
    """
    if amount < 0:
        raise ValueError(f"Deposit amount must be non-negative, got {amount}")
    if days < 0:
        raise ValueError(f"Horizon must be non-negative, got {days} days")

    daily_rate = apy_pct / 100 / 365

    if days <= simple_interest_max_days:
        return amount * daily_rate * days

    return amount * (1 + daily_rate) ** days - amount


def curve_apy_bounds(
    rate_config: InterestRateConfig,
    current_utilization: float,
    config: Optional[EngineConfig] = None,
) -> Tuple[float, float, float, float]:
    """
    Raw optimistic and pessimistic supply APY from the rate curve

    Optimistic assumes utilization rises to optimal; pessimistic assumes it
    falls to max(current * 0.5, 0.01).

    Returns:
        (optimistic_apy_pct, pessimistic_apy_pct, high_utilization, low_utilization)
    """
    config = config or EngineConfig()
    model = InterestRateModel(rate_config)

    high_util = rate_config.optimal_utilization
    low_util = max(
        current_utilization * config.pessimistic_utilization_factor,
        config.min_pessimistic_utilization,
    )

    return model.supply_apy_pct(high_util), model.supply_apy_pct(low_util), high_util, low_util


def clamp_apy_bounds(
    optimistic_apy_pct: float,
    pessimistic_apy_pct: float,
    current_apy_pct: float,
    pessimistic_cap: float = 0.8,
) -> Tuple[float, float]:
    """
    Keep the projected range around the current APY

    Returns:
        (max(optimistic, current), min(pessimistic, current * pessimistic_cap))
    """
    return (
        max(optimistic_apy_pct, current_apy_pct),
        min(pessimistic_apy_pct, current_apy_pct * pessimistic_cap),
    )


@dataclass(frozen=True)
class EarningsProjection:
    """Low / current / high earnings for one deposit and horizon"""

    amount: float
    days: int
    low: float
    current: float
    high: float
    low_apy_pct: float
    current_apy_pct: float
    high_apy_pct: float
    low_utilization: Optional[float] = None
    high_utilization: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "days": self.days,
            "low": self.low,
            "current": self.current,
            "high": self.high,
            "low_apy_pct": self.low_apy_pct,
            "current_apy_pct": self.current_apy_pct,
            "high_apy_pct": self.high_apy_pct,
            "low_utilization": self.low_utilization,
            "high_utilization": self.high_utilization,
        }


class EarningsProjector:
    """Projects supplier earnings for a pool"""

    def __init__(
        self,
        rate_config: Optional[InterestRateConfig] = None,
        pool_state: Optional[PoolState] = None,
        current_apy_pct: Optional[float] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize projector

        Args:
            rate_config: Pool interest curve (None: no range, all APYs = current)
            pool_state: Current supply / borrow, used for utilization
            current_apy_pct: Current supply APY; derived from the curve when omitted
            config: Engine configuration
        """
        self.rate_config = rate_config
        self.pool_state = pool_state
        self.config = config or EngineConfig()

        if current_apy_pct is None:
            if rate_config is not None and pool_state is not None:
                current_apy_pct = InterestRateModel(rate_config).kinked_supply_apr_pct(
                    pool_state.utilization
                )
            else:
                current_apy_pct = 0.0

        self.current_apy_pct = current_apy_pct

    @property
    def current_utilization(self) -> float:
        return self.pool_state.utilization if self.pool_state is not None else 0.0

    def apy_range(self) -> Dict[str, Optional[float]]:
        """
        Clamped low / current / high APY

        Returns:
            Dict with low_apy_pct, current_apy_pct, high_apy_pct and the
            utilizations behind the bounds (None without a rate config)
        """
        current = self.current_apy_pct

        if self.rate_config is None:
            return {
                "low_apy_pct": current,
                "current_apy_pct": current,
                "high_apy_pct": current,
                "low_utilization": None,
                "high_utilization": None,
            }

        optimistic, pessimistic, high_util, low_util = curve_apy_bounds(
            self.rate_config, self.current_utilization, self.config
        )
        high, low = clamp_apy_bounds(
            optimistic, pessimistic, current, self.config.pessimistic_apy_cap
        )

        return {
            "low_apy_pct": low,
            "current_apy_pct": current,
            "high_apy_pct": high,
            "low_utilization": low_util,
            "high_utilization": high_util,
        }

    def project(self, amount: float, days: int) -> EarningsProjection:
        """
        Earnings triple for a deposit over a horizon

        Args:
            amount: Deposit amount
            days: Horizon in days

        Returns:
            EarningsProjection
        """
        rates = self.apy_range()
        max_days = self.config.simple_interest_max_days

        return EarningsProjection(
            amount=amount,
            days=days,
            low=project_earnings(amount, rates["low_apy_pct"], days, max_days),
            current=project_earnings(amount, rates["current_apy_pct"], days, max_days),
            high=project_earnings(amount, rates["high_apy_pct"], days, max_days),
            low_apy_pct=rates["low_apy_pct"],
            current_apy_pct=rates["current_apy_pct"],
            high_apy_pct=rates["high_apy_pct"],
            low_utilization=rates["low_utilization"],
            high_utilization=rates["high_utilization"],
        )

    def project_horizon(self, amount: float, horizon: str) -> EarningsProjection:
        """Project over a named horizon (1W, 1M, 3M, 6M, 1Y)"""
        if horizon not in TIME_HORIZONS:
            raise ValueError(f"Unknown horizon '{horizon}', expected one of {list(TIME_HORIZONS)}")
        return self.project(amount, TIME_HORIZONS[horizon])
