"""Data models for margin positions, risk ratios and pool rate configuration"""

import math
from dataclasses import dataclass, asdict
from typing import Optional

LONG = "LONG"
SHORT = "SHORT"


@dataclass(frozen=True)
class RiskRatio:
    """
    Collateral / debt ratio of a position

    A position without debt has no finite ratio. Instead of a large sentinel
    number the ratio is tagged as unbounded, which never compares as
    liquidatable.
    """

    value: Optional[float] = None

    @classmethod
    def unbounded(cls) -> "RiskRatio":
        return cls(None)

    @classmethod
    def of(cls, collateral_usd: float, debt_usd: float) -> "RiskRatio":
        """Build a ratio, unbounded when there is no positive debt"""
        if debt_usd > 0:
            return cls(collateral_usd / debt_usd)
        return cls.unbounded()

    @property
    def is_unbounded(self) -> bool:
        return self.value is None

    def at_or_below(self, threshold: float) -> bool:
        """True when the ratio is finite and <= threshold"""
        if self.value is None:
            return False
        return self.value <= threshold

    def as_float(self) -> float:
        """Ratio as a float (inf when unbounded), for display and sorting"""
        return math.inf if self.value is None else self.value

    def __str__(self) -> str:
        return "unbounded" if self.value is None else f"{self.value:.4f}"


@dataclass(frozen=True)
class Position:
    """A single margin position, valued in USD by the data layer"""

    position_id: str
    base_asset_usd: float
    quote_asset_usd: float
    base_debt_usd: float
    quote_debt_usd: float
    liquidation_threshold: float
    pool_id: str = ""
    base_asset_symbol: str = "BASE"
    quote_asset_symbol: str = "QUOTE"
    base_pyth_price: float = 0.0
    base_pyth_decimals: int = 0

    @property
    def total_debt_usd(self) -> float:
        return self.base_debt_usd + self.quote_debt_usd

    @property
    def collateral_usd(self) -> float:
        return self.base_asset_usd + self.quote_asset_usd

    @property
    def risk_ratio(self) -> RiskRatio:
        """Current (unshocked) collateral / debt ratio"""
        return RiskRatio.of(self.collateral_usd, self.total_debt_usd)

    @property
    def is_liquidatable(self) -> bool:
        """Check if position is at or below its liquidation threshold"""
        return self.risk_ratio.at_or_below(self.liquidation_threshold)

    @property
    def distance_to_liquidation_pct(self) -> float:
        """
        Buffer above the liquidation threshold

        Returns:
            Percentage distance (negative = liquidatable, inf = no debt)
        """
        return distance_to_liquidation_pct(self.risk_ratio, self.liquidation_threshold)

    @property
    def net_base_exposure_usd(self) -> float:
        """Base collateral minus base debt; positive means net long base"""
        return self.base_asset_usd - self.base_debt_usd

    @property
    def direction(self) -> str:
        return LONG if self.net_base_exposure_usd > 0 else SHORT

    @property
    def base_price(self) -> float:
        """Human-readable base price from the raw oracle price and exponent"""
        if not self.base_pyth_price:
            return 0.0
        return self.base_pyth_price / (10 ** abs(self.base_pyth_decimals))

    def to_dict(self) -> dict:
        """Convert position to dictionary"""
        data = asdict(self)
        data.update({
            "total_debt_usd": self.total_debt_usd,
            "risk_ratio": self.risk_ratio.value,
            "is_liquidatable": self.is_liquidatable,
            "direction": self.direction,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Position":
        return cls(
            position_id=data["position_id"],
            base_asset_usd=float(data["base_asset_usd"]),
            quote_asset_usd=float(data["quote_asset_usd"]),
            base_debt_usd=float(data["base_debt_usd"]),
            quote_debt_usd=float(data["quote_debt_usd"]),
            liquidation_threshold=float(data["liquidation_threshold"]),
            pool_id=data.get("pool_id", ""),
            base_asset_symbol=data.get("base_asset_symbol", "BASE"),
            quote_asset_symbol=data.get("quote_asset_symbol", "QUOTE"),
            base_pyth_price=float(data.get("base_pyth_price", 0.0)),
            base_pyth_decimals=int(data.get("base_pyth_decimals", 0)),
        )


def distance_to_liquidation_pct(ratio: RiskRatio, threshold: float) -> float:
    if ratio.is_unbounded:
        return math.inf
    return (ratio.value - threshold) / threshold * 100


@dataclass(frozen=True)
class InterestRateConfig:
    """Utilization-based interest curve of a margin pool (decimals, not percent)"""

    optimal_utilization: float
    base_rate: float
    base_slope: float
    protocol_spread: float
    excess_slope: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "InterestRateConfig":
        return cls(
            optimal_utilization=float(data["optimal_utilization"]),
            base_rate=float(data["base_rate"]),
            base_slope=float(data["base_slope"]),
            protocol_spread=float(data["protocol_spread"]),
            excess_slope=float(data.get("excess_slope", 0.0)),
        )


@dataclass(frozen=True)
class PoolState:
    """Current supply and borrow totals of a margin pool"""

    supply: float
    borrow: float

    @property
    def utilization(self) -> float:
        """
        Total borrow / total supply

        Returns:
            Utilization as a decimal (0 when nothing is supplied)
        """
        if self.supply == 0:
            return 0.0
        return self.borrow / self.supply
