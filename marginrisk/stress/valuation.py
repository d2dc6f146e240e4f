"""
Position valuation under a uniform base-asset price shock
"""

from ..state.models import Position, RiskRatio, distance_to_liquidation_pct
from .models import IMPACT_LIQ, IMPACT_SAFE, IMPACT_WATCH, PositionShockResult

SHOCK_ALL = "ALL"


def price_multiplier(position: Position, price_change_pct: float, shock_asset: str = SHOCK_ALL) -> float:
    """
    Multiplier applied to the base legs of a position

    Args:
        position: Position to value
        price_change_pct: Base price change in percent (e.g., -10 for a 10% drop)
        shock_asset: Base symbol being shocked, or "ALL"

    Returns:
        1 + pct/100 when the position's base asset is shocked, else 1
    """
    if shock_asset == SHOCK_ALL or shock_asset == position.base_asset_symbol:
        return 1 + price_change_pct / 100
    return 1.0


def shocked_values(position: Position, price_change_pct: float, shock_asset: str = SHOCK_ALL):
    """
    Collateral and debt after the shock; quote legs are held at their USD value

    Returns:
        (collateral_usd, debt_usd)
    """
    m = price_multiplier(position, price_change_pct, shock_asset)

    collateral = position.base_asset_usd * m + position.quote_asset_usd
    debt = position.base_debt_usd * m + position.quote_debt_usd

    return collateral, debt


def value_position_at_shock(
    position: Position,
    price_change_pct: float,
    shock_asset: str = SHOCK_ALL,
    watch_buffer_pct: float = 15.0,
) -> PositionShockResult:
    """
    Re-value a position at a hypothetical base price change

    Args:
        position: Position to value (not modified)
        price_change_pct: Base price change in percent
        shock_asset: Base symbol being shocked, or "ALL"
        watch_buffer_pct: Buffer under which a surviving position is flagged WATCH

    Returns:
        PositionShockResult with the shocked ratio and impact label
    """
    collateral, debt = shocked_values(position, price_change_pct, shock_asset)

    ratio = RiskRatio.of(collateral, debt)
    threshold = position.liquidation_threshold
    liquidatable = ratio.at_or_below(threshold)
    distance = distance_to_liquidation_pct(ratio, threshold)

    if liquidatable:
        impact = IMPACT_LIQ
    elif distance < watch_buffer_pct:
        impact = IMPACT_WATCH
    else:
        impact = IMPACT_SAFE

    return PositionShockResult(
        position_id=position.position_id,
        price_change_pct=price_change_pct,
        collateral_usd=collateral,
        debt_usd=debt,
        risk_ratio=ratio,
        original_risk_ratio=position.risk_ratio,
        distance_to_liquidation_pct=distance,
        original_distance_pct=position.distance_to_liquidation_pct,
        is_liquidatable=liquidatable,
        impact=impact,
    )
