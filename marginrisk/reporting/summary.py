"""Plain-text summaries of a pool risk analysis"""

from typing import Optional

from ..rates.earnings import EarningsProjection


def format_usd(value: float) -> str:
    """Compact USD formatting ($1.2M, $3.4K, $56)"""
    if abs(value) >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if abs(value) >= 1_000:
        return f"${value / 1_000:.1f}K"
    return f"${value:.0f}"


def format_pct(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:+.1f}%"


def generate_summary(analysis, pool_name: str = "Pool") -> str:
    """
    Stress test summary for one analysis

    Args:
        analysis: RiskAnalysis from PoolRiskAnalyzer.analyze
        pool_name: Display name

    Returns:
        Formatted multi-line string
    """
    metrics = analysis.metrics
    current = analysis.current

    summary = f"""
=== Margin Risk Summary ===

Pool: {pool_name}
Total Positions: {metrics['total_positions']}
Total Debt: {format_usd(metrics['total_debt_usd'])}
Status: {metrics['system_status'].upper()}

--- Current State ---
Liquidatable now: {current.liquidatable_count} ({format_usd(current.debt_at_risk_usd)} debt)
At risk (within buffer): {metrics['at_risk_count']} ({format_usd(metrics['at_risk_debt_usd'])} debt)
Positioning: {metrics['long_count']} long / {metrics['short_count']} short

--- Stress Curve ---
First liquidation at: {format_pct(analysis.first_liquidation_pct)}
"""

    if analysis.cliff is not None:
        summary += f"{analysis.cliff.describe()}\n"
    else:
        summary += "No cliff detected\n"

    summary += "\n--- Risk Distribution ---\n"
    for bucket in analysis.buckets:
        summary += f"{bucket.label:<14} {bucket.count:>4} positions  {format_usd(bucket.total_debt_usd):>10}\n"

    return summary


def earnings_summary(projection: EarningsProjection) -> str:
    """One-block earnings range for a deposit"""
    return f"""
--- Earnings ({projection.days} days on {projection.amount:,.2f}) ---
Low:     +{projection.low:,.4f} ({projection.low_apy_pct:.2f}% APY)
Current: +{projection.current:,.4f} ({projection.current_apy_pct:.2f}% APY)
High:    +{projection.high:,.4f} ({projection.high_apy_pct:.2f}% APY)
"""
