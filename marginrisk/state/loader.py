"""Position loading from raw margin-manager state records"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from .models import InterestRateConfig, PoolState, Position

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# On-chain risk ratios and rewards are fixed point with 9 decimals
FLOAT_SCALING = 1e9
DEFAULT_LIQUIDATION_THRESHOLD = 1.05


def pyth_price_to_usd(amount: float, pyth_price: float, pyth_decimals: Optional[int]) -> float:
    """
    Convert a human-readable token amount to USD with a raw oracle price

    Args:
        amount: Token amount (already in whole units)
        pyth_price: Raw oracle price scaled by 10^|decimals|
        pyth_decimals: Oracle exponent

    Returns:
        USD value (0 when no price is available)
    """
    if not pyth_price or pyth_decimals is None:
        return 0.0

    price = pyth_price / (10 ** abs(pyth_decimals))
    return amount * price


def _text(row, key: str, default: str) -> str:
    value = row.get(key)
    if value is None or (isinstance(value, float) and pd.isna(value)) or value == "":
        return default
    return str(value)


def _num(row, key: str, default: float = 0.0) -> float:
    value = row.get(key, default)
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return default
    return float(value)


class PositionLoader:
    """Normalizes raw margin-manager states into Position objects"""

    def __init__(self, pool_config: Optional[dict] = None):
        """
        Initialize position loader

        Args:
            pool_config: Pool config with risk_ratios.liquidation_risk_ratio
                         (9-decimal fixed point); 1.05 when missing
        """
        self.pool_config = pool_config or {}
        self.liquidation_threshold = self._liquidation_threshold(self.pool_config)

        logger.info(f"Initialized loader (liquidation threshold: {self.liquidation_threshold:.4f})")

    @staticmethod
    def _liquidation_threshold(pool_config: dict) -> float:
        raw = pool_config.get("risk_ratios", {}).get("liquidation_risk_ratio")
        if raw:
            return float(raw) / FLOAT_SCALING
        return DEFAULT_LIQUIDATION_THRESHOLD

    def load_positions(self, states: Union[pd.DataFrame, List[Dict]]) -> List[Position]:
        """
        Convert raw states into positions, most at risk first

        Records without debt are dropped; malformed records are logged and
        skipped.

        Args:
            states: DataFrame or list of dicts with base_asset, quote_asset,
                    base_debt, quote_debt and *_pyth_price / *_pyth_decimals

        Returns:
            List of Position objects sorted by current risk ratio
        """
        if isinstance(states, pd.DataFrame):
            records = states.to_dict("records")
        else:
            records = list(states)

        if not records:
            logger.warning("No margin manager states available")
            return []

        positions = []

        for row in records:
            try:
                base_debt = _num(row, "base_debt")
                quote_debt = _num(row, "quote_debt")

                if base_debt <= 0 and quote_debt <= 0:
                    continue

                base_price = _num(row, "base_pyth_price")
                base_decimals = int(_num(row, "base_pyth_decimals"))
                quote_price = _num(row, "quote_pyth_price")
                quote_decimals = int(_num(row, "quote_pyth_decimals"))

                position = Position(
                    position_id=str(row["margin_manager_id"]),
                    pool_id=_text(row, "deepbook_pool_id", ""),
                    base_asset_usd=pyth_price_to_usd(_num(row, "base_asset"), base_price, base_decimals),
                    quote_asset_usd=pyth_price_to_usd(_num(row, "quote_asset"), quote_price, quote_decimals),
                    base_debt_usd=pyth_price_to_usd(base_debt, base_price, base_decimals),
                    quote_debt_usd=pyth_price_to_usd(quote_debt, quote_price, quote_decimals),
                    liquidation_threshold=self.liquidation_threshold,
                    base_asset_symbol=_text(row, "base_asset_symbol", "BASE"),
                    quote_asset_symbol=_text(row, "quote_asset_symbol", "QUOTE"),
                    base_pyth_price=base_price,
                    base_pyth_decimals=base_decimals,
                )

                positions.append(position)

            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Error processing state for {row.get('margin_manager_id')}: {e}")
                continue

        positions.sort(key=lambda p: p.risk_ratio.as_float())

        logger.info(f"Loaded {len(positions)} positions")

        if positions:
            liquidatable = sum(1 for p in positions if p.is_liquidatable)
            logger.info(f"  Liquidatable positions: {liquidatable}/{len(positions)}")

        return positions

    @staticmethod
    def load_rate_config(raw: dict) -> InterestRateConfig:
        """
        Build an interest rate config from a pool's protocol config

        Args:
            raw: Dict with interest_config and margin_pool_config sections
                 (decimals), or a flat dict
        """
        interest = dict(raw.get("interest_config", raw))
        spread = raw.get("margin_pool_config", {}).get("protocol_spread", interest.get("protocol_spread", 0.0))
        interest["protocol_spread"] = spread
        return InterestRateConfig.from_dict(interest)


def save_snapshot(
    positions: List[Position],
    output_path: Union[str, Path],
    rate_config: Optional[InterestRateConfig] = None,
    pool_state: Optional[PoolState] = None,
):
    """
    Save normalized positions (and optional pool data) to JSON

    Args:
        positions: Positions to save
        output_path: Path to save JSON file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = {"positions": [p.to_dict() for p in positions]}
    if rate_config is not None:
        data["interest_rate_config"] = asdict(rate_config)
    if pool_state is not None:
        data["pool_state"] = {"supply": pool_state.supply, "borrow": pool_state.borrow}

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2, default=str)

    logger.info(f"Snapshot saved to {output_path}")


def load_snapshot(input_path: Union[str, Path]) -> dict:
    """
    Load a snapshot written by save_snapshot

    Args:
        input_path: Path to JSON file

    Returns:
        Dict with positions, interest_rate_config and pool_state (None when absent)
    """
    input_path = Path(input_path)

    with open(input_path, "r") as f:
        data = json.load(f)

    positions = [Position.from_dict(p) for p in data.get("positions", [])]

    rate_config = None
    if data.get("interest_rate_config"):
        rate_config = InterestRateConfig.from_dict(data["interest_rate_config"])

    pool_state = None
    if data.get("pool_state"):
        pool_state = PoolState(
            supply=float(data["pool_state"]["supply"]),
            borrow=float(data["pool_state"]["borrow"]),
        )

    logger.info(f"Snapshot loaded from {input_path} ({len(positions)} positions)")

    return {
        "positions": positions,
        "interest_rate_config": rate_config,
        "pool_state": pool_state,
    }
