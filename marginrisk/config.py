"""Engine configuration loaded from config/engine.yaml"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "engine.yaml"
CONFIG_ENV_VAR = "MARGINRISK_CONFIG"


@dataclass(frozen=True)
class EngineConfig:
    """Tunable constants of the risk engine"""

    # Stress curve sweep (percent)
    sweep_start_pct: float = -50.0
    sweep_stop_pct: float = 20.0
    sweep_step_pct: float = 2.0

    # Cliff detection
    cliff_min_multiplier: float = 2.0
    cliff_min_debt_usd: float = 100.0

    # First liquidation solver
    exposure_epsilon_usd: float = 0.01

    # Per-position shock impact (WATCH below this buffer)
    watch_impact_buffer_pct: float = 15.0

    # Status buckets (buffer above liquidation threshold, percent)
    critical_buffer_pct: float = 10.0
    watch_buffer_pct: float = 30.0

    # Ratio band edges for the ratio histogram
    ratio_band_edges: tuple = (1.05, 1.10, 1.20, 1.50)

    # Positions within this fraction above the threshold count as at risk
    at_risk_buffer: float = 0.20

    # Earnings projection
    simple_interest_max_days: int = 30
    pessimistic_utilization_factor: float = 0.5
    min_pessimistic_utilization: float = 0.01
    pessimistic_apy_cap: float = 0.8

    cache_max_entries: int = 128

    extra: dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.sweep_step_pct <= 0:
            raise ValueError(f"sweep_step_pct must be positive, got {self.sweep_step_pct}")
        if self.sweep_start_pct > self.sweep_stop_pct:
            raise ValueError(
                f"sweep_start_pct ({self.sweep_start_pct}) must not exceed "
                f"sweep_stop_pct ({self.sweep_stop_pct})"
            )
        if self.cliff_min_multiplier <= 0:
            raise ValueError(f"cliff_min_multiplier must be positive, got {self.cliff_min_multiplier}")
        if not 0 <= self.critical_buffer_pct <= self.watch_buffer_pct:
            raise ValueError(
                f"Bucket buffers must satisfy 0 <= critical ({self.critical_buffer_pct}) "
                f"<= watch ({self.watch_buffer_pct})"
            )
        edges = list(self.ratio_band_edges)
        if not edges or edges != sorted(edges) or len(set(edges)) != len(edges):
            raise ValueError(f"ratio_band_edges must be strictly increasing, got {edges}")

    @classmethod
    def from_dict(cls, data: dict) -> "EngineConfig":
        """Build a config from a mapping, keeping unknown keys in `extra`"""
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "ratio_band_edges" in kwargs:
            kwargs["ratio_band_edges"] = tuple(kwargs["ratio_band_edges"])

        unknown = {k: v for k, v in data.items() if k not in known}
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")

        return cls(extra=unknown, **kwargs)


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """
    Load engine configuration from YAML

    Args:
        path: Config file path. Defaults to $MARGINRISK_CONFIG, then
              config/engine.yaml

    Returns:
        EngineConfig (defaults when no file is found)
    """
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH

    path = Path(path)

    if not path.exists():
        logger.warning(f"Engine config not found: {path}, using defaults")
        return EngineConfig()

    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}

    config = EngineConfig.from_dict(raw.get("engine", raw))
    logger.info(f"Loaded engine config from {path}")

    return config
