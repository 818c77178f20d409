"""
Engine Configuration

Environment-driven defaults for the chartsignal engine. Values are read once
at import time after loading a local .env file (if present).

Environment Variables:
    CHARTSIGNAL_INITIAL_CAPITAL: Default backtest capital (default: 1,000,000)
    CHARTSIGNAL_PERIODS_PER_YEAR: Sharpe annualization factor (default: 252)
    CHARTSIGNAL_FIXED_AMOUNT: Default per-signal budget for fixed-amount runs (default: 100,000)
    CHARTSIGNAL_PRESETS_FILE: Override path for the optimized preset table
    CHARTSIGNAL_LOG_LEVEL: Level used by configure_logging() (default: INFO)
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key}={value!r}, using {default}")
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {key}={value!r}, using {default}")
        return default


def _env_str(key: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(key)
    return value if value not in (None, "") else default


@dataclass(frozen=True)
class EngineSettings:
    """Process-wide defaults resolved from the environment."""

    initial_capital: float = _env_float("CHARTSIGNAL_INITIAL_CAPITAL", 1_000_000.0)
    periods_per_year: int = _env_int("CHARTSIGNAL_PERIODS_PER_YEAR", 252)
    fixed_amount: float = _env_float("CHARTSIGNAL_FIXED_AMOUNT", 100_000.0)
    presets_file: Optional[str] = _env_str("CHARTSIGNAL_PRESETS_FILE", None)
    log_level: str = _env_str("CHARTSIGNAL_LOG_LEVEL", "INFO")


SETTINGS = EngineSettings()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install a single stdout sink with the project log format.

    The engine never touches loguru sinks on import; applications and scripts
    call this once at startup.

    Args:
        level: Minimum log level (default: CHARTSIGNAL_LOG_LEVEL)
    """
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level or SETTINGS.log_level,
    )
