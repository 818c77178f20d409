"""
Optimized Parameter Presets

Purpose: Serve previously grid-searched strategy parameters from a static,
versioned YAML table keyed by (strategy, sampling period).

Key Features:
- Loaded once with yaml.safe_load and validated against the strategy registry
- DEFAULT mode, or a missing preset, falls back to the strategy defaults
- Presets are merged over the defaults, so a preset may list a subset of keys
- Search statistics (win rate, return, trades) are informational only

Usage:
    from chartsignal.presets import PresetMode, SamplingPeriod, default_store

    params = default_store().get_params("macd_signal", PresetMode.OPTIMIZED, SamplingPeriod.WEEKLY)
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import yaml
from loguru import logger

from .config import SETTINGS
from .exceptions import PresetValidationError
from .strategies.base import StrategyId
from .strategies.registry import get_strategy


DEFAULT_PRESETS_FILE = Path(__file__).parent / 'data' / 'optimized_presets.yaml'


class PresetMode(str, Enum):
    """Which parameter set to use."""

    DEFAULT = "default"
    OPTIMIZED = "optimized"


class SamplingPeriod(str, Enum):
    """Bar sampling period a preset was searched on."""

    DAILY = "daily"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class OptimizedPreset:
    """
    Searched parameters for one strategy and period.

    Attributes:
        strategy_id: Strategy the preset belongs to
        period: Sampling period
        params: Parameter overrides
        win_rate: Win rate observed during the search (%)
        total_return_pct: Return observed during the search (%)
        trades: Trades observed during the search
    """

    strategy_id: StrategyId
    period: SamplingPeriod
    params: Dict[str, float] = field(default_factory=dict)
    win_rate: float = 0.0
    total_return_pct: float = 0.0
    trades: int = 0


class PresetStore:
    """
    Read-only table of optimized presets.

    Attributes:
        path: Source YAML file
        version: Table version from the file
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Load and validate a preset table.

        Args:
            path: YAML file (default: packaged optimized_presets.yaml)

        Raises:
            FileNotFoundError: File does not exist
            PresetValidationError: Malformed YAML, unknown strategy id or
                parameter key, or unknown period
        """
        self.path = Path(path) if path is not None else DEFAULT_PRESETS_FILE
        self.version: int = 0
        self._presets: Dict[Tuple[StrategyId, SamplingPeriod], OptimizedPreset] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            raise FileNotFoundError(f"Preset file not found: {self.path}")

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PresetValidationError(f"YAML parsing error: {e}")

        if not isinstance(config, dict) or 'presets' not in config:
            raise PresetValidationError("Preset file missing 'presets' section")

        self.version = int(config.get('version', 0))
        for strategy_key, periods in (config['presets'] or {}).items():
            for period_key, entry in (periods or {}).items():
                preset = self._parse_entry(strategy_key, period_key, entry)
                self._presets[(preset.strategy_id, preset.period)] = preset

        logger.info(f"Loaded {len(self._presets)} presets (version {self.version}) from {self.path.name}")

    def _parse_entry(self, strategy_key: str, period_key: str, entry: dict) -> OptimizedPreset:
        try:
            strategy_id = StrategyId(strategy_key)
        except ValueError:
            raise PresetValidationError(f"Unknown strategy in presets: {strategy_key!r}") from None
        try:
            period = SamplingPeriod(period_key)
        except ValueError:
            raise PresetValidationError(
                f"Unknown period {period_key!r} for {strategy_key} (expected daily or weekly)"
            ) from None

        if not isinstance(entry, dict):
            raise PresetValidationError(f"Preset {strategy_key}/{period_key} must be a mapping")

        params = dict(entry.get('params') or {})
        schema = set(get_strategy(strategy_id).default_params())
        unknown = sorted(set(params) - schema)
        if unknown:
            raise PresetValidationError(
                f"Preset {strategy_key}/{period_key} has unknown parameters: {unknown}"
            )

        return OptimizedPreset(
            strategy_id=strategy_id,
            period=period,
            params=params,
            win_rate=float(entry.get('win_rate', 0)),
            total_return_pct=float(entry.get('total_return_pct', 0)),
            trades=int(entry.get('trades', 0)),
        )

    def get_preset(
        self,
        strategy_id: Union[StrategyId, str],
        period: Union[SamplingPeriod, str],
    ) -> Optional[OptimizedPreset]:
        """
        Preset for a strategy and period.

        Args:
            strategy_id: Strategy identifier
            period: Sampling period

        Returns:
            OptimizedPreset, or None when the table has no entry
        """
        return self._presets.get((get_strategy(strategy_id).id, SamplingPeriod(period)))

    def get_params(
        self,
        strategy_id: Union[StrategyId, str],
        mode: Union[PresetMode, str] = PresetMode.OPTIMIZED,
        period: Union[SamplingPeriod, str] = SamplingPeriod.DAILY,
    ) -> Dict[str, float]:
        """
        Complete parameter set for a run.

        Args:
            strategy_id: Strategy identifier
            mode: DEFAULT for schema defaults, OPTIMIZED for the preset
            period: Sampling period of the preset

        Returns:
            Preset parameters merged over the strategy defaults

        Raises:
            UnknownStrategyError: Strategy is not registered
        """
        strategy = get_strategy(strategy_id)
        if PresetMode(mode) is PresetMode.DEFAULT:
            return strategy.default_params()

        preset = self.get_preset(strategy.id, period)
        if preset is None:
            if strategy.params:
                logger.warning(
                    f"No {SamplingPeriod(period).value} preset for {strategy.id.value}, using defaults"
                )
            return strategy.default_params()

        return strategy.resolve_params(preset.params)

    def __len__(self) -> int:
        return len(self._presets)


@lru_cache(maxsize=1)
def default_store() -> PresetStore:
    """Process-wide preset table (CHARTSIGNAL_PRESETS_FILE overrides the packaged file)"""
    return PresetStore(SETTINGS.presets_file)
