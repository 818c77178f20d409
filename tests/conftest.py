"""
Shared fixtures for chartsignal tests.

Price frames are built from close arrays; open/high/low default to the close
+/- 0.5 so tests only spell out the bars they care about.
"""

import numpy as np
import pandas as pd
import pytest


def build_frame(closes, opens=None, highs=None, lows=None, volumes=None,
                start='2024-01-01', freq='B'):
    """Build a price frame in the engine layout from per-bar arrays."""
    closes = np.asarray(closes, dtype=float)
    n = len(closes)
    dates = pd.date_range(start=start, periods=n, freq=freq)
    return pd.DataFrame({
        'date': dates.strftime('%Y-%m-%d'),
        'open': closes if opens is None else np.asarray(opens, dtype=float),
        'high': closes + 0.5 if highs is None else np.asarray(highs, dtype=float),
        'low': closes - 0.5 if lows is None else np.asarray(lows, dtype=float),
        'close': closes,
        'volume': np.full(n, 1000, dtype='int64') if volumes is None else np.asarray(volumes, dtype='int64'),
    })


def build_cup_frame(breakout_volume=5000):
    """
    Cup with handle: rims at bars 10 and 90 (high 100), bottom low 70 at
    bar 50, handle low 95 at bar 94, breakout close 101 at bar 99.
    """
    closes = (
        list(np.linspace(90, 99, 10))           # 0-9 lead-in
        + [99.5]                                # 10 left rim
        + list(np.linspace(98.5, 70.5, 40))     # 11-50 decline to the bottom
        + list(np.linspace(71.5, 98.5, 39))     # 51-89 recovery
        + [99.5]                                # 90 right rim
        + [98.5, 97.5, 96.5, 95.5]              # 91-94 handle pullback
        + [96.5, 97.5, 98.5, 99.0]              # 95-98 handle recovery
        + [101.0]                               # 99 breakout
    )
    closes = np.array(closes)
    opens = closes - 0.2
    opens[99] = 99.5
    lows = closes - 0.5
    lows[99] = 99.4
    volumes = np.full(len(closes), 1000)
    volumes[99] = breakout_volume
    return build_frame(closes, opens=opens, lows=lows, volumes=volumes)


@pytest.fixture
def make_frame():
    """Factory fixture: make_frame(closes, **columns) -> price frame"""
    return build_frame


@pytest.fixture
def random_walk_frame():
    """300 business days of a seeded random walk with OHLCV."""
    np.random.seed(42)
    n = 300
    returns = np.random.normal(0.0005, 0.02, n)
    closes = 100 * np.exp(np.cumsum(returns))
    opens = closes * (1 + np.random.normal(0, 0.005, n))
    highs = np.maximum(opens, closes) * (1 + np.abs(np.random.normal(0, 0.01, n)))
    lows = np.minimum(opens, closes) * (1 - np.abs(np.random.normal(0, 0.01, n)))
    volumes = np.random.randint(50_000, 150_000, n)
    return build_frame(closes, opens=opens, highs=highs, lows=lows, volumes=volumes)


@pytest.fixture
def cup_frame():
    """Cup-with-handle series with a volume-confirmed breakout on the last bar."""
    return build_cup_frame()
