"""
Price Series Helpers

Purpose: Normalize caller-supplied bars into the DataFrame layout used by
every engine stage, and derive weekly bars from daily ones.

Frame Layout:
    RangeIndex (position == bar index)
    columns: date (ISO string), open, high, low, close, volume

The engine never fetches or caches data. Callers pass an ordered,
de-duplicated series; a frame that violates that contract raises
PriceDataError.
"""

from dataclasses import asdict, is_dataclass
from typing import Iterable, Mapping, Union

import pandas as pd
from loguru import logger

from .backtest_config import PriceBar
from .exceptions import PriceDataError


PRICE_COLUMNS = ['date', 'open', 'high', 'low', 'close', 'volume']

BarsLike = Union[pd.DataFrame, Iterable[Union[PriceBar, Mapping]]]


def to_frame(bars: BarsLike) -> pd.DataFrame:
    """
    Convert bars to the engine's price frame.

    Args:
        bars: DataFrame with OHLCV columns, or an iterable of PriceBar / dict

    Returns:
        New DataFrame with PRICE_COLUMNS and a RangeIndex

    Raises:
        PriceDataError: Missing columns or dates not strictly increasing
    """
    if isinstance(bars, pd.DataFrame):
        df = bars.copy()
    else:
        rows = [asdict(b) if is_dataclass(b) else dict(b) for b in bars]
        df = pd.DataFrame(rows, columns=PRICE_COLUMNS if not rows else None)

    df.columns = [str(c).lower() for c in df.columns]
    if 'date' not in df.columns and isinstance(df.index, pd.DatetimeIndex):
        df = df.rename_axis('date').reset_index()

    missing = [c for c in PRICE_COLUMNS if c not in df.columns]
    if missing:
        raise PriceDataError(f"Price data missing columns: {missing}")

    df = df[PRICE_COLUMNS].reset_index(drop=True)
    if df.empty:
        return df

    dates = pd.to_datetime(df['date'])
    if not dates.is_monotonic_increasing or dates.duplicated().any():
        raise PriceDataError("Price bars must be ordered oldest first with unique dates")

    df['date'] = dates.dt.strftime('%Y-%m-%d')
    for col in ['open', 'high', 'low', 'close']:
        df[col] = df[col].astype(float)
    df['volume'] = df['volume'].fillna(0).astype('int64')

    return df


def to_weekly(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Resample daily bars into weekly bars (weeks ending Friday).

    Each weekly bar takes the first open, highest high, lowest low, last
    close and summed volume of its sessions; its date is the last trading
    date of the week.

    Args:
        frame: Daily price frame (see to_frame)

    Returns:
        Weekly price frame with the same layout
    """
    df = to_frame(frame)
    if df.empty:
        return df

    indexed = df.set_index(pd.to_datetime(df['date']).rename(None))
    weekly = indexed.resample('W-FRI').agg({
        'date': 'last',
        'open': 'first',
        'high': 'max',
        'low': 'min',
        'close': 'last',
        'volume': 'sum',
    })
    weekly = weekly.dropna(subset=['close']).reset_index(drop=True)
    weekly['volume'] = weekly['volume'].astype('int64')

    logger.debug(f"Resampled {len(df)} daily bars into {len(weekly)} weekly bars")
    return weekly[PRICE_COLUMNS]
