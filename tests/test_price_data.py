"""
Unit Tests for Price Series Helpers and Engine Configuration

Tests:
- to_frame normalization from PriceBar lists, dicts and DataFrames
- Contract violations (missing columns, unordered dates)
- Weekly resampling
- CupHandleConfig validation and logging setup
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from chartsignal.backtest_config import CupHandleConfig, PriceBar
from chartsignal.config import configure_logging
from chartsignal.exceptions import PriceDataError
from chartsignal.price_data import PRICE_COLUMNS, to_frame, to_weekly


class TestToFrame:
    """Test price frame normalization"""

    def test_from_price_bars(self):
        bars = [
            PriceBar('2024-01-02', 10, 11, 9, 10.5, 100),
            PriceBar('2024-01-03', 10.5, 12, 10, 11.5, 200),
        ]
        frame = to_frame(bars)

        assert list(frame.columns) == PRICE_COLUMNS
        assert isinstance(frame.index, pd.RangeIndex)
        assert list(frame['date']) == ['2024-01-02', '2024-01-03']
        assert frame['close'].dtype == float
        assert list(frame['volume']) == [100, 200]

    def test_from_dicts_with_dates(self):
        rows = [
            {'date': date(2024, 1, 2), 'open': 1, 'high': 2, 'low': 0.5, 'close': 1.5, 'volume': 10},
            {'date': date(2024, 1, 3), 'open': 1.5, 'high': 2, 'low': 1, 'close': 1.8, 'volume': None},
        ]
        frame = to_frame(rows)

        assert list(frame['date']) == ['2024-01-02', '2024-01-03']
        assert list(frame['volume']) == [10, 0]

    def test_from_datetime_indexed_frame(self):
        index = pd.date_range('2024-01-01', periods=3, freq='B')
        df = pd.DataFrame({
            'Open': [1.0, 2.0, 3.0],
            'High': [1.5, 2.5, 3.5],
            'Low': [0.5, 1.5, 2.5],
            'Close': [1.2, 2.2, 3.2],
            'Volume': [1, 2, 3],
        }, index=index)
        frame = to_frame(df)

        assert list(frame.columns) == PRICE_COLUMNS
        assert frame['date'].iloc[0] == '2024-01-01'
        assert frame['close'].iloc[2] == 3.2

    def test_input_not_mutated(self, make_frame):
        original = make_frame([1.0, 2.0])
        original.index = [10, 11]
        frame = to_frame(original)

        assert list(frame.index) == [0, 1]
        assert list(original.index) == [10, 11]

    def test_empty(self):
        frame = to_frame([])
        assert frame.empty
        assert list(frame.columns) == PRICE_COLUMNS

    def test_missing_column(self, make_frame):
        with pytest.raises(PriceDataError, match="volume"):
            to_frame(make_frame([1.0, 2.0]).drop(columns=['volume']))

    def test_unsorted_dates(self, make_frame):
        frame = make_frame([1.0, 2.0, 3.0]).iloc[::-1]
        with pytest.raises(PriceDataError):
            to_frame(frame)

    def test_duplicate_dates(self, make_frame):
        frame = make_frame([1.0, 2.0])
        frame.loc[1, 'date'] = frame.loc[0, 'date']
        with pytest.raises(PriceDataError):
            to_frame(frame)


class TestToWeekly:
    """Test weekly resampling"""

    def test_two_weeks(self, make_frame):
        frame = make_frame(np.arange(1, 11, dtype=float))
        weekly = to_weekly(frame)

        assert list(weekly.columns) == PRICE_COLUMNS
        assert list(weekly['date']) == ['2024-01-05', '2024-01-12']
        assert list(weekly['open']) == [1.0, 6.0]
        assert list(weekly['high']) == [5.5, 10.5]
        assert list(weekly['low']) == [0.5, 5.5]
        assert list(weekly['close']) == [5.0, 10.0]
        assert list(weekly['volume']) == [5000, 5000]

    def test_partial_week_dated_by_last_session(self, make_frame):
        weekly = to_weekly(make_frame([1.0, 2.0, 3.0], start='2024-01-08'))

        assert list(weekly['date']) == ['2024-01-10']
        assert weekly['open'].iloc[0] == 1.0
        assert weekly['close'].iloc[0] == 3.0

    def test_empty_week_skipped(self, make_frame):
        first = make_frame([1.0, 2.0], start='2024-01-01')
        third = make_frame([3.0, 4.0], start='2024-01-15')
        weekly = to_weekly(pd.concat([first, third], ignore_index=True))

        assert list(weekly['date']) == ['2024-01-02', '2024-01-16']

    def test_empty(self):
        assert to_weekly(to_frame([])).empty


class TestConfiguration:
    """Test detector configuration and logging setup"""

    def test_cup_defaults(self):
        config = CupHandleConfig()
        assert config.cup_min_days == 15
        assert config.cup_max_days == 120
        assert config.breakout_volume_ratio == 1.5

    @pytest.mark.parametrize("kwargs", [
        {"cup_min_days": 130},
        {"cup_min_depth": 0.6},
        {"bottom_min_pos": 0.9},
        {"peak_window": 0},
    ])
    def test_cup_invalid(self, kwargs):
        with pytest.raises(ValueError):
            CupHandleConfig(**kwargs)

    def test_configure_logging(self):
        configure_logging("DEBUG")
        configure_logging()
