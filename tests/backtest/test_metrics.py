"""
Backtest Statistics Tests

Usage:
    pytest tests/backtest/test_metrics.py -v
"""

import numpy as np
import pytest

from chartsignal.backtest.metrics import (
    calculate_stats,
    max_drawdown_amount,
    pair_round_trips,
    sharpe_ratio,
)
from chartsignal.backtest_config import EquityPoint, Trade, TradeSide


def _buy(date, price, shares=10):
    return Trade(date, TradeSide.BUY, price, shares, price * shares, "buy")


def _sell(date, price, shares=10):
    return Trade(date, TradeSide.SELL, price, shares, price * shares, "sell")


def _flat_equity(value, n=3):
    return [EquityPoint(f"2024-01-0{i + 1}", value, value, 0.0, 0.0) for i in range(n)]


class TestRoundTrips:
    """Test BUY/SELL pairing"""

    def test_pairs_in_order(self):
        trades = [_buy('2024-01-01', 10), _sell('2024-01-05', 12), _buy('2024-01-08', 11), _sell('2024-01-09', 10)]
        trips = pair_round_trips(trades)

        assert len(trips) == 2
        assert trips[0].profit == 20.0
        assert trips[0].return_pct == pytest.approx(20.0)
        assert trips[0].holding_days == 4
        assert trips[1].profit == -10.0

    def test_orphan_sell_ignored(self):
        assert pair_round_trips([_sell('2024-01-01', 10)]) == []

    def test_open_buy_not_counted(self):
        assert pair_round_trips([_buy('2024-01-01', 10)]) == []


class TestSharpeRatio:
    """Test Sharpe sentinels and annualization"""

    def test_too_few_points(self):
        assert sharpe_ratio([]) == 0.0
        assert sharpe_ratio([100.0]) == 0.0
        assert sharpe_ratio([100.0, 110.0]) == 0.0

    def test_constant_equity(self):
        assert sharpe_ratio([100.0] * 10) == 0.0

    def test_non_positive_equity_skipped(self):
        """Only the 100 -> 0 return survives, which is too few."""
        assert sharpe_ratio([100.0, 0.0, 50.0]) == 0.0

    def test_annualization(self):
        equity = [100.0, 110.0, 99.0, 108.9]
        returns = np.array([0.1, -0.1, 0.1])
        expected = returns.mean() / returns.std(ddof=1) * np.sqrt(252)

        assert sharpe_ratio(equity) == pytest.approx(expected)
        assert sharpe_ratio(equity, 52) == pytest.approx(expected * np.sqrt(52 / 252))


class TestMaxDrawdownAmount:
    """Test absolute drawdown"""

    def test_peak_to_trough(self):
        assert max_drawdown_amount([1000, 1500, 900, 1400], 1000) == 600.0

    def test_peak_starts_at_initial_capital(self):
        assert max_drawdown_amount([800, 900], 1000) == 200.0

    def test_empty(self):
        assert max_drawdown_amount([], 1000) == 0.0


class TestCalculateStats:
    """Test aggregate statistics and division sentinels"""

    def test_no_trades(self):
        stats = calculate_stats([], _flat_equity(1000), 1000, 1000)

        assert stats.num_trades == 0
        assert stats.win_rate == 0.0
        assert stats.profit_factor == 0.0
        assert stats.recovery_factor == 0.0
        assert stats.avg_holding_days == 0.0
        assert stats.sharpe_ratio == 0.0

    def test_breakeven_counts_as_loss(self):
        trades = [_buy('2024-01-01', 10), _sell('2024-01-02', 10)]
        stats = calculate_stats(trades, _flat_equity(1000), 1000, 1000)

        assert stats.num_trades == 1
        assert stats.num_losses == 1
        assert stats.num_wins == 0
        assert stats.win_rate == 0.0
        assert stats.profit_factor == 0.0

    def test_profit_factor(self):
        trades = [
            _buy('2024-01-01', 10), _sell('2024-01-02', 30),
            _buy('2024-01-03', 30), _sell('2024-01-04', 20),
        ]
        stats = calculate_stats(trades, _flat_equity(1000), 1000, 1100)

        assert stats.profit_factor == pytest.approx(2.0)
        assert stats.win_rate == 50.0
        assert stats.avg_win == 200.0
        assert stats.avg_loss == 100.0
        assert stats.max_trade_return_pct == pytest.approx(200.0)
        assert stats.total_return == 100.0
        assert stats.total_return_pct == pytest.approx(10.0)

    def test_only_winners(self):
        trades = [_buy('2024-01-01', 10), _sell('2024-01-02', 11)]
        stats = calculate_stats(trades, _flat_equity(1000), 1000, 1010)
        assert stats.profit_factor == float('inf')

    def test_holding_day_quartiles(self):
        trades = []
        for start, days in [(1, 1), (10, 2), (20, 3), (25, 4)]:
            trades.append(_buy(f'2024-01-{start:02d}', 10))
            trades.append(_sell(f'2024-01-{start + days:02d}', 11))
        stats = calculate_stats(trades, _flat_equity(1000), 1000, 1040)

        assert stats.holding_days_min == 1.0
        assert stats.holding_days_q1 == pytest.approx(1.75)
        assert stats.holding_days_median == pytest.approx(2.5)
        assert stats.holding_days_q3 == pytest.approx(3.25)
        assert stats.holding_days_max == 4.0
        assert stats.avg_holding_days == pytest.approx(2.5)

    def test_recovery_factor(self):
        equity = [
            EquityPoint('2024-01-01', 1000, 0, 1000, 0.0),
            EquityPoint('2024-01-02', 800, 0, 800, 0.2),
            EquityPoint('2024-01-03', 1200, 0, 1200, 0.0),
        ]
        stats = calculate_stats([], equity, 1000, 1200)

        assert stats.max_drawdown == 200.0
        assert stats.max_drawdown_pct == pytest.approx(20.0)
        assert stats.recovery_factor == pytest.approx(1.0)

    def test_to_dict(self):
        stats = calculate_stats([], _flat_equity(1000), 1000, 1000)
        data = stats.to_dict()

        assert data['num_trades'] == 0
        assert 'holding_days_median' in data
