"""
Backtest Simulator Tests

Test suite for the position tracker, action-stream execution and the
run_backtest entry point.

Test Categories:
1. Unit Tests: PositionTracker cash/share bookkeeping
2. Execution Tests: all-in/out and fixed-amount modes on hand-built streams
3. Integration Tests: run_backtest with registered strategies

Usage:
    pytest tests/backtest/test_simulator.py -v
"""

import numpy as np
import pandas as pd
import pytest

from chartsignal.backtest import PositionTracker, run_backtest, simulate
from chartsignal.backtest_config import BacktestConfig, TradeSide
from chartsignal.exceptions import InvalidParameterError, UnknownStrategyError
from chartsignal.strategies import Action, ExecutionMode, get_strategy


B, S, H = Action.BUY, Action.SELL, Action.HOLD


class TestPositionTracker:
    """Test suite for PositionTracker"""

    @pytest.fixture
    def tracker(self):
        """Tracker with 1,000 cash"""
        return PositionTracker(initial_capital=1000)

    def test_initialization(self, tracker):
        assert tracker.cash == 1000
        assert tracker.shares == 0
        assert tracker.peak_equity == 1000
        assert tracker.trades == []

    def test_buy_whole_shares(self, tracker):
        trade = tracker.buy('2024-01-01', 30.0, tracker.cash, "test")

        assert trade.shares == 33
        assert trade.value == 990.0
        assert tracker.cash == pytest.approx(10.0)
        assert tracker.shares == 33

    def test_buy_unaffordable(self, tracker):
        assert tracker.buy('2024-01-01', 2000.0, tracker.cash, "test") is None
        assert tracker.trades == []
        assert tracker.cash == 1000

    def test_buy_capped_by_cash(self, tracker):
        """Budget above cash spends at most the cash."""
        trade = tracker.buy('2024-01-01', 100.0, 5000, "test")
        assert trade.shares == 10
        assert tracker.cash == 0

    def test_sell_all(self, tracker):
        tracker.buy('2024-01-01', 10.0, tracker.cash, "test")
        trade = tracker.sell_all('2024-01-02', 12.0, "test")

        assert trade.side is TradeSide.SELL
        assert trade.shares == 100
        assert trade.value == 1200.0
        assert tracker.cash == 1200.0
        assert tracker.shares == 0

    def test_sell_while_flat(self, tracker):
        assert tracker.sell_all('2024-01-01', 10.0, "test") is None

    def test_mark_tracks_drawdown(self, tracker):
        tracker.buy('2024-01-01', 10.0, tracker.cash, "test")
        tracker.mark('2024-01-01', 10.0)
        tracker.mark('2024-01-02', 20.0)
        point = tracker.mark('2024-01-03', 15.0)

        assert point.equity == 1500.0
        assert point.position == 1500.0
        assert point.cash == 0.0
        assert point.drawdown == pytest.approx(0.25)
        assert tracker.peak_equity == 2000.0


class TestSimulateAllInOut:
    """Test all-in/all-out execution"""

    def test_round_trip(self, make_frame):
        """Repeated BUY and SELL signals are no-ops once acted on."""
        frame = make_frame([10, 10, 12, 11, 15])
        result = simulate(frame, pd.Series([B, B, S, S, H]), initial_capital=1000)

        assert [t.side for t in result.trades] == [TradeSide.BUY, TradeSide.SELL]
        assert result.trades[0].shares == 100
        assert result.trades[0].reason == "Signal: buy"
        assert result.trades[1].reason == "Signal: sell"
        assert result.final_equity == 1200.0
        assert result.total_profit == 200.0

        stats = result.stats
        assert stats.num_trades == 1
        assert stats.num_wins == 1
        assert stats.win_rate == 100.0
        assert stats.profit_factor == float('inf')
        assert stats.total_return == 200.0
        assert stats.total_return_pct == pytest.approx(20.0)
        assert stats.max_drawdown == 0.0
        assert stats.avg_holding_days == 2.0
        assert stats.sharpe_ratio == pytest.approx(0.5 * np.sqrt(252))

    def test_one_equity_point_per_bar(self, make_frame):
        frame = make_frame([10, 10, 12, 11, 15])
        result = simulate(frame, pd.Series([B, H, H, S, H]), initial_capital=1000)

        assert len(result.equity) == 5
        assert [p.date for p in result.equity] == list(frame['date'])
        assert [p.equity for p in result.equity] == [1000.0, 1000.0, 1200.0, 1100.0, 1100.0]

    def test_drawdown(self, make_frame):
        result = simulate(make_frame([10, 20, 10]), pd.Series([B, H, H]), initial_capital=1000)

        assert result.stats.max_drawdown_pct == pytest.approx(50.0)
        assert result.stats.max_drawdown == 1000.0
        assert result.stats.avg_drawdown_pct == pytest.approx(50.0 / 3)

    def test_insufficient_cash_skips_buy(self, make_frame):
        result = simulate(make_frame([10, 11]), pd.Series([B, S]), initial_capital=5)

        assert result.trades == []
        assert result.final_equity == 5

    def test_open_position_marked_at_last_close(self, make_frame):
        result = simulate(make_frame([10, 15]), pd.Series([B, H]), initial_capital=1000)

        assert result.final_equity == 1500.0
        assert result.stats.num_trades == 0

    def test_length_mismatch(self, make_frame):
        with pytest.raises(ValueError):
            simulate(make_frame([10, 11, 12]), pd.Series([B, S]))

    def test_cash_plus_position_equals_equity(self, random_walk_frame):
        actions = get_strategy("ma_cross").run(random_walk_frame)
        result = simulate(random_walk_frame, actions, initial_capital=1_000_000)

        for point in result.equity:
            assert point.cash + point.position == pytest.approx(point.equity)
            assert point.cash >= 0

    def test_ledger_alternates(self, random_walk_frame):
        actions = get_strategy("macd_signal").run(random_walk_frame)
        result = simulate(random_walk_frame, actions, initial_capital=1_000_000)

        sides = [t.side for t in result.trades]
        assert sides[::2] == [TradeSide.BUY] * len(sides[::2])
        assert sides[1::2] == [TradeSide.SELL] * len(sides[1::2])


class TestSimulateFixedAmount:
    """Test fixed-amount execution"""

    def test_buys_until_cash_runs_out(self, make_frame):
        result = simulate(
            make_frame([10, 10, 10]),
            pd.Series([B, B, B]),
            mode=ExecutionMode.FIXED_AMOUNT,
            initial_capital=25,
            fixed_amount=10,
        )

        assert [t.shares for t in result.trades] == [1, 1]
        assert all(t.side is TradeSide.BUY for t in result.trades)
        assert all(t.reason == "Fixed-amount purchase" for t in result.trades)
        assert result.equity[-1].cash == 5
        assert result.final_equity == 25

    def test_remaining_cash_below_amount(self, make_frame):
        result = simulate(
            make_frame([10, 10]),
            pd.Series([B, B]),
            mode="fixed_amount",
            initial_capital=35,
            fixed_amount=20,
        )
        assert [t.shares for t in result.trades] == [2, 1]

    def test_sells_ignored(self, make_frame):
        result = simulate(
            make_frame([10, 12]),
            pd.Series([B, S]),
            mode=ExecutionMode.FIXED_AMOUNT,
            initial_capital=100,
            fixed_amount=50,
        )
        assert len(result.trades) == 1
        assert result.final_equity == 110.0


class TestRunBacktest:
    """Test run_backtest"""

    def test_dca_monthly_purchases(self, make_frame):
        n = len(pd.bdate_range('2023-01-02', '2024-01-31'))
        frame = make_frame(np.full(n, 100.0), start='2023-01-02')

        result = run_backtest(frame, "dca", initial_capital=2_000_000)

        assert len(result.trades) == 13
        assert all(t.shares == 1000 for t in result.trades)
        assert result.equity[-1].cash == 700_000
        assert result.final_equity == 2_000_000

    def test_dca_amount_from_params(self, make_frame):
        frame = make_frame([100.0, 100.0], start='2024-01-31')
        result = run_backtest(frame, "dca", {"monthly_amount": 5000}, initial_capital=100_000)

        assert [t.shares for t in result.trades] == [50, 50]

    def test_empty_frame(self, make_frame):
        frame = make_frame([1.0]).iloc[:0]
        result = run_backtest(frame, "ma_cross", initial_capital=1000)

        assert result.trades == []
        assert result.equity == []
        assert result.final_equity == 1000
        assert result.stats.num_trades == 0
        assert result.stats.sharpe_ratio == 0.0
        assert result.stats.max_drawdown == 0
        assert result.stats.max_drawdown_pct == 0

    def test_unknown_strategy(self, random_walk_frame):
        with pytest.raises(UnknownStrategyError):
            run_backtest(random_walk_frame, "moon_phase")

    def test_unknown_parameter(self, random_walk_frame):
        with pytest.raises(InvalidParameterError):
            run_backtest(random_walk_frame, "ma_cross", {"window": 3})

    def test_accepts_strategy_def(self, random_walk_frame):
        by_def = run_backtest(random_walk_frame, get_strategy("rsi_reversal"))
        by_id = run_backtest(random_walk_frame, "rsi_reversal")

        assert by_def.final_equity == by_id.final_equity
        assert by_def.trades == by_id.trades

    def test_default_capital_from_config(self, random_walk_frame):
        config = BacktestConfig(initial_capital=50_000)
        result = run_backtest(random_walk_frame, "dip_buy", config=config)

        assert result.initial_capital == 50_000
        assert result.equity[0].equity == pytest.approx(50_000)

    def test_periods_per_year_scales_sharpe(self, random_walk_frame):
        daily = run_backtest(random_walk_frame, "ma_cross")
        weekly = run_backtest(random_walk_frame, "ma_cross", config=BacktestConfig(periods_per_year=52))

        if daily.stats.sharpe_ratio != 0:
            ratio = weekly.stats.sharpe_ratio / daily.stats.sharpe_ratio
            assert ratio == pytest.approx(np.sqrt(52 / 252))

    def test_frames(self, make_frame):
        result = simulate(make_frame([10, 12]), pd.Series([B, S]), initial_capital=1000)

        trades = result.trades_frame()
        assert list(trades['side']) == ['buy', 'sell']
        equity = result.equity_frame()
        assert list(equity.columns) == ['equity', 'cash', 'position', 'drawdown']
        assert equity.index.name == 'date'


class TestBacktestConfig:
    """Test configuration validation"""

    def test_defaults(self):
        config = BacktestConfig()
        assert config.initial_capital > 0
        assert config.periods_per_year > 0

    @pytest.mark.parametrize("kwargs", [
        {"initial_capital": -1},
        {"fixed_amount": 0},
        {"periods_per_year": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            BacktestConfig(**kwargs)
