"""
Backtest Tests

Test suites for the trade simulator and the statistics aggregation.
"""
