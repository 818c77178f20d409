"""
Indicator Library Tests

Test suites for RSI, MACD, Bollinger Bands, ATR and the shared helpers.
"""
