"""
Market sentiment: latest close against its 25-bar moving average.
"""

from typing import Optional

import pandas as pd

from ..indicators.common import round_price


SENTIMENT_WINDOW = 25
SENTIMENT_BAND_PCT = 1.0


def detect_market_sentiment(frame: pd.DataFrame) -> Optional[dict]:
    """
    Classify the latest bar as bullish, bearish or neutral.

    Args:
        frame: Price frame

    Returns:
        Dict with sentiment, price, ma25, diff, diff_pct (2 decimals), or
        None with fewer than 25 bars
    """
    if len(frame) < SENTIMENT_WINDOW:
        return None

    close = frame['close'].astype(float)
    price = float(close.iat[-1])
    ma25 = float(close.iloc[-SENTIMENT_WINDOW:].mean())
    diff = price - ma25
    diff_pct = diff / ma25 * 100

    if diff_pct > SENTIMENT_BAND_PCT:
        sentiment = 'bullish'
    elif diff_pct < -SENTIMENT_BAND_PCT:
        sentiment = 'bearish'
    else:
        sentiment = 'neutral'

    return {
        'sentiment': sentiment,
        'price': price,
        'ma25': float(round_price(ma25)),
        'diff': float(round_price(diff)),
        'diff_pct': float(round_price(diff_pct)),
    }
