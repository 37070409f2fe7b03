"""
Technical Indicators
====================
Indicator series consumed by the classifier (RSI, ADX, moving average,
standard deviation) plus the configurable price source.
"""

import numpy as np
import pandas as pd


def price_source_series(df: pd.DataFrame, source: str = "close") -> pd.Series:
    """
    Build the price series the classifier works on.

    Args:
        df: OHLCV DataFrame
        source: close, open, high, low, hl2, hlc3 or ohlc4

    Returns:
        Price series
    """
    if source in ("close", "open", "high", "low"):
        return df[source].astype(float)
    if source == "hl2":
        return (df["high"] + df["low"]) / 2
    if source == "hlc3":
        return (df["high"] + df["low"] + df["close"]) / 3
    if source == "ohlc4":
        return (df["open"] + df["high"] + df["low"] + df["close"]) / 4
    raise ValueError(f"Unknown price source: {source}")


def calculate_true_range(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
) -> pd.Series:
    """True Range = max(high-low, abs(high-prev_close), abs(low-prev_close))"""
    prev_close = close.shift(1)

    tr1 = high - low
    tr2 = (high - prev_close).abs()
    tr3 = (low - prev_close).abs()

    return pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)


def calculate_rsi(
    close: pd.Series,
    period: int = 14,
) -> pd.Series:
    """
    Calculate Relative Strength Index (RSI).

    RSI = 100 - (100 / (1 + RS))
    RS = Average Gain / Average Loss

    Args:
        close: Close prices
        period: Lookback period (default: 14)

    Returns:
        RSI series (0-100)
    """
    close = pd.Series(close, dtype=float)
    delta = close.diff()

    gain = delta.where(delta > 0, 0.0)
    loss = (-delta).where(delta < 0, 0.0)

    # Wilder's smoothing (same as EMA with alpha = 1/period)
    avg_gain = gain.ewm(alpha=1/period, min_periods=period, adjust=False).mean()
    avg_loss = loss.ewm(alpha=1/period, min_periods=period, adjust=False).mean()

    rs = avg_gain / avg_loss.replace(0, np.nan)
    rsi = 100 - (100 / (1 + rs))

    # No losses in the window: fully overbought; flat window: neutral
    rsi = rsi.where(~((avg_loss == 0) & (avg_gain > 0)), 100.0)
    rsi = rsi.where(~((avg_loss == 0) & (avg_gain == 0)), 50.0)

    return rsi


def calculate_adx(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    period: int = 14,
) -> pd.Series:
    """
    Calculate Average Directional Index (ADX) from Wilder's DMI.

    Args:
        high: High prices
        low: Low prices
        close: Close prices
        period: Lookback period (default: 14)

    Returns:
        ADX series (0-100)
    """
    high = pd.Series(high, dtype=float)
    low = pd.Series(low, dtype=float)
    close = pd.Series(close, dtype=float)

    up_move = high.diff()
    down_move = -low.diff()

    plus_dm = up_move.where((up_move > down_move) & (up_move > 0), 0.0)
    minus_dm = down_move.where((down_move > up_move) & (down_move > 0), 0.0)

    atr = calculate_true_range(high, low, close).ewm(
        alpha=1/period, min_periods=period, adjust=False
    ).mean()

    smoothed_plus = plus_dm.ewm(alpha=1/period, min_periods=period, adjust=False).mean()
    smoothed_minus = minus_dm.ewm(alpha=1/period, min_periods=period, adjust=False).mean()

    atr = atr.replace(0, np.nan)
    plus_di = 100 * smoothed_plus / atr
    minus_di = 100 * smoothed_minus / atr

    di_sum = (plus_di + minus_di).replace(0, np.nan)
    dx = 100 * (plus_di - minus_di).abs() / di_sum

    return dx.ewm(alpha=1/period, min_periods=period, adjust=False).mean()


def calculate_ema(
    close: pd.Series,
    period: int = 20,
) -> pd.Series:
    """
    Calculate Exponential Moving Average (EMA).

    Args:
        close: Close prices
        period: Lookback period

    Returns:
        EMA series
    """
    return pd.Series(close, dtype=float).ewm(span=period, adjust=False).mean()


def calculate_sma(
    close: pd.Series,
    period: int = 20,
) -> pd.Series:
    """
    Calculate Simple Moving Average (SMA).

    Args:
        close: Close prices
        period: Lookback period

    Returns:
        SMA series
    """
    return pd.Series(close, dtype=float).rolling(window=period).mean()


def calculate_wma(
    close: pd.Series,
    period: int = 20,
) -> pd.Series:
    """Linearly weighted moving average (latest bar weighs `period`)"""
    weights = np.arange(1, period + 1, dtype=float)
    return pd.Series(close, dtype=float).rolling(window=period).apply(
        lambda window: np.dot(window, weights) / weights.sum(), raw=True
    )


def calculate_moving_average(
    close: pd.Series,
    period: int = 200,
    ma_type: str = "exponential",
) -> pd.Series:
    """
    Dispatch to the configured moving average type.

    Args:
        close: Prices
        period: Lookback period
        ma_type: simple, exponential or weighted

    Returns:
        Moving average series
    """
    if ma_type == "simple":
        return calculate_sma(close, period)
    if ma_type == "exponential":
        return calculate_ema(close, period)
    if ma_type == "weighted":
        return calculate_wma(close, period)
    raise ValueError(f"Unknown moving average type: {ma_type}")


def calculate_std_dev(
    close: pd.Series,
    period: int = 20,
) -> pd.Series:
    """
    Rolling population standard deviation of prices.

    This is the volatility estimator used for the volatility feature,
    the label threshold and the stability gate.
    """
    return pd.Series(close, dtype=float).rolling(window=period).std(ddof=0)
