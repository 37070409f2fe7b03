# Utils Module
# ============
# Technical indicators

from .indicators import (
    price_source_series,
    calculate_true_range,
    calculate_rsi,
    calculate_adx,
    calculate_ema,
    calculate_sma,
    calculate_wma,
    calculate_moving_average,
    calculate_std_dev,
)

__all__ = [
    "price_source_series",
    "calculate_true_range",
    "calculate_rsi",
    "calculate_adx",
    "calculate_ema",
    "calculate_sma",
    "calculate_wma",
    "calculate_moving_average",
    "calculate_std_dev",
]
