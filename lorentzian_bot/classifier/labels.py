"""
Forward-return labels for historical bars.

A bar is labelled by the return realized ``future_bars`` later, relative
to a volatility threshold at that bar: the same absolute move counts as
signal in a quiet market and as noise in a volatile one.
"""

import math
from enum import IntEnum
from typing import Sequence


class Label(IntEnum):
    UP = 1
    NEUTRAL = 0
    DOWN = -1


def resolve_label(
    prices: Sequence[float],
    volatility: Sequence[float],
    index: int,
    future_bars: int,
    sensitivity: float,
) -> Label:
    """
    Label for the bar at ``index``.

    price_change = (price[i + F] - price[i]) / price[i]
    threshold    = volatility[i] * sensitivity

    |price_change| < threshold -> NEUTRAL, otherwise its sign.
    Unusable inputs (zero or non-finite price, non-finite volatility)
    give NEUTRAL.
    """
    current = float(prices[index])
    future = float(prices[index + future_bars])
    vol = float(volatility[index])

    if current == 0 or not (math.isfinite(current) and math.isfinite(future) and math.isfinite(vol)):
        return Label.NEUTRAL

    price_change = (future - current) / current
    if abs(price_change) < vol * sensitivity:
        return Label.NEUTRAL
    if price_change > 0:
        return Label.UP
    if price_change < 0:
        return Label.DOWN
    return Label.NEUTRAL
