"""
Post-hoc acceptance checks
==========================
StabilityGate
    Suppresses signals when volatility moved too abruptly since the
    previous bar. Store and labels still update when it fails.

SignalFilter
    Turns probabilities into LONG / SHORT / NONE, requiring trend
    strength (ADX) and an RSI reading inside the direction's band.
"""

import logging
import math
from typing import Optional, Tuple

from ..data.market_data import IndicatorReadings
from .aggregator import Probabilities
from .signal import SignalDirection


logger = logging.getLogger("lorentzian_bot.classifier.gates")


class StabilityGate:
    """
    relative_change = |current - previous| / previous

    A missing or zero previous reading counts as stable, so the gate
    passes on the very first evaluation.
    """

    def __init__(self, threshold: float = 0.15, enabled: bool = True):
        self.threshold = threshold
        self.enabled = enabled

    def relative_change(self, previous: Optional[float], current: float) -> float:
        if previous is None or previous == 0 or not math.isfinite(previous):
            return 0.0
        return abs(current - previous) / abs(previous)

    def check(self, previous: Optional[float], current: float) -> Tuple[bool, float]:
        """Returns (passed, relative_change)"""
        if not self.enabled:
            return True, 0.0
        if not math.isfinite(current):
            return False, float("inf")
        change = self.relative_change(previous, current)
        logger.debug("VolatilityChange: %.4f", change)
        return change < self.threshold, change


class SignalFilter:
    """
    Long:  long_probability > trend_threshold, ADX > min_adx,
           long_rsi_band[0] < RSI < long_rsi_band[1]
    Short: the same with short_probability and short_rsi_band

    When both sides qualify (only possible with trend_threshold < 0.5)
    LONG wins.
    """

    def __init__(
        self,
        trend_threshold: float,
        min_adx: float,
        long_rsi_band: Tuple[float, float],
        short_rsi_band: Tuple[float, float],
    ):
        self.trend_threshold = trend_threshold
        self.min_adx = min_adx
        self.long_rsi_band = long_rsi_band
        self.short_rsi_band = short_rsi_band

    def _corroborated(self, readings: IndicatorReadings, band: Tuple[float, float]) -> bool:
        adx_filter = readings.adx > self.min_adx
        rsi_filter = band[0] < readings.rsi < band[1]
        logger.debug(
            "ADXFilter: %s (ADX %.2f), RSIFilter: %s (RSI %.2f)",
            adx_filter, readings.adx, rsi_filter, readings.rsi,
        )
        return adx_filter and rsi_filter

    def decide(self, probabilities: Probabilities, readings: IndicatorReadings) -> SignalDirection:
        long_signal = (
            probabilities.long > self.trend_threshold
            and self._corroborated(readings, self.long_rsi_band)
        )
        if long_signal:
            return SignalDirection.LONG

        short_signal = (
            probabilities.short > self.trend_threshold
            and self._corroborated(readings, self.short_rsi_band)
        )
        if short_signal:
            return SignalDirection.SHORT

        return SignalDirection.NONE
