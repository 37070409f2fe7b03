"""
Feature Extraction
==================
Turns indicator readings at one bar into a fixed-dimension feature vector.

Normalization per slot:
- RSI, ADX:        value / 100 (source range already 0-100)
- PRICE_POSITION:  (price - ma) / ma, no clamp
- VOLATILITY:      volatility / max(volatility over the last W bars),
                   denominator floored at 1 when the max is <= 0

Degenerate denominators are replaced by 1 and any non-finite result by
0.0, so distance computation never sees NaN or inf.
"""

import math
from typing import Sequence, Tuple

import numpy as np

from ..core.config import ConfigurationError
from ..core.constants import FeatureKind, VOLATILITY_WINDOW
from ..data.market_data import IndicatorReadings, MarketDataSource


FeatureVector = Tuple[float, ...]


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _safe_denominator(value: float) -> float:
    return value if math.isfinite(value) and value != 0 else 1.0


def normalize_rsi(value: float) -> float:
    """RSI (0-100) -> 0-1"""
    return _finite_or_zero(value / 100.0)


def normalize_adx(value: float) -> float:
    """ADX (0-100) -> 0-1"""
    return _finite_or_zero(value / 100.0)


def price_position(price: float, ma: float) -> float:
    """Relative distance of price from its moving average"""
    if not math.isfinite(ma):
        return 0.0
    return _finite_or_zero((price - ma) / _safe_denominator(ma))


def normalize_volatility(value: float, rolling_max: float) -> float:
    """Volatility relative to its recent maximum"""
    denominator = rolling_max if math.isfinite(rolling_max) and rolling_max > 0 else 1.0
    return _finite_or_zero(value / denominator)


def rolling_max(series: np.ndarray, index: int, window: int) -> float:
    """Max of the finite values in series[index-window+1 : index+1] (NaN if none)"""
    start = max(0, index - window + 1)
    segment = series[start:index + 1]
    finite = segment[np.isfinite(segment)]
    if finite.size == 0:
        return float("nan")
    return float(finite.max())


class FeatureExtractor:
    """
    Builds a FeatureVector for one bar from a MarketDataSource.

    The extractor holds no state of its own: the rolling volatility max
    is read from the source each time, so the output is a pure function
    of recent history.
    """

    def __init__(
        self,
        feature_set: Sequence[FeatureKind],
        volatility_window: int = VOLATILITY_WINDOW,
    ):
        if not feature_set:
            raise ConfigurationError("Feature set must contain at least one feature")
        if volatility_window < 1:
            raise ConfigurationError("Volatility window must be positive")
        self.feature_set: Tuple[FeatureKind, ...] = tuple(feature_set)
        self.volatility_window = volatility_window

    @property
    def dimension(self) -> int:
        return len(self.feature_set)

    def extract(self, source: MarketDataSource, bar_index: int) -> FeatureVector:
        """
        Feature vector at ``bar_index``.

        Args:
            source: Market data with aligned indicator series
            bar_index: Absolute bar index

        Returns:
            Tuple of ``dimension`` floats
        """
        readings = source.readings(bar_index)
        return tuple(
            self._feature(kind, source, bar_index, readings)
            for kind in self.feature_set
        )

    def _feature(
        self,
        kind: FeatureKind,
        source: MarketDataSource,
        bar_index: int,
        readings: IndicatorReadings,
    ) -> float:
        if kind is FeatureKind.RSI:
            return normalize_rsi(readings.rsi)
        if kind is FeatureKind.ADX:
            return normalize_adx(readings.adx)
        if kind is FeatureKind.PRICE_POSITION:
            return price_position(source.price(bar_index), readings.ma)
        if kind is FeatureKind.VOLATILITY:
            recent_max = rolling_max(source.volatility_series(), bar_index, self.volatility_window)
            return normalize_volatility(readings.volatility, recent_max)
        raise ConfigurationError(f"Unsupported feature: {kind}")
