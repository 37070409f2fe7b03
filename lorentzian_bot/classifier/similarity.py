"""
Similarity Metric
=================
Two measures between the current bar and a historical sample:

Lorentzian distance
    sum(log(1 + |a[d] - b[d]|)) over feature dimensions. Grows
    sub-linearly in each difference, so one spiking indicator cannot
    dominate the ranking the way it would under Euclidean distance.

Pattern similarity
    mean of 1 / (1 + |price[current - k] - price[sample - k]|) over the
    trailing window k = 0..window-1. 1.0 means an identical local price
    shape.
"""

import math
from typing import Sequence

from ..core.config import ConfigurationError
from ..core.constants import PATTERN_WINDOW
from .features import FeatureVector


def lorentzian_distance(a: FeatureVector, b: FeatureVector) -> float:
    """
    Lorentzian distance between two feature vectors.

    Raises:
        ConfigurationError: vectors of different dimension
    """
    if len(a) != len(b):
        raise ConfigurationError(
            f"Feature dimension mismatch: {len(a)} vs {len(b)}"
        )
    return sum(math.log1p(abs(x - y)) for x, y in zip(a, b))


def pattern_similarity(
    prices: Sequence[float],
    current_index: int,
    sample_index: int,
    window: int = PATTERN_WINDOW,
) -> float:
    """
    Local price-shape similarity between two bars.

    Offsets reaching before the first bar are skipped and the mean is taken
    over the offsets actually compared; 0.0 when none can be compared.
    """
    total = 0.0
    compared = 0
    for offset in range(window):
        current_pos = current_index - offset
        sample_pos = sample_index - offset
        if current_pos < 0 or sample_pos < 0:
            break
        diff = abs(float(prices[current_pos]) - float(prices[sample_pos]))
        if not math.isfinite(diff):
            continue
        total += 1.0 / (1.0 + diff)
        compared += 1

    if compared == 0:
        return 0.0
    return total / compared


class SimilarityMetric:
    """Distance plus pattern similarity with a fixed pattern window"""

    def __init__(self, pattern_window: int = PATTERN_WINDOW):
        if pattern_window < 1:
            raise ConfigurationError("Pattern window must be positive")
        self.pattern_window = pattern_window

    def distance(self, a: FeatureVector, b: FeatureVector) -> float:
        return lorentzian_distance(a, b)

    def pattern_similarity(
        self,
        prices: Sequence[float],
        current_index: int,
        sample_index: int,
    ) -> float:
        return pattern_similarity(prices, current_index, sample_index, self.pattern_window)
