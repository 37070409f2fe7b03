"""
Historical Sample Store
=======================
Bounded, chronologically ordered buffer of past feature vectors and their
forward-return labels.

- append() adds an unresolved sample for the newest bar
- resolve_labels() freezes labels once their horizon has elapsed
- iterate() lazily yields resolved samples from a snapshot, every
  ``stride``-th bar
- the oldest sample is evicted first once capacity is reached
"""

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Callable, Deque, Iterable, Iterator, Optional, Tuple

from ..core.config import ConfigurationError
from .features import FeatureVector
from .labels import Label


logger = logging.getLogger("lorentzian_bot.classifier.sample_store")


@dataclass(frozen=True)
class HistoricalSample:
    """Feature vector of one past bar plus its (eventually) resolved label"""
    feature_vector: FeatureVector
    bar_index: int
    label: Optional[Label] = None

    @property
    def is_resolved(self) -> bool:
        return self.label is not None

    @property
    def is_eligible(self) -> bool:
        """Only resolved, non-neutral samples may become neighbors"""
        return self.label is not None and self.label != Label.NEUTRAL


class HistoricalSampleStore:
    """
    FIFO store of HistoricalSample with a hard capacity.

    Samples are frozen; resolving a label swaps in a new instance. Since
    samples are appended in bar order and resolved by age, the unresolved
    ones always form a suffix of the buffer.
    """

    def __init__(
        self,
        capacity: int,
        future_bars: int,
        dimension: int,
        samples: Iterable[HistoricalSample] = (),
    ):
        if capacity < 1:
            raise ConfigurationError("Store capacity must be positive")
        if future_bars < 1:
            raise ConfigurationError("Future bars horizon must be positive")
        if dimension < 1:
            raise ConfigurationError("Feature dimension must be positive")

        self.capacity = capacity
        self.future_bars = future_bars
        self.dimension = dimension
        self._samples: Deque[HistoricalSample] = deque(samples, maxlen=capacity)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[HistoricalSample]:
        return iter(self.snapshot())

    @property
    def latest(self) -> Optional[HistoricalSample]:
        return self._samples[-1] if self._samples else None

    @property
    def resolved_count(self) -> int:
        return sum(1 for s in self._samples if s.is_resolved)

    @property
    def eligible_count(self) -> int:
        return sum(1 for s in self._samples if s.is_eligible)

    def append(self, bar_index: int, feature_vector: FeatureVector) -> HistoricalSample:
        """
        Add an unresolved sample for ``bar_index``.

        Raises:
            ConfigurationError: vector dimension differs from the store's
            ValueError: bar index not newer than the latest sample
        """
        vector = tuple(float(v) for v in feature_vector)
        if len(vector) != self.dimension:
            raise ConfigurationError(
                f"Feature dimension mismatch: store holds {self.dimension}, got {len(vector)}"
            )

        latest = self.latest
        if latest is not None and bar_index <= latest.bar_index:
            raise ValueError(
                f"Bar index {bar_index} is not newer than latest sample {latest.bar_index}"
            )

        if len(self._samples) == self.capacity:
            logger.debug("Evicting sample for bar %d", self._samples[0].bar_index)

        sample = HistoricalSample(feature_vector=vector, bar_index=bar_index)
        self._samples.append(sample)
        return sample

    def resolve_labels(
        self,
        current_bar_index: int,
        label_fn: Callable[[int], Label],
    ) -> int:
        """
        Resolve every sample whose horizon has elapsed.

        Args:
            current_bar_index: Newest bar index with known price
            label_fn: bar_index -> Label

        Returns:
            Number of samples resolved by this call
        """
        # Find the start of the unresolved suffix
        start = len(self._samples)
        while start > 0 and not self._samples[start - 1].is_resolved:
            start -= 1

        resolved = 0
        for position in range(start, len(self._samples)):
            sample = self._samples[position]
            if sample.bar_index + self.future_bars > current_bar_index:
                break
            self._samples[position] = replace(sample, label=label_fn(sample.bar_index))
            resolved += 1

        return resolved

    def snapshot(self) -> Tuple[HistoricalSample, ...]:
        """Immutable view of the current samples, oldest first"""
        return tuple(self._samples)

    def iterate(self, stride: int = 1) -> Iterator[HistoricalSample]:
        """
        Lazily yield resolved samples at every ``stride``-th bar.

        The snapshot is taken when iterate() is called, so later appends or
        evictions do not affect a running search. A stride above 1 trades
        recall for speed.
        """
        if stride < 1:
            raise ConfigurationError("Subsample stride must be positive")
        snapshot = self.snapshot()
        return (s for s in snapshot if s.is_resolved and s.bar_index % stride == 0)

    def copy(self) -> "HistoricalSampleStore":
        """Independent store holding the same (immutable) samples"""
        return HistoricalSampleStore(
            capacity=self.capacity,
            future_bars=self.future_bars,
            dimension=self.dimension,
            samples=self._samples,
        )
