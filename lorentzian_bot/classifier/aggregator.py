"""Similarity-weighted vote of the neighbor set."""

from dataclasses import dataclass
from typing import Iterable

from .labels import Label
from .neighbors import NeighborCandidate


@dataclass(frozen=True)
class Probabilities:
    long: float = 0.0
    short: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.long == 0.0 and self.short == 0.0


class ProbabilityAggregator:
    """
    long  = sum(similarity | label UP)   / total
    short = sum(similarity | label DOWN) / total

    The two already sum to 1 whenever total > 0; an empty (or zero-weight)
    neighbor set gives (0, 0).
    """

    def aggregate(self, neighbors: Iterable[NeighborCandidate]) -> Probabilities:
        long_weight = 0.0
        short_weight = 0.0
        for neighbor in neighbors:
            if neighbor.label == Label.UP:
                long_weight += neighbor.similarity
            elif neighbor.label == Label.DOWN:
                short_weight += neighbor.similarity

        total = long_weight + short_weight
        if total <= 0:
            return Probabilities()
        return Probabilities(long=long_weight / total, short=short_weight / total)
