"""
Neighbor Selection
==================
Scans a snapshot of resolved samples, drops everything below the pattern
similarity floor and returns the top-K ranked candidates.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from ..core.config import ConfigurationError
from ..core.constants import RankingMode
from .features import FeatureVector
from .labels import Label
from .sample_store import HistoricalSample
from .similarity import SimilarityMetric


@dataclass(frozen=True)
class NeighborCandidate:
    """A scored historical sample, valid for one evaluation only"""
    bar_index: int
    distance: float
    similarity: float
    label: Label


def _similarity_key(candidate: NeighborCandidate):
    return (-candidate.similarity, candidate.distance, candidate.bar_index)


def _distance_key(candidate: NeighborCandidate):
    return (candidate.distance, candidate.bar_index)


class NeighborSelector:
    """
    Top-K neighbor search.

    RankingMode.SIMILARITY orders by similarity (desc) then distance (asc):
    shape-comparable bars first, feature closeness among them.
    RankingMode.DISTANCE orders by distance alone. Bar index is the last
    key in both, so equal scores always come out in the same order.
    """

    def __init__(
        self,
        metric: SimilarityMetric,
        neighbors_count: int,
        min_pattern_similarity: float = 0.0,
        ranking_mode: RankingMode = RankingMode.SIMILARITY,
    ):
        if neighbors_count < 1:
            raise ConfigurationError("Neighbors count must be at least 1")
        self.metric = metric
        self.neighbors_count = neighbors_count
        self.min_pattern_similarity = min_pattern_similarity
        self.ranking_mode = ranking_mode

    def candidates(
        self,
        current_vector: FeatureVector,
        current_index: int,
        samples: Iterable[HistoricalSample],
        prices: Sequence[float],
    ) -> List[NeighborCandidate]:
        """Score every eligible sample that clears the similarity floor"""
        scored = []
        for sample in samples:
            if not sample.is_eligible:
                continue
            similarity = self.metric.pattern_similarity(prices, current_index, sample.bar_index)
            if similarity < self.min_pattern_similarity:
                continue
            scored.append(NeighborCandidate(
                bar_index=sample.bar_index,
                distance=self.metric.distance(current_vector, sample.feature_vector),
                similarity=similarity,
                label=sample.label,
            ))
        return scored

    def rank(self, candidates: Iterable[NeighborCandidate]) -> List[NeighborCandidate]:
        key = _similarity_key if self.ranking_mode is RankingMode.SIMILARITY else _distance_key
        return sorted(candidates, key=key)

    def select(
        self,
        current_vector: FeatureVector,
        current_index: int,
        samples: Iterable[HistoricalSample],
        prices: Sequence[float],
    ) -> List[NeighborCandidate]:
        """
        The ``neighbors_count`` best candidates (fewer, possibly none, if
        not enough qualify).
        """
        ranked = self.rank(self.candidates(current_vector, current_index, samples, prices))
        return ranked[:self.neighbors_count]
