# Classifier Module
# =================
# Nearest-neighbor regime classifier: features, sample store, metric,
# neighbor search, aggregation and gating

from .features import FeatureExtractor, FeatureVector, normalize_rsi, normalize_adx
from .labels import Label, resolve_label
from .sample_store import HistoricalSample, HistoricalSampleStore
from .similarity import SimilarityMetric, lorentzian_distance, pattern_similarity
from .neighbors import NeighborCandidate, NeighborSelector
from .aggregator import Probabilities, ProbabilityAggregator
from .gates import StabilityGate, SignalFilter
from .signal import TradeSignal, SignalDirection, CycleStatus
from .state import ClassifierState
from .engine import LorentzianClassifier, Evaluation

__all__ = [
    "FeatureExtractor",
    "FeatureVector",
    "normalize_rsi",
    "normalize_adx",
    "Label",
    "resolve_label",
    "HistoricalSample",
    "HistoricalSampleStore",
    "SimilarityMetric",
    "lorentzian_distance",
    "pattern_similarity",
    "NeighborCandidate",
    "NeighborSelector",
    "Probabilities",
    "ProbabilityAggregator",
    "StabilityGate",
    "SignalFilter",
    "TradeSignal",
    "SignalDirection",
    "CycleStatus",
    "ClassifierState",
    "LorentzianClassifier",
    "Evaluation",
]
