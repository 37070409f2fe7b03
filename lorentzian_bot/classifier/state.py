"""Per-instrument classifier state carried from one bar to the next."""

from dataclasses import dataclass
from typing import Optional

from ..core.config import ClassifierConfig
from .sample_store import HistoricalSampleStore


@dataclass(frozen=True)
class ClassifierState:
    """
    Everything the classifier remembers between bars.

    Treated as a value: LorentzianClassifier never mutates a state it was
    given, it copies the store and returns a new ClassifierState.
    """
    store: HistoricalSampleStore
    last_volatility: Optional[float] = None
    last_bar_index: Optional[int] = None
    bars_observed: int = 0

    @classmethod
    def initial(cls, config: ClassifierConfig) -> "ClassifierState":
        return cls(
            store=HistoricalSampleStore(
                capacity=config.max_bars_back,
                future_bars=config.future_bars,
                dimension=config.feature_dimension,
            )
        )
