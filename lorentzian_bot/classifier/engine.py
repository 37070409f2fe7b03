"""
Lorentzian Classifier
=====================
Runs the per-bar cycle:

    FeatureUpdate -> LabelResolution -> NeighborSearch -> Aggregate
    -> StabilityCheck -> Filter -> TradeSignal

Each call takes a ClassifierState and returns a new one alongside the
signal; the input state is left untouched, so replaying the same bars
from the same state always yields the same signals.

Usage:
    classifier = LorentzianClassifier(ClassifierConfig.enhanced())
    state = classifier.initial_state()

    for index in range(len(source)):
        result = classifier.evaluate(state, source, index)
        state = result.state
        if result.signal.is_actionable:
            ...
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..core.config import ClassifierConfig, ConfigurationError
from ..data.market_data import IndicatorReadings, MarketDataSource
from .aggregator import ProbabilityAggregator
from .features import FeatureExtractor, FeatureVector
from .gates import SignalFilter, StabilityGate
from .labels import resolve_label
from .neighbors import NeighborSelector
from .signal import CycleStatus, SignalDirection, TradeSignal
from .similarity import SimilarityMetric
from .state import ClassifierState


logger = logging.getLogger("lorentzian_bot.classifier.engine")


@dataclass(frozen=True)
class Evaluation:
    """Signal for one bar plus the state to carry into the next"""
    signal: TradeSignal
    state: ClassifierState


class LorentzianClassifier:
    """
    Nearest-neighbor regime classifier.

    Args:
        config: Classifier configuration; validated here so a bad config
            fails before the first cycle
    """

    def __init__(self, config: ClassifierConfig):
        self.config = config.ensure_valid()

        self.extractor = FeatureExtractor(config.feature_set, config.volatility_window)
        self.metric = SimilarityMetric(config.pattern_window)
        self.selector = NeighborSelector(
            metric=self.metric,
            neighbors_count=config.neighbors_count,
            min_pattern_similarity=config.min_pattern_similarity,
            ranking_mode=config.ranking_mode,
        )
        self.aggregator = ProbabilityAggregator()
        self.stability_gate = StabilityGate(
            threshold=config.stability_threshold,
            enabled=config.use_stability_gate,
        )
        self.signal_filter = SignalFilter(
            trend_threshold=config.trend_threshold,
            min_adx=config.min_adx,
            long_rsi_band=config.long_rsi_band,
            short_rsi_band=config.short_rsi_band,
        )

    def initial_state(self) -> ClassifierState:
        return ClassifierState.initial(self.config)

    def _check_state(self, state: ClassifierState) -> None:
        if state.store.dimension != self.extractor.dimension:
            raise ConfigurationError(
                f"Feature dimension mismatch: extractor produces {self.extractor.dimension}, "
                f"stored samples have {state.store.dimension}"
            )

    def observe(
        self,
        state: ClassifierState,
        source: MarketDataSource,
        bar_index: int,
    ) -> Optional[Tuple[ClassifierState, FeatureVector, IndicatorReadings]]:
        """
        Feature update and label resolution for one bar, without search.

        Returns:
            (next_state, feature_vector, readings), or None when the
            indicators are still warming up at ``bar_index`` (the cycle
            is skipped and the state stays as it was)
        """
        self._check_state(state)

        readings = source.readings(bar_index)
        if not readings.is_complete:
            return None

        vector = self.extractor.extract(source, bar_index)

        store = state.store.copy()
        store.append(bar_index, vector)

        prices = source.prices()
        volatility = source.volatility_series()
        future_bars = self.config.future_bars
        sensitivity = self.config.label_sensitivity
        store.resolve_labels(
            bar_index,
            lambda i: resolve_label(prices, volatility, i, future_bars, sensitivity),
        )

        next_state = replace(
            state,
            store=store,
            last_volatility=readings.volatility,
            last_bar_index=bar_index,
            bars_observed=state.bars_observed + 1,
        )
        return next_state, vector, readings

    def warm_up(
        self,
        state: ClassifierState,
        source: MarketDataSource,
        end_index: int,
        start_index: Optional[int] = None,
    ) -> ClassifierState:
        """
        Feed bars [start_index, end_index) into the store without emitting
        signals. Used to backfill from history that predates the strategy.
        """
        if start_index is None:
            start_index = 0 if state.last_bar_index is None else state.last_bar_index + 1
        for index in range(start_index, end_index):
            observed = self.observe(state, source, index)
            if observed is not None:
                state = observed[0]
        logger.info(
            "Warm-up complete: %d samples stored (%d eligible)",
            len(state.store), state.store.eligible_count,
        )
        return state

    def evaluate(
        self,
        state: ClassifierState,
        source: MarketDataSource,
        bar_index: int,
    ) -> Evaluation:
        """
        Run one full cycle at ``bar_index``.

        Args:
            state: State after the previous bar
            source: Market data covering at least ``bar_index``
            bar_index: Bar to evaluate (newer than the last one observed)

        Returns:
            Evaluation with the bar's TradeSignal and the next state
        """
        observed = self.observe(state, source, bar_index)
        if observed is None:
            return Evaluation(
                TradeSignal.none(bar_index, CycleStatus.INSUFFICIENT_HISTORY, "Indicators warming up"),
                state,
            )
        next_state, vector, readings = observed

        required = self.config.effective_warmup_bars
        if bar_index + 1 < required:
            return Evaluation(
                TradeSignal.none(
                    bar_index,
                    CycleStatus.INSUFFICIENT_HISTORY,
                    f"{bar_index + 1}/{required} bars",
                ),
                next_state,
            )

        # Neighbor search runs on a snapshot of the store
        neighbors = self.selector.select(
            vector,
            bar_index,
            next_state.store.iterate(self.config.subsample_stride),
            source.prices(),
        )
        probabilities = self.aggregator.aggregate(neighbors)
        logger.debug(
            "Long Probability: %.4f, Short Probability: %.4f (%d neighbors)",
            probabilities.long, probabilities.short, len(neighbors),
        )

        if not neighbors:
            return Evaluation(
                TradeSignal.none(bar_index, CycleStatus.NO_NEIGHBORS, "No qualifying neighbors"),
                next_state,
            )

        def no_signal(status: CycleStatus, reason: str) -> Evaluation:
            return Evaluation(
                TradeSignal.none(
                    bar_index,
                    status,
                    reason,
                    long_probability=probabilities.long,
                    short_probability=probabilities.short,
                    neighbors=len(neighbors),
                ),
                next_state,
            )

        stable, change = self.stability_gate.check(state.last_volatility, readings.volatility)
        if not stable:
            return no_signal(CycleStatus.UNSTABLE, f"Volatility change {change:.4f}")

        direction = self.signal_filter.decide(probabilities, readings)
        if direction is SignalDirection.NONE:
            return no_signal(CycleStatus.FILTERED, "Thresholds or filters not met")

        return Evaluation(
            TradeSignal(
                direction=direction,
                long_probability=probabilities.long,
                short_probability=probabilities.short,
                bar_index=bar_index,
                status=CycleStatus.EMITTED,
                neighbors=len(neighbors),
            ),
            next_state,
        )
