"""
Unit Tests for LorentzianClassifier

Test Coverage:
    - Trending series -> unanimous probabilities and LONG / SHORT signals
    - Flat series -> no eligible neighbors, never a signal
    - Identical bars are each other's nearest neighbor
    - Warm-up, stability gate and filter statuses
    - Replaying the same bars from the same state is deterministic
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from lorentzian_bot.core.config import ClassifierConfig, ConfigurationError
from lorentzian_bot.classifier.engine import LorentzianClassifier
from lorentzian_bot.classifier.labels import Label
from lorentzian_bot.classifier.neighbors import NeighborSelector
from lorentzian_bot.classifier.sample_store import HistoricalSampleStore
from lorentzian_bot.classifier.signal import CycleStatus, SignalDirection
from lorentzian_bot.classifier.similarity import SimilarityMetric
from lorentzian_bot.data.market_data import DataFrameMarketData


WARMUP = 20


def make_source(prices, rsi=60.0, adx=30.0, volatility=0.001):
    """Synthetic market data with constant indicator readings by default"""
    prices = np.asarray(prices, dtype=float)
    n = len(prices)
    return DataFrameMarketData(pd.DataFrame({
        "open": prices,
        "high": prices + 0.0002,
        "low": prices - 0.0002,
        "close": prices,
        "rsi": np.broadcast_to(rsi, n).astype(float),
        "adx": np.broadcast_to(adx, n).astype(float),
        "ma": prices * 0.999,
        "volatility": np.broadcast_to(volatility, n).astype(float),
    }))


def run_all(classifier, source, state=None):
    state = state or classifier.initial_state()
    signals = []
    for index in range(len(source)):
        result = classifier.evaluate(state, source, index)
        state = result.state
        signals.append(result.signal)
    return signals, state


# ==================== Fixtures ====================


@pytest.fixture
def config():
    return ClassifierConfig.enhanced(
        min_pattern_similarity=0.0,
        neighbors_count=10,
        max_bars_back=200,
        warmup_bars=WARMUP,
    )


@pytest.fixture
def classifier(config):
    return LorentzianClassifier(config)


@pytest.fixture
def rising():
    return make_source(1.0 + 0.001 * np.arange(80))


@pytest.fixture
def falling():
    return make_source(1.2 - 0.001 * np.arange(80))


@pytest.fixture
def flat():
    return make_source(np.full(80, 1.0))


# ==================== Trending Series ====================


class TestTrendingSeries:
    """Strictly monotonic prices with constant volatility"""

    def test_warmup_emits_nothing(self, classifier, rising):
        signals, _ = run_all(classifier, rising)

        for signal in signals[:WARMUP - 1]:
            assert signal.status is CycleStatus.INSUFFICIENT_HISTORY
            assert not signal.is_actionable

    def test_long_probability_converges(self, classifier, rising):
        signals, _ = run_all(classifier, rising)

        for signal in signals[WARMUP:]:
            assert signal.long_probability == pytest.approx(1.0)
            assert signal.short_probability == pytest.approx(0.0)

    def test_long_signals(self, classifier, rising):
        signals, _ = run_all(classifier, rising)

        for signal in signals[WARMUP:]:
            assert signal.direction is SignalDirection.LONG
            assert signal.status is CycleStatus.EMITTED
            assert 0 < signal.neighbors <= 10

    def test_short_signals(self, classifier, falling):
        signals, _ = run_all(classifier, falling)

        for signal in signals[WARMUP:]:
            assert signal.is_short
            assert signal.direction is SignalDirection.SHORT
            assert signal.short_probability == pytest.approx(1.0)

    def test_basic_variant(self, rising):
        classifier = LorentzianClassifier(
            ClassifierConfig.basic(max_bars_back=200, warmup_bars=WARMUP)
        )
        signals, _ = run_all(classifier, rising)

        assert all(s.is_long for s in signals[WARMUP + 5:])

    def test_probabilities_in_unit_range(self, classifier, rising):
        signals, _ = run_all(classifier, rising)

        for signal in signals:
            assert 0.0 <= signal.long_probability <= 1.0
            assert 0.0 <= signal.short_probability <= 1.0


# ==================== Flat Series ====================


class TestFlatSeries:
    """Constant prices: every label resolves neutral"""

    def test_never_signals(self, classifier, flat):
        signals, _ = run_all(classifier, flat)
        assert not any(s.is_actionable for s in signals)

    def test_no_neighbors_after_warmup(self, classifier, flat):
        signals, state = run_all(classifier, flat)

        for signal in signals[WARMUP:]:
            assert signal.status is CycleStatus.NO_NEIGHBORS
            assert signal.long_probability == 0.0
            assert signal.short_probability == 0.0

        assert state.store.resolved_count > 0
        assert state.store.eligible_count == 0


# ==================== Identical Bars ====================


class TestIdenticalBars:
    """Two bars with the same features and the same local price shape"""

    @pytest.fixture
    def setup(self):
        prices = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0] * 3
        store = HistoricalSampleStore(capacity=10, future_bars=1, dimension=2)
        store.append(5, (0.4, 0.6))
        store.append(9, (0.9, 0.1))
        store.append(12, (0.4, 0.6))
        store.resolve_labels(20, lambda i: Label.UP)
        selector = NeighborSelector(SimilarityMetric(5), neighbors_count=1)
        return prices, store, selector

    def test_mutual_nearest_neighbors(self, setup):
        prices, store, selector = setup
        samples = store.snapshot()

        from_12 = selector.select((0.4, 0.6), 12, [s for s in samples if s.bar_index != 12], prices)
        from_5 = selector.select((0.4, 0.6), 5, [s for s in samples if s.bar_index != 5], prices)

        assert [n.bar_index for n in from_12] == [5]
        assert [n.bar_index for n in from_5] == [12]

    def test_zero_distance_full_similarity(self, setup):
        prices, store, selector = setup
        neighbor = selector.select((0.4, 0.6), 12, [store.snapshot()[0]], prices)[0]

        assert neighbor.distance == 0.0
        assert neighbor.similarity == pytest.approx(1.0)


# ==================== Cycle Statuses ====================


class TestCycleStatus:
    """Where a cycle ends"""

    def test_incomplete_readings_skip_cycle(self, classifier):
        rsi = np.full(40, 60.0)
        rsi[:5] = np.nan
        source = make_source(1.0 + 0.001 * np.arange(40), rsi=rsi)

        state = classifier.initial_state()
        result = classifier.evaluate(state, source, 0)

        assert result.signal.status is CycleStatus.INSUFFICIENT_HISTORY
        assert result.state is state
        assert len(result.state.store) == 0

    def test_warmup_still_records(self, classifier, rising):
        state = classifier.initial_state()
        for index in range(5):
            state = classifier.evaluate(state, rising, index).state

        assert len(state.store) == 5
        assert state.last_bar_index == 4

    def test_filtered_by_rsi(self, classifier):
        source = make_source(1.0 + 0.001 * np.arange(60), rsi=90.0)
        signals, _ = run_all(classifier, source)

        for signal in signals[WARMUP:]:
            assert signal.status is CycleStatus.FILTERED
            assert signal.long_probability == pytest.approx(1.0)
            assert not signal.is_actionable

    def test_unstable_volatility(self, classifier):
        volatility = np.full(60, 0.001)
        volatility[30:] = 0.002
        source = make_source(1.0 + 0.001 * np.arange(60), volatility=volatility)
        signals, _ = run_all(classifier, source)

        assert signals[29].status is CycleStatus.EMITTED
        assert signals[30].status is CycleStatus.UNSTABLE
        assert not signals[30].is_actionable
        assert signals[31].status is CycleStatus.EMITTED

    def test_gate_disabled(self):
        volatility = np.full(60, 0.001)
        volatility[30:] = 0.002
        source = make_source(1.0 + 0.001 * np.arange(60), volatility=volatility)
        classifier = LorentzianClassifier(ClassifierConfig.enhanced(
            min_pattern_similarity=0.0, max_bars_back=200,
            warmup_bars=WARMUP, use_stability_gate=False,
        ))
        signals, _ = run_all(classifier, source)

        assert signals[30].status is CycleStatus.EMITTED


# ==================== Determinism ====================


class TestDeterminism:
    """Same bars from the same state give the same signals"""

    def test_replay_identical(self, classifier, rising):
        first, _ = run_all(classifier, rising)
        second, _ = run_all(classifier, rising)
        assert first == second

    def test_input_state_untouched(self, classifier, rising):
        state = classifier.warm_up(classifier.initial_state(), rising, 40)
        size, resolved = len(state.store), state.store.resolved_count

        a = classifier.evaluate(state, rising, 40)
        b = classifier.evaluate(state, rising, 40)

        assert a.signal == b.signal
        assert len(state.store) == size
        assert state.store.resolved_count == resolved
        assert len(a.state.store) == size + 1

    def test_warm_up_matches_evaluate(self, classifier, rising):
        warmed = classifier.warm_up(classifier.initial_state(), rising, 50)
        _, evaluated = run_all(classifier, make_source(1.0 + 0.001 * np.arange(50)))

        assert warmed.store.snapshot() == evaluated.store.snapshot()
        assert warmed.last_bar_index == 49


# ==================== Errors ====================


class TestErrors:
    """Configuration problems surface before the first cycle"""

    def test_missing_label_sensitivity(self):
        with pytest.raises(ConfigurationError):
            LorentzianClassifier(ClassifierConfig())

    def test_state_dimension_mismatch(self, classifier, rising):
        basic = LorentzianClassifier(ClassifierConfig.basic())
        with pytest.raises(ConfigurationError):
            classifier.evaluate(basic.initial_state(), rising, 0)
