"""
Unit Tests for HistoricalSampleStore

Test Coverage:
    - FIFO eviction at capacity
    - Label resolution once the horizon has elapsed
    - Stride subsampling and snapshot isolation
    - Dimension and ordering errors
"""

import sys
from pathlib import Path

import pytest

# Add project root
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from lorentzian_bot.core.config import ConfigurationError
from lorentzian_bot.classifier.labels import Label
from lorentzian_bot.classifier.sample_store import HistoricalSample, HistoricalSampleStore


# ==================== Fixtures ====================


@pytest.fixture
def store():
    """Capacity 5, horizon 2, two features"""
    return HistoricalSampleStore(capacity=5, future_bars=2, dimension=2)


def fill(store, indices):
    for i in indices:
        store.append(i, (0.1 * i, 0.5))


def alternating(bar_index):
    return Label.UP if bar_index % 2 == 0 else Label.DOWN


# ==================== Append / Eviction ====================


class TestAppend:
    """Appending samples"""

    def test_new_sample_unresolved(self, store):
        sample = store.append(0, (0.1, 0.2))
        assert not sample.is_resolved
        assert not sample.is_eligible
        assert store.latest == sample

    def test_capacity_evicts_oldest(self, store):
        fill(store, range(8))

        assert len(store) == 5
        assert [s.bar_index for s in store.snapshot()] == [3, 4, 5, 6, 7]

    def test_dimension_mismatch(self, store):
        with pytest.raises(ConfigurationError):
            store.append(0, (0.1, 0.2, 0.3))

    def test_bar_index_must_increase(self, store):
        store.append(5, (0.1, 0.2))
        with pytest.raises(ValueError):
            store.append(5, (0.1, 0.2))

    def test_invalid_capacity(self):
        with pytest.raises(ConfigurationError):
            HistoricalSampleStore(capacity=0, future_bars=2, dimension=2)


# ==================== Label Resolution ====================


class TestResolveLabels:
    """Resolving labels by age"""

    def test_only_elapsed_horizon_resolved(self, store):
        fill(store, range(5))

        resolved = store.resolve_labels(4, alternating)

        # Bars 0, 1, 2 have bar + 2 <= 4
        assert resolved == 3
        assert [s.is_resolved for s in store.snapshot()] == [True, True, True, False, False]

    def test_labels_from_function(self, store):
        fill(store, range(5))
        store.resolve_labels(4, alternating)

        labels = [s.label for s in store.snapshot()[:3]]
        assert labels == [Label.UP, Label.DOWN, Label.UP]

    def test_resolved_label_frozen(self, store):
        fill(store, range(3))
        store.resolve_labels(2, lambda i: Label.UP)
        store.resolve_labels(2, lambda i: Label.DOWN)

        assert store.snapshot()[0].label == Label.UP

    def test_unresolved_suffix(self, store):
        """Resolution proceeds incrementally bar by bar"""
        for i in range(5):
            store.append(i, (0.0, 0.0))
            store.resolve_labels(i, alternating)

        states = [s.is_resolved for s in store.snapshot()]
        assert states == [True, True, True, False, False]

    def test_neutral_not_eligible(self, store):
        fill(store, range(3))
        store.resolve_labels(2, lambda i: Label.NEUTRAL)

        assert store.resolved_count == 1
        assert store.eligible_count == 0

    def test_nothing_to_resolve(self, store):
        fill(store, range(2))
        assert store.resolve_labels(1, alternating) == 0


# ==================== Iteration ====================


class TestIterate:
    """Stride subsampling and snapshots"""

    def test_yields_resolved_only(self, store):
        fill(store, range(5))
        store.resolve_labels(4, alternating)

        assert [s.bar_index for s in store.iterate()] == [0, 1, 2]

    def test_stride_uses_bar_index(self):
        store = HistoricalSampleStore(capacity=20, future_bars=1, dimension=2)
        fill(store, range(10, 20))
        store.resolve_labels(19, alternating)

        assert [s.bar_index for s in store.iterate(4)] == [12, 16]

    def test_invalid_stride(self, store):
        with pytest.raises(ConfigurationError):
            store.iterate(0)

    def test_snapshot_isolated_from_later_appends(self, store):
        fill(store, range(5))
        store.resolve_labels(4, alternating)

        running = store.iterate()
        fill(store, range(5, 10))
        store.resolve_labels(9, alternating)

        assert [s.bar_index for s in running] == [0, 1, 2]

    def test_copy_is_independent(self, store):
        fill(store, range(3))
        clone = store.copy()
        clone.append(3, (0.0, 0.0))
        clone.resolve_labels(3, alternating)

        assert len(store) == 3
        assert store.resolved_count == 0
        assert clone.resolved_count == 2

    def test_sample_is_immutable(self):
        sample = HistoricalSample(feature_vector=(0.1, 0.2), bar_index=0)
        with pytest.raises(AttributeError):
            sample.label = Label.UP
