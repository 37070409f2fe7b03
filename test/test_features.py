"""
Unit Tests for Feature Extraction and Labels

Test Coverage:
    - RSI / ADX normalization
    - Price position and volatility ratio with degenerate denominators
    - FeatureExtractor output dimension and ordering
    - Volatility-relative forward labels
"""

import math
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from lorentzian_bot.core.config import ConfigurationError
from lorentzian_bot.core.constants import BASIC_FEATURES, ENHANCED_FEATURES, FeatureKind
from lorentzian_bot.classifier.features import (
    FeatureExtractor,
    normalize_adx,
    normalize_rsi,
    normalize_volatility,
    price_position,
    rolling_max,
)
from lorentzian_bot.classifier.labels import Label, resolve_label
from lorentzian_bot.data.market_data import DataFrameMarketData


# ==================== Fixtures ====================


@pytest.fixture
def source():
    """Ten bars with hand-picked indicator values"""
    n = 10
    close = np.linspace(1.10, 1.12, n)
    return DataFrameMarketData(pd.DataFrame({
        "open": close,
        "high": close + 0.0005,
        "low": close - 0.0005,
        "close": close,
        "rsi": np.full(n, 60.0),
        "adx": np.full(n, 25.0),
        "ma": close * 0.99,
        "volatility": np.array([0.001, 0.002, 0.004, 0.002, 0.001,
                                0.001, 0.001, 0.001, 0.001, 0.002]),
    }))


# ==================== Normalization ====================


class TestNormalization:
    """Per-feature normalization"""

    def test_rsi_scaled_to_unit_range(self):
        assert normalize_rsi(0.0) == 0.0
        assert normalize_rsi(50.0) == pytest.approx(0.5)
        assert normalize_rsi(100.0) == pytest.approx(1.0)

    def test_adx_scaled_to_unit_range(self):
        assert normalize_adx(25.0) == pytest.approx(0.25)

    def test_nan_reading_becomes_zero(self):
        assert normalize_rsi(float("nan")) == 0.0

    def test_price_position_relative_to_ma(self):
        assert price_position(1.01, 1.0) == pytest.approx(0.01)
        assert price_position(0.99, 1.0) == pytest.approx(-0.01)

    def test_price_position_not_clamped(self):
        assert price_position(3.0, 1.0) == pytest.approx(2.0)

    def test_price_position_zero_ma(self):
        """Zero denominator is replaced by 1"""
        assert price_position(1.5, 0.0) == pytest.approx(1.5)

    def test_price_position_nan_ma(self):
        assert price_position(1.5, float("nan")) == 0.0

    def test_volatility_ratio(self):
        assert normalize_volatility(0.002, 0.004) == pytest.approx(0.5)

    def test_volatility_zero_max_floored(self):
        assert normalize_volatility(0.0, 0.0) == 0.0
        assert normalize_volatility(0.003, float("nan")) == pytest.approx(0.003)

    def test_rolling_max_ignores_nan(self):
        series = np.array([np.nan, 1.0, 3.0, np.nan, 2.0])
        assert rolling_max(series, 4, 3) == pytest.approx(3.0)
        assert rolling_max(series, 4, 1) == pytest.approx(2.0)
        assert math.isnan(rolling_max(series, 0, 1))


# ==================== Extractor ====================


class TestFeatureExtractor:
    """FeatureExtractor against a data source"""

    def test_basic_dimension(self):
        assert FeatureExtractor(BASIC_FEATURES).dimension == 2

    def test_enhanced_dimension(self):
        assert FeatureExtractor(ENHANCED_FEATURES).dimension == 4

    def test_empty_feature_set_rejected(self):
        with pytest.raises(ConfigurationError):
            FeatureExtractor(())

    def test_basic_vector(self, source):
        vector = FeatureExtractor(BASIC_FEATURES).extract(source, 3)
        assert vector == pytest.approx((0.60, 0.25))

    def test_enhanced_vector(self, source):
        vector = FeatureExtractor(ENHANCED_FEATURES, volatility_window=5).extract(source, 3)

        assert len(vector) == 4
        assert vector[0] == pytest.approx(0.60)
        assert vector[1] == pytest.approx(0.25)
        assert vector[2] == pytest.approx(1 / 0.99 - 1)
        # 0.002 against a recent max of 0.004
        assert vector[3] == pytest.approx(0.5)

    def test_volatility_window_slides(self, source):
        """Bar 9: the 0.004 spike at bar 2 is outside a 5-bar window"""
        extractor = FeatureExtractor((FeatureKind.VOLATILITY,), volatility_window=5)
        assert extractor.extract(source, 9) == pytest.approx((1.0,))

    def test_vector_is_finite(self, source):
        extractor = FeatureExtractor(ENHANCED_FEATURES)
        for index in range(len(source)):
            assert all(math.isfinite(v) for v in extractor.extract(source, index))


# ==================== Labels ====================


class TestResolveLabel:
    """Forward-return labelling"""

    def test_up_move_beyond_threshold(self):
        prices = [1.000, 1.001, 1.010]
        vol = [0.001, 0.001, 0.001]
        assert resolve_label(prices, vol, 0, 2, 0.5) == Label.UP

    def test_down_move_beyond_threshold(self):
        prices = [1.000, 0.999, 0.990]
        vol = [0.001, 0.001, 0.001]
        assert resolve_label(prices, vol, 0, 2, 0.5) == Label.DOWN

    def test_small_move_is_neutral(self):
        """0.01% move against a 0.05% threshold"""
        prices = [1.0000, 1.0001]
        vol = [0.001, 0.001]
        assert resolve_label(prices, vol, 0, 1, 0.5) == Label.NEUTRAL

    def test_flat_price_is_neutral(self):
        assert resolve_label([1.0, 1.0], [0.0, 0.0], 0, 1, 0.5) == Label.NEUTRAL

    def test_threshold_scales_with_volatility(self):
        """Same move: signal in a quiet market, noise in a volatile one"""
        prices = [1.000, 1.003]
        assert resolve_label(prices, [0.001, 0.001], 0, 1, 1.0) == Label.UP
        assert resolve_label(prices, [0.010, 0.010], 0, 1, 1.0) == Label.NEUTRAL

    def test_zero_sensitivity_labels_any_move(self):
        assert resolve_label([1.0, 1.0000001], [0.5, 0.5], 0, 1, 0.0) == Label.UP

    def test_zero_price_is_neutral(self):
        assert resolve_label([0.0, 1.0], [0.001, 0.001], 0, 1, 0.5) == Label.NEUTRAL

    def test_nan_volatility_is_neutral(self):
        assert resolve_label([1.0, 2.0], [np.nan, 0.001], 0, 1, 0.5) == Label.NEUTRAL

    def test_label_values(self):
        assert int(Label.UP) == 1
        assert int(Label.NEUTRAL) == 0
        assert int(Label.DOWN) == -1
