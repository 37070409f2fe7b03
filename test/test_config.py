"""
Unit Tests for Configuration

Test Coverage:
    - Variant presets
    - ClassifierConfig validation
    - Environment overrides
    - Lot -> unit conversion against the instrument's volume range
"""

import sys
from pathlib import Path

import pytest

# Add project root
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from lorentzian_bot.core.config import (
    ClassifierConfig,
    Config,
    ConfigurationError,
    IndicatorConfig,
    InstrumentSpec,
    TradingConfig,
)
from lorentzian_bot.core.constants import BASIC_FEATURES, FeatureKind, RankingMode


# ==================== Presets ====================


class TestVariants:
    """Named parameter presets"""

    def test_enhanced_preset(self):
        config = ClassifierConfig.enhanced()

        assert config.feature_dimension == 4
        assert config.neighbors_count == 12
        assert config.max_bars_back == 3000
        assert config.future_bars == 6
        assert config.ranking_mode is RankingMode.SIMILARITY
        assert config.min_pattern_similarity == pytest.approx(0.75)
        assert config.use_stability_gate

    def test_basic_preset(self):
        config = ClassifierConfig.basic()

        assert config.feature_set == BASIC_FEATURES
        assert config.feature_dimension == 2
        assert config.ranking_mode is RankingMode.DISTANCE
        assert config.subsample_stride == 4
        assert not config.use_stability_gate

    def test_presets_valid(self):
        assert ClassifierConfig.basic().validate() == (True, [])
        assert ClassifierConfig.enhanced().validate() == (True, [])

    def test_overrides(self):
        config = ClassifierConfig.enhanced(neighbors_count=5, warmup_bars=100)
        assert config.neighbors_count == 5
        assert config.effective_warmup_bars == 100

    def test_feature_set_override_updates_dimension(self):
        config = ClassifierConfig.enhanced(feature_set=(FeatureKind.RSI,))
        assert config.feature_dimension == 1

    def test_warmup_defaults_to_max_bars_back(self):
        assert ClassifierConfig.enhanced().effective_warmup_bars == 3000

    def test_unknown_variant(self):
        with pytest.raises(ConfigurationError):
            ClassifierConfig.for_variant("turbo")


# ==================== Validation ====================


class TestClassifierValidation:
    """Range and consistency checks"""

    def test_label_sensitivity_required(self):
        ok, issues = ClassifierConfig().validate()
        assert not ok
        assert any("LABEL_SENSITIVITY" in issue for issue in issues)

    def test_zero_neighbors(self):
        ok, issues = ClassifierConfig.enhanced(neighbors_count=0).validate()
        assert not ok
        assert any("NEIGHBORS_COUNT" in issue for issue in issues)

    def test_dimension_mismatch(self):
        ok, _ = ClassifierConfig.enhanced(feature_dimension=3).validate()
        assert not ok

    def test_threshold_out_of_range(self):
        ok, _ = ClassifierConfig.enhanced(trend_threshold=1.5).validate()
        assert not ok

    def test_inverted_rsi_band(self):
        ok, _ = ClassifierConfig.enhanced(long_rsi_band=(80.0, 35.0)).validate()
        assert not ok

    def test_ensure_valid_raises_with_all_issues(self):
        config = ClassifierConfig.enhanced(neighbors_count=0, future_bars=0)
        with pytest.raises(ConfigurationError, match="NEIGHBORS_COUNT.*FUTURE_BARS"):
            config.ensure_valid()

    def test_ensure_valid_returns_config(self):
        config = ClassifierConfig.basic()
        assert config.ensure_valid() is config


# ==================== Environment ====================


class TestFromEnv:
    """Environment variable overrides"""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LC_NEIGHBORS_COUNT", "20")
        monkeypatch.setenv("LC_USE_STABILITY_GATE", "false")
        monkeypatch.setenv("LC_LONG_RSI_BAND", "40,70")

        config = ClassifierConfig.from_env("enhanced")

        assert config.neighbors_count == 20
        assert not config.use_stability_gate
        assert config.long_rsi_band == (40.0, 70.0)

    def test_env_feature_set(self, monkeypatch):
        monkeypatch.setenv("LC_FEATURE_SET", "rsi, volatility")

        config = ClassifierConfig.from_env("enhanced")

        assert config.feature_set == (FeatureKind.RSI, FeatureKind.VOLATILITY)
        assert config.feature_dimension == 2

    def test_config_load(self, monkeypatch, tmp_path):
        monkeypatch.delenv("LC_NEIGHBORS_COUNT", raising=False)
        config = Config.load(variant="basic", data_dir=str(tmp_path / "run"))

        assert config.variant == "basic"
        assert config.classifier.feature_dimension == 2
        assert config.trading.stop_loss_pips == pytest.approx(20.0)
        assert config.logs_dir.exists()
        assert "basic" in config.get_summary()


# ==================== Other Sections ====================


class TestSections:
    """Indicator and trading sections"""

    def test_indicator_defaults_valid(self):
        assert IndicatorConfig().validate() == (True, [])

    def test_unknown_ma_type(self):
        ok, _ = IndicatorConfig(ma_type="hull").validate()
        assert not ok

    def test_trading_defaults_valid(self):
        assert TradingConfig().validate() == (True, [])

    def test_negative_stop(self):
        ok, _ = TradingConfig(stop_loss_pips=-5).validate()
        assert not ok

    def test_config_validate_collects_sections(self):
        config = Config(trading=TradingConfig(volume_lots=0))
        ok, issues = config.validate()
        assert not ok
        assert any("VOLUME_LOTS" in issue for issue in issues)


# ==================== Volume Conversion ====================


class TestToUnits:
    """Lots -> units"""

    @pytest.fixture
    def instrument(self):
        return InstrumentSpec(
            symbol="EURUSD",
            lot_size=100_000,
            volume_min=1_000,
            volume_max=10_000_000,
            volume_step=1_000,
            pip_size=0.0001,
        )

    def test_exact_volume(self, instrument):
        assert instrument.to_units(0.1) == pytest.approx(10_000)

    def test_rounded_to_step(self, instrument):
        assert instrument.to_units(0.0125) == pytest.approx(1_000)

    def test_below_minimum(self, instrument):
        with pytest.raises(ConfigurationError, match="Invalid position volume"):
            instrument.to_units(0.001)

    def test_above_maximum(self, instrument):
        with pytest.raises(ConfigurationError):
            instrument.to_units(500)

    def test_rounding_past_maximum(self):
        """11510 units is in range but the nearest step, 12000, is not"""
        instrument = InstrumentSpec(
            lot_size=100_000, volume_min=1_000, volume_max=11_600, volume_step=1_000,
        )
        with pytest.raises(ConfigurationError, match="Invalid position volume 0.12 lots"):
            instrument.to_units(0.1151)
