"""
Central Configuration
=====================
Load all configuration from environment variables and .env file.
"""

import logging
import math
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Tuple
from dotenv import load_dotenv

from .constants import (
    DEFAULT_CAPITAL,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_VARIANT,
    DEFAULT_VOLUME_LOTS,
    PATTERN_WINDOW,
    VOLATILITY_WINDOW,
    VARIANTS,
    FeatureKind,
    IndicatorDefaults,
    InstrumentDefaults,
    RankingMode,
)


logger = logging.getLogger("lorentzian_bot.core.config")

# Load .env file from project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

MA_TYPES = ("simple", "exponential", "weighted")
PRICE_SOURCES = ("close", "open", "high", "low", "hl2", "hlc3", "ohlc4")


class ConfigurationError(ValueError):
    """Raised before the first cycle when configuration cannot work"""
    pass


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_band(name: str, default: Tuple[float, float]) -> Tuple[float, float]:
    """Parse "low,high" into a tuple"""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    low, high = (float(part) for part in raw.split(","))
    return low, high


def _parse_feature_set(raw: str) -> Tuple[FeatureKind, ...]:
    return tuple(FeatureKind(part.strip().lower()) for part in raw.split(",") if part.strip())


@dataclass
class ClassifierConfig:
    """
    Classifier parameters.

    label_sensitivity has no default on purpose: it must be chosen
    explicitly (presets set it, bare configs fail validation).
    """
    feature_set: Tuple[FeatureKind, ...] = VARIANTS[DEFAULT_VARIANT].FEATURES
    feature_dimension: int = len(VARIANTS[DEFAULT_VARIANT].FEATURES)
    neighbors_count: int = VARIANTS[DEFAULT_VARIANT].NEIGHBORS_COUNT
    max_bars_back: int = VARIANTS[DEFAULT_VARIANT].MAX_BARS_BACK
    future_bars: int = VARIANTS[DEFAULT_VARIANT].FUTURE_BARS
    trend_threshold: float = VARIANTS[DEFAULT_VARIANT].TREND_THRESHOLD
    min_pattern_similarity: float = VARIANTS[DEFAULT_VARIANT].MIN_PATTERN_SIMILARITY
    stability_threshold: float = VARIANTS[DEFAULT_VARIANT].STABILITY_THRESHOLD
    subsample_stride: int = VARIANTS[DEFAULT_VARIANT].SUBSAMPLE_STRIDE
    label_sensitivity: Optional[float] = None

    ranking_mode: RankingMode = VARIANTS[DEFAULT_VARIANT].RANKING
    pattern_window: int = PATTERN_WINDOW
    volatility_window: int = VOLATILITY_WINDOW
    warmup_bars: Optional[int] = None  # None -> max_bars_back
    use_stability_gate: bool = VARIANTS[DEFAULT_VARIANT].USE_STABILITY_GATE

    # Signal filter
    min_adx: float = VARIANTS[DEFAULT_VARIANT].MIN_ADX
    long_rsi_band: Tuple[float, float] = VARIANTS[DEFAULT_VARIANT].LONG_RSI_BAND
    short_rsi_band: Tuple[float, float] = VARIANTS[DEFAULT_VARIANT].SHORT_RSI_BAND

    @classmethod
    def for_variant(cls, name: str, **overrides) -> "ClassifierConfig":
        """Build a config from one of the named presets"""
        try:
            preset = VARIANTS[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown variant '{name}' (expected one of {sorted(VARIANTS)})"
            ) from None
        values = dict(
            feature_set=preset.FEATURES,
            feature_dimension=len(preset.FEATURES),
            neighbors_count=preset.NEIGHBORS_COUNT,
            max_bars_back=preset.MAX_BARS_BACK,
            future_bars=preset.FUTURE_BARS,
            trend_threshold=preset.TREND_THRESHOLD,
            min_pattern_similarity=preset.MIN_PATTERN_SIMILARITY,
            stability_threshold=preset.STABILITY_THRESHOLD,
            subsample_stride=preset.SUBSAMPLE_STRIDE,
            label_sensitivity=preset.LABEL_SENSITIVITY,
            ranking_mode=preset.RANKING,
            use_stability_gate=preset.USE_STABILITY_GATE,
            min_adx=preset.MIN_ADX,
            long_rsi_band=preset.LONG_RSI_BAND,
            short_rsi_band=preset.SHORT_RSI_BAND,
        )
        values.update(overrides)
        if "feature_set" in overrides and "feature_dimension" not in overrides:
            values["feature_dimension"] = len(values["feature_set"])
        return cls(**values)

    @classmethod
    def basic(cls, **overrides) -> "ClassifierConfig":
        return cls.for_variant("basic", **overrides)

    @classmethod
    def enhanced(cls, **overrides) -> "ClassifierConfig":
        return cls.for_variant("enhanced", **overrides)

    @classmethod
    def from_env(cls, variant: Optional[str] = None) -> "ClassifierConfig":
        base = cls.for_variant(variant or os.getenv("LC_VARIANT", DEFAULT_VARIANT))

        feature_raw = os.getenv("LC_FEATURE_SET", "")
        feature_set = _parse_feature_set(feature_raw) if feature_raw.strip() else base.feature_set
        ranking_raw = os.getenv("LC_RANKING_MODE", "")
        ranking_mode = RankingMode(ranking_raw.strip().lower()) if ranking_raw.strip() else base.ranking_mode

        return cls(
            feature_set=feature_set,
            feature_dimension=_env_int("LC_FEATURE_DIMENSION", len(feature_set)),
            neighbors_count=_env_int("LC_NEIGHBORS_COUNT", base.neighbors_count),
            max_bars_back=_env_int("LC_MAX_BARS_BACK", base.max_bars_back),
            future_bars=_env_int("LC_FUTURE_BARS", base.future_bars),
            trend_threshold=_env_float("LC_TREND_THRESHOLD", base.trend_threshold),
            min_pattern_similarity=_env_float("LC_MIN_PATTERN_SIMILARITY", base.min_pattern_similarity),
            stability_threshold=_env_float("LC_STABILITY_THRESHOLD", base.stability_threshold),
            subsample_stride=_env_int("LC_SUBSAMPLE_STRIDE", base.subsample_stride),
            label_sensitivity=_env_float("LC_LABEL_SENSITIVITY", base.label_sensitivity),
            ranking_mode=ranking_mode,
            pattern_window=_env_int("LC_PATTERN_WINDOW", base.pattern_window),
            volatility_window=_env_int("LC_VOLATILITY_WINDOW", base.volatility_window),
            warmup_bars=_env_int("LC_WARMUP_BARS", base.warmup_bars),
            use_stability_gate=_env_bool("LC_USE_STABILITY_GATE", base.use_stability_gate),
            min_adx=_env_float("LC_MIN_ADX", base.min_adx),
            long_rsi_band=_env_band("LC_LONG_RSI_BAND", base.long_rsi_band),
            short_rsi_band=_env_band("LC_SHORT_RSI_BAND", base.short_rsi_band),
        )

    @property
    def effective_warmup_bars(self) -> int:
        """Bars required before neighbor search runs"""
        return self.max_bars_back if self.warmup_bars is None else self.warmup_bars

    def validate(self) -> tuple[bool, list[str]]:
        """Check parameter ranges and consistency"""
        issues = []

        if self.neighbors_count < 1:
            issues.append("NEIGHBORS_COUNT must be at least 1")

        if not self.feature_set:
            issues.append("FEATURE_SET must name at least one feature")
        if self.feature_dimension != len(self.feature_set):
            issues.append(
                f"FEATURE_DIMENSION {self.feature_dimension} does not match "
                f"feature set of size {len(self.feature_set)}"
            )

        if self.label_sensitivity is None:
            issues.append("LABEL_SENSITIVITY must be set explicitly")
        elif not math.isfinite(self.label_sensitivity) or self.label_sensitivity < 0:
            issues.append("LABEL_SENSITIVITY must be a non-negative number")

        for name in ("max_bars_back", "future_bars", "subsample_stride",
                     "pattern_window", "volatility_window"):
            if getattr(self, name) < 1:
                issues.append(f"{name.upper()} must be positive")

        if self.warmup_bars is not None and self.warmup_bars < 0:
            issues.append("WARMUP_BARS cannot be negative")

        if not (0.0 <= self.trend_threshold <= 1.0):
            issues.append("TREND_THRESHOLD should be between 0 and 1")

        if not (0.0 <= self.min_pattern_similarity <= 1.0):
            issues.append("MIN_PATTERN_SIMILARITY should be between 0 and 1")

        if self.stability_threshold <= 0:
            issues.append("STABILITY_THRESHOLD must be positive")

        for name in ("long_rsi_band", "short_rsi_band"):
            low, high = getattr(self, name)
            if low >= high:
                issues.append(f"{name.upper()} lower bound must be below upper bound")

        return len(issues) == 0, issues

    def ensure_valid(self) -> "ClassifierConfig":
        """Raise ConfigurationError listing every problem found"""
        ok, issues = self.validate()
        if not ok:
            raise ConfigurationError("; ".join(issues))
        return self


@dataclass
class IndicatorConfig:
    """Periods and price source for the indicator series"""
    rsi_period: int = IndicatorDefaults.RSI_PERIOD
    adx_period: int = IndicatorDefaults.ADX_PERIOD
    ma_period: int = IndicatorDefaults.MA_PERIOD
    ma_type: str = IndicatorDefaults.MA_TYPE
    volatility_period: int = IndicatorDefaults.VOLATILITY_PERIOD
    price_source: str = IndicatorDefaults.PRICE_SOURCE

    @classmethod
    def from_env(cls) -> "IndicatorConfig":
        return cls(
            rsi_period=int(os.getenv("RSI_PERIOD", str(IndicatorDefaults.RSI_PERIOD))),
            adx_period=int(os.getenv("ADX_PERIOD", str(IndicatorDefaults.ADX_PERIOD))),
            ma_period=int(os.getenv("MA_PERIOD", str(IndicatorDefaults.MA_PERIOD))),
            ma_type=os.getenv("MA_TYPE", IndicatorDefaults.MA_TYPE).lower(),
            volatility_period=int(os.getenv("VOLATILITY_PERIOD", str(IndicatorDefaults.VOLATILITY_PERIOD))),
            price_source=os.getenv("PRICE_SOURCE", IndicatorDefaults.PRICE_SOURCE).lower(),
        )

    def validate(self) -> tuple[bool, list[str]]:
        issues = []
        for name in ("rsi_period", "adx_period", "ma_period", "volatility_period"):
            if getattr(self, name) < 1:
                issues.append(f"{name.upper()} must be positive")
        if self.ma_type not in MA_TYPES:
            issues.append(f"MA_TYPE must be one of {MA_TYPES}")
        if self.price_source not in PRICE_SOURCES:
            issues.append(f"PRICE_SOURCE must be one of {PRICE_SOURCES}")
        return len(issues) == 0, issues


@dataclass
class InstrumentSpec:
    """Tradable volume range and pip size of the instrument (volumes in units)"""
    symbol: str = InstrumentDefaults.SYMBOL
    lot_size: float = InstrumentDefaults.LOT_SIZE
    volume_min: float = InstrumentDefaults.VOLUME_MIN
    volume_max: float = InstrumentDefaults.VOLUME_MAX
    volume_step: float = InstrumentDefaults.VOLUME_STEP
    pip_size: float = InstrumentDefaults.PIP_SIZE

    @classmethod
    def from_env(cls) -> "InstrumentSpec":
        return cls(
            symbol=os.getenv("SYMBOL", InstrumentDefaults.SYMBOL),
            lot_size=float(os.getenv("LOT_SIZE", str(InstrumentDefaults.LOT_SIZE))),
            volume_min=float(os.getenv("VOLUME_MIN", str(InstrumentDefaults.VOLUME_MIN))),
            volume_max=float(os.getenv("VOLUME_MAX", str(InstrumentDefaults.VOLUME_MAX))),
            volume_step=float(os.getenv("VOLUME_STEP", str(InstrumentDefaults.VOLUME_STEP))),
            pip_size=float(os.getenv("PIP_SIZE", str(InstrumentDefaults.PIP_SIZE))),
        )

    def to_units(self, lots: float) -> float:
        """
        Convert a lot volume into units the instrument accepts.

        Rounds to the volume step, then raises ConfigurationError if the
        requested or the rounded volume is outside the tradable range.
        """
        units = lots * self.lot_size
        self._check_range(units)

        if self.volume_step > 0:
            steps = units / self.volume_step
            if not math.isclose(steps, round(steps), abs_tol=1e-9):
                units = round(steps) * self.volume_step
                self._check_range(units)
                logger.info(
                    "Volume adjusted to %s lots to match symbol requirements",
                    units / self.lot_size,
                )
        return units

    def _check_range(self, units: float) -> None:
        if units < self.volume_min or units > self.volume_max:
            raise ConfigurationError(
                f"Invalid position volume {units / self.lot_size} lots. Must be between "
                f"{self.volume_min / self.lot_size} and {self.volume_max / self.lot_size} lots"
            )


@dataclass
class TradingConfig:
    """Position sizing and exits for the paper executor"""
    volume_lots: float = DEFAULT_VOLUME_LOTS
    stop_loss_pips: float = VARIANTS[DEFAULT_VARIANT].STOP_LOSS_PIPS
    take_profit_pips: float = VARIANTS[DEFAULT_VARIANT].TAKE_PROFIT_PIPS
    initial_capital: float = DEFAULT_CAPITAL
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS

    @classmethod
    def from_env(cls, variant: Optional[str] = None) -> "TradingConfig":
        preset = VARIANTS.get(variant or os.getenv("LC_VARIANT", DEFAULT_VARIANT), VARIANTS[DEFAULT_VARIANT])
        return cls(
            volume_lots=float(os.getenv("VOLUME_LOTS", str(DEFAULT_VOLUME_LOTS))),
            stop_loss_pips=float(os.getenv("STOP_LOSS_PIPS", str(preset.STOP_LOSS_PIPS))),
            take_profit_pips=float(os.getenv("TAKE_PROFIT_PIPS", str(preset.TAKE_PROFIT_PIPS))),
            initial_capital=float(os.getenv("TRADING_CAPITAL", str(DEFAULT_CAPITAL))),
            slippage_bps=int(os.getenv("SLIPPAGE_BPS", str(DEFAULT_SLIPPAGE_BPS))),
        )

    def validate(self) -> tuple[bool, list[str]]:
        issues = []
        if self.volume_lots <= 0:
            issues.append("VOLUME_LOTS must be positive")
        if self.stop_loss_pips <= 0:
            issues.append("STOP_LOSS_PIPS must be positive")
        if self.take_profit_pips <= 0:
            issues.append("TAKE_PROFIT_PIPS must be positive")
        if self.initial_capital <= 0:
            issues.append("TRADING_CAPITAL must be positive")
        return len(issues) == 0, issues


@dataclass
class Config:
    """
    Central configuration object.

    Usage:
        config = Config.load()
        print(config.classifier.neighbors_count)
        print(config.instrument.symbol)
    """
    variant: str = DEFAULT_VARIANT
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig.enhanced)
    indicators: IndicatorConfig = field(default_factory=IndicatorConfig)
    trading: TradingConfig = field(default_factory=TradingConfig)
    instrument: InstrumentSpec = field(default_factory=InstrumentSpec)

    # Paths
    project_root: Path = PROJECT_ROOT
    data_dir: Path = field(default_factory=lambda: PROJECT_ROOT / "bot_data")
    logs_dir: Path = field(default_factory=lambda: PROJECT_ROOT / "bot_data" / "logs")

    @classmethod
    def load(cls, variant: Optional[str] = None, data_dir: Optional[str] = None) -> "Config":
        """Load configuration from environment"""
        variant = variant or os.getenv("LC_VARIANT", DEFAULT_VARIANT)
        data_path = Path(data_dir) if data_dir else PROJECT_ROOT / "bot_data"

        config = cls(
            variant=variant,
            classifier=ClassifierConfig.from_env(variant),
            indicators=IndicatorConfig.from_env(),
            trading=TradingConfig.from_env(variant),
            instrument=InstrumentSpec.from_env(),
            data_dir=data_path,
            logs_dir=data_path / "logs",
        )

        config.data_dir.mkdir(parents=True, exist_ok=True)
        config.logs_dir.mkdir(parents=True, exist_ok=True)

        return config

    def validate(self) -> tuple[bool, list[str]]:
        """Validate all configuration"""
        issues = []
        for section in (self.classifier, self.indicators, self.trading):
            _, section_issues = section.validate()
            issues.extend(section_issues)
        return len(issues) == 0, issues

    def get_summary(self) -> str:
        """Get configuration summary"""
        c = self.classifier
        features = ",".join(kind.value for kind in c.feature_set)
        return f"""
╔══════════════════════════════════════════════════════════════╗
║                 CLASSIFIER CONFIGURATION                     ║
╠══════════════════════════════════════════════════════════════╣
║  Variant:         {self.variant:<43}║
║  Features:        {features:<43}║
║  Neighbors:       {c.neighbors_count:<43}║
║  Max Bars Back:   {c.max_bars_back:<43}║
║  Future Bars:     {c.future_bars:<43}║
║  Trend Threshold: {c.trend_threshold:<43}║
║  Ranking:         {c.ranking_mode.value:<43}║
╠══════════════════════════════════════════════════════════════╣
║  Symbol:          {self.instrument.symbol:<43}║
║  Volume (lots):   {self.trading.volume_lots:<43}║
║  SL / TP (pips):  {f'{self.trading.stop_loss_pips} / {self.trading.take_profit_pips}':<43}║
╚══════════════════════════════════════════════════════════════╝
"""
