"""
Classifier Constants
====================
Defaults and variant presets for the Lorentzian classifier in one place.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Final, Tuple


class FeatureKind(Enum):
    """Feature slots understood by the feature extractor"""
    RSI = "rsi"
    ADX = "adx"
    PRICE_POSITION = "price_position"
    VOLATILITY = "volatility"


class RankingMode(Enum):
    """Neighbor ordering"""
    SIMILARITY = "similarity"  # similarity desc, then distance asc
    DISTANCE = "distance"      # distance asc


# Feature set descriptors
BASIC_FEATURES: Final[Tuple[FeatureKind, ...]] = (
    FeatureKind.RSI,
    FeatureKind.ADX,
)
ENHANCED_FEATURES: Final[Tuple[FeatureKind, ...]] = (
    FeatureKind.RSI,
    FeatureKind.ADX,
    FeatureKind.PRICE_POSITION,
    FeatureKind.VOLATILITY,
)


# ============================================================================
# DEFAULT TRADING SETTINGS
# ============================================================================
DEFAULT_CAPITAL: Final[float] = 100_000.0
DEFAULT_VOLUME_LOTS: Final[float] = 0.1
DEFAULT_SLIPPAGE_BPS: Final[int] = 0


@dataclass(frozen=True)
class IndicatorDefaults:
    """Periods for the indicator series fed to the classifier"""

    RSI_PERIOD: int = 14
    ADX_PERIOD: int = 14
    MA_PERIOD: int = 200
    MA_TYPE: str = "exponential"
    VOLATILITY_PERIOD: int = 20
    PRICE_SOURCE: str = "close"


@dataclass(frozen=True)
class InstrumentDefaults:
    """Generic FX-style instrument (volumes in units)"""

    SYMBOL: str = "EURUSD"
    LOT_SIZE: float = 100_000.0
    VOLUME_MIN: float = 1_000.0
    VOLUME_MAX: float = 10_000_000.0
    VOLUME_STEP: float = 1_000.0
    PIP_SIZE: float = 0.0001


# ============================================================================
# CLASSIFIER VARIANTS
# ============================================================================

@dataclass(frozen=True)
class BasicVariant:
    """Two-feature classifier ranked purely by Lorentzian distance"""

    FEATURES: Tuple[FeatureKind, ...] = BASIC_FEATURES
    RANKING: RankingMode = RankingMode.DISTANCE
    NEIGHBORS_COUNT: int = 8
    MAX_BARS_BACK: int = 2000
    FUTURE_BARS: int = 4
    SUBSAMPLE_STRIDE: int = 4
    # Probabilities here sum to one, so a threshold below 0.5 would
    # let both directions qualify on every bar.
    TREND_THRESHOLD: float = 0.6
    MIN_PATTERN_SIMILARITY: float = 0.0
    LABEL_SENSITIVITY: float = 0.5
    USE_STABILITY_GATE: bool = False
    STABILITY_THRESHOLD: float = 0.15
    MIN_ADX: float = 25.0
    LONG_RSI_BAND: Tuple[float, float] = (50.0, 100.0)
    SHORT_RSI_BAND: Tuple[float, float] = (0.0, 50.0)
    STOP_LOSS_PIPS: float = 20.0
    TAKE_PROFIT_PIPS: float = 40.0


@dataclass(frozen=True)
class EnhancedVariant:
    """Four-feature classifier ranked by pattern similarity, then distance"""

    FEATURES: Tuple[FeatureKind, ...] = ENHANCED_FEATURES
    RANKING: RankingMode = RankingMode.SIMILARITY
    NEIGHBORS_COUNT: int = 12
    MAX_BARS_BACK: int = 3000
    FUTURE_BARS: int = 6
    SUBSAMPLE_STRIDE: int = 2
    TREND_THRESHOLD: float = 0.65
    MIN_PATTERN_SIMILARITY: float = 0.75
    LABEL_SENSITIVITY: float = 0.5
    USE_STABILITY_GATE: bool = True
    STABILITY_THRESHOLD: float = 0.15
    MIN_ADX: float = 10.0
    LONG_RSI_BAND: Tuple[float, float] = (35.0, 80.0)
    SHORT_RSI_BAND: Tuple[float, float] = (20.0, 65.0)
    STOP_LOSS_PIPS: float = 25.0
    TAKE_PROFIT_PIPS: float = 50.0


# Shared by both variants
PATTERN_WINDOW: Final[int] = 5
VOLATILITY_WINDOW: Final[int] = 500

VARIANTS = {
    "basic": BasicVariant(),
    "enhanced": EnhancedVariant(),
}
DEFAULT_VARIANT: Final[str] = "enhanced"
