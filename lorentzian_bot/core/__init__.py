# Bot Core Module
# ===============
# Central configuration, constants and logging

from .config import (
    Config,
    ClassifierConfig,
    IndicatorConfig,
    InstrumentSpec,
    TradingConfig,
    ConfigurationError,
)
from .constants import (
    FeatureKind,
    RankingMode,
    BASIC_FEATURES,
    ENHANCED_FEATURES,
    VARIANTS,
    DEFAULT_VARIANT,
)
from .logging_config import setup_logging, get_logger, trade_logger

__all__ = [
    "Config",
    "ClassifierConfig",
    "IndicatorConfig",
    "InstrumentSpec",
    "TradingConfig",
    "ConfigurationError",
    "FeatureKind",
    "RankingMode",
    "BASIC_FEATURES",
    "ENHANCED_FEATURES",
    "VARIANTS",
    "DEFAULT_VARIANT",
    "setup_logging",
    "get_logger",
    "trade_logger",
]
