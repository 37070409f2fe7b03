# Data Module
# ===========
# Market data source and bar validation

from .market_data import (
    Bar,
    IndicatorReadings,
    MarketDataSource,
    DataFrameMarketData,
    load_ohlcv_csv,
)
from .validators import (
    validate_ohlc,
    ValidationError,
    OHLCValidationError,
    ValidationResult,
)

__all__ = [
    "Bar",
    "IndicatorReadings",
    "MarketDataSource",
    "DataFrameMarketData",
    "load_ohlcv_csv",
    "validate_ohlc",
    "ValidationError",
    "OHLCValidationError",
    "ValidationResult",
]
