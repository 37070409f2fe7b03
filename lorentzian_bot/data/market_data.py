"""
Market Data Source
==================
Indexable bar history plus aligned indicator series, injected into the
classifier. Bar index 0 is the oldest bar; ``bars_back(n, current)``
addresses the bar ``n`` bars before ``current``.

Usage:
    df = load_ohlcv_csv("eurusd_h1.csv")
    source = DataFrameMarketData.from_ohlcv(df, IndicatorConfig())

    readings = source.readings(len(source) - 1)
    print(readings.rsi, readings.adx)
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from ..core.config import IndicatorConfig
from ..utils.indicators import (
    calculate_adx,
    calculate_moving_average,
    calculate_rsi,
    calculate_std_dev,
    price_source_series,
)
from .validators import validate_ohlc


logger = logging.getLogger("lorentzian_bot.data.market_data")

INDICATOR_COLUMNS = ["rsi", "adx", "ma", "volatility"]


@dataclass(frozen=True)
class Bar:
    """One OHLCV bar"""
    index: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    timestamp: Optional[pd.Timestamp] = None


@dataclass(frozen=True)
class IndicatorReadings:
    """Indicator values at one bar"""
    rsi: float
    adx: float
    ma: float
    volatility: float

    @property
    def is_complete(self) -> bool:
        """False while any indicator is still warming up"""
        return all(math.isfinite(v) for v in (self.rsi, self.adx, self.ma, self.volatility))


class MarketDataSource(ABC):
    """
    Capability the classifier depends on.

    Implementations expose the price source, the volatility estimator
    and per-bar indicator readings, all aligned to the same bar indices.
    """

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def bar(self, index: int) -> Bar:
        """Bar at an absolute index"""
        pass

    @abstractmethod
    def prices(self) -> np.ndarray:
        """Configured price source as a float array"""
        pass

    @abstractmethod
    def volatility_series(self) -> np.ndarray:
        """Volatility estimator as a float array"""
        pass

    @abstractmethod
    def readings(self, index: int) -> IndicatorReadings:
        """Indicator readings at an absolute index"""
        pass

    def price(self, index: int) -> float:
        return float(self.prices()[index])

    @property
    def last_index(self) -> int:
        return len(self) - 1

    def bars_back(self, n: int, current_index: Optional[int] = None) -> Bar:
        """Bar ``n`` bars before ``current_index`` (default: the latest bar)"""
        current = self.last_index if current_index is None else current_index
        target = current - n
        if n < 0 or target < 0 or current > self.last_index:
            raise IndexError(f"No bar {n} bars back from {current}")
        return self.bar(target)


class DataFrameMarketData(MarketDataSource):
    """
    pandas-backed market data.

    Expects columns open/high/low/close (volume optional) and the
    precomputed indicator columns rsi/adx/ma/volatility. A ``price``
    column, when present, overrides close as the price source.
    """

    def __init__(self, df: pd.DataFrame):
        missing = set(["open", "high", "low", "close"] + INDICATOR_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing market data columns: {sorted(missing)}")

        self._timestamps = self._extract_timestamps(df)

        self._open = df["open"].to_numpy(dtype=float)
        self._high = df["high"].to_numpy(dtype=float)
        self._low = df["low"].to_numpy(dtype=float)
        self._close = df["close"].to_numpy(dtype=float)
        self._volume = (
            df["volume"].to_numpy(dtype=float) if "volume" in df.columns else np.zeros(len(df))
        )
        price_column = "price" if "price" in df.columns else "close"
        self._prices = df[price_column].to_numpy(dtype=float)
        self._rsi = df["rsi"].to_numpy(dtype=float)
        self._adx = df["adx"].to_numpy(dtype=float)
        self._ma = df["ma"].to_numpy(dtype=float)
        self._volatility = df["volatility"].to_numpy(dtype=float)

    @staticmethod
    def _extract_timestamps(df: pd.DataFrame) -> Optional[np.ndarray]:
        if "timestamp" in df.columns:
            return pd.to_datetime(df["timestamp"]).to_numpy()
        if isinstance(df.index, pd.DatetimeIndex):
            return df.index.to_numpy()
        return None

    @classmethod
    def from_ohlcv(
        cls,
        df: pd.DataFrame,
        indicators: Optional[IndicatorConfig] = None,
    ) -> "DataFrameMarketData":
        """
        Compute the indicator columns from raw OHLCV bars.

        Args:
            df: OHLCV DataFrame (oldest first)
            indicators: Indicator periods and price source
        """
        cfg = indicators or IndicatorConfig()
        frame = df.copy()

        price = price_source_series(frame, cfg.price_source)
        frame["price"] = price
        frame["rsi"] = calculate_rsi(price, cfg.rsi_period)
        frame["adx"] = calculate_adx(frame["high"], frame["low"], frame["close"], cfg.adx_period)
        frame["ma"] = calculate_moving_average(price, cfg.ma_period, cfg.ma_type)
        frame["volatility"] = calculate_std_dev(price, cfg.volatility_period)

        logger.debug(
            "Computed indicators for %d bars (RSI %d, ADX %d, %s MA %d, StdDev %d)",
            len(frame), cfg.rsi_period, cfg.adx_period, cfg.ma_type,
            cfg.ma_period, cfg.volatility_period,
        )
        return cls(frame)

    def __len__(self) -> int:
        return len(self._close)

    def bar(self, index: int) -> Bar:
        if index < 0 or index >= len(self):
            raise IndexError(f"Bar index {index} out of range (0..{len(self) - 1})")
        timestamp = None
        if self._timestamps is not None:
            timestamp = pd.Timestamp(self._timestamps[index])
        return Bar(
            index=index,
            open=float(self._open[index]),
            high=float(self._high[index]),
            low=float(self._low[index]),
            close=float(self._close[index]),
            volume=float(self._volume[index]),
            timestamp=timestamp,
        )

    def prices(self) -> np.ndarray:
        return self._prices

    def volatility_series(self) -> np.ndarray:
        return self._volatility

    def readings(self, index: int) -> IndicatorReadings:
        return IndicatorReadings(
            rsi=float(self._rsi[index]),
            adx=float(self._adx[index]),
            ma=float(self._ma[index]),
            volatility=float(self._volatility[index]),
        )


def load_ohlcv_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read and validate an OHLCV CSV file.

    Column names are matched case-insensitively; a ``timestamp``,
    ``time``, ``date`` or ``datetime`` column is used for ordering.
    """
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    for candidate in ("time", "date", "datetime"):
        if "timestamp" not in df.columns and candidate in df.columns:
            df = df.rename(columns={candidate: "timestamp"})

    df, result = validate_ohlc(df)
    for issue in result.issues:
        logger.debug("%s", issue)

    logger.info("Loaded %d bars from %s", len(df), path)
    return df
