# Lorentzian Classifier Bot
# =========================
# Streaming nearest-neighbor regime classifier with paper execution

"""
PROJECT STRUCTURE
=================

lorentzian_bot/
├── __init__.py              # Package initialization
├── main.py                  # CLI entry point - CSV replay
│
├── core/                    # Configuration and logging
│   ├── config.py           # Classifier / indicator / trading / instrument config
│   ├── constants.py        # Variant presets, feature kinds, defaults
│   └── logging_config.py   # Centralized logging setup, trade logger
│
├── data/                    # Bars and indicator readings
│   ├── market_data.py      # MarketDataSource, DataFrameMarketData, CSV loader
│   └── validators.py       # OHLC validation and cleanup
│
├── utils/
│   └── indicators.py       # RSI, ADX, moving averages, std dev
│
├── classifier/              # The per-bar cycle
│   ├── features.py         # Feature extraction and normalization
│   ├── labels.py           # Volatility-relative forward labels
│   ├── sample_store.py     # Bounded FIFO of historical samples
│   ├── similarity.py       # Lorentzian distance, pattern similarity
│   ├── neighbors.py        # Candidate filtering and ranking
│   ├── aggregator.py       # Similarity-weighted probabilities
│   ├── gates.py            # Stability gate, threshold / ADX / RSI filter
│   ├── signal.py           # TradeSignal, SignalDirection, CycleStatus
│   ├── state.py            # ClassifierState value
│   └── engine.py           # LorentzianClassifier
│
├── strategies/
│   ├── base_strategy.py    # start / on_bar / stop lifecycle
│   └── lorentzian_strategy.py
│
└── execution/
    └── paper_executor.py   # Simulated fills, pip SL/TP, statistics

USAGE
=====

    from lorentzian_bot import Config, LorentzianStrategy, DataFrameMarketData

    config = Config.load(variant="enhanced")
    source = DataFrameMarketData.from_ohlcv(bars, config.indicators)
    signals = LorentzianStrategy(config).run(source, history_end=2000)
"""

__version__ = "1.0.0"

from .core.config import Config, ClassifierConfig, ConfigurationError
from .classifier.engine import LorentzianClassifier, Evaluation
from .classifier.signal import TradeSignal, SignalDirection, CycleStatus
from .data.market_data import DataFrameMarketData, load_ohlcv_csv
from .strategies.lorentzian_strategy import LorentzianStrategy

__all__ = [
    "Config",
    "ClassifierConfig",
    "ConfigurationError",
    "LorentzianClassifier",
    "Evaluation",
    "TradeSignal",
    "SignalDirection",
    "CycleStatus",
    "DataFrameMarketData",
    "load_ohlcv_csv",
    "LorentzianStrategy",
]
