"""
Base Strategy
=============
Abstract base class for bar-driven strategies.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..classifier.signal import TradeSignal
from ..data.market_data import MarketDataSource


@dataclass
class StrategyState:
    """Runtime counters of a strategy"""
    bars_processed: int = 0
    signals_generated: int = 0
    trades_taken: int = 0
    orders_skipped: int = 0
    orders_rejected: int = 0
    last_signal_bar: Optional[int] = None
    is_active: bool = False


class BaseStrategy(ABC):
    """
    Abstract base class for strategies.

    Lifecycle:
    1. start() once with the data source, before any bar is processed
    2. on_bar() for each new closed bar, in order
    3. stop() when the run ends
    """

    name: str = "BaseStrategy"

    def __init__(self):
        self.state = StrategyState()
        self.source: Optional[MarketDataSource] = None

    @property
    def is_active(self) -> bool:
        return self.state.is_active

    @abstractmethod
    def start(self, source: MarketDataSource, history_end: int = 0) -> None:
        """
        Prepare the strategy.

        Args:
            source: Market data the strategy reads from
            history_end: Bars before this index are used as warm-up only
        """
        pass

    @abstractmethod
    def on_bar(self, index: int) -> TradeSignal:
        """Process the closed bar at ``index`` and return its signal"""
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    def run(self, source: MarketDataSource, history_end: int = 0) -> List[TradeSignal]:
        """
        Replay every bar of ``source`` from ``history_end`` on.

        Returns:
            One TradeSignal per processed bar
        """
        self.start(source, history_end)
        signals = []
        try:
            for index in range(history_end, len(source)):
                signals.append(self.on_bar(index))
        finally:
            self.stop()
        return signals

    def get_status(self) -> dict:
        """Get strategy status"""
        return {
            "name": self.name,
            "is_active": self.state.is_active,
            "bars_processed": self.state.bars_processed,
            "signals_generated": self.state.signals_generated,
            "trades_taken": self.state.trades_taken,
            "orders_skipped": self.state.orders_skipped,
            "orders_rejected": self.state.orders_rejected,
        }
