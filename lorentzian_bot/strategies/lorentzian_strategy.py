"""
Lorentzian Strategy
===================
Connects the classifier to the paper executor.

On every closed bar:
1. Check the open position's stop loss / take profit against the bar
2. Run one classifier cycle
3. Execute LONG / SHORT signals (an opposite position is flipped)
"""

import logging
from typing import Optional

from ..classifier.engine import LorentzianClassifier
from ..classifier.signal import TradeSignal
from ..classifier.state import ClassifierState
from ..core.config import Config, ConfigurationError
from ..core.logging_config import trade_logger
from ..data.market_data import MarketDataSource
from ..execution.paper_executor import ExecutionStatus, PaperExecutor
from .base_strategy import BaseStrategy, StrategyState


logger = logging.getLogger("lorentzian_bot.strategies.lorentzian")


class LorentzianStrategy(BaseStrategy):
    """
    Nearest-neighbor regime strategy.

    Usage:
        config = Config.load(variant="enhanced")
        strategy = LorentzianStrategy(config)
        signals = strategy.run(DataFrameMarketData.from_ohlcv(df))
    """

    name = "LorentzianClassifier"

    def __init__(self, config: Config, executor: Optional[PaperExecutor] = None):
        super().__init__()
        self.config = config
        self.classifier = LorentzianClassifier(config.classifier)
        self._executor = executor
        self.classifier_state: Optional[ClassifierState] = None

    @property
    def symbol(self) -> str:
        return self.config.instrument.symbol

    @property
    def executor(self) -> Optional[PaperExecutor]:
        return self._executor

    def start(self, source: MarketDataSource, history_end: int = 0) -> None:
        """
        Validate configuration, size orders and backfill the sample store.

        Raises:
            ConfigurationError: if any configuration section is invalid or
                the order volume is outside the instrument's range
        """
        ok, issues = self.config.validate()
        if not ok:
            raise ConfigurationError("; ".join(issues))

        units = self.config.instrument.to_units(self.config.trading.volume_lots)
        if self._executor is None:
            trading = self.config.trading
            self._executor = PaperExecutor(
                instrument=self.config.instrument,
                volume_units=units,
                stop_loss_pips=trading.stop_loss_pips,
                take_profit_pips=trading.take_profit_pips,
                initial_capital=trading.initial_capital,
                slippage_bps=trading.slippage_bps,
            )

        self.source = source
        self.state = StrategyState(is_active=True)

        state = self.classifier.initial_state()
        if history_end > 0:
            state = self.classifier.warm_up(state, source, history_end, start_index=0)
        self.classifier_state = state

        logger.info(
            "%s started on %s (%d bars, warm-up through bar %d)",
            self.name, self.symbol, len(source), history_end,
        )

    def on_bar(self, index: int) -> TradeSignal:
        if not self.state.is_active:
            raise RuntimeError(f"{self.name} is not started")

        self._executor.on_bar(self.source.bar(index))

        result = self.classifier.evaluate(self.classifier_state, self.source, index)
        self.classifier_state = result.state
        self.state.bars_processed += 1

        signal = result.signal
        if not signal.is_actionable:
            logger.debug("Bar %d: %s", index, signal)
            return signal

        self.state.signals_generated += 1
        self.state.last_signal_bar = index
        trade_logger.log_signal(
            self.symbol, signal.direction.value, index,
            signal.long_probability, signal.short_probability, signal.neighbors,
        )

        execution = self._executor.execute(signal, self.source.price(index))
        if execution.status is ExecutionStatus.FILLED:
            self.state.trades_taken += 1
        elif execution.status is ExecutionStatus.SKIPPED:
            self.state.orders_skipped += 1
            logger.debug("Bar %d: order skipped (%s)", index, execution.reason)
        else:
            self.state.orders_rejected += 1
            trade_logger.log_order_rejected(self.symbol, signal.direction.value, execution.reason)

        return signal

    def stop(self) -> None:
        """Close any open position at the last processed price"""
        if not self.state.is_active:
            return
        self.state.is_active = False

        last = self.classifier_state.last_bar_index if self.classifier_state else None
        if self._executor is not None and last is not None:
            self._executor.close_all_positions(self.source.price(last), last)

        logger.info(
            "%s stopped: %d bars, %d signals, %d trades",
            self.name, self.state.bars_processed,
            self.state.signals_generated, self.state.trades_taken,
        )
