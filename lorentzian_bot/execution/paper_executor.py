"""
Paper Mode Executor
===================
Simulates order execution for classifier signals.

Features:
1. One position per instrument, flipped on an opposite signal
2. Stop loss / take profit in pips, checked against each bar's range
3. Trade history and P&L statistics
4. Explicit ExecutionResult values instead of exceptions
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.config import InstrumentSpec
from ..core.logging_config import trade_logger
from ..classifier.signal import SignalDirection, TradeSignal
from ..data.market_data import Bar


logger = logging.getLogger("lorentzian_bot.execution.paper_executor")


class ExecutionStatus(Enum):
    FILLED = "FILLED"      # New position opened
    SKIPPED = "SKIPPED"    # Same-side position already open
    REJECTED = "REJECTED"  # Order could not be placed


class ExitReason(Enum):
    STOP_LOSS = "STOP_LOSS"
    TARGET_HIT = "TARGET_HIT"
    SIGNAL_REVERSAL = "SIGNAL_REVERSAL"
    END_OF_RUN = "END_OF_RUN"


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome reported back to the caller; never fed to the classifier"""
    status: ExecutionStatus
    entry_price: Optional[float] = None
    reason: str = ""

    @property
    def is_success(self) -> bool:
        return self.status is ExecutionStatus.FILLED

    @classmethod
    def ok(cls, entry_price: float) -> "ExecutionResult":
        return cls(ExecutionStatus.FILLED, entry_price=entry_price)

    @classmethod
    def skipped(cls, reason: str) -> "ExecutionResult":
        return cls(ExecutionStatus.SKIPPED, reason=reason)

    @classmethod
    def rejected(cls, reason: str) -> "ExecutionResult":
        return cls(ExecutionStatus.REJECTED, reason=reason)


@dataclass
class PaperPosition:
    """Open paper position"""
    side: str                    # "LONG" or "SHORT"
    units: float
    entry_price: float
    stop_loss: float
    take_profit: float
    entry_bar: int
    current_price: float = 0.0
    unrealized_pnl: float = 0.0

    def pnl_at(self, price: float) -> float:
        if self.side == "LONG":
            return (price - self.entry_price) * self.units
        return (self.entry_price - price) * self.units

    def update_pnl(self, current_price: float) -> None:
        """Update unrealized P&L"""
        self.current_price = current_price
        self.unrealized_pnl = self.pnl_at(current_price)


@dataclass
class PaperTrade:
    """Record of completed paper trade"""
    trade_id: str
    side: str
    units: float
    entry_price: float
    exit_price: float
    entry_bar: int
    exit_bar: int
    gross_pnl: float
    exit_reason: str = ""


class PaperExecutor:
    """
    Paper trading executor for a single instrument.

    Usage:
        executor = PaperExecutor(
            instrument=InstrumentSpec(symbol="EURUSD"),
            volume_units=10_000,
            stop_loss_pips=25,
            take_profit_pips=50,
        )

        result = executor.execute(signal, price=1.0850)
        closed = executor.on_bar(next_bar)
    """

    def __init__(
        self,
        instrument: InstrumentSpec,
        volume_units: float,
        stop_loss_pips: float,
        take_profit_pips: float,
        initial_capital: float = 100_000.0,
        slippage_bps: int = 0,
    ):
        """
        Initialize paper executor.

        Args:
            instrument: Symbol, pip size and tradable volume range
            volume_units: Order size in units (already validated)
            stop_loss_pips: Stop distance from entry
            take_profit_pips: Target distance from entry
            initial_capital: Starting capital
            slippage_bps: Fixed adverse slippage in basis points
        """
        self.instrument = instrument
        self.volume_units = volume_units
        self.stop_loss_pips = stop_loss_pips
        self.take_profit_pips = take_profit_pips
        self.slippage_bps = slippage_bps
        self.initial_capital = initial_capital
        self.capital = initial_capital

        self.position: Optional[PaperPosition] = None
        self.trades: List[PaperTrade] = []
        self._trade_seq = 0

        self.stats = {
            'total_trades': 0,
            'winning_trades': 0,
            'losing_trades': 0,
            'gross_pnl': 0.0,
        }

    @property
    def symbol(self) -> str:
        return self.instrument.symbol

    def execute(self, signal: TradeSignal, price: float) -> ExecutionResult:
        """
        Act on a LONG or SHORT signal at ``price``.

        An opposite position is closed first; a same-side position is left
        alone and the call reports SKIPPED.
        """
        if not signal.is_actionable:
            return ExecutionResult.rejected("Signal has no direction")

        if not math.isfinite(price) or price <= 0:
            return ExecutionResult.rejected("Invalid price")

        side = "LONG" if signal.direction is SignalDirection.LONG else "SHORT"

        if self.position is not None:
            if self.position.side == side:
                return ExecutionResult.skipped(f"{side} position already open")
            self._close_position(price, signal.bar_index, ExitReason.SIGNAL_REVERSAL)

        fill_price = self._apply_slippage(price, side)
        self._open_position(side, fill_price, signal.bar_index)
        return ExecutionResult.ok(fill_price)

    def __call__(self, signal: TradeSignal, price: float) -> ExecutionResult:
        """Callable interface for the strategy"""
        return self.execute(signal, price)

    def _apply_slippage(self, price: float, side: str) -> float:
        slippage_pct = self.slippage_bps / 10000
        if side == "LONG":
            # Buy fills slightly higher
            return price * (1 + slippage_pct)
        # Sell fills slightly lower
        return price * (1 - slippage_pct)

    def _open_position(self, side: str, price: float, bar_index: int) -> None:
        stop_distance = self.stop_loss_pips * self.instrument.pip_size
        target_distance = self.take_profit_pips * self.instrument.pip_size

        if side == "LONG":
            stop_loss, take_profit = price - stop_distance, price + target_distance
        else:
            stop_loss, take_profit = price + stop_distance, price - target_distance

        self.position = PaperPosition(
            side=side,
            units=self.volume_units,
            entry_price=price,
            stop_loss=stop_loss,
            take_profit=take_profit,
            entry_bar=bar_index,
            current_price=price,
        )
        trade_logger.log_order_filled(
            self.symbol, side, self.volume_units, price, stop_loss, take_profit
        )

    def _close_position(self, price: float, bar_index: int, reason: ExitReason) -> PaperTrade:
        """Close the open position and record the trade"""
        position = self.position
        gross_pnl = position.pnl_at(price)

        self._trade_seq += 1
        trade = PaperTrade(
            trade_id=f"TRADE-{self._trade_seq:05d}",
            side=position.side,
            units=position.units,
            entry_price=position.entry_price,
            exit_price=price,
            entry_bar=position.entry_bar,
            exit_bar=bar_index,
            gross_pnl=gross_pnl,
            exit_reason=reason.value,
        )
        self.trades.append(trade)

        self.stats['total_trades'] += 1
        self.stats['gross_pnl'] += gross_pnl
        if gross_pnl > 0:
            self.stats['winning_trades'] += 1
        else:
            self.stats['losing_trades'] += 1

        self.capital += gross_pnl
        self.position = None

        trade_logger.log_position_closed(
            self.symbol, trade.side, trade.units, trade.entry_price,
            price, gross_pnl, reason.value,
        )
        return trade

    def on_bar(self, bar: Bar) -> Optional[PaperTrade]:
        """
        Check the open position against a new bar.

        The stop is checked before the target, so a bar touching both
        counts as a stop-out.

        Returns:
            The closed trade, if the stop or target was hit
        """
        position = self.position
        if position is None:
            return None

        if position.side == "LONG":
            if bar.low <= position.stop_loss:
                return self._close_position(position.stop_loss, bar.index, ExitReason.STOP_LOSS)
            if bar.high >= position.take_profit:
                return self._close_position(position.take_profit, bar.index, ExitReason.TARGET_HIT)
        else:
            if bar.high >= position.stop_loss:
                return self._close_position(position.stop_loss, bar.index, ExitReason.STOP_LOSS)
            if bar.low <= position.take_profit:
                return self._close_position(position.take_profit, bar.index, ExitReason.TARGET_HIT)

        position.update_pnl(bar.close)
        return None

    def close_all_positions(self, price: float, bar_index: int) -> float:
        """
        Close any open position at ``price``.

        Returns:
            Realized P&L of the closed position (0.0 if none)
        """
        if self.position is None:
            return 0.0
        return self._close_position(price, bar_index, ExitReason.END_OF_RUN).gross_pnl

    def get_trades(self) -> List[Dict[str, Any]]:
        """Trade history as dicts"""
        return [
            {
                'trade_id': t.trade_id,
                'side': t.side,
                'units': t.units,
                'entry_price': t.entry_price,
                'exit_price': t.exit_price,
                'entry_bar': t.entry_bar,
                'exit_bar': t.exit_bar,
                'gross_pnl': t.gross_pnl,
                'exit_reason': t.exit_reason,
            }
            for t in self.trades
        ]

    def get_statistics(self) -> Dict[str, Any]:
        """Get executor statistics"""
        win_rate = 0.0
        if self.stats['total_trades'] > 0:
            win_rate = self.stats['winning_trades'] / self.stats['total_trades'] * 100

        return {
            **self.stats,
            'win_rate': win_rate,
            'capital': self.capital,
            'return_pct': (self.capital - self.initial_capital) / self.initial_capital * 100,
            'open_position': self.position.side if self.position else None,
        }

    def reset(self) -> None:
        """Reset executor to initial state"""
        self.capital = self.initial_capital
        self.position = None
        self.trades.clear()
        self._trade_seq = 0
        self.stats = {
            'total_trades': 0,
            'winning_trades': 0,
            'losing_trades': 0,
            'gross_pnl': 0.0,
        }
        logger.info("[PAPER] Executor reset to initial state")
