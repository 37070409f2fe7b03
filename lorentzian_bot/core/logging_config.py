"""
Logging Configuration
=====================
Centralized logging setup for the classifier bot.
"""

import os
import sys
import logging
from pathlib import Path
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional


ROOT_LOGGER = "lorentzian_bot"

# Default log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log levels for different components
COMPONENT_LOG_LEVELS = {
    "lorentzian_bot": logging.INFO,
    "lorentzian_bot.core": logging.INFO,
    "lorentzian_bot.classifier": logging.INFO,
    "lorentzian_bot.execution": logging.INFO,
    "lorentzian_bot.strategies": logging.INFO,
    "lorentzian_bot.data": logging.DEBUG,  # More verbose for data issues
}


class ColorFormatter(logging.Formatter):
    """Colored log formatter for console output"""

    COLORS = {
        logging.DEBUG: "\033[36m",     # Cyan
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelno, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _rotating_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    return handler


def setup_logging(
    log_dir: Optional[Path] = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    debug: bool = False,
) -> None:
    """
    Set up logging for the classifier bot.

    Args:
        log_dir: Directory for log files
        console_level: Logging level for console output
        file_level: Logging level for file output
        max_bytes: Max size of each log file
        backup_count: Number of backup files to keep
        debug: Lower every component to DEBUG (per-bar probabilities)
    """
    if log_dir is None:
        log_dir = Path(__file__).parent.parent.parent / "bot_data" / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers will filter
    root_logger.handlers.clear()

    # Console handler with colors
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else console_level)
    if sys.platform != "win32" or os.getenv("TERM"):
        console_handler.setFormatter(ColorFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    root_logger.addHandler(console_handler)

    today = datetime.now().strftime("%Y-%m-%d")

    # Main log file (rotating by size)
    root_logger.addHandler(
        _rotating_handler(log_dir / f"bot_{today}.log", file_level, max_bytes, backup_count)
    )

    # Trade log (separate file for signals and trades only)
    trade_handler = _rotating_handler(
        log_dir / f"trades_{today}.log", logging.INFO, max_bytes, backup_count
    )
    trade_handler.addFilter(
        lambda record: "TRADE" in record.getMessage() or "SIGNAL" in record.getMessage()
    )
    trade_log = logging.getLogger(f"{ROOT_LOGGER}.trades")
    trade_log.handlers.clear()
    trade_log.addHandler(trade_handler)

    # Error log (separate file for errors only)
    root_logger.addHandler(
        _rotating_handler(log_dir / f"errors_{today}.log", logging.ERROR, max_bytes, backup_count)
    )

    for component, level in COMPONENT_LOG_LEVELS.items():
        logging.getLogger(component).setLevel(logging.DEBUG if debug else level)

    root_logger.info("Logging initialized: %s", log_dir)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a component.

    Args:
        name: Component name (e.g., "classifier", "execution", "strategies")

    Returns:
        Logger instance with proper hierarchy
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class TradeLogger:
    """
    Specialized logger for signal and trade events.

    Logs to both main log and separate trade log file.
    """

    def __init__(self):
        self.logger = get_logger("trades")

    def log_signal(
        self,
        symbol: str,
        direction: str,
        bar_index: int,
        long_probability: float,
        short_probability: float,
        neighbors: int,
    ):
        """Log an emitted classifier signal"""
        self.logger.info(
            "SIGNAL | %s | %s @ bar %d | long=%.4f short=%.4f | neighbors=%d",
            symbol, direction, bar_index, long_probability, short_probability, neighbors
        )

    def log_order_filled(
        self,
        symbol: str,
        side: str,
        units: float,
        fill_price: float,
        stop_loss: float,
        take_profit: float,
    ):
        """Log an opened position"""
        self.logger.info(
            "TRADE:ORDER_FILLED | %s | %s %.0f @ %.5f | SL=%.5f | TP=%.5f",
            symbol, side, units, fill_price, stop_loss, take_profit
        )

    def log_order_rejected(self, symbol: str, side: str, reason: str):
        """Log an order rejection"""
        self.logger.warning(
            "TRADE:ORDER_REJECTED | %s | %s | reason=%s",
            symbol, side, reason
        )

    def log_position_closed(
        self,
        symbol: str,
        side: str,
        units: float,
        entry_price: float,
        exit_price: float,
        pnl: float,
        reason: str,
    ):
        """Log a closed position"""
        pnl_str = f"+{pnl:.2f}" if pnl >= 0 else f"{pnl:.2f}"
        self.logger.info(
            "TRADE:POSITION_CLOSED | %s | %s %.0f | entry=%.5f exit=%.5f | PnL=%s | %s",
            symbol, side, units, entry_price, exit_price, pnl_str, reason
        )


# Global trade logger instance
trade_logger = TradeLogger()
