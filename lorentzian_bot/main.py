"""
Lorentzian Classifier Bot
=========================
Command-line entry point: replays an OHLCV CSV through the classifier
and the paper executor.

This bot:
1. Loads and validates OHLCV bars
2. Computes RSI, ADX, moving average and volatility
3. Backfills the sample store from the warm-up bars
4. Emits LONG / SHORT signals and paper-trades them with pip SL/TP
5. Logs a statistics summary and writes signals.csv to the data directory

Usage:
    python -m lorentzian_bot.main --csv eurusd_h1.csv
    python -m lorentzian_bot.main --csv eurusd_h1.csv --variant basic --debug
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .core.config import Config, ConfigurationError
from .core.constants import DEFAULT_VARIANT, VARIANTS
from .core.logging_config import setup_logging
from .classifier.signal import CycleStatus, TradeSignal
from .data.market_data import DataFrameMarketData, load_ohlcv_csv
from .strategies.lorentzian_strategy import LorentzianStrategy


logger = logging.getLogger("lorentzian_bot.main")


class LorentzianBot:
    """
    Replay runner.

    Args:
        config: Loaded configuration
        history_bars: Leading bars used for warm-up only (no trading)
    """

    def __init__(self, config: Config, history_bars: int = 0):
        self.config = config
        self.history_bars = history_bars
        self.strategy = LorentzianStrategy(config)
        self.signals: List[TradeSignal] = []

        logger.info(config.get_summary())

    def run(self, bars: pd.DataFrame) -> List[TradeSignal]:
        """Compute indicators for ``bars`` and replay them"""
        source = DataFrameMarketData.from_ohlcv(bars, self.config.indicators)
        history_end = min(max(self.history_bars, 0), len(source))

        self.signals = self.strategy.run(source, history_end)
        self._log_summary()
        return self.signals

    def _log_summary(self) -> None:
        counts = {status: 0 for status in CycleStatus}
        for signal in self.signals:
            counts[signal.status] += 1

        stats = self.strategy.executor.get_statistics()

        logger.info("=" * 60)
        logger.info("RUN SUMMARY")
        logger.info("=" * 60)
        for status, count in counts.items():
            logger.info(f"{status.value:<22} {count}")
        logger.info(f"Total Trades: {stats['total_trades']}")
        logger.info(f"Gross P&L: {stats['gross_pnl']:.2f}")
        logger.info(f"Win Rate: {stats['win_rate']:.1f}%")
        logger.info(f"Return: {stats['return_pct']:.2f}%")
        logger.info("=" * 60)

    def save_signals(self, path: Path) -> Path:
        """Write every processed bar's signal to CSV"""
        frame = pd.DataFrame([signal.to_dict() for signal in self.signals])
        frame.to_csv(path, index=False)
        logger.info(f"Signals saved to {path}")
        return path


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Lorentzian nearest-neighbor regime classifier (paper replay)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m lorentzian_bot.main --csv bars.csv                    # Enhanced preset
  python -m lorentzian_bot.main --csv bars.csv --variant basic    # Basic preset
  python -m lorentzian_bot.main --csv bars.csv --history 2000     # Warm up on 2000 bars
        """,
    )

    parser.add_argument(
        "--csv",
        type=str,
        required=True,
        help="Path to OHLCV CSV file (oldest bar first)",
    )
    parser.add_argument(
        "--variant",
        choices=sorted(VARIANTS),
        default=DEFAULT_VARIANT,
        help=f"Parameter preset (default: {DEFAULT_VARIANT})",
    )
    parser.add_argument(
        "--history",
        type=int,
        default=0,
        help="Leading bars used only to fill the sample store",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        help="Directory for logs and output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (per-bar probabilities)",
    )

    args = parser.parse_args(argv)
    if args.history < 0:
        parser.error("--history must be zero or positive")

    config = Config.load(variant=args.variant, data_dir=args.data_dir)
    setup_logging(log_dir=config.logs_dir, debug=args.debug)

    try:
        bars = load_ohlcv_csv(Path(args.csv))
        bot = LorentzianBot(config, history_bars=args.history)
        bot.run(bars)
        bot.save_signals(config.data_dir / "signals.csv")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except Exception as e:
        logger.exception(f"Run failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
