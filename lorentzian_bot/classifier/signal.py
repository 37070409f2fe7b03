"""
Trade Signals
=============
Per-bar output of the classifier: a direction plus the probabilities
behind it and where in the cycle the decision was made.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class SignalDirection(Enum):
    """Direction handed to the execution collaborator"""
    LONG = "LONG"
    SHORT = "SHORT"
    NONE = "NONE"


class CycleStatus(Enum):
    """Where a per-bar cycle ended"""
    EMITTED = "EMITTED"                            # Long or short signal
    FILTERED = "FILTERED"                          # Thresholds / filters not met
    UNSTABLE = "UNSTABLE"                          # Volatility gate failed
    NO_NEIGHBORS = "NO_NEIGHBORS"                  # Nothing passed the similarity floor
    INSUFFICIENT_HISTORY = "INSUFFICIENT_HISTORY"  # Warm-up, no search ran


@dataclass(frozen=True)
class TradeSignal:
    """
    Classifier decision for one bar.

    Usage:
        signal = TradeSignal(
            direction=SignalDirection.LONG,
            long_probability=0.8,
            short_probability=0.2,
            bar_index=3120,
            status=CycleStatus.EMITTED,
            neighbors=12,
        )
    """
    direction: SignalDirection
    long_probability: float
    short_probability: float
    bar_index: int
    status: CycleStatus
    neighbors: int = 0
    reason: str = ""

    @property
    def is_long(self) -> bool:
        return self.direction is SignalDirection.LONG

    @property
    def is_short(self) -> bool:
        return self.direction is SignalDirection.SHORT

    @property
    def is_actionable(self) -> bool:
        """True when the execution collaborator should be called"""
        return self.direction is not SignalDirection.NONE

    @classmethod
    def none(
        cls,
        bar_index: int,
        status: CycleStatus,
        reason: str = "",
        long_probability: float = 0.0,
        short_probability: float = 0.0,
        neighbors: int = 0,
    ) -> "TradeSignal":
        """Create a no-signal result"""
        return cls(
            direction=SignalDirection.NONE,
            long_probability=long_probability,
            short_probability=short_probability,
            bar_index=bar_index,
            status=status,
            neighbors=neighbors,
            reason=reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "direction": self.direction.value,
            "long_probability": self.long_probability,
            "short_probability": self.short_probability,
            "bar_index": self.bar_index,
            "status": self.status.value,
            "neighbors": self.neighbors,
            "reason": self.reason,
        }

    def __str__(self) -> str:
        """Human-readable representation"""
        text = (
            f"{self.direction.value} @ bar {self.bar_index} | "
            f"long={self.long_probability:.4f} short={self.short_probability:.4f} | "
            f"neighbors={self.neighbors} | {self.status.value}"
        )
        if self.reason:
            text += f" | {self.reason}"
        return text
