# Execution Module
# ================
# Paper execution of classifier signals

from .paper_executor import (
    PaperExecutor,
    PaperPosition,
    PaperTrade,
    ExecutionResult,
    ExecutionStatus,
    ExitReason,
)

__all__ = [
    "PaperExecutor",
    "PaperPosition",
    "PaperTrade",
    "ExecutionResult",
    "ExecutionStatus",
    "ExitReason",
]
