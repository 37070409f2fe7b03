# Strategies Module
# =================
# Strategy lifecycle around the classifier

from .base_strategy import BaseStrategy, StrategyState
from .lorentzian_strategy import LorentzianStrategy

__all__ = [
    "BaseStrategy",
    "StrategyState",
    "LorentzianStrategy",
]
