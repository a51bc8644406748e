"""
Bots module - Opponent strategies.

Provides:
- OpponentStrategy: Interface for opponent decision-making
- OpponentView: The information a strategy may see
- GreedyStrategy: Reference heuristic opponent
- SacrificeStrategy: How the greedy opponent pays summon costs
"""

from .policy import (
    BotDecision,
    Difficulty,
    FirstLegalStrategy,
    OpponentStrategy,
    OpponentView,
    RandomStrategy,
)
from .greedy import GreedyStrategy, SacrificeStrategy, pick_sacrifices

__all__ = [
    "BotDecision",
    "Difficulty",
    "FirstLegalStrategy",
    "OpponentStrategy",
    "OpponentView",
    "RandomStrategy",
    "GreedyStrategy",
    "SacrificeStrategy",
    "pick_sacrifices",
]
