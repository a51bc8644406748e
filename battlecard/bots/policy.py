"""
Opponent Policy - Interface for opponent decision-making.

An OpponentStrategy looks at what its side can see of the table and
returns one action. Its output is never trusted: the reducer validates it
exactly like a human action.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
import random

from ..engine_core.action import Action, ActionType

if TYPE_CHECKING:
    from ..engine_core.state import Card, GameState, Phase, Side


class Difficulty(Enum):
    EASY = "EASY"
    NORMAL = "NORMAL"
    HARD = "HARD"
    EXPERT = "EXPERT"


@dataclass
class BotDecision:
    """
    A decision made by a strategy.

    Contains:
    - The action to take
    - Explanation (for logs/debugging)
    """
    action: Action
    explanation: str = ""


@dataclass
class OpponentView:
    """
    What one side may look at when deciding.

    The opponent's hand and deck are reduced to counts and their set
    traps to a number.
    """
    side: Side
    phase: Phase
    turn_count: int
    is_starter: bool
    hp: int
    hand: list[Card]
    field: list[Card]
    trap_zone: list[Card]
    graveyard: list[Card]
    deck_size: int
    opponent_hp: int
    opponent_field: list[Card]
    opponent_hand_size: int
    opponent_trap_count: int
    max_field_size: int = 3
    max_trap_zone: int = 2
    max_hp: int = 8000
    difficulty: Difficulty = Difficulty.NORMAL

    @classmethod
    def from_state(
        cls,
        state: GameState,
        side: Side,
        difficulty: Difficulty = Difficulty.NORMAL,
    ) -> OpponentView:
        me = state.player(side)
        them = state.player(side.opponent)
        return cls(
            side=side,
            phase=state.phase,
            turn_count=state.turn_count,
            is_starter=state.starter is side,
            hp=me.hp,
            hand=list(me.hand),
            field=list(me.field),
            trap_zone=list(me.trap_zone),
            graveyard=list(me.graveyard),
            deck_size=len(me.deck),
            opponent_hp=them.hp,
            opponent_field=list(them.field),
            opponent_hand_size=len(them.hand),
            opponent_trap_count=len(them.trap_zone),
            max_field_size=state.rules.max_field_size,
            max_trap_zone=state.rules.max_trap_zone,
            max_hp=state.rules.max_hp,
            difficulty=difficulty,
        )


class OpponentStrategy(ABC):
    """
    Abstract base class for opponent strategies.

    Implementations can range from simple heuristics
    to search; all of them see only an OpponentView.
    """

    @abstractmethod
    def decide(self, view: OpponentView, legal_actions: list[Action]) -> BotDecision:
        """
        Select the next action.

        Args:
            view: What this side can see
            legal_actions: Actions the engine currently accepts

        Returns:
            BotDecision with the selected action
        """
        pass

    def get_name(self) -> str:
        """Get the strategy's name/identifier."""
        return self.__class__.__name__


def _playable(legal_actions: list[Action]) -> list[Action]:
    return [a for a in legal_actions if a.action_type is not ActionType.ADVANCE]


class RandomStrategy(OpponentStrategy):
    """
    Random strategy - selects actions uniformly at random.

    Used for:
    - Testing
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def decide(self, view: OpponentView, legal_actions: list[Action]) -> BotDecision:
        choices = _playable(legal_actions)
        if not choices:
            return BotDecision(action=Action.wait(view.side), explanation="Nothing to do")

        action = self.rng.choice(choices)
        return BotDecision(action=action, explanation=f"Selected randomly from {len(choices)}")


class FirstLegalStrategy(OpponentStrategy):
    """
    First-legal strategy - always selects the first legal action.

    Used for:
    - Deterministic testing
    """

    def decide(self, view: OpponentView, legal_actions: list[Action]) -> BotDecision:
        choices = _playable(legal_actions)
        if not choices:
            return BotDecision(action=Action.wait(view.side), explanation="Nothing to do")

        return BotDecision(action=choices[0], explanation="Selected first legal action")
