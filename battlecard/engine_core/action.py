"""
Action System - Actions, payloads, and results.

Actions represent:
1. Player actions (draw, summon, cast, set, attack, end turn)
2. Opponent decisions (same shapes, validated the same way)
3. System actions (advance an in-flight resolution)

All state changes flow through actions. The same schema doubles as the
command format for networked play.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import Side


class ActionType(Enum):
    """Types of actions in the system."""
    # Player / opponent actions
    DRAW = "DRAW"
    SUMMON = "SUMMON"
    USE_SPELL = "USE_SPELL"
    SET_TRAP = "SET_TRAP"
    GO_TO_BATTLE = "GO_TO_BATTLE"
    ATTACK = "ATTACK"
    END_TURN = "END_TURN"
    WAIT = "WAIT"
    SURRENDER = "SURRENDER"

    # System actions
    ADVANCE = "ADVANCE"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    This is a generic container; validation happens in the reducer.
    """
    side: Side | None = None
    card_id: str | None = None  # instance id of the acting card
    target_id: str | None = None  # instance id of the target card
    sacrifices: list[str] = field(default_factory=list)


@dataclass
class Action:
    """
    A complete action to be applied to the battle state.

    Actions are:
    - Logged for replay
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @property
    def side(self) -> Side | None:
        return self.payload.side

    @classmethod
    def draw(cls, side: Side) -> Action:
        return cls(ActionType.DRAW, ActionPayload(side=side))

    @classmethod
    def summon(cls, side: Side, card_id: str, sacrifices: list[str] | None = None) -> Action:
        return cls(
            ActionType.SUMMON,
            ActionPayload(side=side, card_id=card_id, sacrifices=list(sacrifices or [])),
        )

    @classmethod
    def use_spell(cls, side: Side, card_id: str, target_id: str | None = None) -> Action:
        return cls(
            ActionType.USE_SPELL,
            ActionPayload(side=side, card_id=card_id, target_id=target_id),
        )

    @classmethod
    def set_trap(cls, side: Side, card_id: str) -> Action:
        return cls(ActionType.SET_TRAP, ActionPayload(side=side, card_id=card_id))

    @classmethod
    def go_to_battle(cls, side: Side) -> Action:
        return cls(ActionType.GO_TO_BATTLE, ActionPayload(side=side))

    @classmethod
    def attack(cls, side: Side, card_id: str, target_id: str | None = None) -> Action:
        """Attack a creature, or the player directly when target_id is None."""
        return cls(
            ActionType.ATTACK,
            ActionPayload(side=side, card_id=card_id, target_id=target_id),
        )

    @classmethod
    def end_turn(cls, side: Side) -> Action:
        return cls(ActionType.END_TURN, ActionPayload(side=side))

    @classmethod
    def wait(cls, side: Side) -> Action:
        return cls(ActionType.WAIT, ActionPayload(side=side))

    @classmethod
    def surrender(cls, side: Side) -> Action:
        return cls(ActionType.SURRENDER, ActionPayload(side=side))

    @classmethod
    def advance(cls) -> Action:
        return cls(ActionType.ADVANCE)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action succeeded
    - The resulting state (a rejected action still returns the input
      state plus a log line explaining the rejection)
    - Errors (if failed)
    - Human-readable changes for presentation
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        state: Any | None = None,
    ) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
