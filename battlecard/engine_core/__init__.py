"""
Engine Core - Deterministic battle state management and effect resolution.

The engine is the runtime that:
1. Manages GameState
2. Generates legal actions
3. Applies actions via the reducer
4. Dispatches trigger events to abilities and traps
5. Resolves combat, spells and status ticks step-by-step
"""

from .state import (
    Card, CardDefinition, GameState, GameStatus, Phase, PlayerState, Side,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, advance, apply_action, run_pending
from .action_generator import ActionGenerator, is_legal, legal_actions
from .combat import CombatResult, CombatantStats, resolve_combat, resolve_direct_attack
from .game_over import GameOverGuard, GameReport, build_report

__all__ = [
    "Card",
    "CardDefinition",
    "GameState",
    "GameStatus",
    "Phase",
    "PlayerState",
    "Side",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "advance",
    "apply_action",
    "run_pending",
    "ActionGenerator",
    "is_legal",
    "legal_actions",
    "CombatResult",
    "CombatantStats",
    "resolve_combat",
    "resolve_direct_attack",
    "GameOverGuard",
    "GameReport",
    "build_report",
]
