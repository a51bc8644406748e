"""
Action Generator - Generates legal actions from a battle state.

The action generator is used by:
1. Opponent strategies to enumerate possible moves
2. The API to show available actions
3. Validation (is this action in legal_actions?)

Design: Generates Action objects, not just action types.
Summons come with a default sacrifice choice; other sacrifice sets are
still accepted by the reducer.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .action import Action, ActionType
from .spells import SpellResolver
from .state import CardKind, GameState, Phase, Side
from .summon import SummonValidator


@dataclass
class ActionGenerator:
    """Generates legal actions for one side of the table."""
    summons: SummonValidator = field(default_factory=SummonValidator)
    spells: SpellResolver = field(default_factory=SpellResolver)

    def generate(self, state: GameState) -> list[Action]:
        """Generate all legal actions for the side whose turn it is."""
        return self.generate_for_side(state, state.current_side)

    def generate_for_side(self, state: GameState, side: Side) -> list[Action]:
        if state.is_over:
            return []

        # A resolution in flight blocks everything else
        if state.pending is not None:
            return [Action.advance()]

        if side is not state.current_side:
            return []

        if state.phase is Phase.DRAW:
            return [Action.draw(side)]

        actions = []
        if state.phase is Phase.MAIN:
            actions.extend(self._generate_summon_actions(state, side))
            actions.extend(self._generate_spell_actions(state, side))
            actions.extend(self._generate_trap_actions(state, side))
            actions.append(Action.go_to_battle(side))
        elif state.phase is Phase.BATTLE:
            actions.extend(self._generate_attack_actions(state, side))

        actions.append(Action.end_turn(side))
        return actions

    def _generate_summon_actions(self, state: GameState, side: Side) -> list[Action]:
        player = state.player(side)
        actions = []
        for card in player.hand:
            if not self.summons.can_summon(player, card, state.rules):
                continue
            sacrifices = self.summons.choose_sacrifices(player, card, state.rules)
            if sacrifices is not None:
                actions.append(Action.summon(side, card.instance_id, sacrifices))
        return actions

    def _generate_spell_actions(self, state: GameState, side: Side) -> list[Action]:
        player = state.player(side)
        actions = []
        for card in player.hand:
            if card.kind is not CardKind.SPELL:
                continue
            needed = self.spells.needs_target(card)
            if needed == "enemy":
                candidates = [c.instance_id for c in state.player(side.opponent).field] or [None]
            elif needed == "ally":
                candidates = [c.instance_id for c in player.field]
            else:
                candidates = [None]
            for target_id in candidates:
                if self.spells.validate_target(state, side, card, target_id) is None:
                    actions.append(Action.use_spell(side, card.instance_id, target_id))
        return actions

    def _generate_trap_actions(self, state: GameState, side: Side) -> list[Action]:
        player = state.player(side)
        if len(player.trap_zone) >= state.rules.max_trap_zone:
            return []
        return [
            Action.set_trap(side, card.instance_id)
            for card in player.hand
            if card.kind is CardKind.TRAP
        ]

    def _generate_attack_actions(self, state: GameState, side: Side) -> list[Action]:
        if state.turn_count == 1 and side is state.starter:
            return []
        player = state.player(side)
        defenders = state.player(side.opponent).field
        actions = []
        for attacker in player.field:
            if attacker.has_attacked or not attacker.is_creature:
                continue
            if not defenders:
                actions.append(Action.attack(side, attacker.instance_id))
            for defender in defenders:
                actions.append(Action.attack(side, attacker.instance_id, defender.instance_id))
        return actions


def legal_actions(state: GameState, side: Side | None = None) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    generator = ActionGenerator()
    if side is None:
        return generator.generate(state)
    return generator.generate_for_side(state, side)


def is_legal(state: GameState, action: Action) -> bool:
    """Check if a specific action is legal."""
    if action.action_type is ActionType.SURRENDER:
        return not state.is_over
    legal = legal_actions(state, action.side or state.current_side)
    # Compare by type and key payload fields
    for a in legal:
        if (
            a.action_type == action.action_type
            and a.payload.side == action.payload.side
            and a.payload.card_id == action.payload.card_id
            and a.payload.target_id == action.payload.target_id
        ):
            return True
    return False
