"""
Trap Engine - face-down cards that answer opponent events.

At most one trap activates per event: the first matching card in the
owner's trap zone. Survival traps are not scanned here; the reducer asks
find_survival_trap() whenever opponent damage would be lethal.
"""

from __future__ import annotations
import logging

from .effects import build_bundle
from .events import (
    Attacked, Destroyed, DirectAttacked, EffectBundle, PlayerDamage, Summoned, TriggerEvent,
)
from .state import (
    Card, EffectKind, EffectTarget, GameState, LogCategory, Side, TrapCondition,
)

logger = logging.getLogger(__name__)


SPECIAL_NEGATE_ATTACK = "negate_attack"
SPECIAL_SURVIVE = "survive_1hp"
SPECIAL_REFLECT = "reflect_damage"


class TrapEngine:

    def scan(self, state: GameState, event: TriggerEvent) -> EffectBundle:
        match = self._condition_for(state, event)
        if match is None:
            return EffectBundle()
        owner, condition, trigger_side, trigger_card = match

        trap = self._first_matching(state, owner, condition)
        if trap is None:
            return EffectBundle()

        bundle = EffectBundle(source=owner)
        bundle.spent_traps.append(trap.instance_id)
        bundle.traps_activated += 1
        bundle.log(f"Trap activated: {trap.name}!", LogCategory.TRAP)
        logger.debug("Trap %s answered %s", trap.card_id, condition.value)

        effect = trap.definition.trap_effect
        if effect.kind is EffectKind.SPECIAL and effect.special_id == SPECIAL_NEGATE_ATTACK:
            if isinstance(event, (Attacked, DirectAttacked)):
                bundle.negate_attack = True
                bundle.log("The attack was negated!", LogCategory.TRAP)
            else:
                bundle.log(f"{trap.name} has nothing to negate.", LogCategory.TRAP)
            return bundle

        if effect.kind is EffectKind.DAMAGE and effect.special_id == SPECIAL_REFLECT:
            amount = trigger_card.attack if trigger_card is not None else 0
            bundle.player_damage.append(PlayerDamage(trigger_side, amount))
            bundle.log(f"{trap.name} reflects {amount} damage!", LogCategory.TRAP)
            return bundle

        if effect.kind is EffectKind.DAMAGE and effect.target is not EffectTarget.ALL_ENEMIES:
            bundle.player_damage.append(PlayerDamage(trigger_side, effect.value))
            bundle.log(f"{trap.name} deals {effect.value} damage!", LogCategory.TRAP)
            return bundle

        if effect.target is EffectTarget.ALL_ENEMIES:
            targets = [c for c in state.player(trigger_side).field if c.is_creature]
        else:
            targets = [trigger_card] if trigger_card is not None else []
        return build_bundle(owner, effect, trap.name, targets, LogCategory.TRAP, bundle)

    def _condition_for(self, state: GameState, event: TriggerEvent):
        """Return (trap owner, condition, triggering side, triggering card) or None."""
        if isinstance(event, Attacked):
            card = state.player(event.side).field_card(event.attacker_id)
            return event.side.opponent, TrapCondition.ON_ATTACK, event.side, card
        if isinstance(event, DirectAttacked):
            card = state.player(event.side).field_card(event.attacker_id)
            return event.side.opponent, TrapCondition.ON_DIRECT_ATTACK, event.side, card
        if isinstance(event, Summoned):
            card = state.player(event.side).field_card(event.card_id)
            return event.side.opponent, TrapCondition.ON_SUMMON, event.side, card
        if isinstance(event, Destroyed):
            # Only the opponent destroying one of the trap owner's creatures counts
            if event.cause is None or event.cause is event.side:
                return None
            card = state.player(event.cause).field_card(event.destroyer_id)
            return event.side, TrapCondition.ON_DESTROY, event.cause, card
        return None

    def _first_matching(self, state: GameState, owner: Side, condition: TrapCondition) -> Card | None:
        for trap in state.player(owner).trap_zone:
            defn = trap.definition
            if defn.trap_condition is not condition or defn.trap_effect is None:
                continue
            if defn.trap_effect.special_id == SPECIAL_SURVIVE:
                continue
            return trap
        return None

    def find_survival_trap(self, state: GameState, side: Side) -> Card | None:
        for trap in state.player(side).trap_zone:
            effect = trap.definition.trap_effect
            if effect is not None and effect.special_id == SPECIAL_SURVIVE:
                return trap
        return None
