"""
Ability Processor - creature abilities keyed by trigger.

evaluate() turns a trigger event into an EffectBundle for the reducer to
apply. passive_modifiers() computes standing bonuses and never touches
the state.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .effects import ally_creatures, build_bundle, enemy_creatures, strongest
from .events import (
    Attacked, Damaged, Destroyed, DirectAttacked, EffectBundle, Summoned,
    TriggerEvent, TurnEnded, TurnStarted,
)
from .state import (
    AbilityTrigger, Card, EffectKind, EffectTarget, GameState, LogCategory, Side, Stat,
)

logger = logging.getLogger(__name__)


SPECIAL_EVASION = "evasion"
SPECIAL_TYPE_BOOST = "type_boost"


@dataclass(frozen=True)
class PassiveModifiers:
    attack: int = 0
    defense: int = 0
    evasion: int = 0  # percent chance to dodge an attack


class AbilityProcessor:
    """Evaluates creature abilities against trigger events."""

    def evaluate(self, state: GameState, event: TriggerEvent) -> EffectBundle:
        bundle = EffectBundle()

        for owner, card, focus in self._triggered(state, event):
            ability = card.ability
            bundle.source = owner
            bundle.abilities_triggered += 1
            bundle.log(f"{card.name}'s {ability.name} activates!", LogCategory.EFFECT)
            targets = self._targets(state, owner, card, ability.effect.target, focus)
            build_bundle(owner, ability.effect, card.name, targets, LogCategory.EFFECT, bundle)
            logger.debug("Ability %s fired on %s", ability.ability_id, type(event).__name__)

        return bundle

    def _triggered(self, state: GameState, event: TriggerEvent):
        """Yield (owner, card, focus card) for every ability this event fires."""
        if isinstance(event, Summoned):
            card = state.player(event.side).field_card(event.card_id)
            if _has_trigger(card, AbilityTrigger.ON_SUMMON):
                yield event.side, card, None

        elif isinstance(event, Attacked):
            card = state.player(event.side).field_card(event.attacker_id)
            if _has_trigger(card, AbilityTrigger.ON_ATTACK):
                focus = state.player(event.side.opponent).field_card(event.defender_id)
                yield event.side, card, focus

        elif isinstance(event, DirectAttacked):
            card = state.player(event.side).field_card(event.attacker_id)
            if _has_trigger(card, AbilityTrigger.ON_ATTACK):
                yield event.side, card, None

        elif isinstance(event, Destroyed):
            if _has_trigger(event.card, AbilityTrigger.ON_DESTROY):
                focus = None
                if event.cause is not None and event.cause is not event.side:
                    focus = state.player(event.cause).field_card(event.destroyer_id)
                yield event.side, event.card, focus

        elif isinstance(event, (TurnStarted, TurnEnded)):
            trigger = (
                AbilityTrigger.ON_TURN_START
                if isinstance(event, TurnStarted)
                else AbilityTrigger.ON_TURN_END
            )
            for card in list(state.player(event.side).field):
                if _has_trigger(card, trigger):
                    yield event.side, card, None

        elif isinstance(event, Damaged):
            for card in list(state.player(event.side).field):
                if _has_trigger(card, AbilityTrigger.ON_DAMAGE):
                    yield event.side, card, None

    def _targets(
        self,
        state: GameState,
        owner: Side,
        card: Card,
        target: EffectTarget | None,
        focus: Card | None,
    ) -> list[Card]:
        on_field = state.player(owner).field_card(card.instance_id) is not None

        if target in (EffectTarget.SELF, EffectTarget.SINGLE_ALLY):
            return [card] if on_field else []
        if target is EffectTarget.ALL_ALLIES:
            return ally_creatures(state, owner)
        if target in (EffectTarget.ENEMY, EffectTarget.SINGLE_ENEMY):
            if focus is not None:
                return [focus]
            best = strongest(enemy_creatures(state, owner))
            return [best] if best else []
        if target is EffectTarget.RANDOM_ENEMY:
            enemies = enemy_creatures(state, owner)
            return [state.rng.choice(enemies)] if enemies else []
        if target is EffectTarget.ALL_ENEMIES:
            return enemy_creatures(state, owner)
        return []

    def passive_modifiers(self, state: GameState, side: Side, card: Card) -> PassiveModifiers:
        """
        Standing bonuses for a creature from every PASSIVE on the table.

        - BUFF SELF / ALL_ALLIES: stat bonus
        - DEBUFF ALL_ENEMIES (on an opposing creature): stat penalty
        - SPECIAL evasion (SELF): dodge chance in percent
        - SPECIAL type_boost: attack bonus for creatures of the named element
        """
        attack = defense = evasion = 0

        for source in state.player(side).field:
            if not _has_trigger(source, AbilityTrigger.PASSIVE):
                continue
            effect = source.ability.effect
            is_self = source.instance_id == card.instance_id
            applies = is_self or effect.target is EffectTarget.ALL_ALLIES

            if effect.kind is EffectKind.BUFF and applies:
                if effect.stat in (None, Stat.ATTACK):
                    attack += effect.value
                if effect.stat in (None, Stat.DEFENSE):
                    defense += effect.value
            elif effect.kind is EffectKind.SPECIAL and applies:
                if effect.special_id == SPECIAL_EVASION:
                    evasion += effect.value
                elif effect.special_id == SPECIAL_TYPE_BOOST:
                    if effect.element is None or effect.element is card.element:
                        attack += effect.value

        for source in state.player(side.opponent).field:
            if not _has_trigger(source, AbilityTrigger.PASSIVE):
                continue
            effect = source.ability.effect
            if effect.kind is EffectKind.DEBUFF and effect.target is EffectTarget.ALL_ENEMIES:
                if effect.stat in (None, Stat.ATTACK):
                    attack -= abs(effect.value)
                if effect.stat in (None, Stat.DEFENSE):
                    defense -= abs(effect.value)

        return PassiveModifiers(attack=attack, defense=defense, evasion=min(evasion, 100))


def _has_trigger(card: Card | None, trigger: AbilityTrigger) -> bool:
    return card is not None and card.ability is not None and card.ability.trigger is trigger
