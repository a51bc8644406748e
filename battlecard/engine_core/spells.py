"""
Spell Resolver - one-shot effects cast from the hand.

Target validation happens before the card leaves the hand, so an invalid
target is a rejected action. Anything that goes missing afterwards is a
logged miss.
"""

from __future__ import annotations

from .effects import ally_creatures, build_bundle, enemy_creatures
from .events import EffectBundle, PlayerDamage
from .state import Card, EffectKind, EffectTarget, GameState, LogCategory, Side


_ENEMY_TARGETED = {EffectKind.DAMAGE, EffectKind.DESTROY, EffectKind.STATUS, EffectKind.DEBUFF}
_ALLY_TARGETED = {EffectKind.BUFF}


class SpellResolver:

    def needs_target(self, card: Card) -> str | None:
        """Return "enemy" or "ally" for single-target spells, None otherwise."""
        effect = card.definition.spell_effect
        if effect is None:
            return None
        if effect.target in (EffectTarget.SINGLE_ENEMY, EffectTarget.ENEMY):
            if effect.kind in _ENEMY_TARGETED:
                return "enemy"
        if effect.target is EffectTarget.SINGLE_ALLY and effect.kind in _ALLY_TARGETED:
            return "ally"
        return None

    def validate_target(
        self,
        state: GameState,
        side: Side,
        card: Card,
        target_id: str | None,
    ) -> str | None:
        """Return an error message when the spell cannot be cast at target_id."""
        effect = card.definition.spell_effect
        if effect is None:
            return f"{card.name} has no effect"

        needed = self.needs_target(card)
        if needed == "enemy":
            if target_id is None:
                # Damage spells hit the player when there is nothing to hit on the field
                if effect.kind is EffectKind.DAMAGE and not enemy_creatures(state, side):
                    return None
                return f"{card.name} needs an enemy target"
            if state.player(side.opponent).field_card(target_id) is None:
                return "Target is not on the opponent's field"
        elif needed == "ally":
            if target_id is None:
                return f"{card.name} needs an allied target"
            if state.player(side).field_card(target_id) is None:
                return "Target is not on your field"
        return None

    def resolve(
        self,
        state: GameState,
        side: Side,
        card: Card,
        target_id: str | None = None,
    ) -> EffectBundle:
        effect = card.definition.spell_effect
        bundle = EffectBundle(source=side)

        if effect.kind is EffectKind.HEAL:
            # Creatures have no HP; every heal lands on the owner
            return build_bundle(side, effect, card.name, [], LogCategory.SPELL, bundle)

        if effect.kind is EffectKind.SPECIAL:
            bundle.log(f"{card.name} has no effect.", LogCategory.SPELL)
            return bundle

        needed = self.needs_target(card)
        if needed == "enemy":
            target = state.player(side.opponent).field_card(target_id)
            if target is None and target_id is None and effect.kind is EffectKind.DAMAGE:
                bundle.player_damage.append(PlayerDamage(side.opponent, effect.value))
                bundle.log(f"{card.name} deals {effect.value} damage to the opponent.", LogCategory.SPELL)
                return bundle
            targets = [target] if target else []
        elif needed == "ally":
            target = state.player(side).field_card(target_id)
            targets = [target] if target else []
        elif effect.target is EffectTarget.ALL_ENEMIES:
            targets = enemy_creatures(state, side)
        elif effect.target is EffectTarget.ALL_ALLIES:
            targets = ally_creatures(state, side)
        else:
            targets = []

        return build_bundle(side, effect, card.name, targets, LogCategory.SPELL, bundle)
