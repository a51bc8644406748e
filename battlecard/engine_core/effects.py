"""
Effect translation - EffectSpec + resolved targets -> EffectBundle.

Abilities, traps and spells each pick their targets their own way;
once targets are known the translation into deltas is shared.
"""

from __future__ import annotations

from .events import (
    CreatureDamage, EffectBundle, PlayerDamage, Revive, StatChange, StatusApplication,
)
from .state import Card, EffectKind, EffectSpec, EffectTarget, GameState, LogCategory, Side


def enemy_creatures(state: GameState, owner: Side) -> list[Card]:
    return [c for c in state.player(owner.opponent).field if c.is_creature]


def ally_creatures(state: GameState, owner: Side) -> list[Card]:
    return [c for c in state.player(owner).field if c.is_creature]


def strongest(cards: list[Card]) -> Card | None:
    """Highest current attack, first on the field wins ties."""
    best = None
    for card in cards:
        if best is None or card.attack > best.attack:
            best = card
    return best


def build_bundle(
    owner: Side,
    effect: EffectSpec,
    source_name: str,
    targets: list[Card],
    category: LogCategory = LogCategory.EFFECT,
    bundle: EffectBundle | None = None,
) -> EffectBundle:
    """
    Translate one effect into deltas on an existing or new bundle.

    owner is the side that controls the effect. Effects that need a card
    target and received none are logged as misses.
    """
    if bundle is None:
        bundle = EffectBundle(source=owner)
    kind = effect.kind

    if kind is EffectKind.DAMAGE:
        if targets:
            for target in targets:
                bundle.creature_damage.append(CreatureDamage(target.instance_id, effect.value))
                bundle.log(f"{source_name} deals {effect.value} damage to {target.name}.", category)
        elif effect.target is EffectTarget.ENEMY_PLAYER:
            bundle.player_damage.append(PlayerDamage(owner.opponent, effect.value))
            bundle.log(f"{source_name} deals {effect.value} damage to the opponent.", category)
        else:
            bundle.log(f"{source_name} has no target.", category)

    elif kind is EffectKind.HEAL:
        bundle.heals.append((owner, effect.value))

    elif kind in (EffectKind.BUFF, EffectKind.DEBUFF):
        delta = abs(effect.value) if kind is EffectKind.BUFF else -abs(effect.value)
        if not targets:
            bundle.log(f"{source_name} has no target.", category)
        for target in targets:
            bundle.stat_changes.append(StatChange(target.instance_id, effect.stat, delta))
            stat = effect.stat.value if effect.stat else "ATK/DEF"
            bundle.log(f"{target.name} {stat} {delta:+d} ({source_name}).", category)

    elif kind is EffectKind.STATUS:
        if effect.status is None or not targets:
            bundle.log(f"{source_name} has no target.", category)
        else:
            for target in targets:
                bundle.statuses.append(
                    StatusApplication(target.instance_id, effect.status, effect.duration)
                )

    elif kind is EffectKind.DRAW:
        bundle.draws.append((owner, max(1, effect.value)))

    elif kind is EffectKind.REVIVE:
        bundle.revives.append(Revive(owner, half_attack=effect.value != 1))

    elif kind is EffectKind.DESTROY:
        if not targets:
            bundle.log(f"{source_name} has no target.", category)
        for target in targets:
            bundle.destroy.append(target.instance_id)

    else:
        bundle.log(f"{source_name} has no effect.", category)

    return bundle
