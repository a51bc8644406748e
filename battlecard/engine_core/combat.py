"""
Combat resolution.

resolve_combat is pure: it takes already-adjusted stats and returns who
survives and how much HP each owner loses. Passive bonuses and status
penalties are folded in by effective_stats at resolution time and are
never written back to the cards.
"""

from __future__ import annotations
from dataclasses import dataclass
import math

from .abilities import AbilityProcessor
from .state import Card, ElementType, GameState, Side, StatusEffect
from .status import BURN_ATTACK_FACTOR
from .type_chart import multiplier as type_multiplier


@dataclass(frozen=True)
class CombatantStats:
    attack: int
    defense: int
    element: ElementType = ElementType.NORMAL
    evasion: int = 0  # percent


@dataclass(frozen=True)
class CombatResult:
    attacker_survived: bool
    defender_survived: bool
    damage_to_defender_owner: int
    damage_to_attacker_owner: int
    multiplier: float
    effective_attack: int
    effective_defense: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resolve_combat(attacker: CombatantStats, defender: CombatantStats, chart=None) -> CombatResult:
    """
    Defense absorbs damage.

    effective attack = round(attack * type multiplier)
    - attack > defense: defender destroyed, its owner loses the difference
    - attack < defense: attacker destroyed, its owner loses the difference
    - equal: both destroyed, no HP damage
    """
    mult = type_multiplier(attacker.element, defender.element, chart)
    eff_attack = round_half_up(attacker.attack * mult)
    eff_defense = round_half_up(defender.defense)

    if eff_attack > eff_defense:
        return CombatResult(True, False, eff_attack - eff_defense, 0, mult, eff_attack, eff_defense)
    if eff_attack < eff_defense:
        return CombatResult(False, True, 0, eff_defense - eff_attack, mult, eff_attack, eff_defense)
    return CombatResult(False, False, 0, 0, mult, eff_attack, eff_defense)


def resolve_direct_attack(attacker: CombatantStats) -> int:
    """Direct attacks deal raw attack, no type multiplier."""
    return max(0, attacker.attack)


def effective_stats(
    state: GameState,
    side: Side,
    card: Card,
    abilities: AbilityProcessor | None = None,
) -> CombatantStats:
    """Current stats with passives and status penalties applied."""
    abilities = abilities or AbilityProcessor()
    mods = abilities.passive_modifiers(state, side, card)

    attack = max(0, card.attack + mods.attack)
    defense = max(0, card.defense + mods.defense)
    if card.has_status(StatusEffect.BURN):
        attack = round_half_up(attack * BURN_ATTACK_FACTOR)

    return CombatantStats(
        attack=attack,
        defense=defense,
        element=card.element,
        evasion=mods.evasion,
    )
