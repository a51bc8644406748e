"""
Trigger events and effect deltas.

Every trigger point in a battle is one of the tagged events below. The
ability processor and the trap engine each turn an event into an
EffectBundle; the reducer is the only place a bundle is applied.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Union

from .state import Card, LogCategory, Side, Stat, StatusEffect


@dataclass(frozen=True)
class Summoned:
    side: Side
    card_id: str


@dataclass(frozen=True)
class Attacked:
    """side declared an attack on a creature."""
    side: Side
    attacker_id: str
    defender_id: str


@dataclass(frozen=True)
class DirectAttacked:
    """side attacked the opposing player (empty opposing field)."""
    side: Side
    attacker_id: str


@dataclass(frozen=True)
class Destroyed:
    """A creature owned by side left the field for the graveyard."""
    side: Side
    card: Card
    cause: Side | None = None
    destroyer_id: str | None = None


@dataclass(frozen=True)
class TurnStarted:
    side: Side


@dataclass(frozen=True)
class TurnEnded:
    side: Side


@dataclass(frozen=True)
class Damaged:
    """side lost HP."""
    side: Side
    amount: int
    source: Side | None = None


TriggerEvent = Union[Summoned, Attacked, DirectAttacked, Destroyed, TurnStarted, TurnEnded, Damaged]


@dataclass
class StatusApplication:
    target_id: str
    status: StatusEffect
    duration: int | None = None


@dataclass
class StatChange:
    target_id: str
    stat: Stat | None  # None changes both attack and defense
    delta: int


@dataclass
class CreatureDamage:
    """Reduce a creature's defense; it is destroyed at 0 or below."""
    target_id: str
    amount: int


@dataclass
class PlayerDamage:
    side: Side
    amount: int


@dataclass
class Revive:
    side: Side
    half_attack: bool = True


@dataclass
class EffectBundle:
    """
    Uniform effect delta produced by abilities, traps and spells.

    source is the side whose card produced the bundle; it is credited for
    damage, destruction and statuses in the match statistics.
    """
    source: Side | None = None
    logs: list[tuple[str, LogCategory]] = field(default_factory=list)
    heals: list[tuple[Side, int]] = field(default_factory=list)
    draws: list[tuple[Side, int]] = field(default_factory=list)
    player_damage: list[PlayerDamage] = field(default_factory=list)
    creature_damage: list[CreatureDamage] = field(default_factory=list)
    stat_changes: list[StatChange] = field(default_factory=list)
    statuses: list[StatusApplication] = field(default_factory=list)
    destroy: list[str] = field(default_factory=list)
    revives: list[Revive] = field(default_factory=list)
    spent_traps: list[str] = field(default_factory=list)
    negate_attack: bool = False

    abilities_triggered: int = 0
    traps_activated: int = 0

    def log(self, message: str, category: LogCategory = LogCategory.EFFECT):
        self.logs.append((message, category))

    @property
    def is_empty(self) -> bool:
        return not (
            self.logs or self.heals or self.draws or self.player_damage
            or self.creature_damage or self.stat_changes or self.statuses
            or self.destroy or self.revives or self.spent_traps or self.negate_attack
        )
