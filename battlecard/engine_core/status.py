"""
Status effects - application and the per-turn tick.

The tick is computed first and applied afterwards as a single unit, so a
field with several burning creatures loses its HP in one step.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random

from .state import Card, GameState, LogCategory, Side, StatusEffect, StatusInstance


@dataclass(frozen=True)
class StatusRule:
    duration: int
    damage: int = 0
    escalating: bool = False  # damage * tick number
    block_chance: float = 0.0  # chance the creature cannot act this turn


STATUS_RULES: dict[StatusEffect, StatusRule] = {
    StatusEffect.BURN: StatusRule(duration=3, damage=200),
    StatusEffect.POISON: StatusRule(duration=3, damage=100, escalating=True),
    StatusEffect.FREEZE: StatusRule(duration=2, block_chance=0.5),
    StatusEffect.PARALYZE: StatusRule(duration=1, block_chance=1.0),
    StatusEffect.SLEEP: StatusRule(duration=2, block_chance=1.0),
    StatusEffect.CONFUSE: StatusRule(duration=2),
}

BURN_ATTACK_FACTOR = 0.75
CONFUSE_CHANCE = 0.3


def apply_status(card: Card, status: StatusEffect, duration: int | None = None) -> bool:
    """
    Put a status on a creature.

    Re-applying an active status refreshes its duration instead of
    stacking. Returns True when the status is new.
    """
    turns = duration if duration and duration > 0 else STATUS_RULES[status].duration
    active = card.get_status(status)
    if active is not None:
        active.remaining = max(active.remaining, turns)
        return False
    card.statuses.append(StatusInstance(status, turns))
    return True


@dataclass
class CardTick:
    card_id: str
    name: str
    damage: int = 0
    incapacitated: bool = False
    expired: list[StatusEffect] = field(default_factory=list)
    remaining: list[StatusInstance] = field(default_factory=list)


@dataclass
class StatusTickResult:
    side: Side
    cards: list[CardTick] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)

    @property
    def total_damage(self) -> int:
        return sum(c.damage for c in self.cards)


class StatusProcessor:
    """Computes what a start-of-turn tick does to one side's field."""

    def tick(self, state: GameState, side: Side, rng: random.Random | None = None) -> StatusTickResult:
        rng = rng or state.rng
        player = state.player(side)
        result = StatusTickResult(side=side)

        for card in player.field:
            if not card.statuses:
                continue
            entry = CardTick(card_id=card.instance_id, name=card.name)
            for active in card.statuses:
                rule = STATUS_RULES[active.status]
                ticks = active.ticks + 1

                if rule.damage:
                    amount = rule.damage * ticks if rule.escalating else rule.damage
                    entry.damage += amount
                    result.logs.append(
                        f"{card.name} suffers {amount} {active.status.value.lower()} damage."
                    )

                if rule.block_chance and not entry.incapacitated:
                    if rule.block_chance >= 1.0 or rng.random() < rule.block_chance:
                        entry.incapacitated = True
                        result.logs.append(
                            f"{card.name} is {_describe(active.status)} and cannot act."
                        )

                remaining = active.remaining - 1
                if remaining > 0:
                    entry.remaining.append(StatusInstance(active.status, remaining, ticks))
                else:
                    entry.expired.append(active.status)
                    result.logs.append(f"{card.name} is no longer {_describe(active.status)}.")
            result.cards.append(entry)

        return result

    def apply(self, state: GameState, result: StatusTickResult) -> int:
        """
        Write a computed tick back into the state.

        Returns the HP lost by the side's owner; the caller decides whether
        that ends the battle.
        """
        player = state.player(result.side)
        for entry in result.cards:
            card = player.field_card(entry.card_id)
            if card is None:
                continue
            card.statuses = entry.remaining
            if entry.incapacitated:
                card.has_attacked = True

        for message in result.logs:
            state.add_log(message, LogCategory.STATUS)

        damage = result.total_damage
        if damage:
            player.hp = max(0, player.hp - damage)
            state.stats.record_damage(result.side, damage, None)
        return damage


def _describe(status: StatusEffect) -> str:
    return {
        StatusEffect.BURN: "burned",
        StatusEffect.POISON: "poisoned",
        StatusEffect.FREEZE: "frozen",
        StatusEffect.PARALYZE: "paralyzed",
        StatusEffect.SLEEP: "asleep",
        StatusEffect.CONFUSE: "confused",
    }[status]
