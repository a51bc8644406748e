"""
Summon legality.

Creatures of level 2 and 3 need one and two sacrifices. Sacrifices may
come from the hand or the field; field sacrifices free up room, so a full
field can still take a summon that tributes from it.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..config import BattleRules
from .state import Card, PlayerState


@dataclass
class SummonCheck:
    ok: bool
    reason: str | None = None
    from_hand: list[str] = field(default_factory=list)
    from_field: list[str] = field(default_factory=list)


class SummonValidator:

    def validate(
        self,
        player: PlayerState,
        card_id: str,
        sacrifices: list[str],
        rules: BattleRules,
    ) -> SummonCheck:
        card = player.hand_card(card_id)
        if card is None:
            return SummonCheck(False, "Card is not in hand")
        if not card.is_creature:
            return SummonCheck(False, f"{card.name} is not a creature")

        required = card.sacrifice_required
        if len(sacrifices) != required:
            return SummonCheck(
                False,
                f"{card.name} needs {required} sacrifice(s), got {len(sacrifices)}",
            )
        if len(set(sacrifices)) != len(sacrifices):
            return SummonCheck(False, "Sacrifices must be distinct cards")
        if card_id in sacrifices:
            return SummonCheck(False, "A card cannot be sacrificed to summon itself")

        check = SummonCheck(True)
        for sacrifice_id in sacrifices:
            if player.hand_card(sacrifice_id) is not None:
                check.from_hand.append(sacrifice_id)
            elif player.field_card(sacrifice_id) is not None:
                check.from_field.append(sacrifice_id)
            else:
                return SummonCheck(False, "Sacrifice must come from your hand or field")

        if len(player.field) - len(check.from_field) + 1 > rules.max_field_size:
            return SummonCheck(False, "The field is full")
        return check

    def can_summon(self, player: PlayerState, card: Card, rules: BattleRules) -> bool:
        """Whether some choice of sacrifices makes this summon legal."""
        if not card.is_creature or player.hand_card(card.instance_id) is None:
            return False
        required = card.sacrifice_required
        available = len(player.hand) - 1 + len(player.field)
        if available < required:
            return False
        field_used = min(required, len(player.field))
        return len(player.field) - field_used + 1 <= rules.max_field_size

    def choose_sacrifices(
        self,
        player: PlayerState,
        card: Card,
        rules: BattleRules,
        prefer_field: bool = False,
    ) -> list[str] | None:
        """
        Pick the weakest legal sacrifices, or None if there are none.

        Field cards are taken first when the field would otherwise overflow.
        """
        required = card.sacrifice_required
        if required == 0:
            return [] if len(player.field) < rules.max_field_size else None

        hand = sorted(
            (c for c in player.hand if c.instance_id != card.instance_id),
            key=lambda c: (c.attack, c.instance_id),
        )
        on_field = sorted(player.field, key=lambda c: (c.attack, c.instance_id))

        overflow = max(0, len(player.field) + 1 - rules.max_field_size)
        if overflow > min(required, len(on_field)):
            return None

        chosen = [c.instance_id for c in on_field[:overflow]]
        pools = (on_field[overflow:], hand) if prefer_field else (hand, on_field[overflow:])
        for pool in pools:
            for candidate in pool:
                if len(chosen) == required:
                    break
                chosen.append(candidate.instance_id)
        return chosen if len(chosen) == required else None
