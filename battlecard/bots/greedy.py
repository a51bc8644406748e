"""
Greedy Opponent - one-step heuristic play.

Each call picks the best immediate move in a fixed priority order:
summon, spell, trap, then attacks. Difficulty sets how often it
blunders into a random legal move and, through AUTO, how it picks
sacrifices.

The bot does NOT:
- Look ahead past the current action
- Read hidden information (opponent hand, deck order, set traps)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random

from ..engine_core.action import Action, ActionType
from ..engine_core.state import Card, EffectKind, Phase, StatusEffect
from ..engine_core.type_chart import multiplier
from .policy import BotDecision, Difficulty, OpponentStrategy, OpponentView

logger = logging.getLogger(__name__)


class SacrificeStrategy(Enum):
    RANDOM = "RANDOM"
    FIELD_FIRST = "FIELD_FIRST"
    HAND_FIRST = "HAND_FIRST"
    SMART_HYBRID = "SMART_HYBRID"
    SCORE_BASED = "SCORE_BASED"
    AUTO = "AUTO"


MISTAKE_CHANCE = {
    Difficulty.EASY: 0.35,
    Difficulty.NORMAL: 0.15,
    Difficulty.HARD: 0.05,
    Difficulty.EXPERT: 0.0,
}

AUTO_SACRIFICE = {
    Difficulty.EASY: SacrificeStrategy.RANDOM,
    Difficulty.NORMAL: SacrificeStrategy.HAND_FIRST,
    Difficulty.HARD: SacrificeStrategy.SMART_HYBRID,
    Difficulty.EXPERT: SacrificeStrategy.SCORE_BASED,
}


def card_value(card: Card) -> float:
    """Rough worth of a card for sacrifice decisions."""
    value = card.attack + card.defense + card.level * 300
    if card.ability is not None:
        value += 500
    return float(value)


def sacrifice_score(strategy: SacrificeStrategy, card: Card, zone: str, rng: random.Random) -> float:
    """Lower scores are sacrificed first."""
    on_field = zone == "field"
    if strategy is SacrificeStrategy.RANDOM:
        return rng.random()
    if strategy is SacrificeStrategy.FIELD_FIRST:
        return card.attack + (0 if on_field else 100_000)
    if strategy is SacrificeStrategy.HAND_FIRST:
        return card.attack + (100_000 if on_field else 0)
    if strategy is SacrificeStrategy.SMART_HYBRID:
        # Crippled field creatures, then weak hand creatures; spells and traps last
        if on_field and card.statuses:
            return card.attack
        if not on_field and card.is_creature and card.level == 1:
            return 10_000 + card.attack
        if on_field:
            return 20_000 + card.attack
        return 50_000 + card_value(card)
    return card_value(card) * (1.0 if on_field else 0.9)


def pick_sacrifices(
    view: OpponentView,
    card: Card,
    strategy: SacrificeStrategy,
    rng: random.Random,
) -> list[str] | None:
    required = card.sacrifice_required
    hand = [c for c in view.hand if c.instance_id != card.instance_id]
    on_field = list(view.field)

    # Field cards that must go so the summoned creature fits
    overflow = max(0, len(on_field) + 1 - view.max_field_size)
    if overflow > required or overflow > len(on_field) or len(hand) + len(on_field) < required:
        return None
    if required == 0:
        return []

    if strategy is SacrificeStrategy.AUTO:
        strategy = AUTO_SACRIFICE[view.difficulty]

    ranked_field = sorted(on_field, key=lambda c: sacrifice_score(strategy, c, "field", rng))
    chosen = ranked_field[:overflow]
    rest = [(sacrifice_score(strategy, c, "hand", rng), c) for c in hand]
    rest += [(sacrifice_score(strategy, c, "field", rng), c) for c in ranked_field[overflow:]]
    rest.sort(key=lambda pair: pair[0])
    chosen += [c for _, c in rest[: required - overflow]]
    return [c.instance_id for c in chosen]


@dataclass
class GreedyStrategy(OpponentStrategy):
    """
    Greedy opponent parameterised by difficulty.

    Usage:
        bot = GreedyStrategy(difficulty=Difficulty.HARD, seed=7)
        decision = bot.decide(OpponentView.from_state(state, Side.NPC), legal_actions)
    """
    difficulty: Difficulty = Difficulty.NORMAL
    sacrifice_strategy: SacrificeStrategy = SacrificeStrategy.AUTO
    seed: int | None = None
    rng: random.Random = field(init=False, repr=False)

    def __post_init__(self):
        self.rng = random.Random(self.seed)

    def decide(self, view: OpponentView, legal_actions: list[Action]) -> BotDecision:
        playable = [a for a in legal_actions if a.action_type is not ActionType.ADVANCE]
        if not playable:
            return BotDecision(action=Action.wait(view.side), explanation="Nothing to do")

        # Mandatory steps are never fumbled
        for action in playable:
            if action.action_type is ActionType.DRAW:
                return BotDecision(action=action, explanation="Draw")

        if self.rng.random() < MISTAKE_CHANCE[view.difficulty]:
            action = self.rng.choice(playable)
            return BotDecision(action=action, explanation=f"Impulsive move out of {len(playable)}")

        if view.phase is Phase.MAIN:
            decision = (
                self._choose_summon(view, playable)
                or self._choose_spell(view, playable)
                or self._choose_trap(view, playable)
            )
        elif view.phase is Phase.BATTLE:
            decision = self._choose_attack(view, playable)
        else:
            decision = None

        if decision is None:
            decision = BotDecision(action=Action.wait(view.side), explanation="Nothing worth doing")
        logger.debug("%s chose %s (%s)", self.get_name(), decision.action.action_type.value, decision.explanation)
        return decision

    # ------------------------------------------------------------------

    def _choose_summon(self, view: OpponentView, playable: list[Action]) -> BotDecision | None:
        candidates = {
            a.payload.card_id for a in playable if a.action_type is ActionType.SUMMON
        }
        if not candidates:
            return None

        best = None
        for card in view.hand:
            if card.instance_id not in candidates:
                continue
            sacrifices = pick_sacrifices(view, card, self.sacrifice_strategy, self.rng)
            if sacrifices is None:
                continue
            # Do not trade away more attack than the summon brings
            lost = sum(c.attack for c in view.field if c.instance_id in sacrifices)
            gain = card.attack - lost
            if gain <= 0:
                continue
            if best is None or gain > best[0]:
                best = (gain, card, sacrifices)

        if best is None:
            return None
        gain, card, sacrifices = best
        return BotDecision(
            action=Action.summon(view.side, card.instance_id, sacrifices),
            explanation=f"Summon {card.name} (+{gain} attack)",
        )

    def _choose_spell(self, view: OpponentView, playable: list[Action]) -> BotDecision | None:
        spells = [a for a in playable if a.action_type is ActionType.USE_SPELL]
        if not spells:
            return None
        cards = {c.instance_id: c for c in view.hand}

        best = None
        for action in spells:
            card = cards.get(action.payload.card_id)
            if card is None:
                continue
            score = self._spell_score(view, card, action.payload.target_id)
            if score > 0 and (best is None or score > best[0]):
                best = (score, action, card)

        if best is None:
            return None
        score, action, card = best
        return BotDecision(action=action, explanation=f"Cast {card.name} (score {score})")

    def _spell_score(self, view: OpponentView, card: Card, target_id: str | None) -> float:
        effect = card.definition.spell_effect
        enemies = {c.instance_id: c for c in view.opponent_field}
        allies = {c.instance_id: c for c in view.field}
        target = enemies.get(target_id) or allies.get(target_id)

        if effect.kind is EffectKind.HEAL:
            missing = view.max_hp - view.hp
            return min(missing, effect.value) if view.hp < view.max_hp // 2 else 0
        if effect.kind is EffectKind.DAMAGE:
            if target is None:
                hits = list(enemies.values())
                if not hits:
                    return effect.value * 0.5
                return sum(min(effect.value, c.defense) for c in hits if c.defense <= effect.value)
            return target.attack if target.defense <= effect.value else 0
        if effect.kind is EffectKind.DESTROY:
            return target.attack + target.defense if target else 0
        if effect.kind is EffectKind.STATUS:
            if target is None or target.statuses:
                return 0
            return target.attack * 0.5
        if effect.kind is EffectKind.BUFF:
            if target is not None:
                return effect.value if not target.has_attacked else effect.value * 0.5
            return effect.value * len(allies)
        if effect.kind is EffectKind.DRAW:
            return 400 if len(view.hand) <= 3 and view.deck_size > effect.value else 0
        if effect.kind is EffectKind.REVIVE:
            return 600 if any(c.is_creature for c in view.graveyard) else 0
        return 0

    def _choose_trap(self, view: OpponentView, playable: list[Action]) -> BotDecision | None:
        for action in playable:
            if action.action_type is ActionType.SET_TRAP:
                return BotDecision(action=action, explanation="Set a trap")
        return None

    def _choose_attack(self, view: OpponentView, playable: list[Action]) -> BotDecision | None:
        attacks = [a for a in playable if a.action_type is ActionType.ATTACK]
        if not attacks:
            return None
        mine = {c.instance_id: c for c in view.field}
        theirs = {c.instance_id: c for c in view.opponent_field}

        best = None
        for action in attacks:
            attacker = mine.get(action.payload.card_id)
            if attacker is None:
                continue
            if view.difficulty is Difficulty.EXPERT and attacker.has_status(StatusEffect.CONFUSE):
                continue
            if action.payload.target_id is None:
                score = 10_000 + attacker.attack
            else:
                defender = theirs[action.payload.target_id]
                attack = attacker.attack * multiplier(attacker.element, defender.element)
                if attack <= defender.defense:
                    continue
                score = defender.attack + (attack - defender.defense)
            if best is None or score > best[0]:
                best = (score, action)

        if best is None:
            return None
        score, action = best
        target = "directly" if action.payload.target_id is None else "a creature"
        return BotDecision(action=action, explanation=f"Attack {target} (score {score})")
