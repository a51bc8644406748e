"""
Pytest fixtures for Battlecard tests.

Most tests build a small table by hand with place() instead of dealing
shuffled decks, so every card and its instance id is known up front.
"""

import random

import pytest

from ..config import BattleRules
from ..engine_core.reducer import Reducer
from ..engine_core.state import (
    Ability, AbilityTrigger, BattleLog, Card, CardDefinition, CardKind, EffectSpec,
    ElementType, GameState, GameStatus, Phase, PlayerState, Side, TrapCondition,
)


class FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value: float = 0.0):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value

    def __reduce__(self):
        return (self.__class__, (self.value,))


def creature_def(
    card_id: str = "grunt",
    attack: int = 1000,
    defense: int = 1000,
    element: ElementType = ElementType.NORMAL,
    level: int = 1,
    ability: Ability = None,
) -> CardDefinition:
    return CardDefinition(
        card_id=card_id,
        name=card_id.replace("_", " ").title(),
        kind=CardKind.CREATURE,
        element=element,
        attack=attack,
        defense=defense,
        level=level,
        ability=ability,
    )


def ability_def(trigger: AbilityTrigger, effect: EffectSpec, name: str = "Knack") -> Ability:
    return Ability(ability_id=name.lower(), name=name, trigger=trigger, effect=effect)


def spell_def(card_id: str, effect: EffectSpec) -> CardDefinition:
    return CardDefinition(
        card_id=card_id,
        name=card_id.replace("_", " ").title(),
        kind=CardKind.SPELL,
        spell_effect=effect,
    )


def trap_def(card_id: str, condition: TrapCondition, effect: EffectSpec) -> CardDefinition:
    return CardDefinition(
        card_id=card_id,
        name=card_id.replace("_", " ").title(),
        kind=CardKind.TRAP,
        trap_condition=condition,
        trap_effect=effect,
    )


def place(
    state: GameState,
    side: Side,
    zone: str,
    definition: CardDefinition,
    instance_id: str = None,
) -> Card:
    """Put a fresh card instance into a zone and return it."""
    player = state.player(side)
    if instance_id is None:
        instance_id = f"{side.value}-{zone}-{len(list(player.all_cards()))}-{definition.card_id}"
    card = Card.from_definition(definition, instance_id)
    if zone == "trap_zone":
        card.is_set = True
    player.zone(zone).append(card)
    return card


def blank_state(
    rules: BattleRules = None,
    current: Side = Side.PLAYER,
    starter: Side = Side.NPC,
    turn: int = 2,
    phase: Phase = Phase.MAIN,
    deck_size: int = 10,
    seed: int = 1,
) -> GameState:
    """Both players at full HP with filler decks and nothing else."""
    rules = rules or BattleRules().without_delays()
    filler = creature_def("filler", attack=100, defense=100)
    players = {}
    for side, name in ((Side.PLAYER, "Player"), (Side.NPC, "Opponent")):
        players[side] = PlayerState(
            side=side,
            name=name,
            hp=rules.starting_hp,
            deck=[Card.from_definition(filler, f"{side.value}-deck-{i}") for i in range(deck_size)],
        )
    return GameState(
        game_id="test_battle",
        rules=rules,
        status=GameStatus.PLAYING,
        phase=phase,
        current_side=current,
        starter=starter,
        turn_count=turn,
        players=players,
        log=BattleLog(capacity=rules.log_capacity),
        random_seed=seed,
        rng=random.Random(seed),
    )


@pytest.fixture
def battle() -> GameState:
    """Player's MAIN phase on turn 2; the opponent started."""
    return blank_state()


@pytest.fixture
def reducer() -> Reducer:
    """Reducer with a fixed clock."""
    return Reducer(clock=lambda: 1_000.0)
