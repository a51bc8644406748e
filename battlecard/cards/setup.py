"""
Battle Setup - Creates the initial battle state.

This module handles:
- Building decks (starter decks and the difficulty-weighted NPC deck)
- Assigning a unique instance id to every physical card
- Shuffling with a seed for determinism
- Dealing opening hands and picking the starting side

The starting side skips the draw on turn 1 and begins in MAIN.
"""

from __future__ import annotations
import random
import uuid

from ..config import BattleRules, DEFAULT_RULES
from ..engine_core.state import (
    BattleLog, Card, CardDefinition, GameMode, GameState, GameStatus, Phase,
    PlayerState, Rarity, Side,
)
from .catalog import ALL_CARDS, CREATURE_CARDS, SPELL_CARDS, TRAP_CARDS


DECK_SIZE = 40

# (common, uncommon, rare and above)
RARITY_QUOTAS: dict[str, tuple[int, int, int]] = {
    "EASY": (28, 10, 2),
    "NORMAL": (24, 12, 4),
    "HARD": (15, 15, 10),
    "EXPERT": (10, 20, 10),
}


def create_battle(
    player_deck: list[CardDefinition],
    npc_deck: list[CardDefinition],
    rules: BattleRules | None = None,
    random_seed: int | None = None,
    starter: Side | None = None,
    mode: GameMode = GameMode.QUICK_BATTLE,
    player_name: str = "Player",
    npc_name: str = "Opponent",
    game_id: str | None = None,
) -> GameState:
    """
    Set up a new battle.

    Args:
        player_deck: Card definitions for the player's deck
        npc_deck: Card definitions for the opponent's deck
        rules: Rule constants (defaults to DEFAULT_RULES)
        random_seed: Seed for shuffles and every later roll
        starter: Side that takes the first turn (random when None)
        mode: Label recorded in the end-of-battle report

    Returns:
        A PLAYING state in the starter's MAIN phase
    """
    rules = rules or DEFAULT_RULES
    if random_seed is None:
        random_seed = random.SystemRandom().randint(0, 2**31 - 1)
    rng = random.Random(random_seed)

    players = {
        Side.PLAYER: _create_player(Side.PLAYER, player_name, player_deck, rules, rng),
        Side.NPC: _create_player(Side.NPC, npc_name, npc_deck, rules, rng),
    }
    if starter is None:
        starter = rng.choice([Side.PLAYER, Side.NPC])

    state = GameState(
        game_id=game_id or f"battle_{uuid.uuid4().hex[:12]}",
        rules=rules,
        mode=mode,
        status=GameStatus.PLAYING,
        phase=Phase.MAIN,
        current_side=starter,
        starter=starter,
        turn_count=1,
        players=players,
        log=BattleLog(capacity=rules.log_capacity),
        random_seed=random_seed,
        rng=rng,
    )
    state.add_log("The battle begins!")
    state.add_log(f"{players[starter].name} goes first.")
    return state


def _create_player(
    side: Side,
    name: str,
    deck: list[CardDefinition],
    rules: BattleRules,
    rng: random.Random,
) -> PlayerState:
    cards = [
        Card.from_definition(defn, f"{side.value}-{i:03d}-{defn.card_id}")
        for i, defn in enumerate(deck)
    ]
    rng.shuffle(cards)
    hand_size = min(rules.initial_hand_size, len(cards))
    return PlayerState(
        side=side,
        name=name,
        hp=rules.starting_hp,
        deck=cards[hand_size:],
        hand=cards[:hand_size],
    )


def build_npc_deck(
    cards: list[CardDefinition] | None = None,
    size: int = DECK_SIZE,
    difficulty: str | None = None,
    rng: random.Random | None = None,
) -> list[CardDefinition]:
    """
    Build a deck with a rarity split decided by difficulty.

    Without a difficulty the split is 60/30/10. Short pools are topped up
    from whatever is left.
    """
    pool = list(ALL_CARDS if cards is None else cards)
    if not pool:
        return []
    rng = rng or random.Random()

    commons = [c for c in pool if c.rarity is Rarity.COMMON]
    uncommons = [c for c in pool if c.rarity is Rarity.UNCOMMON]
    rares = [c for c in pool if c.rarity not in (Rarity.COMMON, Rarity.UNCOMMON)]

    if difficulty is not None and difficulty.upper() in RARITY_QUOTAS:
        t_one, t_two, t_three = RARITY_QUOTAS[difficulty.upper()]
    else:
        t_one = int(size * 0.6)
        t_two = int(size * 0.3)
        t_three = size - t_one - t_two

    target_one = max(0, min(size, t_one))
    target_two = max(0, min(size - target_one, t_two))
    target_three = max(0, size - target_one - target_two)

    def pick(group: list[CardDefinition], n: int) -> list[CardDefinition]:
        shuffled = list(group)
        rng.shuffle(shuffled)
        return shuffled[:n]

    selected = pick(commons, target_one) + pick(uncommons, target_two) + pick(rares, target_three)

    if len(selected) < size:
        chosen = {id(c) for c in selected}
        rest = [c for c in pool if id(c) not in chosen]
        selected += pick(rest, size - len(selected))

    selected = selected[:size]
    rng.shuffle(selected)
    return selected


def default_deck(rng: random.Random | None = None) -> list[CardDefinition]:
    """
    Starter deck: every level 1 and 2 creature, a few level 3s,
    plus one copy of most spells and traps.
    """
    rng = rng or random.Random()
    creatures = [c for c in CREATURE_CARDS if c.level < 3]
    big = [c for c in CREATURE_CARDS if c.level == 3]
    spells = [c for c in SPELL_CARDS if c.rarity is not Rarity.LEGENDARY]
    deck = creatures + rng.sample(big, min(3, len(big)))
    deck += rng.sample(spells, min(6, len(spells)))
    deck += rng.sample(TRAP_CARDS, min(4, len(TRAP_CARDS)))
    return deck
