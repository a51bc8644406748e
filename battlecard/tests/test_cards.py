"""
Tests for the card catalog and battle setup.
"""

import random

import pytest

from ..cards import (
    ALL_CARDS, CREATURE_CARDS, SPELL_CARDS, TRAP_CARDS, build_npc_deck, create_battle,
    default_deck, get_card, get_cards,
)
from ..cards.setup import DECK_SIZE
from ..engine_core.state import CardKind, GameStatus, Phase, Side


class TestCatalog:

    def test_ids_are_unique(self):
        ids = [c.card_id for c in ALL_CARDS]
        assert len(ids) == len(set(ids))

    def test_kinds_match_their_lists(self):
        assert all(c.kind is CardKind.CREATURE for c in CREATURE_CARDS)
        assert all(c.kind is CardKind.SPELL and c.spell_effect for c in SPELL_CARDS)
        assert all(c.kind is CardKind.TRAP and c.trap_condition and c.trap_effect for c in TRAP_CARDS)

    def test_creature_levels(self):
        assert {c.level for c in CREATURE_CARDS} <= {1, 2, 3}

    def test_lookup(self):
        first = ALL_CARDS[0]

        assert get_card(first.card_id) is first
        assert get_card("no_such_card") is None

    def test_get_cards_rejects_unknown_ids(self):
        with pytest.raises(KeyError, match="no_such_card"):
            get_cards([ALL_CARDS[0].card_id, "no_such_card"])


class TestDecks:

    def test_default_deck(self):
        deck = default_deck(random.Random(1))

        assert any(c.kind is CardKind.SPELL for c in deck)
        assert any(c.kind is CardKind.TRAP for c in deck)
        assert sum(c.level == 3 for c in deck if c.kind is CardKind.CREATURE) == 3

    def test_npc_deck_size_and_seed(self):
        first = build_npc_deck(difficulty="HARD", rng=random.Random(5))
        second = build_npc_deck(difficulty="HARD", rng=random.Random(5))

        assert len(first) == DECK_SIZE
        assert [c.card_id for c in first] == [c.card_id for c in second]

    def test_empty_pool(self):
        assert build_npc_deck(cards=[]) == []


class TestCreateBattle:

    @pytest.fixture
    def state(self):
        deck = default_deck(random.Random(3))
        return create_battle(deck, list(deck), random_seed=3, starter=Side.NPC)

    def test_opening(self, state):
        assert state.status is GameStatus.PLAYING
        assert state.phase is Phase.MAIN
        assert state.turn_count == 1
        assert state.current_side is Side.NPC
        assert [e.message for e in state.log.entries] == ["The battle begins!", "Opponent goes first."]

    def test_opening_hands(self, state):
        for side in Side:
            player = state.player(side)
            assert len(player.hand) == 5
            assert player.hp == 8000

    def test_instance_ids_are_unique(self, state):
        ids = [c.instance_id for side in Side for c in state.player(side).all_cards()]
        assert len(ids) == len(set(ids))

    def test_seed_decides_the_deal(self):
        deck = default_deck(random.Random(3))

        first = create_battle(deck, deck, random_seed=9)
        second = create_battle(deck, deck, random_seed=9)

        assert [c.instance_id for c in first.player(Side.PLAYER).hand] == [
            c.instance_id for c in second.player(Side.PLAYER).hand
        ]
        assert first.starter is second.starter
