"""
Tests for opponent strategies.

Tests:
- Baseline strategies pick legal actions
- Greedy priorities per phase
- Sacrifice selection
"""

import random

import pytest

from ..bots import (
    Difficulty, FirstLegalStrategy, GreedyStrategy, OpponentView, RandomStrategy,
    SacrificeStrategy, pick_sacrifices,
)
from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import legal_actions
from ..engine_core.state import (
    EffectKind, EffectSpec, EffectTarget, PendingResolution, Phase, ResolutionStage, Side,
    StatusEffect,
)
from ..engine_core.status import apply_status
from .conftest import blank_state, creature_def, place, spell_def


def npc_turn(phase=Phase.MAIN):
    return blank_state(current=Side.NPC, starter=Side.PLAYER, phase=phase)


def decide(strategy, state, difficulty=Difficulty.EXPERT):
    view = OpponentView.from_state(state, Side.NPC, difficulty)
    return strategy.decide(view, legal_actions(state, Side.NPC))


class TestBaselines:
    """Random and first-legal strategies."""

    def test_random_picks_legal_actions(self):
        state = npc_turn()
        place(state, Side.NPC, "hand", creature_def())
        legal = legal_actions(state, Side.NPC)
        bot = RandomStrategy(seed=42)

        for _ in range(10):
            decision = bot.decide(OpponentView.from_state(state, Side.NPC), legal)
            assert decision.action in legal

    def test_first_legal(self):
        state = npc_turn()
        card = place(state, Side.NPC, "hand", creature_def())

        decision = decide(FirstLegalStrategy(), state)

        assert decision.action.action_type is ActionType.SUMMON
        assert decision.action.payload.card_id == card.instance_id

    @pytest.mark.parametrize("strategy", [RandomStrategy(seed=1), FirstLegalStrategy()])
    def test_never_advances(self, strategy):
        """Resolutions are driven by the loop, not by a strategy."""
        state = npc_turn()
        state.pending = PendingResolution("summon", ResolutionStage.TRIGGERS, Side.NPC, "x")

        decision = decide(strategy, state)

        assert decision.action.action_type is ActionType.WAIT


class TestGreedy:
    """Greedy priorities; EXPERT never makes random mistakes."""

    def test_draws_first(self):
        state = npc_turn(Phase.DRAW)

        decision = decide(GreedyStrategy(difficulty=Difficulty.EASY, seed=3), state, Difficulty.EASY)

        assert decision.action.action_type is ActionType.DRAW

    def test_summons_strongest(self):
        state = npc_turn()
        place(state, Side.NPC, "hand", creature_def("small", 800))
        big = place(state, Side.NPC, "hand", creature_def("big", 1700))

        decision = decide(GreedyStrategy(difficulty=Difficulty.EXPERT), state)

        assert decision.action.action_type is ActionType.SUMMON
        assert decision.action.payload.card_id == big.instance_id
        assert decision.explanation == "Summon Big (+1700 attack)"

    def test_casts_spell_when_nothing_to_summon(self):
        state = npc_turn()
        target = place(state, Side.PLAYER, "field", creature_def("wall", 1500, 500))
        place(
            state, Side.NPC, "hand",
            spell_def("bolt", EffectSpec(EffectKind.DAMAGE, 800, EffectTarget.SINGLE_ENEMY)),
        )

        decision = decide(GreedyStrategy(difficulty=Difficulty.EXPERT), state)

        assert decision.action.action_type is ActionType.USE_SPELL
        assert decision.action.payload.target_id == target.instance_id

    def test_waits_in_main_with_nothing_useful(self):
        state = npc_turn()

        decision = decide(GreedyStrategy(difficulty=Difficulty.EXPERT), state)

        assert decision.action.action_type is ActionType.WAIT
        assert decision.action.side is Side.NPC

    def test_prefers_direct_attack(self):
        state = npc_turn(Phase.BATTLE)
        attacker = place(state, Side.NPC, "field", creature_def(attack=1200))

        decision = decide(GreedyStrategy(difficulty=Difficulty.EXPERT), state)

        assert decision.action == Action.attack(Side.NPC, attacker.instance_id)

    def test_skips_losing_attacks(self):
        state = npc_turn(Phase.BATTLE)
        place(state, Side.NPC, "field", creature_def(attack=800))
        place(state, Side.PLAYER, "field", creature_def("wall", 100, 2000))

        decision = decide(GreedyStrategy(difficulty=Difficulty.EXPERT), state)

        assert decision.action.action_type is ActionType.WAIT

    def test_expert_holds_confused_attackers(self):
        state = npc_turn(Phase.BATTLE)
        dazed = place(state, Side.NPC, "field", creature_def(attack=3000))
        apply_status(dazed, StatusEffect.CONFUSE)

        expert = decide(GreedyStrategy(difficulty=Difficulty.EXPERT), state)

        assert expert.action.action_type is ActionType.WAIT

    def test_same_seed_same_choices(self):
        state = npc_turn()
        for i in range(3):
            place(state, Side.NPC, "hand", creature_def(f"c{i}", 500 + i * 100))

        def run():
            bot = GreedyStrategy(Difficulty.EASY, seed=9)
            return [decide(bot, state, Difficulty.EASY).action for _ in range(5)]

        assert run() == run()


class TestSacrifices:
    """pick_sacrifices per strategy."""

    @pytest.fixture
    def table(self):
        state = npc_turn()
        hand_weak = place(state, Side.NPC, "hand", creature_def("hand_weak", 300))
        field_weak = place(state, Side.NPC, "field", creature_def("field_weak", 500))
        big = place(state, Side.NPC, "hand", creature_def("big", 2500, 2000, level=2))
        return state, big, hand_weak, field_weak

    def test_field_first(self, table):
        state, big, _, field_weak = table
        view = OpponentView.from_state(state, Side.NPC)

        chosen = pick_sacrifices(view, big, SacrificeStrategy.FIELD_FIRST, random.Random(0))

        assert chosen == [field_weak.instance_id]

    def test_hand_first(self, table):
        state, big, hand_weak, _ = table
        view = OpponentView.from_state(state, Side.NPC)

        chosen = pick_sacrifices(view, big, SacrificeStrategy.HAND_FIRST, random.Random(0))

        assert chosen == [hand_weak.instance_id]

    def test_full_field_forces_field_sacrifice(self, table):
        state, big, _, field_weak = table
        place(state, Side.NPC, "field", creature_def("guard_a", 1500))
        place(state, Side.NPC, "field", creature_def("guard_b", 1600))
        view = OpponentView.from_state(state, Side.NPC)

        chosen = pick_sacrifices(view, big, SacrificeStrategy.HAND_FIRST, random.Random(0))

        assert chosen == [field_weak.instance_id]

    def test_no_fodder(self):
        state = npc_turn()
        giant = place(state, Side.NPC, "hand", creature_def("giant", 3000, 2500, level=3))
        view = OpponentView.from_state(state, Side.NPC)

        assert pick_sacrifices(view, giant, SacrificeStrategy.AUTO, random.Random(0)) is None
