"""
Tests for legal action generation.
"""

from ..engine_core.action import Action, ActionType
from ..engine_core.action_generator import ActionGenerator, is_legal, legal_actions
from ..engine_core.state import (
    EffectKind, EffectSpec, EffectTarget, PendingResolution, Phase, ResolutionStage, Side,
    TrapCondition,
)
from .conftest import blank_state, creature_def, place, spell_def, trap_def


def types(actions):
    return [a.action_type for a in actions]


def test_draw_phase_only_draws():
    state = blank_state(phase=Phase.DRAW)

    assert types(legal_actions(state)) == [ActionType.DRAW]


def test_pending_resolution_only_advances(battle):
    battle.pending = PendingResolution("summon", ResolutionStage.TRIGGERS, Side.PLAYER, "x")

    assert types(legal_actions(battle)) == [ActionType.ADVANCE]
    assert types(legal_actions(battle, Side.NPC)) == [ActionType.ADVANCE]


def test_nothing_for_waiting_side(battle):
    assert legal_actions(battle, Side.NPC) == []


def test_nothing_after_game_over(battle, reducer):
    state = reducer.apply(battle, Action.surrender(Side.PLAYER)).new_state

    assert legal_actions(state) == []


class TestMainPhase:

    def test_main_phase_actions(self, battle):
        grunt = place(battle, Side.PLAYER, "hand", creature_def())
        place(battle, Side.PLAYER, "hand", creature_def("giant", 2500, 2000, level=3))
        scout = place(battle, Side.PLAYER, "hand", spell_def("scout", EffectSpec(EffectKind.DRAW, 1)))
        snare = place(
            battle, Side.PLAYER, "hand",
            trap_def("snare", TrapCondition.ON_ATTACK, EffectSpec(EffectKind.DAMAGE, 100)),
        )

        actions = legal_actions(battle)

        summoned = [a.payload.card_id for a in actions if a.action_type is ActionType.SUMMON]
        # the giant's two sacrifices come from the rest of the hand
        assert grunt.instance_id in summoned
        assert len(summoned) == 2
        assert any(a.payload.card_id == scout.instance_id for a in actions)
        assert any(a.payload.card_id == snare.instance_id for a in actions)
        assert types(actions)[-2:] == [ActionType.GO_TO_BATTLE, ActionType.END_TURN]

    def test_level_three_without_fodder(self, battle):
        place(battle, Side.PLAYER, "hand", creature_def("giant", 2500, 2000, level=3))

        assert ActionType.SUMMON not in types(legal_actions(battle))

    def test_summon_comes_with_sacrifices(self, battle):
        big = place(battle, Side.PLAYER, "hand", creature_def("big", 2000, 1500, level=2))
        weak = place(battle, Side.PLAYER, "hand", creature_def("weak", 100, 100))
        place(battle, Side.PLAYER, "hand", creature_def("strong", 1800, 100))

        summons = [a for a in ActionGenerator().generate(battle) if a.payload.card_id == big.instance_id]

        assert summons[0].payload.sacrifices == [weak.instance_id]

    def test_targeted_spell_per_enemy(self, battle):
        first = place(battle, Side.NPC, "field", creature_def("a"))
        second = place(battle, Side.NPC, "field", creature_def("b"))
        bolt = place(
            battle, Side.PLAYER, "hand",
            spell_def("bolt", EffectSpec(EffectKind.DAMAGE, 800, EffectTarget.SINGLE_ENEMY)),
        )

        targets = [
            a.payload.target_id for a in legal_actions(battle)
            if a.payload.card_id == bolt.instance_id
        ]

        assert targets == [first.instance_id, second.instance_id]

    def test_ally_spell_needs_an_ally(self, battle):
        place(
            battle, Side.PLAYER, "hand",
            spell_def("boost", EffectSpec(EffectKind.BUFF, 500, EffectTarget.SINGLE_ALLY)),
        )

        assert ActionType.USE_SPELL not in types(legal_actions(battle))

    def test_full_trap_zone(self, battle):
        snare = trap_def("snare", TrapCondition.ON_ATTACK, EffectSpec(EffectKind.DAMAGE, 100))
        place(battle, Side.PLAYER, "trap_zone", snare)
        place(battle, Side.PLAYER, "trap_zone", snare)
        place(battle, Side.PLAYER, "hand", snare)

        assert ActionType.SET_TRAP not in types(legal_actions(battle))


class TestBattlePhase:

    def test_attacks_against_each_defender(self, battle):
        battle.phase = Phase.BATTLE
        attacker = place(battle, Side.PLAYER, "field", creature_def())
        tired = place(battle, Side.PLAYER, "field", creature_def("tired"))
        tired.has_attacked = True
        place(battle, Side.NPC, "field", creature_def("a"))
        place(battle, Side.NPC, "field", creature_def("b"))

        attacks = [a for a in legal_actions(battle) if a.action_type is ActionType.ATTACK]

        assert len(attacks) == 2
        assert all(a.payload.card_id == attacker.instance_id for a in attacks)
        assert all(a.payload.target_id is not None for a in attacks)

    def test_direct_attack_on_empty_field(self, battle):
        battle.phase = Phase.BATTLE
        place(battle, Side.PLAYER, "field", creature_def())

        actions = legal_actions(battle)

        assert actions[0].action_type is ActionType.ATTACK
        assert actions[0].payload.target_id is None
        assert types(actions)[-1] is ActionType.END_TURN

    def test_starter_has_no_attacks_on_turn_one(self):
        state = blank_state(starter=Side.PLAYER, turn=1, phase=Phase.BATTLE)
        place(state, Side.PLAYER, "field", creature_def())

        assert types(legal_actions(state)) == [ActionType.END_TURN]


class TestIsLegal:

    def test_surrender_is_always_legal(self, battle):
        assert is_legal(battle, Action.surrender(Side.NPC))

    def test_matches_payload(self, battle):
        card = place(battle, Side.PLAYER, "hand", creature_def())

        assert is_legal(battle, Action.summon(Side.PLAYER, card.instance_id))
        assert not is_legal(battle, Action.summon(Side.PLAYER, "missing"))
        assert not is_legal(battle, Action.attack(Side.PLAYER, card.instance_id))
