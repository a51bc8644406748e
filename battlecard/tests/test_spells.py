"""
Tests for spells.
"""

import pytest

from ..engine_core.action import Action
from ..engine_core.spells import SpellResolver
from ..engine_core.state import EffectKind, EffectSpec, EffectTarget, Side, Stat, StatusEffect
from .conftest import creature_def, place, spell_def


def cast(reducer, state, card, target=None):
    return reducer.apply(state, Action.use_spell(Side.PLAYER, card.instance_id, target))


class TestTargeting:
    """Target rules are checked before the card leaves the hand."""

    def test_needs_target(self, battle):
        resolver = SpellResolver()
        bolt = place(battle, Side.PLAYER, "hand", spell_def("bolt", EffectSpec(EffectKind.DAMAGE, 800, EffectTarget.SINGLE_ENEMY)))
        boost = place(battle, Side.PLAYER, "hand", spell_def("boost", EffectSpec(EffectKind.BUFF, 500, EffectTarget.SINGLE_ALLY)))
        quake = place(battle, Side.PLAYER, "hand", spell_def("quake", EffectSpec(EffectKind.DAMAGE, 500, EffectTarget.ALL_ENEMIES)))

        assert resolver.needs_target(bolt) == "enemy"
        assert resolver.needs_target(boost) == "ally"
        assert resolver.needs_target(quake) is None

    def test_missing_target_rejected(self, battle, reducer):
        place(battle, Side.NPC, "field", creature_def("wall"))
        ball = place(battle, Side.PLAYER, "hand", spell_def("ball", EffectSpec(EffectKind.DESTROY, target=EffectTarget.SINGLE_ENEMY)))

        result = cast(reducer, battle, ball)

        assert not result.success
        assert result.new_state.player(Side.PLAYER).hand_card(ball.instance_id) is not None

    def test_own_creature_is_not_an_enemy_target(self, battle, reducer):
        mine = place(battle, Side.PLAYER, "field", creature_def())
        bolt = place(battle, Side.PLAYER, "hand", spell_def("bolt", EffectSpec(EffectKind.DAMAGE, 800, EffectTarget.SINGLE_ENEMY)))

        result = cast(reducer, battle, bolt, mine.instance_id)

        assert not result.success
        assert result.error == "Target is not on the opponent's field"


class TestEffects:
    """Spell effects once cast."""

    def test_heal_caps_at_max(self, battle, reducer):
        potion = place(battle, Side.PLAYER, "hand", spell_def("potion", EffectSpec(EffectKind.HEAL, 2000, EffectTarget.OWNER)))
        battle.player(Side.PLAYER).hp = 7500

        state = cast(reducer, battle, potion).new_state

        assert state.player(Side.PLAYER).hp == 8000
        assert state.player(Side.PLAYER).graveyard[-1].instance_id == potion.instance_id
        assert state.stats.of(Side.PLAYER).spells_used == 1

    def test_damage_spell_hits_player_on_empty_field(self, battle, reducer):
        bolt = place(battle, Side.PLAYER, "hand", spell_def("bolt", EffectSpec(EffectKind.DAMAGE, 800, EffectTarget.SINGLE_ENEMY)))

        result = cast(reducer, battle, bolt)

        assert result.success
        assert result.new_state.player(Side.NPC).hp == 7200

    def test_damage_spell_on_creature(self, battle, reducer):
        target = place(battle, Side.NPC, "field", creature_def("wall", 500, 600))
        bolt = place(battle, Side.PLAYER, "hand", spell_def("bolt", EffectSpec(EffectKind.DAMAGE, 800, EffectTarget.SINGLE_ENEMY)))

        state = cast(reducer, battle, bolt, target.instance_id).new_state

        assert state.player(Side.NPC).field == []
        assert state.player(Side.NPC).hp == 8000
        assert state.stats.of(Side.PLAYER).cards_destroyed == 1

    def test_area_damage(self, battle, reducer):
        frail = place(battle, Side.NPC, "field", creature_def("frail", 500, 400))
        sturdy = place(battle, Side.NPC, "field", creature_def("sturdy", 500, 1000))
        quake = place(battle, Side.PLAYER, "hand", spell_def("quake", EffectSpec(EffectKind.DAMAGE, 500, EffectTarget.ALL_ENEMIES)))

        state = cast(reducer, battle, quake).new_state

        npc = state.player(Side.NPC)
        assert npc.field_card(frail.instance_id) is None
        assert npc.field_card(sturdy.instance_id).defense == 500

    def test_destroy(self, battle, reducer):
        target = place(battle, Side.NPC, "field", creature_def("big", 3000, 3000))
        ball = place(battle, Side.PLAYER, "hand", spell_def("ball", EffectSpec(EffectKind.DESTROY, target=EffectTarget.SINGLE_ENEMY)))

        state = cast(reducer, battle, ball, target.instance_id).new_state

        assert state.player(Side.NPC).graveyard[-1].instance_id == target.instance_id

    def test_status(self, battle, reducer):
        target = place(battle, Side.NPC, "field", creature_def())
        burn = place(
            battle, Side.PLAYER, "hand",
            spell_def("scorch", EffectSpec(EffectKind.STATUS, target=EffectTarget.SINGLE_ENEMY, status=StatusEffect.BURN)),
        )

        state = cast(reducer, battle, burn, target.instance_id).new_state

        assert state.player(Side.NPC).field_card(target.instance_id).has_status(StatusEffect.BURN)

    def test_buff_ally(self, battle, reducer):
        mine = place(battle, Side.PLAYER, "field", creature_def(attack=1000))
        boost = place(
            battle, Side.PLAYER, "hand",
            spell_def("boost", EffectSpec(EffectKind.BUFF, 500, EffectTarget.SINGLE_ALLY, stat=Stat.ATTACK)),
        )

        state = cast(reducer, battle, boost, mine.instance_id).new_state

        card = state.player(Side.PLAYER).field_card(mine.instance_id)
        assert (card.attack, card.defense) == (1500, 1000)

    def test_draw(self, battle, reducer):
        scout = place(battle, Side.PLAYER, "hand", spell_def("scout", EffectSpec(EffectKind.DRAW, 2)))

        state = cast(reducer, battle, scout).new_state

        assert len(state.player(Side.PLAYER).hand) == 2
        assert len(state.player(Side.PLAYER).deck) == 8

    def test_draw_from_empty_deck_does_not_lose(self, battle, reducer):
        battle.player(Side.PLAYER).deck.clear()
        scout = place(battle, Side.PLAYER, "hand", spell_def("scout", EffectSpec(EffectKind.DRAW, 1)))

        state = cast(reducer, battle, scout).new_state

        assert not state.is_over

    @pytest.mark.parametrize("value,expected_attack", [(0, 600), (1, 1200)])
    def test_revive(self, battle, reducer, value, expected_attack):
        fallen = place(battle, Side.PLAYER, "graveyard", creature_def("fallen", 1200, 800))
        revive = place(battle, Side.PLAYER, "hand", spell_def("revive", EffectSpec(EffectKind.REVIVE, value)))

        state = cast(reducer, battle, revive).new_state

        player = state.player(Side.PLAYER)
        back = player.hand_card(fallen.instance_id)
        assert back is not None
        assert back.attack == expected_attack
        assert player.find(fallen.instance_id, ("graveyard",)) is None

    def test_revive_skips_non_creatures(self, battle, reducer):
        fallen = place(battle, Side.PLAYER, "graveyard", creature_def("fallen"))
        place(battle, Side.PLAYER, "graveyard", spell_def("used", EffectSpec(EffectKind.DRAW, 1)))
        revive = place(battle, Side.PLAYER, "hand", spell_def("revive", EffectSpec(EffectKind.REVIVE, 1)))

        state = cast(reducer, battle, revive).new_state

        assert state.player(Side.PLAYER).hand_card(fallen.instance_id) is not None
