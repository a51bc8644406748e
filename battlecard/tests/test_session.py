"""
Tests for sessions and the battle loop.

Tests:
- Session lifecycle
- Human actions and the loop state afterwards
- Engine-played turns
- The end-of-battle report
"""

import asyncio
import time

import pytest

from ..bots import BotDecision, Difficulty, FirstLegalStrategy, GreedyStrategy, OpponentStrategy
from ..config import BattleRules
from ..engine_core.action import Action
from ..engine_core.state import Phase, Side
from ..session import BattleLoop, LoopState, MemoryStatsSink, SessionManager, SessionState
from .conftest import creature_def


FAST = BattleRules().without_delays()


@pytest.fixture
def manager():
    return SessionManager(rules=FAST)


def small_deck(prefix, count=20):
    return [creature_def(f"{prefix}_{i}", 1000 + (i % 5) * 100, 800) for i in range(count)]


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_session(self, manager):
        session = manager.create_session(random_seed=7, starter=Side.PLAYER)

        state = session.game_state
        assert session.session_id in manager.list_active_sessions()
        assert state.game_id == session.session_id
        assert state.phase is Phase.MAIN
        assert state.current_side is Side.PLAYER
        assert len(state.player(Side.PLAYER).hand) == 5
        assert Side.NPC in session.strategies
        assert session.is_human_turn()

    def test_same_seed_same_deal(self, manager):
        first = manager.create_session(random_seed=11)
        second = manager.create_session(random_seed=11)

        def deal(session):
            return [c.card_id for c in session.game_state.player(Side.PLAYER).hand]

        assert deal(first) == deal(second)
        assert first.game_state.starter is second.game_state.starter

    def test_end_session(self, manager):
        session = manager.create_session(random_seed=1)

        assert manager.end_session(session.session_id)
        assert manager.get_session(session.session_id) is None
        assert session.state is SessionState.ABANDONED
        assert not manager.end_session(session.session_id)

    def test_cleanup_stale_sessions(self, manager):
        old = manager.create_session(random_seed=1)
        fresh = manager.create_session(random_seed=2)
        old.updated_at = time.time() - 7200

        removed = manager.cleanup_stale_sessions(max_age_seconds=3600)

        assert removed == 1
        assert manager.get_session(old.session_id) is None
        assert manager.get_session(fresh.session_id) is fresh
        assert len(manager) == 1


class TestBattleLoop:
    """Tests for BattleLoop driving."""

    def test_human_action_then_opponent_turn(self, manager):
        session = manager.create_session(random_seed=3, starter=Side.PLAYER)
        loop = BattleLoop(session)

        result = loop.submit(Action.end_turn(Side.PLAYER))

        assert result.success
        assert result.opponent_actions
        assert all(a.startswith("Opponent: ") for a in result.opponent_actions)
        if result.loop_state is LoopState.WAITING_HUMAN_ACTION:
            # the human's draw was taken on their behalf
            assert session.game_state.current_side is Side.PLAYER
            assert session.game_state.phase is not Phase.DRAW

    def test_rejected_action(self, manager):
        session = manager.create_session(random_seed=3, starter=Side.PLAYER)
        loop = BattleLoop(session)

        result = loop.submit(Action.attack(Side.PLAYER, "missing"))

        assert not result.success
        assert result.error_code == "INVALID_ACTION"
        assert result.errors
        assert result.log[-1].message.startswith("Action rejected")

    def test_engine_side_cannot_be_submitted(self, manager):
        session = manager.create_session(random_seed=3, starter=Side.NPC)
        loop = BattleLoop(session)

        result = loop.submit(Action.end_turn(Side.NPC))

        assert not result.success
        assert result.error_code == "INVALID_ACTION"

    def test_submit_without_driving(self, manager):
        session = manager.create_session(player_deck=small_deck("p"), random_seed=3, starter=Side.PLAYER)
        card = session.game_state.player(Side.PLAYER).hand[0]
        loop = BattleLoop(session)

        result = loop.submit(Action.summon(Side.PLAYER, card.instance_id), drive=False)

        assert result.success
        assert result.loop_state is LoopState.RESOLVING
        assert loop.advance().loop_state is LoopState.WAITING_HUMAN_ACTION

    def test_surrender_reports_once(self, manager):
        sink = MemoryStatsSink()
        session = manager.create_session(random_seed=5, starter=Side.PLAYER)
        loop = BattleLoop(session, sinks=[sink])

        result = loop.submit(Action.surrender(Side.PLAYER))
        loop.run_until_input()

        assert result.loop_state is LoopState.GAME_OVER
        assert result.winner == "npc"
        assert len(sink.reports) == 1
        assert sink.reports[0].reason == "surrender"
        assert session.state is SessionState.GAME_OVER

    def test_failing_sink_does_not_break_the_battle(self, manager):
        class Broken:
            def record(self, report):
                raise RuntimeError("down")

        sink = MemoryStatsSink()
        session = manager.create_session(random_seed=5, starter=Side.PLAYER)
        loop = BattleLoop(session, sinks=[Broken(), sink])

        loop.submit(Action.surrender(Side.PLAYER))

        assert len(sink.reports) == 1

    def test_log_listener_sees_new_entries(self, manager):
        seen = []
        session = manager.create_session(random_seed=5, starter=Side.PLAYER)
        loop = BattleLoop(session, log_listeners=[seen.extend])

        loop.submit(Action.go_to_battle(Side.PLAYER))

        assert seen
        assert seen[0].entry_id > 2

    def test_reset(self, manager):
        session = manager.create_session(random_seed=5, starter=Side.PLAYER)
        hand = [c.instance_id for c in session.game_state.player(Side.PLAYER).hand]
        loop = BattleLoop(session)
        loop.submit(Action.surrender(Side.PLAYER))

        result = loop.reset()

        assert result.loop_state is LoopState.WAITING_HUMAN_ACTION
        assert not session.game_state.is_over
        assert session.report is None
        assert [c.instance_id for c in session.game_state.player(Side.PLAYER).hand] == hand


class TestEngineVersusEngine:
    """Both sides played by strategies."""

    def test_greedy_battle_finishes(self, manager):
        sink = MemoryStatsSink()
        session = manager.create_session(
            player_deck=small_deck("p"),
            npc_deck=small_deck("n"),
            random_seed=21,
            strategies={
                Side.PLAYER: GreedyStrategy(Difficulty.EXPERT, seed=1),
                Side.NPC: GreedyStrategy(Difficulty.HARD, seed=2),
            },
        )
        loop = BattleLoop(session, sinks=[sink])

        result = loop.run_until_input(max_steps=5000)

        assert result.loop_state is LoopState.GAME_OVER
        assert session.game_state.winner is not None
        assert len(sink.reports) == 1

    def test_first_legal_battle_is_deterministic(self, manager):
        def play():
            session = manager.create_session(
                player_deck=small_deck("p"),
                npc_deck=small_deck("n"),
                random_seed=8,
                strategies={Side.PLAYER: FirstLegalStrategy(), Side.NPC: FirstLegalStrategy()},
            )
            BattleLoop(session).run_until_input(max_steps=5000)
            state = session.game_state
            return state.winner, state.end_reason, state.turn_count

        assert play() == play()

    def test_run_async_without_delays(self, manager):
        session = manager.create_session(
            player_deck=small_deck("p"),
            npc_deck=small_deck("n"),
            random_seed=4,
            strategies={
                Side.PLAYER: GreedyStrategy(Difficulty.EXPERT, seed=1),
                Side.NPC: GreedyStrategy(Difficulty.EXPERT, seed=2),
            },
        )
        loop = BattleLoop(session)

        result = asyncio.run(loop.run_async(max_steps=5000))

        assert result.loop_state is LoopState.GAME_OVER


class TestUntrustedStrategies:
    """Strategy output goes through the same validation as human input."""

    class Stubborn(OpponentStrategy):
        def decide(self, view, legal_actions):
            return BotDecision(action=Action.attack(view.side, "nope"))

    class Broken(OpponentStrategy):
        def decide(self, view, legal_actions):
            return "attack!"

    def test_illegal_proposals_move_the_turn_along(self, manager):
        session = manager.create_session(
            random_seed=6, starter=Side.PLAYER, strategies={Side.NPC: self.Stubborn()}
        )
        loop = BattleLoop(session)

        result = loop.submit(Action.end_turn(Side.PLAYER))

        assert result.opponent_actions == ["Opponent: DRAW", "Opponent: GO_TO_BATTLE", "Opponent: END_TURN"]
        assert result.loop_state is LoopState.WAITING_HUMAN_ACTION

    def test_non_action_output_is_a_type_error(self, manager):
        session = manager.create_session(
            random_seed=6, starter=Side.PLAYER, strategies={Side.NPC: self.Broken()}
        )
        loop = BattleLoop(session)

        with pytest.raises(TypeError):
            loop.submit(Action.end_turn(Side.PLAYER))
