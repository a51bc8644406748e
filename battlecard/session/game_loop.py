"""
Battle Loop - Drives a session between human inputs.

The loop:
1. Human submits an action
2. Reducer validates and applies it
3. Any in-flight resolution is advanced stage by stage
4. Engine-played sides take their turns
5. Control returns once the human has to act (or the battle is over)

Stages carry a presentation delay. run_until_input() ignores it;
run_async() sleeps for it between stages.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable
import asyncio
import logging

from ..bots import OpponentStrategy, OpponentView
from ..engine_core.action import Action, ActionResult, ActionType
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.game_over import build_report
from ..engine_core.reducer import Reducer
from ..engine_core.state import LogEntry, Phase, Side
from .manager import Session, SessionState, StatsSink

logger = logging.getLogger(__name__)


# Per-turn cap on engine-played actions before the loop ends that turn
MAX_ACTIONS_PER_TURN = 30

LogListener = Callable[[list[LogEntry]], None]


class LoopState(Enum):
    """State of the battle loop."""
    WAITING_HUMAN_ACTION = "waiting_human_action"
    RESOLVING = "resolving"
    OPPONENT_TURN = "opponent_turn"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of driving the loop.

    Contains the log lines produced and what the engine-played sides did.
    """
    success: bool
    loop_state: LoopState

    # Log entries produced since the call started
    log: list[LogEntry] = field(default_factory=list)

    # Engine-played actions taken
    opponent_actions: list[str] = field(default_factory=list)

    # Errors (rejected human action)
    errors: list[str] = field(default_factory=list)
    error_code: str | None = None

    # Game over info
    winner: str | None = None


class BattleLoop:
    """
    The main battle driver.

    Usage:
        loop = BattleLoop(session, sinks=[sink])

        result = loop.submit(Action.summon(Side.PLAYER, card_id))
        if not result.success:
            show_error(result.errors)

        show_log(result.log)
    """

    def __init__(
        self,
        session: Session,
        reducer: Reducer | None = None,
        sinks: Iterable[StatsSink] = (),
        log_listeners: Iterable[LogListener] = (),
        auto_draw: bool = True,
    ):
        self.session = session
        self.reducer = reducer or Reducer()
        self.generator = ActionGenerator()
        self.sinks = list(sinks)
        self.log_listeners = list(log_listeners)
        self.auto_draw = auto_draw
        self.state = LoopState.WAITING_HUMAN_ACTION
        self._opponent_actions: list[str] = []
        self._turn_actions = 0
        self._turn_marker: tuple[int, Side] | None = None

    # ------------------------------------------------------------------
    # Public API

    def submit(self, action: Action, max_steps: int = 500, drive: bool = True) -> TurnResult:
        """
        Apply a human action, then run until the human must act again.

        With drive=False only the action itself is applied; in-flight
        resolutions and opponent turns wait for advance() or run_until_input().
        """
        start = self.session.game_state.log.last_id
        self._opponent_actions = []

        if action.action_type is not ActionType.SURRENDER and action.side in self.session.strategies:
            return self._result(start, False, [f"{action.side.value} is played by the engine"], "INVALID_ACTION")

        result = self._apply(action)
        if not result.success:
            return self._result(start, False, [result.error], result.error_code)

        if drive:
            self._drive(max_steps)
        return self._result(start, True)

    def advance(self) -> TurnResult:
        """Run exactly one stage of the in-flight resolution."""
        start = self.session.game_state.log.last_id
        self._opponent_actions = []
        result = self._apply(Action.advance())
        if not result.success:
            return self._result(start, False, [result.error], result.error_code)
        return self._result(start, True)

    def run_until_input(self, max_steps: int = 500) -> TurnResult:
        """Drive resolutions and engine turns without delays."""
        start = self.session.game_state.log.last_id
        self._opponent_actions = []
        self._drive(max_steps)
        return self._result(start, True)

    async def run_async(self, max_steps: int = 500) -> TurnResult:
        """Like run_until_input, sleeping for each stage's presentation delay."""
        start = self.session.game_state.log.last_id
        self._opponent_actions = []
        for _ in range(max_steps):
            step = self._next_step()
            if step is None:
                break
            run, delay_ms = step
            if delay_ms:
                await asyncio.sleep(delay_ms / 1000)
            run()
        self._settle()
        return self._result(start, True)

    def current_state(self) -> LoopState:
        """Loop state as of the session's current battle state."""
        self._settle()
        return self.state

    def reset(self) -> TurnResult:
        """Start the battle over from its initial state."""
        self.session.game_state = self.session.initial_state.clone()
        self.session.report = None
        self.session.state = SessionState.ACTIVE
        self.session.touch()
        self._turn_marker = None
        self._turn_actions = 0
        logger.info("Reset battle %s", self.session.session_id)
        return self.run_until_input()

    # ------------------------------------------------------------------
    # Driving

    def _drive(self, max_steps: int):
        for _ in range(max_steps):
            step = self._next_step()
            if step is None:
                break
            run, _ = step
            run()
        else:
            logger.warning("Battle %s: step limit %d reached", self.session.session_id, max_steps)
        self._settle()

    def _next_step(self) -> tuple[Callable[[], None], int] | None:
        """The next thing the engine would do on its own, with its delay."""
        state = self.session.game_state
        if state.is_over:
            return None

        if state.pending is not None:
            self.state = LoopState.RESOLVING
            return (lambda: self._apply(Action.advance())), state.pending.delay_ms

        side = state.current_side
        strategy = self.session.strategies.get(side)
        if strategy is None:
            if state.phase is Phase.DRAW and self.auto_draw:
                return (lambda: self._apply(Action.draw(side))), 0
            return None

        self.state = LoopState.OPPONENT_TURN
        return (lambda: self._strategy_step(side, strategy)), state.rules.opponent_delay_ms

    def _strategy_step(self, side: Side, strategy: OpponentStrategy):
        state = self.session.game_state

        marker = (state.turn_count, side)
        if marker != self._turn_marker:
            self._turn_marker = marker
            self._turn_actions = 0
        self._turn_actions += 1

        if self._turn_actions > MAX_ACTIONS_PER_TURN:
            logger.warning("%s exceeded %d actions; ending its turn", strategy.get_name(), MAX_ACTIONS_PER_TURN)
            self._apply(Action.end_turn(side))
            return

        legal = self.generator.generate_for_side(state, side)
        view = OpponentView.from_state(state, side, self.session.difficulty)
        decision = strategy.decide(view, legal)
        action = getattr(decision, "action", None)
        if not isinstance(action, Action):
            raise TypeError(f"{strategy.get_name()} returned {decision!r}, expected a BotDecision")

        # WAIT means "done with this phase"
        if action.action_type is ActionType.WAIT:
            action = self._phase_exit(state.phase, side)

        name = state.player(side).name
        result = self._apply(action)
        if result.success:
            self._opponent_actions.append(f"{name}: {action.action_type.value}")
            return

        # Rejected proposals are logged by the reducer; move the turn along
        logger.warning("%s proposed an illegal %s: %s", strategy.get_name(), action.action_type.value, result.error)
        fallback = self._phase_exit(self.session.game_state.phase, side)
        if self._apply(fallback).success:
            self._opponent_actions.append(f"{name}: {fallback.action_type.value}")

    def _phase_exit(self, phase: Phase, side: Side) -> Action:
        if phase is Phase.DRAW:
            return Action.draw(side)
        if phase is Phase.MAIN:
            return Action.go_to_battle(side)
        return Action.end_turn(side)

    # ------------------------------------------------------------------
    # State commits

    def _apply(self, action: Action) -> ActionResult:
        state = self.session.game_state
        start = state.log.last_id
        result = self.reducer.apply(state, action)
        if result.new_state is not None:
            self.session.game_state = result.new_state
            self.session.touch()
            self._notify(result.new_state.log.since(start))
        if self.session.game_state.is_over:
            self._finish()
        return result

    def _notify(self, entries: list[LogEntry]):
        if not entries:
            return
        for listener in self.log_listeners:
            try:
                listener(entries)
            except Exception:
                logger.exception("Log listener failed")

    def _finish(self):
        """Report the result once per battle."""
        if self.session.report is not None:
            return
        report = build_report(self.session.game_state)
        self.session.report = report
        self.session.state = SessionState.GAME_OVER
        self.state = LoopState.GAME_OVER
        for sink in self.sinks:
            try:
                sink.record(report)
            except Exception:
                logger.exception("Stats sink %r failed", sink)

    def _settle(self):
        state = self.session.game_state
        if state.is_over:
            self.state = LoopState.GAME_OVER
        elif state.pending is not None:
            self.state = LoopState.RESOLVING
        elif state.current_side in self.session.strategies:
            self.state = LoopState.OPPONENT_TURN
        else:
            self.state = LoopState.WAITING_HUMAN_ACTION

    def _result(
        self,
        start: int,
        success: bool,
        errors: list[str] | None = None,
        error_code: str | None = None,
    ) -> TurnResult:
        self._settle()
        state = self.session.game_state
        return TurnResult(
            success=success,
            loop_state=self.state,
            log=state.log.since(start),
            opponent_actions=list(self._opponent_actions),
            errors=errors or [],
            error_code=error_code,
            winner=state.winner.value if state.winner else None,
        )
