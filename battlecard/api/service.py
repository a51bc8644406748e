"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine actions
2. Manages sessions and their battle loops
3. Formats the player-side view of a battle

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import logging

from .schemas import (
    # Requests
    ActionRequest,
    CreateBattleRequest,
    # Responses
    ActionResponse,
    BattleListResponse,
    BattleResponse,
    BattleSummary,
    EndBattleResponse,
    ErrorResponse,
    LogResponse,
    # Shared
    CardInfo,
    LegalActionInfo,
    LogEntryInfo,
    PendingInfo,
    PlayerInfo,
    ReportInfo,
    StatusInfo,
    # Enums
    ActionKind,
    BattleStatus,
    ErrorCode,
    ModeName,
    SideName,
)
from ..bots import Difficulty
from ..cards import get_cards
from ..config import BattleRules
from ..engine_core.action import Action, ActionPayload, ActionType
from ..engine_core.action_generator import legal_actions
from ..engine_core.game_over import GameReport
from ..engine_core.state import Card, GameMode, GameState, LogEntry, PlayerState, Side
from ..session import BattleLoop, LoopState, Session, SessionManager, StatsSink, TurnResult

logger = logging.getLogger(__name__)


# Number of recent log lines embedded in a battle view
RECENT_LOG = 20

_LOOP_STATUS = {
    LoopState.WAITING_HUMAN_ACTION: BattleStatus.YOUR_TURN,
    LoopState.RESOLVING: BattleStatus.RESOLVING,
    LoopState.OPPONENT_TURN: BattleStatus.OPPONENT_TURN,
    LoopState.GAME_OVER: BattleStatus.GAME_OVER,
}


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        battle = service.create_battle(CreateBattleRequest(seed=7))
        response = service.submit_action(
            battle.battle_id, ActionRequest(action_type=ActionKind.GO_TO_BATTLE)
        )
    """
    rules: BattleRules = field(default_factory=BattleRules.from_env)
    stats_sinks: list[StatsSink] = field(default_factory=list)
    session_manager: SessionManager | None = None
    stale_after_seconds: int = 3600

    # Battle loops per session
    _loops: dict[str, BattleLoop] = field(default_factory=dict)

    def __post_init__(self):
        if self.session_manager is None:
            self.session_manager = SessionManager(rules=self.rules, stats_sinks=self.stats_sinks)

    # =========================================================================
    # Battles
    # =========================================================================

    def create_battle(self, request: CreateBattleRequest) -> BattleResponse | ErrorResponse:
        """Create a battle and run the opponent if it goes first."""
        self.cleanup_stale_battles()
        try:
            player_deck = get_cards(request.player_deck) if request.player_deck else None
            npc_deck = get_cards(request.npc_deck) if request.npc_deck else None
        except KeyError as e:
            return ErrorResponse(error=str(e.args[0]), error_code=ErrorCode.VALIDATION_ERROR)

        rules = self.rules
        if request.deck_out is not None:
            rules = replace(rules, deck_out_enabled=request.deck_out)

        try:
            session = self.session_manager.create_session(
                player_deck=player_deck,
                npc_deck=npc_deck,
                random_seed=request.seed,
                difficulty=Difficulty(request.difficulty.value),
                starter=Side(request.starter.value) if request.starter else None,
                mode=GameMode(request.mode.value),
                rules=rules,
            )
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)

        session.metadata["auto_resolve"] = request.auto_resolve
        loop = BattleLoop(session, sinks=self.session_manager.stats_sinks)
        self._loops[session.session_id] = loop
        if request.auto_resolve:
            loop.run_until_input()
        return self._battle_view(session, loop)

    def get_battle(self, battle_id: str) -> BattleResponse | ErrorResponse:
        found = self._lookup(battle_id)
        if isinstance(found, ErrorResponse):
            return found
        session, loop = found
        return self._battle_view(session, loop)

    def list_battles(self) -> BattleListResponse:
        battles = []
        for session in self.session_manager.list_sessions():
            loop = self._loops.get(session.session_id)
            state = session.game_state
            battles.append(
                BattleSummary(
                    battle_id=session.session_id,
                    status=self._status(loop),
                    turn_count=state.turn_count,
                    winner=SideName(state.winner.value) if state.winner else None,
                    created_at=session.created_at,
                )
            )
        return BattleListResponse(battles=battles, count=len(battles))

    def end_battle(self, battle_id: str) -> EndBattleResponse | ErrorResponse:
        if not self.session_manager.end_session(battle_id, reason="deleted"):
            return self._not_found(battle_id)
        self._loops.pop(battle_id, None)
        return EndBattleResponse(success=True, battle_id=battle_id)

    # =========================================================================
    # Play
    # =========================================================================

    def submit_action(self, battle_id: str, request: ActionRequest) -> ActionResponse | ErrorResponse:
        """
        Apply a player action.

        Rejections come back as an ErrorResponse whose details carry the
        log lines the rejection produced.
        """
        found = self._lookup(battle_id)
        if isinstance(found, ErrorResponse):
            return found
        session, loop = found

        action = Action(
            ActionType(request.action_type.value),
            ActionPayload(
                side=Side.PLAYER,
                card_id=request.card_id,
                target_id=request.target_id,
                sacrifices=list(request.sacrifices),
            ),
        )
        drive = session.metadata.get("auto_resolve", True)
        result = loop.submit(action, drive=drive)
        return self._turn_response(session, loop, result)

    def advance(self, battle_id: str) -> ActionResponse | ErrorResponse:
        """
        Run the next stage of an in-flight resolution.

        With nothing in flight, drives the opponent until the player has
        to act again.
        """
        found = self._lookup(battle_id)
        if isinstance(found, ErrorResponse):
            return found
        session, loop = found

        if session.game_state.pending is not None:
            result = loop.advance()
        else:
            result = loop.run_until_input()
        return self._turn_response(session, loop, result)

    def reset(self, battle_id: str) -> ActionResponse | ErrorResponse:
        found = self._lookup(battle_id)
        if isinstance(found, ErrorResponse):
            return found
        session, loop = found
        result = loop.reset()
        return self._turn_response(session, loop, result)

    def get_log(self, battle_id: str, since: int = 0) -> LogResponse | ErrorResponse:
        found = self._lookup(battle_id)
        if isinstance(found, ErrorResponse):
            return found
        session, _ = found
        log = session.game_state.log
        return LogResponse(
            battle_id=battle_id,
            entries=[self._log_entry(e) for e in log.since(since)],
            last_id=log.last_id,
        )

    def active_count(self) -> int:
        return len(self.session_manager.list_active_sessions())

    def cleanup_stale_battles(self) -> int:
        """Drop battles nobody has touched for stale_after_seconds, with their loops."""
        removed = self.session_manager.cleanup_stale_sessions(self.stale_after_seconds)
        if removed:
            for battle_id in list(self._loops):
                if self.session_manager.get_session(battle_id) is None:
                    del self._loops[battle_id]
            logger.info("Dropped %d stale battle(s)", removed)
        return removed

    # =========================================================================
    # Helpers
    # =========================================================================

    def _lookup(self, battle_id: str) -> tuple[Session, BattleLoop] | ErrorResponse:
        session = self.session_manager.get_session(battle_id)
        loop = self._loops.get(battle_id)
        if session is None or loop is None:
            return self._not_found(battle_id)
        session.touch()
        return session, loop

    def _not_found(self, battle_id: str) -> ErrorResponse:
        return ErrorResponse(
            error="Battle not found",
            error_code=ErrorCode.NOT_FOUND,
            details={"battle_id": battle_id},
        )

    def _status(self, loop: BattleLoop | None) -> BattleStatus:
        if loop is None:
            return BattleStatus.GAME_OVER
        return _LOOP_STATUS[loop.current_state()]

    def _turn_response(
        self,
        session: Session,
        loop: BattleLoop,
        result: TurnResult,
    ) -> ActionResponse | ErrorResponse:
        if not result.success:
            try:
                code = ErrorCode(result.error_code)
            except ValueError:
                code = ErrorCode.INVALID_ACTION
            logger.debug("Battle %s rejected action: %s", session.session_id, result.errors)
            return ErrorResponse(
                error="; ".join(e for e in result.errors if e) or "Action rejected",
                error_code=code,
                details={"log": [e.message for e in result.log]},
            )

        return ActionResponse(
            success=True,
            battle=self._battle_view(session, loop),
            new_log=[self._log_entry(e) for e in result.log],
            opponent_actions=result.opponent_actions,
        )

    def _battle_view(self, session: Session, loop: BattleLoop) -> BattleResponse:
        state = session.game_state
        pending = state.pending
        return BattleResponse(
            battle_id=session.session_id,
            status=self._status(loop),
            phase=state.phase.value,
            turn_count=state.turn_count,
            current_side=SideName(state.current_side.value),
            starter=SideName(state.starter.value),
            players=[
                self._player_info(state, state.player(Side.PLAYER), reveal=True),
                self._player_info(state, state.player(Side.NPC), reveal=False),
            ],
            pending=PendingInfo(
                kind=pending.kind,
                stage=pending.stage.value,
                side=SideName(pending.side.value),
                card_id=pending.card_id,
                target_id=pending.target_id,
                delay_ms=pending.delay_ms,
            ) if pending else None,
            legal_actions=self._legal_actions(state),
            log=[self._log_entry(e) for e in state.log.entries[-RECENT_LOG:]],
            winner=SideName(state.winner.value) if state.winner else None,
            end_reason=state.end_reason,
            report=self._report_info(session.report) if session.report else None,
            created_at=session.created_at,
        )

    def _player_info(self, state: GameState, player: PlayerState, reveal: bool) -> PlayerInfo:
        return PlayerInfo(
            side=SideName(player.side.value),
            name=player.name,
            hp=player.hp,
            is_current_turn=state.current_side is player.side,
            deck_size=len(player.deck),
            hand_size=len(player.hand),
            trap_count=len(player.trap_zone),
            hand=[self._card_info(c) for c in player.hand] if reveal else None,
            trap_zone=[self._card_info(c) for c in player.trap_zone] if reveal else None,
            field=[self._card_info(c) for c in player.field],
            graveyard=[self._card_info(c) for c in player.graveyard],
        )

    def _legal_actions(self, state: GameState) -> list[LegalActionInfo]:
        if state.is_over or state.current_side is not Side.PLAYER or state.pending is not None:
            return []
        infos = [
            LegalActionInfo(
                action_type=ActionKind(a.action_type.value),
                card_id=a.payload.card_id,
                target_id=a.payload.target_id,
                sacrifices=list(a.payload.sacrifices),
            )
            for a in legal_actions(state, Side.PLAYER)
            if a.action_type is not ActionType.ADVANCE
        ]
        infos.append(LegalActionInfo(action_type=ActionKind.SURRENDER))
        return infos

    @staticmethod
    def _card_info(card: Card) -> CardInfo:
        return CardInfo(
            instance_id=card.instance_id,
            card_id=card.card_id,
            name=card.name,
            kind=card.kind.value,
            element=card.element.value,
            attack=card.attack,
            defense=card.defense,
            level=card.level,
            rarity=card.definition.rarity.value,
            sacrifice_required=card.sacrifice_required,
            has_attacked=card.has_attacked,
            statuses=[StatusInfo(status=s.status.value, remaining=s.remaining) for s in card.statuses],
            ability=card.ability.name if card.ability else None,
            description=card.ability.description if card.ability else None,
        )

    @staticmethod
    def _log_entry(entry: LogEntry) -> LogEntryInfo:
        return LogEntryInfo(
            entry_id=entry.entry_id,
            message=entry.message,
            category=entry.category.value,
            timestamp=entry.timestamp,
        )

    @staticmethod
    def _report_info(report: GameReport) -> ReportInfo:
        return ReportInfo(
            winner=SideName(report.winner.value),
            reason=report.reason,
            damage_dealt=report.damage_dealt,
            cards_destroyed=report.cards_destroyed,
            turns=report.turns,
            mode=ModeName(report.mode.value),
            perfect=report.perfect,
            stats=report.stats,
        )
