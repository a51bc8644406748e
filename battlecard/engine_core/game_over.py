"""
Game-over latch and the end-of-battle report.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .state import GameMode, GameState, GameStatus, LogCategory, Side

logger = logging.getLogger(__name__)


class GameOverGuard:
    """
    Single idempotent finish point.

    The first call fixes the winner and writes one log line; every later
    call in the same battle is ignored.
    """

    def finish(
        self,
        state: GameState,
        winner: Side,
        reason: str,
        timestamp: float | None = None,
    ) -> bool:
        if state.status is GameStatus.GAME_OVER:
            logger.debug("Ignoring duplicate finish (%s) for %s", reason, state.game_id)
            return False

        state.status = GameStatus.GAME_OVER
        state.winner = winner
        state.end_reason = reason
        state.pending = None
        state.stats.turns = state.turn_count
        state.add_log(
            f"{state.player(winner).name} wins! ({reason.replace('_', ' ')})",
            LogCategory.INFO,
            timestamp,
        )
        logger.info("Battle %s over: %s wins by %s", state.game_id, winner.value, reason)
        return True


@dataclass
class GameReport:
    """Result summary from the player's point of view."""
    game_id: str
    winner: Side
    reason: str
    damage_dealt: int
    cards_destroyed: int
    turns: int
    mode: GameMode
    perfect: bool  # player won without losing HP
    stats: dict = field(default_factory=dict)

    @property
    def player_won(self) -> bool:
        return self.winner is Side.PLAYER


def build_report(state: GameState) -> GameReport:
    if not state.is_over or state.winner is None:
        raise ValueError("Battle is not over")
    mine = state.stats.of(Side.PLAYER)
    return GameReport(
        game_id=state.game_id,
        winner=state.winner,
        reason=state.end_reason or "",
        damage_dealt=mine.damage_dealt,
        cards_destroyed=mine.cards_destroyed,
        turns=state.stats.turns,
        mode=state.mode,
        perfect=state.winner is Side.PLAYER and mine.damage_received == 0,
        stats={
            side.value: {
                "damage_dealt": s.damage_dealt,
                "damage_received": s.damage_received,
                "cards_destroyed": s.cards_destroyed,
                "cards_lost": s.cards_lost,
                "spells_used": s.spells_used,
                "traps_activated": s.traps_activated,
                "abilities_triggered": s.abilities_triggered,
                "status_inflicted": dict(s.status_inflicted),
            }
            for side, s in state.stats.sides.items()
        },
    )
