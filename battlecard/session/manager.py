"""
Session Manager - Creates and manages battle sessions.

LIFECYCLE:
1. Client creates a battle -> decks built, state set up, session stored
2. During the battle:
   - The human side submits actions
   - The loop drives resolutions and opponent turns
3. Battle ends -> the report goes to every stats sink exactly once
4. Client can:
   - Reset (same seed and decks, fresh state)
   - Delete the session

PERSISTENCE RULES:
- Sessions are in-memory only
- The only thing leaving the process is the end-of-battle report
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol
import logging
import random
import time
import uuid

from ..bots import Difficulty, GreedyStrategy, OpponentStrategy
from ..cards import build_npc_deck, create_battle, default_deck
from ..config import BattleRules
from ..engine_core.game_over import GameReport
from ..engine_core.state import CardDefinition, GameMode, GameState, Side

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a battle session."""
    ACTIVE = "active"  # Battle in progress
    GAME_OVER = "game_over"  # Battle completed
    ABANDONED = "abandoned"  # Deleted or cleaned up before the end


class StatsSink(Protocol):
    """Receives the end-of-battle report."""

    def record(self, report: GameReport) -> None:
        ...


@dataclass
class MemoryStatsSink:
    """Keeps reports in a list. Useful for tests and the CLI."""
    reports: list[GameReport] = field(default_factory=list)

    def record(self, report: GameReport) -> None:
        self.reports.append(report)


@dataclass
class Session:
    """
    One battle.

    Contains:
    - The current authoritative state and the initial state (for reset)
    - Strategies for the sides the engine plays itself
    - The report, once the battle is over
    """
    session_id: str
    created_at: float
    game_state: GameState
    initial_state: GameState

    state: SessionState = SessionState.ACTIVE
    strategies: dict[Side, OpponentStrategy] = field(default_factory=dict)
    difficulty: Difficulty = Difficulty.NORMAL

    report: GameReport | None = None
    updated_at: float = 0.0

    # Session metadata
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state is SessionState.ACTIVE

    def is_human_turn(self) -> bool:
        return self.game_state.current_side not in self.strategies

    def touch(self):
        self.updated_at = time.time()


class SessionManager:
    """
    Manages battle sessions.

    Responsibilities:
    - Create sessions with decks, rules and strategies
    - Track active sessions
    - Clean up completed and stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(
        self,
        rules: BattleRules | None = None,
        stats_sinks: list[StatsSink] | None = None,
    ):
        self.rules = rules or BattleRules()
        self.stats_sinks: list[StatsSink] = list(stats_sinks or [])
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        player_deck: list[CardDefinition] | None = None,
        npc_deck: list[CardDefinition] | None = None,
        random_seed: int | None = None,
        difficulty: Difficulty = Difficulty.NORMAL,
        starter: Side | None = None,
        mode: GameMode = GameMode.QUICK_BATTLE,
        rules: BattleRules | None = None,
        strategies: dict[Side, OpponentStrategy] | None = None,
    ) -> Session:
        """
        Create a new battle session.

        Args:
            player_deck: Player deck (starter deck when None)
            npc_deck: Opponent deck (difficulty-weighted when None)
            random_seed: Seed for deck building, shuffles and rolls
            difficulty: Opponent difficulty
            starter: Side that goes first (random when None)
            mode: Mode label for the report
            strategies: Engine-played sides (defaults to a greedy NPC)

        Returns:
            New Session in the starter's MAIN phase
        """
        if random_seed is None:
            random_seed = random.SystemRandom().randint(0, 2**31 - 1)
        deck_rng = random.Random(random_seed)

        session_id = str(uuid.uuid4())
        if player_deck is None:
            player_deck = default_deck(deck_rng)
        if npc_deck is None:
            npc_deck = build_npc_deck(difficulty=difficulty.value, rng=deck_rng)

        state = create_battle(
            player_deck,
            npc_deck,
            rules=rules or self.rules,
            random_seed=random_seed,
            starter=starter,
            mode=mode,
            game_id=session_id,
        )

        if strategies is None:
            strategies = {Side.NPC: GreedyStrategy(difficulty=difficulty, seed=random_seed)}

        now = time.time()
        session = Session(
            session_id=session_id,
            created_at=now,
            updated_at=now,
            game_state=state,
            initial_state=state.clone(),
            strategies=dict(strategies),
            difficulty=difficulty,
        )

        self._sessions[session_id] = session
        logger.info("Created battle %s (seed=%s, difficulty=%s)", session_id, random_seed, difficulty.value)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Returns False when there was no such session.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        if reason == "completed" and session.game_state.is_over:
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.info("Ended battle %s (%s)", session_id, reason)
        return True

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Drop sessions that have not been touched for max_age_seconds.

        Called periodically to free memory. Returns how many were removed.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.updated_at > max_age_seconds
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)

    def __len__(self):
        return len(self._sessions)
