"""
Session Module - Manages in-memory battle sessions.

A session represents one battle:
- Created when a client starts a battle
- Holds the authoritative state
- Drives resolutions and opponent turns through the BattleLoop
- Reports its result once when the battle ends

Sessions are EPHEMERAL: nothing is written to a database.
"""

from .manager import MemoryStatsSink, Session, SessionManager, SessionState, StatsSink
from .game_loop import BattleLoop, LoopState, TurnResult

__all__ = [
    "MemoryStatsSink",
    "Session",
    "SessionManager",
    "SessionState",
    "StatsSink",
    "BattleLoop",
    "LoopState",
    "TurnResult",
]
