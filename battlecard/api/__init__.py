"""
API Module - HTTP interface.

Exposes the engine via REST API. A client:
1. Creates a battle
2. Submits player actions
3. Advances in-flight resolutions (or lets the server do it)
4. Reads the battle view and log

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    ActionRequest,
    CreateBattleRequest,
    # Responses
    ActionResponse,
    BattleListResponse,
    BattleResponse,
    EndBattleResponse,
    ErrorResponse,
    HealthResponse,
    LogResponse,
    # Shared
    CardInfo,
    PlayerInfo,
    # Enums
    ActionKind,
    BattleStatus,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "CreateBattleRequest",
    # Responses
    "ActionResponse",
    "BattleListResponse",
    "BattleResponse",
    "EndBattleResponse",
    "ErrorResponse",
    "HealthResponse",
    "LogResponse",
    # Shared
    "CardInfo",
    "PlayerInfo",
    # Enums
    "ActionKind",
    "BattleStatus",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
