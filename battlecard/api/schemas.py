"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between clients and the engine.
The action request mirrors the engine's command format, so the same
shape works for a local UI and for networked play.

Error Codes:
- INVALID_ACTION: Action rejected by the rules (a log line explains why)
- BUSY: A combat or summon resolution is still in flight
- GAME_OVER: The battle has already ended
- NOT_FOUND: Battle does not exist or has been deleted
- HANDLER_ERROR: The engine failed while applying the action
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class BattleStatus(str, Enum):
    """Battle status from the client's point of view."""
    YOUR_TURN = "your_turn"
    RESOLVING = "resolving"
    OPPONENT_TURN = "opponent_turn"
    GAME_OVER = "game_over"


class ActionKind(str, Enum):
    """Actions a client may submit."""
    DRAW = "DRAW"
    SUMMON = "SUMMON"
    USE_SPELL = "USE_SPELL"
    SET_TRAP = "SET_TRAP"
    GO_TO_BATTLE = "GO_TO_BATTLE"
    ATTACK = "ATTACK"
    END_TURN = "END_TURN"
    WAIT = "WAIT"
    SURRENDER = "SURRENDER"


class DifficultyLevel(str, Enum):
    EASY = "EASY"
    NORMAL = "NORMAL"
    HARD = "HARD"
    EXPERT = "EXPERT"


class SideName(str, Enum):
    PLAYER = "player"
    NPC = "npc"


class ModeName(str, Enum):
    QUICK_BATTLE = "QUICK_BATTLE"
    CAMPAIGN = "CAMPAIGN"
    SURVIVAL = "SURVIVAL"
    BOSS_RUSH = "BOSS_RUSH"
    DRAFT = "DRAFT"


class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_ACTION = "INVALID_ACTION"
    BUSY = "BUSY"
    GAME_OVER = "GAME_OVER"
    NOT_FOUND = "NOT_FOUND"
    NO_HANDLER = "NO_HANDLER"
    HANDLER_ERROR = "HANDLER_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class StatusInfo(BaseModel):
    status: str
    remaining: int


class CardInfo(BaseModel):
    """Card information for display."""
    instance_id: str
    card_id: str
    name: str
    kind: str
    element: str
    attack: int = 0
    defense: int = 0
    level: int = 1
    rarity: str
    sacrifice_required: int = 0
    has_attacked: bool = False
    statuses: list[StatusInfo] = Field(default_factory=list)
    ability: Optional[str] = Field(None, description="Ability name, if any")
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """
    One side of the table.

    hand and trap_zone are only filled in for the requesting side.
    """
    side: SideName
    name: str
    hp: int
    is_current_turn: bool = False
    deck_size: int = 0
    hand_size: int = 0
    trap_count: int = 0
    hand: Optional[list[CardInfo]] = None
    trap_zone: Optional[list[CardInfo]] = None
    field: list[CardInfo] = Field(default_factory=list)
    graveyard: list[CardInfo] = Field(default_factory=list)


class LogEntryInfo(BaseModel):
    entry_id: int
    message: str
    category: str = Field(description="info, combat, effect, status, spell or trap")
    timestamp: float


class PendingInfo(BaseModel):
    """An in-flight resolution; POST /advance runs its next stage."""
    kind: str
    stage: str
    side: SideName
    card_id: str
    target_id: Optional[str] = None
    delay_ms: int = 0


class LegalActionInfo(BaseModel):
    action_type: ActionKind
    card_id: Optional[str] = None
    target_id: Optional[str] = None
    sacrifices: list[str] = Field(default_factory=list)


class ReportInfo(BaseModel):
    """End-of-battle summary from the player's point of view."""
    winner: SideName
    reason: str
    damage_dealt: int
    cards_destroyed: int
    turns: int
    mode: ModeName
    perfect: bool
    stats: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Request Models
# =============================================================================

class CreateBattleRequest(BaseModel):
    """Request to start a battle."""
    seed: Optional[int] = Field(None, description="Seed for decks, shuffles and rolls")
    difficulty: DifficultyLevel = DifficultyLevel.NORMAL
    starter: Optional[SideName] = Field(None, description="Side that goes first; random if omitted")
    mode: ModeName = ModeName.QUICK_BATTLE
    player_deck: Optional[list[str]] = Field(None, description="Card ids; starter deck if omitted")
    npc_deck: Optional[list[str]] = Field(None, description="Card ids; built by difficulty if omitted")
    deck_out: Optional[bool] = Field(None, description="Override the deck-out rule")
    auto_resolve: bool = Field(True, description="Run resolutions and opponent turns after each action")


class ActionRequest(BaseModel):
    """
    A player command.

    Mirrors {SUMMON(cardId, sacrifices[]) | USE_SPELL(cardId, targetId?) |
    SET_TRAP(cardId) | ATTACK(cardId, targetId?) | GO_TO_BATTLE | WAIT}
    plus DRAW, END_TURN and SURRENDER.
    """
    action_type: ActionKind
    card_id: Optional[str] = None
    target_id: Optional[str] = None
    sacrifices: list[str] = Field(default_factory=list)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class BattleResponse(BaseModel):
    """Complete battle view for the player side."""
    battle_id: str
    status: BattleStatus
    phase: str
    turn_count: int
    current_side: SideName
    starter: SideName
    players: list[PlayerInfo] = Field(default_factory=list)
    pending: Optional[PendingInfo] = None
    legal_actions: list[LegalActionInfo] = Field(default_factory=list)
    log: list[LogEntryInfo] = Field(default_factory=list)
    winner: Optional[SideName] = None
    end_reason: Optional[str] = None
    report: Optional[ReportInfo] = None
    created_at: float = 0.0
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Result of an action, advance or reset."""
    success: bool
    battle: BattleResponse
    new_log: list[LogEntryInfo] = Field(default_factory=list)
    opponent_actions: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


class BattleSummary(BaseModel):
    battle_id: str
    status: BattleStatus
    turn_count: int
    winner: Optional[SideName] = None
    created_at: float = 0.0


class BattleListResponse(BaseModel):
    """Response listing live battles."""
    battles: list[BattleSummary]
    count: int


class LogResponse(BaseModel):
    battle_id: str
    entries: list[LogEntryInfo]
    last_id: int


class EndBattleResponse(BaseModel):
    """Response after deleting a battle."""
    success: bool
    battle_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str
    active_battles: int = 0
