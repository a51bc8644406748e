"""
Tests for API Pydantic schemas.

Validates that:
- Request models apply their defaults and reject bad input
- Error codes are properly structured
- The OpenAPI schema lists every response model
"""

import pytest
from pydantic import ValidationError


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_create_battle_defaults(self):
        """CreateBattleRequest works with an empty body."""
        from ..api.schemas import CreateBattleRequest, DifficultyLevel, ModeName

        request = CreateBattleRequest()

        assert request.seed is None
        assert request.difficulty is DifficultyLevel.NORMAL
        assert request.mode is ModeName.QUICK_BATTLE
        assert request.auto_resolve is True
        assert request.deck_out is None

    def test_create_battle_rejects_unknown_difficulty(self):
        from ..api.schemas import CreateBattleRequest

        with pytest.raises(ValidationError):
            CreateBattleRequest(difficulty="IMPOSSIBLE")

    def test_action_request_parses_json(self):
        """ActionRequest accepts the wire format."""
        from ..api.schemas import ActionKind, ActionRequest

        request = ActionRequest.model_validate(
            {"action_type": "SUMMON", "card_id": "player-001-vinebear", "sacrifices": ["player-004-beetlet"]}
        )

        assert request.action_type is ActionKind.SUMMON
        assert request.target_id is None
        assert request.sacrifices == ["player-004-beetlet"]

    def test_action_request_validation(self):
        """ActionRequest requires a known action type."""
        from ..api.schemas import ActionRequest

        with pytest.raises(ValidationError):
            ActionRequest()
        with pytest.raises(ValidationError):
            ActionRequest(action_type="ADVANCE")

    def test_error_response_schema(self):
        """ErrorResponse has structured error codes."""
        from ..api.schemas import ErrorCode, ErrorResponse

        error = ErrorResponse(
            error="Battle not found",
            error_code=ErrorCode.NOT_FOUND,
            details={"battle_id": "bad-id"},
        )

        data = error.model_dump()
        assert data["error"] == "Battle not found"
        assert data["error_code"] == "NOT_FOUND"
        assert data["details"]["battle_id"] == "bad-id"
        assert data["api_version"] == "v1"

    def test_player_info_hides_hand_by_default(self):
        from ..api.schemas import PlayerInfo, SideName

        info = PlayerInfo(side=SideName.NPC, name="Opponent", hp=8000, hand_size=5)

        data = info.model_dump(mode="json")
        assert data["hand"] is None
        assert data["trap_zone"] is None
        assert data["side"] == "npc"

    def test_battle_response_schema(self):
        """BattleResponse nests players, cards and the pending resolution."""
        from ..api.schemas import (
            BattleResponse, BattleStatus, CardInfo, PendingInfo, PlayerInfo, SideName, StatusInfo,
        )

        card = CardInfo(
            instance_id="player-001-emberkit",
            card_id="emberkit",
            name="Emberkit",
            kind="CREATURE",
            element="FIRE",
            attack=900,
            defense=500,
            rarity="COMMON",
            statuses=[StatusInfo(status="BURN", remaining=2)],
        )
        response = BattleResponse(
            battle_id="battle-1",
            status=BattleStatus.RESOLVING,
            phase="BATTLE",
            turn_count=4,
            current_side=SideName.PLAYER,
            starter=SideName.NPC,
            players=[PlayerInfo(side=SideName.PLAYER, name="Player", hp=7000, field=[card], hand=[])],
            pending=PendingInfo(kind="attack", stage="strike", side=SideName.PLAYER, card_id=card.instance_id),
        )

        data = response.model_dump(mode="json")
        assert data["status"] == "resolving"
        assert data["players"][0]["field"][0]["statuses"][0] == {"status": "BURN", "remaining": 2}
        assert data["pending"]["target_id"] is None
        assert data["legal_actions"] == []
        assert data["winner"] is None


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_all_error_codes_defined(self):
        """All required error codes are defined."""
        from ..api.schemas import ErrorCode

        required_codes = [
            "INVALID_ACTION",
            "BUSY",
            "GAME_OVER",
            "NOT_FOUND",
            "HANDLER_ERROR",
        ]

        for code in required_codes:
            assert hasattr(ErrorCode, code), f"Missing error code: {code}"
            assert ErrorCode[code].value == code

    def test_every_code_has_an_http_status(self):
        from ..api.app import ERROR_STATUS
        from ..api.schemas import ErrorCode

        assert set(ERROR_STATUS) == set(ErrorCode)

    def test_error_code_values_are_strings(self):
        """Error codes are string enums for JSON serialization."""
        from ..api.schemas import ErrorCode

        for code in ErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.value.upper()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    @pytest.fixture
    def schema(self):
        from fastapi.openapi.utils import get_openapi

        from ..api.app import app

        return get_openapi(title=app.title, version=app.version, routes=app.routes)

    def test_openapi_schema_generates(self, schema):
        """OpenAPI schema generates without errors."""
        assert "paths" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self, schema):
        """Response models appear in OpenAPI schema."""
        schemas = schema["components"]["schemas"]

        for name in [
            "BattleResponse",
            "ActionResponse",
            "BattleListResponse",
            "LogResponse",
            "HealthResponse",
            "ErrorResponse",
        ]:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints(self, schema):
        """Key endpoints specify their success responses."""
        paths = schema["paths"]

        assert "201" in paths["/api/v1/battles"]["post"]["responses"]
        assert "200" in paths["/api/v1/battles/{battle_id}/actions"]["post"]["responses"]
        assert "409" in paths["/api/v1/battles/{battle_id}/actions"]["post"]["responses"]
        assert "/api/v1/battles/{battle_id}/advance" in paths
        assert "/api/v1/battles/{battle_id}/log" in paths
        assert "/api/v1/health" in paths
