"""
FastAPI Application - REST API for card battles.

Endpoints:
    POST   /api/v1/battles                Create a battle against the engine
    GET    /api/v1/battles                List live battles
    GET    /api/v1/battles/{id}           Get the player-side battle view
    DELETE /api/v1/battles/{id}           Delete a battle
    POST   /api/v1/battles/{id}/actions   Submit a player action
    POST   /api/v1/battles/{id}/advance   Run the next resolution stage
    POST   /api/v1/battles/{id}/reset     Restart from the initial state
    GET    /api/v1/battles/{id}/log       Battle log since an entry id
    GET    /api/v1/health                 Health check

Resolution Flow:
    1. POST /actions applies the action
    2. With auto_resolve (default), combat stages and the opponent's
       turn run before the response is sent
    3. Without it, the battle reports status "resolving" and the client
       calls POST /advance once per stage, pacing its own animations

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union
import logging
import os

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .schemas import (
    # Request models
    ActionRequest,
    CreateBattleRequest,
    # Response models
    ActionResponse,
    BattleListResponse,
    BattleResponse,
    EndBattleResponse,
    ErrorResponse,
    HealthResponse,
    LogResponse,
    # Enums
    ErrorCode,
)
from .service import APIService

# Environment configuration
BATTLECARD_ENV = os.getenv("BATTLECARD_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.INVALID_ACTION: 400,
    ErrorCode.NO_HANDLER: 400,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.BUSY: 409,
    ErrorCode.GAME_OVER: 409,
    ErrorCode.HANDLER_ERROR: 500,
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Battlecard Engine API",
        description="""
Turn-based creature card battles against an engine-played opponent.

## Resolution Flow

Attacks and summons resolve in stages. With `auto_resolve` the server runs
every stage (and the opponent's turn) before answering. Otherwise the
battle reports `resolving` and the client calls `POST /advance` per stage.

## Error Codes

| Code | Description |
|------|-------------|
| `INVALID_ACTION` | Action rejected by the rules |
| `BUSY` | A resolution is still in flight |
| `GAME_OVER` | The battle has already ended |
| `NOT_FOUND` | Battle does not exist |
| `VALIDATION_ERROR` | Bad request data (e.g. unknown card id) |
| `HANDLER_ERROR` | The engine failed while applying the action |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def respond(response):
        """Pass models through; turn ErrorResponse into a JSON error."""
        if isinstance(response, ErrorResponse):
            return make_error_response(
                response.error_code,
                response.error,
                status_code=ERROR_STATUS.get(response.error_code, 400),
                details=response.details,
            )
        return response

    # =========================================================================
    # Battle Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/battles",
        response_model=BattleResponse,
        status_code=201,
        responses={422: {"model": ErrorResponse}},
        tags=["Battles"],
        summary="Create a battle",
    )
    async def create_battle(request: CreateBattleRequest) -> Union[BattleResponse, JSONResponse]:
        """
        Start a new battle.

        Decks default to the starter deck for the player and a
        difficulty-weighted deck for the opponent.
        """
        return respond(api_service.create_battle(request))

    @app.get(
        "/api/v1/battles",
        response_model=BattleListResponse,
        tags=["Battles"],
        summary="List battles",
    )
    async def list_battles() -> BattleListResponse:
        return api_service.list_battles()

    @app.get(
        "/api/v1/battles/{battle_id}",
        response_model=BattleResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Battles"],
        summary="Get battle",
    )
    async def get_battle(battle_id: str) -> Union[BattleResponse, JSONResponse]:
        return respond(api_service.get_battle(battle_id))

    @app.delete(
        "/api/v1/battles/{battle_id}",
        response_model=EndBattleResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Battles"],
        summary="Delete battle",
    )
    async def end_battle(battle_id: str) -> Union[EndBattleResponse, JSONResponse]:
        return respond(api_service.end_battle(battle_id))

    # =========================================================================
    # Play Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/battles/{battle_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
        tags=["Play"],
        summary="Submit an action",
    )
    async def submit_action(
        battle_id: str,
        request: ActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Submit a player action.

        Rejected actions leave the battle unchanged apart from a log line;
        the error details list the lines produced.
        """
        return respond(api_service.submit_action(battle_id, request))

    @app.post(
        "/api/v1/battles/{battle_id}/advance",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Advance resolution",
    )
    async def advance(battle_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.advance(battle_id))

    @app.post(
        "/api/v1/battles/{battle_id}/reset",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Reset battle",
    )
    async def reset(battle_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.reset(battle_id))

    @app.get(
        "/api/v1/battles/{battle_id}/log",
        response_model=LogResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Play"],
        summary="Battle log",
    )
    async def get_log(
        battle_id: str,
        since: int = Query(0, ge=0, description="Return entries after this id"),
    ) -> Union[LogResponse, JSONResponse]:
        return respond(api_service.get_log(battle_id, since))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="battlecard-engine",
            version=__version__,
            environment=BATTLECARD_ENV,
            active_battles=api_service.active_count(),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Battlecard Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    logger.debug("API created (env=%s)", BATTLECARD_ENV)
    return app


app = create_app()

# For running directly: uvicorn battlecard.api.app:app
