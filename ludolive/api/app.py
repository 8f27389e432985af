"""
FastAPI Application - WebSocket event surface and read-only REST endpoints.

Endpoints:
    WS     /ws                          Game events (see schemas for messages)
    GET    /api/v1/matches              List live match codes
    GET    /api/v1/matches/{code}       Get match state
    GET    /health                      Health check

WebSocket flow:
    1. Server accepts and sends {"type": "connected", "payload": {"player_id": ...}}
    2. Client sends intents: create_match, join_match, rejoin_match,
       start_match, roll_dice, make_move, emote, ping
    3. State changes are broadcast to the whole match room as match_state;
       errors go back to the sender only

Forced pass:
    A roll with no legal move is shown for forced_pass_delay seconds and
    then passed on. The pending pass is an asyncio task per match code; a
    newer roll cancels it, and the game loop ignores it if the roll
    generation has changed.
"""

from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Union
import asyncio
import logging
import uuid

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .. import __version__
from ..config import Settings, get_config
from ..engine_core.action import ActionResult, ActionType, ErrorCode, ForcedPass
from ..session import GameLoop, MatchCodeExhausted
from .connections import ConnectionManager
from .schemas import (
    ConnectedEvent,
    CreateMatchMessage,
    DiceRolledEvent,
    EmoteEvent,
    EmoteMessage,
    ErrorResponse,
    HealthResponse,
    JoinMatchMessage,
    MakeMoveMessage,
    MatchListResponse,
    MatchStateResponse,
    PingMessage,
    RejoinMatchMessage,
    RollDiceMessage,
    StartMatchMessage,
    event,
    parse_client_message,
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def create_app(game_loop: GameLoop | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        game_loop: Optional GameLoop (creates one over a fresh registry if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or get_config()
    configure_logging(settings.log_level)

    game_loop = game_loop or GameLoop()
    connections = ConnectionManager()
    pending_passes: dict[str, asyncio.Task] = {}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        for task in list(pending_passes.values()):
            task.cancel()
        pending_passes.clear()

    app = FastAPI(
        title="Ludo Live API",
        description="Real-time four-player Ludo sessions over WebSocket.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.game_loop = game_loop
    app.state.connections = connections
    app.state.pending_passes = pending_passes

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
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

    async def send_error(
        connection_id: str,
        error_code: ErrorCode,
        message: str,
        details: dict | None = None,
    ) -> None:
        await connections.send_to(
            connection_id,
            event("error", ErrorResponse(error=message, error_code=error_code, details=details)),
        )

    async def send_failure(connection_id: str, result: ActionResult) -> None:
        await send_error(connection_id, result.error_code, result.error)

    def log_changes(code: str, result: ActionResult) -> None:
        if result.state_changes:
            logger.info("Match %s: %s", code, "; ".join(result.state_changes))

    async def broadcast_state(code: str, match) -> None:
        await connections.broadcast(code, event("match_state", MatchStateResponse.from_match(match)))

    # =========================================================================
    # Forced pass scheduling
    # =========================================================================

    def cancel_forced_pass(code: str) -> None:
        task = pending_passes.pop(code, None)
        if task:
            task.cancel()

    async def run_forced_pass(forced_pass: ForcedPass) -> None:
        try:
            await asyncio.sleep(settings.forced_pass_delay)
            match = game_loop.resolve_forced_pass(forced_pass.code, forced_pass.generation)
            if match:
                await broadcast_state(forced_pass.code, match)
        finally:
            if pending_passes.get(forced_pass.code) is asyncio.current_task():
                del pending_passes[forced_pass.code]

    def schedule_forced_pass(forced_pass: ForcedPass) -> None:
        cancel_forced_pass(forced_pass.code)
        pending_passes[forced_pass.code] = asyncio.create_task(run_forced_pass(forced_pass))

    # =========================================================================
    # Message handlers
    # =========================================================================

    async def handle_create(connection_id: str, msg: CreateMatchMessage) -> None:
        try:
            result = game_loop.create_match(msg.name, connection_id)
        except MatchCodeExhausted as e:
            logger.error("Could not create match: %s", e)
            await send_error(connection_id, ErrorCode.INTERNAL_ERROR, "No match code available")
            return
        match = result.match
        log_changes(match.code, result)
        connections.join_room(match.code, connection_id)
        await connections.send_to(
            connection_id, event("match_created", MatchStateResponse.from_match(match))
        )

    async def handle_join(connection_id: str, msg: Union[JoinMatchMessage, RejoinMatchMessage]) -> None:
        if isinstance(msg, RejoinMatchMessage):
            result = game_loop.rejoin_match(msg.code, msg.name, connection_id)
        else:
            result = game_loop.join_match(msg.code, msg.name, connection_id)
        if not result.success:
            await send_failure(connection_id, result)
            return
        log_changes(msg.code, result)
        connections.join_room(msg.code, connection_id)
        await broadcast_state(msg.code, result.match)
        await connections.send_to(
            connection_id, event("match_joined", MatchStateResponse.from_match(result.match))
        )

    async def handle_start(connection_id: str, msg: StartMatchMessage) -> None:
        result = game_loop.start_match(msg.code, connection_id)
        if not result.success:
            await send_failure(connection_id, result)
            return
        log_changes(msg.code, result)
        await broadcast_state(msg.code, result.match)

    async def handle_roll(connection_id: str, msg: RollDiceMessage) -> None:
        result = game_loop.roll_dice(msg.code, connection_id)
        if not result.success:
            await send_failure(connection_id, result)
            return
        log_changes(msg.code, result)
        await connections.broadcast(
            msg.code,
            event("dice_rolled", DiceRolledEvent(
                value=result.dice_value,
                player_id=connection_id,
                valid_moves=result.valid_moves,
            )),
        )
        await broadcast_state(msg.code, result.match)
        if result.forced_pass:
            schedule_forced_pass(result.forced_pass)

    async def handle_move(connection_id: str, msg: MakeMoveMessage) -> None:
        result = game_loop.make_move(msg.code, connection_id, msg.token_index)
        if not result.success:
            await send_failure(connection_id, result)
            return
        log_changes(msg.code, result)
        await broadcast_state(msg.code, result.match)

    async def handle_emote(connection_id: str, msg: EmoteMessage) -> None:
        result = game_loop.emote(msg.code, connection_id, msg.emoji)
        if not result.success:
            await send_failure(connection_id, result)
            return
        await connections.broadcast(
            msg.code, event("emote", EmoteEvent(emoji=msg.emoji, player_id=connection_id))
        )

    async def handle_ping(connection_id: str, msg: PingMessage) -> None:
        await connections.send_to(connection_id, event("pong"))

    handlers = {
        ActionType.CREATE_MATCH: handle_create,
        ActionType.JOIN_MATCH: handle_join,
        ActionType.REJOIN_MATCH: handle_join,
        ActionType.START_MATCH: handle_start,
        ActionType.ROLL_DICE: handle_roll,
        ActionType.MAKE_MOVE: handle_move,
        ActionType.EMOTE: handle_emote,
        ActionType.PING: handle_ping,
    }

    async def handle_message(connection_id: str, raw: str) -> None:
        try:
            msg = parse_client_message(raw)
        except ValidationError as e:
            logger.warning("WS: invalid message from %s: %d errors", connection_id, e.error_count())
            await send_error(
                connection_id,
                ErrorCode.VALIDATION_ERROR,
                "Invalid message",
                details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
            )
            return
        logger.debug("WS: msg from %s type=%s", connection_id, msg.type)
        await handlers[ActionType(msg.type)](connection_id, msg)

    async def handle_disconnect(connection_id: str) -> None:
        connections.disconnect(connection_id)
        for code, match in game_loop.leave_match(connection_id):
            if match is None:
                connections.drop_room(code)
            else:
                await broadcast_state(code, match)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        WebSocket for game events.

        Messages from server:
        - connected: This connection's player id
        - match_created / match_joined: Ack to the sender
        - match_state: Match changed (whole room)
        - dice_rolled: A roll and the movable tokens (whole room)
        - emote: Relayed emote (whole room)
        - pong: Keep-alive reply
        - error: Rejected intent (sender only)
        """
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        connections.connect(connection_id, websocket)
        logger.info("WS: connected %s from %s", connection_id, websocket.client)

        try:
            await connections.send_to(
                connection_id, event("connected", ConnectedEvent(player_id=connection_id))
            )
            while True:
                raw = await websocket.receive_text()
                await handle_message(connection_id, raw)
        except WebSocketDisconnect as e:
            logger.info("WS: %s disconnected code=%s", connection_id, e.code)
        except Exception:
            logger.exception("WS: error on %s", connection_id)
        finally:
            await handle_disconnect(connection_id)

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List live matches",
    )
    async def list_matches() -> MatchListResponse:
        codes = game_loop.registry.list_codes()
        return MatchListResponse(matches=codes, count=len(codes))

    @app.get(
        "/api/v1/matches/{code}",
        response_model=MatchStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Get match state",
    )
    async def get_match(code: str) -> Union[MatchStateResponse, JSONResponse]:
        match = game_loop.registry.get_match(code.upper())
        if not match:
            return make_error_response(
                ErrorCode.NOT_FOUND,
                f"Match {code} not found",
                status_code=404,
            )
        return MatchStateResponse.from_match(match)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(status="healthy", service="ludolive", version=__version__)

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Ludo Live API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
            "websocket": "/ws",
        }

    return app
