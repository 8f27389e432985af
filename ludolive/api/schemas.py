"""
Pydantic Schemas for API - Wire models for the WebSocket and REST surface.

Inbound messages are a discriminated union on "type". Outbound events are
envelopes of the form {"type": ..., "payload": ...}.

Error Codes:
- NOT_FOUND: Unknown match code
- ALREADY_STARTED / FULL / ALREADY_JOINED: Join rejected
- SEAT_NOT_FOUND: No disconnected seat to rejoin under that name
- NOT_HOST: Only the host can start
- NOT_IN_PROGRESS: Match is in the lobby or already finished
- NOT_YOUR_TURN / ALREADY_ROLLED / NO_ROLL: Turn order violated
- INVALID_MOVE: Move is not legal for the outstanding roll
- VALIDATION_ERROR: Message could not be parsed
"""

from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter, field_validator

from ..engine_core.action import ErrorCode
from ..engine_core.state import MatchStatus, PlayerColor, TokenStatus


NameField = Annotated[str, Field(min_length=1, max_length=32, description="Display name")]
CodeField = Annotated[str, Field(min_length=1, max_length=16, description="Match join code")]


# =============================================================================
# Inbound Messages
# =============================================================================

class _CodeMessage(BaseModel):
    code: CodeField

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()


class CreateMatchMessage(BaseModel):
    """Open a new lobby with the sender as host."""
    type: Literal["create_match"]
    name: NameField


class JoinMatchMessage(_CodeMessage):
    """Take the next free seat in a lobby."""
    type: Literal["join_match"]
    name: NameField


class RejoinMatchMessage(_CodeMessage):
    """Reclaim a disconnected seat in a started match."""
    type: Literal["rejoin_match"]
    name: NameField


class StartMatchMessage(_CodeMessage):
    type: Literal["start_match"]


class RollDiceMessage(_CodeMessage):
    type: Literal["roll_dice"]


class MakeMoveMessage(_CodeMessage):
    """Move a token by the outstanding roll. Range is checked by the rules."""
    type: Literal["make_move"]
    token_index: int


class EmoteMessage(_CodeMessage):
    type: Literal["emote"]
    emoji: str = Field(..., min_length=1, max_length=16)


class PingMessage(BaseModel):
    type: Literal["ping"]


ClientMessage = Annotated[
    Union[
        CreateMatchMessage,
        JoinMatchMessage,
        RejoinMatchMessage,
        StartMatchMessage,
        RollDiceMessage,
        MakeMoveMessage,
        EmoteMessage,
        PingMessage,
    ],
    Field(discriminator="type"),
]

client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(raw: str) -> BaseModel:
    """Parse a raw text frame. Raises pydantic.ValidationError."""
    return client_message_adapter.validate_json(raw)


# =============================================================================
# Shared Models
# =============================================================================

class TokenInfo(BaseModel):
    """A token as seen by clients."""
    id: int = Field(..., ge=0, le=3)
    position: int = Field(..., ge=-1, le=57, description="-1 home, 0-51 path, 52-56 home stretch, 57 finished")
    status: TokenStatus


class PlayerInfo(BaseModel):
    """A seated player."""
    id: str
    name: str
    color: PlayerColor
    ready: bool = False
    connected: bool = True


class CaptureInfo(BaseModel):
    """A token sent home by the latest move."""
    color: PlayerColor
    id: int


# =============================================================================
# Response Models
# =============================================================================

class MatchStateResponse(BaseModel):
    """Complete match state, broadcast after every change."""
    code: str
    players: list[PlayerInfo] = Field(default_factory=list)
    tokens: dict[PlayerColor, list[TokenInfo]] = Field(default_factory=dict)
    current_player_index: int = 0
    dice_value: Optional[int] = Field(None, ge=1, le=6)
    status: MatchStatus
    winner: Optional[PlayerColor] = None
    waiting_for_move: bool = False
    last_roll_by: Optional[str] = None
    last_captures: list[CaptureInfo] = Field(default_factory=list)
    api_version: str = "v1"

    @classmethod
    def from_match(cls, match: Any) -> "MatchStateResponse":
        return cls.model_validate(match.to_dict())


class ErrorResponse(BaseModel):
    """Standard error response, sent to the requester only."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class DiceRolledEvent(BaseModel):
    value: int = Field(..., ge=1, le=6)
    player_id: str
    valid_moves: list[int] = Field(default_factory=list, description="Token slots that can move")


class EmoteEvent(BaseModel):
    emoji: str
    player_id: str


class ConnectedEvent(BaseModel):
    """First frame on every socket: the connection's opaque id."""
    player_id: str


class MatchListResponse(BaseModel):
    """Codes of live matches."""
    matches: list[str]
    count: int


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


EventType = Literal[
    "connected",
    "match_created",
    "match_joined",
    "match_state",
    "dice_rolled",
    "emote",
    "pong",
    "error",
]


def event(event_type: EventType, payload: Optional[BaseModel] = None) -> dict[str, Any]:
    """Wrap a payload in the outbound envelope."""
    return {
        "type": event_type,
        "payload": payload.model_dump(mode="json") if payload is not None else None,
    }
