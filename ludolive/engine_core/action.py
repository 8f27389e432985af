"""
Action System - Action types, error codes and results.

Every intent a client can send maps to an ActionType. Handling an intent
never raises for user mistakes: it returns an ActionResult that is either
a success carrying the updated match, or a failure carrying an ErrorCode
that is reported to the requester only.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(str, Enum):
    """Client intents."""
    CREATE_MATCH = "create_match"
    JOIN_MATCH = "join_match"
    REJOIN_MATCH = "rejoin_match"
    START_MATCH = "start_match"
    ROLL_DICE = "roll_dice"
    MAKE_MOVE = "make_move"
    EMOTE = "emote"
    PING = "ping"


class ErrorCode(str, Enum):
    """Recoverable, user-visible error codes."""
    NOT_FOUND = "NOT_FOUND"
    ALREADY_STARTED = "ALREADY_STARTED"
    FULL = "FULL"
    ALREADY_JOINED = "ALREADY_JOINED"
    SEAT_NOT_FOUND = "SEAT_NOT_FOUND"
    NOT_HOST = "NOT_HOST"
    NOT_IN_PROGRESS = "NOT_IN_PROGRESS"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    ALREADY_ROLLED = "ALREADY_ROLLED"
    NO_ROLL = "NO_ROLL"
    INVALID_MOVE = "INVALID_MOVE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class ForcedPass:
    """
    A roll with no legal move, waiting to be passed on.

    The transport fires it after a short delay; it only applies if the
    match is still on the same roll generation.
    """
    code: str
    generation: int
    dice_value: int


@dataclass
class ActionResult:
    """
    Result of handling an intent.

    Contains:
    - Whether it succeeded
    - The match it touched (if any)
    - The error (if failed)
    - Roll details for dice_rolled events
    """
    success: bool
    match: Any | None = None  # MatchState
    error: str | None = None
    error_code: ErrorCode | None = None

    # For roll results
    dice_value: int | None = None
    valid_moves: list[int] = field(default_factory=list)
    forced_pass: ForcedPass | None = None

    # Human-readable changes, logged by the transport
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_match(
        cls,
        match: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with the updated match."""
        return cls(success=True, match=match, state_changes=changes or [])
