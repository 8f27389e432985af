"""
Engine Core - Authoritative Ludo game state and rules.

The engine:
1. Maps relative token positions onto the shared board
2. Holds the MatchState for a session
3. Decides move legality
4. Applies moves, captures and wins
"""

from .board import absolute_position, is_safe_square, token_status_for
from .state import (
    MatchState,
    MatchStatus,
    Player,
    PlayerColor,
    Token,
    TokenStatus,
    SEAT_ORDER,
    MAX_PLAYERS,
)
from .action import ActionType, ActionResult, ErrorCode, ForcedPass
from .rules import (
    advance_turn,
    apply_move,
    can_player_move,
    initialize_tokens,
    is_valid_move,
    roll_dice,
    valid_moves,
)

__all__ = [
    "absolute_position",
    "is_safe_square",
    "token_status_for",
    "MatchState",
    "MatchStatus",
    "Player",
    "PlayerColor",
    "Token",
    "TokenStatus",
    "SEAT_ORDER",
    "MAX_PLAYERS",
    "ActionType",
    "ActionResult",
    "ErrorCode",
    "ForcedPass",
    "advance_turn",
    "apply_move",
    "can_player_move",
    "initialize_tokens",
    "is_valid_move",
    "roll_dice",
    "valid_moves",
]
