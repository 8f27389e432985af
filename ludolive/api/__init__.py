"""
API Module - Browser client interface.

Exposes the game loop over a WebSocket for live play, plus a few
read-only REST endpoints. Browser clients:
1. Connect and receive their connection id
2. Create or join a match by code
3. Roll and move on their turn
4. Receive every state change of their match

All state is in memory. There are no accounts: a player is whatever
connection holds the seat.
"""

from .schemas import (
    # Inbound
    CreateMatchMessage,
    JoinMatchMessage,
    RejoinMatchMessage,
    StartMatchMessage,
    RollDiceMessage,
    MakeMoveMessage,
    EmoteMessage,
    PingMessage,
    parse_client_message,
    # Outbound
    MatchStateResponse,
    ErrorResponse,
    DiceRolledEvent,
    EmoteEvent,
    # Shared
    PlayerInfo,
    TokenInfo,
)
from .connections import ConnectionManager
from .app import create_app

__all__ = [
    # Inbound
    "CreateMatchMessage",
    "JoinMatchMessage",
    "RejoinMatchMessage",
    "StartMatchMessage",
    "RollDiceMessage",
    "MakeMoveMessage",
    "EmoteMessage",
    "PingMessage",
    "parse_client_message",
    # Outbound
    "MatchStateResponse",
    "ErrorResponse",
    "DiceRolledEvent",
    "EmoteEvent",
    # Shared
    "PlayerInfo",
    "TokenInfo",
    # Service
    "ConnectionManager",
    "create_app",
]
