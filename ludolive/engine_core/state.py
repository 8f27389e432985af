"""
Match State - The single source of truth for one Ludo session.

Design principles:
- Derived fields are computed, never stored (token status)
- Serializable: to_dict() produces the broadcast payload
- Mutated only through the rules engine and the game loop
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from copy import deepcopy
import time

from .board import (
    FINISH_POSITION,
    HOME_POSITION,
    HOME_STRETCH_START,
    TOKENS_PER_PLAYER,
    token_status_for,
)


class PlayerColor(str, Enum):
    """Seat colors, in seating order."""
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"


# Host takes red, joiners get the next free color in this order
SEAT_ORDER: tuple[PlayerColor, ...] = (
    PlayerColor.RED,
    PlayerColor.GREEN,
    PlayerColor.BLUE,
    PlayerColor.YELLOW,
)

MAX_PLAYERS = len(SEAT_ORDER)


class TokenStatus(str, Enum):
    """Where a token is, derived from its position."""
    HOME = "home"
    ACTIVE = "active"
    FINISHED = "finished"


class MatchStatus(str, Enum):
    """Forward-only match lifecycle: lobby -> in_progress -> finished."""
    LOBBY = "lobby"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass
class Token:
    """
    A single token of one color.

    Only the position is stored; status is always recomputed from it.
    """
    color: PlayerColor
    slot: int  # 0..3
    position: int = HOME_POSITION

    @property
    def status(self) -> TokenStatus:
        return token_status_for(self.position)

    @property
    def is_home(self) -> bool:
        return self.position == HOME_POSITION

    @property
    def is_finished(self) -> bool:
        return self.position == FINISH_POSITION

    @property
    def in_home_stretch(self) -> bool:
        return HOME_STRETCH_START <= self.position < FINISH_POSITION

    def send_home(self) -> None:
        self.position = HOME_POSITION

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.slot,
            "position": self.position,
            "status": self.status.value,
        }


@dataclass
class Player:
    """A seated player. The id is the opaque connection identifier."""
    id: str
    name: str
    color: PlayerColor
    ready: bool = False
    connected: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color.value,
            "ready": self.ready,
            "connected": self.connected,
        }


@dataclass
class MatchState:
    """
    Complete state of one match.

    players is ordered: index 0 is the host, and join order is turn order.
    tokens always holds four tokens for each of the four colors, whether
    or not the color is seated.
    """
    code: str
    players: list[Player] = field(default_factory=list)
    tokens: dict[PlayerColor, list[Token]] = field(default_factory=dict)

    current_player_index: int = 0
    dice_value: int | None = None
    status: MatchStatus = MatchStatus.LOBBY
    winner: PlayerColor | None = None
    waiting_for_move: bool = False

    # Turn bookkeeping
    last_roll_by: str | None = None
    roll_generation: int = 0
    last_captures: list[tuple[PlayerColor, int]] = field(default_factory=list)

    created_at: float = field(default_factory=time.time)

    @property
    def host(self) -> Player | None:
        return self.players[0] if self.players else None

    @property
    def current_player(self) -> Player | None:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    @property
    def taken_colors(self) -> set[PlayerColor]:
        return {p.color for p in self.players}

    def get_player(self, player_id: str) -> Player | None:
        """Get player by connection id."""
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def tokens_for(self, color: PlayerColor) -> list[Token]:
        return self.tokens[color]

    def is_current_player(self, player_id: str) -> bool:
        current = self.current_player
        return current is not None and current.id == player_id

    def clone(self) -> MatchState:
        """Deep copy the state."""
        return deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Broadcast payload for clients."""
        return {
            "code": self.code,
            "players": [p.to_dict() for p in self.players],
            "tokens": {
                color.value: [t.to_dict() for t in tokens]
                for color, tokens in self.tokens.items()
            },
            "current_player_index": self.current_player_index,
            "dice_value": self.dice_value,
            "status": self.status.value,
            "winner": self.winner.value if self.winner else None,
            "waiting_for_move": self.waiting_for_move,
            "last_roll_by": self.last_roll_by,
            "last_captures": [
                {"color": color.value, "id": slot} for color, slot in self.last_captures
            ],
        }


def new_tokens(color: PlayerColor) -> list[Token]:
    """Four home tokens for one color."""
    return [Token(color=color, slot=i) for i in range(TOKENS_PER_PLAYER)]
