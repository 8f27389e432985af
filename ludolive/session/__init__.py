"""
Session Module - Live matches and turn orchestration.

A match is one play-through of Ludo:
- Created when a host opens a lobby
- Joined by code, up to four players
- Driven turn by turn through the GameLoop
- Kept in memory until the process exits

Matches are EPHEMERAL:
- No persistence to disk or database
- A lobby disappears once its last player leaves
- A started match keeps disconnected seats for rejoin
"""

from .manager import MatchRegistry, MatchCodeExhausted
from .game_loop import GameLoop

__all__ = [
    "MatchRegistry",
    "MatchCodeExhausted",
    "GameLoop",
]
