"""
Board Geometry - Pure functions over the shared Ludo track.

Every token measures its progress relative to its own entry square:
- -1        at home (not yet on the track)
- 0..51     main loop, relative to the color's entry square
- 52..56    home stretch (private to the color)
- 57        finished

Collisions between colors are detected on the shared absolute loop,
which is the relative position shifted by the color's start offset.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import PlayerColor, TokenStatus


PATH_LENGTH = 52
HOME_POSITION = -1
HOME_STRETCH_START = 52
FINISH_POSITION = 57
TOKENS_PER_PLAYER = 4
EXIT_ROLL = 6

# Entry squares are staggered by a quarter of the loop
START_OFFSETS: dict[str, int] = {
    "red": 0,
    "green": 13,
    "yellow": 26,
    "blue": 39,
}

# Entry squares and star squares, in relative form
SAFE_SQUARES: frozenset[int] = frozenset({0, 8, 13, 21, 26, 34, 39, 47})


def is_on_main_loop(relative_position: int) -> bool:
    """Check if a relative position lies on the shared 52-cell loop."""
    return 0 <= relative_position < PATH_LENGTH


def absolute_position(color: PlayerColor | str, relative_position: int) -> int | None:
    """
    Map a relative position to the shared board coordinate.

    Returns None for home and home-stretch positions: such tokens are
    off the shared loop and can neither capture nor be captured.
    """
    if not is_on_main_loop(relative_position):
        return None
    key = getattr(color, "value", color)
    return (relative_position + START_OFFSETS[key]) % PATH_LENGTH


def is_safe_square(relative_position: int) -> bool:
    """Safe squares are immune to capture regardless of who stands there."""
    return relative_position in SAFE_SQUARES


def token_status_for(position: int) -> TokenStatus:
    """Derive a token's status from its position."""
    from .state import TokenStatus

    if position == HOME_POSITION:
        return TokenStatus.HOME
    if position == FINISH_POSITION:
        return TokenStatus.FINISHED
    return TokenStatus.ACTIVE
