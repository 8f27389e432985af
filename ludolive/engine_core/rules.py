"""
Rules Engine - Move legality and move application.

Stateless functions over a MatchState. apply_move mutates the state in
place and returns it; callers must have checked is_valid_move first,
otherwise apply_move leaves the state untouched.

Move order inside apply_move:
1. Exit home on a 6, or advance along the path
2. Mark finished on landing exactly on 57 (status is derived)
3. Win check - returns immediately, nothing else runs
4. Capture every opposing token on the same unsafe shared square
5. Turn advance unless the roll was a 6
6. Clear the outstanding roll
"""

from __future__ import annotations
import logging
import random

from .board import (
    EXIT_ROLL,
    FINISH_POSITION,
    TOKENS_PER_PLAYER,
    absolute_position,
    is_on_main_loop,
    is_safe_square,
)
from .state import MatchState, MatchStatus, PlayerColor, SEAT_ORDER, Token, new_tokens

logger = logging.getLogger(__name__)

# Chance of a forced six before the fair roll
SIX_BIAS = 0.2


def initialize_tokens() -> dict[PlayerColor, list[Token]]:
    """Four home tokens for every color, seated or not."""
    return {color: new_tokens(color) for color in SEAT_ORDER}


def roll_dice(rng: random.Random | None = None) -> int:
    """
    Roll a biased die.

    With probability 0.2 the roll is a 6 outright; otherwise it is a fair
    1..6. That makes P(6) = 0.2 + 0.8/6 (about 1/3) and every other face
    0.8/6 (about 0.133).
    """
    rng = rng or random
    if rng.random() < SIX_BIAS:
        return EXIT_ROLL
    return rng.randint(1, 6)


def _is_token_slot(token_slot: object) -> bool:
    return (
        isinstance(token_slot, int)
        and not isinstance(token_slot, bool)
        and 0 <= token_slot < TOKENS_PER_PLAYER
    )


def is_valid_move(state: MatchState, player_id: str, token_slot: int, steps: int) -> bool:
    """Check whether the player may move the given token by steps."""
    player = state.get_player(player_id)
    if not player:
        return False
    if not state.is_current_player(player_id):
        return False
    if not _is_token_slot(token_slot):
        return False

    token = state.tokens_for(player.color)[token_slot]
    if token.is_finished:
        return False

    # Need a 6 to leave home
    if token.is_home:
        return steps == EXIT_ROLL

    # Exact roll to finish
    return token.position + steps <= FINISH_POSITION


def valid_moves(state: MatchState, player_id: str, steps: int) -> list[int]:
    """Slots the player could legally move with this roll."""
    return [
        slot for slot in range(TOKENS_PER_PLAYER)
        if is_valid_move(state, player_id, slot, steps)
    ]


def can_player_move(state: MatchState, player_id: str, steps: int) -> bool:
    return bool(valid_moves(state, player_id, steps))


def advance_turn(state: MatchState, steps: int) -> None:
    """A 6 keeps the turn; anything else passes it to the next seat."""
    if steps != EXIT_ROLL:
        state.current_player_index = (state.current_player_index + 1) % len(state.players)


def _capture(state: MatchState, mover: Token) -> list[Token]:
    """Send every opposing token sharing the mover's square back home."""
    if not is_on_main_loop(mover.position) or is_safe_square(mover.position):
        return []

    landing = absolute_position(mover.color, mover.position)
    captured = []
    for color, tokens in state.tokens.items():
        if color == mover.color:
            continue
        for other in tokens:
            if absolute_position(color, other.position) == landing:
                other.send_home()
                captured.append(other)
    return captured


def apply_move(state: MatchState, player_id: str, token_slot: int, steps: int) -> MatchState:
    """
    Apply a legal move.

    A move that fails is_valid_move is a no-op and the state is returned
    unchanged.
    """
    if not is_valid_move(state, player_id, token_slot, steps):
        return state

    player = state.get_player(player_id)
    tokens = state.tokens_for(player.color)
    token = tokens[token_slot]
    state.last_captures = []

    if token.is_home:
        token.position = 0
    else:
        token.position += steps

    if all(t.is_finished for t in tokens):
        state.status = MatchStatus.FINISHED
        state.winner = player.color
        state.dice_value = None
        state.waiting_for_move = False
        state.last_roll_by = None
        logger.info("Match %s won by %s (%s)", state.code, player.name, player.color.value)
        return state

    for other in _capture(state, token):
        state.last_captures.append((other.color, other.slot))
        logger.info(
            "Match %s: %s captured %s token %d at square %d",
            state.code, player.color.value, other.color.value, other.slot,
            absolute_position(token.color, token.position),
        )

    advance_turn(state, steps)

    state.waiting_for_move = False
    state.dice_value = None
    state.last_roll_by = None
    return state
