"""
Game Loop - Turn and session orchestration.

The loop:
1. Host creates a match, others join by code
2. Host starts the match
3. Current player rolls
4. If any token can move, the player picks one
5. If none can, the roll is passed on after a short delay
6. Repeat until one color brings all four tokens home

Every intent is checked against the requesting connection: only the host
may start, only the current player may roll or move. Failures come back
as ActionResult failures and never touch the match.

The loop is framework-agnostic and never sleeps. A roll with no legal
move returns a ForcedPass; the transport waits and then calls
resolve_forced_pass(), which is a no-op if the match has moved on.
"""

from __future__ import annotations
import logging
import random

from ..engine_core.action import ActionResult, ErrorCode, ForcedPass
from ..engine_core.rules import advance_turn, apply_move, is_valid_move, roll_dice, valid_moves
from ..engine_core.state import MatchState, MatchStatus
from .manager import MatchRegistry

logger = logging.getLogger(__name__)


class GameLoop:
    """
    Drives matches held by a MatchRegistry.

    Usage:
        loop = GameLoop(MatchRegistry())

        result = loop.create_match("Alice", conn_id)
        result = loop.roll_dice(code, conn_id)
        if result.forced_pass:
            # wait, then
            loop.resolve_forced_pass(code, result.forced_pass.generation)
    """

    def __init__(self, registry: MatchRegistry | None = None, rng: random.Random | None = None):
        self.registry = registry or MatchRegistry()
        self.rng = rng

    # =========================================================================
    # Lobby
    # =========================================================================

    def create_match(self, name: str, player_id: str) -> ActionResult:
        match = self.registry.create_match(name, player_id)
        return ActionResult.success_with_match(match, changes=[f"{name} created {match.code}"])

    def join_match(self, code: str, name: str, player_id: str) -> ActionResult:
        result = self.registry.join_match(code, name, player_id)
        if not result.success:
            logger.warning("Join %s by %s rejected: %s", code, name, result.error_code.value)
        return result

    def rejoin_match(self, code: str, name: str, player_id: str) -> ActionResult:
        result = self.registry.rejoin_match(code, name, player_id)
        if not result.success:
            logger.warning("Rejoin %s by %s rejected: %s", code, name, result.error_code.value)
        return result

    def start_match(self, code: str, player_id: str) -> ActionResult:
        """Only the host may start, and only from the lobby."""
        match = self.registry.get_match(code)
        if not match:
            return ActionResult.failure("Game not found", ErrorCode.NOT_FOUND)
        if match.host is None or match.host.id != player_id:
            return ActionResult.failure("Only the host can start the game", ErrorCode.NOT_HOST)
        if match.status != MatchStatus.LOBBY:
            return ActionResult.failure("Game already started", ErrorCode.ALREADY_STARTED)

        match.status = MatchStatus.IN_PROGRESS
        match.current_player_index = 0
        match.waiting_for_move = False
        logger.info("Match %s started with %d players", code, match.num_players)
        return ActionResult.success_with_match(match, changes=["Game started"])

    def leave_match(self, player_id: str) -> list[tuple[str, MatchState | None]]:
        """
        Drop a connection from every match it is seated in.

        Returns (code, match) pairs; match is None when the lobby was deleted.
        """
        affected = []
        for match in self.registry.find_by_player(player_id):
            affected.append((match.code, self.registry.remove_player(match.code, player_id)))
        return affected

    # =========================================================================
    # Turns
    # =========================================================================

    def roll_dice(self, code: str, player_id: str) -> ActionResult:
        """
        Roll for the current player.

        If no token can move with the roll, waiting_for_move stays False
        and the result carries a ForcedPass for the caller to schedule.
        """
        match = self.registry.get_match(code)
        if not match:
            return ActionResult.failure("Game not found", ErrorCode.NOT_FOUND)
        if match.status != MatchStatus.IN_PROGRESS:
            return ActionResult.failure("Game is not in progress", ErrorCode.NOT_IN_PROGRESS)
        if not match.is_current_player(player_id):
            return ActionResult.failure("Not your turn", ErrorCode.NOT_YOUR_TURN)
        if match.dice_value is not None:
            return ActionResult.failure("Already rolled", ErrorCode.ALREADY_ROLLED)

        roll = roll_dice(self.rng)
        match.dice_value = roll
        match.last_roll_by = player_id
        match.roll_generation += 1
        match.last_captures = []

        movable = valid_moves(match, player_id, roll)
        match.waiting_for_move = bool(movable)
        logger.info(
            "Match %s: %s rolled %d, movable tokens %s",
            code, match.current_player.name, roll, movable,
        )

        result = ActionResult.success_with_match(match, changes=[f"Rolled {roll}"])
        result.dice_value = roll
        result.valid_moves = movable
        if not movable:
            result.forced_pass = ForcedPass(
                code=code,
                generation=match.roll_generation,
                dice_value=roll,
            )
        return result

    def resolve_forced_pass(self, code: str, generation: int) -> MatchState | None:
        """
        Pass on a roll that had no legal move.

        Uses the same rule as a real move: a 6 keeps the turn. Returns None
        when the pass is stale (match gone, finished, or a different roll
        is now outstanding).
        """
        match = self.registry.get_match(code)
        if not match or match.status != MatchStatus.IN_PROGRESS:
            return None
        if match.roll_generation != generation or match.dice_value is None or match.waiting_for_move:
            return None

        roll = match.dice_value
        advance_turn(match, roll)
        match.dice_value = None
        match.last_roll_by = None
        logger.info(
            "Match %s: forced pass on %d, %s to play",
            code, roll, match.current_player.name,
        )
        return match

    def make_move(self, code: str, player_id: str, token_slot: int) -> ActionResult:
        match = self.registry.get_match(code)
        if not match:
            return ActionResult.failure("Game not found", ErrorCode.NOT_FOUND)
        if match.status != MatchStatus.IN_PROGRESS:
            return ActionResult.failure("Game is not in progress", ErrorCode.NOT_IN_PROGRESS)
        if not match.is_current_player(player_id):
            return ActionResult.failure("Not your turn", ErrorCode.NOT_YOUR_TURN)
        if match.dice_value is None:
            return ActionResult.failure("Roll the dice first", ErrorCode.NO_ROLL)

        steps = match.dice_value
        if not match.waiting_for_move or not is_valid_move(match, player_id, token_slot, steps):
            logger.warning("Match %s: invalid move token=%r steps=%d", code, token_slot, steps)
            return ActionResult.failure("Invalid move", ErrorCode.INVALID_MOVE)

        mover = match.current_player
        apply_move(match, player_id, token_slot, steps)
        return ActionResult.success_with_match(
            match,
            changes=[f"{mover.name} moved token {token_slot} by {steps}"],
        )

    # =========================================================================
    # Chatter
    # =========================================================================

    def emote(self, code: str, player_id: str, emoji: str) -> ActionResult:
        """Emotes are relayed only for seated players."""
        match = self.registry.get_match(code)
        if not match:
            return ActionResult.failure("Game not found", ErrorCode.NOT_FOUND)
        if not match.get_player(player_id):
            return ActionResult.failure("Not in this game", ErrorCode.NOT_FOUND)
        return ActionResult.success_with_match(match, changes=[f"{player_id} sent {emoji}"])
