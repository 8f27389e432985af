"""
Match Registry - Creates, looks up and garbage-collects matches.

LIFECYCLE:
1. Host creates a match -> fresh board, host seated as red, status lobby
2. Players join by code while the match is in the lobby
3. Leaving the lobby removes the seat; an empty lobby is deleted
4. Once started, seats are never removed - a disconnected player keeps
   their seat and tokens and may rejoin by code and name

PERSISTENCE RULES:
- In-memory only, lost on restart
- Started matches are kept for the process lifetime
"""

from __future__ import annotations
import logging
import random
import threading

from ..engine_core.action import ActionResult, ErrorCode
from ..engine_core.rules import initialize_tokens
from ..engine_core.state import MatchState, MatchStatus, Player, PlayerColor, SEAT_ORDER

logger = logging.getLogger(__name__)

# No I, 1, O, 0
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6
MAX_CODE_ATTEMPTS = 64


class MatchCodeExhausted(RuntimeError):
    """No unused join code was found within the retry budget."""


class MatchRegistry:
    """
    Owns every live match, keyed by join code.

    The code map is guarded by a lock so inserts, lookups and deletes are
    safe from a multi-threaded host. Per-match serialization is the
    caller's job (the game loop runs on a single event loop).
    """

    def __init__(self, rng: random.Random | None = None, max_code_attempts: int = MAX_CODE_ATTEMPTS):
        self._matches: dict[str, MatchState] = {}
        self._lock = threading.RLock()
        self._rng = rng or random.SystemRandom()
        self.max_code_attempts = max_code_attempts

    def __len__(self) -> int:
        return len(self._matches)

    def __contains__(self, code: str) -> bool:
        return code in self._matches

    def create_match(self, host_name: str, host_id: str) -> MatchState:
        """
        Create a new match with the host seated as red.

        Raises:
            MatchCodeExhausted: if no free code turned up in max_code_attempts tries
        """
        with self._lock:
            code = self._generate_code()
            match = MatchState(
                code=code,
                players=[Player(id=host_id, name=host_name, color=PlayerColor.RED)],
                tokens=initialize_tokens(),
            )
            self._matches[code] = match

        logger.info("Match %s created by %s", code, host_name)
        return match

    def get_match(self, code: str) -> MatchState | None:
        """Get a match by code."""
        with self._lock:
            return self._matches.get(code)

    def list_codes(self) -> list[str]:
        """List codes of all live matches."""
        with self._lock:
            return list(self._matches)

    def find_by_player(self, player_id: str) -> list[MatchState]:
        """Matches where this connection holds a seat."""
        with self._lock:
            return [m for m in self._matches.values() if m.get_player(player_id)]

    def join_match(self, code: str, name: str, player_id: str) -> ActionResult:
        """Seat a new player with the next free color."""
        match = self.get_match(code)
        if not match:
            return ActionResult.failure("Game not found", ErrorCode.NOT_FOUND)
        if match.status != MatchStatus.LOBBY:
            return ActionResult.failure("Game already started", ErrorCode.ALREADY_STARTED)
        if match.is_full:
            return ActionResult.failure("Game full", ErrorCode.FULL)
        if match.get_player(player_id):
            return ActionResult.failure("Already in this game", ErrorCode.ALREADY_JOINED)

        taken = match.taken_colors
        color = next(c for c in SEAT_ORDER if c not in taken)
        match.players.append(Player(id=player_id, name=name, color=color))

        logger.info("Match %s: %s joined as %s", code, name, color.value)
        return ActionResult.success_with_match(match, changes=[f"{name} joined as {color.value}"])

    def remove_player(self, code: str, player_id: str) -> MatchState | None:
        """
        Remove a player who left.

        In the lobby the seat is freed, and the match is deleted once empty.
        After the start the seat is kept and only marked disconnected.

        Returns the match if it still exists.
        """
        with self._lock:
            match = self._matches.get(code)
            if not match:
                return None

            player = match.get_player(player_id)
            if not player:
                return match

            if match.status == MatchStatus.LOBBY:
                match.players.remove(player)
                if not match.players:
                    del self._matches[code]
                    logger.info("Match %s deleted (lobby empty)", code)
                    return None
                match.current_player_index = min(match.current_player_index, len(match.players) - 1)
                logger.info("Match %s: %s left the lobby", code, player.name)
            else:
                player.connected = False
                logger.info("Match %s: %s disconnected, seat kept", code, player.name)

            return match

    def rejoin_match(self, code: str, name: str, player_id: str) -> ActionResult:
        """
        Rebind a disconnected seat to a new connection.

        The seat is matched by name; only seats whose connection dropped
        after the match started can be reclaimed.
        """
        match = self.get_match(code)
        if not match:
            return ActionResult.failure("Game not found", ErrorCode.NOT_FOUND)

        if match.get_player(player_id):
            return ActionResult.failure("Already in this game", ErrorCode.ALREADY_JOINED)

        seat = next(
            (p for p in match.players if p.name == name and not p.connected),
            None,
        )
        if not seat:
            return ActionResult.failure(
                f"No disconnected seat named {name}", ErrorCode.SEAT_NOT_FOUND
            )

        if match.last_roll_by == seat.id:
            match.last_roll_by = player_id
        seat.id = player_id
        seat.connected = True

        logger.info("Match %s: %s rejoined as %s", code, name, seat.color.value)
        return ActionResult.success_with_match(match, changes=[f"{name} rejoined"])

    def _generate_code(self) -> str:
        for _ in range(self.max_code_attempts):
            code = "".join(self._rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            if code not in self._matches:
                return code
        raise MatchCodeExhausted(
            f"No free match code after {self.max_code_attempts} attempts "
            f"({len(self._matches)} live matches)"
        )
