"""
Connection Manager - WebSocket connections by id, grouped into match rooms.
"""

from __future__ import annotations
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Tracks live sockets and which match rooms they listen to.

    A connection id is the player id the game loop sees; a room is keyed
    by match code.
    """

    def __init__(self):
        self._by_id: dict[str, WebSocket] = {}
        self._rooms: dict[str, set[str]] = {}

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._by_id

    def connect(self, connection_id: str, ws: WebSocket) -> None:
        self._by_id[connection_id] = ws

    def disconnect(self, connection_id: str) -> list[str]:
        """Forget a connection. Returns the rooms it was in."""
        self._by_id.pop(connection_id, None)
        left = []
        for code, members in list(self._rooms.items()):
            if connection_id in members:
                members.discard(connection_id)
                left.append(code)
            if not members:
                del self._rooms[code]
        return left

    def join_room(self, code: str, connection_id: str) -> None:
        self._rooms.setdefault(code, set()).add(connection_id)

    def drop_room(self, code: str) -> None:
        self._rooms.pop(code, None)

    def room_members(self, code: str) -> set[str]:
        return set(self._rooms.get(code, ()))

    async def send_to(self, connection_id: str, payload: dict[str, Any]) -> bool:
        ws = self._by_id.get(connection_id)
        if not ws:
            return False
        try:
            await ws.send_json(payload)
            return True
        except Exception as e:
            logger.warning("send_to %s: %s", connection_id, e)
            return False

    async def broadcast(self, code: str, payload: dict[str, Any]) -> None:
        """Send to every member of a room, dropping sockets that fail."""
        dead = []
        for connection_id in self.room_members(code):
            ws = self._by_id.get(connection_id)
            if not ws:
                dead.append(connection_id)
                continue
            try:
                await ws.send_json(payload)
            except Exception:
                dead.append(connection_id)
        for connection_id in dead:
            members = self._rooms.get(code)
            if members is not None:
                members.discard(connection_id)
