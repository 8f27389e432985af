"""
Ludo Live - Real-time four-player Ludo server

The server owns the authoritative state of every match and provides:
- Board geometry and the rules engine
- An in-memory registry of matches keyed by join code
- Turn orchestration (rolls, moves, forced passes, extra turns)
- A WebSocket API that broadcasts every change to the match room
"""

__version__ = "0.1.0"
