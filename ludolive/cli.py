"""
Ludo Live CLI - Command-line interface for the server.

Usage:
    ludolive serve [--host HOST] [--port PORT]     Run the WebSocket server
    ludolive simulate [--players N] [--seed S]     Play a local match between bots
"""

import argparse
import random
import sys


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Ludo Live - Real-time four-player Ludo server",
        prog="ludolive",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the server")
    serve_parser.add_argument("--host", help="Bind address (default: LUDOLIVE_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a local match between bots")
    simulate_parser.add_argument("--players", type=int, default=4, choices=[1, 2, 3, 4])
    simulate_parser.add_argument("--seed", type=int, help="Random seed")
    simulate_parser.add_argument("--max-turns", type=int, default=10_000)

    args = parser.parse_args()

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the API under uvicorn."""
    import uvicorn
    from .config import get_config

    settings = get_config()
    uvicorn.run(
        "ludolive.api.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


def cmd_simulate(args):
    """Play bots that always move their first movable token."""
    from .session import GameLoop, MatchRegistry
    from .engine_core.state import MatchStatus

    rng = random.Random(args.seed)
    loop = GameLoop(MatchRegistry(rng=rng), rng=rng)

    names = ["Red", "Green", "Blue", "Yellow"][:args.players]
    match = loop.create_match(names[0], "bot-0").match
    for i, name in enumerate(names[1:], start=1):
        loop.join_match(match.code, name, f"bot-{i}")
    loop.start_match(match.code, "bot-0")

    print(f"Match {match.code}: {', '.join(names)}")

    rolls = 0
    while match.status == MatchStatus.IN_PROGRESS and rolls < args.max_turns:
        player = match.current_player
        result = loop.roll_dice(match.code, player.id)
        rolls += 1
        if result.forced_pass:
            loop.resolve_forced_pass(match.code, result.forced_pass.generation)
        else:
            loop.make_move(match.code, player.id, result.valid_moves[0])

    if match.winner:
        print(f"Winner: {match.winner.value} after {rolls} rolls")
    else:
        print(f"No winner after {rolls} rolls")
        sys.exit(1)


if __name__ == "__main__":
    main()
