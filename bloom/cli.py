"""
Bloom CLI - Command-line interface for the engine.

Usage:
    bloom simulate [--runs N] [--seed S] [--solo] [--show-turns]
    bloom serve [--host H] [--port P]
"""

import argparse
import logging
import sys

from .engine_core.state import GameConfig


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bloom - Garden tile-placement rules engine",
        prog="bloom",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play bot-only games and print statistics")
    simulate_parser.add_argument("--runs", type=int, default=1, help="Number of games")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed for bag and dice")
    simulate_parser.add_argument("--solo", action="store_true", help="Enable the season-5 drought")
    simulate_parser.add_argument("--show-turns", action="store_true", help="Print every turn")
    simulate_parser.add_argument(
        "--players", nargs="+", default=None, help="Seat names (default: You Bot1 Bot2)"
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP/WebSocket API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8080)
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_simulate(args):
    """Play a batch of games and print per-seat results."""
    from .session.simulation import run_batch

    if args.runs < 1:
        print("Error: --runs must be at least 1")
        sys.exit(1)

    config = GameConfig(solo_mode=args.solo, seed=args.seed)
    on_turn = _print_turn if args.show_turns else None
    stats = run_batch(args.runs, config, names=args.players, on_turn=on_turn)

    print("\n=== Batch Results ===")
    print(f"Games: {stats.games}")
    for i, name in enumerate(stats.names):
        print(
            f"- {name} -> avg score {stats.mean(i):.2f} (sigma {stats.sigma(i):.2f}), "
            f"win% {stats.win_pct(i):.1f}%, avg leftover tokens {stats.avg_tokens(i):.2f}"
        )
    shares = stats.win_share()
    print("Win share: " + " | ".join(f"{name} {share}%" for name, share in zip(stats.names, shares)))


def _print_turn(state):
    player = state.current_player
    print(
        f"  season {state.season} | next: {player.name} "
        f"| scores {[p.score for p in state.players]} "
        f"| tokens {[p.tokens for p in state.players]}"
    )


def cmd_serve(args):
    """Run the API under uvicorn."""
    import uvicorn

    uvicorn.run("bloom.api.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
