"""
ESOP Wars CLI - Command-line interface for the engine.

Usage:
    esopwars simulate [--teams N] [--seed S]    Play a bot-only game
    esopwars serve [--host H] [--port P]        Run the API server
"""

import argparse
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="ESOP Wars - Startup economy game engine",
        prog="esopwars",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("ESOPWARS_LOG_LEVEL", "WARNING"),
        help="Logging level (default: ESOPWARS_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a game with bots in every seat")
    simulate_parser.add_argument("--teams", type=int, default=5, help="Number of teams (2-5)")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument(
        "--personality",
        action="append",
        default=None,
        help="Personality per seat in order (repeatable)",
    )
    simulate_parser.add_argument("--verbose", "-v", action="store_true", help="Print every change")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "serve":
        return cmd_serve(args)
    parser.print_help()
    return 1


def cmd_simulate(args):
    """Play a bot-only game and print the result."""
    from .engine_core.queries import get_winners
    from .session import SessionManager, GameLoop

    slots = list(range(args.teams))
    personalities = None
    if args.personality:
        personalities = {slot: args.personality[slot % len(args.personality)] for slot in slots}

    manager = SessionManager()
    try:
        session = manager.create_session(
            team_count=args.teams,
            bot_slots=slots,
            random_seed=args.seed,
            personalities=personalities,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    loop = GameLoop(session)
    if args.verbose:
        def echo(state, changes):
            for line in changes:
                print(f"  {line}")

        loop.subscribe(echo)

    state = loop.play_out()
    print(f"Game {state.game_id} ended in phase: {state.phase.value}")
    print(f"Actions played: {state.action_counter}")

    winners = get_winners(state)
    if winners is None:
        print("The game did not reach the exit.")
        return 1

    print(f"\nExit: {state.exit_card.name} ({state.exit_card.multiplier}x)")
    print("\nFounders:")
    for standing in winners.founder_ranking:
        print(f"  {standing.name:<28} {standing.score:>16,.0f}")
    print("\nEmployers:")
    for standing in winners.employer_ranking:
        print(f"  {standing.name:<28} {standing.score:>16,.0f}")
    if winners.investor_ranking:
        print("\nInvestors:")
        for standing in winners.investor_ranking:
            print(f"  {standing.name:<28} {standing.score:>15.2f}x")
    disqualified = [t.name for t in state.teams if t.is_disqualified]
    if disqualified:
        print(f"\nDisqualified: {', '.join(disqualified)}")
    return 0


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "esopwars.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
