"""
Guess the Word CLI - Command-line interface for the engine.

Usage:
    guessword serve [--host HOST] [--port PORT]   Run the HTTP API
    guessword words                               Print the word pool
    guessword config                              Print the effective config
"""

import argparse
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Guess the Word - timed word-guessing game",
        prog="guessword",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Words command
    subparsers.add_parser("words", help="Print the word pool")

    # Config command
    subparsers.add_parser("config", help="Print the config built from the environment")

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "words":
        cmd_words(args)
    elif args.command == "config":
        cmd_config(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    uvicorn.run(
        "guessword.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


def cmd_words(args):
    """Print the word pool, one word per line."""
    from .config import GameConfig

    for word in GameConfig.from_env().word_pool:
        print(word)


def cmd_config(args):
    """Print the effective game config."""
    from .config import GameConfig

    try:
        config = GameConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Session length: {config.session_length} ticks")
    print(f"Tick: {config.tick_seconds}s ({config.duration_seconds:g}s per game)")
    print(f"End on empty queue: {config.end_on_empty}")
    print(f"Reject stale commands: {config.reject_stale_commands}")
    print(f"Words: {len(config.word_pool)}")


if __name__ == "__main__":
    main()
