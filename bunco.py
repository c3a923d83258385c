#!/usr/bin/env python3
"""
Unified entry point for both Bunco interfaces.

Usage:
    python bunco.py                             # Default: terminal (Textual)
    python bunco.py --ui web                    # Browser (Flask)
    python bunco.py --spectate --seed 7         # Watch four bots play
    python bunco.py --preset demo               # Frequent Buncos
    python bunco.py --ui web --port 8080        # Web on custom port

Individual entry points (tui.py, web.py) still work independently.
"""
import argparse
import sys


def main():
    # Pre-parse just the --ui flag, pass everything else through
    parser = argparse.ArgumentParser(
        description="Bunco — play in the terminal or the browser",
        add_help=False,
    )
    parser.add_argument("--ui", choices=["tui", "web"], default="tui",
                        help="Interface: tui (terminal, default), web (browser)")
    args, remaining = parser.parse_known_args()

    sys.argv = [sys.argv[0]] + remaining
    if args.ui == "tui":
        from tui import main as run_tui
        run_tui()

    elif args.ui == "web":
        from web import main as run_web
        run_web()


if __name__ == "__main__":
    main()
