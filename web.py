#!/usr/bin/env python3
"""
Bunco Web — Flask + WebSocket server for browser-based play.

Each WebSocket connection gets its own GameCoordinator instance.
State is pushed to the client as JSON snapshots at ~30 FPS; sound cues
travel in the snapshot's "events" list and are played by the browser.
"""
import json
import logging
import random
import threading
import time

logger = logging.getLogger(__name__)

from flask import Flask, render_template, request
from flask_sock import Sock

from game_config import PRESET_NAMES
from game_coordinator import GameCoordinator, make_players
from frontend_adapter import FrontendAdapter, NullSound, RULES_TEXT

FRAME_SECONDS = 1 / 30

app = Flask(__name__)
sock = Sock(app)


@app.route("/")
def index():
    """Game page — connects to WebSocket for real-time play."""
    return render_template("index.html", presets=PRESET_NAMES, rules=RULES_TEXT)


@sock.route("/ws")
def websocket(ws):
    """WebSocket handler — one game per connection."""
    name = request.args.get("name", "").strip() or "Player 1"
    spectate = request.args.get("spectate", "false") == "true"
    seed = request.args.get("seed", "")
    rng = random.Random(int(seed)) if seed.isdigit() else None

    coordinator = GameCoordinator(players=make_players(name[:20], spectate), rng=rng)
    adapter = FrontendAdapter(coordinator, sound=NullSound())
    adapter.load_settings()
    lock = threading.Lock()
    running = True

    def tick_loop():
        """Background thread: tick coordinator and push state at ~30 FPS."""
        nonlocal running
        last = time.monotonic()
        while running:
            try:
                now = time.monotonic()
                with lock:
                    adapter.update(now - last)
                    snapshot = adapter.get_game_snapshot()
                last = now
                ws.send(json.dumps(snapshot))
            except Exception:
                logger.error("Tick loop error", exc_info=True)
                running = False
                break
            time.sleep(FRAME_SECONDS)

    tick_thread = threading.Thread(target=tick_loop, daemon=True)
    tick_thread.start()

    try:
        while running:
            data = ws.receive()
            if data is None:
                break
            try:
                action = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON from client: %s", data)
                continue

            with lock:
                _handle_action(adapter, action)
    except Exception:
        logger.error("WebSocket receive error", exc_info=True)
    finally:
        running = False


def _handle_action(adapter, action):
    """Dispatch a client action to the adapter."""
    if not isinstance(action, dict):
        return
    cmd = action.get("action", "")

    if cmd == "roll":
        adapter.do_roll()

    elif cmd == "reset":
        adapter.do_reset()

    elif cmd == "toggle_help":
        adapter.toggle_help()

    elif cmd == "close_overlay":
        adapter.close_top_overlay()

    elif cmd == "toggle_dark_mode":
        adapter.toggle_dark_mode()

    elif cmd == "toggle_sound":
        adapter.toggle_sound()

    elif cmd == "cycle_preset":
        adapter.cycle_probability_preset()


def main():
    """Entry point for the web server."""
    import argparse
    parser = argparse.ArgumentParser(description="Bunco Web Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    print(f"Starting Bunco web server at http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
