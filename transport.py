# transport.py
# =========================================================
# TCP transport: game server and remote player client
# ---------------------------------------------------------
# Protocol: newline-delimited JSON.
#   server -> client : redacted game snapshot (WumpusGame.to_dict)
#   client -> server : action keyword as a JSON string, e.g. "walk"
#
# Each connection plays its own game on its own thread. The
# only shared state is the high score, guarded by a lock.
# =========================================================

from __future__ import annotations
import argparse
import json
import logging
import socket
import socketserver
import threading
import time
from typing import Callable, Optional

from wumpus_env import WumpusGame, parse_action
from agents import Agent, make_agent
from minimap import render_minimap

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6666


class HighScore:
    """Process-wide best score, safe to update from handler threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self.value: Optional[int] = None

    def submit(self, score: int) -> bool:
        """Record score; True if it beats the previous best."""
        with self._lock:
            if self.value is None or score > self.value:
                self.value = score
                return True
            return False


def send_message(stream, payload) -> None:
    stream.write((json.dumps(payload) + "\n").encode("utf-8"))
    stream.flush()


def read_message(stream):
    """Next JSON message, or None when the peer closed the connection."""
    line = stream.readline()
    if not line:
        return None
    return json.loads(line.decode("utf-8"))


# =========================================================
# Server
# =========================================================

class GameHandler(socketserver.StreamRequestHandler):
    """Plays one game per connection."""

    def handle(self):
        client = "%s:%s" % self.client_address
        logger.info("Client %s connected", client)

        game = self.server.new_game()
        logger.debug("%s", render_minimap(game.map, game.location, game.direction, True))

        try:
            while True:
                send_message(self.wfile, game.hidden().to_dict())
                if game.is_terminal():
                    break

                message = read_message(self.rfile)
                if message is None:
                    break
                try:
                    action = parse_action(str(message))
                except ValueError:
                    logger.warning("Client %s sent a malformed action: %r", client, message)
                    continue

                logger.info("- %s performs: %s", client, action)
                game.step(action)
        except (ConnectionError, json.JSONDecodeError) as exc:
            logger.warning("Client %s dropped: %s", client, exc)

        if self.server.high_score.submit(game.score):
            logger.info("Client %s disconnected with a new high score of %d!", client, game.score)
        else:
            logger.info("Client %s disconnected with a score of %d", client, game.score)


class GameServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, new_game: Callable[[], WumpusGame] = WumpusGame.new_random):
        super().__init__(address, GameHandler)
        self.new_game = new_game
        self.high_score = HighScore()


def serve(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    with GameServer((host, port)) as server:
        logger.info("Server listening on %s:%d...", host, port)
        server.serve_forever()


# =========================================================
# Client
# =========================================================

EVENT_MESSAGES = (
    ("bonked", "> You hit your head against the wall. Ouch!"),
    ("scream", "> A terrible scream echoes throughout the cave..."),
    ("treasure", "> You found a treasure! Congratulations!"),
    ("pit", "> Oh no, you fell into a pit :("),
)


def play(
    agent: Agent,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    delay: float = 1.0,
    write: Callable[[str], None] = print,
) -> WumpusGame:
    """Play one remote game with agent; returns the final snapshot."""
    with socket.create_connection((host, port)) as sock:
        with sock.makefile("rwb") as stream:
            while True:
                message = read_message(stream)
                if message is None:
                    raise ConnectionError("server closed the connection")
                game = WumpusGame.from_dict(message)

                write(render_minimap(game.map, game.location, game.direction))
                for key, text in EVENT_MESSAGES:
                    if getattr(game.events, key):
                        write(text)

                if game.game_over:
                    if game.events.wumpus:
                        write("> You walked into a wumpus den. GG")
                    else:
                        write("> All treasures have been found. GG")
                    break

                write(
                    f"Position: {game.location} facing {game.direction}, "
                    f"arrows: {game.arrows}, score: {game.score}"
                )

                action = agent.run(game)
                send_message(stream, action.value)
                time.sleep(delay)

    write("")
    write("GAME OVER")
    write(f"Final score: {game.score}")
    return game


# =========================================================
# Entry points
# =========================================================

def server_main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Wumpus World game server")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    serve(args.host, args.port)


def client_main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Wumpus World player")
    parser.add_argument("agent", choices=["random", "manual", "bayes"])
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--delay", type=float, default=1.0)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    play(make_agent(args.agent), args.host, args.port, args.delay)
