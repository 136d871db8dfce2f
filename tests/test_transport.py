import io
import threading
import time

import pytest

from wumpus_env import Action, Coordinate, Map, WumpusGame
from agents import Agent
from transport import GameServer, HighScore, play, read_message, send_message

C = Coordinate


class DigAgent(Agent):
    def run(self, game):
        return Action.DIG


def treasure_under_spawn():
    m = Map(discovered={C(0, 0)})
    m.add_treasure(C(0, 0))
    m.add_pit(C(4, 4))
    game = WumpusGame(map=m)
    game.update_senses()
    return game


@pytest.fixture
def server():
    server = GameServer(("127.0.0.1", 0), new_game=treasure_under_spawn)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


def test_high_score():
    high = HighScore()
    assert high.submit(-10)
    assert not high.submit(-20)
    assert high.submit(5)
    assert high.value == 5


def test_message_framing():
    stream = io.BytesIO()
    send_message(stream, {"a": 1})
    send_message(stream, "walk")
    stream.seek(0)
    assert read_message(stream) == {"a": 1}
    assert read_message(stream) == "walk"
    assert read_message(stream) is None


def test_remote_game(server):
    host, port = server.server_address
    output = []
    game = play(DigAgent(), host, port, delay=0, write=output.append)

    assert game.game_over
    assert game.events.treasure
    assert game.score == 199
    # ground truth never leaves the server
    assert game.map.treasures == set()
    assert game.map.pits == set()
    assert "> You found a treasure! Congratulations!" in output
    assert "> All treasures have been found. GG" in output
    assert output[-1] == "Final score: 199"

    deadline = time.time() + 5
    while server.high_score.value is None and time.time() < deadline:
        time.sleep(0.01)
    assert server.high_score.value == 199
