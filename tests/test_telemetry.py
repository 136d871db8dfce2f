from wumpus_env import Action, ClassField, Coordinate, Direction, Map, WumpusGame
from telemetry import log_step, posterior_frame, summarize, to_frame

C = Coordinate


def play(actions, direction=Direction.WEST):
    game = WumpusGame(map=Map(discovered={C(0, 0)}), direction=direction)
    game.map.add_treasure(C(4, 4))
    log = []
    for action in actions:
        game.step(action)
        log.append(log_step(game, action))
    return game, log


def test_log_step_record():
    game, log = play([Action.WALK])
    record = log[0]
    assert record["step"] == 1
    assert record["action"] == "walk"
    assert record["bonked"] is True
    assert record["score"] == -1
    assert (record["pos_x"], record["pos_y"]) == (0, 0)
    assert record["dir"] == "west"


def test_frame_and_summary():
    game, log = play([Action.WALK, Action.SHOOT, Action.DIG])
    frame = to_frame(log)
    assert list(frame["reward"]) == [-1, -11, -51]
    assert summarize(frame) == dict(
        score=-63, steps=3, treasures=0, pits=0, bonks=1, shots=1,
    )


def test_empty_summary():
    assert summarize(to_frame([]))["steps"] == 0


def test_posterior_frame():
    frame = posterior_frame({
        C(1, 0): ClassField(0.5, 0.25, 0.0, 0.25),
        C(0, 1): ClassField(1.0, 0.0, 0.0, 0.0),
    })
    assert list(frame["cell"]) == ["(0,1)", "(1,0)"]
    assert list(frame.columns) == ["cell", "empty", "treasure", "wumpus", "pit"]
    assert frame.loc[1, "treasure"] == 0.25
