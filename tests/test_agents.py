import pytest

from wumpus_env import Action, Class, ClassField, Coordinate, Direction, Map, WumpusGame
from agents import BayesAgent, ManualAgent, RandomAgent, make_agent

C = Coordinate

# Occupants kept away from the spawn corner
FAR_TREASURES = [C(4, 4), C(3, 4)]
FAR_PITS = [C(2, 2), C(3, 3), C(0, 4)]


def make_game(treasures=FAR_TREASURES, wumpuses=(C(4, 0),), pits=FAR_PITS):
    m = Map()
    for t in treasures:
        m.add_treasure(t)
    for w in wumpuses:
        m.add_wumpus(w)
    for p in pits:
        m.add_pit(p)
    m.discovered.add(C(0, 0))
    game = WumpusGame(map=m)
    game.update_senses()
    return game


def test_random_agent_returns_actions():
    agent = RandomAgent(seed=1)
    game = make_game()
    actions = {agent.run(game) for _ in range(200)}
    assert actions == set(Action)


def test_manual_agent_reprompts():
    answers = iter(["jump", " Walk "])
    messages = []
    agent = ManualAgent(read=lambda prompt: next(answers), write=messages.append)
    assert agent.run(make_game()) == Action.WALK
    assert messages == ["Unrecognized action. Try again."]


def test_make_agent():
    assert isinstance(make_agent("bayes"), BayesAgent)
    assert isinstance(make_agent("Random"), RandomAgent)
    assert isinstance(make_agent("manual"), ManualAgent)
    with pytest.raises(ValueError):
        make_agent("oracle")


def test_bayes_explores_cheapest_safe_cell():
    game = make_game()
    agent = BayesAgent(workers=1)
    assert agent.run(game.hidden()) == Action.WALK
    assert not agent.action_queue
    assert agent.last_estimates[C(1, 0)].pit == 0.0
    assert agent.last_estimates[C(1, 0)].empty == 1.0


def test_bayes_possible_treasures():
    m = Map(discovered={C(0, 0), C(1, 0), C(2, 0)}, glitters={C(1, 0)}, pits={C(2, 0)})
    game = WumpusGame(map=m, location=C(1, 0))
    assert BayesAgent().possible_treasures(game) == [C(0, 0)]


def test_bayes_digs_a_certain_treasure():
    game = make_game(treasures=[C(1, 0), C(4, 4)])
    agent = BayesAgent(workers=1)
    agent.blacklist[C(0, 1)] = Class.EMPTY

    assert agent.run(game.hidden()) == Action.WALK
    assert agent.blacklist[C(1, 0)] == Class.TREASURE
    assert list(agent.action_queue) == [Action.DIG]
    game.step(Action.WALK)

    assert agent.run(game.hidden()) == Action.DIG
    events = game.step(Action.DIG)
    assert events.treasure

    agent.run(game.hidden())
    assert agent.treasures_found == 1


def test_bayes_shoots_a_certain_wumpus():
    game = make_game(wumpuses=[C(1, 0)])
    agent = BayesAgent(workers=1)
    agent.blacklist[C(0, 1)] = Class.EMPTY

    assert agent.run(game.hidden()) == Action.SHOOT
    assert agent.blacklist[C(1, 0)] == Class.WUMPUS
    assert not agent.action_queue

    events = game.step(Action.SHOOT)
    assert events.scream

    # the wumpus is gone, so the way east is safe again
    assert agent.run(game.hidden()) == Action.WALK
    assert agent.wumpuses_killed == 1


def test_bayes_turns_before_shooting():
    game = make_game(wumpuses=[C(0, 1)])
    agent = BayesAgent(workers=1)
    agent.blacklist[C(1, 0)] = Class.EMPTY
    assert agent.run(game.hidden()) == Action.LEFT
    assert list(agent.action_queue) == [Action.SHOOT]
    game.step(Action.LEFT)
    assert game.direction == Direction.NORTH
    assert agent.run(game.hidden()) == Action.SHOOT


# Posteriors fixed by hand; path costs from spawn facing east are
# 2 for (1,0) and 3 for (0,1).

def with_estimates(monkeypatch, estimates):
    agent = BayesAgent(workers=1)
    monkeypatch.setattr(agent, "estimate", lambda game: estimates)
    return agent


def test_bayes_avoids_any_wumpus_suspicion(monkeypatch):
    agent = with_estimates(monkeypatch, {
        C(1, 0): ClassField(0.99, 0.0, 0.01, 0.0),
        C(0, 1): ClassField(0.5, 0.0, 0.0, 0.5),
    })
    # a likely pit beats the slightest chance of a wumpus
    assert agent.run(make_game().hidden()) == Action.LEFT
    assert list(agent.action_queue) == [Action.WALK]


def test_bayes_prefers_lower_pit_risk_over_a_small_detour(monkeypatch):
    agent = with_estimates(monkeypatch, {
        C(1, 0): ClassField(0.9, 0.0, 0.0, 0.10),
        C(0, 1): ClassField(0.95, 0.0, 0.0, 0.05),
    })
    # 0.95 / 23 > 0.90 / 22
    assert agent.run(make_game().hidden()) == Action.LEFT


def test_bayes_explores_the_cheaper_of_equally_safe_cells(monkeypatch):
    agent = with_estimates(monkeypatch, {
        C(0, 1): ClassField(1.0, 0.0, 0.0, 0.0),
        C(1, 0): ClassField(1.0, 0.0, 0.0, 0.0),
    })
    assert agent.run(make_game().hidden()) == Action.WALK


def test_bayes_digs_the_cheaper_treasure_candidate(monkeypatch):
    agent = with_estimates(monkeypatch, {
        C(0, 1): ClassField(0.1, 0.9, 0.0, 0.0),
        C(1, 0): ClassField(0.7, 0.3, 0.0, 0.0),
    })
    assert agent.run(make_game().hidden()) == Action.WALK
    assert list(agent.action_queue) == [Action.DIG]
    assert agent.blacklist == {C(1, 0): Class.TREASURE}


def test_bayes_ignores_treasures_below_the_threshold(monkeypatch):
    agent = with_estimates(monkeypatch, {
        C(1, 0): ClassField(0.8, 0.2, 0.0, 0.0),
        C(0, 1): ClassField(1.0, 0.0, 0.0, 0.0),
    })
    assert agent.run(make_game().hidden()) == Action.WALK
    assert not agent.action_queue
    assert agent.blacklist == {}
