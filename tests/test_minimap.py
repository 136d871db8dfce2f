from wumpus_env import Coordinate, Direction, Map
from minimap import render_minimap

C = Coordinate


def test_hidden_cells_are_masked():
    m = Map(size=C(1, 1), discovered={C(0, 0)})
    text = render_minimap(m, C(0, 0), Direction.EAST)
    assert text == (
        "\n"
        "    xxxx    xxxx\n"
        "    xxxx    xxxx\n"
        "\n"
        "    >---    xxxx\n"
        "    >---    xxxx\n"
    )


def test_revealed_map_shows_occupants_and_markers():
    m = Map(size=C(1, 1), discovered={C(0, 0)})
    m.add_pit(C(1, 1))
    text = render_minimap(m, C(0, 0), Direction.NORTH, show_undiscovered=True)
    lines = text.split("\n")
    assert lines[1] == "    ----    ---P"
    assert lines[2] == "    ---B    ----"
    assert lines[4] == "    ^---    ----"
    assert lines[5] == "    ^---    ---B"
    assert "xxxx" not in text
