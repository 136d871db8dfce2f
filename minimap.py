# minimap.py
# =========================================================
# Text minimap
# ---------------------------------------------------------
# Two text rows per map row, North at the top:
#   row 1: player glyph, then T/W/P occupants
#   row 2: player glyph, then G/S/B markers
# Undiscovered cells print as "xxxx" unless revealed.
# =========================================================

from __future__ import annotations

from wumpus_env import Coordinate, Direction, Map

SEPARATOR_X = "    "
SEPARATOR_Y = "\n"

PLAYER_GLYPHS = {
    Direction.NORTH: "^",
    Direction.EAST: ">",
    Direction.SOUTH: "v",
    Direction.WEST: "<",
}


def _cell(map: Map, location: Coordinate, player: Coordinate, direction: Direction, flags) -> str:
    glyph = PLAYER_GLYPHS[direction] if location == player else "-"
    return glyph + "".join(ch if location in cells else "-" for ch, cells in flags)


def render_minimap(
    map: Map,
    location: Coordinate,
    direction: Direction,
    show_undiscovered: bool = False,
) -> str:
    occupants = (("T", map.treasures), ("W", map.wumpuses), ("P", map.pits))
    markers = (("G", map.glitters), ("S", map.stenches), ("B", map.breezes))

    lines = [SEPARATOR_Y]
    for y in range(map.size.y, -1, -1):
        for flags in (occupants, markers):
            row = []
            for x in range(map.size.x + 1):
                cell = Coordinate(x, y)
                if not show_undiscovered and cell not in map.discovered:
                    row.append(SEPARATOR_X + "xxxx")
                else:
                    row.append(SEPARATOR_X + _cell(map, cell, location, direction, flags))
            lines.append("".join(row) + "\n")
        lines.append(SEPARATOR_Y)

    return "".join(lines)[:-1]
