# telemetry.py
# ============================================================
# Episode telemetry
# ------------------------------------------------------------
# Records each step of a game for later analysis, plotting,
# and CSV export (Streamlit app, batch runs).
# ============================================================

from __future__ import annotations
from typing import Dict, List, Mapping

import pandas as pd

from wumpus_env import EVENT_KEYWORDS, Action, ClassField, Coordinate, WumpusGame


def log_step(game: WumpusGame, action: Action) -> Dict[str, object]:
    """
    Capture the full state of the game after an action.
    """
    record: Dict[str, object] = dict(
        step=game.steps,
        action=action.value,
        score=game.score,
        pos_x=game.location.x,
        pos_y=game.location.y,
        dir=game.direction.value,
        arrows=game.arrows,
        discovered=len(game.map.discovered),
        game_over=game.game_over,
    )
    for k in EVENT_KEYWORDS:
        record[k] = getattr(game.events, k)
    return record


def to_frame(log: List[Dict[str, object]]) -> pd.DataFrame:
    frame = pd.DataFrame(log)
    if not frame.empty:
        frame["reward"] = frame["score"].diff().fillna(frame["score"].iloc[0])
    return frame


def summarize(frame: pd.DataFrame) -> Dict[str, int]:
    """Headline numbers of an episode log."""
    if frame.empty:
        return dict(score=0, steps=0, treasures=0, pits=0, bonks=0, shots=0)
    return dict(
        score=int(frame["score"].iloc[-1]),
        steps=int(len(frame)),
        treasures=int(frame["treasure"].sum()),
        pits=int(frame["pit"].sum()),
        bonks=int(frame["bonked"].sum()),
        shots=int((frame["action"] == Action.SHOOT.value).sum()),
    )


def posterior_frame(estimates: Mapping[Coordinate, ClassField[float]]) -> pd.DataFrame:
    """One row per estimated cell, one column per class."""
    rows = [
        dict(
            cell=str(location),
            empty=c.empty,
            treasure=c.treasure,
            wumpus=c.wumpus,
            pit=c.pit,
        )
        for location, c in sorted(estimates.items(), key=lambda item: (item[0].x, item[0].y))
    ]
    return pd.DataFrame(rows, columns=["cell", "empty", "treasure", "wumpus", "pit"])
