# ============================================================
# Wumpus World Treasure Hunt (Streamlit UI)
# ------------------------------------------------------------
# Visual front-end for the game in wumpus_env.py. The agent
# only ever receives the redacted snapshot (game.hidden());
# the "Reality" board view is for humans.
#
# Run with:  streamlit run app.py
# ============================================================

import time

# Data handling and plotting
import matplotlib.pyplot as plt

# Streamlit for UI / interaction
import streamlit as st

from wumpus_env import WumpusGame, Coordinate
from agents import BayesAgent, RandomAgent
from minimap import render_minimap
from telemetry import log_step, to_frame, summarize, posterior_frame


# ============================================================
# Streamlit Page Configuration
# ============================================================

st.set_page_config(page_title="Wumpus Treasure Hunt", layout="wide")
st.title("Wumpus World: Treasure Hunt")

st.markdown("""
<style>
.hud {display:flex; gap:12px; flex-wrap:wrap; margin-bottom:10px;}
.card {
  padding:10px 14px; border:1px solid rgba(120,120,120,.35);
  border-radius:14px; background: rgba(255,255,255,.03);
  min-width: 150px;
}
.card .k {font-size:12px; opacity:0.7;}
.card .v {font-size:20px; font-weight:700; margin-top:2px;}
.badges {display:flex; gap:8px; flex-wrap:wrap; margin-top:6px; margin-bottom:6px;}
.badge {
  padding:4px 10px; border-radius:999px;
  border:1px solid rgba(120,120,120,.35);
  font-size:13px;
}
</style>
""", unsafe_allow_html=True)


# ============================================================
# HUD Rendering
# ============================================================

def render_hud(game):
    status = "🏁 GAME OVER" if game.game_over else "🟢 RUNNING"
    html = f"""
    <div class='hud'>
      <div class='card'><div class='k'>Status</div><div class='v'>{status}</div></div>
      <div class='card'><div class='k'>Steps</div><div class='v'>{game.steps}</div></div>
      <div class='card'><div class='k'>Score</div><div class='v'>{game.score}</div></div>
      <div class='card'><div class='k'>Treasures left</div><div class='v'>{len(game.map.treasures)}</div></div>
      <div class='card'><div class='k'>Arrows</div><div class='v'>{game.arrows}</div></div>
      <div class='card'><div class='k'>Pos / Dir</div><div class='v'>{game.location} {game.direction}</div></div>
    </div>
    """
    return html


def event_badges(events):
    icons = {
        "treasure": "💰",
        "wumpus": "👾",
        "pit": "🕳️",
        "glitter": "✨",
        "stench": "🤢",
        "breeze": "💨",
        "bonked": "🧱",
        "scream": "😱",
        "gameover": "🏁",
    }
    on = [f"<span class='badge'>{icons[k]} {k}</span>" for k in events.active()]
    if not on:
        on.append("<span class='badge'>✅ no events</span>")
    return "<div class='badges'>" + "".join(on) + "</div>"


# ============================================================
# Board Rendering
# ============================================================

def render_board_html(game, reveal=True):
    """
    Emoji grid. With reveal=False only the agent's snapshot is drawn
    and undiscovered cells are blacked out.
    """
    view = game if reveal else game.hidden()
    m = view.map
    dir_emoji = {"north": "⬆️", "east": "➡️", "south": "⬇️", "west": "⬅️"}

    def cell_html(p):
        if not reveal and p not in m.discovered:
            return "⬛"
        top = "🤖" + dir_emoji[game.direction.value] if p == game.location else ""
        if p in m.wumpuses:
            top += "👾"
        elif p in m.pits:
            top += "🕳️"
        elif p in m.treasures:
            top += "💰"
        marks = "".join(
            icon for icon, cells in (("✨", m.glitters), ("🤢", m.stenches), ("💨", m.breezes))
            if p in cells
        )
        return f"{top or '⬜'}<br><span style='font-size:14px'>{marks}</span>"

    rows_html = []
    for y in range(m.size.y, -1, -1):
        cells = []
        for x in range(m.size.x + 1):
            cells.append(
                f"<td style='text-align:center;font-size:24px;width:72px;height:72px;"
                f"border:1px solid rgba(120,120,120,.35); border-radius:12px;"
                f"background: rgba(255,255,255,.03);'>{cell_html(Coordinate(x, y))}</td>"
            )
        rows_html.append("<tr>" + "".join(cells) + "</tr>")

    return "<table style='border-collapse:separate;border-spacing:6px;'>" + "".join(rows_html) + "</table>"


# ============================================================
# Sidebar Controls
# ============================================================

seed = st.sidebar.number_input("Seed", value=7, step=1)
agent_name = st.sidebar.selectbox("Agent", ["bayes", "random"])
delay = st.sidebar.slider("Delay (s)", 0.0, 1.0, 0.15, 0.05)
max_steps = st.sidebar.slider("Max steps", 1, 2000, 300, 1)

view_mode = st.sidebar.selectbox("Board view", ["Reality (debug)", "Agent view (hidden)"])
reveal = (view_mode == "Reality (debug)")


# ============================================================
# Session State
# ============================================================

def new_agent(name, seed):
    return BayesAgent() if name == "bayes" else RandomAgent(seed=seed + 1)


def reset_episode():
    st.session_state.game = WumpusGame.new_random(seed=int(seed))
    st.session_state.agent = new_agent(agent_name, int(seed))
    st.session_state.log = []
    st.session_state.running = False


if "game" not in st.session_state:
    reset_episode()
    st.session_state.params = (seed, agent_name)

params_now = (seed, agent_name)
if st.session_state.params != params_now:
    st.session_state.params = params_now
    reset_episode()
    st.rerun()


def agent_step():
    game = st.session_state.game
    if not game.is_terminal():
        action = st.session_state.agent.run(game.hidden())
        game.step(action)
        st.session_state.log.append(log_step(game, action))


# ============================================================
# Control Buttons
# ============================================================

colA, colB, colC = st.columns(3)

if colA.button("Reset"):
    reset_episode()
    st.rerun()

if colB.button("Step"):
    agent_step()
    st.rerun()

with colC:
    run_col, stop_col = st.columns(2)
    if run_col.button("Play"):
        st.session_state.running = True
        st.rerun()
    if stop_col.button("Pause"):
        st.session_state.running = False
        st.rerun()


# ============================================================
# Automatic Runner
# ============================================================

game = st.session_state.game
if st.session_state.running:
    if (not game.is_terminal()) and (game.steps < max_steps):
        agent_step()
        time.sleep(delay)
        st.rerun()
    else:
        st.session_state.running = False
        st.rerun()


# ============================================================
# Layout: Game (Left) / Telemetry (Right)
# ============================================================

game = st.session_state.game
left, right = st.columns([1.15, 1])

with left:
    st.markdown(render_hud(game), unsafe_allow_html=True)
    st.markdown(event_badges(game.events), unsafe_allow_html=True)
    st.markdown(render_board_html(game, reveal=reveal), unsafe_allow_html=True)

    if game.is_terminal():
        if game.events.wumpus:
            st.error("Episode ended: walked into the wumpus.")
        else:
            st.success("Episode ended: all treasures recovered.")
    elif game.steps >= max_steps:
        st.warning("Episode stopped: reached Max steps.")

    with st.expander("Minimap"):
        st.code(render_minimap(game.map, game.location, game.direction, reveal))

with right:
    st.subheader("Telemetry")
    log_df = to_frame(st.session_state.log)

    tab1, tab2, tab3, tab4 = st.tabs(["Recent", "Charts", "Beliefs", "Export"])

    with tab1:
        if not log_df.empty:
            st.write(summarize(log_df))
            st.dataframe(log_df.tail(20), use_container_width=True)
        else:
            st.info("No log yet. Click Step or Play to generate data.")

    with tab2:
        if not log_df.empty:
            fig1 = plt.figure()
            plt.plot(log_df["step"], log_df["score"])
            plt.xlabel("Step")
            plt.ylabel("Score")
            st.pyplot(fig1)

            fig2 = plt.figure()
            plt.plot(log_df["step"], log_df["discovered"])
            plt.xlabel("Step")
            plt.ylabel("Discovered cells")
            st.pyplot(fig2)
        else:
            st.info("No data to chart yet.")

    with tab3:
        estimates = getattr(st.session_state.agent, "last_estimates", {})
        if estimates:
            st.dataframe(posterior_frame(estimates), use_container_width=True)
        else:
            st.info("No posterior estimate yet.")

    with tab4:
        if not log_df.empty:
            csv = log_df.to_csv(index=False).encode("utf-8")
            st.download_button("Download log CSV", csv, "wumpus_log.csv", "text/csv")
        else:
            st.info("Nothing to export yet.")
