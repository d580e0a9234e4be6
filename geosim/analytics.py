import logging
import pandas as pd
import numpy as np
from .diplomacy import count_active_wars
from .state import WorldState
from .utils import format_compact_number

logger = logging.getLogger(__name__)

def world_frame(world: WorldState) -> pd.DataFrame:
    """Snapshot of every ledger, one row per country (GDP in reporting millions)."""
    rows = []
    for cid in world.ids:
        c = world.countries[cid]
        rows.append({
            "id": cid, "name": c.name, "persona": c.persona_key,
            "population": c.population, "gdp_m": c.reporting_gdp,
            "treasury": c.treasury, "stability": c.stability,
            "military_power": c.military_power, "readiness": c.military.readiness,
            "wars": count_active_wars(world, cid),
            "annexed_by": c.annexed_by, "is_player": c.is_player,
        })
    return pd.DataFrame(rows).set_index("id")

def leaderboard(world: WorldState, top: int = 10) -> pd.DataFrame:
    """Rank live countries by (power + population + GDP) / 100; the player is always listed."""
    df = world_frame(world)
    df = df[df["annexed_by"].isna()].copy()
    df["score"] = (df["military_power"] + df["population"] + df["gdp_m"]) / 100.0
    df = df.sort_values("score", ascending=False, kind="mergesort")
    df["rank"] = np.arange(1, len(df) + 1)

    board = df.head(top)
    pid = world.player_id
    if pid is not None and pid in df.index and pid not in board.index:
        board = pd.concat([board, df.loc[[pid]]])
    board = board.copy()
    board["score_label"] = board["score"].map(format_compact_number)
    return board[["rank", "name", "persona", "score", "score_label", "military_power", "population", "gdp_m", "is_player"]]

def war_summary(world: WorldState) -> pd.DataFrame:
    rows = []
    for (a, b), rec in sorted(world.wars.items()):
        la = rec.last_day_losses.get(a); lb = rec.last_day_losses.get(b)
        rows.append({
            "a": a, "b": b, "started_on": rec.started_on,
            "days": world.sim_day - rec.started_on,
            "control_a": rec.control_share,
            "power_a": world.countries[a].military_power,
            "power_b": world.countries[b].military_power,
            "infantry_lost_a": la.infantry if la else 0.0,
            "infantry_lost_b": lb.infantry if lb else 0.0,
        })
    return pd.DataFrame(rows, columns=["a", "b", "started_on", "days", "control_a", "power_a", "power_b",
                                       "infantry_lost_a", "infantry_lost_b"])

def annualised_growth(df: pd.DataFrame, column: str = "gdp", days_in_year: int = 365) -> pd.Series:
    """Compound annual growth of `column` per actor between the first and last logged day."""
    if df.empty: return pd.Series(dtype=float)
    piv = df.pivot_table(index="t", columns="actor", values=column, aggfunc="mean").sort_index()
    span = float(piv.index.max() - piv.index.min())
    if span <= 0: return pd.Series(0.0, index=piv.columns)
    first, last = piv.iloc[0], piv.iloc[-1]
    ratio = (last / first.replace(0.0, np.nan)).clip(lower=0.0)
    return (ratio ** (days_in_year / span) - 1.0).fillna(0.0)

def summarize(df: pd.DataFrame, war_df: pd.DataFrame, name: str) -> dict:
    if df.empty: return {}
    end = int(df["t"].max())
    final = df[df["t"] == end]
    out = {
        "name": name, "end_t": end,
        "countries": int(final["actor"].nunique()),
        "annexed": int(final["annexed"].sum()),
        "wars_fought": int(war_df.groupby(["a", "b"]).ngroups) if not war_df.empty else 0,
        "final_world_gdp_m": float(final["gdp"].sum() / 1e6),
        "mean_stability": float(final["stability"].mean()),
    }
    logger.info("%s: day %d, %d annexed, %d wars fought, world GDP %s M",
                name, end, out["annexed"], out["wars_fought"],
                format_compact_number(out["final_world_gdp_m"]))
    return out
