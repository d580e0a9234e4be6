# geosim/plotting.py
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec
import seaborn as sns
import numpy as np
import pandas as pd

# --- Persona Palette ---
PERSONA_COLORS = {
    "balanced": "#2C3E50", # Dark Slate
    "growth":   "#27AE60", # Green
    "hawk":     "#C0392B", # Deep Red
    "volatile": "#8E44AD", # Purple
}

def get_color(persona):
    return PERSONA_COLORS.get(persona, "#95A5A6")

def set_publication_style():
    """Clean plotting style with large fonts for small-figure insertion."""
    sns.set_theme(style="white", context="talk")
    plt.rcParams.update({
        "font.family": "sans-serif",
        "axes.spines.top": False,
        "axes.spines.right": False,
        "axes.grid": True,
        "grid.color": "#E0E0E0",
        "grid.linestyle": "--",
        "grid.alpha": 0.5,
        "figure.titlesize": 24,
        "axes.titlesize": 18,
        "axes.labelsize": 15,
        "xtick.labelsize": 13,
        "ytick.labelsize": 13,
        "legend.fontsize": 13,
        "legend.frameon": False,
        "figure.dpi": 120
    })

def _top_actors(df: pd.DataFrame, column: str, n: int):
    end = df["t"].max()
    return df[df["t"] == end].sort_values(column, ascending=False)["actor"].head(n).tolist()

def plot_world_dashboard(df: pd.DataFrame, title="World Dashboard", highlight: int = 5):
    if df.empty: return None
    set_publication_style()
    personas = df.groupby("actor")["persona"].last()
    leaders = _top_actors(df, "gdp", highlight)

    fig = plt.figure(figsize=(20, 14))
    gs = gridspec.GridSpec(2, 2)

    # 1. GDP (reporting millions)
    ax0 = fig.add_subplot(gs[0, 0])
    piv = df.pivot_table(index="t", columns="actor", values="gdp") / 1e6
    for a in piv.columns:
        if a in leaders: continue
        ax0.plot(piv.index, piv[a], color="#BDC3C7", alpha=0.4, linewidth=1.2, zorder=1)
    for a in leaders:
        ax0.plot(piv.index, piv[a], color=get_color(personas[a]), linewidth=3.0, label=a, zorder=10)
    ax0.set_yscale("log")
    ax0.set_title("GDP (millions)", fontweight='bold', loc='left')
    ax0.legend(loc='upper left', ncol=2)

    # 2. Military power
    ax1 = fig.add_subplot(gs[0, 1])
    piv_p = df.pivot_table(index="t", columns="actor", values="military_power")
    for a in leaders:
        ax1.plot(piv_p.index, piv_p[a], color=get_color(personas[a]), linewidth=3.0, label=a)
    ax1.set_title("Military Power", fontweight='bold', loc='left')

    # 3. Stability by persona
    ax2 = fig.add_subplot(gs[1, 0])
    live = df[df["annexed"] == 0]
    stab = live.groupby(["t", "persona"])["stability"].mean().unstack()
    for p in stab.columns:
        ax2.plot(stab.index, stab[p], color=get_color(p), linewidth=2.5, label=p)
    ax2.set_ylim(0, 1.05)
    ax2.set_title("Mean Stability by Persona", fontweight='bold', loc='left')
    ax2.legend(loc='lower left')

    # 4. Conflict load
    ax3 = fig.add_subplot(gs[1, 1])
    wars = df.groupby("t")["wars"].sum() / 2
    annexed = df.groupby("t")["annexed"].sum()
    ax3.fill_between(wars.index, 0, wars, color="#E74C3C", alpha=0.2)
    ax3.plot(wars.index, wars, color="#C0392B", linewidth=2.5, label="Active wars")
    ax3.step(annexed.index, annexed, color="#34495E", linestyle="--", linewidth=2.5, where="post", label="Annexed")
    ax3.set_title("Conflict Load", fontweight='bold', loc='left')
    ax3.legend(loc='upper left')

    fig.suptitle(title, fontsize=26, fontweight='bold', y=1.02)
    plt.tight_layout()
    return fig

def plot_war_fronts(war_df: pd.DataFrame, title="War Fronts"):
    """Control share over time for each war pair, plus a heatmap of daily losses."""
    if war_df is None or war_df.empty: return None
    set_publication_style()
    df = war_df.copy()
    df["pair"] = df["a"] + " vs " + df["b"]

    fig, (ax0, ax1) = plt.subplots(1, 2, figsize=(20, 8), gridspec_kw={"width_ratios": [3, 2]})

    pal = sns.color_palette("tab10", df["pair"].nunique())
    for color, (pair, g) in zip(pal, df.groupby("pair")):
        ax0.plot(g["t"], g["control_share"], color=color, linewidth=2.5, label=pair)
    ax0.axhline(50, color="#7F8C8D", linestyle=":", linewidth=2)
    ax0.set_ylim(-2, 102)
    ax0.set_ylabel("Control held by first side (%)")
    ax0.set_title("Control Share", fontweight='bold', loc='left')
    if df["pair"].nunique() <= 10: ax0.legend(loc='best', fontsize=11)

    df["losses"] = df[["infantry_lost_a", "infantry_lost_b"]].sum(axis=1)
    heat = df.pivot_table(index="pair", columns="t", values="losses", aggfunc="sum").fillna(0.0)
    sns.heatmap(np.log1p(heat), cmap="Reds", ax=ax1, cbar_kws={'label': 'log(1 + troops killed)'})
    ax1.set_title("Daily Infantry Losses", fontweight='bold', loc='left')

    fig.suptitle(title, fontsize=24, fontweight='bold', y=1.03)
    plt.tight_layout()
    return fig
