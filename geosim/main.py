# geosim/main.py
import logging
from pathlib import Path
import matplotlib.pyplot as plt

from geosim.analytics import leaderboard, war_summary, summarize
from geosim.config import Config
from geosim.engine import GeoSimGame
from geosim.plotting import plot_world_dashboard, plot_war_fronts
from geosim.scenarios import default_seed_data, make_config, SCENARIOS

logger = logging.getLogger("geosim")

YEARS = 3
PLAYER = "DEU"
OUT_DIR = Path("figures")

def run_scenario(label: str, days: int, base_cfg: Config):
    cfg = make_config(label, base_cfg)
    game = GeoSimGame(cfg, default_seed_data(), player_id=PLAYER)
    df = game.run(days)
    war_df = game.war_frame()
    stats = summarize(df, war_df, label)
    return game, df, war_df, stats

def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    OUT_DIR.mkdir(parents=True, exist_ok=True)
    base_cfg = Config(seed=42)
    days = YEARS * base_cfg.economy.days_in_year

    results = {}
    for label in SCENARIOS:
        game, df, war_df, stats = run_scenario(label, days, base_cfg)
        results[label] = stats

        board = leaderboard(game.world, top=10)
        logger.info("%s leaderboard:\n%s", label, board[["rank", "name", "persona", "score_label"]].to_string())
        active = war_summary(game.world)
        if not active.empty:
            logger.info("%s active wars:\n%s", label, active.to_string(index=False))

        fig = plot_world_dashboard(df, title=f"World Dashboard: {label}")
        if fig is not None:
            fig.savefig(OUT_DIR / f"dashboard_{label}.png", bbox_inches="tight")
            plt.close(fig)
        fig = plot_war_fronts(war_df, title=f"War Fronts: {label}")
        if fig is not None:
            fig.savefig(OUT_DIR / f"wars_{label}.png", bbox_inches="tight")
            plt.close(fig)

    for label, stats in results.items():
        logger.info("%-15s annexed=%d wars=%d stability=%.2f",
                    label, stats.get("annexed", 0), stats.get("wars_fought", 0), stats.get("mean_stability", 0.0))

if __name__ == "__main__":
    main()
