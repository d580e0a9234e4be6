from copy import deepcopy
from typing import Dict, Optional
from .config import Config
from .economy import split_labour, refresh_power, sanitize_country
from .engine import GeoSimGame

# --- Default World ---
# Population in persons, GDP in millions (2024 rough figures, IMF WEO / UN WPP).
# Neighbours are land borders or short straits; listed on one side is enough.
DEFAULT_WORLD: Dict[str, dict] = {
    "USA": {"name": "United States",  "population": 335_000_000,   "GDP": 27_360_000, "neighbors": ["CAN", "MEX"]},
    "CAN": {"name": "Canada",         "population": 40_000_000,    "GDP": 2_140_000,  "neighbors": ["USA"]},
    "MEX": {"name": "Mexico",         "population": 129_000_000,   "GDP": 1_790_000,  "neighbors": ["USA"]},
    "BRA": {"name": "Brazil",         "population": 216_000_000,   "GDP": 2_170_000,  "neighbors": ["ARG"]},
    "ARG": {"name": "Argentina",      "population": 46_000_000,    "GDP": 640_000,    "neighbors": ["BRA"]},
    "GBR": {"name": "United Kingdom", "population": 68_000_000,    "GDP": 3_340_000,  "neighbors": ["FRA"]},
    "FRA": {"name": "France",         "population": 68_000_000,    "GDP": 3_030_000,  "neighbors": ["DEU", "GBR"]},
    "DEU": {"name": "Germany",        "population": 84_000_000,    "GDP": 4_460_000,  "neighbors": ["FRA", "POL"]},
    "POL": {"name": "Poland",         "population": 37_000_000,    "GDP": 810_000,    "neighbors": ["DEU", "UKR"]},
    "UKR": {"name": "Ukraine",        "population": 37_000_000,    "GDP": 180_000,    "neighbors": ["POL", "RUS"]},
    "RUS": {"name": "Russia",         "population": 144_000_000,   "GDP": 2_020_000,  "neighbors": ["UKR", "CHN", "KAZ"]},
    "KAZ": {"name": "Kazakhstan",     "population": 20_000_000,    "GDP": 260_000,    "neighbors": ["RUS", "CHN"]},
    "TUR": {"name": "Turkey",         "population": 85_000_000,    "GDP": 1_110_000,  "neighbors": ["IRN"]},
    "IRN": {"name": "Iran",           "population": 89_000_000,    "GDP": 400_000,    "neighbors": ["TUR", "PAK"]},
    "PAK": {"name": "Pakistan",       "population": 240_000_000,   "GDP": 340_000,    "neighbors": ["IRN", "IND", "CHN"]},
    "IND": {"name": "India",          "population": 1_430_000_000, "GDP": 3_570_000,  "neighbors": ["PAK", "CHN"]},
    "CHN": {"name": "China",          "population": 1_410_000_000, "GDP": 17_790_000, "neighbors": ["RUS", "KAZ", "PAK", "IND", "PRK"]},
    "PRK": {"name": "North Korea",    "population": 26_000_000,    "GDP": 28_000,     "neighbors": ["CHN", "KOR"]},
    "KOR": {"name": "South Korea",    "population": 52_000_000,    "GDP": 1_710_000,  "neighbors": ["PRK", "JPN"]},
    "JPN": {"name": "Japan",          "population": 124_000_000,   "GDP": 4_210_000,  "neighbors": ["KOR"]},
}

def default_seed_data() -> Dict[str, dict]:
    return deepcopy(DEFAULT_WORLD)

# --- Duel ---
def duel_seeds(ratio: float = 3.0, population: float = 1_000_000, gdp_per_capita: float = 40_000.0) -> Dict[str, dict]:
    """Two bordering countries with equal output per head; the first is `ratio` times larger."""
    big = population * ratio
    return {
        "ALPHA": {"name": "Alpha", "population": big,
                  "GDP": big * gdp_per_capita / 1e6, "neighbors": ["BETA"]},
        "BETA":  {"name": "Beta", "population": population,
                  "GDP": population * gdp_per_capita / 1e6, "neighbors": ["ALPHA"]},
    }

def equalize_posture(game: GeoSimGame, draft: float = 0.03) -> None:
    """Same draft and minimal equipment everywhere, so raw power tracks population."""
    cfg = game.cfg
    for c in game.countries.values():
        c.military.draft_pct = draft
        c.military.equipment_power = cfg.military.init_equip_floor
        split_labour(c, cfg)
        refresh_power(c, cfg)
        sanitize_country(c, cfg)

def make_duel_world(ratio: float = 3.0, cfg: Optional[Config] = None, draft: float = 0.03,
                    player_id: Optional[str] = None) -> GeoSimGame:
    cfg = deepcopy(cfg) if cfg is not None else Config()
    cfg.seed_rivalries = False
    game = GeoSimGame(cfg, duel_seeds(ratio), player_id=player_id)
    equalize_posture(game, draft)
    return game

# --- Config Variants ---
def make_config(label: str, base_cfg: Optional[Config] = None) -> Config:
    cfg = deepcopy(base_cfg) if base_cfg is not None else Config()
    if label == "baseline":
        return cfg
    if label == "pax":
        cfg.ai.global_war_cap = 0
        return cfg
    if label == "powder_keg":
        cfg.ai.hostility_cutoff = 45
        cfg.ai.war_delay_days = 3
        cfg.ai.max_wars_per_ai = 2
        cfg.diplomacy.rivals_per_country = 4
        return cfg
    if label == "weekly_economy":
        cfg.econ_step_days = 7
        return cfg
    raise ValueError(f"Unknown scenario: {label}")

SCENARIOS = ("baseline", "pax", "powder_keg", "weekly_economy")
