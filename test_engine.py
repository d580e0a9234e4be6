"""
Tick orchestrator and its collaborators: refresh sink, seed data, clock,
analytics and the diagnostic plots.
"""

import datetime as dt
import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import pytest

from geosim.analytics import world_frame, leaderboard, war_summary, annualised_growth, summarize
from geosim.clock import SimClock, sim_day_from_epoch_ms
from geosim.config import Config
from geosim.constants import DECLARE_WAR, IMPROVE_RELATIONS, REFRESH_DAY, REFRESH_WAR, REFRESH_ANNEX
from geosim.diplomacy import start_war
from geosim.engine import GeoSimGame
from geosim.plotting import plot_world_dashboard, plot_war_fronts
from geosim.scenarios import default_seed_data, make_duel_world
from geosim.seed import SeedDataError, load_seed_data
from geosim.utils import format_compact_number

def test_step_world_advances_days_and_refreshes_once_per_day():
    game = GeoSimGame(Config(), default_seed_data(), player_id="POL")
    calls = []
    game.subscribe(lambda world, reasons: calls.append((world.sim_day, reasons)))
    day0 = game.sim_day

    game.step_world(3)

    assert game.sim_day == day0 + 3
    assert [d for d, _ in calls] == [day0 + 1, day0 + 2, day0 + 3]
    assert all(REFRESH_DAY in r for _, r in calls)

def test_player_economy_follows_sliders_not_personas():
    game = GeoSimGame(Config(), default_seed_data(), player_id="POL")
    game.set_policy(tax=0.33)
    p = game.player
    gdp0, treasury0 = p.gdp, p.treasury

    game.step_world(30)

    assert p.tax_rate == pytest.approx(0.33)
    assert p.gdp != gdp0 and p.treasury != treasury0
    assert p.tax_rate + p.consumption_share + p.investment_share == pytest.approx(1.0)

def test_war_changing_action_signals_refresh():
    game = GeoSimGame(Config(seed_rivalries=False), default_seed_data(), player_id="POL")
    game.player.treasury = 1e12
    seen = []
    game.subscribe(lambda world, reasons: seen.append(reasons))

    assert game.act(DECLARE_WAR, "UKR")
    assert seen and REFRESH_WAR in seen[-1]
    assert not game.act(IMPROVE_RELATIONS, "UKR")   # rejected: no refresh
    assert len(seen) == 1

def test_annexation_signals_refresh():
    game = make_duel_world(ratio=3.0)
    seen = set()
    game.subscribe(lambda world, reasons: seen.update(reasons))
    start_war(game.world, "ALPHA", "BETA", game.cfg)
    game.step_world(200)
    assert REFRESH_ANNEX in seen

def test_run_returns_one_row_per_country_per_day():
    game = GeoSimGame(Config(), default_seed_data())
    df = game.run(15)
    assert len(df) == 15 * len(game.world.ids)
    assert {"t", "actor", "persona", "gdp", "military_power", "wars", "annexed"} <= set(df.columns)
    assert df["t"].nunique() == 15

def test_seed_data_validation(caplog):
    with pytest.raises(SeedDataError):
        load_seed_data({"A": {"name": "A", "population": -5, "GDP": 10}})
    with pytest.raises(SeedDataError):
        load_seed_data({"A": {"name": "A", "population": 5}})
    with pytest.raises(SeedDataError):
        load_seed_data({"A": {"name": "A", "population": float("inf"), "GDP": 1}})
    with pytest.raises(SeedDataError):
        load_seed_data({})
    with pytest.raises(SeedDataError):
        GeoSimGame(Config(), default_seed_data(), player_id="ATLANTIS")

    with caplog.at_level(logging.WARNING, logger="geosim.seed"):
        seeds = load_seed_data({"A": {"population": 10, "GDP": 1, "neighbors": ["B", "ZZZ"]},
                                "B": {"population": 10, "GDP": 1}})
    assert "ZZZ" in caplog.text
    game = GeoSimGame(Config(), seeds)
    assert game.world.neighbors_of("A") == ["B"]
    assert game.world.neighbors_of("B") == ["A"]

def test_seed_data_from_json(tmp_path):
    path = tmp_path / "world.json"
    path.write_text('{"X": {"name": "Xland", "population": 1000000, "GDP": 50000, "neighbors": []}}')
    seeds = load_seed_data(path)
    assert seeds["X"].name == "Xland" and seeds["X"].gdp == 50000
    with pytest.raises(TypeError):
        seeds["Y"] = seeds["X"]

def test_clock_steps_whole_days_only():
    stepped = []
    clock = SimClock(stepped.append, speed=1, start_day=20089)
    assert clock.date == dt.date(2025, 1, 1)
    assert sim_day_from_epoch_ms(1735689600000) == 20089

    assert clock.tick(0.5) == 0
    assert clock.tick(0.6) == 1
    clock.set_speed(10)
    assert clock.tick(1.0) == 10
    clock.pause()
    assert clock.tick(100.0) == 0
    assert stepped == [1, 10]
    assert clock.day == 20089 + 11

def test_clock_drives_game():
    game = GeoSimGame(Config(), default_seed_data())
    clock = SimClock(game.step_world, speed=3, start_day=game.sim_day)
    clock.tick(2.0)
    assert game.sim_day == clock.day == Config().start_day + 6

def test_leaderboard_always_lists_player():
    game = GeoSimGame(Config(), default_seed_data(), player_id="PRK")
    board = leaderboard(game.world, top=3)
    assert "PRK" in board.index
    assert len(board) == 4
    assert board["score"].iloc[:3].is_monotonic_decreasing
    row = world_frame(game.world).loc["USA"]
    expected = (row["military_power"] + row["population"] + row["gdp_m"]) / 100
    assert board.loc["USA", "score"] == pytest.approx(expected)

def test_format_compact_number():
    assert format_compact_number(999) == "999"
    assert format_compact_number(1500) == "1.5K"
    assert format_compact_number(2_000_000) == "2M"
    assert format_compact_number(-3_400_000_000) == "-3.4B"
    assert format_compact_number(1.2e13) == "12T"
    assert format_compact_number("n/a") == "—"
    assert format_compact_number(float("nan")) == "—"

def test_annualised_growth():
    df = pd.DataFrame({"t": [0, 0, 365, 365], "actor": ["A", "B", "A", "B"], "gdp": [100.0, 50.0, 110.0, 50.0]})
    g = annualised_growth(df)
    assert g["A"] == pytest.approx(0.10)
    assert g["B"] == pytest.approx(0.0)

def test_war_summary_and_plots():
    game = make_duel_world(ratio=2.0)
    start_war(game.world, "ALPHA", "BETA", game.cfg)
    df = game.run(20)
    summary = war_summary(game.world)
    assert list(summary[["a", "b"]].iloc[0]) == ["ALPHA", "BETA"]
    assert summary["control_a"].iloc[0] > 50

    fig = plot_world_dashboard(df)
    assert fig is not None
    plt.close(fig)
    fig = plot_war_fronts(game.war_frame())
    assert fig is not None
    plt.close(fig)
    assert plot_war_fronts(pd.DataFrame()) is None

def test_summarize_counts_annexations_and_wars():
    game = make_duel_world(ratio=3.0)
    start_war(game.world, "ALPHA", "BETA", game.cfg)
    df = game.run(200)
    stats = summarize(df, game.war_frame(), "duel")
    assert stats["countries"] == 2
    assert stats["annexed"] == 1
    assert stats["wars_fought"] == 1
    assert summarize(pd.DataFrame(), pd.DataFrame(), "empty") == {}
