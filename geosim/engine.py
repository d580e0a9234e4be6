# geosim/engine.py
from __future__ import annotations
import dataclasses as dc
import logging
from typing import Any, List, Mapping, Optional
import numpy as np
import pandas as pd
import networkx as nx

from .config import Config
from .constants import REFRESH_DAY
from .diplomacy import init_relations, seed_rivalries, recount_wars, count_active_wars, perform_action
from .economy import advance, split_labour, refresh_power, sanitize_country, set_player_policy
from .events import RefreshCallback
from .personas import persona_for
from .policies import step_ai_economy, step_ai_diplomacy
from .seed import CountrySeed, SeedDataError, load_seed_data
from .state import Country, Military, DayLog, WarLog, WorldState
from .war import step_war

logger = logging.getLogger(__name__)

class GeoSimGame:
    def __init__(self, cfg: Config, seeds: Any, player_id: Optional[str] = None):
        self.cfg = cfg
        seed_map: Mapping[str, CountrySeed] = load_seed_data(seeds)
        pid = player_id if player_id is not None else cfg.player_id
        if pid is not None and pid not in seed_map:
            raise SeedDataError(f"player country {pid!r} is not in the seed data")

        countries = {cid: self._build_country(cid, s, cid == pid) for cid, s in seed_map.items()}

        geo = nx.Graph(); geo.add_nodes_from(seed_map)
        for cid, s in seed_map.items():
            geo.add_edges_from((cid, n) for n in s.neighbors if n in seed_map)

        self.world = WorldState(
            countries=countries, ids=list(seed_map), geo=geo,
            rng=np.random.default_rng(cfg.seed),
            sim_day=cfg.start_day, player_id=pid,
        )
        init_relations(self.world, cfg)
        if cfg.seed_rivalries:
            seed_rivalries(self.world, cfg)
        recount_wars(self.world)

        self.logs: List[DayLog] = []
        self.war_logs: List[WarLog] = []
        logger.info("world built: %d countries, %d borders, player=%s",
                    len(countries), geo.number_of_edges(), pid)

    def _build_country(self, cid: str, s: CountrySeed, is_player: bool) -> Country:
        r, m = self.cfg.economy, self.cfg.military
        persona = persona_for(cid); P = persona.params

        pop = s.population or r.default_population
        gdp = (s.gdp or r.default_gdp) * r.gdp_unit

        # Player sliders keep tax + consumption + investment = 1
        cons, inv = (P.cons * (1 - P.tax), P.inv * (1 - P.tax)) if is_player else (P.cons, P.inv)
        c = Country(
            id=cid, name=s.name, population=pop, productivity=1.0,
            stability=r.init_stability, tax_rate=P.tax,
            consumption_share=cons, investment_share=inv,
            persona=persona, is_player=is_player,
            military=Military(
                draft_pct=P.draft,
                equipment_power=max(m.init_equip_floor, np.sqrt(gdp) / m.init_equip_divisor),
                readiness=m.init_readiness,
                budget_pct=P.defense,
                upkeep_per_troop_per_day=m.upkeep_per_troop_per_day,
                upkeep_per_equip_per_year=m.upkeep_per_equip_per_year,
                procurement_efficiency=m.procurement_efficiency,
            ),
        )
        split_labour(c, self.cfg)
        c.productivity = max(1.0, gdp / max(1.0, c.labour_force))
        c.gdp = c.labour_force * c.productivity
        c.treasury = c.gdp * r.init_treasury_frac
        refresh_power(c, self.cfg)
        sanitize_country(c, self.cfg)
        return c

    # --- Accessors ---

    @property
    def countries(self):
        return self.world.countries

    @property
    def sim_day(self) -> int:
        return self.world.sim_day

    @property
    def player(self) -> Optional[Country]:
        pid = self.world.player_id
        return self.world.countries.get(pid) if pid is not None else None

    def subscribe(self, callback: RefreshCallback) -> None:
        self.world.refresh.subscribe(callback)

    # --- Daily Step ---

    def _step_player_economy(self, days: int) -> None:
        c = self.player
        if c is None or c.is_annexed:
            return
        c.econ_acc += days
        if c.econ_acc >= self.cfg.econ_step_days:
            step, c.econ_acc = c.econ_acc, 0
            advance(c, step, self.cfg)

    def _record(self, war_logs: List[WarLog]) -> None:
        w = self.world
        for cid in w.ids:
            c = w.countries[cid]; mil = c.military
            self.logs.append(DayLog(
                t=w.sim_day, actor=cid, persona=c.persona_key,
                population=c.population, gdp=c.gdp, treasury=c.treasury, stability=c.stability,
                tax_rate=c.tax_rate, consumption_share=c.consumption_share, investment_share=c.investment_share,
                labour_force=c.labour_force, productivity=c.productivity,
                troops=mil.troops, equipment_power=mil.equipment_power, readiness=mil.readiness,
                budget_pct=mil.budget_pct, draft_pct=mil.draft_pct,
                military_power=mil.power,
                coverage=c.last_report.coverage,
                wars=count_active_wars(w, cid),
                annexed=int(c.is_annexed),
            ))
        self.war_logs.extend(war_logs)

    def step(self) -> None:
        """One simulated day: economies, AI diplomacy slice, wars, refresh."""
        w, cfg = self.world, self.cfg
        w.sim_day += 1

        step_ai_economy(w, cfg, 1)
        self._step_player_economy(1)
        step_ai_diplomacy(w, cfg)
        war_logs = step_war(w, cfg, 1)

        if cfg.record_logs:
            self._record(war_logs)
        w.refresh.schedule(REFRESH_DAY)
        w.refresh.flush(w)

    def step_world(self, days: int = 1) -> None:
        for _ in range(max(0, int(days))):
            self.step()

    def run(self, days: int) -> pd.DataFrame:
        self.logs.clear()
        self.war_logs.clear()
        self.step_world(days)
        return pd.DataFrame([dc.asdict(l) for l in self.logs])

    def war_frame(self) -> pd.DataFrame:
        return pd.DataFrame([dc.asdict(l) for l in self.war_logs],
                            columns=[f.name for f in dc.fields(WarLog)])

    # --- Player Input ---

    def act(self, action: str, target: str, actor: Optional[str] = None) -> bool:
        actor = actor if actor is not None else self.world.player_id
        if actor is None:
            return False
        ok = perform_action(self.world, self.cfg, action, actor, target)
        if ok:
            self.world.refresh.flush(self.world)
        return ok

    def set_policy(self, **sliders) -> bool:
        pid = self.world.player_id
        if pid is None:
            return False
        ok = set_player_policy(self.world, self.cfg, pid, **sliders)
        if ok:
            self.world.refresh.flush(self.world)
        return ok
