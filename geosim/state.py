# geosim/state.py
from __future__ import annotations
from dataclasses import dataclass, field as dc_field, replace
from typing import Dict, List, Optional, Tuple
import numpy as np
import networkx as nx

from .personas import Persona
from .events import RefreshSink

@dataclass
class Military:
    draft_pct: float = 0.03          # Share of the workforce under arms, [0, 0.30]
    equipment_power: float = 50.0
    readiness: float = 0.70
    budget_pct: float = 0.08         # Share of revenue routed to defense
    upkeep_per_troop_per_day: float = 50.0
    upkeep_per_equip_per_year: float = 100_000.0
    procurement_efficiency: float = 1e-7
    troops: float = 0.0              # Derived by the labour split, reduced by casualties
    power: float = 0.0               # troops * strength + equipment

    def clone(self) -> 'Military':
        return replace(self)

@dataclass
class EconReport:
    income_day: float = 0.0
    coverage: float = 1.0
    net_day: float = 0.0
    upkeep_paid: float = 0.0
    procurement_spend: float = 0.0

@dataclass
class Country:
    # --- Non-Default Arguments ---
    id: str
    name: str
    population: float
    productivity: float

    # --- Arguments with Defaults ---
    gdp: float = 0.0
    treasury: float = 0.0
    stability: float = 0.85
    tax_rate: float = 0.28
    consumption_share: float = 0.62
    investment_share: float = 0.38
    labour_force: float = 0.0        # Civilian workers after the draft

    military: Military = dc_field(default_factory=Military)
    persona: Persona = Persona.BALANCED
    is_player: bool = False

    annexed_by: Optional[str] = None
    war_target: Optional[str] = None  # Pending denounce plan target (attacker side)
    econ_acc: int = 0
    last_report: EconReport = dc_field(default_factory=EconReport)

    @property
    def persona_key(self) -> str:
        return self.persona.key

    @property
    def military_power(self) -> float:
        return self.military.power

    @property
    def reporting_gdp(self) -> float:
        return self.gdp / 1e6

    @property
    def is_annexed(self) -> bool:
        return self.annexed_by is not None

    def clone(self) -> 'Country':
        new_c = replace(self, military=self.military.clone(), last_report=replace(self.last_report))
        return new_c

@dataclass
class Treaties:
    nap: bool = False
    alliance: bool = False

    def any(self) -> bool:
        return self.nap or self.alliance

@dataclass
class DenouncePlan:
    on_day: int
    war_eligible_on: int
    target: str
    reason: str = "Hostility"

@dataclass
class Relation:
    score: int = 50
    treaties: Treaties = dc_field(default_factory=Treaties)
    at_war: bool = False
    trade: int = 1
    # Only the prospective attacker's side holds a plan.
    denounce: Optional[DenouncePlan] = None

@dataclass
class SideLosses:
    infantry: float = 0.0    # Troops killed
    equipment: float = 0.0   # Equipment power destroyed

@dataclass
class WarRecord:
    a: str                   # a < b; control_share is held by side a
    b: str
    started_on: int
    control_share: float = 50.0
    last_day_losses: Dict[str, SideLosses] = dc_field(default_factory=dict)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.a, self.b)

@dataclass
class WorldState:
    countries: Dict[str, Country]
    ids: List[str]
    geo: nx.Graph
    rng: np.random.Generator
    relations: Dict[str, Dict[str, Relation]] = dc_field(default_factory=dict)
    wars: Dict[Tuple[str, str], WarRecord] = dc_field(default_factory=dict)
    war_count: int = 0
    sim_day: int = 0
    diplo_cursor: int = 0
    player_id: Optional[str] = None
    refresh: RefreshSink = dc_field(default_factory=RefreshSink)

    def neighbors_of(self, cid: str) -> List[str]:
        if cid not in self.geo: return []
        return list(self.geo.neighbors(cid))

    def active_ids(self) -> List[str]:
        return [cid for cid in self.ids if not self.countries[cid].is_annexed]

@dataclass
class DayLog:
    t: int
    actor: str
    persona: str
    population: float; gdp: float; treasury: float; stability: float
    tax_rate: float; consumption_share: float; investment_share: float
    labour_force: float; productivity: float
    troops: float; equipment_power: float; readiness: float
    budget_pct: float; draft_pct: float
    military_power: float
    coverage: float
    wars: int
    annexed: int

@dataclass
class WarLog:
    t: int
    a: str
    b: str
    control_share: float
    power_a: float
    power_b: float
    infantry_lost_a: float = 0.0
    infantry_lost_b: float = 0.0
    equipment_lost_a: float = 0.0
    equipment_lost_b: float = 0.0
