# geosim/economy.py
from __future__ import annotations
import logging
import math
from typing import Dict, List, Optional
import numpy as np

from .config import Config, EconomyRates, MilitaryRates
from .constants import REFRESH_ECONOMY
from .state import Country, EconReport, WorldState
from .utils import clip01, clamp, finite_or, safe_ratio

logger = logging.getLogger(__name__)

SHARE_KEYS = ("tax", "consumption", "investment")

def strength_from_productivity(productivity: float, m: MilitaryRates) -> float:
    """Per-troop combat strength, sqrt diminishing returns around a baseline worker."""
    return float(np.clip(np.sqrt(max(productivity, 1.0) / m.strength_baseline), m.strength_min, m.strength_max))

def participation(stability: float, r: EconomyRates) -> float:
    return r.participation_low + (r.participation_high - r.participation_low) * clip01(stability)

def split_labour(c: Country, cfg: Config) -> None:
    workforce = max(0.0, c.population) * participation(c.stability, cfg.economy)
    troops = workforce * c.military.draft_pct
    c.military.troops = troops
    c.labour_force = workforce - troops
    c.gdp = c.labour_force * c.productivity

def refresh_power(c: Country, cfg: Config) -> float:
    spt = strength_from_productivity(c.productivity, cfg.military)
    c.military.power = max(0.0, c.military.troops * spt + c.military.equipment_power)
    return c.military.power

def sanitize_country(c: Country, cfg: Config) -> None:
    r = cfg.economy; mil = c.military
    c.population   = max(0.0, finite_or(c.population, 0.0))
    c.productivity = max(0.0, finite_or(c.productivity, 0.0))
    c.treasury     = finite_or(c.treasury, 0.0)
    c.stability    = clip01(finite_or(c.stability, r.init_stability))
    c.tax_rate          = clip01(finite_or(c.tax_rate, 0.0))
    c.consumption_share = clip01(finite_or(c.consumption_share, 0.0))
    c.investment_share  = clip01(finite_or(c.investment_share, 0.0))

    mil.draft_pct       = clamp(finite_or(mil.draft_pct, 0.0), 0.0, r.draft_max)
    mil.budget_pct      = clip01(finite_or(mil.budget_pct, 0.0))
    mil.readiness       = clip01(finite_or(mil.readiness, 0.0))
    mil.equipment_power = max(0.0, finite_or(mil.equipment_power, 0.0))
    mil.troops          = max(0.0, finite_or(mil.troops, 0.0))
    mil.power           = max(0.0, finite_or(mil.power, 0.0))

    c.labour_force = max(0.0, finite_or(c.labour_force, 0.0))
    c.gdp = c.labour_force * c.productivity

def annual_rates(c: Country, cfg: Config) -> Dict[str, float]:
    """Annualised drift rates implied by the current policy mix."""
    r = cfg.economy
    d = c.military.budget_pct

    stab = ((r.stab_tax_pivot - c.tax_rate)
            + r.stab_cons_weight * (c.consumption_share - r.cons_baseline)
            + r.stab_def_weight * (d - r.def_baseline))
    pop = (c.consumption_share * r.pop_cons_weight - r.pop_decay) + r.pop_stab_weight * (c.stability - r.pop_stab_pivot)

    inv_extra = max(0.0, c.investment_share - r.inv_floor)
    prod = (-r.prod_decay
            + r.prod_inv_weight * math.sqrt(inv_extra)
            - r.prod_underfund_penalty * max(0.0, r.def_baseline - d)
            + r.prod_def_bonus * math.sqrt(max(0.0, d - r.def_baseline)))

    # Stability pinned at a bound stops drifting
    stab_eff = stab
    if (c.stability >= 1.0 and stab > 0) or (c.stability <= 0.0 and stab < 0):
        stab_eff = 0.0
    part = participation(c.stability, r)
    part_rate = safe_ratio((r.participation_high - r.participation_low) * stab_eff, part, 0.0)
    labour = (1 + pop) * (1 + part_rate) - 1
    gdp = (1 + labour) * (1 + prod) - 1

    return {"stability": stab, "population": pop, "labour": labour, "productivity": prod, "gdp": gdp}

def _advance_day(c: Country, cfg: Config) -> EconReport:
    r, m = cfg.economy, cfg.military
    mil = c.military
    f = 1.0 / r.days_in_year

    # 1. Drift
    rates = annual_rates(c, cfg)
    c.stability    = clip01(c.stability + rates["stability"] * f)
    c.population   = max(0.0, c.population * (1 + rates["population"] * f))
    c.productivity = max(0.0, c.productivity * (1 + rates["productivity"] * f))

    # 2. Labour split (GDP from civilian labour only)
    split_labour(c, cfg)

    # 3. Revenue
    income_day = c.gdp * c.tax_rate / r.days_in_year
    c.treasury += income_day
    pool = income_day * mil.budget_pct

    # 4. Military finance: upkeep first, then procurement
    req_upkeep = (mil.upkeep_per_troop_per_day * mil.troops
                  + mil.equipment_power * (mil.upkeep_per_equip_per_year / r.days_in_year))
    upkeep_paid = min(req_upkeep, pool, max(0.0, c.treasury))
    pool -= upkeep_paid; c.treasury -= upkeep_paid

    procurement = min(pool, max(0.0, c.treasury))
    c.treasury -= procurement

    mil.equipment_power = max(0.0, mil.equipment_power * (1 - m.base_equip_decay * f))
    coverage = safe_ratio(upkeep_paid, req_upkeep, 1.0)
    if coverage < 1.0:
        shortfall = 1.0 - coverage
        mil.equipment_power *= (1 - m.shortfall_equip_decay * shortfall * f)
        mil.readiness = max(0.0, mil.readiness - m.readiness_loss_per_day * shortfall)
    else:
        mil.readiness = min(1.0, mil.readiness + m.readiness_gain_per_day)

    mil.equipment_power += procurement * mil.procurement_efficiency
    refresh_power(c, cfg)
    sanitize_country(c, cfg)

    return EconReport(
        income_day=income_day, coverage=coverage,
        net_day=income_day - upkeep_paid - procurement,
        upkeep_paid=upkeep_paid, procurement_spend=procurement,
    )

def advance(c: Country, days: int, cfg: Config) -> EconReport:
    """Advance one ledger by whole days, compounding day by day.

    `advance(c, 10)` and ten `advance(c, 1)` calls produce the same ledger.
    """
    days = int(days)
    if days <= 0:
        return c.last_report
    upkeep = procurement = 0.0
    rep = c.last_report
    for _ in range(days):
        rep = _advance_day(c, cfg)
        upkeep += rep.upkeep_paid
        procurement += rep.procurement_spend
    c.last_report = EconReport(
        income_day=rep.income_day, coverage=rep.coverage, net_day=rep.net_day,
        upkeep_paid=upkeep, procurement_spend=procurement,
    )
    return c.last_report

# --- Player Sliders ---

def normalize_shares(shares: List[float], changed: Dict[int, float]) -> List[float]:
    """Keep tax + consumption + investment = 1.

    The changed shares are placed together; the untouched ones split the
    remainder in their current proportions. Changed shares that overshoot 1
    are scaled down among themselves and the untouched ones drop to 0.
    """
    out = list(shares)
    fixed = {i: clip01(v) for i, v in changed.items()}
    total = sum(fixed.values())
    others = [i for i in range(len(out)) if i not in fixed]
    if total > 1.0 or (not others and total > 0):
        fixed = {i: v / total for i, v in fixed.items()}
        total = 1.0
    elif not others:
        fixed = {i: 1.0 / len(fixed) for i in fixed}
        total = 1.0
    for i, v in fixed.items():
        out[i] = v

    remainder = 1.0 - total
    sum_others = sum(out[i] for i in others)
    if sum_others <= 0:
        for i in others: out[i] = remainder / len(others)
    else:
        for i in others: out[i] = out[i] * remainder / sum_others
    return out

def set_player_policy(
    world: WorldState,
    cfg: Config,
    country_id: str,
    tax: Optional[float] = None,
    consumption: Optional[float] = None,
    investment: Optional[float] = None,
    defense_budget: Optional[float] = None,
    draft: Optional[float] = None,
) -> bool:
    c = world.countries.get(country_id)
    if c is None or not c.is_player or c.is_annexed:
        return False

    given = {k: v for k, v in (("tax", tax), ("consumption", consumption), ("investment", investment),
                               ("defense_budget", defense_budget), ("draft", draft)) if v is not None}
    if not given:
        return False
    try:
        values = {k: float(v) for k, v in given.items()}
    except (TypeError, ValueError):
        return False
    if not all(math.isfinite(v) for v in values.values()):
        logger.debug("rejected non-finite slider input for %s: %s", country_id, given)
        return False

    changed = {idx: values[key] for idx, key in enumerate(SHARE_KEYS) if key in values}
    if changed:
        shares = normalize_shares([c.tax_rate, c.consumption_share, c.investment_share], changed)
        c.tax_rate, c.consumption_share, c.investment_share = (float(s) for s in shares)

    if "defense_budget" in values:
        c.military.budget_pct = clip01(values["defense_budget"])
    if "draft" in values:
        c.military.draft_pct = clamp(values["draft"], 0.0, cfg.economy.draft_max)

    split_labour(c, cfg)
    refresh_power(c, cfg)
    sanitize_country(c, cfg)
    world.refresh.schedule(REFRESH_ECONOMY)
    return True
