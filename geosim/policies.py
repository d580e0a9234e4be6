# geosim/policies.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np

from .config import Config
from .diplomacy import (
    relation_pair, get_relation, clear_treaties, modify_score,
    start_war, wars_at_cap, count_active_wars, at_war_any,
)
from .economy import advance
from .personas import Persona
from .state import Country, DenouncePlan, WorldState
from .utils import clip01, clamp, round_half_up

logger = logging.getLogger(__name__)

@dataclass
class PolicyContext:
    income_day: float = 0.0
    coverage: float = 1.0
    net_day: float = 0.0
    at_war_any: bool = False

def context_for(world: WorldState, c: Country) -> PolicyContext:
    rep = c.last_report
    return PolicyContext(
        income_day=rep.income_day, coverage=rep.coverage,
        net_day=rep.net_day, at_war_any=at_war_any(world, c.id),
    )

# --- Economic Policy Drift ---

def adjust_policy(c: Country, ctx: PolicyContext, cfg: Config, rng: np.random.Generator) -> None:
    """Blend the AI policy mix toward its persona targets, with seeded jitter."""
    P = c.persona.params; r = cfg.economy
    K, J = r.policy_blend, P.volatility
    mil = c.military

    t_def, t_draft = P.defense, P.draft
    if ctx.coverage < r.coverage_target:
        t_def = min(r.underfunded_def_cap, t_def + r.underfunded_def_bump * (r.coverage_target - ctx.coverage))
    if ctx.net_day < 0:
        t_def = max(r.deficit_def_floor, t_def + r.deficit_def_weight * ctx.net_day / (ctx.income_day + 1e-6))
    if ctx.at_war_any:
        t_def = min(r.war_def_cap, max(t_def, P.defense + r.war_def_bump))
        t_draft = min(r.draft_max, max(t_draft, P.draft + r.war_draft_bump))

    c.tax_rate          += (P.tax  - c.tax_rate) * K          + (rng.random() - 0.5) * J
    c.consumption_share += (P.cons - c.consumption_share) * K + (rng.random() - 0.5) * J
    c.investment_share  += (P.inv  - c.investment_share) * K  + (rng.random() - 0.5) * J

    mil.budget_pct += (t_def - mil.budget_pct) * K
    mil.draft_pct  += (t_draft - mil.draft_pct) * K

    # Consumption and investment split the non-tax residual
    ci = c.consumption_share + c.investment_share
    if ci > 0:
        c.consumption_share = clip01(c.consumption_share / ci)
        c.investment_share = 1.0 - c.consumption_share
    else:
        c.consumption_share, c.investment_share = P.cons, P.inv

    c.tax_rate     = clamp(c.tax_rate, 0.0, r.ai_tax_max)
    mil.budget_pct = clamp(mil.budget_pct, 0.0, r.ai_budget_max)
    mil.draft_pct  = clamp(mil.draft_pct, 0.0, r.draft_max)

def step_ai_economy(world: WorldState, cfg: Config, days: int = 1) -> None:
    for cid in world.ids:
        c = world.countries[cid]
        if c.is_player or c.is_annexed:
            continue
        c.econ_acc += days
        if c.econ_acc >= cfg.econ_step_days:
            step, c.econ_acc = c.econ_acc, 0
            adjust_policy(c, context_for(world, c), cfg, world.rng)
            advance(c, step, cfg)

# --- War Planning: Denounce -> Wait -> Declare ---

def power_ratio(world: WorldState, a: str, b: str) -> float:
    pa = world.countries[a].military.power
    pb = world.countries[b].military.power
    return max(1.0, pa) / max(1.0, pb)

def denounce(world: WorldState, cfg: Config, attacker: str, target: str) -> DenouncePlan:
    c = world.countries[attacker]
    if c.war_target is not None and c.war_target != target:
        get_relation(world, attacker, c.war_target).denounce = None

    delay = max(1, round_half_up(cfg.ai.war_delay_days * c.persona.params.delay_mult))
    ra, _ = relation_pair(world, attacker, target)
    ra.denounce = DenouncePlan(on_day=world.sim_day, war_eligible_on=world.sim_day + delay, target=target)
    clear_treaties(world, attacker, target)
    modify_score(world, attacker, target, -cfg.ai.denounce_score_drop, cfg)
    c.war_target = target
    logger.debug("day %d: %s denounced %s (eligible day %d)", world.sim_day, attacker, target, ra.denounce.war_eligible_on)
    return ra.denounce

def can_declare(world: WorldState, attacker: str, target: str) -> bool:
    plan = get_relation(world, attacker, target).denounce
    return plan is not None and world.sim_day >= plan.war_eligible_on

def _inbound_eligible(world: WorldState, attacker: str, target: str) -> bool:
    plan = get_relation(world, attacker, target).denounce
    return plan is not None and plan.target == target and world.sim_day >= plan.war_eligible_on

def _abandon(world: WorldState, c: Country, target: str, why: str) -> None:
    get_relation(world, c.id, target).denounce = None
    c.war_target = None
    logger.debug("day %d: %s dropped war plan on %s (%s)", world.sim_day, c.id, target, why)

def try_declare_planned_war(world: WorldState, cfg: Config, cid: str) -> bool:
    c = world.countries[cid]
    target = c.war_target
    if target is None or wars_at_cap(world, cfg):
        return False

    rel = get_relation(world, cid, target)
    other = world.countries.get(target)
    if rel.at_war or rel.denounce is None or other is None or other.is_annexed:
        _abandon(world, c, target, "stale")
        return False
    if world.sim_day < rel.denounce.war_eligible_on:
        return False

    need = cfg.ai.declare_ratio * c.persona.params.ratio_factor
    if c.persona is Persona.GROWTH and _inbound_eligible(world, target, cid):
        need = cfg.ai.retaliation_ratio
    if power_ratio(world, cid, target) < need:
        _abandon(world, c, target, "power ratio too low")
        return False
    return start_war(world, cid, target, cfg, per_country_cap=cfg.ai.max_wars_per_ai)

def _retaliate(world: WorldState, cfg: Config, cid: str) -> bool:
    for other in world.ids:
        if other == cid or world.countries[other].is_annexed:
            continue
        mine = get_relation(world, cid, other)
        if mine.at_war or not _inbound_eligible(world, other, cid):
            continue
        if power_ratio(world, cid, other) >= cfg.ai.retaliation_ratio:
            if mine.denounce is None:
                denounce(world, cfg, cid, other)
            if can_declare(world, cid, other) and start_war(world, cid, other, cfg, per_country_cap=cfg.ai.max_wars_per_ai):
                return True
    return False

def pick_hostile_target(world: WorldState, cfg: Config, cid: str) -> Optional[str]:
    """Most hostile untreatied country, neighbours weighted as more hostile."""
    neigh = set(world.neighbors_of(cid))
    best, best_score = None, float("inf")
    for other in world.ids:
        if other == cid or world.countries[other].is_annexed:
            continue
        rel = get_relation(world, cid, other)
        if rel.at_war or rel.treaties.any():
            continue
        s = rel.score - (cfg.ai.neighbor_bias if other in neigh else cfg.ai.distant_bias)
        if s < best_score:
            best, best_score = other, s
    return best

def diplomacy_step(world: WorldState, cfg: Config, cid: str) -> None:
    c = world.countries[cid]
    if c.is_player or c.is_annexed:
        return
    if count_active_wars(world, cid) >= cfg.ai.max_wars_per_ai:
        return
    if try_declare_planned_war(world, cfg, cid):
        return
    if wars_at_cap(world, cfg):
        return

    P = c.persona.params
    if c.persona is Persona.GROWTH and _retaliate(world, cfg, cid):
        return

    best = pick_hostile_target(world, cfg, cid)
    if best is None or get_relation(world, cid, best).score > cfg.ai.hostility_cutoff:
        return

    need = cfg.ai.ratio_to_bully * P.ratio_factor
    roll = world.rng.random() < cfg.ai.roll_base + cfg.ai.roll_aggro * P.aggro_mult
    if power_ratio(world, cid, best) >= need and roll:
        if get_relation(world, cid, best).denounce is None:
            denounce(world, cfg, cid, best)
        elif can_declare(world, cid, best) and not wars_at_cap(world, cfg):
            start_war(world, cid, best, cfg, per_country_cap=cfg.ai.max_wars_per_ai)

def step_ai_diplomacy(world: WorldState, cfg: Config) -> int:
    """Run the rotating diplomacy slice. Returns the number of countries visited."""
    n = len(world.ids)
    if n == 0:
        return 0
    size = min(cfg.ai.diplo_slice_per_day, n)
    visited = 0
    for s in range(size):
        cid = world.ids[(world.diplo_cursor + s) % n]
        if cid == world.player_id:
            continue
        diplomacy_step(world, cfg, cid)
        visited += 1
    world.diplo_cursor = (world.diplo_cursor + size) % n
    return visited
