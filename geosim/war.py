# geosim/war.py
from __future__ import annotations
import logging
from typing import List, Optional

from .config import Config
from .constants import REFRESH_ANNEX
from .diplomacy import war_key, end_war, set_score, get_relation
from .economy import strength_from_productivity, split_labour, refresh_power, sanitize_country
from .state import Country, SideLosses, WarRecord, WarLog, WorldState
from .utils import clip01, clamp, safe_ratio

logger = logging.getLogger(__name__)

# Raw-power model: control moves with the power share, attrition is a fixed
# fraction of combined power. The exhaustion variant is not implemented.

def sync_war_records(world: WorldState, cfg: Config) -> None:
    """Match war records to the mirrored at_war flags."""
    flagged = set()
    for a, row in world.relations.items():
        for b, rel in row.items():
            if a < b and rel.at_war:
                flagged.add((a, b))

    for key in flagged - set(world.wars):
        world.wars[key] = WarRecord(a=key[0], b=key[1], started_on=world.sim_day,
                                    control_share=cfg.war.control_start)
    for key in set(world.wars) - flagged:
        del world.wars[key]

    if world.war_count != len(flagged):
        logger.warning("war counter drifted (%d != %d), resyncing", world.war_count, len(flagged))
        world.war_count = len(flagged)

def control_for(world: WorldState, a: str, b: str) -> Optional[float]:
    """Control share held by `a` in its war with `b` (None when not at war)."""
    rec = world.wars.get(war_key(a, b))
    if rec is None:
        return None
    return rec.control_share if rec.a == a else 100.0 - rec.control_share

def apply_losses(c: Country, destroyed: float, cfg: Config) -> SideLosses:
    """Remove `destroyed` power from a side: infantry first by share, equipment the rest."""
    mil = c.military; w = cfg.war
    power_before = mil.power
    destroyed = min(max(0.0, destroyed), power_before)
    if destroyed <= 0:
        return SideLosses()

    spt = strength_from_productivity(c.productivity, cfg.military)
    killed = min(mil.troops, destroyed * w.infantry_loss_share / spt)
    eq_lost = min(mil.equipment_power, destroyed - killed * spt)
    spill = destroyed - killed * spt - eq_lost
    if spill > 0:
        killed = min(mil.troops, killed + spill / spt)

    pop_before = c.population
    mil.troops -= killed
    mil.equipment_power -= eq_lost
    c.population = max(0.0, c.population - killed)
    if pop_before > 0:
        c.stability = clip01(c.stability - w.casualty_stability_hit * killed / pop_before)
    mil.readiness = clip01(mil.readiness - w.loss_readiness_stress * destroyed / power_before)

    refresh_power(c, cfg)
    sanitize_country(c, cfg)
    return SideLosses(infantry=killed, equipment=eq_lost)

def resolve_pair_day(world: WorldState, rec: WarRecord, cfg: Config) -> WarLog:
    w = cfg.war
    ca, cb = world.countries[rec.a], world.countries[rec.b]
    pa, pb = ca.military.power, cb.military.power
    log = WarLog(t=world.sim_day, a=rec.a, b=rec.b, control_share=rec.control_share,
                 power_a=pa, power_b=pb)
    total = pa + pb
    if total <= 0:
        rec.last_day_losses = {rec.a: SideLosses(), rec.b: SideLosses()}
        return log

    share_a = pa / total
    delta = clamp(w.control_step_per_day * (2 * share_a - 1), -w.max_control_per_day, w.max_control_per_day)
    rec.control_share = clamp(rec.control_share + delta, 0.0, 100.0)

    # The stronger side inflicts proportionally more damage
    destroyed = w.intensity_per_power * total
    loss_a = apply_losses(ca, destroyed * (1 - share_a), cfg)
    loss_b = apply_losses(cb, destroyed * share_a, cfg)
    rec.last_day_losses = {rec.a: loss_a, rec.b: loss_b}

    log.control_share = rec.control_share
    log.infantry_lost_a, log.equipment_lost_a = loss_a.infantry, loss_a.equipment
    log.infantry_lost_b, log.equipment_lost_b = loss_b.infantry, loss_b.equipment

    if rec.control_share >= 100.0:
        annex(world, rec.a, rec.b, cfg)
    elif rec.control_share <= 0.0:
        annex(world, rec.b, rec.a, cfg)
    return log

def annex(world: WorldState, winner: str, loser: str, cfg: Config) -> bool:
    cw, cl = world.countries.get(winner), world.countries.get(loser)
    if cw is None or cl is None or cw.is_annexed or cl.is_annexed or winner == loser:
        return False
    w = cfg.war

    cw.military.equipment_power += cl.military.equipment_power * w.capture_equip_frac

    gdp_take = cl.gdp * w.annex_take
    pop_take = cl.population * w.annex_take
    treasury_take = max(0.0, cl.treasury) * w.annex_take

    # Winner labour grows with the absorbed population; productivity is
    # blended so the new GDP is exactly the old GDP plus the taken share.
    old_gdp = cw.gdp
    cw.population += pop_take
    cw.treasury += treasury_take
    split_labour(cw, cfg)
    cw.productivity = safe_ratio(old_gdp + gdp_take, cw.labour_force, cw.productivity)
    cw.gdp = cw.labour_force * cw.productivity
    cw.stability = clip01(cw.stability - w.annex_winner_stability)

    cl.population -= pop_take
    cl.treasury -= treasury_take
    cl.stability = clip01(cl.stability - w.annex_loser_stability)
    mil = cl.military
    mil.draft_pct = 0.0
    mil.troops = mil.equipment_power = mil.power = mil.readiness = 0.0
    split_labour(cl, cfg)
    cl.annexed_by = winner
    cl.war_target = None

    # Retire every war and plan involving the loser before anything else reads it
    for other, rel in list(world.relations.get(loser, {}).items()):
        if rel.at_war:
            end_war(world, loser, other, reason="annexation")
        rel.denounce = None
    for cid, row in world.relations.items():
        rel = row.get(loser)
        if rel is not None and rel.denounce is not None:
            rel.denounce = None
        c = world.countries.get(cid)
        if c is not None and c.war_target == loser:
            c.war_target = None

    floor = w.annex_score_floor
    set_score(world, winner, loser, max(get_relation(world, winner, loser).score, floor), cfg)

    refresh_power(cw, cfg); sanitize_country(cw, cfg)
    refresh_power(cl, cfg); sanitize_country(cl, cfg)
    world.refresh.schedule(REFRESH_ANNEX)
    logger.info("day %d: %s annexed %s (+%.3g GDP, +%.3g pop)", world.sim_day, winner, loser, gdp_take, pop_take)
    return True

def step_war(world: WorldState, cfg: Config, days: int = 1) -> List[WarLog]:
    """Resolve `days` of combat for every active pair, in key order."""
    logs: List[WarLog] = []
    sync_war_records(world, cfg)
    for _ in range(max(0, int(days))):
        for key in sorted(world.wars):
            rec = world.wars.get(key)
            if rec is None:
                continue  # retired by an annexation earlier today
            if world.countries[rec.a].is_annexed or world.countries[rec.b].is_annexed:
                end_war(world, rec.a, rec.b, reason="party annexed")
                continue
            logs.append(resolve_pair_day(world, rec, cfg))
    return logs
