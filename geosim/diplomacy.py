# geosim/diplomacy.py
from __future__ import annotations
import logging
from typing import Optional, Tuple

from .config import Config
from .constants import (
    TREATY_NAP, TREATY_ALLIANCE, TREATIES,
    IMPROVE_RELATIONS, SEND_AID, SIGN_NAP, RENOUNCE_NAP,
    FORM_ALLIANCE, LEAVE_ALLIANCE, DECLARE_WAR, OFFER_PEACE,
    ACTION_COST_FIELD, REFRESH_WAR, REFRESH_DIPLOMACY,
)
from .state import Relation, WarRecord, WorldState
from .utils import clip01, hash_int

logger = logging.getLogger(__name__)

# --- Relation Matrix ---

def war_key(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a < b else (b, a)

def _row(world: WorldState, a: str):
    return world.relations.setdefault(a, {})

def relation_pair(world: WorldState, a: str, b: str) -> Tuple[Relation, Relation]:
    """Both directions of a pair, created lazily (tolerates late-arriving ids)."""
    ra, rb = _row(world, a), _row(world, b)
    if b not in ra: ra[b] = Relation()
    if a not in rb: rb[a] = Relation()
    return ra[b], rb[a]

def get_relation(world: WorldState, a: str, b: str) -> Relation:
    return relation_pair(world, a, b)[0]

def init_relations(world: WorldState, cfg: Optional[Config] = None) -> None:
    neutral = cfg.diplomacy.neutral_score if cfg else 50
    for a in world.ids:
        row = _row(world, a)
        for b in world.ids:
            if a != b and b not in row:
                row[b] = Relation(score=neutral)

def _clamp_score(value: float, cfg: Optional[Config]) -> int:
    lo, hi = (cfg.diplomacy.min_score, cfg.diplomacy.max_score) if cfg else (0, 100)
    return int(min(hi, max(lo, round(value))))

def set_score(world: WorldState, a: str, b: str, value: float, cfg: Optional[Config] = None) -> int:
    ra, rb = relation_pair(world, a, b)
    ra.score = rb.score = _clamp_score(value, cfg)
    return ra.score

def modify_score(world: WorldState, a: str, b: str, delta: float, cfg: Optional[Config] = None) -> int:
    ra, _ = relation_pair(world, a, b)
    return set_score(world, a, b, ra.score + delta, cfg)

def set_treaty(world: WorldState, a: str, b: str, treaty: str, value: bool) -> None:
    if treaty not in TREATIES:
        raise ValueError(f"unknown treaty: {treaty}")
    ra, rb = relation_pair(world, a, b)
    setattr(ra.treaties, treaty, bool(value))
    setattr(rb.treaties, treaty, bool(value))

def clear_treaties(world: WorldState, a: str, b: str) -> None:
    for t in TREATIES:
        set_treaty(world, a, b, t, False)

def modify_trade(world: WorldState, a: str, b: str, delta: int, cfg: Config) -> int:
    ra, rb = relation_pair(world, a, b)
    ra.trade = rb.trade = int(min(cfg.diplomacy.trade_max, max(0, ra.trade + delta)))
    return ra.trade

# --- War Flags & Counter ---

def set_at_war(world: WorldState, a: str, b: str, value: bool) -> bool:
    """Mirrored war flag. Keeps war records and the global counter in step.

    Returns True only when the flag actually flipped.
    """
    ra, rb = relation_pair(world, a, b)
    if ra.at_war == bool(value):
        return False
    ra.at_war = rb.at_war = bool(value)
    key = war_key(a, b)
    if value:
        world.war_count += 1
        world.wars[key] = WarRecord(a=key[0], b=key[1], started_on=world.sim_day)
    else:
        world.war_count = max(0, world.war_count - 1)
        world.wars.pop(key, None)
    world.refresh.schedule(REFRESH_WAR)
    return True

def recount_wars(world: WorldState) -> int:
    n = 0
    for a, row in world.relations.items():
        for b, rel in row.items():
            if a < b and rel.at_war: n += 1
    world.war_count = n
    return n

def wars_at_cap(world: WorldState, cfg: Config) -> bool:
    return world.war_count >= cfg.ai.global_war_cap

def count_active_wars(world: WorldState, cid: str) -> int:
    return sum(1 for rel in world.relations.get(cid, {}).values() if rel.at_war)

def at_war_any(world: WorldState, cid: str) -> bool:
    return any(rel.at_war for rel in world.relations.get(cid, {}).values())

def _live(world: WorldState, cid: str) -> bool:
    c = world.countries.get(cid)
    return c is not None and not c.is_annexed

def clear_plans_between(world: WorldState, a: str, b: str) -> None:
    ra, rb = relation_pair(world, a, b)
    ra.denounce = None; rb.denounce = None
    ca, cb = world.countries.get(a), world.countries.get(b)
    if ca is not None and ca.war_target == b: ca.war_target = None
    if cb is not None and cb.war_target == a: cb.war_target = None

def _mobilize(world: WorldState, cid: str, cfg: Config) -> None:
    c = world.countries[cid]
    c.military.readiness = clip01(c.military.readiness + cfg.war.mobilize_readiness)
    c.stability = clip01(c.stability - cfg.war.mobilize_stability)

def start_war(world: WorldState, a: str, b: str, cfg: Config, per_country_cap: Optional[int] = None) -> bool:
    if a == b or not _live(world, a) or not _live(world, b):
        return False
    ra, _ = relation_pair(world, a, b)
    if ra.at_war or wars_at_cap(world, cfg):
        return False
    if per_country_cap is not None and count_active_wars(world, a) >= per_country_cap:
        return False

    clear_treaties(world, a, b)
    clear_plans_between(world, a, b)
    set_at_war(world, a, b, True)
    world.wars[war_key(a, b)].control_share = cfg.war.control_start
    _mobilize(world, a, cfg); _mobilize(world, b, cfg)
    logger.info("day %d: war started %s -> %s (%d active)", world.sim_day, a, b, world.war_count)
    return True

def end_war(world: WorldState, a: str, b: str, reason: str = "peace") -> bool:
    if not set_at_war(world, a, b, False):
        return False
    logger.info("day %d: war ended %s / %s (%s, %d active)", world.sim_day, a, b, reason, world.war_count)
    return True

# --- Seeded Rivalries ---

def seed_rivalries(world: WorldState, cfg: Config) -> None:
    ids = world.ids; n = len(ids)
    if n < 2: return
    d = cfg.diplomacy
    for a in ids:
        for k in range(d.rivals_per_country):
            idx = (hash_int(f"{a}:{k}", n - 1) + 1) % n
            b = ids[idx] if ids[idx] != a else ids[(idx + 1) % n]
            rel = get_relation(world, a, b)
            if rel.score > d.rivalry_trigger:
                lo, hi = war_key(a, b)
                set_score(world, a, b, d.rivalry_base + hash_int(f"{lo}|{hi}", d.rivalry_span), cfg)
                clear_treaties(world, a, b)

# --- Player Actions ---

def _pair_ok(world: WorldState, actor: str, target: str) -> bool:
    return actor != target and _live(world, actor) and _live(world, target)

def _can_pay(world: WorldState, actor: str, cost: float) -> bool:
    return world.countries[actor].treasury >= cost

def _pay(world: WorldState, actor: str, cost: float) -> None:
    world.countries[actor].treasury -= cost

def _reject(action: str, actor: str, target: str, why: str) -> bool:
    logger.debug("rejected %s %s -> %s: %s", action, actor, target, why)
    return False

def improve_relations(world: WorldState, cfg: Config, actor: str, target: str) -> bool:
    d = cfg.diplomacy
    if not _pair_ok(world, actor, target): return _reject(IMPROVE_RELATIONS, actor, target, "invalid pair")
    if get_relation(world, actor, target).at_war: return _reject(IMPROVE_RELATIONS, actor, target, "at war")
    if not _can_pay(world, actor, d.improve_cost): return _reject(IMPROVE_RELATIONS, actor, target, "treasury")
    _pay(world, actor, d.improve_cost)
    modify_score(world, actor, target, d.improve_delta, cfg)
    world.refresh.schedule(REFRESH_DIPLOMACY)
    return True

def send_aid(world: WorldState, cfg: Config, actor: str, target: str) -> bool:
    d = cfg.diplomacy
    if not _pair_ok(world, actor, target): return _reject(SEND_AID, actor, target, "invalid pair")
    if get_relation(world, actor, target).at_war: return _reject(SEND_AID, actor, target, "at war")
    if not _can_pay(world, actor, d.aid_cost): return _reject(SEND_AID, actor, target, "treasury")
    _pay(world, actor, d.aid_cost)
    modify_score(world, actor, target, d.aid_delta, cfg)
    modify_trade(world, actor, target, 1, cfg)
    world.refresh.schedule(REFRESH_DIPLOMACY)
    return True

def sign_nap(world: WorldState, cfg: Config, actor: str, target: str) -> bool:
    d = cfg.diplomacy
    if not _pair_ok(world, actor, target): return _reject(SIGN_NAP, actor, target, "invalid pair")
    rel = get_relation(world, actor, target)
    if rel.at_war or rel.treaties.nap: return _reject(SIGN_NAP, actor, target, "at war or already signed")
    if rel.score < d.nap_min_score: return _reject(SIGN_NAP, actor, target, f"score {rel.score} < {d.nap_min_score}")
    if not _can_pay(world, actor, d.nap_cost): return _reject(SIGN_NAP, actor, target, "treasury")
    _pay(world, actor, d.nap_cost)
    set_treaty(world, actor, target, TREATY_NAP, True)
    modify_score(world, actor, target, d.nap_sign_delta, cfg)
    world.refresh.schedule(REFRESH_DIPLOMACY)
    return True

def renounce_nap(world: WorldState, cfg: Config, actor: str, target: str) -> bool:
    d = cfg.diplomacy
    if not _pair_ok(world, actor, target): return _reject(RENOUNCE_NAP, actor, target, "invalid pair")
    if not get_relation(world, actor, target).treaties.nap: return _reject(RENOUNCE_NAP, actor, target, "no pact")
    if not _can_pay(world, actor, d.renounce_nap_cost): return _reject(RENOUNCE_NAP, actor, target, "treasury")
    _pay(world, actor, d.renounce_nap_cost)
    set_treaty(world, actor, target, TREATY_NAP, False)
    modify_score(world, actor, target, d.nap_renounce_delta, cfg)
    world.refresh.schedule(REFRESH_DIPLOMACY)
    return True

def form_alliance(world: WorldState, cfg: Config, actor: str, target: str) -> bool:
    d = cfg.diplomacy
    if not _pair_ok(world, actor, target): return _reject(FORM_ALLIANCE, actor, target, "invalid pair")
    rel = get_relation(world, actor, target)
    if rel.at_war or rel.treaties.alliance: return _reject(FORM_ALLIANCE, actor, target, "at war or already allied")
    if rel.score < d.alliance_min_score:
        return _reject(FORM_ALLIANCE, actor, target, f"score {rel.score} < {d.alliance_min_score}")
    if not _can_pay(world, actor, d.alliance_cost): return _reject(FORM_ALLIANCE, actor, target, "treasury")
    _pay(world, actor, d.alliance_cost)
    set_treaty(world, actor, target, TREATY_ALLIANCE, True)
    modify_score(world, actor, target, d.alliance_form_delta, cfg)
    world.refresh.schedule(REFRESH_DIPLOMACY)
    return True

def leave_alliance(world: WorldState, cfg: Config, actor: str, target: str) -> bool:
    d = cfg.diplomacy
    if not _pair_ok(world, actor, target): return _reject(LEAVE_ALLIANCE, actor, target, "invalid pair")
    if not get_relation(world, actor, target).treaties.alliance: return _reject(LEAVE_ALLIANCE, actor, target, "not allied")
    if not _can_pay(world, actor, d.leave_alliance_cost): return _reject(LEAVE_ALLIANCE, actor, target, "treasury")
    _pay(world, actor, d.leave_alliance_cost)
    set_treaty(world, actor, target, TREATY_ALLIANCE, False)
    modify_score(world, actor, target, d.alliance_leave_delta, cfg)
    world.refresh.schedule(REFRESH_DIPLOMACY)
    return True

def declare_war(world: WorldState, cfg: Config, actor: str, target: str) -> bool:
    d = cfg.diplomacy
    if not _pair_ok(world, actor, target): return _reject(DECLARE_WAR, actor, target, "invalid pair")
    if get_relation(world, actor, target).at_war: return _reject(DECLARE_WAR, actor, target, "already at war")
    if wars_at_cap(world, cfg): return _reject(DECLARE_WAR, actor, target, "global war cap")
    if not _can_pay(world, actor, d.declare_war_cost): return _reject(DECLARE_WAR, actor, target, "treasury")
    _pay(world, actor, d.declare_war_cost)
    start_war(world, actor, target, cfg)
    set_score(world, actor, target, d.min_score, cfg)
    return True

def offer_peace(world: WorldState, cfg: Config, actor: str, target: str) -> bool:
    d = cfg.diplomacy
    if not _pair_ok(world, actor, target): return _reject(OFFER_PEACE, actor, target, "invalid pair")
    rel = get_relation(world, actor, target)
    if not rel.at_war: return _reject(OFFER_PEACE, actor, target, "not at war")
    if not _can_pay(world, actor, d.peace_cost): return _reject(OFFER_PEACE, actor, target, "treasury")
    _pay(world, actor, d.peace_cost)
    end_war(world, actor, target, reason="peace offered")
    set_score(world, actor, target, max(rel.score, d.peace_score_floor), cfg)
    return True

ACTIONS = {
    IMPROVE_RELATIONS: improve_relations,
    SEND_AID:          send_aid,
    SIGN_NAP:          sign_nap,
    RENOUNCE_NAP:      renounce_nap,
    FORM_ALLIANCE:     form_alliance,
    LEAVE_ALLIANCE:    leave_alliance,
    DECLARE_WAR:       declare_war,
    OFFER_PEACE:       offer_peace,
}

def action_cost(cfg: Config, action: str) -> float:
    return float(getattr(cfg.diplomacy, ACTION_COST_FIELD[action]))

def can_afford(world: WorldState, cfg: Config, actor: str, action: str) -> bool:
    c = world.countries.get(actor)
    return c is not None and action in ACTION_COST_FIELD and c.treasury >= action_cost(cfg, action)

def perform_action(world: WorldState, cfg: Config, action: str, actor: str, target: str) -> bool:
    fn = ACTIONS.get(action)
    if fn is None:
        return _reject(action, actor, target, "unknown action")
    return fn(world, cfg, actor, target)
