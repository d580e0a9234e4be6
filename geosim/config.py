# geosim/config.py
from __future__ import annotations
from dataclasses import dataclass, field as dc_field
from typing import Optional

@dataclass
class EconomyRates:
    # --- 1. Calendar & Policy Adoption ---
    days_in_year: int = 365
    policy_blend: float = 0.12      # Daily exponential smoothing toward persona targets.
    gdp_unit: float = 1e6           # Seed GDP is reported in millions.

    # --- 2. Stability Drift (annual) ---
    # annual = (tax_pivot - tax) + w_cons*(cons - cons_base) + w_def*(def - def_base)
    stab_tax_pivot: float = 0.22
    stab_cons_weight: float = 0.20
    cons_baseline: float = 0.60
    stab_def_weight: float = 0.10
    def_baseline: float = 0.08

    # --- 3. Population (annual) ---
    pop_cons_weight: float = 0.10
    pop_decay: float = 0.03
    pop_stab_weight: float = 0.005
    pop_stab_pivot: float = 0.60

    # --- 4. Productivity (annual) ---
    # Investment above the floor pays with sqrt diminishing returns.
    prod_decay: float = 0.020
    inv_floor: float = 0.28
    prod_inv_weight: float = 0.090
    prod_underfund_penalty: float = 0.020 # Defense below baseline erodes institutions.
    prod_def_bonus: float = 0.010         # Defense R&D spillover above baseline.

    # --- 5. Labour Participation ---
    # Linear in stability: participation = low + (high - low) * stability.
    participation_low: float = 0.45
    participation_high: float = 0.70

    # --- 6. AI Policy Bounds ---
    ai_tax_max: float = 0.60
    ai_budget_max: float = 0.40
    draft_max: float = 0.30

    # --- 7. Policy Context Reactions ---
    coverage_target: float = 0.90
    underfunded_def_bump: float = 0.04
    underfunded_def_cap: float = 0.20
    deficit_def_floor: float = 0.04
    deficit_def_weight: float = 0.5
    war_def_bump: float = 0.04
    war_def_cap: float = 0.25
    war_draft_bump: float = 0.02

    # --- 8. Initial Ledger ---
    init_stability: float = 0.85
    init_treasury_frac: float = 0.05
    default_population: float = 1_000_000
    default_gdp: float = 100.0      # Millions.

@dataclass
class MilitaryRates:
    # --- 1. Upkeep ---
    upkeep_per_troop_per_day: float = 50.0
    upkeep_per_equip_per_year: float = 100_000.0
    procurement_efficiency: float = 1e-7  # Equipment power per currency unit.

    # --- 2. Attrition & Readiness ---
    base_equip_decay: float = 0.01      # Annual, always applied.
    shortfall_equip_decay: float = 0.04 # Annual, scaled by (1 - coverage).
    readiness_gain_per_day: float = 0.001
    readiness_loss_per_day: float = 0.003
    init_readiness: float = 0.70

    # --- 3. Troop Quality ---
    # strength = clip(sqrt(productivity / baseline), min, max)
    strength_baseline: float = 50_000.0
    strength_min: float = 0.25
    strength_max: float = 4.0

    # --- 4. Initial Equipment ---
    # equipment = max(floor, sqrt(GDP) / divisor)
    init_equip_floor: float = 50.0
    init_equip_divisor: float = 1e3

@dataclass
class WarRates:
    # --- 1. Control ---
    control_step_per_day: float = 2.0   # Multiplied by (2*share - 1).
    max_control_per_day: float = 1.5
    control_start: float = 50.0

    # --- 2. Attrition ---
    intensity_per_power: float = 0.002  # Share of combined power destroyed per day.
    infantry_loss_share: float = 0.70   # Remainder hits equipment. Troops refill from the draft share,
                                        # so infantry losses bite mainly through population.
    casualty_stability_hit: float = 0.5 # Per unit of casualties / population.
    loss_readiness_stress: float = 0.10

    # --- 3. Mobilisation (on war start) ---
    mobilize_readiness: float = 0.12
    mobilize_stability: float = 0.03

    # --- 4. Annexation ---
    annex_take: float = 0.90            # Loser keeps the residual 10%.
    capture_equip_frac: float = 0.35
    annex_score_floor: int = 20
    annex_loser_stability: float = 0.15
    annex_winner_stability: float = 0.04

@dataclass
class DiplomacyRules:
    # --- 1. Scores ---
    neutral_score: int = 50
    min_score: int = 0
    max_score: int = 100
    trade_max: int = 5

    # --- 2. Player Actions (cost in treasury units, score delta) ---
    improve_cost: float = 50e6
    improve_delta: int = 10
    aid_cost: float = 250e6
    aid_delta: int = 15
    nap_cost: float = 100e6
    nap_min_score: int = 60
    nap_sign_delta: int = 5
    renounce_nap_cost: float = 10e6
    nap_renounce_delta: int = -10
    alliance_cost: float = 200e6
    alliance_min_score: int = 80
    alliance_form_delta: int = 10
    leave_alliance_cost: float = 10e6
    alliance_leave_delta: int = -20
    declare_war_cost: float = 100e6
    peace_cost: float = 25e6
    peace_score_floor: int = 20

    # --- 3. Seeded Rivalries ---
    rivals_per_country: int = 2
    rivalry_trigger: int = 30       # Only pairs above this get soured.
    rivalry_base: int = 18
    rivalry_span: int = 12          # Scores land in [base, base + span).

@dataclass
class AIRules:
    # --- 1. Cadence ---
    diplo_slice_per_day: int = 10

    # --- 2. War Behaviour ---
    war_delay_days: int = 7
    max_wars_per_ai: int = 1
    global_war_cap: int = 20
    denounce_score_drop: int = 15

    # --- 3. Target Selection ---
    hostility_cutoff: int = 28
    ratio_to_bully: float = 1.12
    declare_ratio: float = 1.02
    retaliation_ratio: float = 0.95
    neighbor_bias: int = 10
    distant_bias: int = 2
    roll_base: float = 0.25
    roll_aggro: float = 0.25

@dataclass
class Config:
    economy: EconomyRates = dc_field(default_factory=EconomyRates)
    military: MilitaryRates = dc_field(default_factory=MilitaryRates)
    war: WarRates = dc_field(default_factory=WarRates)
    diplomacy: DiplomacyRules = dc_field(default_factory=DiplomacyRules)
    ai: AIRules = dc_field(default_factory=AIRules)
    seed: int = 42
    econ_step_days: int = 1
    start_day: int = 20089          # 2025-01-01 as floor(epoch_ms / 86_400_000).
    player_id: Optional[str] = None
    seed_rivalries: bool = True
    record_logs: bool = True
