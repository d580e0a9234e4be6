# geosim/personas.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

@dataclass(frozen=True)
class PersonaParams:
    # Target policy mix (consumption/investment are shares of the non-tax residual)
    tax: float
    cons: float
    inv: float
    defense: float
    draft: float
    # Behaviour
    aggression: float
    volatility: float
    aggro_base: float     # multiplier = aggro_base * (1 + aggro_k * aggression)
    aggro_k: float
    delay_mult: float     # scales the denounce -> declare wait
    ratio_factor: float   # scales the power ratio needed to attack (<1 = bolder)

    @property
    def aggro_mult(self) -> float:
        return self.aggro_base * (1.0 + self.aggro_k * self.aggression)

class Persona(Enum):
    BALANCED = PersonaParams(tax=0.28, cons=0.62, inv=0.38, defense=0.08, draft=0.03,
                             aggression=0.20, volatility=0.02,
                             aggro_base=1.0, aggro_k=0.5, delay_mult=1.0, ratio_factor=1.00)
    GROWTH   = PersonaParams(tax=0.27, cons=0.60, inv=0.40, defense=0.06, draft=0.02,
                             aggression=0.10, volatility=0.02,
                             aggro_base=0.6, aggro_k=0.5, delay_mult=1.5, ratio_factor=1.05)
    HAWK     = PersonaParams(tax=0.30, cons=0.59, inv=0.33, defense=0.12, draft=0.05,
                             aggression=0.35, volatility=0.02,
                             aggro_base=2.0, aggro_k=1.0, delay_mult=0.6, ratio_factor=0.92)
    VOLATILE = PersonaParams(tax=0.27, cons=0.60, inv=0.40, defense=0.09, draft=0.03,
                             aggression=0.25, volatility=0.06,
                             aggro_base=1.4, aggro_k=1.0, delay_mult=0.8, ratio_factor=0.88)

    @property
    def params(self) -> PersonaParams:
        return self.value

    @property
    def key(self) -> str:
        return self.name.lower()

PERSONA_ORDER = (Persona.BALANCED, Persona.GROWTH, Persona.HAWK, Persona.VOLATILE)

def persona_for(country_id: str) -> Persona:
    """Deterministic archetype from the country id (h = h*33 + ch, mod 2^32)."""
    h = 0
    for ch in str(country_id):
        h = (h * 33 + ord(ch)) & 0xFFFFFFFF
    return PERSONA_ORDER[h % len(PERSONA_ORDER)]

def persona_by_key(key: str) -> Persona:
    return Persona[key.upper()]
