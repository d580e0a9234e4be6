# geosim/seed.py
from __future__ import annotations
import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Tuple, Union

logger = logging.getLogger(__name__)

class SeedDataError(ValueError):
    """Seed data is missing or malformed. Raised only at world construction."""

@dataclass(frozen=True)
class CountrySeed:
    name: str
    population: float
    gdp: float                      # Reporting units (millions).
    neighbors: Tuple[str, ...] = ()

def _number(cid: str, key: str, raw: Any) -> float:
    if raw is None:
        raise SeedDataError(f"{cid}: missing {key}")
    try:
        v = float(raw)
    except (TypeError, ValueError) as e:
        raise SeedDataError(f"{cid}: {key} is not a number ({raw!r})") from e
    if not math.isfinite(v) or v < 0:
        raise SeedDataError(f"{cid}: {key} must be finite and >= 0 (got {raw!r})")
    return v

def _parse_entry(cid: str, entry: Any) -> CountrySeed:
    if isinstance(entry, CountrySeed):
        entry = {"name": entry.name, "population": entry.population,
                 "GDP": entry.gdp, "neighbors": entry.neighbors}
    if not isinstance(entry, Mapping):
        raise SeedDataError(f"{cid}: expected a mapping, got {type(entry).__name__}")
    gdp_raw = entry.get("GDP", entry.get("gdp"))
    neighbors = entry.get("neighbors") or ()
    if isinstance(neighbors, str):
        raise SeedDataError(f"{cid}: neighbors must be a list of ids")
    return CountrySeed(
        name=str(entry.get("name") or cid),
        population=_number(cid, "population", entry.get("population")),
        gdp=_number(cid, "GDP", gdp_raw),
        neighbors=tuple(str(n) for n in neighbors if str(n) != cid),
    )

def load_seed_data(source: Union[Mapping[str, Any], str, Path]) -> Mapping[str, CountrySeed]:
    """Validate seed data from a mapping or a JSON file: {id: {name, population, GDP, neighbors}}."""
    if isinstance(source, (str, Path)):
        with open(source, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    else:
        raw = source
    if not isinstance(raw, Mapping) or not raw:
        raise SeedDataError("seed data must be a non-empty mapping of country id -> record")

    seeds = {str(cid): _parse_entry(str(cid), entry) for cid, entry in raw.items()}
    for cid, s in seeds.items():
        unknown = [n for n in s.neighbors if n not in seeds]
        if unknown:
            logger.warning("%s lists unknown neighbours %s; ignoring them", cid, unknown)
    return MappingProxyType(seeds)
