# geosim/utils.py
import math
import numpy as np

def clip01(x: float) -> float:
    return float(np.clip(x, 0.0, 1.0))

def clamp(x: float, lo: float, hi: float) -> float:
    return float(min(hi, max(lo, x)))

def finite_or(x: float, fallback: float) -> float:
    """Replace NaN/inf (e.g. from a zero denominator) with a fallback."""
    try:
        x = float(x)
    except (TypeError, ValueError):
        return float(fallback)
    return x if math.isfinite(x) else float(fallback)

def safe_ratio(num: float, den: float, default: float = 1.0) -> float:
    return float(num / den) if den > 0 else float(default)

def round_half_up(x: float) -> int:
    return int(np.floor(x + 0.5))

def hash_int(text: str, mod: int) -> int:
    # 32-bit FNV-1a
    h = 2166136261
    for ch in text:
        h = ((h ^ ord(ch)) * 16777619) & 0xFFFFFFFF
    return h % mod if mod > 0 else 0

def format_compact_number(num) -> str:
    if not isinstance(num, (int, float)) or isinstance(num, bool) or not math.isfinite(num):
        return "—"
    sign = "-" if num < 0 else ""
    a = abs(num)
    if a < 1e3:
        return sign + f"{a:g}"

    def _trim(v: float) -> str:
        s = f"{v:.1f}"
        return s[:-2] if s.endswith(".0") else s

    for div, suffix in ((1e3, "K"), (1e6, "M"), (1e9, "B")):
        if a < div * 1e3:
            return sign + _trim(a / div) + suffix
    return sign + _trim(a / 1e12) + "T"
