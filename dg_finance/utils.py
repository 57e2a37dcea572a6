"""Consolidated coercion helpers shared by the engine and the loader."""
from typing import Any, Dict, Iterable, Optional


def get_nested(d: Dict[str, Any], path: Iterable[str], default: Any = None) -> Any:
    """Safely get nested dict value along a sequence of keys."""
    result: Any = d
    for key in path:
        if not isinstance(result, dict) or key not in result:
            return default
        result = result[key]
    return result


def as_float(v: Any, default: Optional[float] = None) -> Optional[float]:
    """Safely convert value to float with fallback.

    Blank strings and non-numeric text fall back to ``default``; booleans are
    rejected so a stray ``true`` in a YAML file never turns into 1.0.
    """
    if v is None or isinstance(v, bool):
        return default
    if isinstance(v, str):
        v = v.strip().replace(",", ".")
        if not v:
            return default
    try:
        out = float(v)
    except (ValueError, TypeError):
        return default
    if out != out:  # NaN
        return default
    return out


def as_int(v: Any, default: Optional[int] = None) -> Optional[int]:
    """Safely convert value to int with fallback (floats are truncated)."""
    f = as_float(v, None)
    if f is None:
        return default
    try:
        return int(f)
    except (ValueError, OverflowError):
        return default


def pct(rate_pct: float) -> float:
    """Percent to fraction: 12.5 -> 0.125."""
    return rate_pct / 100.0
