# fundscore/utils.py - Shared numeric helpers
import numpy as np
import pandas as pd


def _safe(val, default=None):
    """Safely convert value to float, returning default for None/NaN/inf/bool/non-numeric."""
    # Flags are not measurements
    if val is None or isinstance(val, (bool, np.bool_)):
        return default
    try:
        f = float(val)
    except (TypeError, ValueError):
        return default
    return f if np.isfinite(f) else default


def _mean(values: list):
    if not values:
        return None
    return float(np.mean(values))


def _stdev(values: list):
    # Population standard deviation; undefined below two observations
    if len(values) < 2:
        return None
    return float(np.std(values, ddof=0))


def _clamp_score(val, lo: float = 0.0, hi: float = 100.0) -> float:
    if val is None or pd.isna(val):
        return lo
    return float(np.clip(val, lo, hi))


def _growth(prev, curr):
    """Period-over-period growth against |prev|; None when either side is missing or prev is 0."""
    if prev is None or curr is None or prev == 0:
        return None
    return (curr - prev) / abs(prev)


def _tier(value: float, tiers: list, default=None):
    """First entry of a top-down (threshold, result) table whose threshold value meets."""
    for threshold, result in tiers:
        if value >= threshold:
            return result
    return default
