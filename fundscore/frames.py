# fundscore/frames.py - Batch scoring over pandas DataFrames
import logging

import numpy as np
import pandas as pd
from tqdm import tqdm

from fundscore.competitive_advantage import score_competitive_advantage
from fundscore.config import CA_RESULT_COLS, IFS_RESULT_COLS
from fundscore.ifs import classify_industry_fit
from fundscore.utils import _safe

logger = logging.getLogger(__name__)


def _horizons_from_cell(cell):
    # Lists pass through, "6M,1Y" strings are split, NaN / None mean no metadata
    if isinstance(cell, (list, tuple, set, frozenset, np.ndarray)):
        return list(cell)
    if isinstance(cell, str) and cell.strip():
        return [c for c in (p.strip() for p in cell.split(",")) if c]
    return None


def _ifs_record(row: pd.Series, horizons_col, universe_size_col) -> dict:
    horizons = _horizons_from_cell(row.get(horizons_col)) if horizons_col else None
    size     = _safe(row.get(universe_size_col)) if universe_size_col else None
    result   = classify_industry_fit(row, horizons, int(size) if size is not None else None)
    if result is None:
        return {
            "ifs_position": None, "ifs_pressure": np.nan, "ifs_confidence": np.nan,
            "ifs_confidence_label": None, "ifs_interpretation": None,
        }
    return {
        "ifs_position":         result.position,
        "ifs_pressure":         result.pressure,
        "ifs_confidence":       result.confidence,
        "ifs_confidence_label": result.confidence_label,
        "ifs_interpretation":   result.interpretation,
    }


def score_ifs_frame(df: pd.DataFrame, horizons_col: str = None,
                    universe_size_col: str = None, progress: bool = False) -> pd.DataFrame:
    """
    Classify every row of a universe frame holding relative_vs_sector_* columns.

    `horizons_col` optionally names a column of dominant horizons per row
    (industry-aware mode where set); `universe_size_col` a column of sector
    universe sizes. Returns a copy with the IFS_RESULT_COLS added.
    """
    out = df.copy()
    records = [
        _ifs_record(row, horizons_col, universe_size_col)
        for _, row in tqdm(df.iterrows(), total=len(df), desc="IFS", disable=not progress)
    ]
    scored = pd.DataFrame(records, index=df.index, columns=IFS_RESULT_COLS)
    for col in IFS_RESULT_COLS:
        out[col] = scored[col]

    n_valid = out["ifs_position"].notna().sum()
    logger.info("IFS classified %d/%d rows", n_valid, len(out))
    return out


def score_competitive_advantage_frame(history: pd.DataFrame, by: str = "ticker",
                                      progress: bool = False) -> pd.DataFrame:
    """
    Score a long fundamentals panel (one row per ticker-period) grouped by `by`.
    Returns one row per group with the CA_RESULT_COLS.
    """
    if history.empty or by not in history.columns:
        if not history.empty:
            logger.warning("Competitive advantage frame: grouping column %r not found", by)
        return pd.DataFrame(columns=[by] + CA_RESULT_COLS)

    records = []
    groups = history.groupby(by, sort=True)
    for key, grp in tqdm(groups, total=groups.ngroups, desc="Moat", disable=not progress):
        res = score_competitive_advantage(grp.to_dict("records"))
        records.append({
            by:                       key,
            "ca_score":               res.score if res.score is not None else np.nan,
            "ca_band":                res.band,
            "ca_confidence":          res.confidence,
            "ca_years_analyzed":      res.years_analyzed,
            "ca_return_persistence":  _nan_if_none(res.axes.return_persistence),
            "ca_operating_stability": _nan_if_none(res.axes.operating_stability),
            "ca_capital_discipline":  _nan_if_none(res.axes.capital_discipline),
        })

    out = pd.DataFrame(records, columns=[by] + CA_RESULT_COLS)
    logger.info("Competitive advantage scored for %d groups (%d with a score)",
                len(out), out["ca_score"].notna().sum())
    return out


def _nan_if_none(v):
    return np.nan if v is None else v
