# fundscore/competitive_advantage.py - Multi-axis competitive advantage score
import logging
from collections.abc import Mapping
from typing import NamedTuple, Optional

import pandas as pd

from fundscore.config import (
    CA_BANDS, CA_CAPITAL_DISCIPLINE_BLEND, CA_COHERENCE_MARGIN_DROP,
    CA_COHERENCE_REVENUE_GROWTH, CA_DILUTION_SHARE_GROWTH,
    CA_EFFICIENCY_DELTA_BOUND, CA_NEUTRAL_SUBSCORE,
    CA_OPERATING_STABILITY_BLEND, CA_REINVESTMENT_IC_GROWTH,
    CA_REINVESTMENT_RETURN_SLACK, CA_RETURN_FAILURE_THRESHOLD,
    CA_RETURN_PERSISTENCE_BLEND, CA_SINGLE_DILUTION_DISCOUNT, CA_TOP_BAND,
    CA_YEARS_CONFIDENCE, CFG, FY_PERIOD_TYPE,
)
from fundscore.schemas import (
    CompetitiveAdvantageAxes, CompetitiveAdvantageHistoryRow,
    CompetitiveAdvantageResult,
)
from fundscore.utils import _clamp_score, _growth, _mean, _stdev, _tier

logger = logging.getLogger(__name__)


class AxisScore(NamedTuple):
    score: Optional[float]
    years: int


def _as_row(row) -> Optional[CompetitiveAdvantageHistoryRow]:
    if isinstance(row, CompetitiveAdvantageHistoryRow):
        return row
    if isinstance(row, pd.Series):
        row = row.to_dict()
    if not isinstance(row, Mapping):
        return None
    return CompetitiveAdvantageHistoryRow.model_validate(dict(row))


def _date_key(row: CompetitiveAdvantageHistoryRow) -> tuple:
    ts = pd.to_datetime(row.period_end_date, errors="coerce") if row.period_end_date else pd.NaT
    if pd.isna(ts):
        return (1, 0)   # undated rows go last
    return (0, ts.value)


def fiscal_rows(history) -> list:
    """Untagged or FY rows, oldest first."""
    history = list(history or [])
    rows = [r for r in (_as_row(h) for h in history) if r is not None]
    if len(rows) < len(history):
        logger.debug("Competitive advantage: %d non-mapping row(s) skipped", len(history) - len(rows))
    rows = [r for r in rows if r.period_type is None or r.period_type == FY_PERIOD_TYPE]
    return sorted(rows, key=_date_key)


def _pick_return(row: CompetitiveAdvantageHistoryRow):
    return row.roic if row.roic is not None else row.roe


def _pick_margin(row: CompetitiveAdvantageHistoryRow):
    return row.operating_margin if row.operating_margin is not None else row.net_margin


def _blend(components: dict, weights: dict) -> float:
    return _clamp_score(sum(weights[k] * components[k] for k in weights))


def _level_score(mean_return: float) -> float:
    """Piecewise-linear map of mean return (%) to 0-100."""
    pct = mean_return * 100
    if pct <= 0:
        level = 0.0
    elif pct <= 10:
        level = pct * 4
    elif pct <= 20:
        level = 40 + (pct - 10) * 2
    elif pct <= 40:
        level = 60 + (pct - 20)
    else:
        level = 80 + (pct - 40) * 0.5
    return _clamp_score(level)


def _dispersion_score(values: list) -> float:
    # 100 minus twice the stdev in percentage points; 0 when stdev is undefined
    sd = _stdev(values)
    if sd is None:
        return 0.0
    return _clamp_score(100 - sd * 100 * 2)


# ════════════════════════════════════════════════════════════
#  AXIS 1 - RETURN PERSISTENCE
# ════════════════════════════════════════════════════════════

def return_persistence_axis(rows: list) -> AxisScore:
    """
    How high and how steady returns on capital have been.

    level       (30%)  mean ROIC (ROE fallback) mapped to 0-100
    stability   (45%)  100 - 2 * stdev in pp
    failures   (-25%)  share of years below 5%
    """
    returns = [r for r in (_pick_return(row) for row in rows) if r is not None]
    years = len(returns)
    if years == 0:
        return AxisScore(None, 0)

    failures = sum(1 for r in returns if r < CA_RETURN_FAILURE_THRESHOLD)
    components = {
        "level":     _level_score(_mean(returns)),
        "stability": _dispersion_score(returns),
        "failure":   _clamp_score(failures / years * 100),
    }
    return AxisScore(_blend(components, CA_RETURN_PERSISTENCE_BLEND), years)


# ════════════════════════════════════════════════════════════
#  AXIS 2 - OPERATING STABILITY
# ════════════════════════════════════════════════════════════

def _coherence_score(rows: list) -> Optional[float]:
    # Growth years where margins fell by 1pp or more count against coherence
    good = bad = 0
    for prev, curr in zip(rows, rows[1:]):
        prev_m, curr_m = _pick_margin(prev), _pick_margin(curr)
        if prev_m is None or curr_m is None:
            continue
        growth = _growth(prev.revenue, curr.revenue)
        if growth is None or growth < CA_COHERENCE_REVENUE_GROWTH:
            continue
        if curr_m - prev_m <= CA_COHERENCE_MARGIN_DROP:
            bad += 1
        else:
            good += 1
    total = good + bad
    if total == 0:
        return None
    return _clamp_score(100 - bad / total * 100)


def _max_drawdown(values: list) -> float:
    peak, worst = values[0], 0.0
    for v in values[1:]:
        peak  = max(peak, v)
        worst = max(worst, peak - v)
    return worst


def operating_stability_axis(rows: list) -> AxisScore:
    """
    How dependable operating margins have been.

    stability   (50%)  100 - 2 * margin stdev in pp
    coherence   (30%)  growth years that kept margins (falls back to stability)
    drawdown   (-20%)  2 * worst peak-to-trough margin drop in pp
    """
    margins = [m for m in (_pick_margin(row) for row in rows) if m is not None]
    years = len(margins)
    if years < 2:
        return AxisScore(None, years)

    stability = _dispersion_score(margins)
    coherence = _coherence_score(rows)
    components = {
        "stability": stability,
        "coherence": coherence if coherence is not None else stability,
        "drawdown":  _clamp_score(_max_drawdown(margins) * 100 * 2),
    }
    return AxisScore(_blend(components, CA_OPERATING_STABILITY_BLEND), years)


# ════════════════════════════════════════════════════════════
#  AXIS 3 - CAPITAL DISCIPLINE
# ════════════════════════════════════════════════════════════

def capital_discipline_axis(rows: list) -> AxisScore:
    """
    Whether capital was deployed well and shareholders were not diluted.

    reinvestment (40%)  capital growth years where returns held up (50 if none)
    dilution    (-35%)  cumulative share growth above 1% a year
    efficiency   (25%)  revenue growth minus capital growth (50 if none)
    """
    years = len(rows)
    if years < 2:
        return AxisScore(None, years)

    good_reinvest = bad_reinvest = 0
    dilution_rates = []
    efficiency_deltas = []

    for prev, curr in zip(rows, rows[1:]):
        ic_growth = _growth(prev.invested_capital, curr.invested_capital)

        prev_ret, curr_ret = _pick_return(prev), _pick_return(curr)
        if ic_growth is not None and prev_ret is not None and curr_ret is not None:
            if ic_growth > CA_REINVESTMENT_IC_GROWTH:
                if curr_ret >= prev_ret - CA_REINVESTMENT_RETURN_SLACK:
                    good_reinvest += 1
                else:
                    bad_reinvest += 1

        prev_sh, curr_sh = prev.weighted_shares_out, curr.weighted_shares_out
        if prev_sh is not None and curr_sh is not None and prev_sh > 0:
            share_growth = (curr_sh - prev_sh) / prev_sh
            if share_growth > CA_DILUTION_SHARE_GROWTH:
                dilution_rates.append(share_growth)

        rev_growth = _growth(prev.revenue, curr.revenue)
        if rev_growth is not None and ic_growth is not None:
            efficiency_deltas.append(rev_growth - ic_growth)

    reinvestment = None
    if good_reinvest + bad_reinvest > 0:
        reinvestment = _clamp_score(good_reinvest / (good_reinvest + bad_reinvest) * 100)

    dilution = 0.0
    if dilution_rates:
        base = min(1.0, sum(dilution_rates)) * 100
        if len(dilution_rates) <= 1:
            base *= CA_SINGLE_DILUTION_DISCOUNT
        dilution = _clamp_score(base)

    efficiency = None
    if efficiency_deltas:
        bound = CA_EFFICIENCY_DELTA_BOUND
        delta = min(max(_mean(efficiency_deltas), -bound), bound)
        efficiency = _clamp_score(50 + delta * 250)

    if reinvestment is None and efficiency is None and dilution == 0:
        logger.debug("Capital discipline: no qualifying events across %d periods", years)
        return AxisScore(None, years)

    components = {
        "reinvestment": reinvestment if reinvestment is not None else CA_NEUTRAL_SUBSCORE,
        "dilution":     dilution,
        "efficiency":   efficiency if efficiency is not None else CA_NEUTRAL_SUBSCORE,
    }
    return AxisScore(_blend(components, CA_CAPITAL_DISCIPLINE_BLEND), years)


# ════════════════════════════════════════════════════════════
#  COMBINER + RESULT
# ════════════════════════════════════════════════════════════

def combine_axes(axes: dict, weights: dict = None) -> Optional[float]:
    """Weighted mean over present axes (weights renormalised), capped at return persistence + 20."""
    if weights is None:
        weights = CFG["ca_axis_weights"]
    total_w, score = 0.0, 0.0
    for key, w in weights.items():
        val = axes.get(key)
        if val is not None:
            score   += w * val
            total_w += w
    if total_w <= 0:
        return None
    combined = score / total_w
    anchor = axes.get("return_persistence")
    if anchor is not None:
        combined = min(combined, anchor + CFG["ca_axis1_cap"])
    return _clamp_score(combined)


def confidence_from_years(years: int) -> int:
    return _tier(years, CA_YEARS_CONFIDENCE, 0)


def band_for_score(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    for upper, band in CA_BANDS:
        if score < upper:
            return band
    return CA_TOP_BAND


def score_competitive_advantage(history, weights: dict = None) -> CompetitiveAdvantageResult:
    """
    Score long-run competitive advantage from a fundamentals history.

    Only untagged or FY rows count. Confidence depends on the number of those
    rows alone, not on what the axes found.
    """
    rows = fiscal_rows(history)
    if not rows:
        return CompetitiveAdvantageResult()

    axes = CompetitiveAdvantageAxes(
        return_persistence=return_persistence_axis(rows).score,
        operating_stability=operating_stability_axis(rows).score,
        capital_discipline=capital_discipline_axis(rows).score,
    )
    score = combine_axes(axes.model_dump(), weights)
    if score is None:
        logger.debug("Competitive advantage: no axis could be scored from %d rows", len(rows))

    return CompetitiveAdvantageResult(
        score=score,
        band=band_for_score(score),
        confidence=confidence_from_years(len(rows)),
        axes=axes,
        years_analyzed=len(rows),
    )
