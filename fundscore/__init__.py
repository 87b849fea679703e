# fundscore/__init__.py - Financial scoring engine
#
# Pure, deterministic scorers for a company's sector standing and the
# durability of its competitive advantage.
# Import anything directly: `from fundscore import classify_industry_fit, CFG`
#
# Module layout:
#   config.py                - CFG, weights, thresholds, constants
#   utils.py                 - _safe(), _mean(), _stdev(), _clamp_score() shared helpers
#   schemas.py               - pydantic input / result models
#   ifs.py                   - Industry Fit Score block-voting classifier
#   competitive_advantage.py - return / margin / capital axes + combiner
#   industry.py              - industry temporal profiles (dominant horizons)
#   relative.py              - stock vs. sector window returns → IFS inputs
#   memory.py                - IFS position history summary
#   frames.py                - DataFrame batch scoring

from fundscore.config import CFG
from fundscore.competitive_advantage import score_competitive_advantage
from fundscore.frames import score_competitive_advantage_frame, score_ifs_frame
from fundscore.ifs import classify_industry_fit
from fundscore.industry import (
    DEFAULT_INDUSTRY_PROFILE, build_profile_map, missing_dominant_horizons,
    resolve_industry_profile,
)
from fundscore.memory import summarize_ifs_history
from fundscore.relative import build_relative_inputs, relative_returns
from fundscore.schemas import (
    CompetitiveAdvantageAxes, CompetitiveAdvantageHistoryRow,
    CompetitiveAdvantageResult, IFSMemory, IFSResult, IndustryTemporalProfile,
    RelativePerformanceInputs,
)

__version__ = "1.2"

__all__ = [
    "CFG",
    "classify_industry_fit",
    "score_competitive_advantage",
    "score_ifs_frame",
    "score_competitive_advantage_frame",
    "build_relative_inputs",
    "relative_returns",
    "resolve_industry_profile",
    "build_profile_map",
    "missing_dominant_horizons",
    "DEFAULT_INDUSTRY_PROFILE",
    "summarize_ifs_history",
    "RelativePerformanceInputs",
    "IFSResult",
    "CompetitiveAdvantageHistoryRow",
    "CompetitiveAdvantageAxes",
    "CompetitiveAdvantageResult",
    "IndustryTemporalProfile",
    "IFSMemory",
]
