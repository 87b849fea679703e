# fundscore/industry.py - Industry temporal profiles (dominant IFS horizons)
import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from fundscore.config import IFS_WINDOWS
from fundscore.ifs import _as_inputs
from fundscore.schemas import IndustryTemporalProfile

logger = logging.getLogger(__name__)

# Used when an industry is missing or unmapped
DEFAULT_INDUSTRY_PROFILE = IndustryTemporalProfile()


def build_profile_map(records: Iterable) -> dict:
    """
    Build {industry_code: IndustryTemporalProfile} from metadata rows.

    Each row needs `industry_code`, `cadence`, `dominant_horizons` and
    `structural_horizon_min_years`. Rows that fail validation are skipped.
    """
    profiles = {}
    for rec in records or []:
        code = rec.get("industry_code")
        if not code:
            logger.warning("Industry metadata row without industry_code skipped: %r", rec)
            continue
        try:
            profiles[code] = IndustryTemporalProfile.model_validate(
                {k: v for k, v in rec.items() if k != "industry_code" and v is not None}
            )
        except ValidationError as e:
            logger.warning("Industry metadata for %r skipped: %s", code, e.errors()[0]["msg"])
    return profiles


def resolve_industry_profile(industry: Optional[str], profiles: dict) -> IndustryTemporalProfile:
    if not industry:
        return DEFAULT_INDUSTRY_PROFILE
    return (profiles or {}).get(industry, DEFAULT_INDUSTRY_PROFILE)


def missing_dominant_horizons(inputs, dominant_horizons: Iterable) -> int:
    """Number of dominant windows with no relative-performance data. Unknown codes are not counted."""
    values = _as_inputs(inputs).window_values()
    missing = 0
    for code in dominant_horizons or []:
        code = str(code).strip().upper()
        if code in IFS_WINDOWS and values[code] is None:
            missing += 1
    return missing
