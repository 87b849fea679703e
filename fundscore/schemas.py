# fundscore/schemas.py - pydantic input + result models
#
# Numeric inputs are coerced leniently: anything that is not a finite number
# becomes None ("no data") instead of raising. Results carry the score ranges
# the engines guarantee.

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fundscore.config import DEFAULT_INDUSTRY_PROFILE_FIELDS, IFS_WINDOWS
from fundscore.utils import _safe

Position = Literal["leader", "follower", "laggard"]
ConfidenceLabel = Literal["High", "Medium", "Low"]
Band = Literal["weak", "defendable", "strong"]


# ════════════════════════════════════════════════════════════
#  INPUTS
# ════════════════════════════════════════════════════════════

class RelativePerformanceInputs(BaseModel):
    """Signed % performance vs. sector for each of the 7 IFS windows.

    None means no data for the window, which is not the same as 0 (flat).
    Keys for windows outside the 7 (e.g. 1W, YTD) are ignored.
    """
    relative_vs_sector_1m: Optional[float] = None
    relative_vs_sector_3m: Optional[float] = None
    relative_vs_sector_6m: Optional[float] = None
    relative_vs_sector_1y: Optional[float] = None
    relative_vs_sector_2y: Optional[float] = None
    relative_vs_sector_3y: Optional[float] = None
    relative_vs_sector_5y: Optional[float] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def finite_or_none(cls, v):
        return _safe(v)

    @classmethod
    def from_windows(cls, windows: dict) -> "RelativePerformanceInputs":
        """Build from window-code keys ({"1M": 2.5, "1Y": -4.0, ...})."""
        data = {}
        for code, val in (windows or {}).items():
            field = IFS_WINDOWS.get(str(code).upper())
            if field is not None:
                data[field] = val
        return cls(**data)

    def window_values(self) -> dict:
        return {code: getattr(self, field) for code, field in IFS_WINDOWS.items()}

    def available_windows(self) -> int:
        return sum(1 for v in self.window_values().values() if v is not None)


class CompetitiveAdvantageHistoryRow(BaseModel):
    """One fiscal period of fundamentals."""
    period_end_date: Optional[str] = None
    period_type: Optional[str] = None   # FY | Q | TTM

    roic: Optional[float] = None
    roe: Optional[float] = None
    operating_margin: Optional[float] = None
    net_margin: Optional[float] = None
    revenue: Optional[float] = None
    invested_capital: Optional[float] = None
    free_cash_flow: Optional[float] = None
    capex: Optional[float] = None
    weighted_shares_out: Optional[float] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("period_end_date", mode="before")
    @classmethod
    def iso_date(cls, v):
        if v is None or (isinstance(v, float) and v != v):   # NaN from frames
            return None
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        return str(v)

    @field_validator("period_type", mode="before")
    @classmethod
    def upper_period_type(cls, v):
        if v is None or not isinstance(v, str) or not v.strip():
            return None
        return v.strip().upper()

    @field_validator("roic", "roe", "operating_margin", "net_margin", "revenue",
                     "invested_capital", "free_cash_flow", "capex",
                     "weighted_shares_out", mode="before")
    @classmethod
    def finite_or_none(cls, v):
        return _safe(v)


class IndustryTemporalProfile(BaseModel):
    """Which horizons matter for an industry, and how fast it moves."""
    cadence: Literal["fast", "medium", "slow"] = DEFAULT_INDUSTRY_PROFILE_FIELDS["cadence"]
    dominant_horizons: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INDUSTRY_PROFILE_FIELDS["dominant_horizons"])
    )
    structural_horizon_min_years: int = Field(
        DEFAULT_INDUSTRY_PROFILE_FIELDS["structural_horizon_min_years"], ge=0
    )

    @field_validator("dominant_horizons", mode="before")
    @classmethod
    def upper_codes(cls, v):
        if v is None:
            return []
        return [str(code).strip().upper() for code in v]


# ════════════════════════════════════════════════════════════
#  RESULTS
# ════════════════════════════════════════════════════════════

class IFSResult(BaseModel):
    """Industry-fit position of a company within its sector."""
    position: Position
    pressure: int = Field(..., ge=0, le=3)
    confidence: int = Field(..., ge=0, le=100)
    confidence_label: ConfidenceLabel
    interpretation: str

    model_config = ConfigDict(frozen=True)


class CompetitiveAdvantageAxes(BaseModel):
    return_persistence: Optional[float] = Field(None, ge=0, le=100)
    operating_stability: Optional[float] = Field(None, ge=0, le=100)
    capital_discipline: Optional[float] = Field(None, ge=0, le=100)

    model_config = ConfigDict(frozen=True)


class CompetitiveAdvantageResult(BaseModel):
    score: Optional[float] = Field(None, ge=0, le=100)
    band: Optional[Band] = None
    confidence: int = Field(0, ge=0, le=100)
    axes: CompetitiveAdvantageAxes = CompetitiveAdvantageAxes()
    years_analyzed: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def band_matches_score(self) -> "CompetitiveAdvantageResult":
        if (self.score is None) != (self.band is None):
            raise ValueError("band must be set exactly when score is set")
        return self


class IFSStreak(BaseModel):
    position: Optional[Position] = None
    years: int = Field(0, ge=0)


class IFSMemory(BaseModel):
    """Recent IFS history: how often each position occurred and the current run."""
    window_years: int = Field(..., ge=1)
    observed_years: int = Field(..., ge=0)
    distribution: dict[str, int]
    timeline: list[Position] = []
    current_streak: IFSStreak = IFSStreak()
