"""
Tests for the context around the scorers: industry profiles, relative
returns, IFS memory and DataFrame batch scoring.
Run: python -m pytest test_context.py -v
"""

import logging
import os
import sys

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, os.path.dirname(__file__))

from fundscore import (
    DEFAULT_INDUSTRY_PROFILE,
    IFSResult,
    RelativePerformanceInputs,
    build_profile_map,
    build_relative_inputs,
    classify_industry_fit,
    missing_dominant_horizons,
    relative_returns,
    resolve_industry_profile,
    score_competitive_advantage_frame,
    score_ifs_frame,
    summarize_ifs_history,
)
from fundscore.config import CA_RESULT_COLS, IFS_RESULT_COLS, IFS_WINDOWS


# ═══════════════════════════════════════════════════
#  TEST: industry profiles
# ═══════════════════════════════════════════════════

METADATA = [
    {"industry_code": "SOFTWARE", "cadence": "fast",
     "dominant_horizons": ["1m", "3M", "6M"], "structural_horizon_min_years": 2},
    {"industry_code": "UTILITIES", "cadence": "slow",
     "dominant_horizons": ["1Y", "3Y", "5Y"], "structural_horizon_min_years": 5},
    {"industry_code": "BROKEN", "cadence": "turbo"},
    {"cadence": "slow", "dominant_horizons": ["5Y"]},
]


class TestIndustryProfiles:
    def test_default_profile(self):
        assert DEFAULT_INDUSTRY_PROFILE.cadence == "medium"
        assert DEFAULT_INDUSTRY_PROFILE.dominant_horizons == ["6M", "1Y", "2Y", "3Y"]
        assert DEFAULT_INDUSTRY_PROFILE.structural_horizon_min_years == 3

    def test_build_profile_map_skips_bad_rows(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fundscore.industry"):
            profiles = build_profile_map(METADATA)
        assert set(profiles) == {"SOFTWARE", "UTILITIES"}
        assert profiles["SOFTWARE"].dominant_horizons == ["1M", "3M", "6M"]
        assert len(caplog.records) == 2

    def test_missing_fields_take_defaults(self):
        profiles = build_profile_map([{"industry_code": "BANKS", "cadence": "slow",
                                       "dominant_horizons": None}])
        assert profiles["BANKS"].dominant_horizons == DEFAULT_INDUSTRY_PROFILE.dominant_horizons
        assert profiles["BANKS"].structural_horizon_min_years == 3

    def test_resolve(self):
        profiles = build_profile_map(METADATA)
        assert resolve_industry_profile("UTILITIES", profiles).cadence == "slow"
        assert resolve_industry_profile("UNKNOWN", profiles) == DEFAULT_INDUSTRY_PROFILE
        assert resolve_industry_profile(None, profiles) == DEFAULT_INDUSTRY_PROFILE
        assert resolve_industry_profile("UTILITIES", None) == DEFAULT_INDUSTRY_PROFILE

    def test_missing_dominant_horizons(self):
        inputs = RelativePerformanceInputs.from_windows({"6M": 1.0, "1Y": 0.0})
        # 2Y and 3Y have no data; the unknown 9Y code is not counted
        assert missing_dominant_horizons(inputs, ["6M", "1Y", "2Y", "3Y", "9Y"]) == 2
        assert missing_dominant_horizons(inputs, ["6m"]) == 0
        assert missing_dominant_horizons(inputs, []) == 0

    def test_profile_drives_classification(self):
        profiles = build_profile_map(METADATA)
        inputs = RelativePerformanceInputs.from_windows(
            {"1M": -4, "3M": -4, "6M": -4, "1Y": 3, "2Y": 3, "3Y": 3, "5Y": 3}
        )
        fast = resolve_industry_profile("SOFTWARE", profiles)
        slow = resolve_industry_profile("UTILITIES", profiles)
        assert classify_industry_fit(inputs, fast.dominant_horizons).position == "laggard"
        assert classify_industry_fit(inputs, slow.dominant_horizons).position == "leader"


# ═══════════════════════════════════════════════════
#  TEST: relative returns
# ═══════════════════════════════════════════════════

class TestRelativeReturns:
    def test_difference_per_window(self):
        out = relative_returns({"1m": 5.0, "3M": 2.0, "1Y": "n/a"},
                               {"1M": 1.0, "3M": None, "1Y": 3.0})
        assert out["1M"] == pytest.approx(4.0)
        assert out["3M"] is None
        assert out["1Y"] is None
        assert list(out) == list(IFS_WINDOWS)

    def test_nan_side_is_missing(self):
        out = relative_returns({"5Y": 10.0}, {"5Y": np.nan})
        assert out["5Y"] is None

    def test_extra_windows_dropped(self):
        out = relative_returns({"YTD": 3.0, "1W": 1.0}, {"YTD": 1.0, "1W": 0.0})
        assert all(v is None for v in out.values())

    def test_build_relative_inputs(self):
        inputs = build_relative_inputs({"1M": 6.0, "6M": 2.0}, {"1M": 1.0, "6M": 2.0})
        assert inputs.relative_vs_sector_1m == pytest.approx(5.0)
        assert inputs.relative_vs_sector_6m == 0.0
        assert inputs.available_windows() == 2

    def test_empty(self):
        assert build_relative_inputs(None, None) == RelativePerformanceInputs()


# ═══════════════════════════════════════════════════
#  TEST: IFS memory
# ═══════════════════════════════════════════════════

def snap(year, position):
    return {"snapshot_date": f"{year}-12-31", "position": position}


HISTORY = [
    snap(2021, "leader"), snap(2019, "laggard"), snap(2023, "leader"),
    snap(2020, "follower"), snap(2022, "leader"),
]


class TestIFSMemory:
    def test_distribution_and_streak(self):
        mem = summarize_ifs_history(HISTORY)
        assert mem.window_years == 5
        assert mem.observed_years == 5
        assert mem.distribution == {"leader": 3, "follower": 1, "laggard": 1}
        assert mem.current_streak.position == "leader"
        assert mem.current_streak.years == 3

    def test_timeline_is_chronological(self):
        mem = summarize_ifs_history(HISTORY)
        assert mem.timeline == ["laggard", "follower", "leader", "leader", "leader"]

    def test_window_keeps_newest(self):
        mem = summarize_ifs_history(HISTORY, window_years=2)
        assert mem.observed_years == 2
        assert mem.timeline == ["leader", "leader"]
        assert mem.distribution == {"leader": 2, "follower": 0, "laggard": 0}

    def test_fewer_snapshots_than_window(self):
        mem = summarize_ifs_history(HISTORY[:2], window_years=5)
        assert mem.observed_years == 2
        assert mem.current_streak.position == "leader"
        assert mem.current_streak.years == 1

    def test_invalid_positions_dropped(self):
        history = HISTORY + [snap(2024, "champion"), {"snapshot_date": "2025-12-31"}]
        assert summarize_ifs_history(history) == summarize_ifs_history(HISTORY)

    def test_ifs_results_accepted(self):
        result = IFSResult(position="laggard", pressure=2, confidence=60,
                           confidence_label="Medium", interpretation="")
        history = [
            {"snapshot_date": "2023-12-31", "ifs": result},
            {"snapshot_date": "2022-12-31", "ifs": {"position": "laggard"}},
            {"snapshot_date": "2021-12-31", "ifs": None},
        ]
        mem = summarize_ifs_history(history)
        assert mem.observed_years == 2
        assert mem.current_streak.position == "laggard"
        assert mem.current_streak.years == 2

    def test_one_position_per_calendar_year(self):
        # The latest snapshot of a year stands for that year
        history = [
            {"snapshot_date": "2024-03-31", "position": "leader"},
            {"snapshot_date": "2024-12-31", "position": "laggard"},
            {"snapshot_date": "2024-06-30", "position": "leader"},
            {"snapshot_date": "2023-03-31", "position": "leader"},
            {"snapshot_date": "2023-06-30", "position": "leader"},
            {"snapshot_date": "2023-09-30", "position": "leader"},
            snap(2022, "follower"), snap(2021, "follower"), snap(2020, "follower"),
        ]
        mem = summarize_ifs_history(history)
        assert mem.observed_years == 5
        assert mem.distribution == {"leader": 1, "follower": 3, "laggard": 1}
        assert mem.timeline == ["follower", "follower", "follower", "leader", "laggard"]
        assert mem.current_streak.position == "laggard"
        assert mem.current_streak.years == 1

    def test_window_counts_years_not_snapshots(self):
        history = [{"snapshot_date": f"2024-{m:02d}-28", "position": "leader"} for m in range(1, 13)]
        history.append(snap(2023, "follower"))
        mem = summarize_ifs_history(history, window_years=5)
        assert mem.observed_years == 2
        assert mem.timeline == ["follower", "leader"]
        assert mem.current_streak.years == 1

    def test_non_mapping_snapshots_dropped(self):
        assert summarize_ifs_history([None, "leader", 7] + HISTORY) == summarize_ifs_history(HISTORY)

    def test_empty(self):
        mem = summarize_ifs_history([])
        assert mem.observed_years == 0
        assert mem.timeline == []
        assert mem.distribution == {"leader": 0, "follower": 0, "laggard": 0}
        assert mem.current_streak.position is None
        assert mem.current_streak.years == 0


# ═══════════════════════════════════════════════════
#  TEST: DataFrame batch scoring
# ═══════════════════════════════════════════════════

def universe_frame():
    fields = list(IFS_WINDOWS.values())
    return pd.DataFrame({
        "ticker": ["AAA", "BBB", "CCC"],
        **{f: [10.0, np.nan, -3.0] for f in fields},
    })


class TestIFSFrame:
    def test_columns_added(self):
        df  = universe_frame()
        out = score_ifs_frame(df)
        for col in IFS_RESULT_COLS:
            assert col in out.columns
        assert "ifs_position" not in df.columns   # input untouched

    def test_rows_classified(self):
        out = score_ifs_frame(universe_frame())
        assert out.loc[0, "ifs_position"] == "leader"
        assert out.loc[0, "ifs_pressure"] == 3
        assert out.loc[0, "ifs_confidence"] == 95
        assert out.loc[2, "ifs_position"] == "laggard"

    def test_invalid_row_left_empty(self):
        out = score_ifs_frame(universe_frame())
        assert pd.isna(out.loc[1, "ifs_position"])
        assert pd.isna(out.loc[1, "ifs_pressure"])
        assert pd.isna(out.loc[1, "ifs_confidence"])

    def test_horizons_and_universe_columns(self):
        df = universe_frame()
        df["dominant_horizons"] = pd.Series(["1M,3M", None, ["6M", "3Y"]], dtype=object)
        df["sector_size"] = [150, 150, 150]
        out = score_ifs_frame(df, horizons_col="dominant_horizons", universe_size_col="sector_size")
        # Only the short block survives the filter
        assert pd.isna(out.loc[0, "ifs_position"])
        assert out.loc[2, "ifs_position"] == "laggard"
        assert out.loc[2, "ifs_pressure"] == 2
        # 0.4*100 + 0.4*40 (two blocks with data) + 0.2*100
        assert out.loc[2, "ifs_confidence"] == 76

    def test_empty_frame(self):
        out = score_ifs_frame(pd.DataFrame(columns=["ticker"]))
        assert len(out) == 0
        assert list(out.columns) == ["ticker"] + IFS_RESULT_COLS


def fundamentals_panel():
    rows = []
    for i in range(5):
        rows.append({"ticker": "AAA", "period_end_date": f"{2018 + i}-12-31", "period_type": "FY",
                     "roic": 0.20, "operating_margin": 0.15, "revenue": 100.0,
                     "invested_capital": 1000.0, "weighted_shares_out": 1000.0})
    for i in range(2):
        rows.append({"ticker": "BBB", "period_end_date": f"{2021 + i}-12-31", "period_type": "FY",
                     "roic": np.nan, "operating_margin": 0.05, "revenue": 50.0,
                     "invested_capital": np.nan, "weighted_shares_out": 500.0})
    rows.append({"ticker": "BBB", "period_end_date": "2022-06-30", "period_type": "Q",
                 "roic": 0.50, "operating_margin": 0.40, "revenue": 20.0,
                 "invested_capital": 100.0, "weighted_shares_out": 500.0})
    return pd.DataFrame(rows)


class TestCompetitiveAdvantageFrame:
    def test_one_row_per_ticker(self):
        out = score_competitive_advantage_frame(fundamentals_panel())
        assert list(out.columns) == ["ticker"] + CA_RESULT_COLS
        assert list(out["ticker"]) == ["AAA", "BBB"]

    def test_scores(self):
        out = score_competitive_advantage_frame(fundamentals_panel()).set_index("ticker")
        assert out.loc["AAA", "ca_return_persistence"] == pytest.approx(63.0)
        assert out.loc["AAA", "ca_years_analyzed"] == 5
        assert out.loc["AAA", "ca_confidence"] == 70
        assert out.loc["BBB", "ca_years_analyzed"] == 2
        assert out.loc["BBB", "ca_confidence"] == 30
        assert pd.isna(out.loc["BBB", "ca_return_persistence"])
        assert pd.isna(out.loc["BBB", "ca_capital_discipline"])

    def test_empty_history(self):
        out = score_competitive_advantage_frame(pd.DataFrame())
        assert out.empty
        assert list(out.columns) == ["ticker"] + CA_RESULT_COLS

    def test_missing_group_column(self, caplog):
        panel = fundamentals_panel().rename(columns={"ticker": "symbol"})
        with caplog.at_level(logging.WARNING, logger="fundscore.frames"):
            out = score_competitive_advantage_frame(panel)
        assert out.empty
        assert any("ticker" in r.getMessage() for r in caplog.records)

    def test_custom_group_column(self):
        panel = fundamentals_panel().rename(columns={"ticker": "symbol"})
        out = score_competitive_advantage_frame(panel, by="symbol")
        assert list(out["symbol"]) == ["AAA", "BBB"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
