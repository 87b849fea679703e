# fundscore/config.py - Configuration, weights, thresholds, constants

# ════════════════════════════════════════════════════════════
#  CONFIGURATION
# ════════════════════════════════════════════════════════════
CFG = {
    # Competitive-advantage combiner: return persistence dominates the headline
    "ca_axis_weights": {
        "return_persistence":  0.50,
        "operating_stability": 0.30,
        "capital_discipline":  0.20,
    },
    "ca_axis1_cap":          20,     # combined score may not exceed axis1 + 20
    # IFS confidence blend
    "ifs_confidence_weights": {
        "availability": 0.40,
        "consistency":  0.40,
        "universe":     0.20,
    },
    "default_sector_universe_size": 50,
    "memory_window_years":          5,
}
assert abs(sum(CFG["ca_axis_weights"].values()) - 1.0) < 1e-6, "Axis weights must sum to 1.0"
assert abs(sum(CFG["ifs_confidence_weights"].values()) - 1.0) < 1e-6, "Confidence weights must sum to 1.0"


# ════════════════════════════════════════════════════════════
#  IFS WINDOWS + BLOCKS
# ════════════════════════════════════════════════════════════

# Window code → RelativePerformanceInputs field, in block order
IFS_WINDOWS = {
    "1M": "relative_vs_sector_1m",
    "3M": "relative_vs_sector_3m",
    "6M": "relative_vs_sector_6m",
    "1Y": "relative_vs_sector_1y",
    "2Y": "relative_vs_sector_2y",
    "3Y": "relative_vs_sector_3y",
    "5Y": "relative_vs_sector_5y",
}

IFS_BLOCKS = {
    "short": ("1M", "3M"),
    "mid":   ("6M", "1Y", "2Y"),
    "long":  ("3Y", "5Y"),
}

# Signal consistency scores (0-100)
IFS_CONSISTENCY_UNANIMOUS    = 100
IFS_CONSISTENCY_MIXED        = 70    # some blocks +1 and some -1
IFS_CONSISTENCY_LOW_COVERAGE = 40    # fewer than 3 blocks carried data

# (min sector universe size, score), checked top-down
IFS_UNIVERSE_TIERS = [
    (100, 100),
    (50,  75),
    (20,  50),
    (0,   25),
]

# (min confidence, label), checked top-down
CONFIDENCE_LABELS = [
    (75, "High"),
    (50, "Medium"),
    (0,  "Low"),
]


# ════════════════════════════════════════════════════════════
#  COMPETITIVE ADVANTAGE THRESHOLDS
# ════════════════════════════════════════════════════════════

CA_RETURN_FAILURE_THRESHOLD  = 0.05   # return below 5% counts as a failed year
CA_COHERENCE_REVENUE_GROWTH  = 0.05   # revenue growth that opens a coherence episode
CA_COHERENCE_MARGIN_DROP     = -0.01  # margin change at or below -1pp is a bad episode
CA_REINVESTMENT_IC_GROWTH    = 0.05   # invested-capital growth that counts as reinvestment
CA_REINVESTMENT_RETURN_SLACK = 0.01   # return may fall up to 1pp and still count as positive
CA_DILUTION_SHARE_GROWTH     = 0.01   # share growth above 1% counts as dilution
CA_SINGLE_DILUTION_DISCOUNT  = 0.40
CA_EFFICIENCY_DELTA_BOUND    = 0.30
CA_NEUTRAL_SUBSCORE          = 50.0

# Axis blends: (component → weight); negative weights are penalties
CA_RETURN_PERSISTENCE_BLEND  = {"level": 0.30, "stability": 0.45, "failure": -0.25}
CA_OPERATING_STABILITY_BLEND = {"stability": 0.50, "coherence": 0.30, "drawdown": -0.20}
CA_CAPITAL_DISCIPLINE_BLEND  = {"reinvestment": 0.40, "dilution": -0.35, "efficiency": 0.25}

# (min fiscal years, confidence), checked top-down
CA_YEARS_CONFIDENCE = [
    (10, 90),
    (8,  80),
    (5,  70),
    (3,  50),
    (1,  30),
]

# (upper bound exclusive, band); anything above the last bound is "strong"
CA_BANDS = [
    (40, "weak"),
    (70, "defendable"),
]
CA_TOP_BAND = "strong"

FY_PERIOD_TYPE = "FY"


# ════════════════════════════════════════════════════════════
#  INDUSTRY PROFILES
# ════════════════════════════════════════════════════════════

DEFAULT_INDUSTRY_PROFILE_FIELDS = {
    "cadence":                      "medium",
    "dominant_horizons":            ["6M", "1Y", "2Y", "3Y"],
    "structural_horizon_min_years": 3,
}

# Columns written by the frame scorers
IFS_RESULT_COLS = [
    "ifs_position", "ifs_pressure", "ifs_confidence",
    "ifs_confidence_label", "ifs_interpretation",
]

CA_RESULT_COLS = [
    "ca_score", "ca_band", "ca_confidence", "ca_years_analyzed",
    "ca_return_persistence", "ca_operating_stability", "ca_capital_discipline",
]
