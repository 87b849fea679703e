# fundscore/ifs.py - Industry Fit Score: block-voting position classifier
import logging
from collections.abc import Mapping
from typing import Iterable, Optional

import pandas as pd

from fundscore.config import (
    CFG, CONFIDENCE_LABELS, IFS_BLOCKS, IFS_CONSISTENCY_LOW_COVERAGE,
    IFS_CONSISTENCY_MIXED, IFS_CONSISTENCY_UNANIMOUS, IFS_UNIVERSE_TIERS,
    IFS_WINDOWS,
)
from fundscore.schemas import IFSResult, RelativePerformanceInputs
from fundscore.utils import _tier

logger = logging.getLogger(__name__)


def _as_inputs(inputs) -> RelativePerformanceInputs:
    if isinstance(inputs, RelativePerformanceInputs):
        return inputs
    if inputs is None:
        return RelativePerformanceInputs()
    if isinstance(inputs, pd.Series):
        inputs = inputs.to_dict()
    if not isinstance(inputs, Mapping):
        logger.debug("IFS: unsupported input %r treated as no data", type(inputs).__name__)
        return RelativePerformanceInputs()
    return RelativePerformanceInputs.model_validate(dict(inputs))


def _as_horizon_filter(dominant_horizons) -> Optional[frozenset]:
    if dominant_horizons is None:
        return None
    if isinstance(dominant_horizons, str):
        dominant_horizons = [dominant_horizons]
    return frozenset(str(code).strip().upper() for code in dominant_horizons)


def block_vote(values: Iterable) -> tuple:
    """
    Majority vote of one block over its participating window values.

    Returns (vote, participating) where vote is +1 / -1 / 0 and participating
    counts non-null values. Zeros participate but favour neither side; a tie
    or an empty block votes 0.
    """
    pos = neg = participating = 0
    for v in values:
        if v is None:
            continue
        participating += 1
        if v > 0:
            pos += 1
        elif v < 0:
            neg += 1
    if pos > neg:
        return 1, participating
    if neg > pos:
        return -1, participating
    return 0, participating


def confidence_label(confidence: float) -> str:
    return _tier(confidence, CONFIDENCE_LABELS, "Low")


def ifs_confidence(available_windows: int, consistency: float,
                   sector_universe_size: Optional[int] = None) -> int:
    """
    Confidence 0-100 from three factors:
      availability (40%)  share of the 7 windows with data
      consistency  (40%)  agreement between block votes
      universe     (20%)  size of the sector universe the returns came from
    """
    if sector_universe_size is None:
        sector_universe_size = CFG["default_sector_universe_size"]
    w = CFG["ifs_confidence_weights"]
    availability = available_windows / len(IFS_WINDOWS) * 100
    universe     = _tier(sector_universe_size, IFS_UNIVERSE_TIERS, 25)
    raw = (availability * w["availability"]
           + consistency * w["consistency"]
           + universe * w["universe"])
    return int(min(max(round(raw), 0), 100))


def classify_industry_fit(inputs, dominant_horizons=None,
                          sector_universe_size: Optional[int] = None) -> Optional[IFSResult]:
    """
    Classify a company as leader / follower / laggard vs. its sector.

    Windows are grouped into 3 blocks (short 1M/3M, mid 6M/1Y/2Y, long 3Y/5Y),
    each casting one majority vote. With `dominant_horizons` only the listed
    windows participate and the result needs 2 blocks carrying data; without
    it (legacy mode) the result needs 2 blocks with a non-zero vote.
    Returns None when that validity gate fails.

    Pressure counts the blocks backing the position; a follower (tie) takes
    the larger side.
    """
    inputs  = _as_inputs(inputs)
    allowed = _as_horizon_filter(dominant_horizons)
    values  = inputs.window_values()

    votes = []
    blocks_with_data = 0
    for block, codes in IFS_BLOCKS.items():
        block_values = [values[c] for c in codes if allowed is None or c in allowed]
        vote, participating = block_vote(block_values)
        votes.append(vote)
        if participating > 0:
            blocks_with_data += 1

    nonzero_votes = sum(1 for v in votes if v != 0)
    if allowed is not None:
        if blocks_with_data < 2:
            logger.debug("IFS: %d block(s) with dominant-window data, need 2", blocks_with_data)
            return None
    elif nonzero_votes < 2:
        logger.debug("IFS: %d non-zero block vote(s), need 2", nonzero_votes)
        return None

    positive = votes.count(1)
    negative = votes.count(-1)
    if positive > negative:
        position, pressure = "leader", positive
    elif negative > positive:
        position, pressure = "laggard", negative
    else:
        position, pressure = "follower", max(positive, negative)

    # Mixed signal check takes precedence over low coverage
    if positive > 0 and negative > 0:
        consistency = IFS_CONSISTENCY_MIXED
    elif blocks_with_data < len(IFS_BLOCKS):
        consistency = IFS_CONSISTENCY_LOW_COVERAGE
    else:
        consistency = IFS_CONSISTENCY_UNANIMOUS

    confidence = ifs_confidence(inputs.available_windows(), consistency, sector_universe_size)
    label      = confidence_label(confidence)

    return IFSResult(
        position=position,
        pressure=pressure,
        confidence=confidence,
        confidence_label=label,
        interpretation=f"{position.capitalize()} with {pressure}/3 blocks supporting ({label} confidence)",
    )
