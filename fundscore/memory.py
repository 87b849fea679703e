# fundscore/memory.py - IFS memory: position distribution + current streak
import logging
from collections.abc import Mapping

from fundscore.config import CFG
from fundscore.schemas import IFSMemory, IFSResult, IFSStreak

logger = logging.getLogger(__name__)

_POSITIONS = ("leader", "follower", "laggard")


def _position_of(snapshot):
    if not isinstance(snapshot, Mapping):
        return None
    pos = snapshot.get("position")
    if pos is None:
        ifs = snapshot.get("ifs")
        if isinstance(ifs, IFSResult):
            pos = ifs.position
        elif isinstance(ifs, dict):
            pos = ifs.get("position")
    return pos if pos in _POSITIONS else None


def summarize_ifs_history(snapshots, window_years: int = None) -> IFSMemory:
    """
    Summarise the IFS positions of one ticker over its most recent years.

    `snapshots` are mappings with a `snapshot_date` (ISO string) and either a
    `position` or an `ifs` result. Snapshots without a valid position are
    dropped, each calendar year is represented by its latest snapshot, and at
    most `window_years` of the newest years are kept. The window is a
    maximum lookback, not a minimum requirement.
    """
    if window_years is None:
        window_years = CFG["memory_window_years"]

    snapshots = list(snapshots or [])
    valid = []
    for snap in snapshots:
        pos = _position_of(snap)
        if pos is None:
            continue
        valid.append((str(snap.get("snapshot_date") or ""), pos))
    if len(valid) < len(snapshots):
        logger.debug("IFS memory: %d snapshot(s) without a position dropped",
                     len(snapshots) - len(valid))

    # Newest first; the first snapshot seen for a year is that year's last
    valid.sort(key=lambda s: s[0], reverse=True)
    by_year = {}
    for snapshot_date, pos in valid:
        by_year.setdefault(snapshot_date[:4], pos)
    recent = list(by_year.values())[:window_years]

    distribution = {p: recent.count(p) for p in _POSITIONS}

    streak_pos, streak_years = (recent[0], 0) if recent else (None, 0)
    for pos in recent:
        if pos != streak_pos:
            break
        streak_years += 1

    return IFSMemory(
        window_years=window_years,
        observed_years=len(recent),
        distribution=distribution,
        timeline=list(reversed(recent)),
        current_streak=IFSStreak(position=streak_pos, years=streak_years),
    )
