# fundscore/relative.py - Relative performance vs. sector / market
from fundscore.config import IFS_WINDOWS
from fundscore.schemas import RelativePerformanceInputs
from fundscore.utils import _safe


def _by_code(returns) -> dict:
    return {str(k).strip().upper(): v for k, v in (returns or {}).items()}


def relative_returns(stock_returns, benchmark_returns) -> dict:
    """
    Per-window excess return: stock % minus benchmark % over the 7 IFS windows.
    A window is None unless both sides carry a finite number.
    """
    stock, bench = _by_code(stock_returns), _by_code(benchmark_returns)
    out = {}
    for code in IFS_WINDOWS:
        s = _safe(stock.get(code))
        b = _safe(bench.get(code))
        out[code] = s - b if s is not None and b is not None else None
    return out


def build_relative_inputs(stock_returns, sector_returns) -> RelativePerformanceInputs:
    """Window returns keyed by code ({"1M": 4.2, ...}) → IFS inputs vs. sector."""
    return RelativePerformanceInputs.from_windows(relative_returns(stock_returns, sector_returns))
