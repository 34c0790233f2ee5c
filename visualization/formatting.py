# kpi_summary_root/visualization/formatting.py
# KPI SUMMARY ENGINE - NUMBER FORMATTING

"""
Number formatting shared by every figure a KPI card shows.

``build_global_formatter`` closes over the configured prefix, suffix,
decimals and abbreviation flag and returns one function; the engine embeds
that function in its result so renderers format ad hoc numbers (axis ticks,
tooltips) exactly like the headline value.
"""

import logging
import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Callable, Optional

from config import KpiConfig

logger = logging.getLogger(__name__)

NumberFormatter = Callable[[Optional[float]], str]

_TRAILING_ZERO_FRACTION = re.compile(r'\.0+$')
_SCALES = ((1e9, 'B'), (1e6, 'M'), (1e3, 'K'))


def _is_null(n: Optional[float]) -> bool:
    return n is None or (isinstance(n, float) and math.isnan(n))


def quantize_half_up(n: float, places: int) -> Decimal:
    """
    Rounds ``n`` to ``places`` fraction digits with ties going away from zero,
    so 1.25 -> 1.3 and 2.5 -> 3. Works on the shortest decimal form of the
    float, so a displayed tie is always treated as a tie.
    """
    value = Decimal(repr(float(n)))
    if not value.is_finite():
        return value
    context = Context(prec=max(28, value.adjusted() + places + 2))
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP, context=context)


def abbreviate_number(n: Optional[float], decimals: Optional[int] = -1, prefix: str = '', suffix: str = '') -> str:
    """
    Scales ``n`` to B/M/K with a matching tag, e.g. 1500 -> '1.5K'.

    With automatic decimals (None or negative) a scaled value gets one
    fraction digit and an unscaled one none. An all-zero fraction is dropped.
    """
    if _is_null(n):
        return ''
    short, tag = float(n), ''
    for threshold, scale_tag in _SCALES:
        if abs(n) >= threshold:
            short, tag = n / threshold, scale_tag
            break
    places = decimals if decimals is not None and decimals >= 0 else (1 if tag else 0)
    number = _TRAILING_ZERO_FRACTION.sub('', f"{quantize_half_up(short, places):.{places}f}")
    return f"{prefix or ''}{number}{tag}{suffix or ''}"


def build_global_formatter(config: Optional[KpiConfig] = None) -> NumberFormatter:
    """
    Builds the single formatter every number of one KPI is rendered with.

    Without abbreviation numbers are grouped in thousands with ',' and shown
    with exactly the configured fraction digits. Grouping is fixed rather than
    taken from the process locale, so one result renders the same on every host.
    """
    config = config or KpiConfig()
    prefix, suffix = config.fmt_prefix, config.fmt_suffix
    decimals = config.number_decimals
    abbreviate = config.fmt_abbreviate

    def format_number(n: Optional[float]) -> str:
        if _is_null(n):
            return ''
        if abbreviate:
            return abbreviate_number(n, decimals, prefix, suffix)
        places = decimals or 0
        return f"{prefix}{quantize_half_up(n, places):,.{places}f}{suffix}"

    return format_number


def format_number_compact(n: Optional[float]) -> str:
    """Compact display without configuration: 2.5M, 1.2K, 1,234 or up to two decimals."""
    if _is_null(n):
        return ''
    if abs(n) >= 1e6:
        return _TRAILING_ZERO_FRACTION.sub('', f"{quantize_half_up(n / 1e6, 1):.1f}") + 'M'
    if abs(n) >= 1e3:
        return _TRAILING_ZERO_FRACTION.sub('', f"{quantize_half_up(n / 1e3, 1):.1f}") + 'K'
    if float(n).is_integer():
        return f"{int(n):,}"
    return f"{quantize_half_up(n, 2):,.2f}".rstrip('0').rstrip('.')


def format_delta(delta: Optional[float], decimals: int) -> str:
    """Magnitude of a percentage delta at ``decimals`` places, e.g. -12.345 -> '12.3'."""
    if _is_null(delta):
        return ''
    places = max(decimals, 0)
    return f"{quantize_half_up(abs(delta), places):.{places}f}"
