"""
DepositBook — Day-Count Convention Library
Implements inclusive ACT/ACT with a day-weighted year basis, and 30/360.
All arithmetic uses Decimal; never float.

Both ends of a period count: a deposit running from 1 Jan to 31 Dec accrues
365 (or 366) days, and a deposit opened and closed on the same day accrues
one day. The same inclusive rule sizes the per-year pieces of the weighted
basis, so the pieces always add up to the period's day count.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Union

from depositbook.core.exceptions import UnsupportedConventionError

logger = logging.getLogger(__name__)

BASIS_365 = Decimal("365")
BASIS_366 = Decimal("366")
BASIS_360 = Decimal("360")


class DayCountConvention(str, Enum):
    """Day-count conventions a deposit position can carry."""

    ACTUAL_ACTUAL = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def parse(cls, value: Union[str, "DayCountConvention"]) -> "DayCountConvention":
        """Accept the enum itself, its value ('ACT/ACT') or its name ('thirty_360')."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper().replace(" ", "")
        for member in cls:
            if text in (member.value, member.name):
                return member
        raise UnsupportedConventionError(str(value))


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or (year % 400 == 0)


def calendar_year_basis(year: int) -> Decimal:
    return BASIS_366 if is_leap_year(year) else BASIS_365


def actual_days(start: date, end: date) -> int:
    """Calendar days in [start, end], both ends included. <= 0 when end < start."""
    return (end - start).days + 1


def thirty_360_days(start: date, end: date) -> int:
    """30/360 day count; each day-of-month is capped at 30 on its own."""
    y1, m1, d1 = start.year, start.month, min(start.day, 30)
    y2, m2, d2 = end.year, end.month, min(end.day, 30)
    return 360 * (y2 - y1) + 30 * (m2 - m1) + (d2 - d1) + 1


def day_count(
    start: date,
    end: date,
    convention: Union[str, DayCountConvention] = DayCountConvention.ACTUAL_ACTUAL,
) -> int:
    """
    Return the number of accrual days between start and end, inclusive.
    An inverted range (end < start) gives zero or a negative count; callers
    treat that as an empty period.
    """
    convention = DayCountConvention.parse(convention)
    if convention is DayCountConvention.THIRTY_360:
        return thirty_360_days(start, end)
    return actual_days(start, end)


def year_basis(start: date, end: date) -> Decimal:
    """
    Annualisation denominator for ACT/ACT.

    Within one calendar year this is 365 or 366. A period spanning several
    years is split at each 31 Dec; each piece contributes its own year's
    length weighted by its inclusive day count:

        basis = Σ(days_i × basis_i) / Σ(days_i)

    An inverted range has no pieces and falls back to 365.
    """
    if start.year == end.year:
        return calendar_year_basis(start.year)

    total_days = 0
    weighted = Decimal(0)
    for year in range(start.year, end.year + 1):
        piece_start = max(start, date(year, 1, 1))
        piece_end = min(end, date(year, 12, 31))
        days = actual_days(piece_start, piece_end)
        if days <= 0:
            continue
        total_days += days
        weighted += days * calendar_year_basis(year)

    if total_days == 0:
        logger.debug("Empty year partition for %s..%s, using 365", start, end)
        return BASIS_365

    return weighted / Decimal(total_days)


def basis_for(
    start: date,
    end: date,
    convention: Union[str, DayCountConvention] = DayCountConvention.ACTUAL_ACTUAL,
) -> Decimal:
    """Year basis for a period under the given convention (360 for 30/360)."""
    if DayCountConvention.parse(convention) is DayCountConvention.THIRTY_360:
        return BASIS_360
    return year_basis(start, end)
