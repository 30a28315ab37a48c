"""
DepositBook — Interest Accrual Engine
Turns a deposit position and a date window into a rounded interest amount.
Stateless: every figure is recomputed from the position on each call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from depositbook.core.day_count import DayCountConvention, basis_for, day_count
from depositbook.core.decimal_utils import ZERO, display_round, monetary

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Position:
    bank_name: str
    account_number: str
    start_date: date
    end_date: date
    nominal: Decimal
    annual_rate_percent: Decimal  # 5 means 5% p.a.
    day_count_convention: DayCountConvention = DayCountConvention.ACTUAL_ACTUAL
    booked_interest: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "nominal", monetary(self.nominal))
        object.__setattr__(
            self, "annual_rate_percent", monetary(self.annual_rate_percent)
        )
        object.__setattr__(self, "booked_interest", monetary(self.booked_interest))
        object.__setattr__(
            self,
            "day_count_convention",
            DayCountConvention.parse(self.day_count_convention),
        )

    @property
    def term(self) -> "AccrualWindow":
        return AccrualWindow(self.start_date, self.end_date)

    @property
    def term_months(self) -> int:
        """Whole calendar months from start to end (negative when inverted)."""
        delta = relativedelta(self.end_date, self.start_date)
        return delta.years * 12 + delta.months


@dataclass(frozen=True)
class AccrualWindow:
    start: date
    end: date

    @property
    def is_empty(self) -> bool:
        return self.end < self.start


@dataclass(frozen=True)
class AccrualResult:
    days: int
    year_basis: Decimal
    interest: Decimal


class InterestAccrualEngine:
    """
    Simple (non-compounding) interest on a fixed-term deposit:

        interest = nominal × rate% / 100 × days / basis

    rounded to cents, ties away from zero. Windows are clipped to the
    deposit's term first; an empty or inverted window yields a zero result
    instead of an error, so a half-edited position never breaks a report.
    """

    # ── Window handling ────────────────────────────────────────────────────────

    @staticmethod
    def clip_window(position: Position, window: AccrualWindow) -> AccrualWindow:
        return AccrualWindow(
            start=max(window.start, position.start_date),
            end=min(window.end, position.end_date),
        )

    # ── Core accrual ───────────────────────────────────────────────────────────

    def accrue(
        self, position: Position, window: Optional[AccrualWindow] = None
    ) -> AccrualResult:
        convention = position.day_count_convention
        clipped = self.clip_window(position, window or position.term)
        basis = basis_for(clipped.start, clipped.end, convention)

        if clipped.is_empty:
            logger.debug(
                "%s/%s: empty window %s..%s, zero interest",
                position.bank_name,
                position.account_number,
                clipped.start,
                clipped.end,
            )
            return AccrualResult(days=0, year_basis=basis, interest=display_round(ZERO))

        days = day_count(clipped.start, clipped.end, convention)
        if days <= 0:
            return AccrualResult(days=0, year_basis=basis, interest=display_round(ZERO))

        # One division at the end keeps exact ties (x.xx5) exact before rounding
        raw = (
            position.nominal
            * position.annual_rate_percent
            * Decimal(days)
            / (HUNDRED * basis)
        )
        interest = display_round(raw)

        logger.debug(
            "%s/%s: %s × %s%% × %d/%s (%s, %s..%s) = %s → %s",
            position.bank_name,
            position.account_number,
            position.nominal,
            position.annual_rate_percent,
            days,
            basis,
            convention.value,
            clipped.start,
            clipped.end,
            raw,
            interest,
        )
        return AccrualResult(days=days, year_basis=basis, interest=interest)

    # ── Derived queries ────────────────────────────────────────────────────────

    def full_term(self, position: Position) -> AccrualResult:
        return self.accrue(position, position.term)

    def accrued_to_cutoff(self, position: Position, cutoff: date) -> AccrualResult:
        """Interest earned from the start of the term up to and including cutoff."""
        return self.accrue(position, AccrualWindow(position.start_date, cutoff))

    def in_window(self, position: Position, window: AccrualWindow) -> AccrualResult:
        """Interest falling into a reporting window (e.g. a quarter)."""
        return self.accrue(position, window)

    def reserve(self, position: Position, cutoff: date) -> Decimal:
        """
        Accrued-to-cutoff interest not yet booked. Negative when more has
        been booked than accrued; never clamped.
        """
        accrued = self.accrued_to_cutoff(position, cutoff).interest
        return accrued - position.booked_interest
