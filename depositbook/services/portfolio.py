"""
DepositBook — Portfolio Aggregation Service
Folds per-position accruals into per-bank groups and a grand total.
Totals are sums of the already-rounded line items, so a report's totals
always equal the visible sum of its rows.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from depositbook.core.decimal_utils import ZERO, display_round
from depositbook.services.accrual_engine import (
    AccrualResult,
    AccrualWindow,
    InterestAccrualEngine,
    Position,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionAccrual:
    position: Position
    full_term: AccrualResult
    in_window: AccrualResult
    accrued_to_cutoff: AccrualResult
    reserve: Decimal


@dataclass
class AccrualTotals:
    nominal: Decimal = ZERO
    full_term_interest: Decimal = ZERO
    in_window_interest: Decimal = ZERO
    accrued_interest: Decimal = ZERO
    booked_interest: Decimal = ZERO
    reserve: Decimal = ZERO

    def add(self, row: PositionAccrual) -> None:
        self.nominal += row.position.nominal
        self.full_term_interest += row.full_term.interest
        self.in_window_interest += row.in_window.interest
        self.accrued_interest += row.accrued_to_cutoff.interest
        self.booked_interest += row.position.booked_interest
        self.reserve += row.reserve

    def merge(self, other: "AccrualTotals") -> None:
        self.nominal += other.nominal
        self.full_term_interest += other.full_term_interest
        self.in_window_interest += other.in_window_interest
        self.accrued_interest += other.accrued_interest
        self.booked_interest += other.booked_interest
        self.reserve += other.reserve

    def rounded(self) -> "AccrualTotals":
        return AccrualTotals(
            nominal=display_round(self.nominal),
            full_term_interest=display_round(self.full_term_interest),
            in_window_interest=display_round(self.in_window_interest),
            accrued_interest=display_round(self.accrued_interest),
            booked_interest=display_round(self.booked_interest),
            reserve=display_round(self.reserve),
        )


@dataclass
class BankGroup:
    bank_name: str
    positions: List[PositionAccrual] = field(default_factory=list)
    totals: AccrualTotals = field(default_factory=AccrualTotals)


@dataclass
class PortfolioReport:
    window: Optional[AccrualWindow]
    cutoff: Optional[date]
    per_position: List[PositionAccrual]
    per_bank: Dict[str, BankGroup]
    grand_total: AccrualTotals


def bank_sort_key(bank_name: str) -> Tuple[str, str, str]:
    """
    Alphabetical key in the spirit of a locale collation: accents and case
    are ignored first, then case, then the raw name breaks ties.
    """
    folded = bank_name.casefold()
    stripped = "".join(
        ch
        for ch in unicodedata.normalize("NFKD", folded)
        if not unicodedata.combining(ch)
    )
    return stripped, folded, bank_name


class PortfolioAggregator:
    def __init__(self, engine: Optional[InterestAccrualEngine] = None) -> None:
        self.engine = engine or InterestAccrualEngine()

    def _position_accrual(
        self,
        position: Position,
        window: Optional[AccrualWindow],
        cutoff: Optional[date],
    ) -> PositionAccrual:
        full_term = self.engine.full_term(position)

        if window is None:
            # No reporting window selected: nothing falls into it
            in_window = AccrualResult(
                days=0, year_basis=full_term.year_basis, interest=display_round(ZERO)
            )
        else:
            in_window = self.engine.in_window(position, window)

        effective_cutoff = cutoff or position.end_date
        accrued = self.engine.accrued_to_cutoff(position, effective_cutoff)

        return PositionAccrual(
            position=position,
            full_term=full_term,
            in_window=in_window,
            accrued_to_cutoff=accrued,
            reserve=accrued.interest - position.booked_interest,
        )

    def aggregate(
        self,
        positions: Iterable[Position],
        window: Optional[AccrualWindow] = None,
        cutoff: Optional[date] = None,
    ) -> PortfolioReport:
        """
        Compute full-term, in-window, accrued-to-cutoff and reserve figures
        for every position, grouped by bank.

        Without a cutoff the window end is used; without either, each
        position accrues to its own end date.
        """
        if cutoff is None and window is not None:
            cutoff = window.end

        per_position = [
            self._position_accrual(position, window, cutoff) for position in positions
        ]

        groups: Dict[str, BankGroup] = {}
        for row in per_position:
            name = row.position.bank_name
            group = groups.setdefault(name, BankGroup(bank_name=name))
            group.positions.append(row)
            group.totals.add(row)

        grand_total = AccrualTotals()
        per_bank: Dict[str, BankGroup] = {}
        for name in sorted(groups, key=bank_sort_key):
            group = groups[name]
            grand_total.merge(group.totals)
            group.totals = group.totals.rounded()
            per_bank[name] = group

        logger.info(
            "Aggregated %d positions across %d banks (window=%s, cutoff=%s)",
            len(per_position),
            len(per_bank),
            window,
            cutoff,
        )

        return PortfolioReport(
            window=window,
            cutoff=cutoff,
            per_position=per_position,
            per_bank=per_bank,
            grand_total=grand_total.rounded(),
        )
