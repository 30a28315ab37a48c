"""
DepositBook — API v1: Portfolio Accrual Report
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from depositbook.core.exceptions import IncompleteWindowError
from depositbook.services.accrual_engine import AccrualWindow
from depositbook.services.ingestion import parse_date
from depositbook.services.portfolio import (
    AccrualTotals,
    PortfolioAggregator,
    PositionAccrual,
)
from depositbook.services.position_store import PositionStore, get_position_store

router = APIRouter(prefix="/reports", tags=["reports"])
aggregator = PortfolioAggregator()


class TotalsResponse(BaseModel):
    nominal: str
    full_term_interest: str
    in_window_interest: str
    accrued_interest: str
    booked_interest: str
    reserve: str

    @classmethod
    def build(cls, totals: AccrualTotals) -> "TotalsResponse":
        return cls(
            nominal=str(totals.nominal),
            full_term_interest=str(totals.full_term_interest),
            in_window_interest=str(totals.in_window_interest),
            accrued_interest=str(totals.accrued_interest),
            booked_interest=str(totals.booked_interest),
            reserve=str(totals.reserve),
        )


class PositionLine(BaseModel):
    index: int
    bank_name: str
    account_number: str
    start_date: str
    end_date: str
    nominal: str
    annual_rate_percent: str
    day_count_convention: str
    term_months: int
    full_term_days: int
    full_term_interest: str
    in_window_days: int
    in_window_interest: str
    accrued_days: int
    accrued_interest: str
    booked_interest: str
    reserve: str

    @classmethod
    def build(cls, index: int, row: PositionAccrual) -> "PositionLine":
        p = row.position
        return cls(
            index=index,
            bank_name=p.bank_name,
            account_number=p.account_number,
            start_date=str(p.start_date),
            end_date=str(p.end_date),
            nominal=str(p.nominal),
            annual_rate_percent=str(p.annual_rate_percent),
            day_count_convention=p.day_count_convention.value,
            term_months=p.term_months,
            full_term_days=row.full_term.days,
            full_term_interest=str(row.full_term.interest),
            in_window_days=row.in_window.days,
            in_window_interest=str(row.in_window.interest),
            accrued_days=row.accrued_to_cutoff.days,
            accrued_interest=str(row.accrued_to_cutoff.interest),
            booked_interest=str(p.booked_interest),
            reserve=str(row.reserve),
        )


class BankGroupResponse(BaseModel):
    bank_name: str
    position_indexes: List[int]
    totals: TotalsResponse


class PortfolioReportResponse(BaseModel):
    window_start: Optional[str]
    window_end: Optional[str]
    cutoff: Optional[str]
    positions: List[PositionLine]
    banks: List[BankGroupResponse]
    grand_total: TotalsResponse


def _query_date(value: Optional[str], name: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"{name} must be an ISO-8601 date")


@router.get("/portfolio", response_model=PortfolioReportResponse)
def portfolio_report(
    window_start: Optional[str] = None,
    window_end: Optional[str] = None,
    cutoff: Optional[str] = None,
    store: PositionStore = Depends(get_position_store),
):
    window_start = _query_date(window_start, "window_start")
    window_end = _query_date(window_end, "window_end")
    cutoff = _query_date(cutoff, "cutoff")

    if (window_start is None) != (window_end is None):
        raise IncompleteWindowError(window_start, window_end)

    window = None
    if window_start is not None and window_end is not None:
        window = AccrualWindow(window_start, window_end)

    report = aggregator.aggregate(store.list(), window=window, cutoff=cutoff)

    # per_position keeps store order, so list position doubles as the store index
    index_of = {id(row): i for i, row in enumerate(report.per_position)}
    return PortfolioReportResponse(
        window_start=str(window.start) if window else None,
        window_end=str(window.end) if window else None,
        cutoff=str(report.cutoff) if report.cutoff else None,
        positions=[PositionLine.build(i, row) for i, row in enumerate(report.per_position)],
        banks=[
            BankGroupResponse(
                bank_name=group.bank_name,
                position_indexes=[index_of[id(row)] for row in group.positions],
                totals=TotalsResponse.build(group.totals),
            )
            for group in report.per_bank.values()
        ],
        grand_total=TotalsResponse.build(report.grand_total),
    )
