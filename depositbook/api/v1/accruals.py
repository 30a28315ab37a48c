"""
DepositBook — API v1: Ad-hoc Interest Accrual
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, field_validator

from depositbook.api.v1.positions import PositionCreateRequest
from depositbook.core.exceptions import IncompleteWindowError
from depositbook.services.accrual_engine import AccrualWindow, InterestAccrualEngine
from depositbook.services.ingestion import parse_date

router = APIRouter(prefix="/accruals", tags=["accruals"])
engine = InterestAccrualEngine()


class AccrualRequest(PositionCreateRequest):
    window_start: Optional[date] = None
    window_end: Optional[date] = None

    @field_validator("window_start", "window_end", mode="before")
    @classmethod
    def truncate_window_timestamp(cls, v):
        return None if v is None else parse_date(v)


class AccrualResponse(BaseModel):
    window_start: str
    window_end: str
    days: int
    year_basis: str
    interest: str
    convention_used: str
    reserve: str


@router.post("/calculate", response_model=AccrualResponse)
def calculate_accrual(req: AccrualRequest):
    if (req.window_start is None) != (req.window_end is None):
        raise IncompleteWindowError(req.window_start, req.window_end)

    position = req.to_position()
    window = position.term
    if req.window_start is not None and req.window_end is not None:
        window = AccrualWindow(req.window_start, req.window_end)

    clipped = engine.clip_window(position, window)
    result = engine.accrue(position, window)
    return AccrualResponse(
        window_start=str(clipped.start),
        window_end=str(clipped.end),
        days=result.days,
        year_basis=str(result.year_basis),
        interest=str(result.interest),
        convention_used=position.day_count_convention.value,
        reserve=str(engine.reserve(position, window.end)),
    )
