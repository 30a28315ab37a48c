"""
DepositBook — API v1: Deposit Positions
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from depositbook.config import get_settings
from depositbook.core.day_count import DayCountConvention
from depositbook.services.accrual_engine import Position
from depositbook.services.ingestion import parse_date
from depositbook.services.position_store import PositionStore, get_position_store

router = APIRouter(prefix="/positions", tags=["positions"])


def parse_amount_field(value: str, name: str, allow_negative: bool = False) -> Decimal:
    """Form-boundary check for decimal amounts sent as strings."""
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError):
        raise HTTPException(status_code=422, detail=f"{name} must be a decimal")
    if not amount.is_finite():
        raise HTTPException(status_code=422, detail=f"{name} must be finite")
    if not allow_negative and amount < 0:
        raise HTTPException(status_code=422, detail=f"{name} must not be negative")
    return amount


class PositionCreateRequest(BaseModel):
    bank_name: str
    account_number: str
    start_date: date
    end_date: date
    nominal: str
    annual_rate_percent: str
    day_count_convention: Optional[str] = None
    booked_interest: str = "0"

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def truncate_timestamp(cls, v):
        # Stored front-end dates are full timestamps; only the calendar date counts
        return parse_date(v)

    def to_position(self) -> Position:
        convention = self.day_count_convention or get_settings().default_convention
        return Position(
            bank_name=self.bank_name,
            account_number=self.account_number,
            start_date=self.start_date,
            end_date=self.end_date,
            nominal=parse_amount_field(self.nominal, "nominal"),
            annual_rate_percent=parse_amount_field(
                self.annual_rate_percent, "annual_rate_percent"
            ),
            day_count_convention=DayCountConvention.parse(convention),
            booked_interest=parse_amount_field(self.booked_interest, "booked_interest"),
        )


class BookedInterestUpdate(BaseModel):
    booked_interest: str


class PositionResponse(BaseModel):
    index: int
    bank_name: str
    account_number: str
    start_date: str
    end_date: str
    nominal: str
    annual_rate_percent: str
    day_count_convention: str
    booked_interest: str

    @classmethod
    def build(cls, index: int, position: Position) -> "PositionResponse":
        return cls(
            index=index,
            bank_name=position.bank_name,
            account_number=position.account_number,
            start_date=str(position.start_date),
            end_date=str(position.end_date),
            nominal=str(position.nominal),
            annual_rate_percent=str(position.annual_rate_percent),
            day_count_convention=position.day_count_convention.value,
            booked_interest=str(position.booked_interest),
        )


@router.get("", response_model=List[PositionResponse])
def list_positions(store: PositionStore = Depends(get_position_store)):
    return [PositionResponse.build(i, p) for i, p in enumerate(store.list())]


@router.post("", response_model=PositionResponse, status_code=201)
def add_position(
    req: PositionCreateRequest,
    store: PositionStore = Depends(get_position_store),
):
    position = req.to_position()
    index = store.add(position)
    return PositionResponse.build(index, position)


@router.get("/{index}", response_model=PositionResponse)
def get_position(index: int, store: PositionStore = Depends(get_position_store)):
    return PositionResponse.build(index, store.get(index))


@router.delete("/{index}", response_model=PositionResponse)
def delete_position(index: int, store: PositionStore = Depends(get_position_store)):
    removed = store.delete(index)
    return PositionResponse.build(index, removed)


@router.patch("/{index}/booked-interest", response_model=PositionResponse)
def update_booked_interest(
    index: int,
    req: BookedInterestUpdate,
    store: PositionStore = Depends(get_position_store),
):
    booked = parse_amount_field(req.booked_interest, "booked_interest")
    updated = store.set_booked_interest(index, booked)
    return PositionResponse.build(index, updated)
