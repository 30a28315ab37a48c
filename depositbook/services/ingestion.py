"""
DepositBook — Position Feed
Parses the JSON array of deposit positions kept by the desktop front end
and writes it back. Accepts snake_case, camelCase and the legacy German
keys of the older data files.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from dateutil import parser as dateutil_parser

from depositbook.core.day_count import DayCountConvention
from depositbook.core.decimal_utils import monetary
from depositbook.core.exceptions import (
    InvalidPositionRecordError,
    UnsupportedConventionError,
)
from depositbook.services.accrual_engine import Position

logger = logging.getLogger(__name__)


# ─── Field aliases ────────────────────────────────────────────────────────────

FIELD_ALIASES: Dict[str, tuple] = {
    "bank_name": ("bank_name", "bankName"),
    "account_number": ("account_number", "accountNumber", "kontoNumber"),
    "start_date": ("start_date", "startDate", "startDatum"),
    "end_date": ("end_date", "endDate", "endDatum"),
    "nominal": ("nominal",),
    "annual_rate_percent": ("annual_rate_percent", "annualRatePercent", "zinssatz"),
    "day_count_convention": ("day_count_convention", "dayCountConvention"),
    "booked_interest": (
        "booked_interest",
        "bookedInterest",
        "verbuchteRueckstellung",
    ),
}

REQUIRED_FIELDS = (
    "bank_name",
    "account_number",
    "start_date",
    "end_date",
    "nominal",
    "annual_rate_percent",
)


def _lookup(record: Mapping[str, Any], name: str) -> Optional[Any]:
    for key in FIELD_ALIASES[name]:
        if key in record and record[key] is not None:
            return record[key]
    return None


# ─── Scalar parsing ───────────────────────────────────────────────────────────


def parse_date(value: Union[str, date, datetime]) -> date:
    """
    Parse an ISO-8601 date or timestamp and keep only the calendar date.
    '2024-03-31T22:00:00.000Z' becomes 2024-03-31: the time of day and the
    offset are dropped, not applied.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected an ISO-8601 string, got {type(value).__name__}")
    return dateutil_parser.isoparse(value.strip()).date()


def _parse_amount(value: Any) -> Decimal:
    amount = monetary(value)
    if not amount.is_finite():
        raise ValueError(f"amount {value!r} is not finite")
    return amount


# ─── Records ──────────────────────────────────────────────────────────────────


def parse_position(record: Mapping[str, Any], index: Optional[int] = None) -> Position:
    if not isinstance(record, Mapping):
        raise InvalidPositionRecordError("record is not a JSON object", index=index)

    values: Dict[str, Any] = {}
    for name in REQUIRED_FIELDS:
        raw = _lookup(record, name)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise InvalidPositionRecordError("missing", index=index, field=name)
        values[name] = raw

    parsed: Dict[str, Any] = {
        "bank_name": str(values["bank_name"]),
        "account_number": str(values["account_number"]),
    }

    for name in ("start_date", "end_date"):
        try:
            parsed[name] = parse_date(values[name])
        except (ValueError, OverflowError) as exc:
            raise InvalidPositionRecordError(str(exc), index=index, field=name) from exc

    for name in ("nominal", "annual_rate_percent"):
        try:
            parsed[name] = _parse_amount(values[name])
        except (TypeError, ValueError) as exc:
            raise InvalidPositionRecordError(str(exc), index=index, field=name) from exc

    booked = _lookup(record, "booked_interest")
    try:
        parsed["booked_interest"] = _parse_amount(booked if booked is not None else 0)
    except (TypeError, ValueError) as exc:
        raise InvalidPositionRecordError(
            str(exc), index=index, field="booked_interest"
        ) from exc

    convention = _lookup(record, "day_count_convention")
    try:
        parsed["day_count_convention"] = DayCountConvention.parse(
            convention if convention is not None else DayCountConvention.ACTUAL_ACTUAL
        )
    except UnsupportedConventionError as exc:
        raise InvalidPositionRecordError(
            exc.message, index=index, field="day_count_convention"
        ) from exc

    return Position(**parsed)


def parse_positions(records: Iterable[Mapping[str, Any]]) -> List[Position]:
    return [parse_position(record, index=i) for i, record in enumerate(records)]


def position_to_record(position: Position) -> Dict[str, Any]:
    return {
        "bank_name": position.bank_name,
        "account_number": position.account_number,
        "start_date": position.start_date.isoformat(),
        "end_date": position.end_date.isoformat(),
        "nominal": str(position.nominal),
        "annual_rate_percent": str(position.annual_rate_percent),
        "day_count_convention": position.day_count_convention.value,
        "booked_interest": str(position.booked_interest),
    }


# ─── JSON documents ───────────────────────────────────────────────────────────


def load_positions_json(text: str) -> List[Position]:
    """Parse a JSON array of position records. An empty document is an empty list."""
    if not text.strip():
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidPositionRecordError(f"not valid JSON: {exc.msg}") from exc
    if not isinstance(data, list):
        raise InvalidPositionRecordError("top-level JSON value must be an array")

    positions = parse_positions(data)
    logger.info("Parsed %d position records", len(positions))
    return positions


def dump_positions_json(positions: Iterable[Position]) -> str:
    return json.dumps([position_to_record(p) for p in positions], indent=2)
