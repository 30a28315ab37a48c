"""
DepositBook — Position Feed Test Suite
Covers depositbook/services/ingestion.py
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from depositbook.core.day_count import DayCountConvention
from depositbook.core.exceptions import InvalidPositionRecordError
from depositbook.services.ingestion import (
    dump_positions_json,
    load_positions_json,
    parse_date,
    parse_position,
)
from tests.conftest import make_position

LEGACY_RECORD = {
    "bankName": "Sparkasse",
    "kontoNumber": "4711",
    "startDatum": "2024-01-01T00:00:00.000Z",
    "endDatum": "2024-12-31T23:00:00.000Z",
    "zinssatz": 5,
    "nominal": 1000,
    "verbuchteRueckstellung": 12.5,
    "kommulierteSumme": 0,
}


class TestParseDate:
    def test_plain_iso_date(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)

    def test_timestamp_truncated_not_shifted(self):
        assert parse_date("2024-03-31T22:00:00.000Z") == date(2024, 3, 31)

    def test_offset_ignored(self):
        assert parse_date("2024-01-01T01:30:00+05:00") == date(2024, 1, 1)

    def test_datetime_passthrough(self):
        assert parse_date(datetime(2024, 5, 6, 23, 59, tzinfo=timezone.utc)) == date(
            2024, 5, 6
        )

    def test_non_iso_rejected(self):
        with pytest.raises(ValueError):
            parse_date("31.12.2024")


class TestParsePosition:
    def test_legacy_keys(self):
        position = parse_position(LEGACY_RECORD)
        assert position.bank_name == "Sparkasse"
        assert position.account_number == "4711"
        assert position.start_date == date(2024, 1, 1)
        assert position.end_date == date(2024, 12, 31)
        assert position.nominal == Decimal("1000")
        assert position.annual_rate_percent == Decimal("5")
        assert position.booked_interest == Decimal("12.5")
        assert position.day_count_convention is DayCountConvention.ACTUAL_ACTUAL

    def test_camel_case_keys(self):
        position = parse_position(
            {
                "bankName": "Volksbank",
                "accountNumber": "99",
                "startDate": "2023-01-01",
                "endDate": "2023-02-01",
                "nominal": "1000",
                "annualRatePercent": "6",
                "dayCountConvention": "30/360",
            }
        )
        assert position.day_count_convention is DayCountConvention.THIRTY_360
        assert position.booked_interest == Decimal("0")

    def test_snake_case_keys(self):
        position = parse_position(
            {
                "bank_name": "ING",
                "account_number": "1",
                "start_date": "2024-01-01",
                "end_date": "2024-06-30",
                "nominal": "2500.00",
                "annual_rate_percent": "3.25",
                "booked_interest": "4.10",
            }
        )
        assert position.nominal == Decimal("2500.00")
        assert position.booked_interest == Decimal("4.10")

    def test_missing_field_reports_index_and_field(self):
        record = dict(LEGACY_RECORD)
        del record["zinssatz"]
        with pytest.raises(InvalidPositionRecordError) as exc_info:
            parse_position(record, index=3)
        assert exc_info.value.index == 3
        assert exc_info.value.field == "annual_rate_percent"

    def test_malformed_date(self):
        record = dict(LEGACY_RECORD, endDatum="not a date")
        with pytest.raises(InvalidPositionRecordError) as exc_info:
            parse_position(record)
        assert exc_info.value.field == "end_date"

    def test_non_numeric_nominal(self):
        record = dict(LEGACY_RECORD, nominal="lots")
        with pytest.raises(InvalidPositionRecordError) as exc_info:
            parse_position(record)
        assert exc_info.value.field == "nominal"

    def test_non_finite_amount(self):
        record = dict(LEGACY_RECORD, nominal="NaN")
        with pytest.raises(InvalidPositionRecordError):
            parse_position(record)

    def test_unsupported_convention(self):
        record = dict(LEGACY_RECORD, dayCountConvention="ACT/360")
        with pytest.raises(InvalidPositionRecordError) as exc_info:
            parse_position(record)
        assert exc_info.value.field == "day_count_convention"

    def test_not_an_object(self):
        with pytest.raises(InvalidPositionRecordError):
            parse_position(["Sparkasse"], index=0)

    def test_inverted_dates_are_accepted(self):
        # The feed does not validate ranges; the engine resolves them to zero
        record = dict(LEGACY_RECORD, startDatum="2025-01-01", endDatum="2024-01-01")
        position = parse_position(record)
        assert position.end_date < position.start_date


class TestJsonDocuments:
    def test_load_array(self):
        positions = load_positions_json(json.dumps([LEGACY_RECORD, LEGACY_RECORD]))
        assert len(positions) == 2

    def test_error_carries_record_index(self):
        bad = dict(LEGACY_RECORD)
        del bad["bankName"]
        with pytest.raises(InvalidPositionRecordError) as exc_info:
            load_positions_json(json.dumps([LEGACY_RECORD, bad]))
        assert exc_info.value.index == 1

    def test_empty_document_is_empty_list(self):
        assert load_positions_json("  \n") == []

    def test_invalid_json(self):
        with pytest.raises(InvalidPositionRecordError):
            load_positions_json("[{")

    def test_top_level_must_be_array(self):
        with pytest.raises(InvalidPositionRecordError):
            load_positions_json(json.dumps(LEGACY_RECORD))

    def test_dump_then_load_preserves_positions(self):
        original = [
            make_position(date(2024, 1, 1), date(2024, 12, 31), booked="10.25"),
            make_position(
                date(2023, 1, 1),
                date(2023, 2, 1),
                rate="6",
                convention=DayCountConvention.THIRTY_360,
                bank_name="Volksbank",
            ),
        ]
        text = dump_positions_json(original)
        assert json.loads(text)[1]["day_count_convention"] == "30/360"
        assert load_positions_json(text) == original
