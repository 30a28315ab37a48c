"""
DepositBook — JSON Position Store Test Suite
Covers depositbook/services/position_store.py
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import pytest

from depositbook.core.exceptions import PositionNotFoundError, PositionStoreError
from depositbook.services.position_store import PositionStore
from tests.conftest import make_position


def test_missing_file_is_empty(position_store):
    assert position_store.list() == []


def test_add_and_list(position_store):
    first = make_position(date(2024, 1, 1), date(2024, 12, 31))
    second = make_position(date(2024, 2, 1), date(2024, 7, 31), bank_name="ING")

    assert position_store.add(first) == 0
    assert position_store.add(second) == 1
    assert position_store.list() == [first, second]
    assert position_store.get(1) == second


def test_persists_across_instances(position_store):
    position = make_position(date(2024, 1, 1), date(2024, 12, 31))
    position_store.add(position)
    assert PositionStore(position_store.path).list() == [position]


def test_delete(position_store):
    keep = make_position(date(2024, 1, 1), date(2024, 12, 31), account_number="A")
    drop = make_position(date(2024, 1, 1), date(2024, 12, 31), account_number="B")
    position_store.add(drop)
    position_store.add(keep)

    removed = position_store.delete(0)
    assert removed == drop
    assert position_store.list() == [keep]


def test_delete_out_of_range(position_store):
    with pytest.raises(PositionNotFoundError):
        position_store.delete(0)


def test_negative_index_rejected(position_store):
    position_store.add(make_position(date(2024, 1, 1), date(2024, 12, 31)))
    with pytest.raises(PositionNotFoundError):
        position_store.get(-1)


def test_set_booked_interest(position_store):
    position_store.add(make_position(date(2024, 1, 1), date(2024, 12, 31)))
    updated = position_store.set_booked_interest(0, "12.43")
    assert updated.booked_interest == Decimal("12.43")
    assert position_store.get(0).booked_interest == Decimal("12.43")


def test_file_is_json_array(position_store):
    position_store.add(make_position(date(2024, 1, 1), date(2024, 12, 31)))
    data = json.loads(position_store.path.read_text(encoding="utf-8"))
    assert data[0]["start_date"] == "2024-01-01"
    assert data[0]["nominal"] == "1000"


def test_reads_legacy_data_file(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps(
            [
                {
                    "bankName": "Sparkasse",
                    "kontoNumber": "4711",
                    "startDatum": "2024-01-01T00:00:00.000Z",
                    "endDatum": "2024-12-31T00:00:00.000Z",
                    "zinssatz": 5,
                    "nominal": 1000,
                }
            ]
        ),
        encoding="utf-8",
    )
    [position] = PositionStore(path).list()
    assert position.account_number == "4711"


def test_corrupt_file_raises_store_error(tmp_path):
    path = tmp_path / "positions.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(PositionStoreError):
        PositionStore(path).list()
