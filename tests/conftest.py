"""
DepositBook — Shared pytest fixtures.
"""

from __future__ import annotations

import os
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# ─── Environment setup (before any app imports) ───────────────────────────────

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault(
    "POSITIONS_FILE", str(Path(tempfile.gettempdir()) / "depositbook-test-positions.json")
)
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# ─── App imports (after env is set) ───────────────────────────────────────────

from depositbook.core.day_count import DayCountConvention  # noqa: E402
from depositbook.services.accrual_engine import Position  # noqa: E402
from depositbook.services.position_store import PositionStore  # noqa: E402

# ─────────────────────────────────────────────────────────────────────────────
# POSITION FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


def make_position(
    start: date,
    end: date,
    nominal: str = "1000",
    rate: str = "5",
    convention: DayCountConvention = DayCountConvention.ACTUAL_ACTUAL,
    booked: str = "0",
    bank_name: str = "Sparkasse",
    account_number: str = "DE-0001",
) -> Position:
    return Position(
        bank_name=bank_name,
        account_number=account_number,
        start_date=start,
        end_date=end,
        nominal=Decimal(nominal),
        annual_rate_percent=Decimal(rate),
        day_count_convention=convention,
        booked_interest=Decimal(booked),
    )


@pytest.fixture
def sample_portfolio():
    """Three deposits at two banks, all touching Q1 2024."""
    return [
        make_position(
            date(2024, 1, 1),
            date(2024, 12, 31),
            nominal="1000",
            rate="5",
            booked="10",
            bank_name="Sparkasse",
            account_number="DE-0001",
        ),
        make_position(
            date(2024, 2, 1),
            date(2024, 7, 31),
            nominal="5000",
            rate="3.5",
            bank_name="Commerzbank",
            account_number="DE-0002",
        ),
        make_position(
            date(2024, 3, 15),
            date(2025, 3, 14),
            nominal="2000",
            rate="4",
            convention=DayCountConvention.THIRTY_360,
            booked="30",
            bank_name="Sparkasse",
            account_number="DE-0003",
        ),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# STORE / FASTAPI CLIENT FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(scope="function")
def position_store(tmp_path: Path) -> PositionStore:
    """Empty JSON-file store in a per-test directory."""
    return PositionStore(tmp_path / "positions.json")


@pytest.fixture(scope="function")
def client(position_store: PositionStore) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with the position store dependency overridden."""
    from depositbook.main import app
    from depositbook.services.position_store import get_position_store

    app.dependency_overrides[get_position_store] = lambda: position_store

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
