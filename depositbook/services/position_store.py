"""
DepositBook — JSON Position Store
Keeps the ordered list of deposit positions in a single JSON file, the same
array the desktop front end loads on start and saves after every edit.
Positions are addressed by their list index.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import tempfile
import threading
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import List, Union

from depositbook.config import get_settings
from depositbook.core.decimal_utils import monetary
from depositbook.core.exceptions import (
    InvalidPositionRecordError,
    PositionNotFoundError,
    PositionStoreError,
)
from depositbook.services.accrual_engine import Position
from depositbook.services.ingestion import dump_positions_json, load_positions_json

logger = logging.getLogger(__name__)


class PositionStore:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    # ── Reading ────────────────────────────────────────────────────────────────

    def list(self) -> List[Position]:
        with self._lock:
            if not self.path.exists():
                return []
            try:
                text = self.path.read_text(encoding="utf-8")
            except OSError as exc:
                raise PositionStoreError(str(self.path), str(exc)) from exc
            try:
                positions = load_positions_json(text)
            except InvalidPositionRecordError as exc:
                raise PositionStoreError(str(self.path), exc.message) from exc
            logger.debug("Loaded %d positions from %s", len(positions), self.path)
            return positions

    def get(self, index: int) -> Position:
        positions = self.list()
        self._check_index(index, positions)
        return positions[index]

    # ── Writing ────────────────────────────────────────────────────────────────

    def add(self, position: Position) -> int:
        with self._lock:
            positions = self.list()
            positions.append(position)
            self._save(positions)
            return len(positions) - 1

    def delete(self, index: int) -> Position:
        with self._lock:
            positions = self.list()
            self._check_index(index, positions)
            removed = positions.pop(index)
            self._save(positions)
            return removed

    def set_booked_interest(
        self, index: int, booked_interest: Union[str, int, float, Decimal]
    ) -> Position:
        with self._lock:
            positions = self.list()
            self._check_index(index, positions)
            updated = dataclasses.replace(
                positions[index], booked_interest=monetary(booked_interest)
            )
            positions[index] = updated
            self._save(positions)
            return updated

    # ── Internals ──────────────────────────────────────────────────────────────

    @staticmethod
    def _check_index(index: int, positions: List[Position]) -> None:
        if not 0 <= index < len(positions):
            raise PositionNotFoundError(index, len(positions))

    def _save(self, positions: List[Position]) -> None:
        payload = dump_positions_json(positions)
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise PositionStoreError(str(self.path), str(exc)) from exc
        logger.info("Saved %d positions to %s", len(positions), self.path)


@lru_cache()
def _store_for(path: Path) -> PositionStore:
    return PositionStore(path)


def get_position_store() -> PositionStore:
    """FastAPI dependency — one store per configured file."""
    return _store_for(get_settings().positions_path)
