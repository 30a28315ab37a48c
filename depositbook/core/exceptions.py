"""
DepositBook — Custom Exceptions.
Each exception carries: message, error_code, http_status_code, optional detail dict.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

# ─────────────────────────────────────────────────────────────────────────────
# BASE
# ─────────────────────────────────────────────────────────────────────────────


class DepositBookError(Exception):
    """Root exception for all DepositBook errors."""

    http_status_code: int = 400
    error_code: str = "DEPOSITBOOK_ERROR"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.detail = detail or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "detail": self.detail,
        }


# ─────────────────────────────────────────────────────────────────────────────
# DAY COUNT / ACCRUAL
# ─────────────────────────────────────────────────────────────────────────────


class UnsupportedConventionError(DepositBookError):
    http_status_code = 422
    error_code = "UNSUPPORTED_CONVENTION"

    def __init__(self, convention: str) -> None:
        self.convention = convention
        super().__init__(
            message=f"Unsupported day-count convention: {convention!r}",
            detail={"convention": convention},
        )


class IncompleteWindowError(DepositBookError):
    http_status_code = 422
    error_code = "INCOMPLETE_WINDOW"

    def __init__(
        self, window_start: Optional[date], window_end: Optional[date]
    ) -> None:
        self.window_start = window_start
        self.window_end = window_end
        super().__init__(
            message="A reporting window needs both window_start and window_end",
            detail={
                "window_start": str(window_start) if window_start else None,
                "window_end": str(window_end) if window_end else None,
            },
        )


# ─────────────────────────────────────────────────────────────────────────────
# POSITION FEED & STORE
# ─────────────────────────────────────────────────────────────────────────────


class InvalidPositionRecordError(DepositBookError):
    http_status_code = 422
    error_code = "INVALID_POSITION_RECORD"

    def __init__(
        self, reason: str, index: Optional[int] = None, field: Optional[str] = None
    ) -> None:
        self.reason = reason
        self.index = index
        self.field = field
        where = f"record {index}" if index is not None else "record"
        if field:
            where += f", field {field!r}"
        super().__init__(
            message=f"Invalid position {where}: {reason}",
            detail={"index": index, "field": field, "reason": reason},
        )


class PositionNotFoundError(DepositBookError):
    http_status_code = 404
    error_code = "POSITION_NOT_FOUND"

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(
            message=f"No position at index {index} (store holds {size})",
            detail={"index": index, "size": size},
        )


class PositionStoreError(DepositBookError):
    http_status_code = 500
    error_code = "POSITION_STORE_ERROR"

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(
            message=f"Position store {path!r} unusable: {reason}",
            detail={"path": path, "reason": reason},
        )
