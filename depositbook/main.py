"""
DepositBook — FastAPI Application Entry Point
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from depositbook.api.v1 import accruals, positions, reports
from depositbook.config import get_settings
from depositbook.core.exceptions import DepositBookError
from depositbook.services.position_store import PositionStore, get_position_store

settings = get_settings()
logger = logging.getLogger(__name__)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "%s %s starting (environment=%s, positions=%s)",
        settings.APP_TITLE,
        settings.APP_VERSION,
        settings.ENVIRONMENT,
        settings.POSITIONS_FILE,
    )
    yield


# ─── App ──────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    description=(
        "DepositBook — fixed-term deposit register with ACT/ACT and 30/360 "
        "interest accrual, in-window (quarterly) accruals and reserve figures."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# ─── CORS ─────────────────────────────────────────────────────────────────────

origins = settings.ALLOWED_ORIGINS if settings.is_production else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Exception handlers ───────────────────────────────────────────────────────


@app.exception_handler(DepositBookError)
async def depositbook_exception_handler(
    request: Request, exc: DepositBookError
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.ENVIRONMENT == "development":
        import traceback

        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": str(exc),
                "traceback": traceback.format_exc(),
            },
        )
    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred.",
        },
    )


# ─── Health endpoint ──────────────────────────────────────────────────────────


@app.get("/health", tags=["health"])
def health_check(store: PositionStore = Depends(get_position_store)) -> Dict[str, Any]:
    """Returns service health including position store readability."""
    store_ok = False
    count = 0
    try:
        count = len(store.list())
        store_ok = True
    except DepositBookError as exc:
        logger.warning("Health check: %s", exc.message)

    return {
        "status": "healthy" if store_ok else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "store_readable": store_ok,
        "positions": count,
    }


# ─── Routers ──────────────────────────────────────────────────────────────────

API_PREFIX = "/api/v1"

app.include_router(positions.router, prefix=API_PREFIX)
app.include_router(accruals.router, prefix=API_PREFIX)
app.include_router(reports.router, prefix=API_PREFIX)
