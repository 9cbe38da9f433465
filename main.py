# main.py (project root)

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from sqlalchemy.orm import Session

from app.config import settings
from app.db import Base, engine, get_db
from app.logging_setup import setup_logging
from app.metrics import RecordStoreUnavailable, compute_metrics
from app.schemas import MetricsResult
from app import models  # noqa: F401  (registers tables on Base.metadata)

# ---------------- App ----------------

setup_logging(level=settings.log_level, json_output=settings.log_json, environment=settings.environment)
logger = logging.getLogger("rideshare.metrics")

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Rideshare Metrics", version="1.0.0")


# ---------------- Helpers ----------------

def to_int_or_none(val: Optional[str]) -> Optional[int]:
    try:
        return int(val) if val not in (None, "", "None") else None
    except ValueError:
        return None


def parse_reference_date(date_str: Optional[str]) -> datetime:
    """Accept 'YYYY-MM-DDTHH:MM[:SS]' or 'YYYY-MM-DD'; default to now."""
    if not date_str:
        return datetime.now()
    try:
        return datetime.fromisoformat(date_str)
    except ValueError:
        return datetime.combine(date.fromisoformat(date_str), datetime.min.time())


# ---------------- Health / Ping ----------------

@app.get("/__ping")
def ping() -> Dict[str, bool]:
    return {"pong": True}


@app.get("/health")
def health() -> Dict[str, bool]:
    return {"ok": True}


# ---------------- Metrics ----------------

@app.get("/api/metrics", response_model=MetricsResult)
def get_metrics(
    driver_id: Optional[str] = Query(None, alias="driverId"),
    period: Optional[str] = Query(None),
    as_of: Optional[str] = Query(None, alias="asOf"),
    db: Session = Depends(get_db),
):
    """
    Period-bucketed earnings/expense metrics for one driver.
    Profit = Earnings - (Fuel + Maintenance + Insurance).
    """
    logger.info("Metrics request received: driverId=%s period=%s asOf=%s", driver_id, period, as_of)

    if driver_id is None or not driver_id.strip():
        raise HTTPException(status_code=400, detail="Driver ID is required")
    did = to_int_or_none(driver_id.strip())
    if did is None:
        raise HTTPException(status_code=400, detail="Invalid driver ID")

    try:
        reference = parse_reference_date(as_of.strip() if as_of else None)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid asOf date")

    try:
        return compute_metrics(db, did, period or settings.default_period, today=reference)
    except RecordStoreUnavailable as exc:
        logger.error("Error fetching metrics: %s", exc)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to fetch metrics", "details": str(exc)},
        ) from exc
