# app/crud.py
"""Read-only record queries consumed by the metrics engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from app import models
from app.periods import DateRange

logger = logging.getLogger(__name__)


# ---------- RIDES ----------
def get_rides_in_range(db: Session, driver_id: int, start: datetime, end: datetime):
    return (
        db.query(models.Ride)
        .filter(
            models.Ride.driver_id == driver_id,
            models.Ride.date >= start,
            models.Ride.date <= end,
        )
        .order_by(models.Ride.date.asc(), models.Ride.id.asc())
        .all()
    )

# ---------- SHIFTS ----------
def get_shifts_in_range(db: Session, driver_id: int, start: datetime, end: datetime):
    # open shifts (end_time NULL) are included; they just contribute no hours
    return (
        db.query(models.Shift)
        .filter(
            models.Shift.driver_id == driver_id,
            models.Shift.date >= start,
            models.Shift.date <= end,
        )
        .order_by(models.Shift.date.asc(), models.Shift.id.asc())
        .all()
    )

# ---------- FUEL ----------
def get_fuel_expenses_in_range(db: Session, driver_id: int, start: datetime, end: datetime):
    return (
        db.query(models.FuelExpense)
        .filter(
            models.FuelExpense.driver_id == driver_id,
            models.FuelExpense.date >= start,
            models.FuelExpense.date <= end,
        )
        .order_by(models.FuelExpense.date.asc())
        .all()
    )

# ---------- MAINTENANCE ----------
def get_maintenance_expenses_in_range(db: Session, driver_id: int, start: datetime, end: datetime):
    return (
        db.query(models.MaintenanceExpense)
        .filter(
            models.MaintenanceExpense.driver_id == driver_id,
            models.MaintenanceExpense.date >= start,
            models.MaintenanceExpense.date <= end,
        )
        .order_by(models.MaintenanceExpense.date.asc())
        .all()
    )

# ---------- INSURANCE ----------
def get_insurance_expenses_in_range(db: Session, driver_id: int, start: datetime, end: datetime):
    # Policies are bucketed by coverage start, not by a point-in-time date.
    return (
        db.query(models.InsuranceExpense)
        .filter(
            models.InsuranceExpense.driver_id == driver_id,
            models.InsuranceExpense.start_date >= start,
            models.InsuranceExpense.start_date <= end,
        )
        .order_by(models.InsuranceExpense.start_date.asc())
        .all()
    )


# ---------- Failure-isolated fetch ----------
@dataclass
class FetchResult:
    """Outcome of one collection query: the rows, or the error that replaced them."""

    name: str
    records: List = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DriverRecords:
    rides: FetchResult
    shifts: FetchResult
    fuel: FetchResult
    maintenance: FetchResult
    insurance: FetchResult

    def results(self) -> List[FetchResult]:
        return [self.rides, self.shifts, self.fuel, self.maintenance, self.insurance]

    def failures(self) -> List[FetchResult]:
        return [r for r in self.results() if not r.ok]

    def all_failed(self) -> bool:
        return all(not r.ok for r in self.results())


QueryFn = Callable[[Session, int, datetime, datetime], List]


def fetch_collection(db: Session, name: str, query: QueryFn, driver_id: int, date_range: DateRange) -> FetchResult:
    try:
        rows = list(query(db, driver_id, date_range.start_date, date_range.end_date))
    except Exception as exc:
        logger.exception("Error querying %s for driver %s", name, driver_id, extra={"driver_id": driver_id})
        # a failed statement leaves the session unusable until rolled back
        try:
            db.rollback()
        except Exception:
            logger.warning("Rollback after failed %s query also failed", name, exc_info=True)
        return FetchResult(name=name, error=exc)
    # Detach so a later rollback can't expire these rows and force lazy re-reads.
    for row in rows:
        if row in db:
            db.expunge(row)
    logger.debug("Found %d %s for driver %s", len(rows), name, driver_id, extra={"driver_id": driver_id})
    return FetchResult(name=name, records=rows)


def fetch_driver_records(db: Session, driver_id: int, date_range: DateRange) -> DriverRecords:
    return DriverRecords(
        rides=fetch_collection(db, "rides", get_rides_in_range, driver_id, date_range),
        shifts=fetch_collection(db, "shifts", get_shifts_in_range, driver_id, date_range),
        fuel=fetch_collection(db, "fuel expenses", get_fuel_expenses_in_range, driver_id, date_range),
        maintenance=fetch_collection(
            db, "maintenance expenses", get_maintenance_expenses_in_range, driver_id, date_range
        ),
        insurance=fetch_collection(
            db, "insurance expenses", get_insurance_expenses_in_range, driver_id, date_range
        ),
    )
