# app/metrics.py
"""
Metrics aggregation engine.

Pipeline: resolve period -> fetch each collection -> aggregate sums -> derive
ratios. Every numeric field read from a record goes through `safe_float`, so a
missing or malformed value counts as 0 instead of poisoning a sum.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from app import crud
from app.crud import DriverRecords
from app.periods import DateRange, resolve_period
from app.schemas import DateRangeOut, MetricsResult

logger = logging.getLogger(__name__)


class MetricsError(Exception):
    pass


class RecordStoreUnavailable(MetricsError):
    """No collection could be read for the driver; there is nothing to aggregate."""

    def __init__(self, driver_id: int, errors: List[Exception]):
        self.driver_id = driver_id
        self.errors = errors
        cause = "; ".join(f"{type(e).__name__}: {e}" for e in errors) or "unknown error"
        super().__init__(f"Record store unavailable for driver {driver_id}: {cause}")


# ---------------- Coercion ----------------

def safe_float(value: Any) -> float:
    """Parse `value` as a float; None, '', junk, NaN and +/-inf all give 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        num = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            num = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return num if math.isfinite(num) else 0.0


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def shift_hours(shift: Any) -> float:
    """Hours worked in a closed shift; open or malformed shifts count 0."""
    start = _as_datetime(getattr(shift, "start_time", None))
    end = _as_datetime(getattr(shift, "end_time", None))
    if start is None or end is None:
        return 0.0
    try:
        hours = (end - start).total_seconds() / 3600.0
    except TypeError:
        # mixed naive/aware timestamps
        return 0.0
    if not math.isfinite(hours) or hours < 0:
        return 0.0
    return hours


def _sum_field(rows: Iterable[Any], attr: str) -> float:
    total = 0.0
    for row in rows:
        total += safe_float(getattr(row, attr, None))
    return total


def _safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


_CENT = Decimal("0.01")


def _round2(value: float) -> float:
    """Two decimals, exact ties away from zero (1.125 -> 1.13, -1.125 -> -1.13)."""
    return float(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


# ---------------- Aggregator ----------------

@dataclass
class Totals:
    ride_count: int = 0
    total_fares: float = 0.0
    total_tips: float = 0.0
    total_earnings: float = 0.0
    total_distance: float = 0.0
    shift_count: int = 0
    total_hours: float = 0.0
    total_fuel_expenses: float = 0.0
    total_maintenance_expenses: float = 0.0
    total_insurance_expenses: float = 0.0
    total_fuel_volume: float = 0.0
    rides_by_day: Dict[date, List[Any]] = field(default_factory=dict)

    @property
    def total_expenses(self) -> float:
        return self.total_fuel_expenses + self.total_maintenance_expenses + self.total_insurance_expenses

    @property
    def total_shifts_with_rides(self) -> int:
        return len(self.rides_by_day)


def group_rides_by_day(rides: Iterable[Any]) -> Dict[date, List[Any]]:
    buckets: Dict[date, List[Any]] = defaultdict(list)
    for ride in rides:
        when = _as_datetime(getattr(ride, "date", None))
        if when is None:
            continue
        buckets[when.date()].append(ride)
    return dict(buckets)


def aggregate(
    rides: Iterable[Any] = (),
    shifts: Iterable[Any] = (),
    fuel_expenses: Iterable[Any] = (),
    maintenance_expenses: Iterable[Any] = (),
    insurance_expenses: Iterable[Any] = (),
) -> Totals:
    rides = list(rides)
    shifts = list(shifts)
    fuel_expenses = list(fuel_expenses)

    totals = Totals(ride_count=len(rides), shift_count=len(shifts))

    for ride in rides:
        fare = safe_float(getattr(ride, "fare", None))
        tips = safe_float(getattr(ride, "tips", None))
        totals.total_fares += fare
        totals.total_tips += tips
        totals.total_earnings += fare + tips
        totals.total_distance += safe_float(getattr(ride, "distance", None))

    totals.total_hours = sum((shift_hours(s) for s in shifts), 0.0)

    totals.total_fuel_expenses = _sum_field(fuel_expenses, "amount")
    totals.total_fuel_volume = _sum_field(fuel_expenses, "quantity")
    totals.total_maintenance_expenses = _sum_field(maintenance_expenses, "amount")
    totals.total_insurance_expenses = _sum_field(insurance_expenses, "amount")

    totals.rides_by_day = group_rides_by_day(rides)
    return totals


def aggregate_records(records: DriverRecords) -> Totals:
    """Aggregate fetched collections; a failed fetch contributes an empty collection."""
    return aggregate(
        rides=records.rides.records if records.rides.ok else [],
        shifts=records.shifts.records if records.shifts.ok else [],
        fuel_expenses=records.fuel.records if records.fuel.ok else [],
        maintenance_expenses=records.maintenance.records if records.maintenance.ok else [],
        insurance_expenses=records.insurance.records if records.insurance.ok else [],
    )


# ---------------- Derived metrics ----------------

def derive_metrics(totals: Totals, date_range: DateRange) -> MetricsResult:
    earnings = totals.total_earnings
    expenses = totals.total_expenses
    distance = totals.total_distance

    # Floor at one hour so sub-hour periods don't report inflated hourly rates.
    avg_per_hour = earnings / max(totals.total_hours, 1.0) if totals.total_hours > 0 else 0.0

    fuel_efficiency = 0.0
    if distance > 0 and totals.total_fuel_expenses > 0 and totals.total_fuel_volume > 0:
        fuel_efficiency = distance / totals.total_fuel_volume

    return MetricsResult(
        earnings=earnings,
        rides=totals.ride_count,
        hours=_round2(totals.total_hours),
        avg_per_hour=_round2(avg_per_hour),
        expenses=expenses,
        fuel_expenses=totals.total_fuel_expenses,
        maintenance_expenses=totals.total_maintenance_expenses,
        insurance_expenses=totals.total_insurance_expenses,
        profit=_round2(earnings - expenses),
        tips_percentage=_round2(_safe_ratio(totals.total_tips, totals.total_fares) * 100),
        rides_per_shift=_round2(_safe_ratio(totals.ride_count, totals.total_shifts_with_rides)),
        distance_traveled=_round2(distance),
        fuel_efficiency=_round2(fuel_efficiency),
        earnings_per_km=_round2(_safe_ratio(earnings, distance)),
        cost_per_km=_round2(_safe_ratio(expenses, distance)),
        profit_per_km=_round2(_safe_ratio(earnings - expenses, distance)),
        date_range=DateRangeOut.model_validate(date_range.as_dict()),
    )


# ---------------- Pipeline ----------------

def compute_metrics(
    db: Session,
    driver_id: int,
    period: Optional[str] = "week",
    today: Optional[Union[date, datetime]] = None,
) -> MetricsResult:
    """
    Compute the metrics for `driver_id` over the period containing `today`.

    Individual collection failures degrade to empty collections. If every
    collection fails, RecordStoreUnavailable is raised instead.
    """
    reference = today if today is not None else datetime.now()
    date_range = resolve_period(period, reference)
    logger.info(
        "Computing metrics for driver %s, period=%r, range=%s..%s",
        driver_id, period, date_range.start_date.isoformat(), date_range.end_date.isoformat(),
        extra={"driver_id": driver_id, "period": period},
    )

    records = crud.fetch_driver_records(db, driver_id, date_range)
    if records.all_failed():
        raise RecordStoreUnavailable(driver_id, [r.error for r in records.failures()])
    for failed in records.failures():
        logger.warning(
            "Using empty %s for driver %s after fetch error: %s", failed.name, driver_id, failed.error,
            extra={"driver_id": driver_id},
        )

    result = derive_metrics(aggregate_records(records), date_range)
    logger.debug("Calculated metrics: %s", result.model_dump(by_alias=True))
    return result
