# app/schemas.py
from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Responses are serialized with camelCase keys (earningsPerKm, dateRange, ...)
_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Date range ----------
class DateRangeOut(BaseModel):
    model_config = _camel

    start_date: datetime
    end_date: datetime


# ---------- Metrics ----------
class MetricsResult(BaseModel):
    model_config = _camel

    earnings: float = 0.0
    rides: int = 0
    hours: float = 0.0
    avg_per_hour: float = 0.0
    expenses: float = 0.0
    fuel_expenses: float = 0.0
    maintenance_expenses: float = 0.0
    insurance_expenses: float = 0.0
    profit: float = 0.0
    tips_percentage: float = 0.0
    rides_per_shift: float = 0.0
    distance_traveled: float = 0.0
    fuel_efficiency: float = 0.0
    earnings_per_km: float = 0.0
    cost_per_km: float = 0.0
    profit_per_km: float = 0.0
    date_range: DateRangeOut
