from sqlmodel import SQLModel
from typing import List, Optional
from datetime import date
from .vehicle import ProviderEnum


class RentalSlab(SQLModel):
    min_trips: int
    max_trips: Optional[int] = None
    rate: int


class NextSlab(SQLModel):
    rate: int
    trips_needed: int


class RentalInfo(SQLModel):
    provider: ProviderEnum
    trip_count: int
    current_rate: int
    weekly_cost: int
    next_better_slab: Optional[NextSlab] = None
    optimization_tip: str


class DriverWeekBreakdown(SQLModel):
    id: int
    name: str
    days_worked: int
    daily_rent: int
    total_rent: int
    paid: bool


class SubstituteWeekBreakdown(SQLModel):
    id: int
    name: str
    shift_hours: int
    charge: int
    trip_count: int


class WeeklySettlementData(SQLModel):
    vehicle_id: int
    week_start: date
    week_end: date
    total_trips: int
    rental_rate: int
    company_rent: int
    driver_rent: int
    substitute_rent: int
    total_rent: int
    profit: int
    ledger_entries: int
    drivers: List[DriverWeekBreakdown] = []
    substitutes: List[SubstituteWeekBreakdown] = []

    def has_activity(self) -> bool:
        return self.total_trips > 0 or self.ledger_entries > 0


class WeekOption(SQLModel):
    week_start: date
    week_end: date
    label: str


class WeeklySummary(SQLModel):
    current_week: WeeklySettlementData
    rental_info: RentalInfo
    available_weeks: List[WeekOption] = []
