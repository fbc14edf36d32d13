from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, UniqueConstraint
from typing import List, Optional
from datetime import date, datetime
from enum import Enum
from .vehicle import ProviderEnum


class WeekState(str, Enum):
    NO_ACTIVITY = "no_activity"
    OPEN = "open"
    SETTLED = "settled"


class WeeklySettlement(SQLModel, table=True):
    """Registro de auditoría de la liquidación semanal de un vehículo."""
    __tablename__ = "weekly_settlements"
    __table_args__ = (
        UniqueConstraint("vehicle_id", "week_start", "week_end",
                         name="uq_settlement_vehicle_week"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    vehicle_id: int = Field(foreign_key="vehicles.id", index=True)
    week_start: date = Field(nullable=False)
    week_end: date = Field(nullable=False)
    total_trips: int = Field(default=0)
    rental_rate: int = Field(nullable=False)
    company_rent: int = Field(nullable=False)
    driver_rent: int = Field(nullable=False)
    substitute_rent: int = Field(default=0)
    total_rent: int = Field(nullable=False)
    profit: int = Field(nullable=False)
    driver_details: Optional[List[dict]] = Field(
        default=None, sa_column=Column(JSON))
    substitute_details: Optional[List[dict]] = Field(
        default=None, sa_column=Column(JSON))
    paid: bool = Field(default=False)
    processed_by: str = Field(default="System")
    notes: Optional[str] = None
    recalculated_at: Optional[datetime] = None
    created_at: datetime = Field(
        default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": datetime.utcnow}
    )


class SettlementRequest(SQLModel):
    vehicle_id: int
    week_start: Optional[date] = None
    processed_by: Optional[str] = None
    notes: Optional[str] = None


class ProcessAllRequest(SQLModel):
    week_start: Optional[date] = None
    processed_by: Optional[str] = None


class WeekStatus(SQLModel):
    vehicle_id: int
    state: WeekState
    is_settled: bool
    can_settle: bool
    week_start: date
    week_end: date
    settlement: Optional[WeeklySettlement] = None


class SettlementBatchItem(SQLModel):
    vehicle_id: int
    vehicle_number: str
    outcome: str
    settlement_id: Optional[int] = None
    profit: Optional[int] = None
    error: Optional[str] = None


class SettlementBatchReport(SQLModel):
    week_start: date
    week_end: date
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    results: List[SettlementBatchItem] = []


class SettlementStatusUpdate(SQLModel):
    paid: bool = True


class ProfitRevenue(SQLModel):
    drivers: List[dict] = []
    substitutes: List[dict] = []
    driver_rent: int
    substitute_rent: int


class ProfitExpenses(SQLModel):
    provider: ProviderEnum
    rental_rate: int
    days: int
    company_rent: int


class ProfitCalculation(SQLModel):
    total_revenue: int
    total_expenses: int
    net_profit: int


class ProfitBreakdown(SQLModel):
    revenue: ProfitRevenue
    expenses: ProfitExpenses
    calculation: ProfitCalculation


class ProfitGraphPoint(SQLModel):
    """Punto de la gráfica de ganancias: una liquidación (vehículo, semana)."""
    settlement_id: int
    vehicle_id: int
    vehicle_number: str
    week_start: date
    week_end: date
    total_trips: int
    profit: int
    paid: bool
    breakdown: ProfitBreakdown
