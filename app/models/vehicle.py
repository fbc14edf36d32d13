from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from enum import Enum


class ProviderEnum(str, Enum):
    LETZRYD = "Letzryd"
    PMV = "PMV"


class VehicleBase(SQLModel):
    vehicle_number: str = Field(nullable=False, unique=True, index=True)
    provider: ProviderEnum = Field(nullable=False)
    onboarded_on: Optional[date] = None
    retired_on: Optional[date] = None


class Vehicle(VehicleBase, table=True):
    __tablename__ = "vehicles"
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(
        default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": datetime.utcnow}
    )
