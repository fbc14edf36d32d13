from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class DriverBase(SQLModel):
    name: str = Field(nullable=False)
    phone: Optional[str] = None
    # Define la renta diaria al momento de crear cada registro del ledger
    has_accommodation: bool = Field(default=False)


class Driver(DriverBase, table=True):
    __tablename__ = "drivers"
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(
        default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": datetime.utcnow}
    )
