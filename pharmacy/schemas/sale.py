from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SaleCreate(BaseModel):
    medicine_id: str
    medicine_name: str = ""
    clinic: str
    quantity: int = Field(gt=0)
    rate: Decimal = Field(ge=0)
    sold_by: str = ""
    sold_by_name: str = ""
    sold_at: datetime | None = None  # backdate; defaults to now


class SaleUpdate(BaseModel):
    medicine_id: str | None = None
    medicine_name: str | None = None
    quantity: int = Field(gt=0)
    rate: Decimal = Field(ge=0)
    sold_at: datetime | None = None


class SaleOut(BaseModel):
    id: str
    medicine_id: str
    medicine_name: str
    clinic: str
    quantity: int
    rate: float
    total: float
    sold_by: str
    sold_by_name: str
    sold_at: datetime

    model_config = {"from_attributes": True}


class SellerStats(BaseModel):
    total_sold: int
    total_earned: float
