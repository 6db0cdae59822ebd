from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class MedicineCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    quantity: int = Field(ge=0)
    purchase_price: Decimal = Field(ge=0)
    clinic: str = Field(min_length=1)
    expiry_date: date | None = None

    @field_validator("name", "clinic", mode="before")
    @classmethod
    def strip_labels(cls, v):
        return v.strip() if isinstance(v, str) else v


class MedicineUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    quantity: int | None = Field(default=None, ge=0)
    purchase_price: Decimal | None = Field(default=None, ge=0)
    clinic: str | None = Field(default=None, min_length=1)
    expiry_date: date | None = None

    @field_validator("name", "clinic", mode="before")
    @classmethod
    def strip_labels(cls, v):
        return v.strip() if isinstance(v, str) else v


class MedicineOut(BaseModel):
    id: str
    name: str
    description: str = ""
    quantity: int
    purchase_price: float
    clinic: str
    expiry_date: date | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class InventoryAdjust(BaseModel):
    quantity: int  # positive to add, negative to remove
