from datetime import datetime

from pydantic import BaseModel


class TransferCreate(BaseModel):
    from_clinic: str = ""
    to_clinic: str = ""
    medicine_id: str = ""
    medicine_name: str = ""
    quantity: int = 0


class TransferRecordUpdate(BaseModel):
    medicine_name: str | None = None
    quantity: int | None = None
    from_clinic: str | None = None
    to_clinic: str | None = None
    date: datetime | None = None


class TransferRecordOut(BaseModel):
    id: str
    medicine_name: str
    quantity: int
    from_clinic: str
    to_clinic: str
    date: datetime

    model_config = {"from_attributes": True}
