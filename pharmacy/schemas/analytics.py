from pydantic import BaseModel


class MedicineSalesOut(BaseModel):
    name: str
    quantity: int
    revenue: float
    profit: float | None  # None when any sale in the group had no resolvable purchase price
    priced_profit: float | None = None
    unpriced_quantity: int = 0

    model_config = {"from_attributes": True}


class AnalyticsOut(BaseModel):
    total_sales: int
    total_revenue: float
    total_profit: float | None
    top_medicines: list[MedicineSalesOut]

    model_config = {"from_attributes": True}
