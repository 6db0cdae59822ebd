import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from pharmacy.database import Base


class Medicine(Base):
    """Stock of one medicine at one clinic.

    (name, clinic) is the lookup key for transfer destinations but is not unique:
    duplicates can exist and analytics has to cope with them.
    """

    __tablename__ = "medicines"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_medicines_quantity_non_negative"),
        CheckConstraint("purchase_price >= 0", name="ck_medicines_purchase_price_non_negative"),
        Index("ix_medicines_name_clinic", "name", "clinic"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Cost basis, distinct from the per-sale selling rate
    purchase_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    clinic: Mapped[str] = mapped_column(String, nullable=False, index=True)
    expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())
