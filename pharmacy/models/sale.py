import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from pharmacy.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Plain reference, not a foreign key: the medicine may be deleted later
    # while the sale stays in the books.
    medicine_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    # Snapshot taken at sale time. Never re-synced when the medicine is renamed.
    medicine_name: Mapped[str] = mapped_column(String, default="")
    clinic: Mapped[str] = mapped_column(String, default="", index=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)  # quantity * rate at last write

    sold_by: Mapped[str] = mapped_column(String, nullable=False, index=True)
    sold_by_name: Mapped[str] = mapped_column(String, default="")
    sold_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)  # naive UTC

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
