import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pharmacy.database import Base


class TransferRecord(Base):
    """Audit trail of inter-clinic transfers.

    Editing or deleting a row never touches stock.
    """

    __tablename__ = "transfer_history"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    medicine_name: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    from_clinic: Mapped[str] = mapped_column(String, nullable=False, index=True)
    to_clinic: Mapped[str] = mapped_column(String, nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)  # naive UTC
