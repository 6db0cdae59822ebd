import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from pharmacy.database import Base


class UserRole(str, PyEnum):
    ADMIN = "admin"
    WORKER = "worker"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, default=UserRole.WORKER.value)  # admin, worker
    clinic: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    profile_pic: Mapped[str] = mapped_column(String, default="")

    # Display preferences as JSON, e.g. '{"font_size":"medium","show_prices":true}'
    preferences: Mapped[str] = mapped_column(Text, default="{}")

    active: Mapped[bool] = mapped_column(default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
