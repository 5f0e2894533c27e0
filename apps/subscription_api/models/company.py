"""companies model. Authoritative subscription and storage state per company."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from apps.subscription_api.models.base import Base


class Company(Base):
    """A tenant company. subscription_status/plan_level may be NULL upstream; readers apply defaults."""

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subscription_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    plan_level: Mapped[str | None] = mapped_column(String(32), nullable=True)
    storage_used_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    storage_limit_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    storage_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    current_period_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    current_period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=True,
    )

    bots = relationship("Bot", back_populates="company", cascade="all, delete-orphan")
