"""bots model."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from apps.subscription_api.models.base import Base


class Bot(Base):
    __tablename__ = "bots"
    __table_args__ = (Index("ix_bots_company_id", "company_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    processing_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    company = relationship("Company", back_populates="bots")
