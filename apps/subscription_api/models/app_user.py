"""app_users model. Only the fields the usage dashboard reads."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from apps.subscription_api.models.base import Base


class AppUser(Base):
    """A user seat. Blocked users do not count toward the plan's user limit."""

    __tablename__ = "app_users"
    __table_args__ = (Index("ix_app_users_company_id", "company_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id", ondelete="SET NULL"), nullable=True)
    bot_id: Mapped[int | None] = mapped_column(ForeignKey("bots.id", ondelete="SET NULL"), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
