"""SQLAlchemy declarative base shared by the subscription tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
