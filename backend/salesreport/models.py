from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text

from .database import Base


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class SeedRun(Base):
    """One successful seed; its id is the generation its rows belong to."""

    __tablename__ = "seed_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_url = Column(Text, nullable=False)
    record_count = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


class Transaction(Base):
    __tablename__ = "transactions"

    generation = Column(Integer, ForeignKey("seed_runs.id"), primary_key=True)
    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False)  # index within the seed batch
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    category = Column(String(255), nullable=False, default="")
    sold = Column(Boolean, nullable=False, default=False)
    date_of_sale = Column(DateTime, nullable=False)  # naive UTC
    image = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_transactions_generation_date_of_sale", "generation", "date_of_sale"),
        Index("ix_transactions_generation_category", "generation", "category"),
    )
