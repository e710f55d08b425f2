from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ─────────────────────────────────────────────────────────────────────────────
# Health
# ─────────────────────────────────────────────────────────────────────────────


class DatasetInfo(BaseModel):
    generation: Optional[int] = None
    record_count: int = 0
    seeded_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    dataset: DatasetInfo


# ─────────────────────────────────────────────────────────────────────────────
# Transaction
# ─────────────────────────────────────────────────────────────────────────────


class TransactionSchema(BaseModel):
    """One sales record, in the seed source's camelCase shape.

    Used both to validate incoming seed rows and to render query results.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str = ""
    price: float = Field(allow_inf_nan=False)
    category: str = ""
    sold: bool
    date_of_sale: datetime = Field(alias="dateOfSale")
    image: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        # Source ids are integers; keep them opaque as text.
        if isinstance(value, bool) or value is None:
            raise ValueError("id must be a string or integer")
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str) and value.strip():
            return value
        raise ValueError("id must be a non-empty string or integer")

    @field_validator("date_of_sale")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class InitializeResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


# ─────────────────────────────────────────────────────────────────────────────
# Aggregations
# ─────────────────────────────────────────────────────────────────────────────


class StatisticsSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_sale_amount: float = Field(alias="totalSaleAmount")
    total_sold_items: int = Field(alias="totalSoldItems")
    total_not_sold_items: int = Field(alias="totalNotSoldItems")


class BarChartBucket(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    label: str = Field(alias="range")
    count: int


class PieChartSlice(BaseModel):
    category: str
    count: int


class CombinedReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transactions: list[TransactionSchema]
    statistics: StatisticsSchema
    bar_chart: list[BarChartBucket] = Field(alias="barChart")
    pie_chart: list[PieChartSlice] = Field(alias="pieChart")
