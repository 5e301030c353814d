from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from mibalance.models.category import CategoryBrief
from mibalance.models.common import CamelModel, Money, TransactionType


class TransactionCreate(CamelModel):
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=500)
    type: TransactionType
    category_id: Optional[int] = Field(default=None, gt=0)
    date: date

    @field_validator("date")
    @classmethod
    def not_in_future(cls, value: date) -> date:
        if value > date.today():
            raise ValueError("date cannot be in the future")
        return value


class TransactionPublic(CamelModel):
    id: int
    amount: Money
    description: Optional[str] = None
    type: TransactionType
    category_id: Optional[int] = None
    date: date
    created_at: datetime
    category: Optional[CategoryBrief] = None


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_prev: bool
