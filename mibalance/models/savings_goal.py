from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from mibalance.models.common import CamelModel, Money


def _not_in_past(value: Optional[date]) -> Optional[date]:
    if value is not None and value < date.today():
        raise ValueError("targetDate cannot be in the past")
    return value


class SavingsGoalCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    target_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    target_date: Optional[date] = None

    @field_validator("target_date")
    @classmethod
    def check_target_date(cls, value: Optional[date]) -> Optional[date]:
        return _not_in_past(value)


class SavingsGoalUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    target_amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    target_date: Optional[date] = None
    current_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("target_date")
    @classmethod
    def check_target_date(cls, value: Optional[date]) -> Optional[date]:
        return _not_in_past(value)


class AddMoney(CamelModel):
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)


class SavingsGoalPublic(CamelModel):
    id: int
    name: str
    target_amount: Money
    current_amount: Money
    target_date: Optional[date] = None
    is_achieved: bool
    created_at: datetime
    progress: Optional[float] = None
    days_remaining: Optional[int] = None
    is_overdue: Optional[bool] = None
