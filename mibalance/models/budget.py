from decimal import Decimal
from typing import Optional

from pydantic import Field

from mibalance.models.category import CategoryBrief
from mibalance.models.common import CamelModel, Money


class BudgetUpsert(CamelModel):
    category_id: int = Field(gt=0)
    budget_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2020, le=2100)


class BudgetPublic(CamelModel):
    id: int
    category_id: int
    budget_amount: Money
    month: int
    year: int
    category: Optional[CategoryBrief] = None
