from typing import Optional

from pydantic import Field

from mibalance.models.common import CamelModel, TransactionType

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
DEFAULT_CATEGORY_COLOR = "#3B82F6"


class CategoryCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    type: TransactionType
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(default=None, max_length=50)


class CategoryBrief(CamelModel):
    """Category fields embedded in transactions and budgets."""

    id: int
    name: str
    color: str
    icon: Optional[str] = None
    type: Optional[TransactionType] = None


class CategoryPublic(CamelModel):
    id: int
    name: str
    type: TransactionType
    color: str
    icon: Optional[str] = None
    transaction_count: int = 0
