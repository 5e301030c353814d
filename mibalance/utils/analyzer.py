from __future__ import annotations

import calendar
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic.alias_generators import to_camel

from mibalance.models.common import TransactionType

ZERO = Decimal("0.00")

UNCATEGORIZED_NAME = "Sin categoría"
UNCATEGORIZED_COLOR = "#6B7280"

MONTH_NAMES = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {to_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camelize(item) for item in value]
    return value


def _as_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def _percentage(part: Decimal, whole: Decimal) -> float:
    """part / whole * 100 as a float, 0 when whole is 0."""
    if not whole:
        return 0.0
    return float(part / whole * 100)


class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return _camelize(asdict(self))


@dataclass(frozen=True)
class TransactionRecord:
    id: int
    amount: Decimal
    type: TransactionType
    date: date
    category_id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Any) -> "TransactionRecord":
        return cls(
            id=row.id,
            amount=_as_decimal(row.amount),
            type=TransactionType(row.type),
            date=_as_date(row.date),
            category_id=row.category_id,
        )


@dataclass(frozen=True)
class CategoryRecord:
    id: int
    name: str
    type: TransactionType
    color: str = UNCATEGORIZED_COLOR
    icon: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any) -> "CategoryRecord":
        return cls(
            id=row.id,
            name=row.name,
            type=TransactionType(row.type),
            color=row.color,
            icon=row.icon,
        )


@dataclass(frozen=True)
class GoalRecord:
    id: int
    name: str
    target_amount: Decimal
    current_amount: Decimal = ZERO
    target_date: Optional[date] = None
    is_achieved: bool = False

    @classmethod
    def from_row(cls, row: Any) -> "GoalRecord":
        return cls(
            id=row.id,
            name=row.name,
            target_amount=_as_decimal(row.target_amount),
            current_amount=_as_decimal(row.current_amount),
            target_date=_as_date(row.target_date),
            is_achieved=bool(row.is_achieved),
        )


@dataclass(frozen=True)
class BudgetRecord:
    id: int
    category_id: int
    budget_amount: Decimal
    month: int
    year: int

    @classmethod
    def from_row(cls, row: Any) -> "BudgetRecord":
        return cls(
            id=row.id,
            category_id=row.category_id,
            budget_amount=_as_decimal(row.budget_amount),
            month=row.month,
            year=row.year,
        )


@dataclass(frozen=True)
class DateWindow(_Serializable):
    """Inclusive date range."""

    start_date: date
    end_date: date

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def month_window(year: int, month: int) -> DateWindow:
    last_day = calendar.monthrange(year, month)[1]
    return DateWindow(date(year, month, 1), date(year, month, last_day))


def resolve_window(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> DateWindow:
    """
    Both bounds given: use them. Otherwise fall back to the calendar month
    containing ``today``.
    """
    if start_date and end_date:
        return DateWindow(start_date, end_date)
    today = today or date.today()
    return month_window(today.year, today.month)


@dataclass
class TypeCount(_Serializable):
    income: int = 0
    expense: int = 0


@dataclass
class BalanceSummary(_Serializable):
    total_income: Decimal
    total_expenses: Decimal
    balance: Decimal
    transaction_count: TypeCount
    period: DateWindow


@dataclass
class CategoryShare(_Serializable):
    category_id: Optional[int]
    category_name: str
    category_color: str
    category_icon: Optional[str]
    type: TransactionType
    amount: Decimal
    transaction_count: int
    percentage: float = 0.0


@dataclass
class CategoryBreakdown(_Serializable):
    categories: List[CategoryShare]
    total_amount: Decimal
    period: DateWindow


@dataclass
class MonthTrend(_Serializable):
    month: int
    month_name: str
    income: Decimal = ZERO
    expense: Decimal = ZERO
    balance: Decimal = ZERO
    transaction_count: TypeCount = field(default_factory=TypeCount)


@dataclass
class YearTotals(_Serializable):
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    total_balance: Decimal = ZERO


@dataclass
class MonthlyTrend(_Serializable):
    monthly_data: List[MonthTrend]
    yearly_totals: YearTotals
    year: int


@dataclass
class SavingsStats(_Serializable):
    total_goals: int
    achieved_goals: int
    active_goals: int
    total_target_amount: Decimal
    total_current_amount: Decimal
    overall_progress: float
    upcoming_goals: int


@dataclass
class GoalProgress(_Serializable):
    progress: float
    days_remaining: Optional[int]
    is_overdue: bool


@dataclass
class BudgetActual(_Serializable):
    budget_id: int
    category_id: int
    budget_amount: Decimal
    actual_spent: Decimal
    remaining: Decimal
    percentage_used: float
    is_over_budget: bool


@dataclass
class BudgetSummary(_Serializable):
    total_budget: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    percentage_used: float
    month: int
    year: int


@dataclass
class BudgetReport(_Serializable):
    budgets: List[BudgetActual]
    summary: BudgetSummary


class FinanceAnalyzer:
    """
    Derived metrics over already-fetched snapshots of a single user's data.

    Nothing here touches the database: routes load the rows, convert them
    with ``*Record.from_row`` and hand them over. Every method tolerates empty
    input and returns zero-valued results.
    """

    def __init__(self, upcoming_days: int = 30) -> None:
        self._upcoming_days = upcoming_days

    def compute_balance(
        self,
        transactions: Iterable[TransactionRecord],
        window: DateWindow,
    ) -> BalanceSummary:
        income = expense = ZERO
        counts = TypeCount()
        for tx in transactions:
            if not window.contains(tx.date):
                continue
            if tx.type == TransactionType.INCOME:
                income += tx.amount
                counts.income += 1
            else:
                expense += tx.amount
                counts.expense += 1

        return BalanceSummary(
            total_income=income,
            total_expenses=expense,
            balance=income - expense,
            transaction_count=counts,
            period=window,
        )

    def category_breakdown(
        self,
        transactions: Iterable[TransactionRecord],
        categories: Iterable[CategoryRecord],
        window: DateWindow,
        type_filter: Optional[TransactionType] = None,
    ) -> CategoryBreakdown:
        category_map = {cat.id: cat for cat in categories}

        # dicts keep insertion order, which the stable sort below relies on
        groups: Dict[Tuple[Optional[int], TransactionType], List[Any]] = {}
        for tx in transactions:
            if not window.contains(tx.date):
                continue
            if type_filter is not None and tx.type != type_filter:
                continue
            group = groups.setdefault((tx.category_id, tx.type), [ZERO, 0])
            group[0] += tx.amount
            group[1] += 1

        shares = []
        for (category_id, tx_type), (amount, count) in groups.items():
            category = category_map.get(category_id) if category_id is not None else None
            shares.append(
                CategoryShare(
                    category_id=category_id,
                    category_name=category.name if category else UNCATEGORIZED_NAME,
                    category_color=category.color if category else UNCATEGORIZED_COLOR,
                    category_icon=category.icon if category else None,
                    type=tx_type,
                    amount=amount,
                    transaction_count=count,
                )
            )

        total = sum((share.amount for share in shares), ZERO)
        for share in shares:
            share.percentage = _percentage(share.amount, total)
        shares.sort(key=lambda share: share.amount, reverse=True)

        return CategoryBreakdown(categories=shares, total_amount=total, period=window)

    def monthly_trend(
        self,
        transactions: Iterable[TransactionRecord],
        year: int,
        type_filter: Optional[TransactionType] = None,
    ) -> MonthlyTrend:
        months = [MonthTrend(month=m, month_name=MONTH_NAMES[m - 1]) for m in range(1, 13)]

        for tx in transactions:
            if tx.date.year != year:
                continue
            if type_filter is not None and tx.type != type_filter:
                continue
            row = months[tx.date.month - 1]
            if tx.type == TransactionType.INCOME:
                row.income += tx.amount
                row.transaction_count.income += 1
            else:
                row.expense += tx.amount
                row.transaction_count.expense += 1

        totals = YearTotals()
        for row in months:
            row.balance = row.income - row.expense
            totals.total_income += row.income
            totals.total_expense += row.expense
            totals.total_balance += row.balance

        return MonthlyTrend(monthly_data=months, yearly_totals=totals, year=year)

    def savings_stats(
        self,
        goals: Iterable[GoalRecord],
        today: Optional[date] = None,
    ) -> SavingsStats:
        goals = list(goals)
        today = today or date.today()
        horizon = today + timedelta(days=self._upcoming_days)

        total_target = sum((goal.target_amount for goal in goals), ZERO)
        total_current = sum((goal.current_amount for goal in goals), ZERO)
        achieved = sum(1 for goal in goals if goal.is_achieved)
        # Overdue goals that are still open count as upcoming too
        upcoming = sum(
            1
            for goal in goals
            if goal.target_date is not None and goal.target_date <= horizon and not goal.is_achieved
        )

        return SavingsStats(
            total_goals=len(goals),
            achieved_goals=achieved,
            active_goals=len(goals) - achieved,
            total_target_amount=total_target,
            total_current_amount=total_current,
            overall_progress=min(_percentage(total_current, total_target), 100.0),
            upcoming_goals=upcoming,
        )

    @staticmethod
    def goal_progress(goal: GoalRecord, today: Optional[date] = None) -> GoalProgress:
        today = today or date.today()
        days = (goal.target_date - today).days if goal.target_date is not None else None
        return GoalProgress(
            progress=min(_percentage(goal.current_amount, goal.target_amount), 100.0),
            days_remaining=max(days, 0) if days is not None else None,
            is_overdue=days is not None and days < 0 and not goal.is_achieved,
        )

    def budget_actuals(
        self,
        budgets: Iterable[BudgetRecord],
        transactions: Iterable[TransactionRecord],
        month: int,
        year: int,
    ) -> BudgetReport:
        window = month_window(year, month)

        spent_by_category: Dict[Optional[int], Decimal] = {}
        for tx in transactions:
            if tx.type != TransactionType.EXPENSE or not window.contains(tx.date):
                continue
            spent_by_category[tx.category_id] = spent_by_category.get(tx.category_id, ZERO) + tx.amount

        rows = []
        total_budget = ZERO
        for budget in budgets:
            if budget.month != month or budget.year != year:
                continue
            spent = spent_by_category.get(budget.category_id, ZERO)
            total_budget += budget.budget_amount
            rows.append(
                BudgetActual(
                    budget_id=budget.id,
                    category_id=budget.category_id,
                    budget_amount=budget.budget_amount,
                    actual_spent=spent,
                    remaining=budget.budget_amount - spent,
                    percentage_used=min(_percentage(spent, budget.budget_amount), 100.0),
                    is_over_budget=spent > budget.budget_amount,
                )
            )

        # Every expense of the month counts, budgeted category or not
        total_spent = sum(spent_by_category.values(), ZERO)
        summary = BudgetSummary(
            total_budget=total_budget,
            total_spent=total_spent,
            total_remaining=total_budget - total_spent,
            percentage_used=_percentage(total_spent, total_budget),
            month=month,
            year=year,
        )
        return BudgetReport(budgets=rows, summary=summary)
