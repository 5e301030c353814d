import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from mibalance.db import crud
from mibalance.db.database import get_db
from mibalance.db.tables import User
from mibalance.models.budget import BudgetPublic, BudgetUpsert
from mibalance.models.common import TransactionType
from mibalance.routers.deps import get_current_user, ok
from mibalance.utils.analyzer import BudgetRecord, FinanceAnalyzer, TransactionRecord, month_window

router = APIRouter()
logger = logging.getLogger(__name__)
finance_analyzer = FinanceAnalyzer()

ACTUAL_FIELDS = ("actualSpent", "remaining", "percentageUsed", "isOverBudget")


def _period(month: Optional[int], year: Optional[int]):
    today = date.today()
    return month or today.month, year or today.year


def _budget_report(db: Session, user: User, month: int, year: int):
    budgets = crud.list_budgets(db, user.id, month, year)
    window = month_window(year, month)
    expenses = crud.get_transactions_between(
        db, user.id, window.start_date, window.end_date, TransactionType.EXPENSE
    )
    report = finance_analyzer.budget_actuals(
        [BudgetRecord.from_row(b) for b in budgets],
        [TransactionRecord.from_row(t) for t in expenses],
        month,
        year,
    )
    return budgets, report


@router.get("")
def list_budgets(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Budgets of the month, each with its actual spend, plus month totals."""
    month, year = _period(month, year)
    budgets, report = _budget_report(db, user, month, year)

    rows = []
    for budget, actual in zip(budgets, report.budgets):
        row = BudgetPublic.model_validate(budget).model_dump(by_alias=True)
        actual_dict = actual.to_dict()
        row.update({key: actual_dict[key] for key in ACTUAL_FIELDS})
        rows.append(row)

    return ok(budgets=rows, summary=report.summary.to_dict())


@router.get("/summary")
def budget_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    month, year = _period(month, year)
    _, report = _budget_report(db, user, month, year)

    summary = report.summary.to_dict()
    summary["categories"] = [
        {
            "categoryId": actual.category_id,
            "budgetAmount": actual.budget_amount,
            "actualSpent": actual.actual_spent,
            "remaining": actual.remaining,
            "percentageUsed": actual.percentage_used,
        }
        for actual in report.budgets
    ]
    return ok(**summary)


@router.post("", status_code=status.HTTP_201_CREATED)
def upsert_budget(
    payload: BudgetUpsert,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Only expense categories can carry a budget
    category = crud.get_category(db, user.id, payload.category_id)
    if not category or category.type != TransactionType.EXPENSE:
        raise HTTPException(status_code=400, detail="Category not found or not an expense category")

    budget = crud.upsert_budget(
        db,
        user.id,
        category_id=payload.category_id,
        month=payload.month,
        year=payload.year,
        budget_amount=payload.budget_amount,
    )
    logger.info(
        f"User {user.id} set budget {budget.budget_amount} for category {category.id} "
        f"in {payload.year}-{payload.month:02d}"
    )
    return ok("Budget saved successfully", budget=BudgetPublic.model_validate(budget))


@router.delete("/{budget_id}")
def delete_budget(budget_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    budget = crud.get_budget(db, user.id, budget_id)
    if not budget:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")

    crud.delete_budget(db, budget)
    return ok("Budget deleted successfully")
