"""
Analytics Router
Dashboard metrics: balance, category breakdown, monthly trends, savings stats
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from mibalance.db import crud
from mibalance.db.database import get_db
from mibalance.db.tables import User
from mibalance.models.common import TransactionType
from mibalance.models.transaction import TransactionPublic
from mibalance.routers.deps import get_current_user, ok
from mibalance.utils.analyzer import (
    CategoryRecord,
    FinanceAnalyzer,
    GoalRecord,
    TransactionRecord,
    resolve_window,
)

router = APIRouter()
logger = logging.getLogger(__name__)
finance_analyzer = FinanceAnalyzer()


@router.get("/balance")
def get_balance(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Income, expenses and balance for the window. Without both dates the
    current calendar month is used.
    """
    window = resolve_window(start_date, end_date, date.today())
    rows = crud.get_transactions_between(db, user.id, window.start_date, window.end_date)
    summary = finance_analyzer.compute_balance([TransactionRecord.from_row(r) for r in rows], window)
    return ok(**summary.to_dict())


@router.get("/categories")
def get_category_breakdown(
    type: Optional[TransactionType] = None,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    window = resolve_window(start_date, end_date, date.today())
    rows = crud.get_transactions_between(db, user.id, window.start_date, window.end_date, type)
    categories = [CategoryRecord.from_row(c) for c, _ in crud.list_categories(db, user.id)]

    breakdown = finance_analyzer.category_breakdown(
        [TransactionRecord.from_row(r) for r in rows],
        categories,
        window,
        type_filter=type,
    )
    logger.debug(f"Category breakdown for user {user.id}: {len(breakdown.categories)} groups")
    return ok(**breakdown.to_dict())


@router.get("/monthly-trends")
def get_monthly_trends(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    type: Optional[TransactionType] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    target_year = year or date.today().year
    rows = crud.get_transactions_between(
        db, user.id, date(target_year, 1, 1), date(target_year, 12, 31), type
    )
    trend = finance_analyzer.monthly_trend(
        [TransactionRecord.from_row(r) for r in rows], target_year, type_filter=type
    )
    return ok(**trend.to_dict())


@router.get("/recent-transactions")
def get_recent_transactions(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    transactions = crud.recent_transactions(db, user.id, limit)
    return ok(transactions=[TransactionPublic.model_validate(t) for t in transactions])


@router.get("/savings-stats")
def get_savings_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    goals = crud.list_goals(db, user.id)
    stats = finance_analyzer.savings_stats([GoalRecord.from_row(g) for g in goals], date.today())
    return ok(**stats.to_dict())
