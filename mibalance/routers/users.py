import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mibalance.db import crud
from mibalance.db.database import get_db
from mibalance.db.tables import User
from mibalance.models.user import UserPublic, UserUpdate
from mibalance.routers.deps import get_current_user, ok
from mibalance.utils.analyzer import FinanceAnalyzer, TransactionRecord, resolve_window

router = APIRouter()
logger = logging.getLogger(__name__)
finance_analyzer = FinanceAnalyzer()


@router.get("/profile")
def get_profile(user: User = Depends(get_current_user)):
    return ok(user=UserPublic.model_validate(user))


@router.put("/profile")
def update_profile(
    profile: UserUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updates = {}
    if profile.name:
        updates["name"] = profile.name
    if profile.email:
        existing = crud.get_user_by_email(db, profile.email)
        if existing and existing.id != user.id:
            raise HTTPException(status_code=400, detail="Email already in use")
        updates["email"] = profile.email

    if updates:
        user = crud.update_user(db, user, updates)
        logger.info(f"Updated profile for user {user.id}: {sorted(updates)}")

    return ok("Profile updated successfully", user=UserPublic.model_validate(user))


@router.get("/stats")
def get_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Row counts plus the balance of the current calendar month."""
    window = resolve_window(today=date.today())
    month_rows = crud.get_transactions_between(db, user.id, window.start_date, window.end_date)
    balance = finance_analyzer.compute_balance(
        [TransactionRecord.from_row(row) for row in month_rows], window
    )
    counts = crud.count_user_rows(db, user.id)

    return ok(
        totalTransactions=counts["transactions"],
        totalCategories=counts["categories"],
        totalSavingsGoals=counts["savings_goals"],
        currentMonthTransactions=len(month_rows),
        monthlyStats={
            "totalIncome": balance.total_income,
            "totalExpenses": balance.total_expenses,
            "balance": balance.balance,
        },
    )
