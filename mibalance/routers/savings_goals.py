import logging
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mibalance.db import crud
from mibalance.db.database import get_db
from mibalance.db.tables import SavingsGoal, User
from mibalance.models.savings_goal import AddMoney, SavingsGoalCreate, SavingsGoalPublic, SavingsGoalUpdate
from mibalance.routers.deps import get_current_user, ok
from mibalance.utils.analyzer import FinanceAnalyzer, GoalRecord

router = APIRouter()
logger = logging.getLogger(__name__)
finance_analyzer = FinanceAnalyzer()


def _with_progress(goal: SavingsGoal, today: date) -> SavingsGoalPublic:
    progress = finance_analyzer.goal_progress(GoalRecord.from_row(goal), today)
    public = SavingsGoalPublic.model_validate(goal)
    public.progress = progress.progress
    public.days_remaining = progress.days_remaining
    public.is_overdue = progress.is_overdue
    return public


def _get_owned(db: Session, user: User, goal_id: int) -> SavingsGoal:
    goal = crud.get_goal(db, user.id, goal_id)
    if not goal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Savings goal not found")
    return goal


@router.get("")
def list_goals(
    status: Optional[Literal["achieved", "active"]] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    achieved = {"achieved": True, "active": False}.get(status) if status else None
    goals = crud.list_goals(db, user.id, achieved)
    today = date.today()
    return ok(goals=[_with_progress(goal, today) for goal in goals])


@router.get("/{goal_id}")
def get_goal(goal_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    goal = _get_owned(db, user, goal_id)
    return ok(goal=_with_progress(goal, date.today()))


@router.post("", status_code=201)
def create_goal(
    payload: SavingsGoalCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = crud.create_goal(
        db,
        user.id,
        {
            "name": payload.name,
            "target_amount": payload.target_amount,
            "target_date": payload.target_date,
        },
    )
    logger.info(f"User {user.id} created savings goal {goal.id} ({goal.name})")
    return ok("Savings goal created successfully", goal=_with_progress(goal, date.today()))


@router.put("/{goal_id}")
def update_goal(
    goal_id: int,
    payload: SavingsGoalUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = _get_owned(db, user, goal_id)
    # Only the fields present in the request body are touched
    updates = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "target_date"
    }
    goal = crud.update_goal(db, goal, updates)
    return ok("Savings goal updated successfully", goal=_with_progress(goal, date.today()))


@router.post("/{goal_id}/add-money")
def add_money(
    goal_id: int,
    payload: AddMoney,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = _get_owned(db, user, goal_id)
    goal = crud.update_goal(db, goal, {"current_amount": goal.current_amount + payload.amount})
    if goal.is_achieved:
        logger.info(f"Savings goal {goal.id} of user {user.id} reached its target")
    return ok(f"Added ${payload.amount} to the savings goal", goal=_with_progress(goal, date.today()))


@router.delete("/{goal_id}")
def delete_goal(goal_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    goal = _get_owned(db, user, goal_id)
    crud.delete_goal(db, goal)
    logger.info(f"User {user.id} deleted savings goal {goal_id}")
    return ok("Savings goal deleted successfully")
