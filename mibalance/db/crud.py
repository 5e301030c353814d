"""
Data-access helpers. Every query is scoped by ``user_id``: a row owned by
another user is indistinguishable from a missing one.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from mibalance.db.tables import Category, MonthlyBudget, SavingsGoal, Transaction, User
from mibalance.models.common import TransactionType

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Salario", "type": TransactionType.INCOME, "color": "#10B981", "icon": "briefcase"},
    {"name": "Freelance", "type": TransactionType.INCOME, "color": "#3B82F6", "icon": "code"},
    {"name": "Inversiones", "type": TransactionType.INCOME, "color": "#8B5CF6", "icon": "trending-up"},
    {"name": "Alimentación", "type": TransactionType.EXPENSE, "color": "#F59E0B", "icon": "utensils"},
    {"name": "Transporte", "type": TransactionType.EXPENSE, "color": "#EF4444", "icon": "car"},
    {"name": "Entretenimiento", "type": TransactionType.EXPENSE, "color": "#EC4899", "icon": "film"},
    {"name": "Salud", "type": TransactionType.EXPENSE, "color": "#06B6D4", "icon": "heart"},
    {"name": "Educación", "type": TransactionType.EXPENSE, "color": "#84CC16", "icon": "book"},
    {"name": "Hogar", "type": TransactionType.EXPENSE, "color": "#F97316", "icon": "home"},
    {"name": "Otros", "type": TransactionType.EXPENSE, "color": "#6B7280", "icon": "more-horizontal"},
]


def _commit(db: Session, operation: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{operation} failed: {e}")
        raise


def _apply(row: Any, updates: Dict[str, Any]):
    for key, value in updates.items():
        setattr(row, key, value)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def add_user(db: Session, name: str, email: str, password_hash: str, with_default_categories: bool = True) -> User:
    """Flush a new user and its default income/expense categories without committing."""
    user = User(name=name, email=email, password_hash=password_hash)
    db.add(user)
    db.flush()
    if with_default_categories:
        db.add_all(Category(user_id=user.id, **cat) for cat in DEFAULT_CATEGORIES)
        db.flush()
    return user


def create_user(db: Session, name: str, email: str, password_hash: str, with_default_categories: bool = True) -> User:
    user = add_user(db, name, email, password_hash, with_default_categories)
    _commit(db, "create_user")
    db.refresh(user)
    return user


def update_user(db: Session, user: User, updates: Dict[str, Any]) -> User:
    _apply(user, updates)
    _commit(db, "update_user")
    db.refresh(user)
    return user


def count_user_rows(db: Session, user_id: int) -> Dict[str, int]:
    """Row counts used by the profile statistics."""
    return {
        "transactions": db.query(Transaction).filter(Transaction.user_id == user_id).count(),
        "categories": db.query(Category).filter(Category.user_id == user_id).count(),
        "savings_goals": db.query(SavingsGoal).filter(SavingsGoal.user_id == user_id).count(),
    }


def list_categories(
    db: Session,
    user_id: int,
    category_type: Optional[TransactionType] = None,
) -> List[Tuple[Category, int]]:
    """Categories of a user with their transaction counts, ordered by type then name."""
    tx_count = func.count(Transaction.id)
    query = (
        db.query(Category, tx_count)
        .outerjoin(Transaction, Transaction.category_id == Category.id)
        .filter(Category.user_id == user_id)
        .group_by(Category.id)
        .order_by(Category.type.asc(), Category.name.asc())
    )
    if category_type is not None:
        query = query.filter(Category.type == category_type)
    return [(category, count) for category, count in query.all()]


def get_category(db: Session, user_id: int, category_id: int) -> Optional[Category]:
    return (
        db.query(Category)
        .filter(Category.id == category_id, Category.user_id == user_id)
        .first()
    )


def find_category(
    db: Session,
    user_id: int,
    name: str,
    category_type: TransactionType,
    exclude_id: Optional[int] = None,
) -> Optional[Category]:
    """Look up a category by its (name, type) key, optionally ignoring one id."""
    query = db.query(Category).filter(
        Category.user_id == user_id,
        Category.name == name,
        Category.type == category_type,
    )
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first()


def create_category(db: Session, user_id: int, fields: Dict[str, Any]) -> Category:
    category = Category(user_id=user_id, **fields)
    db.add(category)
    _commit(db, "create_category")
    db.refresh(category)
    return category


def update_category(db: Session, category: Category, updates: Dict[str, Any]) -> Category:
    _apply(category, updates)
    _commit(db, "update_category")
    db.refresh(category)
    return category


def delete_category(db: Session, category: Category):
    db.delete(category)
    _commit(db, "delete_category")


def count_category_transactions(db: Session, category_id: int) -> int:
    return db.query(Transaction).filter(Transaction.category_id == category_id).count()


def count_category_budgets(db: Session, category_id: int) -> int:
    return db.query(MonthlyBudget).filter(MonthlyBudget.category_id == category_id).count()


def search_transactions(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    tx_type: Optional[TransactionType] = None,
    category_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
) -> Tuple[List[Transaction], int]:
    """
    Filtered, paginated transaction listing, newest first.
    Returns the page of rows and the total number of matches.
    """
    query = db.query(Transaction).filter(Transaction.user_id == user_id)

    if tx_type is not None:
        query = query.filter(Transaction.type == tx_type)
    if category_id is not None:
        query = query.filter(Transaction.category_id == category_id)
    if start_date is not None:
        query = query.filter(Transaction.date >= start_date)
    if end_date is not None:
        query = query.filter(Transaction.date <= end_date)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Transaction.description.ilike(pattern),
                Transaction.category.has(Category.name.ilike(pattern)),
            )
        )

    total = query.count()
    items = (
        query.options(joinedload(Transaction.category))
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_transaction(db: Session, user_id: int, transaction_id: int) -> Optional[Transaction]:
    return (
        db.query(Transaction)
        .options(joinedload(Transaction.category))
        .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .first()
    )


def create_transaction(db: Session, user_id: int, fields: Dict[str, Any]) -> Transaction:
    transaction = Transaction(user_id=user_id, **fields)
    db.add(transaction)
    _commit(db, "create_transaction")
    db.refresh(transaction)
    return transaction


def update_transaction(db: Session, transaction: Transaction, fields: Dict[str, Any]) -> Transaction:
    _apply(transaction, fields)
    _commit(db, "update_transaction")
    db.refresh(transaction)
    return transaction


def delete_transaction(db: Session, transaction: Transaction):
    db.delete(transaction)
    _commit(db, "delete_transaction")


def get_transactions_between(
    db: Session,
    user_id: int,
    start_date: date,
    end_date: date,
    tx_type: Optional[TransactionType] = None,
) -> List[Transaction]:
    """All transactions of a user with ``start_date <= date <= end_date``."""
    query = db.query(Transaction).filter(
        Transaction.user_id == user_id,
        Transaction.date >= start_date,
        Transaction.date <= end_date,
    )
    if tx_type is not None:
        query = query.filter(Transaction.type == tx_type)
    return query.all()


def recent_transactions(db: Session, user_id: int, limit: int = 10) -> List[Transaction]:
    return (
        db.query(Transaction)
        .options(joinedload(Transaction.category))
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(limit)
        .all()
    )


def list_goals(db: Session, user_id: int, achieved: Optional[bool] = None) -> List[SavingsGoal]:
    """Open goals first, then by nearest target date (undated last), newest first."""
    query = db.query(SavingsGoal).filter(SavingsGoal.user_id == user_id)
    if achieved is not None:
        query = query.filter(SavingsGoal.is_achieved == achieved)
    return query.order_by(
        SavingsGoal.is_achieved.asc(),
        SavingsGoal.target_date.is_(None),
        SavingsGoal.target_date.asc(),
        SavingsGoal.created_at.desc(),
    ).all()


def get_goal(db: Session, user_id: int, goal_id: int) -> Optional[SavingsGoal]:
    return (
        db.query(SavingsGoal)
        .filter(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
        .first()
    )


def create_goal(db: Session, user_id: int, fields: Dict[str, Any]) -> SavingsGoal:
    goal = SavingsGoal(user_id=user_id, current_amount=Decimal("0.00"), is_achieved=False, **fields)
    db.add(goal)
    _commit(db, "create_goal")
    db.refresh(goal)
    return goal


def update_goal(db: Session, goal: SavingsGoal, updates: Dict[str, Any]) -> SavingsGoal:
    """
    Apply partial updates. ``is_achieved`` is recomputed whenever the current
    or target amount changes.
    """
    _apply(goal, updates)
    if "current_amount" in updates or "target_amount" in updates:
        goal.is_achieved = Decimal(goal.current_amount) >= Decimal(goal.target_amount)
    _commit(db, "update_goal")
    db.refresh(goal)
    return goal


def delete_goal(db: Session, goal: SavingsGoal):
    db.delete(goal)
    _commit(db, "delete_goal")


def list_budgets(db: Session, user_id: int, month: int, year: int) -> List[MonthlyBudget]:
    return (
        db.query(MonthlyBudget)
        .join(MonthlyBudget.category)
        .options(joinedload(MonthlyBudget.category))
        .filter(
            MonthlyBudget.user_id == user_id,
            MonthlyBudget.month == month,
            MonthlyBudget.year == year,
        )
        .order_by(Category.name.asc())
        .all()
    )


def get_budget(db: Session, user_id: int, budget_id: int) -> Optional[MonthlyBudget]:
    return (
        db.query(MonthlyBudget)
        .filter(MonthlyBudget.id == budget_id, MonthlyBudget.user_id == user_id)
        .first()
    )


def upsert_budget(
    db: Session,
    user_id: int,
    category_id: int,
    month: int,
    year: int,
    budget_amount: Decimal,
) -> MonthlyBudget:
    """Create the budget for (category, month, year) or replace its amount."""
    budget = (
        db.query(MonthlyBudget)
        .filter(
            MonthlyBudget.user_id == user_id,
            MonthlyBudget.category_id == category_id,
            MonthlyBudget.month == month,
            MonthlyBudget.year == year,
        )
        .first()
    )
    if budget is None:
        budget = MonthlyBudget(
            user_id=user_id,
            category_id=category_id,
            month=month,
            year=year,
            budget_amount=budget_amount,
        )
        db.add(budget)
    else:
        budget.budget_amount = budget_amount
    _commit(db, "upsert_budget")
    db.refresh(budget)
    return budget


def delete_budget(db: Session, budget: MonthlyBudget):
    db.delete(budget)
    _commit(db, "delete_budget")
