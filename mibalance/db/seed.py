"""
Populate the database with a demo account.

Usage:
    mibalance-seed
    python -m mibalance.db.seed
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from mibalance.core.security import get_password_hash
from mibalance.db import crud
from mibalance.db.database import SessionLocal, init_db
from mibalance.db.tables import Category, MonthlyBudget, SavingsGoal, Transaction
from mibalance.models.common import TransactionType

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@mibalance.com"
DEMO_PASSWORD = "password123"

# Extra categories on top of the defaults every new user gets
EXTRA_CATEGORIES = [
    {"name": "Ventas", "type": TransactionType.INCOME, "color": "#F59E0B", "icon": "shopping-bag"},
    {"name": "Ropa", "type": TransactionType.EXPENSE, "color": "#8B5CF6", "icon": "shirt"},
]

# (category name, amount, description, day of month)
SAMPLE_TRANSACTIONS = [
    ("Salario", "2500.00", "Salario mensual", 1),
    ("Freelance", "500.00", "Proyecto freelance", 15),
    ("Inversiones", "150.00", "Dividendos de inversiones", 20),
    ("Alimentación", "300.00", "Supermercado semanal", 5),
    ("Transporte", "80.00", "Gasolina", 8),
    ("Entretenimiento", "25.00", "Netflix", 10),
    ("Salud", "120.00", "Consulta médica", 12),
    ("Educación", "200.00", "Curso online", 18),
    ("Hogar", "150.00", "Servicios básicos", 25),
    ("Ropa", "75.00", "Ropa nueva", 28),
]

SAMPLE_BUDGETS = [
    ("Alimentación", "400.00"),
    ("Transporte", "100.00"),
    ("Entretenimiento", "50.00"),
    ("Salud", "200.00"),
    ("Educación", "300.00"),
    ("Hogar", "200.00"),
]


def _add_months(day: date, months: int) -> date:
    total = day.month - 1 + months
    return date(day.year + total // 12, total % 12 + 1, 1)


def _populate(db, today: date):
    user = crud.add_user(db, "Usuario Demo", DEMO_EMAIL, get_password_hash(DEMO_PASSWORD))
    db.add_all(Category(user_id=user.id, **cat) for cat in EXTRA_CATEGORIES)
    db.flush()
    categories = {c.name: c for c, _ in crud.list_categories(db, user.id)}
    logger.info(f"Demo user created with {len(categories)} categories")

    for name, amount, description, day in SAMPLE_TRANSACTIONS:
        category = categories[name]
        # Never date a sample in the future
        tx_date = min(today.replace(day=day), today)
        db.add(
            Transaction(
                user_id=user.id,
                category_id=category.id,
                amount=Decimal(amount),
                type=category.type,
                description=description,
                date=tx_date,
            )
        )

    db.add_all(
        [
            SavingsGoal(
                user_id=user.id,
                name="Vacaciones de verano",
                target_amount=Decimal("2000.00"),
                current_amount=Decimal("800.00"),
                target_date=date(today.year + 1, 6, 1),
            ),
            SavingsGoal(
                user_id=user.id,
                name="Fondo de emergencia",
                target_amount=Decimal("5000.00"),
                current_amount=Decimal("2500.00"),
                target_date=date(today.year + 1, 12, 31),
            ),
            SavingsGoal(
                user_id=user.id,
                name="Nueva laptop",
                target_amount=Decimal("1200.00"),
                current_amount=Decimal("1200.00"),
                target_date=_add_months(today, 1),
                is_achieved=True,
            ),
        ]
    )

    for name, amount in SAMPLE_BUDGETS:
        db.add(
            MonthlyBudget(
                user_id=user.id,
                category_id=categories[name].id,
                budget_amount=Decimal(amount),
                month=today.month,
                year=today.year,
            )
        )

    db.flush()


def seed(db, today: Optional[date] = None) -> bool:
    """Create the demo user and its data in one commit. Returns False if it already exists."""
    today = today or date.today()

    if crud.get_user_by_email(db, DEMO_EMAIL):
        logger.info(f"Demo user {DEMO_EMAIL} already exists, nothing to do")
        return False

    try:
        _populate(db, today)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Seeding failed, nothing was written: {e}")
        raise

    logger.info(
        f"Seeded {len(SAMPLE_TRANSACTIONS)} transactions, 3 savings goals "
        f"and {len(SAMPLE_BUDGETS)} budgets for {DEMO_EMAIL}"
    )
    return True


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    init_db()
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
