import logging
import math
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from mibalance.db import crud
from mibalance.db.database import get_db
from mibalance.db.tables import Transaction, User
from mibalance.models.common import TransactionType
from mibalance.models.transaction import Pagination, TransactionCreate, TransactionPublic
from mibalance.routers.deps import get_current_user, ok

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_owned(db: Session, user: User, transaction_id: int) -> Transaction:
    transaction = crud.get_transaction(db, user.id, transaction_id)
    if not transaction:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return transaction


def _check_category(db: Session, user: User, payload: TransactionCreate):
    """The category, when given, must belong to the user and share the transaction type."""
    if not payload.category_id:
        return
    category = crud.get_category(db, user.id, payload.category_id)
    if not category:
        raise HTTPException(status_code=400, detail="Category not found")
    if category.type != payload.type:
        raise HTTPException(status_code=400, detail="Transaction type does not match category type")


def _fields(payload: TransactionCreate) -> dict:
    return {
        "amount": payload.amount,
        "description": payload.description,
        "type": payload.type,
        "category_id": payload.category_id or None,
        "date": payload.date,
    }


@router.get("")
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: Optional[TransactionType] = None,
    category_id: Optional[int] = Query(None, alias="categoryId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    search: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    items, total = crud.search_transactions(
        db,
        user.id,
        page=page,
        limit=limit,
        tx_type=type,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    total_pages = math.ceil(total / limit)

    return ok(
        transactions=[TransactionPublic.model_validate(item) for item in items],
        pagination=Pagination(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )


@router.get("/{transaction_id}")
def get_transaction(transaction_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return ok(transaction=TransactionPublic.model_validate(_get_owned(db, user, transaction_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_category(db, user, payload)
    transaction = crud.create_transaction(db, user.id, _fields(payload))
    logger.info(f"User {user.id} recorded {transaction.type.value} {transaction.amount} (id={transaction.id})")
    return ok("Transaction created successfully", transaction=TransactionPublic.model_validate(transaction))


@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: int,
    payload: TransactionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    transaction = _get_owned(db, user, transaction_id)
    _check_category(db, user, payload)
    transaction = crud.update_transaction(db, transaction, _fields(payload))
    return ok("Transaction updated successfully", transaction=TransactionPublic.model_validate(transaction))


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    transaction = _get_owned(db, user, transaction_id)
    crud.delete_transaction(db, transaction)
    logger.info(f"User {user.id} deleted transaction {transaction_id}")
    return ok("Transaction deleted successfully")
