import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mibalance.db import crud
from mibalance.db.database import get_db
from mibalance.db.tables import Category, User
from mibalance.models.category import DEFAULT_CATEGORY_COLOR, CategoryCreate, CategoryPublic
from mibalance.models.common import TransactionType
from mibalance.routers.deps import get_current_user, ok

router = APIRouter()
logger = logging.getLogger(__name__)


def _public(category: Category, transaction_count: int) -> CategoryPublic:
    public = CategoryPublic.model_validate(category)
    public.transaction_count = transaction_count
    return public


def _get_owned(db: Session, user: User, category_id: int) -> Category:
    category = crud.get_category(db, user.id, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.get("")
def list_categories(
    type: Optional[TransactionType] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = crud.list_categories(db, user.id, type)
    return ok(categories=[_public(category, count) for category, count in rows])


@router.get("/{category_id}")
def get_category(category_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    category = _get_owned(db, user, category_id)
    return ok(category=_public(category, crud.count_category_transactions(db, category.id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if crud.find_category(db, user.id, payload.name, payload.type):
        raise HTTPException(status_code=400, detail="A category with this name and type already exists")

    category = crud.create_category(
        db,
        user.id,
        {
            "name": payload.name,
            "type": payload.type,
            "color": payload.color or DEFAULT_CATEGORY_COLOR,
            "icon": payload.icon,
        },
    )
    logger.info(f"User {user.id} created category {category.id} ({category.name})")
    return ok("Category created successfully", category=_public(category, 0))


@router.put("/{category_id}")
def update_category(
    category_id: int,
    payload: CategoryCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    category = _get_owned(db, user, category_id)

    if crud.find_category(db, user.id, payload.name, payload.type, exclude_id=category.id):
        raise HTTPException(status_code=400, detail="A category with this name and type already exists")

    # Transactions and budgets rely on the category keeping its type
    if payload.type != category.type and (
        crud.count_category_transactions(db, category.id) or crud.count_category_budgets(db, category.id)
    ):
        raise HTTPException(status_code=400, detail="Cannot change the type of a category in use")

    category = crud.update_category(
        db,
        category,
        {
            "name": payload.name,
            "type": payload.type,
            "color": payload.color or category.color,
            "icon": payload.icon,
        },
    )
    return ok(
        "Category updated successfully",
        category=_public(category, crud.count_category_transactions(db, category.id)),
    )


@router.delete("/{category_id}")
def delete_category(category_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    category = _get_owned(db, user, category_id)

    if crud.count_category_transactions(db, category.id) > 0:
        raise HTTPException(status_code=400, detail="Cannot delete a category that has transactions")

    crud.delete_category(db, category)
    logger.info(f"User {user.id} deleted category {category_id}")
    return ok("Category deleted successfully")
