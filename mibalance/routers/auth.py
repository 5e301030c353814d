import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from mibalance.core.security import create_access_token, get_password_hash, verify_password
from mibalance.db import crud
from mibalance.db.database import get_db
from mibalance.db.tables import User
from mibalance.models.user import UserCreate, UserLogin, UserPublic
from mibalance.routers.deps import get_current_user, ok

router = APIRouter()
logger = logging.getLogger(__name__)


def _issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id)})


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, db: Session = Depends(get_db)):
    # Check if user already exists
    if crud.get_user_by_email(db, user.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    created = crud.create_user(
        db,
        name=user.name,
        email=user.email,
        password_hash=get_password_hash(user.password),
    )
    logger.info(f"Registered user {created.id} ({created.email})")

    return ok(
        "User registered successfully",
        user=UserPublic.model_validate(created),
        token=_issue_token(created),
    )


@router.post("/login")
def login(login_data: UserLogin, db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, login_data.email)

    if not user:
        logger.warning(f"User not found: {login_data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not verify_password(login_data.password, user.password_hash):
        logger.warning(f"Invalid password for user: {login_data.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    logger.info(f"Login successful for user: {login_data.email}")
    return ok(
        "Login successful",
        user=UserPublic.model_validate(user),
        token=_issue_token(user),
    )


def _verified_user(authorization: Optional[str] = Header(None), db: Session = Depends(get_db)) -> User:
    # /verify answers 401 for every token problem, malformed ones included
    try:
        return get_current_user(authorization, db)
    except HTTPException as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.detail)


@router.get("/verify")
def verify(user: User = Depends(_verified_user)):
    """Check that the bearer token is valid and its user still exists."""
    return ok(user=UserPublic.model_validate(user))
