from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from mibalance.core.security import decode_access_token
from mibalance.db import crud
from mibalance.db.database import get_db
from mibalance.db.tables import User


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user that still exists."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required")

    token = authorization.replace("Bearer ", "", 1)
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")

    user = crud.get_user_by_id(db, int(user_id))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def ok(message: Optional[str] = None, **data: Any) -> Dict[str, Any]:
    """Success envelope: ``{"success": true, "message"?, "data"?}`` with camelCase keys."""
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data:
        body["data"] = jsonable_encoder(data, by_alias=True)
    return body
