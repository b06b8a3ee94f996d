"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from notification_engine.domain.entities import User
from notification_engine.infrastructure.database import get_db
from notification_engine.infrastructure.repositories import UserRepository


def get_active_user(user_id: int, db: Session = Depends(get_db)) -> User:
    """Resolve the user addressed by the ``user_id`` path parameter."""

    user = UserRepository(db).get(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return user


__all__ = ["get_active_user"]
