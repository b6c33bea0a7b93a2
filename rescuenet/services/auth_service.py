"""Auth service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rescuenet.core.security import hash_password, verify_password
from rescuenet.models.user import User
from rescuenet.schemas.auth import RegisterRequest


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get user by email."""
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def create_user(db: Session, data: RegisterRequest) -> User:
    """Create a new user."""
    user = User(
        email=data.email,
        hashed_password=hash_password(data.password),
        full_name=data.full_name,
        role=data.role,
        latitude=data.latitude,
        longitude=data.longitude,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate user by email and password."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    if not user.is_active:
        return None
    return user
