"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rescuenet.core.errors import NotAuthenticated, NotAuthorized
from rescuenet.core.security import decode_access_token
from rescuenet.db.session import get_db
from rescuenet.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Resolve the bearer token to an active user. Raises 401 otherwise."""
    if not credentials:
        raise NotAuthenticated("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload or not str(payload.get("sub", "")).isdigit():
        raise NotAuthenticated("Invalid or expired token")
    user = db.get(User, int(payload["sub"]))
    if not user:
        raise NotAuthenticated("User not found")
    if not user.is_active:
        raise NotAuthenticated("User is inactive")
    return user


def require_citizen(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Require current user to be a citizen (can trigger SOS)."""
    if current_user.role != UserRole.CITIZEN:
        raise NotAuthorized("Only registered citizens can trigger SOS.")
    return current_user


def require_volunteer(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Require current user to be a volunteer (receives and answers SOS)."""
    if current_user.role != UserRole.VOLUNTEER:
        raise NotAuthorized("Only volunteers can access this resource.")
    return current_user
