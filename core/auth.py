from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from core.database import get_db
from core.errors import AuthenticationError, AuthorizationError
from crud.token_crud import get_token
from crud.user_crud import get_user
from models.enums import Role


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    token = _extract_bearer_token(authorization)
    if not token:
        raise AuthenticationError("Not authenticated")

    t = get_token(db, token)
    if not t or t.revoked_at is not None:
        raise AuthenticationError("Invalid token")

    # Check expiry
    now = datetime.now(timezone.utc)
    exp = t.expires_at
    if exp.tzinfo is None:
        exp = exp.replace(tzinfo=timezone.utc)
    if exp < now:
        raise AuthenticationError("Token expired")

    user = get_user(db, t.user_id)
    if not user:
        raise AuthenticationError("User not found")
    return user


def require_role(*roles: Role):
    """Dependency for endpoints that are not scoped to a single project."""
    allowed = {r.value for r in roles}

    def dependency(current_user = Depends(get_current_user)):
        if current_user.role not in allowed:
            raise AuthorizationError("Forbidden")
        return current_user

    return dependency
