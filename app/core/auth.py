from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from fastapi import Depends, Header, HTTPException

from app.models.user import UserRole

# Roles allowed to change case status and manage hearings
COURT_STAFF_ROLES = frozenset({UserRole.ADMIN.value, UserRole.JUDGE.value, UserRole.CLERK.value})


@dataclass(frozen=True)
class AuthContext:
    """Acting principal as asserted by the upstream gateway"""

    user_id: Optional[str] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def has_any_role(self, roles) -> bool:
        return bool(self.roles & frozenset(roles))


def get_auth_context(
    x_user_id: Optional[str] = Header(None),
    x_user_roles: Optional[str] = Header(None),
) -> AuthContext:
    roles = frozenset(r.strip().lower() for r in (x_user_roles or "").split(",") if r.strip())
    return AuthContext(user_id=x_user_id or None, roles=roles)


def require_user(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not auth.is_authenticated:
        raise HTTPException(status_code=401, detail="Authentication required")
    return auth


def require_court_staff(auth: AuthContext = Depends(require_user)) -> AuthContext:
    if not auth.has_any_role(COURT_STAFF_ROLES):
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return auth
