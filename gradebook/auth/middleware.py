"""Authentication dependencies for FastAPI routes."""

from __future__ import annotations

import typing as t

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from gradebook.core import di
from gradebook.model import SchoolID, User, UserRole
from gradebook.storage import user as user_storage
from gradebook.unlock.policy import Actor
from gradebook.web.gradebook.dependencies import get_session

from .jwt import JWTManager, TokenData

bearer_scheme = HTTPBearer(auto_error=False)


class AuthContext(t.NamedTuple):
    """Current authentication context."""

    user: User
    school_id: SchoolID
    role: UserRole
    token_data: TokenData

    @property
    def actor(self) -> Actor:
        return Actor(user_id=self.user.user_id, school_id=self.school_id, role=self.role, name=self.user.name)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@di.inject
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
    jwt_manager: JWTManager = Depends(di.Provide["auth.jwt_manager"]),
) -> AuthContext:
    """Resolve the bearer token to a user and their current role in the token's school.

    The role is read from the membership table, so a demotion takes effect
    before the token expires.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    token_data = jwt_manager.decode_token(credentials.credentials)
    if token_data is None:
        raise _unauthorized("Invalid or expired token")

    with session.begin():
        user = user_storage.get(user_id=token_data.user_id, session=session)
        if user is None:
            raise _unauthorized("User not found")
        role = user_storage.get_role(token_data.user_id, token_data.school_id, session=session)
        if role is None:
            raise _unauthorized("Not a member of this school")

    return AuthContext(user=user, school_id=token_data.school_id, role=role, token_data=token_data)


def require_role(*allowed_roles: UserRole) -> t.Callable[..., AuthContext]:
    """Dependency factory to require specific roles.

    Usage:
        @router.get("/admin")
        def admin_route(auth: AuthContext = Depends(require_role(UserRole.SuperAdmin))):
            ...
    """

    def check_role(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
        if auth.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{auth.role.value}' not authorized for this resource",
            )
        return auth

    return check_role


# staff who may see a school's evaluations
require_staff = require_role(UserRole.SuperAdmin, UserRole.Admin, UserRole.Teacher)
