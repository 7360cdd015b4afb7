from __future__ import annotations

import typing as t

import bcrypt
import pydantic as p
import sqlalchemy as sqla

from gradebook.core import di
from gradebook.model import SchoolID, SchoolMembership, User, UserID, UserRole, UserWithMemberships

from . import Session
from .table import school_memberships, users


@t.overload
def get(
    *,
    user_id: UserID,
    with_memberships: t.Literal[False] = ...,
    session: Session = ...,
) -> User | None: ...


@t.overload
def get(
    *,
    user_id: UserID,
    with_memberships: t.Literal[True],
    session: Session = ...,
) -> UserWithMemberships | None: ...


@t.overload
def get(
    *,
    email: str,
    with_memberships: t.Literal[False] = ...,
    session: Session = ...,
) -> User | None: ...


@t.overload
def get(
    *,
    email: str,
    with_memberships: t.Literal[True],
    session: Session = ...,
) -> UserWithMemberships | None: ...


def get(
    *,
    user_id: UserID | None = None,
    email: str | None = None,
    with_memberships: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> User | UserWithMemberships | None:
    """Get a user by ID or email.

    Exactly one of user_id or email must be provided.
    """
    if user_id is None and email is None:
        raise ValueError("Either user_id or email must be provided")
    if user_id is not None and email is not None:
        raise ValueError("Only one of user_id or email should be provided")

    if user_id is not None:
        stmt = sqla.select(users.__table__).where(users.user_id == user_id)
    else:
        stmt = sqla.select(users.__table__).where(users.email == email)

    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None

    user = User(**row)

    if with_memberships:
        membership_stmt = sqla.select(school_memberships.__table__).where(school_memberships.user_id == user.user_id)
        membership_rows = session.execute(membership_stmt).mappings().all()
        memberships = [SchoolMembership(**m) for m in membership_rows]
        return UserWithMemberships(**user.model_dump(), memberships=memberships)

    return user


def find(
    *,
    school_id: SchoolID | None = None,
    role: UserRole | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[User, ...]:
    """Find users, optionally restricted to the holders of `role` in a school."""
    if school_id is not None:
        stmt = (
            sqla.select(users.__table__)
            .join(school_memberships, users.user_id == school_memberships.user_id)
            .where(school_memberships.school_id == school_id)
        )
        if role is not None:
            stmt = stmt.where(school_memberships.role == role)
    else:
        stmt = sqla.select(users.__table__)
    rows = session.execute(stmt.order_by(users.name)).mappings().all()
    return tuple(User(**row) for row in rows)


def get_role(
    user_id: UserID,
    school_id: SchoolID,
    session: Session = di.Provide["storage.persistent.session"],
) -> UserRole | None:
    stmt = sqla.select(school_memberships.role).where(
        school_memberships.user_id == user_id, school_memberships.school_id == school_id
    )
    return session.execute(stmt).scalar_one_or_none()


def create(
    *,
    email: str,
    name: str,
    password: p.Secret[str] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    """Create a new user.

    Password is hashed internally using bcrypt.
    """
    password_hash = None
    if password is not None:
        password_hash = bcrypt.hashpw(password.get_secret_value().encode(), bcrypt.gensalt()).decode()
    user = users(user_id=UserID(), email=email, name=name, password_hash=password_hash)
    session.add(user)
    session.flush()
    return get(user_id=user.user_id, session=session)  # type: ignore


def add_membership(
    user_id: UserID,
    school_id: SchoolID,
    role: UserRole,
    session: Session = di.Provide["storage.persistent.session"],
) -> SchoolMembership:
    membership = school_memberships(user_id=user_id, school_id=school_id, role=role)
    session.add(membership)
    session.flush()
    stmt = sqla.select(school_memberships.__table__).where(
        school_memberships.user_id == user_id, school_memberships.school_id == school_id
    )
    return SchoolMembership(**session.execute(stmt).mappings().one())


def verify_password(user: User, password: p.Secret[str]) -> bool:
    if user.password_hash is None:
        return False
    return bcrypt.checkpw(password.get_secret_value().encode(), user.password_hash.encode())
