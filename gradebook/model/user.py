import enum

from pydantic import EmailStr

from .base import WithTimestamps
from .id import SchoolID, UserID


class UserRole(enum.Enum):
    SuperAdmin = "superadmin"
    Admin = "admin"
    Teacher = "teacher"
    Parent = "parent"
    Student = "student"


class User(WithTimestamps):
    user_id: UserID
    email: EmailStr
    name: str
    password_hash: str | None = None


class SchoolMembership(WithTimestamps):
    user_id: UserID
    school_id: SchoolID
    role: UserRole


class UserWithMemberships(User):
    memberships: list[SchoolMembership] = []
