__all__ = [
    # Base
    "BaseModel",
    "WithCtime",
    "WithMtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    # ID Types
    "SchoolID",
    "UserID",
    "CourseID",
    "EvaluationID",
    "NotificationID",
    "UnlockRequestID",
    # School & User
    "School",
    "Course",
    "User",
    "UserRole",
    "SchoolMembership",
    "UserWithMemberships",
    # Evaluation
    "Evaluation",
    "OverrideGrant",
    # Notification
    "Notification",
    "NotificationKind",
    "NotificationMessage",
    # Unlock requests
    "UnlockRequest",
    "UnlockRequestStatus",
]

from .base import BaseModel, WithCtime, WithMtime, WithTimestamps
from .enum import DeploymentEnvironment
from .evaluation import Evaluation, OverrideGrant
from .id import CourseID, EvaluationID, NotificationID, SchoolID, UnlockRequestID, UserID
from .notification import Notification, NotificationKind, NotificationMessage
from .school import Course, School
from .unlock import UnlockRequest, UnlockRequestStatus
from .user import SchoolMembership, User, UserRole, UserWithMemberships
