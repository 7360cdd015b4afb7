import datetime
import enum

from .base import WithCtime
from .id import EvaluationID, SchoolID, UnlockRequestID, UserID


class UnlockRequestStatus(enum.Enum):
    Pending = "pending"
    Granted = "granted"
    Rejected = "rejected"


class UnlockRequest(WithCtime):
    unlock_request_id: UnlockRequestID
    evaluation_id: EvaluationID
    requester_id: UserID
    school_id: SchoolID

    status: UnlockRequestStatus = UnlockRequestStatus.Pending
    comment: str | None = None
    reason: str | None = None
    resolved_by: UserID | None = None
    resolve_time: datetime.datetime | None = None
