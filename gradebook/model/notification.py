import enum

from .base import BaseModel, WithCtime
from .id import NotificationID, SchoolID, UserID


class NotificationKind(enum.Enum):
    Plain = "plain"
    UnlockRequest = "unlock_request"
    UnlockRejected = "unlock_rejected"


class NotificationMessage(BaseModel):
    title: str
    content: str


class Notification(WithCtime):
    notification_id: NotificationID
    school_id: SchoolID
    recipient_id: UserID

    title: str
    content: str
    is_read: bool = False
