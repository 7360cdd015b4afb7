"""View models for the notification inbox."""

from __future__ import annotations

import datetime

import pydantic as p

from gradebook.model import NotificationID, NotificationKind


class UnlockRequestTags(p.BaseModel):
    """Identifiers carried in the title of an unlock request."""

    evaluation_id: str | None
    requesting_user_id: str | None
    evaluation_name: str | None
    actionable: bool


class NotificationResponse(p.BaseModel):
    notification_id: NotificationID
    kind: NotificationKind
    title: str
    content: str
    display_title: str
    display_body: str
    action_link: str | None
    unlock_request: UnlockRequestTags | None = None
    is_read: bool
    create_time: datetime.datetime


class InboxResponse(p.BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
    # clients should poll no more often than this
    poll_interval_seconds: int


class MarkReadResponse(p.BaseModel):
    updated: int
