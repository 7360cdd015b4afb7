"""Notification inbox API routes."""

from __future__ import annotations

import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from gradebook.auth.middleware import AuthContext, get_current_user
from gradebook.core import di
from gradebook.core.config import NotificationSettings
from gradebook.model import Notification, NotificationID
from gradebook.storage import notification as notification_storage
from gradebook.unlock import protocol

from ..dependencies import get_notification_settings, get_session
from ..view.notification import InboxResponse, MarkReadResponse, NotificationResponse, UnlockRequestTags

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _build_response(notification: Notification) -> NotificationResponse:
    displayed = protocol.parse_notification(notification)
    tags = None
    if displayed.unlock_request is not None:
        tags = UnlockRequestTags(
            evaluation_id=displayed.unlock_request.evaluation_id,
            requesting_user_id=displayed.unlock_request.requesting_user_id,
            evaluation_name=displayed.unlock_request.evaluation_name,
            actionable=displayed.unlock_request.actionable,
        )
    return NotificationResponse(
        notification_id=notification.notification_id,
        kind=displayed.kind,
        title=notification.title,
        content=notification.content,
        display_title=displayed.display_title,
        display_body=displayed.display_body,
        action_link=displayed.action_link,
        unlock_request=tags,
        is_read=notification.is_read,
        create_time=notification.create_time,
    )


@router.get("", operation_id="list_notifications")
@di.inject
def list_notifications(
    since: datetime.datetime | None = Query(None, description="only notifications created after this instant"),
    unread_only: bool = Query(False),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
    config: NotificationSettings = Depends(get_notification_settings),
) -> InboxResponse:
    """The caller's notifications, newest first, with parsed display fields."""
    if since is not None and since.tzinfo is None:
        since = since.replace(tzinfo=datetime.UTC)
    with session.begin():
        notifications = notification_storage.find(
            recipient_id=auth.user.user_id,
            since=since,
            unread_only=unread_only,
            limit=config.page_size,
            session=session,
        )
        unread_count = notification_storage.count_unread(auth.user.user_id, session=session)

    return InboxResponse(
        notifications=[_build_response(n) for n in notifications],
        unread_count=unread_count,
        poll_interval_seconds=config.poll_interval_seconds,
    )


@router.post("/read-all", operation_id="mark_all_notifications_read")
@di.inject
def mark_all_read(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> MarkReadResponse:
    with session.begin():
        updated = notification_storage.mark_all_read(auth.user.user_id, session=session)
    return MarkReadResponse(updated=updated)


@router.post("/{notification_id}/read", operation_id="mark_notification_read")
@di.inject
def mark_read(
    notification_id: NotificationID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> MarkReadResponse:
    with session.begin():
        notification = notification_storage.get(notification_id, session=session)
        if notification is None or notification.recipient_id != auth.user.user_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
        updated = notification_storage.mark_read(notification_id, session=session)
    return MarkReadResponse(updated=int(updated))
