from __future__ import annotations

import datetime

import sqlalchemy as sqla

from gradebook.core import di
from gradebook.model import Notification, NotificationID, NotificationMessage, SchoolID, UserID, UserRole

from . import Session
from .table import notifications, school_memberships


def get(key: NotificationID, session: Session = di.Provide["storage.persistent.session"]) -> Notification | None:
    stmt = sqla.select(notifications.__table__).where(notifications.notification_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Notification(**row) if row else None


def find(
    *,
    recipient_id: UserID,
    since: datetime.datetime | None = None,
    unread_only: bool = False,
    limit: int | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Notification, ...]:
    """Newest first."""
    stmt = (
        sqla.select(notifications.__table__)
        .where(notifications.recipient_id == recipient_id)
        .order_by(notifications.create_time.desc())
    )
    if since is not None:
        stmt = stmt.where(notifications.create_time > since)
    if unread_only:
        stmt = stmt.where(notifications.is_read.is_(False))
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = session.execute(stmt).mappings().all()
    return tuple(Notification(**row) for row in rows)


def count_unread(recipient_id: UserID, session: Session = di.Provide["storage.persistent.session"]) -> int:
    stmt = (
        sqla.select(sqla.func.count())
        .select_from(notifications)
        .where(notifications.recipient_id == recipient_id, notifications.is_read.is_(False))
    )
    return session.execute(stmt).scalar_one()


def create(
    message: NotificationMessage,
    *,
    recipient_id: UserID,
    school_id: SchoolID,
    create_time: datetime.datetime | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Notification:
    notification = notifications(
        notification_id=NotificationID(),
        school_id=school_id,
        recipient_id=recipient_id,
        title=message.title,
        content=message.content,
        create_time=create_time,  # type: ignore[arg-type]
    )
    session.add(notification)
    session.flush()
    return get(notification.notification_id, session=session)  # type: ignore


def create_for_role(
    message: NotificationMessage,
    *,
    role: UserRole,
    school_id: SchoolID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Notification, ...]:
    """Deliver one copy of `message` to every member of the school holding `role`."""
    stmt = sqla.select(school_memberships.user_id).where(
        school_memberships.school_id == school_id, school_memberships.role == role
    )
    recipients = session.execute(stmt).scalars().all()
    return tuple(
        create(message, recipient_id=recipient_id, school_id=school_id, session=session) for recipient_id in recipients
    )


def mark_read(key: NotificationID, session: Session = di.Provide["storage.persistent.session"]) -> bool:
    stmt = sqla.update(notifications).where(notifications.notification_id == key).values(is_read=True)
    return session.execute(stmt).rowcount > 0  # type: ignore[attr-defined]


def mark_all_read(recipient_id: UserID, session: Session = di.Provide["storage.persistent.session"]) -> int:
    stmt = (
        sqla.update(notifications)
        .where(notifications.recipient_id == recipient_id, notifications.is_read.is_(False))
        .values(is_read=True)
    )
    return session.execute(stmt).rowcount  # type: ignore[attr-defined]
