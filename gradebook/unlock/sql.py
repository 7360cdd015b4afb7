"""Database-backed collaborators for the unlock workflow.

Every call runs in a transaction of its own, so a failure in one workflow step
never rolls back a step that already completed.
"""

from __future__ import annotations

import typing as t

from sqlalchemy.orm import Session

from gradebook.core.provider import TimestampProvider
from gradebook.model import Course, CourseID, Evaluation, EvaluationID, NotificationID, NotificationMessage, \
    SchoolID, UnlockRequest, UnlockRequestStatus, UserID, UserRole
from gradebook.storage import course as course_storage
from gradebook.storage import evaluation as evaluation_storage
from gradebook.storage import notification as notification_storage
from gradebook.storage import unlock_request as unlock_request_storage

from .errors import EvaluationNotFoundError
from .gateway import EvaluationStore, NotificationChannel, UnlockRequestLedger


class SQLEvaluationStore(EvaluationStore):
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_evaluation(self, evaluation_id: EvaluationID) -> Evaluation | None:
        with self._session.begin():
            return evaluation_storage.get(evaluation_id, session=self._session)

    def update_evaluation(self, evaluation_id: EvaluationID, *, description: str) -> Evaluation:
        with self._session.begin():
            evaluation = evaluation_storage.update(
                evaluation_id, {"description": description}, session=self._session
            )
        if evaluation is None:
            raise EvaluationNotFoundError(f"evaluation {evaluation_id} not found")
        return evaluation

    def delete_evaluation(self, evaluation_id: EvaluationID) -> None:
        with self._session.begin():
            deleted = evaluation_storage.delete(evaluation_id, session=self._session)
        if not deleted:
            raise EvaluationNotFoundError(f"evaluation {evaluation_id} not found")

    def get_course(self, course_id: CourseID) -> Course | None:
        with self._session.begin():
            return course_storage.get(course_id, session=self._session)


class SQLNotificationChannel(NotificationChannel):
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_notification(self, message: NotificationMessage, *, recipient_id: UserID, school_id: SchoolID) -> None:
        with self._session.begin():
            notification_storage.create(message, recipient_id=recipient_id, school_id=school_id, session=self._session)

    def create_notification_for_role(
        self, message: NotificationMessage, *, role: UserRole, school_id: SchoolID
    ) -> None:
        with self._session.begin():
            notification_storage.create_for_role(message, role=role, school_id=school_id, session=self._session)

    def mark_notification_read(self, notification_id: NotificationID) -> None:
        with self._session.begin():
            notification_storage.mark_read(notification_id, session=self._session)


class SQLUnlockRequestLedger(UnlockRequestLedger):
    def __init__(self, session: Session, utcnow: TimestampProvider) -> None:
        self._session = session
        self._utcnow = utcnow

    def find_pending(
        self, evaluation_id: EvaluationID, requester_id: UserID | None = None
    ) -> tuple[UnlockRequest, ...]:
        with self._session.begin():
            return unlock_request_storage.find(
                evaluation_id=evaluation_id,
                requester_id=requester_id,
                status=UnlockRequestStatus.Pending,
                session=self._session,
            )

    def open(
        self,
        *,
        evaluation_id: EvaluationID,
        requester_id: UserID,
        school_id: SchoolID,
        comment: str | None,
    ) -> UnlockRequest:
        with self._session.begin():
            return unlock_request_storage.create(
                {
                    "evaluation_id": evaluation_id,
                    "requester_id": requester_id,
                    "school_id": school_id,
                    "comment": comment,
                },
                session=self._session,
            )

    def resolve(
        self,
        requests: t.Sequence[UnlockRequest],
        *,
        status: UnlockRequestStatus,
        resolved_by: UserID,
        reason: str | None = None,
    ) -> None:
        with self._session.begin():
            unlock_request_storage.resolve(
                [r.unlock_request_id for r in requests],
                status=status,
                resolved_by=resolved_by,
                resolve_time=self._utcnow(),
                reason=reason,
                session=self._session,
            )
