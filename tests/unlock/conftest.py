"""In-memory fixtures for the unlock workflow; nothing here touches a database."""

from __future__ import annotations

import datetime
import typing as t

import pytest

from gradebook.model import Course, CourseID, Evaluation, EvaluationID, NotificationID, NotificationMessage, \
    SchoolID, UnlockRequest, UnlockRequestID, UnlockRequestStatus, UserID, UserRole
from gradebook.unlock.errors import EvaluationNotFoundError
from gradebook.unlock.policy import Actor

from ..conftest import LAST_MONDAY, NOW

SCHOOL = SchoolID()
COURSE = CourseID()


@pytest.fixture
def make_evaluation() -> t.Callable[..., Evaluation]:
    def create(
        description: str = "",
        owner_id: UserID | None = None,
        title: str = "Prueba 1",
        date: datetime.date | None = None,
        create_time: datetime.datetime = LAST_MONDAY,
    ) -> Evaluation:
        return Evaluation(
            evaluation_id=EvaluationID(),
            school_id=SCHOOL,
            course_id=COURSE,
            owner_id=owner_id or UserID(),
            title=title,
            description=description,
            date=date or create_time.date(),
            create_time=create_time,
            update_time=create_time,
        )

    return create


@pytest.fixture
def make_actor() -> t.Callable[..., Actor]:
    def create(role: UserRole = UserRole.Teacher, user_id: UserID | None = None, name: str = "Ana Pérez") -> Actor:
        return Actor(user_id=user_id or UserID(), school_id=SCHOOL, role=role, name=name)

    return create


class FakeEvaluationStore(object):
    def __init__(self, *evaluations: Evaluation):
        self.evaluations = {e.evaluation_id: e for e in evaluations}
        self.courses = {COURSE: Course(course_id=COURSE, school_id=SCHOOL, name="Matemáticas 5B",
                                       create_time=NOW, update_time=NOW)}
        self.calls: list[str] = []

    def get_evaluation(self, evaluation_id: EvaluationID) -> Evaluation | None:
        self.calls.append("get_evaluation")
        return self.evaluations.get(evaluation_id)

    def update_evaluation(self, evaluation_id: EvaluationID, *, description: str) -> Evaluation:
        self.calls.append("update_evaluation")
        if evaluation_id not in self.evaluations:
            raise EvaluationNotFoundError(evaluation_id)
        updated = self.evaluations[evaluation_id].model_copy(update={"description": description})
        self.evaluations[evaluation_id] = updated
        return updated

    def delete_evaluation(self, evaluation_id: EvaluationID) -> None:
        self.calls.append("delete_evaluation")
        if self.evaluations.pop(evaluation_id, None) is None:
            raise EvaluationNotFoundError(evaluation_id)

    def get_course(self, course_id: CourseID) -> Course | None:
        self.calls.append("get_course")
        return self.courses.get(course_id)


class FakeNotificationChannel(object):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[NotificationMessage, UserID | UserRole]] = []
        self.read: list[NotificationID] = []

    def create_notification(self, message: NotificationMessage, *, recipient_id: UserID, school_id: SchoolID) -> None:
        if self.fail:
            raise ConnectionError("notification service unavailable")
        self.sent.append((message, recipient_id))

    def create_notification_for_role(
        self, message: NotificationMessage, *, role: UserRole, school_id: SchoolID
    ) -> None:
        if self.fail:
            raise ConnectionError("notification service unavailable")
        self.sent.append((message, role))

    def mark_notification_read(self, notification_id: NotificationID) -> None:
        self.read.append(notification_id)


class FakeUnlockRequestLedger(object):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requests: dict[UnlockRequestID, UnlockRequest] = {}

    def find_pending(
        self, evaluation_id: EvaluationID, requester_id: UserID | None = None
    ) -> tuple[UnlockRequest, ...]:
        return tuple(
            r
            for r in self.requests.values()
            if r.evaluation_id == evaluation_id
            and r.status is UnlockRequestStatus.Pending
            and (requester_id is None or r.requester_id == requester_id)
        )

    def open(
        self, *, evaluation_id: EvaluationID, requester_id: UserID, school_id: SchoolID, comment: str | None
    ) -> UnlockRequest:
        request = UnlockRequest(
            unlock_request_id=UnlockRequestID(),
            evaluation_id=evaluation_id,
            requester_id=requester_id,
            school_id=school_id,
            comment=comment,
            create_time=NOW,
        )
        self.requests[request.unlock_request_id] = request
        return request

    def resolve(
        self,
        requests: t.Sequence[UnlockRequest],
        *,
        status: UnlockRequestStatus,
        resolved_by: UserID,
        reason: str | None = None,
    ) -> None:
        if self.fail:
            raise ConnectionError("ledger unavailable")
        for r in requests:
            self.requests[r.unlock_request_id] = r.model_copy(
                update={"status": status, "resolved_by": resolved_by, "reason": reason, "resolve_time": NOW}
            )
