"""Collaborator contracts consumed by the unlock workflow.

The workflow never touches storage directly; it talks to these protocols so
that each collaborator call is an independent, individually failing step.
"""

from __future__ import annotations

import typing as t
from abc import abstractmethod

from gradebook.model import Course, CourseID, Evaluation, EvaluationID, NotificationID, NotificationMessage, \
    SchoolID, UnlockRequest, UnlockRequestStatus, UserID, UserRole


class EvaluationStore(t.Protocol):
    @abstractmethod
    def get_evaluation(self, evaluation_id: EvaluationID) -> Evaluation | None: ...

    @abstractmethod
    def update_evaluation(self, evaluation_id: EvaluationID, *, description: str) -> Evaluation:
        """Persist a recomputed description. Last write wins."""
        ...

    @abstractmethod
    def delete_evaluation(self, evaluation_id: EvaluationID) -> None: ...

    @abstractmethod
    def get_course(self, course_id: CourseID) -> Course | None: ...


class NotificationChannel(t.Protocol):
    @abstractmethod
    def create_notification(self, message: NotificationMessage, *, recipient_id: UserID, school_id: SchoolID) -> None:
        ...

    @abstractmethod
    def create_notification_for_role(
        self, message: NotificationMessage, *, role: UserRole, school_id: SchoolID
    ) -> None:
        """Fan a message out to every user holding `role` in the school."""
        ...

    @abstractmethod
    def mark_notification_read(self, notification_id: NotificationID) -> None: ...


class UnlockRequestLedger(t.Protocol):
    @abstractmethod
    def find_pending(
        self, evaluation_id: EvaluationID, requester_id: UserID | None = None
    ) -> tuple[UnlockRequest, ...]: ...

    @abstractmethod
    def open(
        self,
        *,
        evaluation_id: EvaluationID,
        requester_id: UserID,
        school_id: SchoolID,
        comment: str | None,
    ) -> UnlockRequest: ...

    @abstractmethod
    def resolve(
        self,
        requests: t.Sequence[UnlockRequest],
        *,
        status: UnlockRequestStatus,
        resolved_by: UserID,
        reason: str | None = None,
    ) -> None: ...
