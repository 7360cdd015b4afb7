"""Tests for the gradebook.model domain types."""

from __future__ import annotations

import datetime

import pytest

from gradebook.model import BaseModel, Course, CourseID, Evaluation, EvaluationID, Notification, NotificationID, \
    School, SchoolID, SchoolMembership, UnlockRequest, UnlockRequestID, UnlockRequestStatus, User, UserID, \
    UserRole, UserWithMemberships, WithCtime, WithTimestamps

from .conftest import NOW


class TestTimestampedModels(object):
    @pytest.mark.parametrize("model", [Evaluation, School, Course, User, SchoolMembership, UserWithMemberships])
    def test_carries_both_timestamps(self, model: type[BaseModel]) -> None:
        assert issubclass(model, WithTimestamps)
        assert {"create_time", "update_time"} <= set(model.model_fields)

    @pytest.mark.parametrize("model", [Notification, UnlockRequest])
    def test_carries_create_time(self, model: type[BaseModel]) -> None:
        assert issubclass(model, WithCtime)
        assert "create_time" in model.model_fields
        assert "update_time" not in model.model_fields

    def test_build_evaluation(self) -> None:
        evaluation = Evaluation(
            evaluation_id=EvaluationID(),
            school_id=SchoolID(),
            course_id=CourseID(),
            owner_id=UserID(),
            title="Prueba 1",
            description="Unidad 3@25",
            date=datetime.date(2026, 10, 20),
            create_time=NOW,
            update_time=NOW,
        )

        assert evaluation.override_grant is None
        assert evaluation.model_dump()["update_time"] == NOW

    def test_build_membership_and_request(self) -> None:
        membership = SchoolMembership(
            user_id=UserID(), school_id=SchoolID(), role=UserRole.Teacher, create_time=NOW, update_time=NOW
        )
        request = UnlockRequest(
            unlock_request_id=UnlockRequestID(),
            evaluation_id=EvaluationID(),
            requester_id=membership.user_id,
            school_id=membership.school_id,
            create_time=NOW,
        )

        assert request.status is UnlockRequestStatus.Pending
        assert request.resolve_time is None

    def test_build_notification(self) -> None:
        notification = Notification(
            notification_id=NotificationID(),
            school_id=SchoolID(),
            recipient_id=UserID(),
            title="Aviso",
            content="Contenido",
            create_time=NOW,
        )
        assert notification.is_read is False
