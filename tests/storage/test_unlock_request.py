"""Tests for gradebook.storage.unlock_request."""

from __future__ import annotations

import typing as t

import pytest
from sqlalchemy.orm import Session

from gradebook.model import Evaluation, UnlockRequest, UnlockRequestStatus, User
from gradebook.storage import unlock_request as unlock_request_storage

from ..conftest import NOW


@pytest.fixture
def request_factory(
    db_session: Session, evaluation_factory: t.Callable[..., Evaluation], teacher: User
) -> t.Callable[..., UnlockRequest]:
    def create_request(evaluation: Evaluation | None = None, comment: str | None = None) -> UnlockRequest:
        evaluation = evaluation or evaluation_factory()
        with db_session.begin():
            return unlock_request_storage.create(
                {
                    "evaluation_id": evaluation.evaluation_id,
                    "requester_id": teacher.user_id,
                    "school_id": evaluation.school_id,
                    "comment": comment,
                },
                session=db_session,
            )

    return create_request


class TestCreate(object):
    def test_new_request_is_pending(self, request_factory: t.Callable[..., UnlockRequest]) -> None:
        request = request_factory(comment="corregir")

        assert request.status is UnlockRequestStatus.Pending
        assert request.comment == "corregir"
        assert request.resolved_by is None
        assert request.resolve_time is None


class TestFind(object):
    def test_find_by_status(
        self,
        db_session: Session,
        request_factory: t.Callable[..., UnlockRequest],
        superadmin: User,
    ) -> None:
        resolved = request_factory()
        pending = request_factory()
        with db_session.begin():
            unlock_request_storage.resolve(
                [resolved.unlock_request_id],
                status=UnlockRequestStatus.Rejected,
                resolved_by=superadmin.user_id,
                resolve_time=NOW,
                session=db_session,
            )

        with db_session.begin():
            result = unlock_request_storage.find(status=UnlockRequestStatus.Pending, session=db_session)

        assert [r.unlock_request_id for r in result] == [pending.unlock_request_id]


class TestResolve(object):
    def test_resolve_records_resolution(
        self,
        db_session: Session,
        request_factory: t.Callable[..., UnlockRequest],
        superadmin: User,
    ) -> None:
        request = request_factory()

        with db_session.begin():
            count = unlock_request_storage.resolve(
                [request.unlock_request_id],
                status=UnlockRequestStatus.Rejected,
                resolved_by=superadmin.user_id,
                resolve_time=NOW,
                reason="fuera de plazo",
                session=db_session,
            )
            result = unlock_request_storage.get(request.unlock_request_id, session=db_session)

        assert count == 1
        assert result is not None
        assert result.status is UnlockRequestStatus.Rejected
        assert result.resolved_by == superadmin.user_id
        assert result.resolve_time == NOW
        assert result.reason == "fuera de plazo"

    def test_resolved_requests_are_left_alone(
        self,
        db_session: Session,
        request_factory: t.Callable[..., UnlockRequest],
        superadmin: User,
    ) -> None:
        request = request_factory()
        with db_session.begin():
            unlock_request_storage.resolve(
                [request.unlock_request_id],
                status=UnlockRequestStatus.Granted,
                resolved_by=superadmin.user_id,
                resolve_time=NOW,
                session=db_session,
            )

        with db_session.begin():
            count = unlock_request_storage.resolve(
                [request.unlock_request_id],
                status=UnlockRequestStatus.Rejected,
                resolved_by=superadmin.user_id,
                resolve_time=NOW,
                session=db_session,
            )
            result = unlock_request_storage.get(request.unlock_request_id, session=db_session)

        assert count == 0
        assert result is not None
        assert result.status is UnlockRequestStatus.Granted

    def test_resolve_to_pending_is_rejected(
        self, db_session: Session, request_factory: t.Callable[..., UnlockRequest], superadmin: User
    ) -> None:
        request = request_factory()
        with pytest.raises(ValueError):
            unlock_request_storage.resolve(
                [request.unlock_request_id],
                status=UnlockRequestStatus.Pending,
                resolved_by=superadmin.user_id,
                resolve_time=NOW,
                session=db_session,
            )
