"""Tests for gradebook.unlock.workflow against in-memory collaborators."""

from __future__ import annotations

import decimal
import typing as t

import pytest

from gradebook.model import Evaluation, EvaluationID, NotificationID, UnlockRequestStatus, UserID, UserRole
from gradebook.unlock import codec, protocol
from gradebook.unlock.errors import EvaluationLockedError, EvaluationNotFoundError, InvalidDescriptionError, \
    InvalidTransitionError, NotificationDeliveryError, NotPermittedError, RequestResolutionError
from gradebook.unlock.policy import Actor, LockPolicy
from gradebook.unlock.workflow import UnlockWorkflow

from ..conftest import NOW, THIS_MONDAY
from .conftest import FakeEvaluationStore, FakeNotificationChannel, FakeUnlockRequestLedger


class Harness(t.NamedTuple):
    workflow: UnlockWorkflow
    evaluations: FakeEvaluationStore
    notifications: FakeNotificationChannel
    requests: FakeUnlockRequestLedger
    owner: Actor
    admin: Actor
    locked: Evaluation


@pytest.fixture
def harness(make_evaluation: t.Callable[..., Evaluation], make_actor: t.Callable[..., Actor]) -> Harness:
    owner = make_actor(UserRole.Teacher, name="Ana Pérez")
    admin = make_actor(UserRole.SuperAdmin, name="Director")
    locked = make_evaluation(description="Unidad 3@25", owner_id=owner.user_id)

    evaluations = FakeEvaluationStore(locked)
    notifications = FakeNotificationChannel()
    requests = FakeUnlockRequestLedger()
    workflow = UnlockWorkflow(
        evaluations, notifications, requests, policy=LockPolicy(grace_business_days=3), utcnow=lambda: NOW
    )
    return Harness(workflow, evaluations, notifications, requests, owner, admin, locked)


class TestLoad(object):
    def test_missing_evaluation(self, harness: Harness) -> None:
        with pytest.raises(EvaluationNotFoundError):
            harness.workflow.load(EvaluationID())


class TestSubmitUnlockRequest(object):
    def test_notifies_bypass_role_and_opens_request(self, harness: Harness) -> None:
        request = harness.workflow.submit_unlock_request(harness.locked, harness.owner, "  corregir nota  ")

        assert request.status is UnlockRequestStatus.Pending
        assert request.comment == "corregir nota"
        [(message, recipient)] = harness.notifications.sent
        assert recipient is UserRole.SuperAdmin
        parsed = protocol.parse_request(message)
        assert parsed is not None
        assert parsed.evaluation_id == str(harness.locked.evaluation_id)
        assert parsed.requesting_user_id == str(harness.owner.user_id)
        assert parsed.action_link == f"/evaluations/edit/{harness.locked.evaluation_id}"

    def test_resubmission_while_pending_is_idempotent(self, harness: Harness) -> None:
        first = harness.workflow.submit_unlock_request(harness.locked, harness.owner)
        second = harness.workflow.submit_unlock_request(harness.locked, harness.owner, "otra vez")

        assert second.unlock_request_id == first.unlock_request_id
        assert len(harness.notifications.sent) == 1
        assert len(harness.requests.requests) == 1

    def test_only_owner_may_request(self, harness: Harness, make_actor: t.Callable[..., Actor]) -> None:
        with pytest.raises(NotPermittedError):
            harness.workflow.submit_unlock_request(harness.locked, make_actor(UserRole.Teacher))
        assert harness.notifications.sent == []

    def test_open_evaluation_cannot_be_requested(
        self, harness: Harness, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        fresh = make_evaluation(owner_id=harness.owner.user_id, create_time=THIS_MONDAY)
        with pytest.raises(InvalidTransitionError):
            harness.workflow.submit_unlock_request(fresh, harness.owner)

    def test_notification_failure_opens_no_request(self, harness: Harness) -> None:
        harness.notifications.fail = True
        with pytest.raises(ConnectionError):
            harness.workflow.submit_unlock_request(harness.locked, harness.owner)
        assert harness.requests.requests == {}


class TestGrantOverride(object):
    def test_stamps_token_and_notifies_owner(self, harness: Harness) -> None:
        harness.workflow.submit_unlock_request(harness.locked, harness.owner)
        request_notification = NotificationID()

        updated = harness.workflow.grant_override(harness.locked, harness.admin, request_notification)

        assert updated.description == f"Unidad 3@25 @@OVERRIDE:{harness.admin.user_id}:{codec.epoch_millis(NOW)}"
        assert updated.override_grant is not None
        assert updated.override_grant.admin_id == str(harness.admin.user_id)
        assert harness.workflow.lock_state(updated, harness.owner).editable

        message, recipient = harness.notifications.sent[-1]
        assert recipient == harness.owner.user_id
        assert message.title == "Evaluación Desbloqueada: Prueba 1"
        assert harness.notifications.read == [request_notification]
        [request] = harness.requests.requests.values()
        assert request.status is UnlockRequestStatus.Granted
        assert request.resolved_by == harness.admin.user_id

    def test_non_admin_is_refused_before_any_call(self, harness: Harness, make_actor: t.Callable[..., Actor]) -> None:
        with pytest.raises(NotPermittedError):
            harness.workflow.grant_override(harness.locked, make_actor(UserRole.Admin))

        assert harness.evaluations.calls == []
        assert harness.notifications.sent == []

    def test_regrant_replaces_token(self, harness: Harness) -> None:
        first = harness.workflow.grant_override(harness.locked, harness.admin)
        second = harness.workflow.grant_override(first, harness.admin)

        assert second.description.count(codec.OverrideTag) == 1

    def test_notification_failure_reports_updated_evaluation(self, harness: Harness) -> None:
        harness.notifications.fail = True

        with pytest.raises(NotificationDeliveryError) as excinfo:
            harness.workflow.grant_override(harness.locked, harness.admin)

        assert codec.has_override(excinfo.value.evaluation.description)
        assert codec.has_override(harness.evaluations.evaluations[harness.locked.evaluation_id].description)
        assert isinstance(excinfo.value.cause, ConnectionError)

    def test_request_resolution_failure_reports_updated_evaluation(self, harness: Harness) -> None:
        harness.workflow.submit_unlock_request(harness.locked, harness.owner)
        harness.requests.fail = True
        sent_before = len(harness.notifications.sent)

        with pytest.raises(RequestResolutionError) as excinfo:
            harness.workflow.grant_override(harness.locked, harness.admin)

        assert excinfo.value.evaluation.evaluation_id == harness.locked.evaluation_id
        assert codec.has_override(harness.evaluations.evaluations[harness.locked.evaluation_id].description)
        assert isinstance(excinfo.value.cause, ConnectionError)
        assert len(harness.notifications.sent) == sent_before


class TestRevokeOverride(object):
    def test_strips_token(self, harness: Harness) -> None:
        granted = harness.workflow.grant_override(harness.locked, harness.admin)

        revoked = harness.workflow.revoke_override(granted, harness.admin)

        assert revoked.description == "Unidad 3@25"
        assert revoked.override_grant is None
        assert not harness.workflow.lock_state(revoked, harness.owner).editable
        assert harness.workflow.lock_state(revoked, harness.admin).editable

    def test_without_token_persists_unchanged(self, harness: Harness) -> None:
        revoked = harness.workflow.revoke_override(harness.locked, harness.admin)

        assert revoked.description == harness.locked.description
        assert "update_evaluation" in harness.evaluations.calls

    def test_owner_cannot_revoke(self, harness: Harness) -> None:
        with pytest.raises(NotPermittedError):
            harness.workflow.revoke_override(harness.locked, harness.owner)


class TestRejectUnlockRequest(object):
    def test_notifies_requester_and_resolves(self, harness: Harness) -> None:
        harness.workflow.submit_unlock_request(harness.locked, harness.owner)
        request_notification = NotificationID()

        harness.workflow.reject_unlock_request(
            harness.locked, harness.admin, harness.owner.user_id, " fuera de plazo ", request_notification
        )

        message, recipient = harness.notifications.sent[-1]
        assert recipient == harness.owner.user_id
        assert message.content.endswith("Motivo: fuera de plazo")
        assert harness.notifications.read == [request_notification]
        [request] = harness.requests.requests.values()
        assert request.status is UnlockRequestStatus.Rejected
        assert request.reason == "fuera de plazo"
        assert harness.evaluations.evaluations[harness.locked.evaluation_id].description == "Unidad 3@25"

    def test_request_may_be_resubmitted_after_rejection(self, harness: Harness) -> None:
        first = harness.workflow.submit_unlock_request(harness.locked, harness.owner)
        harness.workflow.reject_unlock_request(harness.locked, harness.admin, harness.owner.user_id)

        second = harness.workflow.submit_unlock_request(harness.locked, harness.owner)

        assert second.unlock_request_id != first.unlock_request_id

    def test_owner_cannot_reject(self, harness: Harness) -> None:
        with pytest.raises(NotPermittedError):
            harness.workflow.reject_unlock_request(harness.locked, harness.owner, harness.owner.user_id)
        assert harness.notifications.sent == []


class TestSaveContent(object):
    def test_locked_owner_is_refused(self, harness: Harness) -> None:
        with pytest.raises(EvaluationLockedError):
            harness.workflow.save_content(harness.locked, harness.owner, "Nuevo")

    def test_owner_edit_consumes_override(self, harness: Harness) -> None:
        granted = harness.workflow.grant_override(harness.locked, harness.admin)

        saved = harness.workflow.save_content(granted, harness.owner, "Unidad 3 corregida", decimal.Decimal("30"))

        assert saved.description == "Unidad 3 corregida@30"
        assert not harness.workflow.lock_state(saved, harness.owner).editable

    def test_owner_edit_keeps_override_when_configured(self, harness: Harness) -> None:
        harness.workflow.consume_override_on_owner_edit = False
        granted = harness.workflow.grant_override(harness.locked, harness.admin)

        saved = harness.workflow.save_content(granted, harness.owner, "Corregida")

        assert codec.has_override(saved.description)

    def test_admin_edit_keeps_override(self, harness: Harness) -> None:
        granted = harness.workflow.grant_override(harness.locked, harness.admin)

        saved = harness.workflow.save_content(granted, harness.admin, "Corregida por dirección")

        assert codec.decompose(saved.description).body == "Corregida por dirección"
        assert codec.has_override(saved.description)

    def test_admin_may_edit_locked_evaluation(self, harness: Harness) -> None:
        saved = harness.workflow.save_content(harness.locked, harness.admin, "Editada", decimal.Decimal("10"))
        assert saved.description == "Editada@10"

    def test_body_may_not_carry_marker(
        self, harness: Harness, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        fresh = make_evaluation(owner_id=harness.owner.user_id, create_time=THIS_MONDAY)
        harness.evaluations.evaluations[fresh.evaluation_id] = fresh

        with pytest.raises(InvalidDescriptionError):
            harness.workflow.save_content(fresh, harness.owner, "texto @@OVERRIDE:me:1")
        assert harness.evaluations.evaluations[fresh.evaluation_id].description == fresh.description

    def test_other_teacher_is_refused(self, harness: Harness, make_actor: t.Callable[..., Actor]) -> None:
        with pytest.raises(NotPermittedError):
            harness.workflow.save_content(harness.locked, make_actor(UserRole.Teacher), "Nuevo")


class TestDeleteEvaluation(object):
    def test_locked_owner_is_refused(self, harness: Harness) -> None:
        with pytest.raises(EvaluationLockedError):
            harness.workflow.delete_evaluation(harness.locked, harness.owner)
        assert harness.locked.evaluation_id in harness.evaluations.evaluations

    def test_owner_deletes_within_grace(
        self, harness: Harness, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        fresh = make_evaluation(owner_id=harness.owner.user_id, create_time=THIS_MONDAY)
        harness.evaluations.evaluations[fresh.evaluation_id] = fresh

        harness.workflow.delete_evaluation(fresh, harness.owner)

        assert fresh.evaluation_id not in harness.evaluations.evaluations

    def test_admin_deletes_locked(self, harness: Harness) -> None:
        harness.workflow.delete_evaluation(harness.locked, harness.admin)
        assert harness.locked.evaluation_id not in harness.evaluations.evaluations

    def test_other_user_is_refused(self, harness: Harness) -> None:
        with pytest.raises(NotPermittedError):
            harness.workflow.delete_evaluation(harness.locked, harness.owner._replace(user_id=UserID()))
