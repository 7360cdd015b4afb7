"""Request, grant, revoke and reject transitions of the evaluation edit lock."""

from __future__ import annotations

import datetime
import decimal
import logging

from gradebook.core.provider import TimestampProvider
from gradebook.model import Evaluation, EvaluationID, NotificationID, UnlockRequest, UnlockRequestStatus, UserID

from . import codec, protocol
from .errors import EvaluationLockedError, EvaluationNotFoundError, InvalidDescriptionError, InvalidTransitionError, \
    NotificationDeliveryError, NotPermittedError, RequestResolutionError
from .gateway import EvaluationStore, NotificationChannel, UnlockRequestLedger
from .policy import Actor, LockPolicy, LockState, WorkflowState

logger = logging.getLogger(__name__)

DefaultEditLink = "/evaluations/edit/{evaluation_id}"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class UnlockWorkflow(object):
    """Ties the lock policy, the override codec and the notification protocol
    to the evaluation, notification and unlock-request collaborators.

    Every operation takes the acting user explicitly. Authorization is checked
    before any collaborator call. Writes are full-description, last-write-wins
    updates; there is no compare-and-swap, so concurrent administrators may
    overwrite each other and callers should re-read to reconcile.
    """

    def __init__(
        self,
        evaluations: EvaluationStore,
        notifications: NotificationChannel,
        requests: UnlockRequestLedger,
        policy: LockPolicy | None = None,
        edit_link_template: str = DefaultEditLink,
        consume_override_on_owner_edit: bool = True,
        utcnow: TimestampProvider = _utcnow,
    ):
        self.evaluations = evaluations
        self.notifications = notifications
        self.requests = requests
        self.policy = policy or LockPolicy()
        self.edit_link_template = edit_link_template
        self.consume_override_on_owner_edit = consume_override_on_owner_edit
        self.utcnow = utcnow

    def require_admin(self, actor: Actor, operation: str) -> None:
        if not self.policy.can_bypass(actor.role):
            logger.info(
                "workflow operation refused",
                extra={"operation": operation, "user_id": actor.user_id, "role": actor.role.value},
            )
            raise NotPermittedError(f"{operation} is not permitted for role {actor.role.value!r}")

    def _link(self, evaluation: Evaluation) -> str:
        return protocol.edit_link(self.edit_link_template, evaluation)

    def require_owner_or_admin(self, evaluation: Evaluation, actor: Actor, operation: str) -> None:
        if actor.user_id != evaluation.owner_id and not self.policy.can_bypass(actor.role):
            logger.info(
                "workflow operation refused",
                extra={"operation": operation, "user_id": actor.user_id, "evaluation_id": evaluation.evaluation_id},
            )
            raise NotPermittedError(f"{operation} is only permitted to the owner of the evaluation")

    def load(self, evaluation_id: EvaluationID) -> Evaluation:
        evaluation = self.evaluations.get_evaluation(evaluation_id)
        if evaluation is None:
            raise EvaluationNotFoundError(f"evaluation {evaluation_id} not found")
        return evaluation

    def lock_state(self, evaluation: Evaluation, actor: Actor) -> LockState:
        return self.policy.for_actor(evaluation, actor, self.utcnow())

    def submit_unlock_request(self, evaluation: Evaluation, requester: Actor, comment: str | None = None) -> UnlockRequest:
        """Ask the school's administrators to reopen a locked evaluation.

        At most one pending request exists per evaluation and requester; while
        it is pending a resubmission returns it without notifying again.
        """
        if requester.user_id != evaluation.owner_id:
            raise NotPermittedError("only the owner of an evaluation may request to unlock it")
        state = self.lock_state(evaluation, requester)
        if state.state is not WorkflowState.LockedForOwner:
            raise InvalidTransitionError(f"evaluation {evaluation.evaluation_id} is not locked ({state.state.value})")

        pending = self.requests.find_pending(evaluation.evaluation_id, requester.user_id)
        if pending:
            logger.debug(
                "unlock request already pending",
                extra={"evaluation_id": evaluation.evaluation_id, "unlock_request_id": pending[0].unlock_request_id},
            )
            return pending[0]

        course = self.evaluations.get_course(evaluation.course_id)
        message = protocol.build_request(evaluation, requester, course, comment, link=self._link(evaluation))
        self.notifications.create_notification_for_role(
            message, role=self.policy.bypass_role, school_id=evaluation.school_id
        )
        request = self.requests.open(
            evaluation_id=evaluation.evaluation_id,
            requester_id=requester.user_id,
            school_id=evaluation.school_id,
            comment=comment.strip() if comment and comment.strip() else None,
        )
        logger.info(
            "unlock request submitted",
            extra={
                "evaluation_id": evaluation.evaluation_id,
                "requester_id": requester.user_id,
                "unlock_request_id": request.unlock_request_id,
            },
        )
        return request

    def grant_override(
        self,
        evaluation: Evaluation,
        admin: Actor,
        request_notification_id: NotificationID | None = None,
    ) -> Evaluation:
        """Stamp a fresh override on the evaluation and tell its owner.

        Granting an already granted evaluation re-stamps the token. If the
        update succeeds but pending requests cannot be resolved, or the owner
        cannot be notified, the raised PartialUpdateError carries the updated
        evaluation.
        """
        self.require_admin(admin, "grant_override")

        description = codec.grant(evaluation.description, admin.user_id, self.utcnow())
        updated = self.evaluations.update_evaluation(evaluation.evaluation_id, description=description)
        logger.info(
            "override granted",
            extra={"evaluation_id": evaluation.evaluation_id, "admin_id": admin.user_id},
        )

        try:
            pending = self.requests.find_pending(evaluation.evaluation_id)
            if pending:
                self.requests.resolve(pending, status=UnlockRequestStatus.Granted, resolved_by=admin.user_id)
        except Exception as ex:
            logger.error(
                "override granted but pending unlock requests were not resolved",
                extra={"evaluation_id": evaluation.evaluation_id, "admin_id": admin.user_id},
                exc_info=True,
            )
            raise RequestResolutionError(updated, ex) from ex

        try:
            self.notifications.create_notification(
                protocol.build_grant(updated, link=self._link(updated)),
                recipient_id=updated.owner_id,
                school_id=updated.school_id,
            )
        except Exception as ex:
            logger.error(
                "override granted but owner notification failed",
                extra={"evaluation_id": evaluation.evaluation_id, "owner_id": updated.owner_id},
                exc_info=True,
            )
            raise NotificationDeliveryError(updated, ex) from ex

        if request_notification_id is not None:
            self.notifications.mark_notification_read(request_notification_id)
        return updated

    def revoke_override(self, evaluation: Evaluation, admin: Actor) -> Evaluation:
        """Drop the override token. Without a token this re-persists the unchanged text."""
        self.require_admin(admin, "revoke_override")

        if not codec.has_override(evaluation.description):
            logger.info("revoking evaluation without override", extra={"evaluation_id": evaluation.evaluation_id})
        description = codec.revoke(evaluation.description)
        updated = self.evaluations.update_evaluation(evaluation.evaluation_id, description=description)
        logger.info(
            "override revoked",
            extra={"evaluation_id": evaluation.evaluation_id, "admin_id": admin.user_id},
        )
        return updated

    def reject_unlock_request(
        self,
        evaluation: Evaluation,
        admin: Actor,
        requester_id: UserID,
        reason: str | None = None,
        request_notification_id: NotificationID | None = None,
    ) -> None:
        """Tell the requester their request was denied. The evaluation is not modified."""
        self.require_admin(admin, "reject_unlock_request")

        self.notifications.create_notification(
            protocol.build_rejection(evaluation, reason),
            recipient_id=requester_id,
            school_id=evaluation.school_id,
        )
        pending = self.requests.find_pending(evaluation.evaluation_id, requester_id)
        if pending:
            self.requests.resolve(
                pending,
                status=UnlockRequestStatus.Rejected,
                resolved_by=admin.user_id,
                reason=reason.strip() if reason and reason.strip() else None,
            )
        if request_notification_id is not None:
            self.notifications.mark_notification_read(request_notification_id)
        logger.info(
            "unlock request rejected",
            extra={"evaluation_id": evaluation.evaluation_id, "requester_id": requester_id, "admin_id": admin.user_id},
        )

    def save_content(
        self,
        evaluation: Evaluation,
        actor: Actor,
        body: str,
        percent: decimal.Decimal | None = None,
    ) -> Evaluation:
        """Rewrite the human-authored part of the description.

        The override token is kept for the bypass role. An owner editing
        through an override spends it, unless consume_override_on_owner_edit
        is disabled.
        """
        self.require_owner_or_admin(evaluation, actor, "save_content")
        if not self.lock_state(evaluation, actor).editable:
            raise EvaluationLockedError(f"evaluation {evaluation.evaluation_id} is locked for editing")
        if codec.OverrideTag in body:
            raise InvalidDescriptionError("description text may not contain an override marker")

        keep = self.policy.can_bypass(actor.role) or not self.consume_override_on_owner_edit
        description = codec.rewrite(evaluation.description, body, percent, keep_override=keep)
        updated = self.evaluations.update_evaluation(evaluation.evaluation_id, description=description)
        logger.info(
            "evaluation content saved",
            extra={
                "evaluation_id": evaluation.evaluation_id,
                "user_id": actor.user_id,
                "override_kept": keep and codec.has_override(description),
            },
        )
        return updated

    def delete_evaluation(self, evaluation: Evaluation, actor: Actor) -> None:
        self.require_owner_or_admin(evaluation, actor, "delete_evaluation")
        if not self.lock_state(evaluation, actor).editable:
            raise EvaluationLockedError(f"evaluation {evaluation.evaluation_id} is locked and cannot be deleted")
        self.evaluations.delete_evaluation(evaluation.evaluation_id)
        logger.info("evaluation deleted", extra={"evaluation_id": evaluation.evaluation_id, "user_id": actor.user_id})
