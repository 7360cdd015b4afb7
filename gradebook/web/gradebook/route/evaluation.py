"""Evaluation edit-lock and unlock request API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from gradebook.auth.middleware import AuthContext, require_staff
from gradebook.core import di
from gradebook.model import CourseID, Evaluation, EvaluationID, UserRole
from gradebook.storage import evaluation as evaluation_storage
from gradebook.unlock import codec
from gradebook.unlock.policy import LockState
from gradebook.unlock.workflow import UnlockWorkflow

from ..dependencies import get_session, get_unlock_workflow
from ..view.evaluation import ContentUpdateRequest, EvaluationListResponse, EvaluationResponse, \
    GrantOverrideRequest, LockStateResponse, RejectUnlockRequest, RejectUnlockResponse, \
    UnlockRequestCreateRequest, UnlockRequestResponse

router = APIRouter(prefix="/api/evaluations", tags=["evaluations"])

# roles that see every evaluation of their school, not just their own
SchoolWideRoles = frozenset({UserRole.SuperAdmin, UserRole.Admin})


def _build_response(evaluation: Evaluation, state: LockState) -> EvaluationResponse:
    parts = codec.decompose(evaluation.description)
    return EvaluationResponse(
        evaluation_id=evaluation.evaluation_id,
        school_id=evaluation.school_id,
        course_id=evaluation.course_id,
        owner_id=evaluation.owner_id,
        title=evaluation.title,
        date=evaluation.date,
        body=parts.body,
        percent=parts.percent,
        override_grant=evaluation.override_grant,
        lock=LockStateResponse(
            editable=state.editable,
            locked_for_owner=state.locked_for_owner,
            has_override=state.has_override,
            business_days=state.business_days,
            state=state.state.value,
        ),
        create_time=evaluation.create_time,
        update_time=evaluation.update_time,
    )


def _load_visible(evaluation_id: EvaluationID, auth: AuthContext, workflow: UnlockWorkflow) -> Evaluation:
    """Load an evaluation the caller may see. Other schools' evaluations do not exist for them."""
    evaluation = workflow.load(evaluation_id)
    if evaluation.school_id != auth.school_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Evaluation not found")
    if auth.role not in SchoolWideRoles and evaluation.owner_id != auth.user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot access evaluations of other teachers",
        )
    return evaluation


@router.get("", operation_id="list_evaluations")
@di.inject
def list_evaluations(
    course_id: CourseID | None = Query(None),
    auth: AuthContext = Depends(require_staff),
    session: Session = Depends(get_session),
    workflow: UnlockWorkflow = Depends(get_unlock_workflow),
) -> EvaluationListResponse:
    """List evaluations visible to the caller, with lock flags."""
    with session.begin():
        evaluations = evaluation_storage.find(
            school_id=auth.school_id,
            course_id=course_id,
            owner_id=None if auth.role in SchoolWideRoles else auth.user.user_id,
            session=session,
        )

    actor = auth.actor
    items = [_build_response(e, workflow.lock_state(e, actor)) for e in evaluations]
    return EvaluationListResponse(evaluations=items, total=len(items))


@router.get("/{evaluation_id}", operation_id="get_evaluation")
@di.inject
def get_evaluation(
    evaluation_id: EvaluationID,
    auth: AuthContext = Depends(require_staff),
    workflow: UnlockWorkflow = Depends(get_unlock_workflow),
) -> EvaluationResponse:
    evaluation = _load_visible(evaluation_id, auth, workflow)
    return _build_response(evaluation, workflow.lock_state(evaluation, auth.actor))


@router.put("/{evaluation_id}/content", operation_id="save_evaluation_content")
@di.inject
def save_evaluation_content(
    evaluation_id: EvaluationID,
    request: ContentUpdateRequest,
    auth: AuthContext = Depends(require_staff),
    workflow: UnlockWorkflow = Depends(get_unlock_workflow),
) -> EvaluationResponse:
    """Replace the description text and grade weight, if the evaluation is editable."""
    evaluation = _load_visible(evaluation_id, auth, workflow)
    updated = workflow.save_content(evaluation, auth.actor, request.body, request.percent)
    return _build_response(updated, workflow.lock_state(updated, auth.actor))


@router.delete("/{evaluation_id}", operation_id="delete_evaluation", status_code=status.HTTP_204_NO_CONTENT)
@di.inject
def delete_evaluation(
    evaluation_id: EvaluationID,
    auth: AuthContext = Depends(require_staff),
    workflow: UnlockWorkflow = Depends(get_unlock_workflow),
) -> Response:
    evaluation = _load_visible(evaluation_id, auth, workflow)
    workflow.delete_evaluation(evaluation, auth.actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{evaluation_id}/unlock-requests", operation_id="submit_unlock_request")
@di.inject
def submit_unlock_request(
    evaluation_id: EvaluationID,
    request: UnlockRequestCreateRequest,
    auth: AuthContext = Depends(require_staff),
    workflow: UnlockWorkflow = Depends(get_unlock_workflow),
) -> UnlockRequestResponse:
    """Ask the school's administrators to reopen a locked evaluation.

    Resubmitting while a request is pending returns the pending request.
    """
    evaluation = _load_visible(evaluation_id, auth, workflow)
    unlock_request = workflow.submit_unlock_request(evaluation, auth.actor, request.comment)
    return UnlockRequestResponse(**unlock_request.model_dump())


@router.post("/{evaluation_id}/unlock-requests/reject", operation_id="reject_unlock_request")
@di.inject
def reject_unlock_request(
    evaluation_id: EvaluationID,
    request: RejectUnlockRequest,
    auth: AuthContext = Depends(require_staff),
    workflow: UnlockWorkflow = Depends(get_unlock_workflow),
) -> RejectUnlockResponse:
    workflow.require_admin(auth.actor, "reject_unlock_request")
    evaluation = _load_visible(evaluation_id, auth, workflow)
    workflow.reject_unlock_request(
        evaluation,
        auth.actor,
        request.requester_id,
        request.reason,
        request_notification_id=request.notification_id,
    )
    return RejectUnlockResponse(evaluation_id=evaluation.evaluation_id, requester_id=request.requester_id)


@router.post("/{evaluation_id}/override", operation_id="grant_override")
@di.inject
def grant_override(
    evaluation_id: EvaluationID,
    request: GrantOverrideRequest | None = None,
    auth: AuthContext = Depends(require_staff),
    workflow: UnlockWorkflow = Depends(get_unlock_workflow),
) -> EvaluationResponse:
    """Unlock an evaluation for its owner and notify them."""
    workflow.require_admin(auth.actor, "grant_override")
    evaluation = _load_visible(evaluation_id, auth, workflow)
    updated = workflow.grant_override(
        evaluation,
        auth.actor,
        request_notification_id=request.notification_id if request else None,
    )
    return _build_response(updated, workflow.lock_state(updated, auth.actor))


@router.delete("/{evaluation_id}/override", operation_id="revoke_override")
@di.inject
def revoke_override(
    evaluation_id: EvaluationID,
    auth: AuthContext = Depends(require_staff),
    workflow: UnlockWorkflow = Depends(get_unlock_workflow),
) -> EvaluationResponse:
    workflow.require_admin(auth.actor, "revoke_override")
    evaluation = _load_visible(evaluation_id, auth, workflow)
    updated = workflow.revoke_override(evaluation, auth.actor)
    return _build_response(updated, workflow.lock_state(updated, auth.actor))
