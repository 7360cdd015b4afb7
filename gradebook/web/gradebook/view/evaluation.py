"""View models for evaluation and unlock endpoints."""

from __future__ import annotations

import datetime
import decimal

import pydantic as p

from gradebook.model import CourseID, EvaluationID, NotificationID, OverrideGrant, SchoolID, UnlockRequestID, \
    UnlockRequestStatus, UserID


class LockStateResponse(p.BaseModel):
    """Lock flags for the requesting user."""

    editable: bool
    locked_for_owner: bool
    has_override: bool
    business_days: int
    state: str


class EvaluationResponse(p.BaseModel):
    evaluation_id: EvaluationID
    school_id: SchoolID
    course_id: CourseID
    owner_id: UserID
    title: str
    date: datetime.date
    body: str
    percent: decimal.Decimal | None
    override_grant: OverrideGrant | None
    lock: LockStateResponse
    create_time: datetime.datetime
    update_time: datetime.datetime


class EvaluationListResponse(p.BaseModel):
    evaluations: list[EvaluationResponse]
    total: int


class ContentUpdateRequest(p.BaseModel):
    """New human-authored description. The override marker is managed by the server."""

    body: str = p.Field(max_length=10_000)
    percent: decimal.Decimal | None = p.Field(default=None, allow_inf_nan=False)


class UnlockRequestCreateRequest(p.BaseModel):
    comment: str | None = p.Field(default=None, max_length=2_000)


class UnlockRequestResponse(p.BaseModel):
    unlock_request_id: UnlockRequestID
    evaluation_id: EvaluationID
    requester_id: UserID
    status: UnlockRequestStatus
    comment: str | None
    reason: str | None
    resolved_by: UserID | None
    create_time: datetime.datetime
    resolve_time: datetime.datetime | None


class GrantOverrideRequest(p.BaseModel):
    """Optionally names the request notification to mark read once granted."""

    notification_id: NotificationID | None = None


class RejectUnlockRequest(p.BaseModel):
    requester_id: UserID
    reason: str | None = p.Field(default=None, max_length=2_000)
    notification_id: NotificationID | None = None


class RejectUnlockResponse(p.BaseModel):
    evaluation_id: EvaluationID
    requester_id: UserID
    rejected: bool = True
