from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from gradebook.core import di
from gradebook.model import EvaluationID, SchoolID, UnlockRequest, UnlockRequestID, UnlockRequestStatus, UserID

from . import Session
from .table import unlock_requests


def get(key: UnlockRequestID, session: Session = di.Provide["storage.persistent.session"]) -> UnlockRequest | None:
    stmt = sqla.select(unlock_requests.__table__).where(unlock_requests.unlock_request_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return UnlockRequest(**row) if row else None


def find(
    *,
    evaluation_id: EvaluationID | None = None,
    requester_id: UserID | None = None,
    school_id: SchoolID | None = None,
    status: UnlockRequestStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[UnlockRequest, ...]:
    stmt = sqla.select(unlock_requests.__table__).order_by(unlock_requests.create_time.desc())
    if evaluation_id is not None:
        stmt = stmt.where(unlock_requests.evaluation_id == evaluation_id)
    if requester_id is not None:
        stmt = stmt.where(unlock_requests.requester_id == requester_id)
    if school_id is not None:
        stmt = stmt.where(unlock_requests.school_id == school_id)
    if status is not None:
        stmt = stmt.where(unlock_requests.status == status)
    rows = session.execute(stmt).mappings().all()
    return tuple(UnlockRequest(**row) for row in rows)


def create(
    params: UnlockRequestCreateParams, session: Session = di.Provide["storage.persistent.session"]
) -> UnlockRequest:
    request = unlock_requests(
        unlock_request_id=UnlockRequestID(),
        evaluation_id=params["evaluation_id"],
        requester_id=params["requester_id"],
        school_id=params["school_id"],
        comment=params.get("comment"),
    )
    session.add(request)
    session.flush()
    return get(request.unlock_request_id, session=session)  # type: ignore


def resolve(
    keys: t.Iterable[UnlockRequestID],
    *,
    status: UnlockRequestStatus,
    resolved_by: UserID,
    resolve_time: datetime.datetime,
    reason: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> int:
    """Close pending requests. Requests that are no longer pending are left as they are."""
    if status is UnlockRequestStatus.Pending:
        raise ValueError("cannot resolve a request to pending")
    stmt = (
        sqla.update(unlock_requests)
        .where(
            unlock_requests.unlock_request_id.in_(list(keys)),
            unlock_requests.status == UnlockRequestStatus.Pending,
        )
        .values(status=status, resolved_by=resolved_by, resolve_time=resolve_time, reason=reason)
    )
    return session.execute(stmt).rowcount  # type: ignore[attr-defined]


class UnlockRequestCreateParams(t.TypedDict, total=False):
    evaluation_id: t.Required[EvaluationID]
    requester_id: t.Required[UserID]
    school_id: t.Required[SchoolID]
    comment: str | None
