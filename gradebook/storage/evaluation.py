from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from gradebook.core import di
from gradebook.model import CourseID, Evaluation, EvaluationID, SchoolID, UserID

from . import Session
from .table import evaluations, unlock_requests


def get(key: EvaluationID, session: Session = di.Provide["storage.persistent.session"]) -> Evaluation | None:
    stmt = sqla.select(evaluations.__table__).where(evaluations.evaluation_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Evaluation(**row) if row else None


def find(
    *,
    school_id: SchoolID | None = None,
    course_id: CourseID | None = None,
    owner_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Evaluation, ...]:
    stmt = sqla.select(evaluations.__table__).order_by(evaluations.date.desc(), evaluations.create_time.desc())
    if school_id is not None:
        stmt = stmt.where(evaluations.school_id == school_id)
    if course_id is not None:
        stmt = stmt.where(evaluations.course_id == course_id)
    if owner_id is not None:
        stmt = stmt.where(evaluations.owner_id == owner_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(Evaluation(**row) for row in rows)


def create(params: EvaluationCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Evaluation:
    evaluation = evaluations(
        evaluation_id=EvaluationID(),
        school_id=params["school_id"],
        course_id=params["course_id"],
        owner_id=params["owner_id"],
        title=params["title"],
        date=params["date"],
        description=params.get("description") or "",
        create_time=params.get("create_time"),  # type: ignore[arg-type]
    )
    session.add(evaluation)
    session.flush()
    return get(evaluation.evaluation_id, session=session)  # type: ignore


def update(
    key: EvaluationID,
    params: EvaluationUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> Evaluation | None:
    """Apply `params` to the evaluation. Unconditional; the last write wins."""
    stmt = sqla.select(evaluations).where(evaluations.evaluation_id == key)
    evaluation = session.execute(stmt).scalar_one_or_none()
    if evaluation is None:
        return None
    for field, value in params.items():
        setattr(evaluation, field, value)
    session.flush()
    return get(key, session=session)


def delete(key: EvaluationID, session: Session = di.Provide["storage.persistent.session"]) -> bool:
    session.execute(sqla.delete(unlock_requests).where(unlock_requests.evaluation_id == key))
    result = session.execute(sqla.delete(evaluations).where(evaluations.evaluation_id == key))
    return result.rowcount > 0  # type: ignore[attr-defined]


class EvaluationCreateParams(t.TypedDict, total=False):
    school_id: t.Required[SchoolID]
    course_id: t.Required[CourseID]
    owner_id: t.Required[UserID]
    title: t.Required[str]
    date: t.Required[datetime.date]
    description: str
    create_time: datetime.datetime


class EvaluationUpdateParams(t.TypedDict, total=False):
    title: str
    date: datetime.date
    description: str
