from __future__ import annotations

import sqlalchemy as sqla

from gradebook.core import di
from gradebook.model import Course, CourseID, SchoolID

from . import Session
from .table import courses


def get(key: CourseID, session: Session = di.Provide["storage.persistent.session"]) -> Course | None:
    stmt = sqla.select(courses.__table__).where(courses.course_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Course(**row) if row else None


def find(
    *,
    school_id: SchoolID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Course, ...]:
    stmt = sqla.select(courses.__table__).order_by(courses.name)
    if school_id is not None:
        stmt = stmt.where(courses.school_id == school_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(Course(**row) for row in rows)


def create(
    *,
    school_id: SchoolID,
    name: str,
    session: Session = di.Provide["storage.persistent.session"],
) -> Course:
    course = courses(course_id=CourseID(), school_id=school_id, name=name)
    session.add(course)
    session.flush()
    return get(course.course_id, session=session)  # type: ignore
