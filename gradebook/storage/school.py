from __future__ import annotations

import sqlalchemy as sqla

from gradebook.core import di
from gradebook.model import School, SchoolID

from . import Session
from .table import schools


def get(
    *,
    school_id: SchoolID | None = None,
    slug: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> School | None:
    if (school_id is None) == (slug is None):
        raise ValueError("Exactly one of school_id or slug must be provided")

    if school_id is not None:
        stmt = sqla.select(schools.__table__).where(schools.school_id == school_id)
    else:
        stmt = sqla.select(schools.__table__).where(schools.slug == slug)
    row = session.execute(stmt).mappings().one_or_none()
    return School(**row) if row else None


def create(*, name: str, slug: str, session: Session = di.Provide["storage.persistent.session"]) -> School:
    school = schools(school_id=SchoolID(), name=name, slug=slug)
    session.add(school)
    session.flush()
    return get(school_id=school.school_id, session=session)  # type: ignore
