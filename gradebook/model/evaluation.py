import datetime

import pydantic as p

from .base import BaseModel, WithTimestamps
from .id import CourseID, EvaluationID, SchoolID, UserID


class OverrideGrant(BaseModel):
    """An administrator's grant of edit rights past the grace window."""

    admin_id: str
    granted_at: datetime.datetime


class Evaluation(WithTimestamps):
    evaluation_id: EvaluationID
    school_id: SchoolID
    course_id: CourseID
    owner_id: UserID

    title: str
    description: str = ""
    date: datetime.date

    @p.computed_field  # type: ignore[prop-decorator]
    @property
    def override_grant(self) -> OverrideGrant | None:
        # the description column is the system of record; the codec is the
        # only reader of the embedded token
        from gradebook.unlock import codec

        token = codec.find_override(self.description)
        if token is None:
            return None
        return OverrideGrant(admin_id=token.admin_id, granted_at=token.granted_at)
