from .base import WithTimestamps
from .id import CourseID, SchoolID


class School(WithTimestamps):
    school_id: SchoolID
    name: str
    slug: str


class Course(WithTimestamps):
    course_id: CourseID
    school_id: SchoolID
    name: str
