import datetime

from sqlalchemy import ForeignKey, func, Index, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import Text

from gradebook.model import CourseID, EvaluationID, NotificationID, SchoolID, UnlockRequestID, UnlockRequestStatus, \
    UserID, UserRole

from .type import EnumValuesType, ShortUUIDKeyType, UTCDateTime

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        SchoolID: ShortUUIDKeyType(SchoolID),
        UserID: ShortUUIDKeyType(UserID),
        CourseID: ShortUUIDKeyType(CourseID),
        EvaluationID: ShortUUIDKeyType(EvaluationID),
        NotificationID: ShortUUIDKeyType(NotificationID),
        UnlockRequestID: ShortUUIDKeyType(UnlockRequestID),
        datetime.datetime: UTCDateTime(),
    }


# School & User


class schools(base):
    __tablename__ = "schools"

    school_id: Mapped[SchoolID] = mapped_column(primary_key=True)
    name: Mapped[str]
    slug: Mapped[str] = mapped_column(unique=True)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class users(base):
    __tablename__ = "users"

    user_id: Mapped[UserID] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(unique=True)
    name: Mapped[str]
    password_hash: Mapped[str | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class school_memberships(base):
    __tablename__ = "school_memberships"

    user_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"), primary_key=True)
    school_id: Mapped[SchoolID] = mapped_column(ForeignKey("schools.school_id"), primary_key=True)
    role: Mapped[UserRole] = mapped_column(EnumValuesType(UserRole, name="user_role"))
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Courses & Evaluations


class courses(base):
    __tablename__ = "courses"

    course_id: Mapped[CourseID] = mapped_column(primary_key=True)
    school_id: Mapped[SchoolID] = mapped_column(ForeignKey("schools.school_id"))
    name: Mapped[str]
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class evaluations(base):
    __tablename__ = "evaluations"

    evaluation_id: Mapped[EvaluationID] = mapped_column(primary_key=True)
    school_id: Mapped[SchoolID] = mapped_column(ForeignKey("schools.school_id"))
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id"))
    owner_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))

    title: Mapped[str]
    date: Mapped[datetime.date]
    # free text; also carries the grade-weight suffix and the override token
    description: Mapped[str] = mapped_column(Text, default="")

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_evaluations_course_id", "course_id"),)


# Notifications


class notifications(base):
    __tablename__ = "notifications"

    notification_id: Mapped[NotificationID] = mapped_column(primary_key=True)
    school_id: Mapped[SchoolID] = mapped_column(ForeignKey("schools.school_id"))
    recipient_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))

    title: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text)
    is_read: Mapped[bool] = mapped_column(default=False)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())

    __table_args__ = (Index("ix_notifications_recipient_id_create_time", "recipient_id", "create_time"),)


class unlock_requests(base):
    __tablename__ = "unlock_requests"

    unlock_request_id: Mapped[UnlockRequestID] = mapped_column(primary_key=True)
    evaluation_id: Mapped[EvaluationID] = mapped_column(ForeignKey("evaluations.evaluation_id", ondelete="CASCADE"))
    requester_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))
    school_id: Mapped[SchoolID] = mapped_column(ForeignKey("schools.school_id"))

    status: Mapped[UnlockRequestStatus] = mapped_column(
        EnumValuesType(UnlockRequestStatus, name="unlock_request_status"), default=UnlockRequestStatus.Pending
    )
    comment: Mapped[str | None] = mapped_column(Text, default=None)
    reason: Mapped[str | None] = mapped_column(Text, default=None)
    resolved_by: Mapped[UserID | None] = mapped_column(ForeignKey("users.user_id"), default=None)
    resolve_time: Mapped[datetime.datetime | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())

    __table_args__ = (Index("ix_unlock_requests_evaluation_id_status", "evaluation_id", "status"),)
