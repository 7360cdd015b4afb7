import typing as t
import zoneinfo

import annotated_types as ant
import pydantic as p

from gradebook.model import UserRole

from .base import BaseSettings


class WorkflowSettings(BaseSettings):
    """Edit lock and unlock request workflow."""

    grace_business_days: t.Annotated[int, ant.Ge(0)] = 3
    bypass_role: UserRole = UserRole.SuperAdmin
    # calendar in which "today" and business days are reckoned
    timezone: str = "UTC"
    # where notifications deep-link to; formatted with evaluation_id
    edit_link_template: str = "/evaluations/edit/{evaluation_id}"
    consume_override_on_owner_edit: bool = True

    @p.field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            zoneinfo.ZoneInfo(v)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as ex:
            raise ValueError(f"unknown timezone: {v}") from ex
        return v

    @p.field_validator("edit_link_template")
    @classmethod
    def check_edit_link_template(cls, v: str) -> str:
        if "{evaluation_id}" not in v:
            raise ValueError("edit_link_template must contain {evaluation_id}")
        return v


class NotificationSettings(BaseSettings):
    poll_interval_seconds: t.Annotated[int, ant.Gt(0)] = 15
    page_size: t.Annotated[int, ant.Gt(0)] = 50
