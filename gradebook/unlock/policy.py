"""Derived edit-lock state of an evaluation."""

from __future__ import annotations

import datetime
import enum
import typing as t
import zoneinfo

from gradebook.model import Evaluation, SchoolID, UserID, UserRole

from . import codec
from .calendar import business_days_elapsed


class Actor(t.NamedTuple):
    """The user on whose behalf a workflow operation runs."""

    user_id: UserID
    school_id: SchoolID
    role: UserRole
    name: str


class WorkflowState(enum.Enum):
    Open = "open"
    LockedForOwner = "locked_for_owner"
    AdminBypass = "admin_bypass"


class LockState(t.NamedTuple):
    editable: bool
    locked_for_owner: bool
    has_override: bool
    business_days: int
    state: WorkflowState


class LockPolicy(object):
    """Decides whether an evaluation may still be edited or deleted.

    The decision is a pure function of the evaluation snapshot, the acting
    role and the current instant:

    1. the bypass role may always edit;
    2. a valid override token opens the evaluation;
    3. an evaluation dated after today is open;
    4. otherwise it is open while no more than `grace_business_days` business
       days have elapsed since its creation.

    `locked_for_owner` applies rules 2-4 only, so administrators still see
    the lock badge.
    """

    def __init__(
        self,
        grace_business_days: int = 3,
        bypass_role: UserRole = UserRole.SuperAdmin,
        tz: zoneinfo.ZoneInfo | str = "UTC",
    ):
        if grace_business_days < 0:
            raise ValueError("grace_business_days must not be negative")
        self.grace_business_days = grace_business_days
        self.bypass_role = bypass_role
        self.tz = zoneinfo.ZoneInfo(tz) if isinstance(tz, str) else tz

    def can_bypass(self, role: UserRole) -> bool:
        return role is self.bypass_role

    def today(self, now: datetime.datetime) -> datetime.date:
        if now.tzinfo is not None:
            now = now.astimezone(self.tz)
        return now.date()

    def locked_for_owner(self, evaluation: Evaluation, now: datetime.datetime) -> bool:
        return self.evaluate(evaluation, None, now).locked_for_owner

    def evaluate(self, evaluation: Evaluation, role: UserRole | None, now: datetime.datetime) -> LockState:
        has_override = codec.has_override(evaluation.description)
        in_future = evaluation.date > self.today(now)
        elapsed = business_days_elapsed(evaluation.create_time, now, self.tz)

        locked = not has_override and not in_future and elapsed > self.grace_business_days

        if role is not None and self.can_bypass(role):
            return LockState(True, locked, has_override, elapsed, WorkflowState.AdminBypass)
        state = WorkflowState.LockedForOwner if locked else WorkflowState.Open
        return LockState(not locked, locked, has_override, elapsed, state)

    def for_actor(self, evaluation: Evaluation, actor: Actor, now: datetime.datetime) -> LockState:
        return self.evaluate(evaluation, actor.role, now)
