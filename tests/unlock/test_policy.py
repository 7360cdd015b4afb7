"""Tests for gradebook.unlock.policy."""

from __future__ import annotations

import datetime
import typing as t

import pytest

from gradebook.model import Evaluation, UserRole
from gradebook.unlock import codec
from gradebook.unlock.policy import Actor, LockPolicy, WorkflowState

from ..conftest import LAST_MONDAY, NOW, THIS_MONDAY


@pytest.fixture
def policy() -> LockPolicy:
    return LockPolicy(grace_business_days=3)


class TestLockPolicy(object):
    def test_within_grace_is_open(self, policy: LockPolicy, make_evaluation: t.Callable[..., Evaluation]) -> None:
        evaluation = make_evaluation(create_time=THIS_MONDAY)

        state = policy.evaluate(evaluation, UserRole.Teacher, NOW)

        assert state.business_days == 3
        assert state.editable
        assert not state.locked_for_owner
        assert state.state is WorkflowState.Open

    def test_past_grace_is_locked(self, policy: LockPolicy, make_evaluation: t.Callable[..., Evaluation]) -> None:
        evaluation = make_evaluation(create_time=LAST_MONDAY)

        state = policy.evaluate(evaluation, UserRole.Teacher, NOW)

        assert state.business_days == 8
        assert not state.editable
        assert state.locked_for_owner
        assert state.state is WorkflowState.LockedForOwner

    def test_locks_on_the_day_after_grace(
        self, policy: LockPolicy, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        evaluation = make_evaluation(create_time=THIS_MONDAY)
        friday = THIS_MONDAY + datetime.timedelta(days=4)

        assert policy.locked_for_owner(evaluation, friday)

    def test_future_dated_evaluation_is_open(
        self, policy: LockPolicy, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        evaluation = make_evaluation(create_time=LAST_MONDAY, date=datetime.date(2026, 11, 2))

        state = policy.evaluate(evaluation, UserRole.Teacher, NOW)

        assert state.editable
        assert state.business_days == 8

    def test_evaluation_dated_today_follows_grace(
        self, policy: LockPolicy, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        evaluation = make_evaluation(create_time=LAST_MONDAY, date=NOW.date())
        assert policy.locked_for_owner(evaluation, NOW)

    def test_override_opens_evaluation(
        self, policy: LockPolicy, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        evaluation = make_evaluation(description=codec.grant("Texto", "admin", NOW))

        state = policy.evaluate(evaluation, UserRole.Teacher, NOW)

        assert state.editable
        assert state.has_override
        assert state.state is WorkflowState.Open

    def test_bypass_role_always_edits_but_sees_lock(
        self, policy: LockPolicy, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        evaluation = make_evaluation(create_time=LAST_MONDAY)

        state = policy.evaluate(evaluation, UserRole.SuperAdmin, NOW)

        assert state.editable
        assert state.locked_for_owner
        assert state.state is WorkflowState.AdminBypass

    def test_admin_is_not_bypass_role_by_default(
        self, policy: LockPolicy, make_evaluation: t.Callable[..., Evaluation]
    ) -> None:
        evaluation = make_evaluation(create_time=LAST_MONDAY)
        assert not policy.evaluate(evaluation, UserRole.Admin, NOW).editable

    def test_configured_bypass_role(self, make_evaluation: t.Callable[..., Evaluation]) -> None:
        policy = LockPolicy(bypass_role=UserRole.Admin)
        evaluation = make_evaluation(create_time=LAST_MONDAY)

        assert policy.evaluate(evaluation, UserRole.Admin, NOW).editable
        assert not policy.evaluate(evaluation, UserRole.SuperAdmin, NOW).editable

    def test_zero_grace_locks_the_next_business_day(self, make_evaluation: t.Callable[..., Evaluation]) -> None:
        policy = LockPolicy(grace_business_days=0)
        evaluation = make_evaluation(create_time=THIS_MONDAY)

        assert not policy.locked_for_owner(evaluation, THIS_MONDAY + datetime.timedelta(hours=6))
        assert policy.locked_for_owner(evaluation, THIS_MONDAY + datetime.timedelta(days=1))

    def test_negative_grace_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            LockPolicy(grace_business_days=-1)

    def test_today_is_reckoned_in_timezone(self, make_evaluation: t.Callable[..., Evaluation]) -> None:
        # 01:00 UTC on Friday is still Thursday evening in Santiago
        now = datetime.datetime(2026, 10, 16, 1, 0, tzinfo=datetime.UTC)
        evaluation = make_evaluation(create_time=THIS_MONDAY)

        assert LockPolicy(tz="UTC").locked_for_owner(evaluation, now)
        assert not LockPolicy(tz="America/Santiago").locked_for_owner(evaluation, now)

    def test_for_actor_uses_actor_role(
        self,
        policy: LockPolicy,
        make_evaluation: t.Callable[..., Evaluation],
        make_actor: t.Callable[..., Actor],
    ) -> None:
        evaluation = make_evaluation(create_time=LAST_MONDAY)

        assert policy.for_actor(evaluation, make_actor(UserRole.SuperAdmin), NOW).editable
        assert not policy.for_actor(evaluation, make_actor(UserRole.Teacher), NOW).editable
