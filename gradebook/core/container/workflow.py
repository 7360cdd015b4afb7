"""Unlock workflow container for dependency injection."""

from __future__ import annotations

import typing as t

import sqlalchemy.orm
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Factory, Object, Provider, Singleton

from ..config.workflow import WorkflowSettings
from ..provider import TimestampProvider

if t.TYPE_CHECKING:
    from gradebook.unlock.policy import LockPolicy
    from gradebook.unlock.workflow import UnlockWorkflow


# the unlock package imports storage, which imports this package; defer
# those imports until the providers are called


def provide_lock_policy(config: WorkflowSettings) -> LockPolicy:
    from gradebook.unlock.policy import LockPolicy

    return LockPolicy(
        grace_business_days=config.grace_business_days,
        bypass_role=config.bypass_role,
        tz=config.timezone,
    )


def provide_unlock_workflow(
    session: sqlalchemy.orm.Session,
    config: WorkflowSettings,
    policy: LockPolicy,
    utcnow: TimestampProvider,
) -> UnlockWorkflow:
    """Build a workflow over `session`, which the caller supplies and closes."""
    from gradebook.unlock.sql import SQLEvaluationStore, SQLNotificationChannel, SQLUnlockRequestLedger
    from gradebook.unlock.workflow import UnlockWorkflow

    return UnlockWorkflow(
        evaluations=SQLEvaluationStore(session),
        notifications=SQLNotificationChannel(session),
        requests=SQLUnlockRequestLedger(session, utcnow),
        policy=policy,
        edit_link_template=config.edit_link_template,
        consume_override_on_owner_edit=config.consume_override_on_owner_edit,
        utcnow=utcnow,
    )


class WorkflowContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    utcnow: Provider[TimestampProvider] = Object()

    settings: Provider[WorkflowSettings] = Singleton(WorkflowSettings, config)
    policy: Provider[LockPolicy] = Singleton(provide_lock_policy, config=settings)
    unlock: Provider[UnlockWorkflow] = Factory(provide_unlock_workflow, config=settings, policy=policy, utcnow=utcnow)
