"""FastAPI dependency providers for the gradebook web application."""

from __future__ import annotations

import typing as t

from fastapi import Depends
from sqlalchemy.orm import Session

from gradebook.core import di
from gradebook.core.config import NotificationSettings
from gradebook.unlock.workflow import UnlockWorkflow

SessionFactory = t.Callable[[], Session]
UnlockWorkflowFactory = t.Callable[..., UnlockWorkflow]


@di.inject
def get_session_factory(
    factory: SessionFactory = Depends(di.Provider["storage.persistent.session"]),
) -> SessionFactory:
    return factory


def get_session(factory: SessionFactory = Depends(get_session_factory)) -> t.Iterator[Session]:
    """A database session that is closed once the request completes."""
    session = factory()
    try:
        yield session
    finally:
        session.close()


@di.inject
def get_unlock_workflow_factory(
    factory: UnlockWorkflowFactory = Depends(di.Provider["workflow.unlock"]),
) -> UnlockWorkflowFactory:
    return factory


def get_unlock_workflow(
    session: Session = Depends(get_session),
    factory: UnlockWorkflowFactory = Depends(get_unlock_workflow_factory),
) -> UnlockWorkflow:
    """Unlock workflow bound to the request's database session."""
    return factory(session=session)


@di.inject
def get_notification_settings(
    config: NotificationSettings = Depends(di.Provide["config.notification", di.as_(NotificationSettings)]),
) -> NotificationSettings:
    return config
