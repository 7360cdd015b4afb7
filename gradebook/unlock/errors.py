"""Errors raised by the unlock workflow."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from gradebook.model import Evaluation


class WorkflowError(Exception):
    pass


class NotPermittedError(WorkflowError):
    """The actor's role does not allow the operation. Raised before any collaborator call."""


class EvaluationNotFoundError(WorkflowError, LookupError):
    pass


class EvaluationLockedError(WorkflowError):
    """The evaluation is past its grace window and holds no override."""


class InvalidTransitionError(WorkflowError):
    """The operation does not apply to the evaluation's current state."""


class InvalidDescriptionError(WorkflowError, ValueError):
    """Submitted description text carries a reserved marker."""


class PartialUpdateError(WorkflowError):
    """The evaluation update was persisted but a follow-up step failed."""

    step = "follow-up"

    def __init__(self, evaluation: Evaluation, cause: BaseException):
        super().__init__(f"evaluation {evaluation.evaluation_id} updated, {self.step} failed: {cause}")
        self.evaluation = evaluation
        self.cause = cause


class RequestResolutionError(PartialUpdateError):
    step = "unlock request resolution"


class NotificationDeliveryError(PartialUpdateError):
    step = "notification"
