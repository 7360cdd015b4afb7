"""Translate workflow errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from gradebook.unlock.errors import EvaluationLockedError, EvaluationNotFoundError, InvalidDescriptionError, \
    InvalidTransitionError, NotificationDeliveryError, NotPermittedError, PartialUpdateError, \
    RequestResolutionError, WorkflowError

logger = logging.getLogger(__name__)

StatusCodes: dict[type[WorkflowError], int] = {
    NotPermittedError: status.HTTP_403_FORBIDDEN,
    EvaluationNotFoundError: status.HTTP_404_NOT_FOUND,
    EvaluationLockedError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    InvalidDescriptionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotificationDeliveryError: status.HTTP_502_BAD_GATEWAY,
    RequestResolutionError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _status_code(exc: WorkflowError) -> int | None:
    for cls, code in StatusCodes.items():
        if isinstance(exc, cls):
            return code
    return None


async def workflow_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, WorkflowError)
    code = _status_code(exc)
    if code is None:
        logger.error("unmapped workflow error", extra={"path": request.url.path}, exc_info=exc)
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content={"detail": str(exc)})


async def partial_update_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """The evaluation was updated; only a follow-up step is missing."""
    assert isinstance(exc, PartialUpdateError)
    return JSONResponse(
        status_code=_status_code(exc) or status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": str(exc),
            "evaluation_updated": True,
            "evaluation_id": str(exc.evaluation.evaluation_id),
        },
    )


def install(app: FastAPI) -> None:
    app.add_exception_handler(PartialUpdateError, partial_update_error_handler)
    app.add_exception_handler(WorkflowError, workflow_error_handler)
