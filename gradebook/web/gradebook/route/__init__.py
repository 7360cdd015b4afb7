"""Route aggregation for the gradebook web application."""

from fastapi import APIRouter

from . import evaluation, notification

router = APIRouter()
router.include_router(evaluation.router)
router.include_router(notification.router)
