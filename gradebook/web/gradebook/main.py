"""Main entry point for the gradebook web application."""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import gradebook
from gradebook.core import BootConfiguration, di, GradebookContainer
from gradebook.core.config.web import GradebookWebSettings
from gradebook.lib.json import FastAPIJSONResponse
from gradebook.model import DeploymentEnvironment

from . import errors
from .route import router

BootVariable = "__Gradebook_BOOT"


@di.inject
def _create_app(
    config: GradebookWebSettings = di.Provide["config.web.gradebook", di.as_(GradebookWebSettings)],
    env: DeploymentEnvironment = di.Provide["env"],
) -> FastAPI:
    app = FastAPI(
        title="Gradebook",
        description="Evaluation edit locks and unlock requests",
        version=gradebook.__version__,
        default_response_class=FastAPIJSONResponse,
    )

    if env is DeploymentEnvironment.Local and config.frontend is not None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                f"http://{config.frontend.host}:{config.frontend.port}",
                f"http://localhost:{config.frontend.port}",
            ],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    errors.install(app)
    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv(BootVariable)
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = GradebookContainer()
        GradebookContainer.boot(ct, **dict(boot_cf))
        ct.wire(
            modules=[
                "gradebook.web.gradebook.main",
                "gradebook.web.gradebook.dependencies",
                "gradebook.web.gradebook.route.evaluation",
                "gradebook.web.gradebook.route.notification",
                "gradebook.auth.middleware",
            ]
        )
        return _create_app(config=GradebookWebSettings(**ct.config.web.gradebook()), env=boot_cf.env)
    return _create_app()
