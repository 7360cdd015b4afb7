import os
import typing as t

import uvicorn

import gradebook.lib.cli as click
from gradebook.core import BootConfiguration, di
from gradebook.core.config import LoggingSettings, WebSettings
from gradebook.web.gradebook.main import BootVariable


class ServeConfig(t.TypedDict):
    host: str
    port: int


AppSpec = "gradebook.web.gradebook.main:create_app"


def _serve_config(web_cf: WebSettings) -> ServeConfig:
    return {"host": str(web_cf.gradebook.backend.host), "port": web_cf.gradebook.backend.port}


@click.group()
def web(): ...


@web.command(name="serve")
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
@di.inject
def serve(
    workers: int,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the gradebook API backend."""
    os.environ[BootVariable] = boot_cf.model_dump_json()
    uvicorn.run(AppSpec, factory=True, workers=workers, log_config=logging_cf.model_dump(), **_serve_config(web_cf))


@web.command(name="develop")
@di.inject
def develop(
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: WebSettings = di.Provide["config.web", di.as_(WebSettings)],  # noqa: B008
):
    """Start the gradebook API backend with live-reload."""
    os.environ[BootVariable] = boot_cf.model_dump_json()
    uvicorn.run(AppSpec, factory=True, reload=True, log_config=logging_cf.model_dump(), **_serve_config(web_cf))
