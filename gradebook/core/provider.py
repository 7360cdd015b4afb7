import datetime
import inspect
import logging.config
import typing as t

TimestampProvider = t.Callable[..., datetime.datetime]

TRACE = 5


class TraceLogger(logging.Logger):
    """Logger with a `trace` level below DEBUG, used for SQL and DI chatter."""

    def trace(self, message: str, *args: t.Any, **kwargs: t.Any):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)


class LoggingProvider(object):
    Function: t.Final[t.Literal["fn"]] = "fn"
    Module: t.Final[t.Literal["mod"]] = "mod"

    def __init__(self, config: dict[str, t.Any], debug: bool):
        self.install_trace_level()
        logging.config.dictConfig(config)
        if debug:
            self.capture_warnings(True)

    @staticmethod
    def install_trace_level():
        logging.setLoggerClass(TraceLogger)
        logging.addLevelName(TRACE, "TRACE")

    @classmethod
    def get_logger(cls, scope: t.Literal["mod", "fn"] = "mod", name: str | None = None, n_frames: int = 1) -> TraceLogger:
        """Logger named after the calling module, or the calling function when scope is "fn"."""
        if not name:
            frame = inspect.stack()[n_frames]
            name = frame.frame.f_globals["__name__"]
            if scope == cls.Function:
                name = f"{name}.{frame.function}"
        return t.cast(TraceLogger, logging.getLogger(name))

    @staticmethod
    def capture_warnings(capture: bool):
        logging.captureWarnings(capture)
