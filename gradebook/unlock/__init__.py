"""Edit locking of evaluations and the unlock request workflow."""

import importlib
import sys
import types
import typing as t

__all__ = [
    "calendar",
    "codec",
    "errors",
    "gateway",
    "policy",
    "protocol",
    "sql",
    "workflow",
]

if t.TYPE_CHECKING:
    from . import calendar, codec, errors, gateway, policy, protocol, sql, workflow


def __getattr__(name: str) -> types.ModuleType:
    if name in __all__:
        module = importlib.import_module(f"{__name__}.{name}")
        setattr(sys.modules[__name__], name, module)
        return module
    raise AttributeError(f"module {__name__} has no attribute {name}")
