__all__ = [
    "AuthSettings",
    "GradebookWebSettings",
    "LoggingSettings",
    "NotificationSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "WebSettings",
    "WorkflowSettings",
]


from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import StorageSettings
from .web import AuthSettings, GradebookWebSettings, WebSettings
from .workflow import NotificationSettings, WorkflowSettings
