__all__ = [
    "BootConfiguration",
    "GradebookContainer",
]

from .gradebook import BootConfiguration, GradebookContainer
